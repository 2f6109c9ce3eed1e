"""Access-controlled read view over validated env values."""

from __future__ import annotations

from typing import Any, Iterator, Mapping

import structlog

from ._resolver import InvalidAccessHandler
from ._schema import FieldSpecs, tier_of
from ._types import AccessDeniedError, RuntimeContext, VisibilityTier

logger = structlog.get_logger(__name__)

# Module-interop markers probed by tooling; never gated.
_META_NAMES = frozenset({"__esModule", "$$typeof"})

_MISSING = object()


def _is_meta(name: str) -> bool:
    return name in _META_NAMES or (name.startswith("__") and name.endswith("__"))


class EnvView:
    """Read gate over one validated value set.

    Every read checks the variable's tier against the runtime context, then
    caches the value. Cached reads skip the check; denied reads are remembered
    so the invalid-access handler fires at most once per variable.
    """

    __slots__ = ("_values", "_server", "_client", "_shared", "_context", "_on_invalid_access",
                 "_cache", "_denied")

    def __init__(
        self,
        values: Mapping[str, Any],
        *,
        server: FieldSpecs,
        client: FieldSpecs,
        shared: FieldSpecs,
        context: RuntimeContext,
        on_invalid_access: InvalidAccessHandler,
    ) -> None:
        self._values = dict(values)
        self._server = server
        self._client = client
        self._shared = shared
        self._context = context
        self._on_invalid_access = on_invalid_access
        self._cache: dict[str, Any] = {}
        self._denied: dict[str, BaseException] = {}

    @property
    def context(self) -> RuntimeContext:
        return self._context

    def tier(self, name: str) -> VisibilityTier | None:
        return tier_of(name, self._server, self._client, self._shared)

    def _check_access(self, name: str) -> None:
        if name in self._denied:
            raise self._denied[name]

        if self.tier(name) is not VisibilityTier.SERVER or self._context.is_trusted:
            return

        try:
            self._on_invalid_access(name, self._context)
        except Exception as exc:
            self._denied[name] = exc
            raise
        # Handler returned instead of raising.
        error = AccessDeniedError(name, self._context)
        self._denied[name] = error
        raise error

    def _read(self, name: str) -> Any:
        if name in self._cache:
            return self._cache[name]

        self._check_access(name)

        value = self._values.get(name, _MISSING)
        if value is not _MISSING:
            self._cache[name] = value
            logger.debug("env_field_read", variable=name, context=self._context.value)
        return value

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value of *name*, or *default* if it is not set."""
        if _is_meta(name):
            return default
        value = self._read(name)
        return default if value is _MISSING else value

    def __getitem__(self, name: str) -> Any:
        if _is_meta(name):
            raise KeyError(name)
        value = self._read(name)
        if value is _MISSING:
            raise KeyError(name)
        return value

    def __getattr__(self, name: str) -> Any:
        if _is_meta(name) or name.startswith("_"):
            raise AttributeError(name)
        value = self._read(name)
        if value is _MISSING:
            raise AttributeError(f"Environment variable '{name}' is not declared or not set")
        return value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        names = ", ".join(self._values)
        return f"EnvView(context={self._context.value!r}, variables=[{names}])"
