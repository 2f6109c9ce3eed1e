"""Foundation types for the env module.

Provides the runtime/tier enums, the ``UNDEFINED`` sentinel, the exception
taxonomy, and the ``Secret`` wrapper type.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, get_args

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RuntimeContext(str, Enum):
    """Category of the environment the current process is executing in."""

    SERVER = "node"
    EDGE = "edge"
    BROWSER = "browser"
    ISOLATE = "deno"

    @classmethod
    def _missing_(cls, value: object) -> RuntimeContext | None:
        # Member names ("server", "isolate") are accepted as aliases.
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None

    @property
    def is_trusted(self) -> bool:
        """Only browser-like contexts are denied server-tier reads."""
        return self is not RuntimeContext.BROWSER


ALL_CONTEXTS: frozenset[RuntimeContext] = frozenset(RuntimeContext)


class VisibilityTier(str, Enum):
    """Which partial schema declared a field."""

    SERVER = "server"
    CLIENT = "client"
    SHARED = "shared"


# ---------------------------------------------------------------------------
# Sentinel
# ---------------------------------------------------------------------------


class _Undefined:
    """Sentinel for absent env values (distinct from ``None``)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


# ---------------------------------------------------------------------------
# Error report entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldError:
    """One entry of a validation error report."""

    path: tuple[str, ...]
    message: str

    @property
    def field(self) -> str:
        return self.path[0] if self.path else ""


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EnvGateError(Exception):
    """Base exception for env validation and access errors."""


class ConfigurationError(EnvGateError):
    """Raised at construction time for malformed validator options."""


class EnvironmentPolicyError(EnvGateError):
    """Raised when the current runtime context is not in the allowed set."""

    def __init__(self, context: RuntimeContext, allowed: frozenset[RuntimeContext]) -> None:
        self.context = context
        self.allowed = allowed
        names = ", ".join(sorted(c.value for c in allowed)) or "<none>"
        super().__init__(
            f"Runtime context '{context.value}' is not allowed. Allowed contexts: {names}."
        )


class SchemaValidationError(EnvGateError):
    """Raised when one or more declared fields fail validation."""

    def __init__(
        self,
        errors: tuple[FieldError, ...] | list[FieldError] = (),
        message: str = "Environment validation failed",
    ) -> None:
        self.errors: tuple[FieldError, ...] = tuple(errors)
        super().__init__(message)

    @property
    def field_errors(self) -> dict[str, list[str]]:
        """Messages grouped by top-level field name, in report order."""
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped


class AccessDeniedError(EnvGateError):
    """Raised when a server-tier variable is read from an untrusted context."""

    def __init__(self, variable: str, context: RuntimeContext) -> None:
        self.variable = variable
        self.context = context
        super().__init__(
            f"Attempted to access server-side environment variable '{variable}' "
            f"in {context.value} environment"
        )


class CollaboratorError(EnvGateError):
    """Raised by optional collaborators (e.g. ``.env`` loading) on failure."""


# ---------------------------------------------------------------------------
# Secret
# ---------------------------------------------------------------------------


class Secret(Generic[T]):
    """Wraps a value so it is redacted in ``repr`` / ``str`` output.

    Use as a field type (``API_KEY: Secret[str]``) and read the real value via
    ``.secret_value``.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        object.__setattr__(self, "_value", value)

    @property
    def secret_value(self) -> T:
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        return "Secret('***')"

    def __str__(self) -> str:
        return "***"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Secret):
            return bool(self._value == other._value)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        args = get_args(source_type)
        inner_type = args[0] if args else Any
        inner_schema = handler.generate_schema(inner_type)

        def _wrap(value: Any) -> "Secret[Any]":
            return Secret(value)

        def _serialize(value: "Secret[Any]", _info: Any) -> str:
            return "***"

        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.no_info_after_validator_function(_wrap, inner_schema),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(
                _serialize,
                info_arg=True,
            ),
        )
