"""Configuration resolver: caller options + preset -> ``EffectiveConfig``.

Precedence for every option is explicit argument > preset > built-in default.
All naming checks happen here, before any environment source is touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, NoReturn

import structlog

from ._context import ContextDetector, ContextOption, as_detector
from ._presets import (
    EnvSourceKind,
    FrameworkOption,
    WorkspaceConfig,
    parse_contexts,
    resolve_preset,
)
from ._schema import FieldSpecs, duplicate_fields
from ._sources import EnvSources
from ._transforms import Transform
from ._types import (
    ALL_CONTEXTS,
    AccessDeniedError,
    ConfigurationError,
    RuntimeContext,
    SchemaValidationError,
)

logger = structlog.get_logger(__name__)

ValidationErrorHandler = Callable[[SchemaValidationError], NoReturn]
InvalidAccessHandler = Callable[[str, RuntimeContext], NoReturn]


# ---------------------------------------------------------------------------
# Default handlers
# ---------------------------------------------------------------------------


def default_validation_error_handler(error: SchemaValidationError) -> NoReturn:
    """Log the per-field messages, then raise."""
    logger.error("env_validation_failed", field_errors=error.field_errors)
    raise error


def default_invalid_access_handler(variable: str, context: RuntimeContext) -> NoReturn:
    logger.error("env_invalid_access", variable=variable, context=context.value)
    raise AccessDeniedError(variable, context)


# ---------------------------------------------------------------------------
# EffectiveConfig
# ---------------------------------------------------------------------------


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class EffectiveConfig:
    """Fully resolved options for one validator's lifetime.

    ``raw_env`` is ``None`` when values should be collected from ``sources``.
    Replace it with ``dataclasses.replace``; never mutate in place.
    ``source_kind`` records where the framework conventionally exposes its
    variables. It is reported in logs only; ``collect_env`` merges every
    source in a fixed order whatever the framework.
    """

    server: FieldSpecs = field(default_factory=lambda: _frozen(None))
    client: FieldSpecs = field(default_factory=lambda: _frozen(None))
    shared: FieldSpecs = field(default_factory=lambda: _frozen(None))
    client_prefix: str = ""
    allowed_environments: frozenset[RuntimeContext] = ALL_CONTEXTS
    empty_string_as_undefined: bool = True
    transforms: Mapping[str, Transform] = field(default_factory=lambda: _frozen(None))
    on_validation_error: ValidationErrorHandler = default_validation_error_handler
    on_invalid_access: InvalidAccessHandler = default_invalid_access_handler
    raw_env: Mapping[str, Any] | None = None
    sources: EnvSources | None = None
    workspace: WorkspaceConfig | None = None
    source_kind: EnvSourceKind = EnvSourceKind.CUSTOM
    context_detector: ContextDetector = field(default_factory=lambda: as_detector(None))
    skip_validation: bool = False
    framework: str | None = None

    @property
    def declared_fields(self) -> list[str]:
        """Every declared name in server, client, shared order."""
        names: list[str] = []
        for specs in (self.server, self.client, self.shared):
            names.extend(name for name in specs if name not in names)
        return names


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_client_prefix(
    client: FieldSpecs, prefix: str, framework: str | None = None
) -> None:
    """Fail unless every client field carries the effective prefix."""
    if not client:
        return

    if not prefix:
        raise ConfigurationError(
            "Client variables require a prefix. Set client_prefix or use a framework."
        )

    for name in client:
        if not name.startswith(prefix):
            raise ConfigurationError(
                f"Client variable '{name}' must be prefixed with '{prefix}' "
                f"({framework or 'custom'} framework)"
            )


def _check_duplicates(server: FieldSpecs, client: FieldSpecs, shared: FieldSpecs) -> None:
    duplicates = duplicate_fields(server, client, shared)
    if duplicates:
        name, tiers = duplicates[0]
        tier_names = ", ".join(t.value for t in tiers)
        raise ConfigurationError(
            f"Variable '{name}' is declared in more than one tier ({tier_names})."
        )


def _check_transforms(transforms: Mapping[str, Transform], declared: list[str]) -> None:
    for name, transform in transforms.items():
        if name not in declared:
            raise ConfigurationError(f"Transform registered for undeclared variable '{name}'.")
        if not callable(transform):
            raise ConfigurationError(f"Transform for '{name}' is not callable.")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_config(
    *,
    server: FieldSpecs | None = None,
    client: FieldSpecs | None = None,
    shared: FieldSpecs | None = None,
    client_prefix: str | None = None,
    framework: FrameworkOption | None = None,
    runtime_env: Mapping[str, Any] | None = None,
    allowed_environments: Iterable[RuntimeContext | str] | None = None,
    empty_string_as_undefined: bool = True,
    on_validation_error: ValidationErrorHandler | None = None,
    on_invalid_access: InvalidAccessHandler | None = None,
    transforms: Mapping[str, Transform] | None = None,
    sources: EnvSources | None = None,
    runtime_context: ContextOption | None = None,
    skip_validation: bool = False,
) -> EffectiveConfig:
    """Merge caller options with the resolved preset.

    Raises ``ConfigurationError`` for unknown presets or runtime contexts,
    client fields missing the effective prefix, variables declared in
    several tiers, and transforms for undeclared variables.
    """
    preset = resolve_preset(framework)
    framework_name = framework if isinstance(framework, str) else getattr(framework, "name", None)

    if client_prefix is not None:
        effective_prefix = client_prefix
    elif preset is not None:
        effective_prefix = preset.client_prefix
    else:
        effective_prefix = ""

    server = server or {}
    client = client or {}
    shared = shared or {}

    check_client_prefix(client, effective_prefix, framework_name)
    _check_duplicates(server, client, shared)

    declared = [*server, *client, *shared]
    _check_transforms(transforms or {}, declared)

    if allowed_environments is not None:
        allowed = parse_contexts(allowed_environments)
    elif preset is not None:
        allowed = preset.allowed_environments
    else:
        allowed = ALL_CONTEXTS

    return EffectiveConfig(
        server=_frozen(server),
        client=_frozen(client),
        shared=_frozen(shared),
        client_prefix=effective_prefix,
        allowed_environments=allowed,
        empty_string_as_undefined=empty_string_as_undefined,
        transforms=_frozen(transforms),
        on_validation_error=on_validation_error or default_validation_error_handler,
        on_invalid_access=on_invalid_access or default_invalid_access_handler,
        raw_env=_frozen(runtime_env) if runtime_env is not None else None,
        sources=sources,
        workspace=preset.workspace if preset is not None else None,
        source_kind=preset.source_kind if preset is not None else EnvSourceKind.CUSTOM,
        context_detector=as_detector(runtime_context),
        skip_validation=skip_validation,
        framework=framework_name,
    )
