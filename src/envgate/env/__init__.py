"""Tiered, schema-validated environment variables.

Variables are declared in three tiers (server, client, shared), validated
with Pydantic, and served through a view that refuses server-tier reads from
browser-like runtimes.
"""

from ._context import detect_runtime_context, set_context_detector
from ._presets import (
    FRAMEWORK_PRESETS,
    EnvSourceKind,
    FrameworkOverride,
    FrameworkPreset,
    WorkspaceConfig,
)
from ._resolver import EffectiveConfig, resolve_config
from ._schema import EnvSchema
from ._sources import EnvSources, collect_env, set_sources
from ._testing import override_env, override_runtime_context
from ._transforms import Choices, Csv
from ._types import (
    UNDEFINED,
    AccessDeniedError,
    CollaboratorError,
    ConfigurationError,
    EnvGateError,
    EnvironmentPolicyError,
    FieldError,
    RuntimeContext,
    SchemaValidationError,
    Secret,
    VisibilityTier,
)
from ._validator import EnvValidator, ValidationState, create_env
from ._view import EnvView

__all__ = [
    # Core
    "create_env",
    "EnvValidator",
    "EnvView",
    "ValidationState",
    "resolve_config",
    "EffectiveConfig",
    "EnvSchema",
    # Types
    "RuntimeContext",
    "VisibilityTier",
    "FieldError",
    "Secret",
    "UNDEFINED",
    # Errors
    "EnvGateError",
    "ConfigurationError",
    "EnvironmentPolicyError",
    "SchemaValidationError",
    "AccessDeniedError",
    "CollaboratorError",
    # Presets
    "FRAMEWORK_PRESETS",
    "FrameworkPreset",
    "FrameworkOverride",
    "EnvSourceKind",
    "WorkspaceConfig",
    # Sources / context
    "EnvSources",
    "collect_env",
    "set_sources",
    "detect_runtime_context",
    "set_context_detector",
    # Transforms
    "Csv",
    "Choices",
    # Testing
    "override_env",
    "override_runtime_context",
]
