"""Framework presets: named default prefix / source / allowed-context bundles.

Override objects are merged field by field onto the registry entry.
``allowed_environments`` is the one field that is unioned rather than
replaced, so an override can widen a preset's contexts but never narrow them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Union

from ._types import ALL_CONTEXTS, ConfigurationError, RuntimeContext


class EnvSourceKind(str, Enum):
    """Where a framework conventionally exposes its variables."""

    PROCESS = "process.env"
    BUNDLER = "import.meta.env"
    PLATFORM = "Deno.env"
    CUSTOM = "custom"


@dataclass(frozen=True)
class WorkspaceConfig:
    """Monorepo ``.env`` layout (used by the ``nx`` preset).

    Attributes:
        workspace_root: Directory holding the shared workspace ``.env``.
        project_path: Directory holding the project-specific ``.env``.
        cascade_env: Load the workspace root file below the project file.
    """

    workspace_root: str | None = None
    project_path: str | None = None
    cascade_env: bool = True


@dataclass(frozen=True)
class FrameworkPreset:
    client_prefix: str
    source_kind: EnvSourceKind
    allowed_environments: frozenset[RuntimeContext]
    workspace: WorkspaceConfig | None = None


@dataclass(frozen=True)
class FrameworkOverride:
    """Preset name plus per-field overrides.

    ``None`` / empty values mean "keep the preset's value".
    """

    name: str
    client_prefix: str | None = None
    source_kind: EnvSourceKind | None = None
    allowed_environments: Iterable[RuntimeContext] = field(default_factory=tuple)
    workspace: WorkspaceConfig | None = None


FrameworkOption = Union[str, FrameworkOverride]

_S = RuntimeContext.SERVER
_E = RuntimeContext.EDGE
_B = RuntimeContext.BROWSER

FRAMEWORK_PRESETS: Mapping[str, FrameworkPreset] = {
    "next": FrameworkPreset("NEXT_PUBLIC_", EnvSourceKind.PROCESS, frozenset({_S, _E})),
    "remix": FrameworkPreset("PUBLIC_", EnvSourceKind.PROCESS, frozenset({_S, _B})),
    "react": FrameworkPreset("REACT_APP_", EnvSourceKind.PROCESS, frozenset({_B})),
    "vue": FrameworkPreset("VITE_", EnvSourceKind.BUNDLER, frozenset({_B})),
    "solid": FrameworkPreset("VITE_", EnvSourceKind.BUNDLER, frozenset({_B})),
    "nx": FrameworkPreset(
        "NX_PUBLIC_",
        EnvSourceKind.PROCESS,
        frozenset({_S, _B}),
        workspace=WorkspaceConfig(),
    ),
    "nuxt": FrameworkPreset("NUXT_PUBLIC_", EnvSourceKind.PROCESS, frozenset({_S, _B})),
    "custom": FrameworkPreset("", EnvSourceKind.CUSTOM, ALL_CONTEXTS),
}


def parse_contexts(values: Iterable[RuntimeContext | str]) -> frozenset[RuntimeContext]:
    """Coerce an ``allowed_environments`` option into a set of contexts.

    Accepts members, their values ("node") or their names ("server").
    """
    if isinstance(values, str):
        raise ConfigurationError(
            f"allowed_environments must be a collection of contexts, not the string {values!r}"
        )
    contexts = set()
    for value in values:
        try:
            contexts.add(RuntimeContext(value))
        except ValueError:
            valid = ", ".join(c.value for c in RuntimeContext)
            raise ConfigurationError(
                f"Unknown runtime context {value!r}. Valid contexts: {valid}."
            ) from None
    return frozenset(contexts)


def lookup(name: str) -> FrameworkPreset:
    """Return the registry entry for *name* or raise ``ConfigurationError``."""
    try:
        return FRAMEWORK_PRESETS[name]
    except KeyError:
        known = ", ".join(sorted(FRAMEWORK_PRESETS))
        raise ConfigurationError(
            f"Unknown framework preset '{name}'. Known presets: {known}."
        ) from None


def resolve_preset(option: FrameworkOption | None) -> FrameworkPreset | None:
    """Turn a ``framework=`` option into a concrete preset (or ``None``)."""
    if option is None:
        return None

    if isinstance(option, str):
        return lookup(option)

    if not isinstance(option, FrameworkOverride):
        raise ConfigurationError(
            f"framework must be a preset name or FrameworkOverride, got {type(option).__name__}"
        )

    base = lookup(option.name)

    client_prefix = base.client_prefix
    if option.client_prefix is not None:
        client_prefix = option.client_prefix

    source_kind = base.source_kind
    if option.source_kind is not None:
        source_kind = EnvSourceKind(option.source_kind)

    workspace = base.workspace
    if option.workspace is not None:
        workspace = option.workspace

    allowed = base.allowed_environments | parse_contexts(option.allowed_environments)

    return FrameworkPreset(
        client_prefix=client_prefix,
        source_kind=source_kind,
        allowed_environments=allowed,
        workspace=workspace,
    )
