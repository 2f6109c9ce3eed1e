"""Source collector: merges raw values from every ambient env source.

Precedence, lowest first (later sources overwrite earlier ones on collision):

1. ``.env`` files from a ``WorkspaceConfig`` (workspace root, then project)
2. Process environment
3. Bundler-injected environment
4. Platform-specific accessor
5. Global fallback
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import structlog

from ._dotenv import read_env_file, workspace_layers
from ._presets import WorkspaceConfig
from ._types import CollaboratorError

logger = structlog.get_logger(__name__)

EnvFileLoader = Callable[[str], Mapping[str, Any]]


@dataclass(frozen=True)
class EnvSources:
    """The ambient sources a validator reads from when no ``runtime_env`` is given.

    Attributes:
        process: Process-style environment (``os.environ`` in production).
        bundler: Environment object injected at build time.
        platform: Zero-argument accessor listing a platform's variables.
        fallback: Global fallback environment object.
    """

    process: Mapping[str, Any] | None = None
    bundler: Mapping[str, Any] | None = None
    platform: Callable[[], Mapping[str, Any]] | None = None
    fallback: Mapping[str, Any] | None = None


def default_sources() -> EnvSources:
    return EnvSources(process=os.environ)


# ---------------------------------------------------------------------------
# Module-level sources management
# ---------------------------------------------------------------------------

_active_sources: EnvSources | None = None


def set_sources(sources: EnvSources | None) -> None:
    """Set the module-level sources (``None`` restores the process default)."""
    global _active_sources
    _active_sources = sources


def get_sources() -> EnvSources | None:
    """Return the module-level sources override (may be ``None``)."""
    return _active_sources


def _auto_sources() -> EnvSources:
    return _active_sources or default_sources()


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def _load_files(workspace: WorkspaceConfig, loader: EnvFileLoader) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for directory in workspace_layers(workspace):
        try:
            merged.update(loader(directory))
        except CollaboratorError as exc:
            logger.warning("env_file_load_failed", directory=directory, error=str(exc))
    return merged


def collect_env(
    sources: EnvSources | None = None,
    *,
    workspace: WorkspaceConfig | None = None,
    loader: EnvFileLoader = read_env_file,
) -> dict[str, Any]:
    """Return a fresh merged snapshot of every configured source."""
    active = sources or _auto_sources()
    env: dict[str, Any] = {}

    if workspace is not None:
        env.update(_load_files(workspace, loader))

    if active.process is not None:
        env.update(active.process)

    if active.bundler is not None:
        env.update(active.bundler)

    if active.platform is not None:
        env.update(active.platform())

    if active.fallback is not None:
        env.update(active.fallback)

    return env
