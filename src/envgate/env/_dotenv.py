"""``.env`` file collaborator backed by python-dotenv."""

from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values

from ._presets import WorkspaceConfig
from ._types import CollaboratorError


def read_env_file(directory: str | Path) -> dict[str, str]:
    """Read ``<directory>/.env``.

    A missing file contributes nothing. Unreadable or undecodable files raise
    ``CollaboratorError``.
    """
    path = Path(directory) / ".env"
    if not path.is_file():
        return {}
    try:
        parsed = dotenv_values(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise CollaboratorError(f"Failed to load .env file from {directory}: {exc}") from exc
    # Keys without a value (``FOO`` on its own line) parse as None.
    return {key: value for key, value in parsed.items() if value is not None}


def workspace_layers(workspace: WorkspaceConfig) -> list[str]:
    """Directories to read, lowest precedence first."""
    layers: list[str] = []
    if workspace.workspace_root and workspace.cascade_env:
        layers.append(workspace.workspace_root)
    if workspace.project_path:
        layers.append(workspace.project_path)
    return layers
