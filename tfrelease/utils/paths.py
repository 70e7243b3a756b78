# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for tfrelease.

All configured paths are relative to the workspace root, which is the
provider checkout the tool runs from. Anything that gets deleted must stay
inside that root.
"""

from pathlib import Path


def resolve_workspace_root() -> Path:
    """The provider checkout: the current working directory, resolved."""
    return Path.cwd().resolve()


def resolve_in_workspace(workspace_root: Path, relative: str) -> Path:
    """Join a configured path onto the workspace root (absolute paths pass through)."""
    path = Path(relative)
    if path.is_absolute():
        return path
    return workspace_root / path


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_path_within_project(target: Path, project_root: Path) -> Path:
    """
    Make sure a path doesn't escape the workspace directory.

    Both paths are resolved first, so `../../somewhere` tricks get caught.

    Returns:
        The resolved absolute path if it's safe.

    Raises:
        ValueError: If the path escapes the workspace root.
    """
    resolved_target = target.resolve()
    resolved_root = project_root.resolve()

    if not resolved_target.is_relative_to(resolved_root):
        raise ValueError(
            f"Path '{target}' resolves to '{resolved_target}' which is outside "
            f"the workspace root '{resolved_root}'. This is not allowed."
        )

    return resolved_target
