# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Output directory reset and cleanup.

Every release run starts from an empty output directory so the manifest can
never pick up an archive from an earlier run. Because this is an `rm -rf`,
it refuses any path that resolves outside the workspace or onto the
workspace root itself.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from tfrelease.logging.logger import get_logger
from tfrelease.release.exceptions import OutputDirectoryError
from tfrelease.utils.paths import ensure_directory, validate_path_within_project

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class CleanResult:
    """Outcome of removing an output directory."""

    output_dir: str
    existed: bool
    removed_files: int
    freed_bytes: int


def _guard_output_directory(output_dir: Path, workspace_root: Path) -> Path:
    """Resolve the output directory, rejecting anything unsafe to delete."""
    try:
        resolved = validate_path_within_project(output_dir, workspace_root)
    except ValueError as err:
        raise OutputDirectoryError(str(err)) from err

    if resolved == workspace_root.resolve():
        raise OutputDirectoryError(
            f"Refusing to use the workspace root {resolved} as the output directory"
        )
    if resolved.exists() and not resolved.is_dir():
        raise OutputDirectoryError(f"Output path exists and is not a directory: {resolved}")
    return resolved


def _count_dir_contents(path: Path) -> tuple[int, int]:
    """Count files and their total size under a directory."""
    files = 0
    total = 0
    for f in path.rglob("*"):
        if f.is_file():
            files += 1
            try:
                total += f.stat().st_size
            except OSError:
                continue
    return files, total


def clean_output(output_dir: Path, workspace_root: Path) -> CleanResult:
    """
    Remove the output directory and everything in it.

    Raises:
        OutputDirectoryError: If the path is outside the workspace, is the
                              workspace itself, or is not a directory.
    """
    resolved = _guard_output_directory(output_dir, workspace_root)

    if not resolved.exists():
        _logger.debug("Output directory absent", extra={"output_dir": str(resolved)})
        return CleanResult(output_dir=str(resolved), existed=False, removed_files=0, freed_bytes=0)

    removed_files, freed_bytes = _count_dir_contents(resolved)
    shutil.rmtree(resolved)

    _logger.info(
        "Removed output directory",
        extra={
            "output_dir": str(resolved),
            "removed_files": removed_files,
            "freed_mb": f"{freed_bytes / (1024 * 1024):.1f}",
        },
    )
    return CleanResult(
        output_dir=str(resolved),
        existed=True,
        removed_files=removed_files,
        freed_bytes=freed_bytes,
    )


def reset_output_directory(output_dir: Path, workspace_root: Path) -> Path:
    """
    Wipe and recreate the output directory.

    Returns:
        The resolved, now empty, output directory.
    """
    _logger.info("Cleaning previous builds", extra={"output_dir": str(output_dir)})
    clean_output(output_dir, workspace_root)
    resolved = _guard_output_directory(output_dir, workspace_root)
    return ensure_directory(resolved)
