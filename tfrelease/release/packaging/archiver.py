# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Zip packaging of provider binaries.

Each binary becomes its own archive holding exactly one entry: the binary
under its original name. For Windows the `.exe` suffix stays on the entry
but is dropped from the archive name, which is what the Terraform Registry
expects:

    terraform-provider-azuread_3.7.4_windows_amd64.zip
      └─ terraform-provider-azuread_3.7.4_windows_amd64.exe

Entries are written with a fixed timestamp and mode, so the same binary
always produces a byte-identical archive.

Archiving is destructive: the binary is deleted once its archive is written.
Re-running without rebuilding finds nothing to archive.
"""

import logging
import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path

from tfrelease.logging.logger import get_logger
from tfrelease.release.naming import archive_name_for, is_packageable_artifact
from tfrelease.utils.filesystem import safe_delete, staging_path

_logger: logging.Logger = get_logger(__name__)

# Earliest timestamp the zip format can represent.
ZIP_TIMESTAMP: tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)
ENTRY_MODE: int = 0o755
_UNIX_CREATE_SYSTEM: int = 3
_COPY_BUFFER_SIZE: int = 1024 * 1024


@dataclass(frozen=True)
class ArchiveResult:
    """One archive written by the packager."""

    artifact_name: str
    archive_path: Path
    size_bytes: int


def find_artifacts(output_dir: Path, prefix: str, version: str) -> list[Path]:
    """Raw binaries in the output directory, sorted by name."""
    return [
        path
        for path in sorted(output_dir.iterdir())
        if path.is_file() and is_packageable_artifact(path.name, prefix, version)
    ]


def _entry_info(artifact_path: Path) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(artifact_path.name, date_time=ZIP_TIMESTAMP)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.create_system = _UNIX_CREATE_SYSTEM
    info.external_attr = (stat.S_IFREG | ENTRY_MODE) << 16
    return info


def archive_artifact(artifact_path: Path) -> ArchiveResult:
    """
    Zip a single binary next to itself, then delete the binary.

    The archive is written to a staging name and moved into place, so an
    interrupted run never leaves a truncated zip that the manifest would
    then checksum.
    """
    archive_path = artifact_path.with_name(archive_name_for(artifact_path.name))
    staged = staging_path(archive_path)

    _logger.info(
        "Zipping",
        extra={"artifact": artifact_path.name, "archive": archive_path.name},
    )

    try:
        with zipfile.ZipFile(staged, "w") as zf:
            with open(artifact_path, "rb") as src, zf.open(_entry_info(artifact_path), "w") as dst:
                shutil.copyfileobj(src, dst, _COPY_BUFFER_SIZE)
        staged.replace(archive_path)
    except BaseException:
        safe_delete(staged)
        raise

    safe_delete(artifact_path)

    return ArchiveResult(
        artifact_name=artifact_path.name,
        archive_path=archive_path,
        size_bytes=archive_path.stat().st_size,
    )


def archive_artifacts(output_dir: Path, prefix: str, version: str) -> list[ArchiveResult]:
    """
    Archive every binary in the output directory.

    Raises:
        FileNotFoundError: If output_dir doesn't exist.
    """
    if not output_dir.is_dir():
        raise FileNotFoundError(f"Output directory not found: {output_dir}")

    _logger.info("Creating zip files", extra={"output_dir": str(output_dir)})
    results = [archive_artifact(path) for path in find_artifacts(output_dir, prefix, version)]

    _logger.info(
        "Zip files created",
        extra={"archive_count": len(results), "output_dir": str(output_dir)},
    )
    return results


def list_archive_entries(archive_path: Path) -> list[str]:
    """Names of every entry inside a zip archive."""
    with zipfile.ZipFile(archive_path) as zf:
        return zf.namelist()
