# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
GitHub release publishing through the `gh` CLI.

Preconditions, checked in this order:
  1. gh is installed: otherwise warn and skip
  2. gh is authenticated: otherwise warn and skip
  3. at least one zip archive: otherwise error, stage fails
  4. the SHA256SUMS manifest: otherwise error, stage fails

A failed or skipped publish never touches what the earlier stages produced.

An existing release under the same tag is deleted and then recreated with
every asset. Between the delete and the create no release exists under the
tag; anyone fetching it in that window gets a 404.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from tfrelease.logging.logger import get_logger
from tfrelease.release.checksums.integrity import find_archives

_logger: logging.Logger = get_logger(__name__)

PUBLISHED = "published"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class PublishResult:
    """Outcome of the publish stage."""

    status: str
    tag: str
    message: str
    assets: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != FAILED


def _repo_args(repository: str | None) -> list[str]:
    return ["--repo", repository] if repository else []


def gh_available(gh_binary: str) -> bool:
    return shutil.which(gh_binary) is not None


def gh_authenticated(gh_binary: str) -> bool:
    result = subprocess.run([gh_binary, "auth", "status"], capture_output=True, text=True)
    return result.returncode == 0


def release_exists(gh_binary: str, tag: str, repository: str | None = None) -> bool:
    result = subprocess.run(
        [gh_binary, "release", "view", tag, *_repo_args(repository)],
        capture_output=True,
        text=True,
    )
    return result.returncode == 0


def delete_release(gh_binary: str, tag: str, repository: str | None = None) -> bool:
    """Delete a release; a failure is logged and otherwise ignored."""
    result = subprocess.run(
        [gh_binary, "release", "delete", tag, "-y", *_repo_args(repository)],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        _logger.warning(
            "Could not delete existing release",
            extra={"tag": tag, "stderr": result.stderr.strip()},
        )
        return False
    return True


def create_release(
    gh_binary: str,
    tag: str,
    assets: list[Path],
    title: str,
    notes: str,
    repository: str | None = None,
) -> subprocess.CompletedProcess[str]:
    command = [
        gh_binary,
        "release",
        "create",
        tag,
        *[str(a) for a in assets],
        "--title",
        title,
        "--notes",
        notes,
        *_repo_args(repository),
    ]
    return subprocess.run(command, capture_output=True, text=True)


def collect_release_assets(output_dir: Path, manifest_name: str, signature_name: str) -> list[Path]:
    """Archives first, then the manifest and its signature when present."""
    assets = find_archives(output_dir)
    for name in (manifest_name, signature_name):
        path = output_dir / name
        if path.is_file():
            assets.append(path)
    return assets


def publish_release(
    output_dir: Path,
    tag: str,
    manifest_name: str,
    signature_name: str,
    notes: str,
    gh_binary: str = "gh",
    repository: str | None = None,
) -> PublishResult:
    """Replace the GitHub release `tag` with everything in the output directory."""
    _logger.info("Creating GitHub release", extra={"tag": tag})

    if not gh_available(gh_binary):
        message = "GitHub CLI not found, skipping release creation"
        _logger.warning(message, extra={"gh_binary": gh_binary})
        return PublishResult(status=SKIPPED, tag=tag, message=message)

    if not gh_authenticated(gh_binary):
        message = "Not authenticated with GitHub, skipping release creation"
        _logger.warning(message)
        return PublishResult(status=SKIPPED, tag=tag, message=message)

    archives = find_archives(output_dir) if output_dir.is_dir() else []
    if not archives:
        message = "No zip files found"
        _logger.error(message, extra={"output_dir": str(output_dir)})
        return PublishResult(status=FAILED, tag=tag, message=message)

    if not (output_dir / manifest_name).is_file():
        message = f"Missing {manifest_name} file"
        _logger.error(message, extra={"output_dir": str(output_dir)})
        return PublishResult(status=FAILED, tag=tag, message=message)

    assets = collect_release_assets(output_dir, manifest_name, signature_name)
    asset_names = [a.name for a in assets]
    _logger.info(
        "Files to be uploaded",
        extra={"archive_count": len(archives), "assets": asset_names},
    )

    if release_exists(gh_binary, tag, repository):
        _logger.warning("Deleting existing release", extra={"tag": tag})
        delete_release(gh_binary, tag, repository)

    _logger.info("Creating release", extra={"tag": tag, "asset_count": len(assets)})
    result = create_release(gh_binary, tag, assets, title=tag, notes=notes, repository=repository)
    if result.returncode != 0:
        message = "gh release create failed"
        _logger.error(
            message,
            extra={"tag": tag, "exit_code": result.returncode, "stderr": result.stderr.strip()},
        )
        return PublishResult(status=FAILED, tag=tag, message=message, assets=asset_names)

    _logger.info("GitHub release created successfully", extra={"tag": tag})
    return PublishResult(
        status=PUBLISHED,
        tag=tag,
        message="GitHub release created successfully",
        assets=asset_names,
    )
