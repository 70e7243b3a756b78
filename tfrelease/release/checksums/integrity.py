# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
SHA256SUMS manifest generation and verification.

Manifest format (<prefix>_<version>_SHA256SUMS):
    <sha256hex>  <archive filename>
    <sha256hex>  <archive filename>

One line per zip archive, two spaces between hash and name (GNU coreutils
sha256sum format), sorted by filename. The manifest is rewritten from
scratch every time, never appended to, so its line count always equals the
number of archives present when it was generated.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from tfrelease.logging.logger import get_logger
from tfrelease.release.naming import ARCHIVE_SUFFIX
from tfrelease.utils.filesystem import atomic_write
from tfrelease.utils.hashing import compute_sha256, verify_checksum

_logger: logging.Logger = get_logger(__name__)

SHA256_HEX_LENGTH = 64


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a checksum verification run."""

    is_valid: bool
    checked_count: int
    mismatches: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    unlisted_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def find_archives(output_dir: Path) -> list[Path]:
    """Every zip archive in the output directory, sorted by name."""
    return [
        path
        for path in sorted(output_dir.iterdir())
        if path.is_file() and path.name.endswith(ARCHIVE_SUFFIX)
    ]


def generate_checksums(output_dir: Path) -> dict[str, str]:
    """
    Compute SHA256 checksums for every archive in the output directory.

    Returns:
        Dict of {archive filename: sha256_hex}, in filename order.

    Raises:
        FileNotFoundError: If output_dir doesn't exist.
    """
    if not output_dir.is_dir():
        raise FileNotFoundError(f"Output directory not found: {output_dir}")

    checksums: dict[str, str] = {}
    for archive_path in find_archives(output_dir):
        digest = compute_sha256(archive_path)
        checksums[archive_path.name] = digest
        _logger.debug(
            "Computed checksum",
            extra={"file": archive_path.name, "sha256": digest[:16] + "..."},
        )

    _logger.info(
        "Checksums generated",
        extra={"file_count": len(checksums), "output_dir": str(output_dir)},
    )
    return checksums


def format_checksum_lines(checksums: dict[str, str]) -> str:
    lines = [f"{checksums[name]}  {name}" for name in sorted(checksums)]
    return "".join(f"{line}\n" for line in lines)


def write_checksum_file(manifest_path: Path, checksums: dict[str, str]) -> Path:
    """
    Write the manifest, replacing whatever was there before.

    An empty checksum dict produces an empty manifest file.
    """
    atomic_write(manifest_path, format_checksum_lines(checksums))

    _logger.info(
        "Checksum manifest written",
        extra={"path": str(manifest_path), "entries": len(checksums)},
    )
    return manifest_path


def parse_checksum_file(manifest_path: Path) -> dict[str, str]:
    """
    Parse a manifest into a dict of {filename: sha256_hex}.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If a line is malformed or a file is listed twice.
    """
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Checksum file not found: {manifest_path}")

    checksums: dict[str, str] = {}
    content = manifest_path.read_text(encoding="utf-8")

    for line_num, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        parts = line.split("  ", maxsplit=1)
        if len(parts) != 2:
            raise ValueError(
                f"Invalid checksum format at line {line_num}: expected "
                f"'<sha256>  <filename>', got: {line!r}"
            )
        sha256_hex, filename = parts
        if len(sha256_hex) != SHA256_HEX_LENGTH:
            raise ValueError(
                f"Invalid SHA256 hash length at line {line_num}: "
                f"expected {SHA256_HEX_LENGTH} chars, got {len(sha256_hex)}"
            )
        if filename in checksums:
            raise ValueError(f"Duplicate entry for {filename!r} at line {line_num}")
        checksums[filename] = sha256_hex.lower()

    return checksums


def verify_checksums(output_dir: Path, manifest_name: str) -> VerificationResult:
    """
    Verify every archive against the manifest, and the manifest against the archives.

    Reports ALL mismatches, missing files, and archives the manifest does not
    list, not just the first problem.
    """
    manifest_path = output_dir / manifest_name
    if not manifest_path.is_file():
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"{manifest_name} not found in {output_dir}"],
        )

    try:
        expected = parse_checksum_file(manifest_path)
    except ValueError as err:
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"Failed to parse {manifest_name}: {err}"],
        )

    mismatches: list[str] = []
    missing_files: list[str] = []
    checked = 0

    for filename, expected_hash in sorted(expected.items()):
        file_path = output_dir / filename
        if not file_path.is_file():
            missing_files.append(filename)
            _logger.error("File missing during verification", extra={"file": filename})
            continue

        checked += 1
        if not verify_checksum(file_path, expected_hash):
            mismatches.append(filename)
            _logger.error(
                "Checksum mismatch",
                extra={
                    "file": filename,
                    "expected": expected_hash[:16] + "...",
                    "actual": compute_sha256(file_path)[:16] + "...",
                },
            )

    unlisted = [p.name for p in find_archives(output_dir) if p.name not in expected]
    for filename in unlisted:
        _logger.error("Archive not listed in manifest", extra={"file": filename})

    is_valid = not mismatches and not missing_files and not unlisted

    if is_valid:
        _logger.info("All checksums verified", extra={"checked_count": checked})
    else:
        _logger.error(
            "Checksum verification failed",
            extra={
                "mismatches": len(mismatches),
                "missing": len(missing_files),
                "unlisted": len(unlisted),
            },
        )

    return VerificationResult(
        is_valid=is_valid,
        checked_count=checked,
        mismatches=mismatches,
        missing_files=missing_files,
        unlisted_files=unlisted,
    )
