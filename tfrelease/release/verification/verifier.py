# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release verification: checks an output directory is ready to publish.

Checks performed (in order):
1. Directory exists
2. Manifest present
3. Every expected target has its archive
4. Every archive holds exactly one entry, named like the binary it wraps
   (Windows entries keep their .exe)
5. Manifest and archives agree (no mismatches, nothing missing, nothing unlisted)
6. Signature file present (an empty placeholder counts, but is reported)
"""

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from tfrelease.config.schema import ReleaseConfig
from tfrelease.logging.logger import get_logger
from tfrelease.release.checksums.integrity import find_archives, verify_checksums
from tfrelease.release.naming import (
    archive_name_for,
    artifact_name,
    manifest_name,
    signature_name,
)
from tfrelease.release.targets import expected_targets, resolve_build_plan

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class VerificationReport:
    """Complete outcome of a release verification."""

    is_valid: bool
    output_dir: str
    checks_passed: list[str] = field(default_factory=list)
    checks_failed: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    signed: bool = False


def _check_expected_archives(output_dir: Path, config: ReleaseConfig) -> tuple[bool, list[str]]:
    prefix, version = config.provider.prefix, config.provider.version
    plan = resolve_build_plan(config.build.parsed_targets(), config.build.parsed_compat_targets())
    errors = [
        f"Missing archive for {target}: {archive_name_for(artifact_name(prefix, version, target))}"
        for target in expected_targets(plan)
        if not (output_dir / archive_name_for(artifact_name(prefix, version, target))).is_file()
    ]
    return not errors, errors


def _expected_entry_names(config: ReleaseConfig) -> dict[str, str]:
    """Map archive name → binary name it must contain."""
    prefix, version = config.provider.prefix, config.provider.version
    targets = config.build.parsed_targets() + config.build.parsed_compat_targets()
    entries: dict[str, str] = {}
    for target in targets:
        binary = artifact_name(prefix, version, target)
        entries[archive_name_for(binary)] = binary
    return entries


def _check_archive_contents(output_dir: Path, config: ReleaseConfig) -> tuple[bool, list[str]]:
    expected = _expected_entry_names(config)
    errors: list[str] = []
    for archive_path in find_archives(output_dir):
        try:
            with zipfile.ZipFile(archive_path) as zf:
                names = zf.namelist()
                corrupt = zf.testzip()
        except zipfile.BadZipFile as err:
            errors.append(f"{archive_path.name} is not a valid zip: {err}")
            continue
        if len(names) != 1:
            errors.append(f"{archive_path.name} holds {len(names)} entries, expected 1")
            continue
        if corrupt is not None:
            errors.append(f"{archive_path.name}: corrupt entry {corrupt}")
        wanted = expected.get(archive_path.name)
        if wanted is not None and names[0] != wanted:
            errors.append(f"{archive_path.name} contains {names[0]!r}, expected {wanted!r}")
    return not errors, errors


def verify_release_directory(output_dir: Path, config: ReleaseConfig) -> VerificationReport:
    """Run the full verification suite on an output directory."""
    if not output_dir.is_dir():
        return VerificationReport(
            is_valid=False,
            output_dir=str(output_dir),
            checks_failed=["directory_exists"],
            errors=[f"Output directory not found: {output_dir}"],
        )

    prefix, version = config.provider.prefix, config.provider.version
    manifest = manifest_name(prefix, version)
    signature = output_dir / signature_name(prefix, version)

    passed: list[str] = []
    failed: list[str] = []
    all_errors: list[str] = []

    def record(name: str, ok: bool, errors: list[str]) -> None:
        (passed if ok else failed).append(name)
        all_errors.extend(errors)

    manifest_ok = (output_dir / manifest).is_file()
    record("manifest_present", manifest_ok, [] if manifest_ok else [f"{manifest} not found"])

    record("expected_archives", *_check_expected_archives(output_dir, config))
    record("archive_contents", *_check_archive_contents(output_dir, config))

    checksum_result = verify_checksums(output_dir, manifest)
    checksum_errors = (
        [f"Checksum mismatch: {f}" for f in checksum_result.mismatches]
        + [f"Listed in manifest but missing: {f}" for f in checksum_result.missing_files]
        + [f"Archive not listed in manifest: {f}" for f in checksum_result.unlisted_files]
        + checksum_result.errors
    )
    record("checksums_valid", checksum_result.is_valid, checksum_errors)

    signature_ok = signature.is_file()
    record(
        "signature_present",
        signature_ok,
        [] if signature_ok else [f"{signature.name} not found"],
    )
    signed = signature_ok and signature.stat().st_size > 0
    if signature_ok and not signed:
        _logger.warning("Signature file is an empty placeholder", extra={"signature": signature.name})

    is_valid = not failed

    if is_valid:
        _logger.info(
            "Release verification passed",
            extra={"output_dir": str(output_dir), "checks_passed": len(passed), "signed": signed},
        )
    else:
        _logger.error(
            "Release verification FAILED",
            extra={
                "output_dir": str(output_dir),
                "checks_passed": len(passed),
                "checks_failed": len(failed),
                "errors": all_errors,
            },
        )

    return VerificationReport(
        is_valid=is_valid,
        output_dir=str(output_dir),
        checks_passed=passed,
        checks_failed=failed,
        errors=all_errors,
        signed=signed,
    )
