# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pre-flight environment validation.

Before anything is deleted or built, check:
- Python version
- the Go toolchain (required)
- disk space where the output directory lives (a warning, never fatal)
- GnuPG (optional: a placeholder signature is written without it)
- the GitHub CLI (optional: publishing is skipped without it)

Fail early with clear errors. No cryptic failures halfway through the matrix.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from tfrelease.config.schema import ReleaseConfig
from tfrelease.logging.logger import get_logger
from tfrelease.release.exceptions import EnvironmentCheckError
from tfrelease.runtime.environment import (
    MINIMUM_PYTHON_MAJOR,
    MINIMUM_PYTHON_MINOR,
    get_python_version,
    meets_minimum_python,
)

_logger: logging.Logger = get_logger(__name__)

MIN_DISK_SPACE_BYTES: int = 1_073_741_824  # 1 GB: thirteen provider binaries plus their zips


@dataclass(frozen=True)
class EnvironmentCheck:
    """Result of a single environment check."""

    name: str
    passed: bool
    message: str
    value: str
    required: bool = True


def check_python_version() -> EnvironmentCheck:
    """Verify Python >= 3.11."""
    major, minor, micro = get_python_version()
    version_str = f"{major}.{minor}.{micro}"
    passed = meets_minimum_python()
    if passed:
        msg = f"Python {version_str} meets minimum {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}"
    else:
        msg = f"Python {version_str} does NOT meet minimum {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}"
    return EnvironmentCheck(name="python_version", passed=passed, message=msg, value=version_str)


def check_tool(name: str, executable: str, required: bool, missing_hint: str) -> EnvironmentCheck:
    """
    Look an executable up on PATH.

    An optional tool that is missing still reports `passed=False`; it is the
    `required` flag that decides whether the run may continue.
    """
    resolved = shutil.which(executable)
    if resolved is not None:
        return EnvironmentCheck(
            name=name,
            passed=True,
            message=f"{executable} found at {resolved}",
            value=resolved,
            required=required,
        )
    return EnvironmentCheck(
        name=name,
        passed=False,
        message=f"{executable} is not installed: {missing_hint}",
        value="not_installed",
        required=required,
    )


def check_disk_space(path: Path | None = None) -> EnvironmentCheck:
    """
    Check available disk space at the given path.

    Walks up to the nearest existing ancestor, since the output directory
    usually doesn't exist yet on a fresh checkout.
    """
    check_path = path or Path.cwd()
    while not check_path.exists() and check_path != check_path.parent:
        check_path = check_path.parent
    try:
        usage = shutil.disk_usage(str(check_path))
        free_gb = usage.free / (1024**3)
        passed = usage.free >= MIN_DISK_SPACE_BYTES
        if passed:
            msg = f"{free_gb:.1f} GB free (minimum {MIN_DISK_SPACE_BYTES / (1024**3):.0f} GB)"
        else:
            msg = (
                f"Only {free_gb:.1f} GB free: recommended at least "
                f"{MIN_DISK_SPACE_BYTES / (1024**3):.0f} GB"
            )
        return EnvironmentCheck(
            name="disk_space",
            passed=passed,
            message=msg,
            value=f"{free_gb:.1f}GB",
            required=False,
        )
    except OSError as err:
        return EnvironmentCheck(
            name="disk_space",
            passed=False,
            message=f"Cannot check disk space: {err}",
            value="error",
            required=False,
        )


def validate_environment(
    config: ReleaseConfig,
    output_dir: Path | None = None,
) -> list[EnvironmentCheck]:
    """
    Run all pre-flight environment checks.

    Returns one result per check. Use `require_environment` to turn failed
    required checks into an abort.
    """
    checks = [
        check_python_version(),
        check_tool(
            "compiler",
            config.build.go_binary,
            required=True,
            missing_hint="cannot cross-compile the provider",
        ),
        check_disk_space(output_dir),
        check_tool(
            "signer",
            config.signing.gpg_binary,
            required=False,
            missing_hint="an empty placeholder signature will be written",
        ),
        check_tool(
            "publisher",
            config.publish.gh_binary,
            required=False,
            missing_hint="the GitHub release will not be created",
        ),
    ]

    passed_count = sum(1 for c in checks if c.passed)

    for check in checks:
        if check.passed:
            log_fn = _logger.info
        elif check.required:
            log_fn = _logger.error
        else:
            log_fn = _logger.warning
        log_fn(
            "Environment check",
            extra={
                "check": check.name,
                "passed": check.passed,
                "required": check.required,
                "check_message": check.message,
            },
        )

    _logger.info(
        "Environment validation complete",
        extra={"passed": passed_count, "failed": len(checks) - passed_count},
    )

    return checks


def require_environment(checks: list[EnvironmentCheck]) -> None:
    """
    Abort if any required check failed.

    Raises:
        EnvironmentCheckError: Naming every failed required check.
    """
    failed = [c for c in checks if c.required and not c.passed]
    if failed:
        details = "; ".join(c.message for c in failed)
        raise EnvironmentCheckError(
            [c.name for c in failed],
            f"Required environment checks failed: {details}",
        )
