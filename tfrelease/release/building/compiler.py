# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cross-compilation of the provider with `go build`.

One blocking `go build` per build step, strictly in plan order. The target
is selected through GOOS/GOARCH layered over the caller's environment, and
static steps add CGO_ENABLED=0 so the binary runs on distributions with an
older glibc (Oracle Linux 8).

The compiler writes to a hidden staging file next to the final artifact.
Only a successful build is moved onto the artifact name, so:
  - a failed build never leaves a truncated binary behind
  - a superseding static build replaces the standard binary only when it
    succeeded; otherwise the standard one is kept

A failed target is logged and recorded; the matrix carries on. There are no
retries and no timeouts.
"""

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from tfrelease.logging.logger import get_logger
from tfrelease.release.naming import artifact_name
from tfrelease.release.targets import BuildStep
from tfrelease.utils.filesystem import safe_delete, staging_path

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Outcome of one compiler invocation."""

    step: BuildStep
    success: bool
    exit_code: int
    artifact_path: Path | None
    stderr: str
    elapsed_seconds: float


def build_environment(step: BuildStep, base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Environment for one step: the caller's environment plus the target selectors."""
    env = dict(os.environ if base_env is None else base_env)
    env["GOOS"] = step.target.os
    env["GOARCH"] = step.target.arch
    if step.static:
        env["CGO_ENABLED"] = "0"
    return env


def build_command(go_binary: str, output_path: Path, build_flags: list[str]) -> list[str]:
    return [go_binary, "build", *build_flags, "-o", str(output_path), "."]


def build_target(
    step: BuildStep,
    output_dir: Path,
    prefix: str,
    version: str,
    source_dir: Path,
    go_binary: str = "go",
    build_flags: list[str] | None = None,
) -> BuildResult:
    """
    Compile the provider for a single build step.

    Returns a BuildResult in every case; compiler failures and an OS error
    starting the compiler (missing executable or source directory) are
    reported, not raised.
    """
    final_path = output_dir / artifact_name(prefix, version, step.target)
    staged = staging_path(final_path)
    command = build_command(go_binary, staged, list(build_flags or []))

    if step.supersedes:
        logger.info(
            "Building compatibility binary",
            extra={"target": str(step.target), "artifact": final_path.name, "static": True},
        )
    else:
        logger.info(
            "Building",
            extra={"target": str(step.target), "artifact": final_path.name, "static": step.static},
        )

    start = time.monotonic()
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            cwd=str(source_dir),
            env=build_environment(step),
        )
    except OSError as err:
        # Missing compiler, or a source directory that is absent or not a directory.
        elapsed = time.monotonic() - start
        logger.error(
            "Failed to build, could not start compiler",
            extra={
                "target": str(step.target),
                "go_binary": go_binary,
                "source_dir": str(source_dir),
                "error": str(err),
            },
        )
        return BuildResult(
            step=step,
            success=False,
            exit_code=-1,
            artifact_path=final_path if final_path.is_file() else None,
            stderr=f"could not run {go_binary} in {source_dir}: {err}",
            elapsed_seconds=elapsed,
        )

    elapsed = time.monotonic() - start

    if result.returncode != 0 or not staged.is_file():
        safe_delete(staged)
        logger.error(
            "Failed to build",
            extra={
                "target": str(step.target),
                "static": step.static,
                "exit_code": result.returncode,
                "stderr": result.stderr.strip()[-2000:],
            },
        )
        if step.supersedes and final_path.is_file():
            logger.warning(
                "Keeping standard build",
                extra={"target": str(step.target), "artifact": final_path.name},
            )
        return BuildResult(
            step=step,
            success=False,
            exit_code=result.returncode if result.returncode != 0 else -1,
            artifact_path=final_path if final_path.is_file() else None,
            stderr=result.stderr,
            elapsed_seconds=elapsed,
        )

    replaced = final_path.is_file()
    staged.replace(final_path)

    logger.info(
        "Built",
        extra={
            "target": str(step.target),
            "artifact": final_path.name,
            "replaced_standard_build": replaced and step.supersedes,
            "elapsed_seconds": round(elapsed, 3),
        },
    )
    return BuildResult(
        step=step,
        success=True,
        exit_code=0,
        artifact_path=final_path,
        stderr=result.stderr,
        elapsed_seconds=elapsed,
    )


def build_all(
    plan: list[BuildStep],
    output_dir: Path,
    prefix: str,
    version: str,
    source_dir: Path,
    go_binary: str = "go",
    build_flags: list[str] | None = None,
) -> list[BuildResult]:
    """Run every step of the plan in order, continuing past failures."""
    results = [
        build_target(step, output_dir, prefix, version, source_dir, go_binary, build_flags)
        for step in plan
    ]

    failed = [str(r.step.target) for r in results if not r.success]
    logger.info(
        "Build matrix finished",
        extra={
            "steps": len(results),
            "succeeded": len(results) - len(failed),
            "failed": len(failed),
            "failed_targets": failed,
        },
    )
    return results
