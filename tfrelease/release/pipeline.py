# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The release pipeline, stage by stage.

    environment check → output reset → matrix build (standard, then static
    compatibility) → zip archives → SHA256SUMS + signature → summary → publish

Stages run strictly in sequence and each one only reads what the previous
one left in the output directory. The CLI runs the whole chain for
`release` and the individual stage groups for `build`, `package`, and
`publish`.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from tfrelease.config.schema import ReleaseConfig
from tfrelease.logging.logger import get_logger
from tfrelease.release.building.compiler import BuildResult, build_all
from tfrelease.release.checksums.integrity import generate_checksums, write_checksum_file
from tfrelease.release.cleanup.cleaner import reset_output_directory
from tfrelease.release.environment.validator import require_environment, validate_environment
from tfrelease.release.naming import manifest_name, release_tag, signature_name
from tfrelease.release.packaging.archiver import ArchiveResult, archive_artifacts
from tfrelease.release.publishing.github import SKIPPED, PublishResult, publish_release
from tfrelease.release.signing.signer import SignatureResult, sign_manifest
from tfrelease.release.targets import BuildStep, resolve_build_plan
from tfrelease.utils.paths import resolve_in_workspace

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class PackageResult:
    """Archives, manifest, and signature produced from one output directory."""

    archives: list[ArchiveResult]
    manifest_path: Path
    checksums: dict[str, str]
    signature: SignatureResult


@dataclass(frozen=True)
class ReleaseResult:
    """Everything a full release run produced."""

    version: str
    tag: str
    output_dir: Path
    plan: list[BuildStep]
    builds: list[BuildResult]
    package: PackageResult
    publish: PublishResult

    @property
    def failed_builds(self) -> list[BuildResult]:
        return [b for b in self.builds if not b.success]


def output_directory(config: ReleaseConfig, workspace_root: Path) -> Path:
    return resolve_in_workspace(workspace_root, config.build.output_directory)


def build_plan(config: ReleaseConfig) -> list[BuildStep]:
    return resolve_build_plan(config.build.parsed_targets(), config.build.parsed_compat_targets())


def run_build_stage(config: ReleaseConfig, workspace_root: Path) -> tuple[Path, list[BuildResult]]:
    """
    Check the environment, reset the output directory, and build the matrix.

    Raises:
        EnvironmentCheckError: A required tool is missing. Nothing has been
                               deleted at that point.
        OutputDirectoryError: The output directory is unsafe to wipe.
    """
    out_dir = output_directory(config, workspace_root)
    require_environment(validate_environment(config, out_dir))

    out_dir = reset_output_directory(out_dir, workspace_root)

    plan = build_plan(config)
    _logger.info(
        "Building binaries for Terraform Registry platforms",
        extra={"steps": len(plan), "targets": [step.label for step in plan]},
    )
    builds = build_all(
        plan,
        out_dir,
        config.provider.prefix,
        config.provider.version,
        source_dir=resolve_in_workspace(workspace_root, config.build.source_directory),
        go_binary=config.build.go_binary,
        build_flags=config.build.build_flags,
    )
    return out_dir, builds


def run_package_stage(config: ReleaseConfig, out_dir: Path) -> PackageResult:
    """Zip every binary, then write and sign the checksum manifest."""
    prefix, version = config.provider.prefix, config.provider.version

    archives = archive_artifacts(out_dir, prefix, version)

    _logger.info("Creating Terraform Registry files", extra={"output_dir": str(out_dir)})
    checksums = generate_checksums(out_dir)
    manifest_path = write_checksum_file(out_dir / manifest_name(prefix, version), checksums)
    signature = sign_manifest(manifest_path, config.signing)

    _logger.info(
        "Registry files created",
        extra={"manifest": manifest_path.name, "signature": signature.signature_path.name},
    )
    return PackageResult(
        archives=archives,
        manifest_path=manifest_path,
        checksums=checksums,
        signature=signature,
    )


def run_publish_stage(config: ReleaseConfig, out_dir: Path) -> PublishResult:
    prefix, version = config.provider.prefix, config.provider.version
    tag = release_tag(version, config.publish.tag_prefix)

    if not config.publish.enabled:
        message = "Publishing disabled, skipping release creation"
        _logger.warning(message, extra={"tag": tag})
        return PublishResult(status=SKIPPED, tag=tag, message=message)

    return publish_release(
        out_dir,
        tag,
        manifest_name(prefix, version),
        signature_name(prefix, version),
        notes=config.release_notes(),
        gh_binary=config.publish.gh_binary,
        repository=config.publish.repository,
    )


def log_platform_summary(out_dir: Path, checksums: dict[str, str]) -> None:
    _logger.info(
        "Platform zip files created",
        extra={"output_dir": str(out_dir), "archives": sorted(checksums)},
    )


def run_release(config: ReleaseConfig, workspace_root: Path, publish: bool = True) -> ReleaseResult:
    """
    Run the whole pipeline once.

    Individual build failures, a failed signature, and a skipped or failed
    publish are all reported in the result rather than raised.
    """
    version = config.provider.version
    tag = release_tag(version, config.publish.tag_prefix)
    _logger.info(
        "Starting Terraform Registry release process",
        extra={"provider": config.provider.name, "version": version},
    )

    out_dir, builds = run_build_stage(config, workspace_root)
    package = run_package_stage(config, out_dir)
    log_platform_summary(out_dir, package.checksums)

    if publish:
        publish_result = run_publish_stage(config, out_dir)
    else:
        publish_result = PublishResult(status=SKIPPED, tag=tag, message="Publishing not requested")

    _logger.info(
        "Terraform Registry release process completed",
        extra={
            "version": version,
            "archives": len(package.archives),
            "failed_builds": [str(b.step.target) for b in builds if not b.success],
            "signed": package.signature.signed,
            "publish_status": publish_result.status,
        },
    )

    return ReleaseResult(
        version=version,
        tag=tag,
        output_dir=out_dir,
        plan=build_plan(config),
        builds=builds,
        package=package,
        publish=publish_result,
    )
