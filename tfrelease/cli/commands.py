# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the tfrelease CLI.

Each function here corresponds to one CLI subcommand and returns an exit
code. No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path

from tfrelease.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, VALIDATION_ERROR
from tfrelease.config.exceptions import ConfigError
from tfrelease.config.loader import load_config
from tfrelease.config.schema import ReleaseConfig
from tfrelease.logging.logger import get_logger
from tfrelease.release.exceptions import EnvironmentCheckError, OutputDirectoryError
from tfrelease.runtime.bootstrap import bootstrap
from tfrelease.utils.paths import resolve_workspace_root


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, ReleaseConfig | None, logging.Logger, Path]:
    """
    The shared setup every command needs: load config, apply overrides, bootstrap.

    Returns (exit_code, config, logger, workspace_root). If exit_code is not
    SUCCESS, the caller should return it immediately.
    """
    logger = get_logger(f"tfrelease.cli.{command_name}", log_level=args.log_level or "INFO")
    workspace_root = resolve_workspace_root()

    try:
        config = load_config(Path(args.config) if args.config is not None else None)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger, workspace_root

    if args.release_version is not None:
        try:
            config = config.with_version(args.release_version)
        except ValueError as err:
            logger.error(
                "Invalid --release-version",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger, workspace_root

    bootstrap(config, workspace_root, log_level=args.log_level)
    return SUCCESS, config, logger, workspace_root


def _log_plan(logger: logging.Logger, config: ReleaseConfig) -> None:
    from tfrelease.release.naming import archive_name
    from tfrelease.release.pipeline import build_plan

    plan = build_plan(config)
    logger.info(
        "Build plan",
        extra={
            "steps": [
                {
                    "target": str(step.target),
                    "static": step.static,
                    "supersedes": step.supersedes,
                    "archive": archive_name(
                        config.provider.prefix, config.provider.version, step.target
                    ),
                }
                for step in plan
            ],
        },
    )


def handle_release(args: argparse.Namespace) -> int:
    """Run the full pipeline: build, package, sign, publish."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "release")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        if args.dry_run:
            _log_plan(logger, config)
            logger.info(
                "Dry run: would build, package, and publish",
                extra={"version": config.provider.version, "publish": not args.skip_publish},
            )
            return SUCCESS

        from tfrelease.release.pipeline import run_release

        result = run_release(config, workspace_root, publish=not args.skip_publish)

        logger.info(
            "Release finished",
            extra={
                "tag": result.tag,
                "archives": len(result.package.archives),
                "failed_targets": [str(b.step.target) for b in result.failed_builds],
                "publish_status": result.publish.status,
            },
        )
        return SUCCESS

    except EnvironmentCheckError as err:
        logger.error("Environment check failed", extra={"failed_checks": err.failed_checks, "error": str(err)})
        return VALIDATION_ERROR
    except OutputDirectoryError as err:
        logger.error("Unsafe output directory", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Release failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_build(args: argparse.Namespace) -> int:
    """Check the environment, reset the output directory, and build the matrix."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "build")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        if args.dry_run:
            _log_plan(logger, config)
            logger.info("Dry run: would build the matrix")
            return SUCCESS

        from tfrelease.release.pipeline import run_build_stage

        out_dir, builds = run_build_stage(config, workspace_root)
        logger.info(
            "Build finished",
            extra={
                "output_dir": str(out_dir),
                "succeeded": sum(1 for b in builds if b.success),
                "failed": sum(1 for b in builds if not b.success),
            },
        )
        return SUCCESS

    except EnvironmentCheckError as err:
        logger.error("Environment check failed", extra={"failed_checks": err.failed_checks, "error": str(err)})
        return VALIDATION_ERROR
    except OutputDirectoryError as err:
        logger.error("Unsafe output directory", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Build failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_package(args: argparse.Namespace) -> int:
    """Zip the binaries in the output directory and write the signed manifest."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "package")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from tfrelease.release.pipeline import log_platform_summary, output_directory, run_package_stage

        out_dir = output_directory(config, workspace_root)
        if not out_dir.is_dir():
            logger.error("Output directory not found", extra={"output_dir": str(out_dir)})
            return VALIDATION_ERROR

        if args.dry_run:
            logger.info("Dry run: would package", extra={"output_dir": str(out_dir)})
            return SUCCESS

        result = run_package_stage(config, out_dir)
        log_platform_summary(out_dir, result.checksums)
        return SUCCESS

    except Exception as err:
        logger.error("Packaging failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_publish(args: argparse.Namespace) -> int:
    """Replace the GitHub release with the contents of the output directory."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "publish")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from tfrelease.release.publishing.github import FAILED
        from tfrelease.release.pipeline import output_directory, run_publish_stage

        out_dir = output_directory(config, workspace_root)

        if args.dry_run:
            logger.info(
                "Dry run: would publish",
                extra={"output_dir": str(out_dir), "version": config.provider.version},
            )
            return SUCCESS

        result = run_publish_stage(config, out_dir)
        if result.status == FAILED:
            return VALIDATION_ERROR
        return SUCCESS

    except Exception as err:
        logger.error("Publish failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_verify(args: argparse.Namespace) -> int:
    """Check that the output directory holds a complete, consistent release."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "verify")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from tfrelease.release.pipeline import output_directory
        from tfrelease.release.verification.verifier import verify_release_directory

        report = verify_release_directory(output_directory(config, workspace_root), config)
        if not report.is_valid:
            return VALIDATION_ERROR
        return SUCCESS

    except Exception as err:
        logger.error("Verification failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_clean(args: argparse.Namespace) -> int:
    """Remove the output directory."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "clean")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from tfrelease.release.cleanup.cleaner import clean_output
        from tfrelease.release.pipeline import output_directory

        out_dir = output_directory(config, workspace_root)
        if args.dry_run:
            logger.info("Dry run: would remove", extra={"output_dir": str(out_dir)})
            return SUCCESS

        clean_output(out_dir, workspace_root)
        return SUCCESS

    except OutputDirectoryError as err:
        logger.error("Unsafe output directory", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Clean failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Display environment, configuration, and the resolved build plan."""
    exit_code, config, logger, workspace_root = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from tfrelease import __version__
    from tfrelease.release.naming import manifest_name, release_tag, signature_name
    from tfrelease.runtime.environment import get_system_info

    system_info = get_system_info()
    prefix, version = config.provider.prefix, config.provider.version

    logger.info(
        "System information",
        extra={
            "tfrelease_version": __version__,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "hostname": system_info.hostname,
            "config": args.config,
            "workspace_root": str(workspace_root),
        },
    )
    logger.info(
        "Release information",
        extra={
            "provider": config.provider.name,
            "version": version,
            "tag": release_tag(version, config.publish.tag_prefix),
            "manifest": manifest_name(prefix, version),
            "signature": signature_name(prefix, version),
            "output_directory": config.build.output_directory,
        },
    )
    _log_plan(logger, config)
    return SUCCESS
