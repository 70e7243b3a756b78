# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for tfrelease.

Every operation is a subcommand of `tfrelease`. Running it with no
subcommand performs the full release.

The global options (--config, --log-level, --dry-run, --release-version) are
inherited by every subcommand through argparse's parent parser mechanism.

Usage:
    tfrelease
    tfrelease release --skip-publish
    tfrelease build --config release.yaml
    tfrelease verify --release-version 3.7.5
"""

import argparse
import sys

from tfrelease.cli.commands import (
    handle_build,
    handle_clean,
    handle_info,
    handle_package,
    handle_publish,
    handle_release,
    handle_verify,
)


def _build_global_parser(suppress_defaults: bool = False) -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    A separate parent parser (with add_help=False) keeps the help text from
    colliding between the root and the subcommand parsers.

    The subcommand copy suppresses its defaults. argparse copies every
    attribute a subparser sets over the root namespace, so a real default
    there would discard `tfrelease --dry-run release`'s --dry-run.
    """

    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress_defaults else value

    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=default(None),
        help="Path to YAML configuration file (compiled-in defaults when omitted).",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=default(None),
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=default(False),
        dest="dry_run",
        help="Show what would happen without running any external tool.",
    )
    parent.add_argument(
        "--release-version",
        type=str,
        default=default(None),
        dest="release_version",
        help="Override the provider version (without the leading 'v').",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register all subcommands with their handler functions."""
    commands = [
        ("release", "Build, package, sign, and publish (the default).", handle_release),
        ("build", "Cross-compile the target matrix into a fresh output directory.", handle_build),
        ("package", "Zip built binaries and write the signed SHA256SUMS.", handle_package),
        ("publish", "Replace the GitHub release with the packaged files.", handle_publish),
        ("verify", "Validate the output directory against the manifest.", handle_verify),
        ("clean", "Remove the output directory.", handle_clean),
        ("info", "Display environment, config, and build plan.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler, skip_publish=False)

    subparsers.choices["release"].add_argument(
        "--skip-publish",
        action="store_true",
        default=False,
        dest="skip_publish",
        help="Stop after packaging; do not touch the GitHub release.",
    )


def build_parser() -> argparse.ArgumentParser:
    root_parser = argparse.ArgumentParser(
        prog="tfrelease",
        description="tfrelease: Terraform provider release automation.",
        parents=[_build_global_parser()],
    )
    root_parser.set_defaults(func=handle_release, skip_publish=False)
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(suppress_defaults=True))
    return root_parser


def main(argv: list[str] | None = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

      1. Build the argument parser with global options and all subcommands
      2. Parse the command line (no subcommand means `release`)
      3. Call the handler function for the chosen subcommand
      4. Exit with the handler's return code
    """
    args = build_parser().parse_args(argv)
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
