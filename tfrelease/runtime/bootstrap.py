# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for tfrelease.

Called once at the start of every CLI command that does real work:
  1. Check the interpreter version
  2. Apply the configured log level / log file to every tfrelease logger
  3. Log what is about to be released and from where
"""

from pathlib import Path

from tfrelease import __version__
from tfrelease.config.schema import ReleaseConfig
from tfrelease.logging.logger import configure_package_logging, get_logger
from tfrelease.runtime.environment import check_minimum_python, get_system_info


def bootstrap(config: ReleaseConfig, workspace_root: Path, log_level: str | None = None) -> None:
    """
    Put the process into a known state before any release stage runs.

    Args:
        config: The validated release configuration.
        workspace_root: Provider checkout the run operates on.
        log_level: CLI override; takes precedence over the config's level.
    """
    check_minimum_python()

    level = log_level or config.global_config.log_level
    log_file = None
    if config.global_config.log_file is not None:
        log_file = Path(config.global_config.log_file)

    logger = get_logger("tfrelease.runtime", log_level=level, log_file=log_file)
    configure_package_logging(level, log_file)

    system_info = get_system_info()
    logger.info(
        "tfrelease bootstrap complete",
        extra={
            "tfrelease_version": __version__,
            "provider": config.provider.name,
            "version": config.provider.version,
            "workspace_root": str(workspace_root),
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
        },
    )
