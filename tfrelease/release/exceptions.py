# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions for the release pipeline.

Only the failures that must stop a run are exceptions. A failed target
build, a failed signature, or a skipped publish is reported through the
stage's result object instead.
"""


class ReleaseError(Exception):
    """Base for all release pipeline errors."""


class EnvironmentCheckError(ReleaseError):
    """Raised when a required external tool is missing before the run starts."""

    def __init__(self, failed_checks: list[str], message: str) -> None:
        super().__init__(message)
        self.failed_checks = failed_checks


class OutputDirectoryError(ReleaseError):
    """Raised when the output directory cannot be safely wiped or recreated."""
