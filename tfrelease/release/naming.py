# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Terraform Registry file naming.

    terraform-provider-<name>_<version>_<os>_<arch>[.exe]   binary
    terraform-provider-<name>_<version>_<os>_<arch>.zip     archive
    terraform-provider-<name>_<version>_SHA256SUMS          manifest
    terraform-provider-<name>_<version>_SHA256SUMS.sig      signature

The `.exe` suffix lives inside the Windows archives but never in the archive
name itself.
"""

from tfrelease.release.targets import EXECUTABLE_SUFFIX, Target

ARCHIVE_SUFFIX = ".zip"
MANIFEST_MARKER = "SHA256SUMS"
SIGNATURE_SUFFIX = ".sig"


def artifact_stem(prefix: str, version: str) -> str:
    """Common leading part of every file the run produces."""
    return f"{prefix}_{version}_"


def artifact_name(prefix: str, version: str, target: Target) -> str:
    return f"{artifact_stem(prefix, version)}{target.os}_{target.arch}{target.executable_suffix}"


def archive_name_for(artifact_filename: str) -> str:
    """Archive name for a binary: drop a trailing `.exe`, then append `.zip`."""
    if artifact_filename.endswith(EXECUTABLE_SUFFIX):
        return artifact_filename[: -len(EXECUTABLE_SUFFIX)] + ARCHIVE_SUFFIX
    return artifact_filename + ARCHIVE_SUFFIX


def archive_name(prefix: str, version: str, target: Target) -> str:
    return archive_name_for(artifact_name(prefix, version, target))


def manifest_name(prefix: str, version: str) -> str:
    return f"{artifact_stem(prefix, version)}{MANIFEST_MARKER}"


def signature_name(prefix: str, version: str) -> str:
    return manifest_name(prefix, version) + SIGNATURE_SUFFIX


def release_tag(version: str, tag_prefix: str = "v") -> str:
    return f"{tag_prefix}{version}"


def is_packageable_artifact(filename: str, prefix: str, version: str) -> bool:
    """True for a raw binary the archiver should pick up."""
    if not filename.startswith(artifact_stem(prefix, version)):
        return False
    if filename.endswith(ARCHIVE_SUFFIX):
        return False
    return MANIFEST_MARKER not in filename
