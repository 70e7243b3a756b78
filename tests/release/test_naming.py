# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for Terraform Registry file naming.
"""

from tfrelease.release.naming import (
    archive_name,
    archive_name_for,
    artifact_name,
    is_packageable_artifact,
    manifest_name,
    release_tag,
    signature_name,
)
from tfrelease.release.targets import Target

PREFIX = "terraform-provider-azuread"
VERSION = "3.7.4"


def test_linux_artifact_name() -> None:
    assert (
        artifact_name(PREFIX, VERSION, Target("linux", "amd64"))
        == "terraform-provider-azuread_3.7.4_linux_amd64"
    )


def test_windows_artifact_keeps_exe() -> None:
    assert (
        artifact_name(PREFIX, VERSION, Target("windows", "arm64"))
        == "terraform-provider-azuread_3.7.4_windows_arm64.exe"
    )


def test_windows_archive_drops_exe() -> None:
    assert (
        archive_name(PREFIX, VERSION, Target("windows", "386"))
        == "terraform-provider-azuread_3.7.4_windows_386.zip"
    )


def test_archive_name_for_plain_binary() -> None:
    assert archive_name_for("p_1.0.0_darwin_arm64") == "p_1.0.0_darwin_arm64.zip"


def test_manifest_and_signature_names() -> None:
    assert manifest_name(PREFIX, VERSION) == "terraform-provider-azuread_3.7.4_SHA256SUMS"
    assert signature_name(PREFIX, VERSION) == "terraform-provider-azuread_3.7.4_SHA256SUMS.sig"


def test_release_tag() -> None:
    assert release_tag(VERSION) == "v3.7.4"
    assert release_tag(VERSION, tag_prefix="") == "3.7.4"


class TestPackageableArtifact:
    def test_binary_is_packageable(self) -> None:
        assert is_packageable_artifact(f"{PREFIX}_{VERSION}_linux_arm", PREFIX, VERSION)

    def test_zip_is_not(self) -> None:
        assert not is_packageable_artifact(f"{PREFIX}_{VERSION}_linux_arm.zip", PREFIX, VERSION)

    def test_manifest_and_signature_are_not(self) -> None:
        assert not is_packageable_artifact(manifest_name(PREFIX, VERSION), PREFIX, VERSION)
        assert not is_packageable_artifact(signature_name(PREFIX, VERSION), PREFIX, VERSION)

    def test_other_version_is_not(self) -> None:
        assert not is_packageable_artifact(f"{PREFIX}_3.7.3_linux_arm", PREFIX, VERSION)

    def test_staging_file_is_not(self) -> None:
        assert not is_packageable_artifact(
            f".tfrelease_tmp_{PREFIX}_{VERSION}_linux_arm", PREFIX, VERSION
        )
