# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
End-to-end tests of a release run against the fake Go toolchain.

These run the real pipeline (environment check, reset, build, zip,
manifest, placeholder signature, publish decision) in a temporary
workspace.
"""

import zipfile
from pathlib import Path
from types import SimpleNamespace

import pytest

from tfrelease.config.schema import ReleaseConfig
from tfrelease.release.exceptions import EnvironmentCheckError
from tfrelease.release.pipeline import build_plan, run_release
from tfrelease.release.publishing.github import SKIPPED
from tfrelease.release.targets import DEFAULT_TARGETS

PREFIX = "terraform-provider-azuread_3.7.4"
MANIFEST = f"{PREFIX}_SHA256SUMS"


def _entry_bytes(archive: Path) -> bytes:
    with zipfile.ZipFile(archive) as zf:
        (name,) = zf.namelist()
        return zf.read(name)


class TestFullMatrix:
    def test_one_archive_per_target(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        result = run_release(release_config, tmp_path)

        archives = sorted(p.name for p in result.output_dir.glob("*.zip"))
        assert len(archives) == len(DEFAULT_TARGETS) == 13
        assert f"{PREFIX}_windows_arm64.zip" in archives
        assert result.failed_builds == []

    def test_plan_builds_compat_targets_last(self, release_config: ReleaseConfig) -> None:
        plan = build_plan(release_config)
        assert len(plan) == 15
        assert [str(s.target) for s in plan[-2:]] == ["linux/amd64", "linux/arm64"]
        assert all(s.static and s.supersedes for s in plan[-2:])

    def test_linux_archives_hold_static_builds(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        result = run_release(release_config, tmp_path)

        assert b"static=True" in _entry_bytes(result.output_dir / f"{PREFIX}_linux_amd64.zip")
        assert b"static=True" in _entry_bytes(result.output_dir / f"{PREFIX}_linux_arm64.zip")
        assert b"static=False" in _entry_bytes(result.output_dir / f"{PREFIX}_linux_386.zip")

    def test_manifest_lists_every_archive(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        result = run_release(release_config, tmp_path)

        lines = (result.output_dir / MANIFEST).read_text(encoding="utf-8").splitlines()
        assert len(lines) == len(list(result.output_dir.glob("*.zip")))
        assert [line.split("  ")[1] for line in lines] == sorted(result.package.checksums)

    def test_unsigned_without_gpg(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        result = run_release(release_config, tmp_path)

        signature = result.output_dir / f"{MANIFEST}.sig"
        assert signature.is_file()
        assert signature.stat().st_size == 0
        assert not result.package.signature.signed

    def test_only_release_files_remain(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        result = run_release(release_config, tmp_path)

        leftovers = [
            p.name
            for p in result.output_dir.iterdir()
            if not p.name.endswith(".zip") and p.name not in (MANIFEST, f"{MANIFEST}.sig")
        ]
        assert leftovers == []


class TestFailures:
    def test_failed_target_is_skipped(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        fake_go.fail.add("darwin/arm64")
        result = run_release(release_config, tmp_path)

        assert [str(b.step.target) for b in result.failed_builds] == ["darwin/arm64"]
        assert len(list(result.output_dir.glob("*.zip"))) == 12
        assert len((result.output_dir / MANIFEST).read_text(encoding="utf-8").splitlines()) == 12

    def test_failed_compat_build_keeps_standard(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        fake_go.fail.add(("linux/arm64", True))
        result = run_release(release_config, tmp_path)

        assert b"static=False" in _entry_bytes(result.output_dir / f"{PREFIX}_linux_arm64.zip")
        assert len(list(result.output_dir.glob("*.zip"))) == 13

    def test_missing_compiler_touches_nothing(self, config_factory, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        stale = tmp_path / "dist" / f"{PREFIX}_linux_amd64.zip"
        stale.parent.mkdir()
        stale.write_bytes(b"from last release")

        config = config_factory(build={"go_binary": "tfrelease-test-missing-go"})
        with pytest.raises(EnvironmentCheckError):
            run_release(config, tmp_path)
        assert stale.read_bytes() == b"from last release"

    def test_low_disk_space_still_releases(self, fake_go, release_config: ReleaseConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:  # type: ignore[no-untyped-def]
        monkeypatch.setattr(
            "tfrelease.release.environment.validator.shutil.disk_usage",
            lambda path: SimpleNamespace(total=1 << 30, used=1 << 29, free=1 << 29),
        )
        result = run_release(release_config, tmp_path)

        assert len(list(result.output_dir.glob("*.zip"))) == 13
        assert (result.output_dir / MANIFEST).is_file()


class TestReruns:
    def test_stale_archive_is_removed(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        stale = tmp_path / "dist" / "terraform-provider-azuread_3.7.3_linux_amd64.zip"
        stale.parent.mkdir()
        stale.write_bytes(b"previous version")

        result = run_release(release_config, tmp_path)

        assert not stale.exists()
        assert stale.name not in (result.output_dir / MANIFEST).read_text(encoding="utf-8")

    def test_rerun_is_byte_identical(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        first = run_release(release_config, tmp_path)
        manifest_before = (first.output_dir / MANIFEST).read_bytes()

        second = run_release(release_config, tmp_path)
        assert (second.output_dir / MANIFEST).read_bytes() == manifest_before


class TestPublishDecision:
    def test_disabled_publish_is_skipped(self, fake_go, release_config: ReleaseConfig, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        result = run_release(release_config, tmp_path)
        assert result.publish.status == SKIPPED
        assert result.tag == "v3.7.4"

    def test_missing_gh_keeps_artifacts(self, fake_go, config_factory, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        config = config_factory(
            build={"targets": ["darwin/amd64"], "compat_targets": []},
            publish={"enabled": True},
        )
        result = run_release(config, tmp_path)

        assert result.publish.status == SKIPPED
        assert (result.output_dir / f"{PREFIX}_darwin_amd64.zip").is_file()
        assert (result.output_dir / MANIFEST).is_file()

    def test_skip_publish_flag(self, fake_go, config_factory, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        config = config_factory(
            build={"targets": ["darwin/amd64"], "compat_targets": []},
            publish={"enabled": True},
        )
        result = run_release(config, tmp_path, publish=False)
        assert result.publish.message == "Publishing not requested"
