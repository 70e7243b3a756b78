# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for atomic writes, staging paths and safe deletion.
"""

from pathlib import Path

from tfrelease.utils.filesystem import TEMP_PREFIX, atomic_write, safe_delete, staging_path


class TestAtomicWrite:
    def test_creates_file(self, tmp_path: Path) -> None:
        target = tmp_path / "SHA256SUMS"
        atomic_write(target, "line\n")
        assert target.read_text(encoding="utf-8") == "line\n"

    def test_replaces_previous_content(self, tmp_path: Path) -> None:
        target = tmp_path / "SHA256SUMS"
        target.write_text("old one\nold two\n", encoding="utf-8")
        atomic_write(target, "new\n")
        assert target.read_text(encoding="utf-8") == "new\n"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "file"
        atomic_write(target, "")
        assert target.is_file()

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        atomic_write(tmp_path / "file", "content")
        assert [p.name for p in tmp_path.iterdir()] == ["file"]


def test_staging_path_is_hidden_sibling(tmp_path: Path) -> None:
    staged = staging_path(tmp_path / "p_1.0.0_linux_amd64.zip")
    assert staged.parent == tmp_path
    assert staged.name == f"{TEMP_PREFIX}p_1.0.0_linux_amd64.zip"


class TestSafeDelete:
    def test_deletes_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "bin"
        target.write_bytes(b"x")
        assert safe_delete(target)
        assert not target.exists()

    def test_missing_is_noop(self, tmp_path: Path) -> None:
        assert not safe_delete(tmp_path / "absent")
