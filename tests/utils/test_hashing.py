# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for SHA256 hashing.
"""

import hashlib
from pathlib import Path

import pytest

from tfrelease.utils.hashing import HASH_BUFFER_SIZE, compute_sha256, verify_checksum


def test_matches_hashlib(tmp_path: Path) -> None:
    data = b"terraform provider" * 10_000
    target = tmp_path / "bin"
    target.write_bytes(data)
    assert compute_sha256(target) == hashlib.sha256(data).hexdigest()


def test_chunk_boundary(tmp_path: Path) -> None:
    data = b"x" * (HASH_BUFFER_SIZE + 1)
    target = tmp_path / "bin"
    target.write_bytes(data)
    assert compute_sha256(target) == hashlib.sha256(data).hexdigest()


def test_empty_file(tmp_path: Path) -> None:
    target = tmp_path / "empty"
    target.write_bytes(b"")
    assert compute_sha256(target) == hashlib.sha256(b"").hexdigest()


def test_verify_is_case_insensitive(tmp_path: Path) -> None:
    target = tmp_path / "bin"
    target.write_bytes(b"abc")
    assert verify_checksum(target, hashlib.sha256(b"abc").hexdigest().upper())
    assert not verify_checksum(target, hashlib.sha256(b"abd").hexdigest())


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        compute_sha256(tmp_path / "absent")
