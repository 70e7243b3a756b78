# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for manifest signing and the placeholder fallback.
"""

import subprocess
from pathlib import Path

import pytest

from tfrelease.config.schema import SigningConfig
from tfrelease.release.signing.signer import gpg_command, sign_manifest

MISSING_GPG = "tfrelease-test-missing-gpg"


@pytest.fixture()
def manifest(tmp_path: Path) -> Path:
    path = tmp_path / "p_1.0.0_SHA256SUMS"
    path.write_text(f"{'0' * 64}  p_1.0.0_linux_amd64.zip\n", encoding="utf-8")
    return path


@pytest.fixture()
def fake_gpg(monkeypatch: pytest.MonkeyPatch):  # type: ignore[no-untyped-def]
    """Make gpg look installed and record its invocations."""
    calls: list[list[str]] = []
    state = {"returncode": 0}

    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append(list(command))
        if state["returncode"] == 0:
            Path(command[command.index("--output") + 1]).write_bytes(b"-----SIG-----")
        return subprocess.CompletedProcess(command, state["returncode"], stdout="", stderr="no key")

    monkeypatch.setattr("tfrelease.release.signing.signer.shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr("tfrelease.release.signing.signer.subprocess.run", _run)
    return calls, state


def test_missing_gpg_writes_empty_signature(manifest: Path) -> None:
    result = sign_manifest(manifest, SigningConfig(gpg_binary=MISSING_GPG))

    assert not result.signed
    assert result.signature_path == manifest.with_name("p_1.0.0_SHA256SUMS.sig")
    assert result.signature_path.is_file()
    assert result.signature_path.stat().st_size == 0


def test_disabled_signing_writes_empty_signature(manifest: Path) -> None:
    result = sign_manifest(manifest, SigningConfig(enabled=False))
    assert not result.signed
    assert result.signature_path.stat().st_size == 0


def test_successful_signature(manifest: Path, fake_gpg) -> None:  # type: ignore[no-untyped-def]
    calls, _ = fake_gpg
    result = sign_manifest(manifest, SigningConfig())

    assert result.signed
    assert result.signature_path.read_bytes() == b"-----SIG-----"
    assert "--detach-sign" in calls[0]
    assert calls[0][-1] == str(manifest)


def test_failed_signature_falls_back_to_placeholder(manifest: Path, fake_gpg) -> None:  # type: ignore[no-untyped-def]
    _, state = fake_gpg
    state["returncode"] = 2
    stale = manifest.with_name(manifest.name + ".sig")
    stale.write_bytes(b"old signature")

    result = sign_manifest(manifest, SigningConfig())

    assert not result.signed
    assert stale.stat().st_size == 0


def test_key_id_is_passed(tmp_path: Path) -> None:
    command = gpg_command("gpg", tmp_path / "m", tmp_path / "m.sig", "ABCDEF")
    assert command[command.index("--local-user") + 1] == "ABCDEF"


def test_missing_manifest_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        sign_manifest(tmp_path / "absent", SigningConfig(gpg_binary=MISSING_GPG))


def test_batch_mode_without_terminal(tmp_path: Path) -> None:
    command = gpg_command("gpg", tmp_path / "m", tmp_path / "m.sig", None)
    assert command[:2] == ["gpg", "--batch"]


def test_interactive_mode_allows_passphrase_prompt(tmp_path: Path) -> None:
    command = gpg_command("gpg", tmp_path / "m", tmp_path / "m.sig", None, interactive=True)
    assert "--batch" not in command
    assert "--detach-sign" in command


@pytest.mark.parametrize("terminal", [True, False])
def test_sign_manifest_follows_terminal(manifest: Path, fake_gpg, monkeypatch: pytest.MonkeyPatch, terminal: bool) -> None:  # type: ignore[no-untyped-def]
    calls, _ = fake_gpg
    monkeypatch.setattr("tfrelease.release.signing.signer.stdin_is_terminal", lambda: terminal)

    assert sign_manifest(manifest, SigningConfig()).signed
    assert ("--batch" in calls[0]) is not terminal
