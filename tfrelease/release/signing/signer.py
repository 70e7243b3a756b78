# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Detached GPG signature over the SHA256SUMS manifest.

Signing is best-effort. When GnuPG is missing, signing is disabled, or
`gpg --detach-sign` fails (no secret key, locked agent, ...), a zero-length
`.sig` file is written instead and a warning is logged. The run carries on
either way, and the release always has a signature asset to upload.

From a terminal gpg runs interactively, so pinentry can ask for the
passphrase. Without one (CI, piped stdin) it runs with --batch, and a
passphrase-protected key that is not unlocked in gpg-agent fails and
falls back to the placeholder.
"""

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from tfrelease.config.schema import SigningConfig
from tfrelease.logging.logger import get_logger
from tfrelease.release.naming import SIGNATURE_SUFFIX
from tfrelease.utils.filesystem import safe_delete

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class SignatureResult:
    """What ended up in the .sig file."""

    signature_path: Path
    signed: bool
    message: str


def signature_path_for(manifest_path: Path) -> Path:
    return manifest_path.with_name(manifest_path.name + SIGNATURE_SUFFIX)


def stdin_is_terminal() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def gpg_command(
    gpg_binary: str,
    manifest_path: Path,
    signature_path: Path,
    key_id: str | None,
    interactive: bool = False,
) -> list[str]:
    command = [gpg_binary] if interactive else [gpg_binary, "--batch"]
    command.extend(["--yes", "--detach-sign"])
    if key_id:
        command.extend(["--local-user", key_id])
    command.extend(["--output", str(signature_path), str(manifest_path)])
    return command


def write_placeholder_signature(signature_path: Path) -> Path:
    """Create (or truncate) an empty signature file."""
    signature_path.write_bytes(b"")
    return signature_path


def _placeholder(signature_path: Path, message: str) -> SignatureResult:
    write_placeholder_signature(signature_path)
    _logger.warning(message, extra={"signature": signature_path.name})
    return SignatureResult(signature_path=signature_path, signed=False, message=message)


def sign_manifest(manifest_path: Path, config: SigningConfig) -> SignatureResult:
    """
    Produce `<manifest>.sig` next to the manifest.

    Raises:
        FileNotFoundError: If the manifest itself does not exist.
    """
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Manifest not found: {manifest_path}")

    signature_path = signature_path_for(manifest_path)

    if not config.enabled:
        return _placeholder(signature_path, "Signing disabled, creating unsigned placeholder signature")

    if shutil.which(config.gpg_binary) is None:
        return _placeholder(signature_path, "GPG not available, creating unsigned placeholder signature")

    _logger.info("Signing manifest with GPG", extra={"manifest": manifest_path.name})

    # gpg may leave a partial file behind on failure; start from nothing.
    safe_delete(signature_path)
    try:
        result = subprocess.run(
            gpg_command(
                config.gpg_binary,
                manifest_path,
                signature_path,
                config.key_id,
                interactive=stdin_is_terminal(),
            ),
            capture_output=True,
            text=True,
        )
    except OSError as err:
        return _placeholder(
            signature_path, f"GPG signing failed ({err}), creating placeholder signature"
        )

    if result.returncode != 0 or not signature_path.is_file():
        _logger.debug(
            "gpg output",
            extra={"exit_code": result.returncode, "stderr": result.stderr.strip()},
        )
        return _placeholder(signature_path, "GPG signing failed, creating placeholder signature")

    _logger.info(
        "Manifest signed",
        extra={"signature": signature_path.name, "size_bytes": signature_path.stat().st_size},
    )
    return SignatureResult(signature_path=signature_path, signed=True, message="signed")
