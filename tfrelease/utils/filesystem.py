# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations for tfrelease.

Atomic writes go to a temporary file in the same directory as the target and
are then renamed over it. Rename on the same filesystem is atomic on POSIX,
so a crash leaves a hidden temp file behind instead of a half-written
manifest.
"""

import tempfile
from pathlib import Path

TEMP_PREFIX = ".tfrelease_tmp_"


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Replace `target_path` with `content` atomically.

    Any previous content is discarded entirely, never appended to.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False because we need the file to survive closing so we can rename it.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=TEMP_PREFIX,
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def staging_path(target_path: Path) -> Path:
    """Hidden sibling path a tool can write to before the result is moved into place."""
    return target_path.with_name(f"{TEMP_PREFIX}{target_path.name}")


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    Raises:
        OSError: If the file exists but can't be deleted (permissions, etc).
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False
