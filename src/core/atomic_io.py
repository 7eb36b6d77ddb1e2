"""Atomic file replacement helpers.

This module writes durable state through a sibling temporary file
and an ``os.replace`` so readers never observe a partial write.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def write_text_atomic(target_path: Path, text: str) -> None:
    """Replace a file's content atomically.

    The replaced file gets the mode a plain ``open(path, "w")`` would
    create (``0o666`` minus the umask), not the owner-only mode of
    ``mkstemp``.

    Args:
        target_path: Destination file path.
        text: UTF-8 text to write.

    Raises:
        OSError: If the directory is not writable or the replace fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)
    file_descriptor, temp_name = tempfile.mkstemp(
        prefix=f".{target_path.name}.", suffix=".tmp", dir=target_path.parent
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, default_file_mode())
        os.replace(temp_path, target_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def default_file_mode() -> int:
    """Return ``0o666`` masked by the current process umask."""
    current_umask = os.umask(0)
    os.umask(current_umask)
    return 0o666 & ~current_umask
