"""Ingest checkpoint persistence.

This module stores the last fully settled catalog page so an
interrupted ingest resumes where it stopped instead of page one.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.atomic_io import write_text_atomic
from core.errors import PersistenceError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class PageCheckpointStore:
    """Filesystem-backed page checkpoint store."""

    def __init__(self, checkpoint_path: Path) -> None:
        self._checkpoint_path = checkpoint_path

    @property
    def path(self) -> Path:
        return self._checkpoint_path

    def load(self) -> int:
        """Return the last completed page, 0 when no prior run exists.

        Raises:
            PersistenceError: If the checkpoint file is unreadable or malformed.
        """
        if not self._checkpoint_path.exists():
            return 0
        try:
            payload = json.loads(self._checkpoint_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise PersistenceError(
                f"Failed to read ingest checkpoint at {self._checkpoint_path}: {error}. "
                "Delete the checkpoint file or run ingest with --reset."
            ) from error
        last_page = payload.get("lastPage") if isinstance(payload, dict) else None
        if isinstance(last_page, bool) or not isinstance(last_page, int) or last_page < 0:
            raise PersistenceError(
                f"Invalid ingest checkpoint payload at {self._checkpoint_path}: "
                "expected {\"lastPage\": <non-negative integer>}. "
                "Delete the checkpoint file or run ingest with --reset."
            )
        return last_page

    def save(self, page: int) -> None:
        """Persist the last completed page atomically.

        Args:
            page: Last page number of a fully settled batch.

        Raises:
            PersistenceError: If the page is negative or the write fails.
        """
        if page < 0:
            raise PersistenceError(f"Cannot save negative checkpoint page {page}.")
        try:
            write_text_atomic(self._checkpoint_path, json.dumps({"lastPage": page}))
        except OSError as error:
            raise PersistenceError(
                f"Failed to write ingest checkpoint at {self._checkpoint_path}: {error}."
            ) from error
        _LOGGER.debug("checkpoint_saved", last_page=page, path=str(self._checkpoint_path))

    def clear(self) -> None:
        """Remove the checkpoint so the next run starts from page one."""
        try:
            self._checkpoint_path.unlink(missing_ok=True)
        except OSError as error:
            raise PersistenceError(
                f"Failed to remove ingest checkpoint at {self._checkpoint_path}: {error}."
            ) from error
