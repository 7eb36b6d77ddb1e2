"""Satellite record accumulator and durable store.

This module owns the in-memory record set of an ingest run and
rewrites the satellite store wholesale on each flush.
"""

from __future__ import annotations

import threading
from pathlib import Path

from core.atomic_io import write_text_atomic
from core.config import validate_merge_policy
from core.constants import DEFAULT_MERGE_POLICY, MERGE_POLICY_UPSERT
from core.errors import PersistenceError, StoreNotFoundError
from core.logging_config import get_logger
from core.types import SatelliteRecord
from store.record_payload import dumps_satellite_records, loads_satellite_records

_LOGGER = get_logger(__name__)


class SatelliteRepository:
    """In-memory satellite accumulator backed by a JSON array file.

    With the ``append`` merge policy every record is kept, so re-ingesting
    pages adds duplicates. With ``upsert`` a record replaces the one holding
    the same satellite id in place.
    """

    def __init__(self, store_path: Path, merge_policy: str = DEFAULT_MERGE_POLICY) -> None:
        self._store_path = store_path
        self._merge_policy = validate_merge_policy(merge_policy)
        self._records: list[SatelliteRecord] = []
        self._index_by_id: dict[int, int] = {}
        self._lock = threading.Lock()

    @property
    def store_path(self) -> Path:
        return self._store_path

    @property
    def merge_policy(self) -> str:
        return self._merge_policy

    @property
    def records(self) -> tuple[SatelliteRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def append(self, record: SatelliteRecord) -> None:
        """Add one record according to the merge policy."""
        with self._lock:
            self._append_unlocked(record)

    def extend(self, records: tuple[SatelliteRecord, ...] | list[SatelliteRecord]) -> None:
        """Add records in order under a single lock acquisition."""
        with self._lock:
            for record in records:
                self._append_unlocked(record)

    def load_existing(self) -> int:
        """Seed the accumulator from the store on disk.

        Returns:
            Number of records loaded, 0 when the store does not exist yet.

        Raises:
            PersistenceError: If the store exists but cannot be parsed.
        """
        try:
            text = read_satellite_store(self._store_path)
        except StoreNotFoundError:
            return 0
        try:
            existing_records = loads_satellite_records(text)
        except ValueError as error:
            raise PersistenceError(
                f"Failed to parse satellite store at {self._store_path}: {error}. "
                "Fix or delete the store file and retry ingest."
            ) from error
        self.extend(existing_records)
        _LOGGER.info(
            "satellite_store_loaded",
            path=str(self._store_path),
            record_count=len(existing_records),
        )
        return len(existing_records)

    def flush(self) -> bool:
        """Rewrite the store with the full accumulated set.

        Returns:
            True when the write completed, False otherwise.
        """
        records = list(self.records)
        try:
            write_text_atomic(self._store_path, dumps_satellite_records(records))
        except OSError as error:
            _LOGGER.error(
                "satellite_flush_failed",
                path=str(self._store_path),
                record_count=len(records),
                error=str(error),
            )
            return False
        _LOGGER.info(
            "satellites_flushed",
            path=str(self._store_path),
            record_count=len(records),
        )
        return True

    def _append_unlocked(self, record: SatelliteRecord) -> None:
        if self._merge_policy == MERGE_POLICY_UPSERT:
            existing_index = self._index_by_id.get(record.satellite_id)
            if existing_index is not None:
                self._records[existing_index] = record
                return
            self._index_by_id[record.satellite_id] = len(self._records)
        self._records.append(record)


def read_satellite_store(store_path: Path) -> str:
    """Return the raw serialized satellite store.

    Args:
        store_path: Store file path.

    Returns:
        UTF-8 decoded store content.

    Raises:
        StoreNotFoundError: If the store has never been written.
        PersistenceError: If the store cannot be read.
    """
    if not store_path.exists():
        raise StoreNotFoundError(
            f"Satellite store not found at {store_path}. Run ingest to create it."
        )
    try:
        return store_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise PersistenceError(
            f"Failed to read satellite store at {store_path}: {error}."
        ) from error
