"""Python SDK for satellite ingest operations.

This module exposes high-level APIs for running ingest and reading
the persisted satellite store and checkpoint.
"""

from __future__ import annotations

import asyncio

from core.config import TleSyncConfig
from core.errors import PersistenceError
from core.types import IngestOptions, IngestSummary, SatelliteRecord
from ingest.checkpoint_store import PageCheckpointStore
from ingest.pipeline import ingest_satellites
from store.record_payload import loads_satellite_records
from store.satellite_repository import read_satellite_store


class TleSyncClient:
    """Primary SDK entry point for ingest and store reads."""

    def __init__(self, config: TleSyncConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or TleSyncConfig.from_env()

    @property
    def config(self) -> TleSyncConfig:
        return self._config

    def ingest(self, options: IngestOptions | None = None) -> IngestSummary:
        """Run ingestion now from a synchronous caller.

        Args:
            options: Ingest options, defaults when omitted.

        Returns:
            Run summary.

        Raises:
            TleSyncConfigError: If options are invalid.
        """
        return asyncio.run(self.ingest_async(options))

    async def ingest_async(self, options: IngestOptions | None = None) -> IngestSummary:
        """Run ingestion now from inside an event loop."""
        return await ingest_satellites(options or IngestOptions(), self._config)

    def read_store(self) -> str:
        """Return the raw serialized satellite store.

        Raises:
            StoreNotFoundError: If no ingest has flushed the store yet.
            PersistenceError: If the store cannot be read.
        """
        return read_satellite_store(self._config.satellite_store_path)

    def load_records(self) -> list[SatelliteRecord]:
        """Load and parse the persisted satellite records.

        Raises:
            PersistenceError: If the store is missing, unreadable, or malformed.
        """
        text = self.read_store()
        try:
            return loads_satellite_records(text)
        except ValueError as error:
            raise PersistenceError(
                f"Failed to parse satellite store at "
                f"{self._config.satellite_store_path}: {error}."
            ) from error

    def last_page(self) -> int:
        """Return the last completed catalog page, 0 before the first run."""
        return PageCheckpointStore(self._config.checkpoint_path).load()
