"""Bounded-concurrency batch scheduling for catalog pages.

This module splits the remaining page range into fixed-size batches,
fetches each batch concurrently, and advances the checkpoint only after
every page of a batch has settled. Failures inside a batch are captured
as typed page outcomes instead of propagating through the event loop.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Iterator

from core.constants import DEFAULT_UNIT_DIVISOR
from core.errors import CatalogFetchError, ConversionFailure, PersistenceError
from core.logging_config import get_logger
from core.types import (
    BatchReport,
    Cartesian,
    PageOutcome,
    PageResult,
    SatelliteRecord,
)
from ingest.checkpoint_store import PageCheckpointStore
from ingest.page_fetcher import PageSource, fetch_page_with_timeout
from store.record_payload import satellite_record_from_entry
from store.satellite_repository import SatelliteRepository
from transforms.coordinate_conversion import convert_tle_to_cartesian

_LOGGER = get_logger(__name__)

Converter = Callable[[str, str, datetime, float], Cartesian]


def build_batches(
    start_page: int,
    total_pages: int,
    concurrency_limit: int,
) -> Iterator[list[int]]:
    """Yield consecutive page batches in ascending order.

    Args:
        start_page: First page to visit.
        total_pages: Last page to visit.
        concurrency_limit: Maximum pages per batch.

    Yields:
        Page number lists ``[start .. min(start + limit - 1, total)]``.
    """
    if concurrency_limit < 1:
        raise ValueError(f"concurrency_limit must be >= 1, got {concurrency_limit}")
    page = max(start_page, 1)
    while page <= total_pages:
        end_page = min(page + concurrency_limit - 1, total_pages)
        yield list(range(page, end_page + 1))
        page += concurrency_limit


class BatchScheduler:
    """Drive page fetches batch by batch into a satellite repository."""

    def __init__(
        self,
        source: PageSource,
        repository: SatelliteRepository,
        checkpoint: PageCheckpointStore,
        at_instant: datetime,
        concurrency_limit: int,
        timeout_seconds: float,
        unit_divisor: float = DEFAULT_UNIT_DIVISOR,
        converter: Converter = convert_tle_to_cartesian,
    ) -> None:
        self._source = source
        self._repository = repository
        self._checkpoint = checkpoint
        self._at_instant = at_instant
        self._concurrency_limit = concurrency_limit
        self._timeout_seconds = timeout_seconds
        self._unit_divisor = unit_divisor
        self._converter = converter
        self._total_items: int | None = None

    async def run(
        self,
        start_page: int,
        total_pages: int,
        prefetched: dict[int, PageResult] | None = None,
        expected_total_items: int | None = None,
    ) -> list[BatchReport]:
        """Process every batch from ``start_page`` to ``total_pages``.

        Args:
            start_page: First page to fetch.
            total_pages: Page count fixed for this run.
            prefetched: Pages already fetched by the caller, reused as-is.
            expected_total_items: Catalog size the page count was derived from.

        Returns:
            One report per settled batch, in page order.
        """
        cached_pages = dict(prefetched or {})
        self._total_items = expected_total_items
        reports: list[BatchReport] = []
        for batch in build_batches(start_page, total_pages, self._concurrency_limit):
            _LOGGER.info("batch_started", first_page=batch[0], last_page=batch[-1])
            outcomes = await asyncio.gather(
                *(self._process_page(page, cached_pages.pop(page, None)) for page in batch)
            )
            reports.append(self._settle_batch(batch, outcomes))
        return reports

    async def _process_page(self, page: int, cached: PageResult | None) -> PageOutcome:
        """Fetch and convert one page, capturing any failure as an outcome."""
        if cached is not None:
            result = cached
        else:
            try:
                result = await fetch_page_with_timeout(
                    self._source, page, self._timeout_seconds
                )
            except CatalogFetchError as error:
                return PageOutcome(page=page, error=str(error))
        records, failures = self._convert_members(result)
        return PageOutcome(
            page=page,
            result=result,
            records=tuple(records),
            conversion_failures=failures,
        )

    def _convert_members(self, result: PageResult) -> tuple[list[SatelliteRecord], int]:
        """Convert each member of a page, skipping members without a position."""
        records: list[SatelliteRecord] = []
        failures = 0
        for entry in result.members:
            try:
                position = self._converter(
                    entry.line1, entry.line2, self._at_instant, self._unit_divisor
                )
                records.append(satellite_record_from_entry(entry, position))
            except ConversionFailure as error:
                failures += 1
                _LOGGER.warning(
                    "tle_conversion_failed",
                    page=result.page,
                    satellite_id=entry.satellite_id,
                    name=entry.name,
                    error=str(error),
                )
        return records, failures

    def _settle_batch(self, batch: list[int], outcomes: list[PageOutcome]) -> BatchReport:
        """Append settled records in page order and advance the checkpoint."""
        succeeded: list[int] = []
        failed: list[int] = []
        records_added = 0
        for outcome in sorted(outcomes, key=lambda item: item.page):
            if outcome.result is None:
                failed.append(outcome.page)
                _LOGGER.error("page_fetch_failed", page=outcome.page, error=outcome.error)
                continue
            self._check_catalog_size(outcome.result)
            self._repository.extend(outcome.records)
            records_added += len(outcome.records)
            succeeded.append(outcome.page)
        checkpoint_saved = self._save_checkpoint(batch[-1])
        _LOGGER.info(
            "batch_completed",
            first_page=batch[0],
            last_page=batch[-1],
            pages_succeeded=len(succeeded),
            pages_failed=len(failed),
            records_added=records_added,
            record_count=len(self._repository),
        )
        return BatchReport(
            pages=tuple(batch),
            succeeded=tuple(succeeded),
            failed=tuple(failed),
            records_added=records_added,
            checkpoint_saved=checkpoint_saved,
        )

    def _save_checkpoint(self, last_page: int) -> bool:
        try:
            self._checkpoint.save(last_page)
        except PersistenceError as error:
            _LOGGER.error("checkpoint_save_failed", last_page=last_page, error=str(error))
            return False
        return True

    def _check_catalog_size(self, result: PageResult) -> None:
        if self._total_items is None:
            self._total_items = result.total_items
            return
        if result.total_items != self._total_items:
            _LOGGER.warning(
                "catalog_size_changed",
                page=result.page,
                expected_total_items=self._total_items,
                reported_total_items=result.total_items,
            )
