"""Ingest orchestration for the satellite catalog.

This module coordinates checkpoint reads, the page-count probe,
batch scheduling, and the final store flush for resumable ingest runs.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable

import httpx

from core.config import TleSyncConfig
from core.constants import CATALOG_USER_AGENT
from core.errors import TleSyncConfigError, TleSyncError
from core.logging_config import get_logger
from core.types import BatchReport, IngestOptions, IngestSummary
from ingest.batch_scheduler import BatchScheduler, Converter
from ingest.checkpoint_store import PageCheckpointStore
from ingest.page_fetcher import CatalogPageFetcher, fetch_page_with_timeout
from store.satellite_repository import SatelliteRepository
from transforms.coordinate_conversion import convert_tle_to_cartesian

_LOGGER = get_logger(__name__)


class IngestPipelineRunner:
    """Stateful runner for one resumable ingest run."""

    def __init__(
        self,
        options: IngestOptions,
        config: TleSyncConfig,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] | None = None,
        converter: Converter = convert_tle_to_cartesian,
    ) -> None:
        _validate_options(options)
        self._options = options
        self._config = config
        self._client = client
        self._clock = clock or _utc_now
        self._converter = converter
        self._checkpoint = PageCheckpointStore(config.checkpoint_path)
        self._repository = SatelliteRepository(
            config.satellite_store_path,
            options.merge_policy or config.merge_policy,
        )
        self._summary: IngestSummary | None = None

    @property
    def repository(self) -> SatelliteRepository:
        return self._repository

    @property
    def summary(self) -> IngestSummary | None:
        """Summary of the last completed run, None before ``run``."""
        return self._summary

    async def run(self) -> bool:
        """Execute one ingest run and return overall success."""
        summary = await self.run_with_summary()
        return summary.success

    async def run_with_summary(self) -> IngestSummary:
        """Execute one ingest run and return its summary."""
        if self._client is not None:
            return await self._run_with_client(self._client)
        async with build_catalog_client(self._config) as client:
            return await self._run_with_client(client)

    async def _run_with_client(self, client: httpx.AsyncClient) -> IngestSummary:
        fetcher = CatalogPageFetcher(client, self._config.catalog_url, self._options.page_size)
        start_page = 1
        total_pages = 0
        reports: list[BatchReport] = []
        succeeded = False
        try:
            start_page = self._prepare_start_page()
            probe = await fetch_page_with_timeout(
                fetcher, 1, self._config.request_timeout_seconds
            )
            total_pages = math.ceil(probe.total_items / self._options.page_size)
            _LOGGER.info(
                "ingest_started",
                catalog_url=self._config.catalog_url,
                start_page=start_page,
                total_pages=total_pages,
                total_items=probe.total_items,
                page_size=self._options.page_size,
            )
            scheduler = BatchScheduler(
                source=fetcher,
                repository=self._repository,
                checkpoint=self._checkpoint,
                at_instant=self._clock(),
                concurrency_limit=self._options.concurrency_limit,
                timeout_seconds=self._config.request_timeout_seconds,
                unit_divisor=self._options.unit_divisor,
                converter=self._converter,
            )
            reports = await scheduler.run(
                start_page,
                total_pages,
                prefetched={1: probe} if start_page <= 1 else None,
                expected_total_items=probe.total_items,
            )
            succeeded = True
        except TleSyncError as error:
            _LOGGER.error("ingest_failed", start_page=start_page, error=str(error))
        finally:
            flushed = self._flush_accumulated()
        succeeded = succeeded and (flushed or len(self._repository) == 0)
        self._summary = _build_summary(
            succeeded, start_page, total_pages, reports, len(self._repository), flushed
        )
        _log_ingest_completion(self._summary)
        return self._summary

    def _flush_accumulated(self) -> bool:
        """Write whatever the run accumulated, False when nothing was written."""
        if len(self._repository) == 0:
            return False
        return self._repository.flush()

    def _prepare_start_page(self) -> int:
        """Resolve the first page and seed the repository for this run."""
        if self._options.reset:
            self._checkpoint.clear()
            return 1
        start_page = self._checkpoint.load() + 1
        self._repository.load_existing()
        return start_page


async def ingest_satellites(
    options: IngestOptions,
    config: TleSyncConfig,
    client: httpx.AsyncClient | None = None,
) -> IngestSummary:
    """Run the ingest pipeline and persist the satellite store.

    Args:
        options: Ingest run options.
        config: Runtime configuration.
        client: Optional HTTP client, created per run when omitted.

    Returns:
        Summary of the run, ``success`` is False when the probe, the
        scheduler, or the final flush failed.

    Raises:
        TleSyncConfigError: If run options are invalid.
    """
    runner = IngestPipelineRunner(options, config, client=client)
    return await runner.run_with_summary()


def build_catalog_client(
    config: TleSyncConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the HTTP client used when the caller does not inject one.

    The client timeout matches the per-page deadline so that
    ``fetch_page_with_timeout`` decides when a slow page has failed.
    """
    return httpx.AsyncClient(
        headers={"User-Agent": CATALOG_USER_AGENT},
        follow_redirects=True,
        timeout=config.request_timeout_seconds,
        transport=transport,
    )


def _validate_options(options: IngestOptions) -> None:
    """Reject run options the scheduler cannot honor."""
    if options.page_size < 1:
        raise TleSyncConfigError(
            f"Invalid page size {options.page_size}: expected a positive integer."
        )
    if options.concurrency_limit < 1:
        raise TleSyncConfigError(
            f"Invalid concurrency limit {options.concurrency_limit}: "
            "expected a positive integer."
        )
    if options.unit_divisor <= 0:
        raise TleSyncConfigError(
            f"Invalid unit divisor {options.unit_divisor}: expected a positive number."
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _build_summary(
    succeeded: bool,
    start_page: int,
    total_pages: int,
    reports: list[BatchReport],
    record_count: int,
    flushed: bool,
) -> IngestSummary:
    """Aggregate batch reports into a run summary."""
    return IngestSummary(
        success=succeeded,
        start_page=start_page,
        total_pages=total_pages,
        pages_fetched=sum(len(report.succeeded) for report in reports),
        pages_failed=sum(len(report.failed) for report in reports),
        records_added=sum(report.records_added for report in reports),
        record_count=record_count,
        flushed=flushed,
    )


def _log_ingest_completion(summary: IngestSummary) -> None:
    """Log pipeline completion with contextual metadata."""
    _LOGGER.info(
        "ingest_completed",
        success=summary.success,
        start_page=summary.start_page,
        total_pages=summary.total_pages,
        pages_fetched=summary.pages_fetched,
        pages_failed=summary.pages_failed,
        records_added=summary.records_added,
        record_count=summary.record_count,
        flushed=summary.flushed,
    )
