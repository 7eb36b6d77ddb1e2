"""Shared typed models.

This module defines immutable data models used by the converter,
ingest, store, and caller layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from core.constants import (
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_PAGE_SIZE,
    DEFAULT_UNIT_DIVISOR,
)


@dataclass(frozen=True)
class Cartesian:
    """Scaled Cartesian position.

    Attributes:
        x: X axis value in kilometers divided by the unit divisor.
        y: Y axis value in kilometers divided by the unit divisor.
        z: Z axis value in kilometers divided by the unit divisor.
    """

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Geodetic:
    """Geodetic coordinates on the WGS84 ellipsoid.

    Attributes:
        latitude: Latitude in radians.
        longitude: Longitude in radians, wrapped into [-pi, pi].
        height: Height above the ellipsoid in kilometers.
    """

    latitude: float
    longitude: float
    height: float


@dataclass(frozen=True)
class CatalogEntry:
    """Raw catalog member consumed by the ingest pipeline.

    Attributes:
        name: Object name as published by the catalog.
        line1: First TLE line.
        line2: Second TLE line.
        satellite_id: NORAD catalog number.
        date: Catalog timestamp string, when present.
    """

    name: str
    line1: str
    line2: str
    satellite_id: int
    date: str | None = None


@dataclass(frozen=True)
class SatelliteRecord:
    """Catalog entry merged with its converted position.

    Attributes:
        name: Object name.
        line1: First TLE line.
        line2: Second TLE line.
        satellite_id: NORAD catalog number.
        epoch: UTC timestamp of the element set.
        position: Scaled Cartesian position, absent only for legacy rows.
    """

    name: str
    line1: str
    line2: str
    satellite_id: int
    epoch: datetime
    position: Cartesian | None


@dataclass(frozen=True)
class PageResult:
    """One fetched catalog page.

    Attributes:
        page: One-based page number.
        total_items: Catalog size reported with this page.
        members: Ordered raw entries of the page.
    """

    page: int
    total_items: int
    members: tuple[CatalogEntry, ...]


@dataclass(frozen=True)
class PageOutcome:
    """Settled result of one page task inside a batch.

    Attributes:
        page: One-based page number.
        result: Fetched page when the request succeeded.
        error: Failure description when the request failed.
        records: Converted records for the page, in member order.
        conversion_failures: Number of members skipped by the converter.
    """

    page: int
    result: PageResult | None = None
    error: str | None = None
    records: tuple[SatelliteRecord, ...] = ()
    conversion_failures: int = 0

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class BatchReport:
    """Aggregated outcome of one fully settled batch.

    Attributes:
        pages: Page numbers of the batch in ascending order.
        succeeded: Pages fetched successfully.
        failed: Pages that failed or timed out.
        records_added: Records appended to the repository.
        checkpoint_saved: Whether the checkpoint advanced to the last page.
    """

    pages: tuple[int, ...]
    succeeded: tuple[int, ...]
    failed: tuple[int, ...]
    records_added: int
    checkpoint_saved: bool


@dataclass(frozen=True)
class IngestOptions:
    """Ingest run options.

    Attributes:
        page_size: Number of catalog members requested per page.
        concurrency_limit: Maximum page fetches in flight per batch.
        unit_divisor: Divisor applied to every Cartesian axis.
        merge_policy: Duplicate handling, None to use the configured default.
        reset: Ignore and clear any saved checkpoint before running.
    """

    page_size: int = DEFAULT_PAGE_SIZE
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT
    unit_divisor: float = DEFAULT_UNIT_DIVISOR
    merge_policy: str | None = None
    reset: bool = False


@dataclass(frozen=True)
class IngestSummary:
    """Outcome of one ingest run reported to the caller.

    Attributes:
        success: Whether the run completed and the store was written.
        start_page: First page the scheduler was asked to fetch.
        total_pages: Page count derived from the first page.
        pages_fetched: Pages fetched successfully by the scheduler.
        pages_failed: Pages that failed or timed out.
        records_added: Records appended during this run.
        record_count: Records held by the repository at the end of the run.
        flushed: Whether the satellite store was rewritten.
    """

    success: bool
    start_page: int
    total_pages: int
    pages_fetched: int
    pages_failed: int
    records_added: int
    record_count: int
    flushed: bool
