"""Catalog page fetching.

This module requests one page of TLE records from the remote catalog
and races each request against a per-page deadline.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx

from core.errors import CatalogHttpError, CatalogTimeoutError
from core.logging_config import get_logger
from core.types import CatalogEntry, PageResult

_LOGGER = get_logger(__name__)


class PageSource(Protocol):
    """Anything able to fetch one catalog page."""

    async def fetch_page(self, page: int) -> PageResult:
        ...


class CatalogPageFetcher:
    """Fetch pages from a paginated TLE catalog over HTTP."""

    def __init__(self, client: httpx.AsyncClient, catalog_url: str, page_size: int) -> None:
        self._client = client
        self._catalog_url = catalog_url
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch_page(self, page: int) -> PageResult:
        """Fetch and parse one catalog page.

        Args:
            page: One-based page number.

        Returns:
            Parsed page result.

        Raises:
            CatalogHttpError: On an invalid URL, transport failure, non-2xx status, or a body
                missing the consumed fields.
        """
        params = {"page": page, "page-size": self._page_size}
        try:
            response = await self._client.get(self._catalog_url, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            raise CatalogHttpError(
                f"Catalog request for page {page} failed: {error!r}", page
            ) from error
        if not response.is_success:
            raise CatalogHttpError(
                f"Catalog returned HTTP {response.status_code} for page {page}",
                page,
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as error:
            raise CatalogHttpError(
                f"Catalog returned invalid JSON for page {page}: {error}",
                page,
                status_code=response.status_code,
            ) from error
        return parse_page_payload(payload, page)


async def fetch_page_with_timeout(
    source: PageSource,
    page: int,
    timeout_seconds: float,
) -> PageResult:
    """Fetch one page, failing if it does not arrive before the deadline.

    Args:
        source: Page source to query.
        page: One-based page number.
        timeout_seconds: Deadline for this page.

    Returns:
        Parsed page result.

    Raises:
        CatalogTimeoutError: If the deadline passes first.
        CatalogHttpError: If the fetch itself fails.
    """
    try:
        return await asyncio.wait_for(source.fetch_page(page), timeout=timeout_seconds)
    except asyncio.TimeoutError as error:
        raise CatalogTimeoutError(
            f"Catalog request for page {page} timed out after {timeout_seconds:g}s",
            page,
        ) from error


def parse_page_payload(payload: Any, page: int) -> PageResult:
    """Parse a catalog JSON body into a page result.

    Only ``totalItems`` and the consumed member fields are checked. Members
    lacking TLE fields are skipped with a warning.

    Raises:
        CatalogHttpError: If the payload shape is unusable.
    """
    if not isinstance(payload, dict):
        raise CatalogHttpError(f"Catalog page {page} is not a JSON object", page)
    total_items = payload.get("totalItems")
    members = payload.get("member")
    if isinstance(total_items, bool) or not isinstance(total_items, int) or total_items < 0:
        raise CatalogHttpError(f"Catalog page {page} has no valid totalItems", page)
    if not isinstance(members, list):
        raise CatalogHttpError(f"Catalog page {page} has no member list", page)
    entries: list[CatalogEntry] = []
    for index, member in enumerate(members):
        entry = _parse_member(member)
        if entry is None:
            _LOGGER.warning("catalog_member_skipped", page=page, index=index)
            continue
        entries.append(entry)
    return PageResult(page=page, total_items=total_items, members=tuple(entries))


def _parse_member(member: Any) -> CatalogEntry | None:
    """Parse one catalog member, None when TLE fields are missing."""
    if not isinstance(member, dict):
        return None
    try:
        satellite_id = int(member["satelliteId"])
        line1 = str(member["line1"])
        line2 = str(member["line2"])
    except (KeyError, TypeError, ValueError):
        return None
    date = member.get("date")
    return CatalogEntry(
        name=str(member.get("name") or f"SAT-{satellite_id}").strip(),
        line1=line1,
        line2=line2,
        satellite_id=satellite_id,
        date=str(date) if date else None,
    )
