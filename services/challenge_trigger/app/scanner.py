"""
Paginated scan over the backing store.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Sequence

import structlog

from shared.storage.dynamodb import ScanFilter, ScanPage

logger = structlog.get_logger(__name__)

Record = Dict[str, Any]


class ScanPageSource(Protocol):
    """Anything that can return one page of a table scan."""

    async def scan_page(
        self,
        table: str,
        scan_filter: Optional[ScanFilter] = None,
        projection: Optional[Sequence[str]] = None,
        cursor: Optional[Dict[str, Any]] = None,
    ) -> ScanPage:
        """Return the page starting at ``cursor``."""


class PaginatedScanner:
    """Follows continuation cursors until the store reports no more pages.

    Pages are fetched one after another; a failing page request is not
    retried and propagates to the caller.
    """

    def __init__(self, store: ScanPageSource) -> None:
        self._store = store

    async def iter_pages(
        self,
        table: str,
        scan_filter: Optional[ScanFilter] = None,
        projection: Optional[Sequence[str]] = None,
    ) -> AsyncIterator[ScanPage]:
        cursor: Optional[Dict[str, Any]] = None
        page_number = 0
        while True:
            page = await self._store.scan_page(
                table,
                scan_filter=scan_filter,
                projection=projection,
                cursor=cursor,
            )
            page_number += 1
            logger.debug(
                "Scan page fetched",
                table=table,
                page=page_number,
                items=len(page.items),
                has_more=bool(page.next_cursor),
            )
            yield page
            if not page.next_cursor:
                break
            cursor = page.next_cursor

    async def scan(
        self,
        table: str,
        scan_filter: Optional[ScanFilter] = None,
        projection: Optional[Sequence[str]] = None,
    ) -> List[Record]:
        """Return every matching record across all pages, in page order."""
        records: List[Record] = []
        async for page in self.iter_pages(table, scan_filter=scan_filter, projection=projection):
            records.extend(page.items)
        return records
