"""Exhaustive page collection.

Walks the paginator from the initial cursor until the store signals the
end of results, holding every record in memory. Memory is the only bound
on the number of records collected.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from backfill.lib.errors import FetchError
from backfill.lib.models import CollectResult, Page, Record
from backfill.lib.pagination import INITIAL_CURSOR, Paginator

__all__ = ["Collector"]


class Collector:
    """Accumulates every page returned by a Paginator."""

    def __init__(self, paginator: Paginator, logger: Optional[Any] = None) -> None:
        self.paginator = paginator
        self.logger = logger or logging.getLogger(__name__)

    def collect_all(self) -> CollectResult:
        """Fetch pages until the result set is exhausted.

        Stops on an empty page, on a cursor that did not advance, or on a
        page shorter than the requested size. A FetchError stops the walk
        and is returned alongside the records gathered so far.
        """
        records: List[Record] = []
        pages_fetched = 0
        cursor = INITIAL_CURSOR
        page_size = self.paginator.page_size

        while True:
            try:
                page = self.paginator.fetch_page(cursor)
            except FetchError as exc:
                self.logger.error(
                    "Fetch failed after %d pages (%d records collected): %s",
                    pages_fetched,
                    len(records),
                    exc.message,
                    extra={"cursor": exc.cursor, "status_code": exc.status_code},
                )
                return CollectResult(records=records, pages_fetched=pages_fetched, error=exc)

            pages_fetched += 1
            records.extend(page.records)
            self.logger.info(
                "Fetched %d records %s (total: %d)",
                len(page),
                self.paginator.describe(cursor),
                len(records),
            )

            if page.is_terminal(page_size):
                if not page.cursor_advanced and page.records:
                    self.logger.debug("Cursor did not advance; treating as end of results")
                elif page.is_short(page_size):
                    self._check_short_page(page, page_size, len(records))
                break

            cursor = page.next_cursor

        self.logger.info(
            "Collected %d records in %d pages",
            len(records),
            pages_fetched,
        )
        return CollectResult(records=records, pages_fetched=pages_fetched)

    def _check_short_page(self, page: Page, page_size: int, collected: int) -> None:
        """Warn when a short page may have ended the walk too early.

        A store or proxy that caps ``rows`` below the requested page size
        returns short pages while more results remain. The store's match
        count tells the two cases apart when it is reported.
        """
        if page.num_found is not None and collected >= page.num_found:
            return
        self.logger.warning(
            "Stopped on a short page (%d of %d requested) while the cursor still advanced; "
            "collected %d of %s matching records. Check for a row cap on the store.",
            len(page),
            page_size,
            collected,
            page.num_found if page.num_found is not None else "an unknown number of",
            extra={"cursor": page.cursor, "num_found": page.num_found},
        )
