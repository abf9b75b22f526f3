"""Cursor-mark pagination over the store's select handler.

The store hands back an opaque ``nextCursorMark`` with every page. Sorting
on the unique key makes the walk deterministic: no record is skipped or
returned twice even if pages are requested minutes apart.

Typical exchange:
    GET /select?q=category:[* TO *]&sort=id asc&rows=20&cursorMark=*
    -> {"response": {"docs": [...]}, "nextCursorMark": "AoE..."}
    GET /select?...&cursorMark=AoE...
    -> {"response": {"docs": []}, "nextCursorMark": "AoE..."}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from backfill.lib.client import StoreClient, response_text
from backfill.lib.errors import FetchError
from backfill.lib.models import Page, Record

logger = logging.getLogger(__name__)

__all__ = [
    "INITIAL_CURSOR",
    "CursorMarkPagination",
    "Paginator",
]

# Sentinel the store accepts as "start from the beginning"
INITIAL_CURSOR = "*"

# Select handler parameter names
QUERY_PARAM = "q"
FIELDS_PARAM = "fl"
ROWS_PARAM = "rows"
SORT_PARAM = "sort"
CURSOR_PARAM = "cursorMark"


@dataclass
class CursorMarkPagination:
    """Query parameters for a cursor-mark walk over one field.

    Example:
        config = CursorMarkPagination(source_field="category", page_size=50)
        config.build_params("*")
        # {'q': 'category:[* TO *]', 'fl': 'id,category', 'rows': 50, ...}
    """

    source_field: str
    page_size: int = 20
    unique_key: str = "id"

    @property
    def query(self) -> str:
        """Match documents where the source field has any value."""
        return f"{self.source_field}:[* TO *]"

    @property
    def sort(self) -> str:
        return f"{self.unique_key} asc"

    def build_params(self, cursor: str) -> Dict[str, Any]:
        """Build query parameters for the page starting at ``cursor``."""
        fields = [self.unique_key]
        if self.source_field != self.unique_key:
            fields.append(self.source_field)
        return {
            QUERY_PARAM: self.query,
            FIELDS_PARAM: ",".join(fields),
            ROWS_PARAM: self.page_size,
            SORT_PARAM: self.sort,
            CURSOR_PARAM: cursor,
            "wt": "json",
        }

    @staticmethod
    def describe(cursor: str) -> str:
        if cursor == INITIAL_CURSOR:
            return "(first page)"
        return f"(cursor={cursor[:20]}...)" if len(cursor) > 20 else f"(cursor={cursor})"


class Paginator:
    """Fetches single pages of matching records from the store."""

    def __init__(
        self,
        client: StoreClient,
        pagination: CursorMarkPagination,
    ) -> None:
        self.client = client
        self.pagination = pagination

    @property
    def page_size(self) -> int:
        return self.pagination.page_size

    def describe(self, cursor: str) -> str:
        """Short label for the page at ``cursor``, for log lines."""
        return self.pagination.describe(cursor)

    def fetch_page(self, cursor: str) -> Page:
        """Fetch the page that starts at ``cursor``.

        Raises:
            FetchError: On transport errors, non-2xx responses, or a
                response that does not look like a select result.
        """
        params = self.pagination.build_params(cursor)
        try:
            data = self.client.select(params)
        except httpx.HTTPError as exc:
            status_code, body = response_text(exc)
            raise FetchError(
                f"Failed to fetch page {self.describe(cursor)}",
                cursor=cursor,
                cause=exc,
                status_code=status_code,
                response_body=body,
            ) from exc
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            raise FetchError(
                "Store returned a response that is not valid JSON",
                cursor=cursor,
                cause=exc,
            ) from exc

        try:
            docs, next_cursor, num_found = self._parse(data)
            records = [
                Record.from_doc(doc, self.pagination.source_field, self.pagination.unique_key)
                for doc in docs
            ]
        except ValueError as exc:
            raise FetchError(
                f"Unexpected select response {self.describe(cursor)}",
                cursor=cursor,
                cause=exc,
            ) from exc

        logger.debug(
            "Page %s returned %d docs, next cursor %s",
            self.describe(cursor),
            len(records),
            next_cursor,
        )
        return Page(
            records=records,
            cursor=cursor,
            next_cursor=next_cursor,
            num_found=num_found,
        )

    @staticmethod
    def _parse(data: Any) -> tuple[List[Any], str, Optional[int]]:
        """Pull the documents, next cursor and match count out of a select body."""
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        response = data.get("response")
        if not isinstance(response, dict):
            raise ValueError("Response has no 'response' object")

        docs = response.get("docs", [])
        if not isinstance(docs, list):
            raise ValueError("'response.docs' is not a list")

        next_cursor = data.get("nextCursorMark")
        if not isinstance(next_cursor, str) or not next_cursor:
            raise ValueError("Response has no 'nextCursorMark'")

        num_found = response.get("numFound")
        if isinstance(num_found, bool) or not isinstance(num_found, int):
            num_found = None

        return docs, next_cursor, num_found
