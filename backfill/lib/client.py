"""HTTP client for the document store.

Wraps an ``httpx.Client`` and exposes the three requests the migration
needs: a cursor-paged select, a JSON bulk update and a commit. Errors
are not caught here; each caller maps them onto its own error type.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
import requests_toolbelt
from requests_toolbelt.utils.user_agent import user_agent

logger = logging.getLogger(__name__)

__all__ = ["StoreClient", "JSON_CONTENT_TYPE", "response_text"]

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

_USER_AGENT = user_agent(
    "multivalue-backfill",
    "1.0.0",
    extras=[
        ("httpx", getattr(httpx, "__version__", "unknown")),
        ("requests-toolbelt", getattr(requests_toolbelt, "__version__", "unknown")),
    ],
)


def response_text(exc: BaseException) -> tuple[Optional[int], Optional[str]]:
    """Pull status code and body out of an httpx error, when it has them."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        try:
            body = response.text
        except httpx.ResponseNotRead:
            body = None
        return response.status_code, body
    return None, None


class StoreClient:
    """Blocking client for a Solr-style select/update HTTP API.

    Example:
        with StoreClient("http://localhost:8983/solr/products") as store:
            data = store.select({"q": "*:*", "rows": 10})
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Collection URL; ``/select`` and ``/update`` are appended
            timeout: Per-request timeout in seconds
            client: Pre-built httpx client (tests pass one with a mock
                transport). A client passed in is not closed by ``close()``.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = {"User-Agent": _USER_AGENT, "Accept": "application/json"}

    def _url(self, handler: str) -> str:
        return f"{self.base_url}/{handler}"

    def select(self, params: Dict[str, Any]) -> Any:
        """Run a select query and return the decoded JSON body."""
        logger.debug("GET %s params=%s", self._url("select"), params)
        response = self._client.get(
            self._url("select"),
            params=params,
            headers=self._headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def update(self, body: bytes) -> httpx.Response:
        """POST a UTF-8 encoded JSON array of update documents."""
        logger.debug("POST %s (%d bytes)", self._url("update"), len(body))
        response = self._client.post(
            self._url("update"),
            content=body,
            headers={**self._headers, "Content-Type": JSON_CONTENT_TYPE},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def commit(self) -> httpx.Response:
        """POST an empty-bodied commit request."""
        logger.debug("POST %s?commit=true", self._url("update"))
        response = self._client.post(
            self._url("update"),
            params={"commit": "true"},
            content=b"",
            headers=self._headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
