"""Final durability commit."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from backfill.lib.client import StoreClient, response_text
from backfill.lib.errors import CommitError
from backfill.lib.models import CommitResult

__all__ = ["Committer"]


class Committer:
    """Issues the single commit that ends a run."""

    def __init__(self, client: StoreClient, logger: Optional[Any] = None) -> None:
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def commit(self, written: int) -> CommitResult:
        """Commit pending writes. Never raises for store errors.

        Args:
            written: Instructions acknowledged before the commit, carried
                into the successful result
        """
        try:
            self.client.commit()
        except httpx.HTTPError as exc:
            status_code, body = response_text(exc)
            error = CommitError(
                "Commit failed; written chunks may not be durable",
                cause=exc,
                status_code=status_code,
                response_body=body,
            )
            self.logger.error("%s", error.message, extra={"status_code": status_code})
            return CommitResult.failure(error)

        self.logger.info("Committed %d written instructions", written)
        return CommitResult.success(written)
