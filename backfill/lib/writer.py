"""Chunked submission of write instructions.

Instructions are sent in consecutive, fixed-size chunks, one request per
chunk, in the order they were fetched. A rejected chunk is recorded and
skipped; it never stops the chunks after it.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Iterator, List, Optional, Sequence, TypeVar

import httpx

from backfill.lib.client import StoreClient, response_text
from backfill.lib.errors import ChunkWriteError, excerpt
from backfill.lib.models import ChunkFailure, WriteInstruction, WriteOutcome

__all__ = ["ChunkedWriter", "chunked", "serialize_chunk"]

T = TypeVar("T")

DEFAULT_UPDATE_BATCH_SIZE = 10


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def serialize_chunk(chunk: Sequence[WriteInstruction]) -> str:
    """Render a chunk as the store's JSON bulk-update array."""
    return json.dumps([instruction.to_update_doc() for instruction in chunk], ensure_ascii=False)


class ChunkedWriter:
    """Submits write instructions to the store chunk by chunk."""

    def __init__(
        self,
        client: StoreClient,
        update_batch_size: int = DEFAULT_UPDATE_BATCH_SIZE,
        logger: Optional[Any] = None,
    ) -> None:
        if update_batch_size < 1:
            raise ValueError(f"update_batch_size must be at least 1, got {update_batch_size}")
        self.client = client
        self.update_batch_size = update_batch_size
        self.logger = logger or logging.getLogger(__name__)

    def write_all(self, instructions: Sequence[WriteInstruction]) -> WriteOutcome:
        """Submit every instruction and tally the result.

        Returns:
            WriteOutcome with the number of acknowledged instructions, the
            number of chunks attempted, and one ChunkFailure per rejected chunk
        """
        outcome = WriteOutcome()
        total_chunks = math.ceil(len(instructions) / self.update_batch_size)

        for index, chunk in enumerate(chunked(instructions, self.update_batch_size), start=1):
            outcome.chunks_attempted += 1
            payload = serialize_chunk(chunk)

            failure = self._submit(index, chunk, payload)
            if failure is not None:
                outcome.failures.append(failure)
                continue

            outcome.written += len(chunk)
            self.logger.info(
                "Wrote chunk %d/%d (%d instructions, total written: %d)",
                index,
                total_chunks,
                len(chunk),
                outcome.written,
            )

        if outcome.failures:
            self.logger.warning(
                "%d of %d chunks failed; %d of %d instructions written",
                len(outcome.failures),
                outcome.chunks_attempted,
                outcome.written,
                len(instructions),
            )
        return outcome

    def _submit(
        self,
        index: int,
        chunk: Sequence[WriteInstruction],
        payload: str,
    ) -> Optional[ChunkFailure]:
        """Send one chunk. Returns a ChunkFailure instead of raising."""
        try:
            self.client.update(payload.encode("utf-8"))
        except httpx.HTTPError as exc:
            status_code, body = response_text(exc)
            error = ChunkWriteError(
                f"Chunk {index} was not written",
                chunk_index=index,
                chunk_size=len(chunk),
                cause=exc,
                status_code=status_code,
                response_body=body,
            )
            self.logger.error(
                "Chunk %d failed (status=%s): %s; payload: %s",
                index,
                status_code,
                excerpt(body) or str(exc),
                excerpt(payload),
                extra={"chunk_index": index, "chunk_size": len(chunk)},
            )
            return ChunkFailure(chunk_index=index, size=len(chunk), payload=payload, error=error)
        return None
