"""Data models for records, write instructions and run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from backfill.lib.errors import ChunkWriteError, CommitError, FetchError

__all__ = [
    "Record",
    "WriteInstruction",
    "Page",
    "CollectResult",
    "ChunkFailure",
    "WriteOutcome",
    "CommitResult",
    "RunResult",
]


@dataclass(frozen=True)
class Record:
    """A document fetched from the store, reduced to the fields we need."""

    id: str
    source_value: Optional[str] = None

    @classmethod
    def from_doc(
        cls,
        doc: Dict[str, Any],
        source_field: str,
        unique_key: str = "id",
    ) -> "Record":
        """Build a Record from a raw store document.

        The document's ``unique_key`` value becomes ``Record.id``. Extra
        fields are ignored. A missing or blank key and source values that
        are not scalars raise ValueError.
        """
        if not isinstance(doc, dict):
            raise ValueError(f"Expected a document object, got {type(doc).__name__}")

        raw_id = doc.get(unique_key)
        if raw_id is None or isinstance(raw_id, (dict, list, bool)):
            raise ValueError(f"Document has no usable '{unique_key}': {doc!r}")
        doc_id = str(raw_id)
        if not doc_id.strip():
            raise ValueError(f"Document has a blank '{unique_key}': {doc!r}")

        value = doc.get(source_field)
        # Some schemas return single-valued fields wrapped in a list
        if isinstance(value, list) and len(value) == 1:
            value = value[0]

        if value is None:
            source_value = None
        elif isinstance(value, str):
            source_value = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            source_value = str(value)
        else:
            raise ValueError(
                f"Document {doc_id} has a non-scalar '{source_field}': {value!r}"
            )

        return cls(id=doc_id, source_value=source_value)


@dataclass(frozen=True)
class WriteInstruction:
    """A set-update replacing ``target_field`` on one document."""

    id: str
    target_field: str
    values: Tuple[str, ...]
    unique_key: str = "id"

    def __post_init__(self) -> None:
        if len(self.values) != 1:
            raise ValueError(
                f"WriteInstruction for {self.id} must carry exactly one value, "
                f"got {len(self.values)}"
            )

    def to_update_doc(self) -> Dict[str, Any]:
        """Render the store's atomic-update form: {key, field: {set: [...]}}."""
        return {self.unique_key: self.id, self.target_field: {"set": list(self.values)}}


@dataclass
class Page:
    """One page of records and the cursor to request the next one."""

    records: List[Record]
    cursor: str
    next_cursor: str
    # Total matches reported by the store, when it reports one
    num_found: Optional[int] = None

    def __len__(self) -> int:
        return len(self.records)

    @property
    def cursor_advanced(self) -> bool:
        return self.next_cursor != self.cursor

    def is_terminal(self, page_size: int) -> bool:
        """Whether this page ends pagination.

        A page is terminal when it is empty, when the store returned the
        same cursor it was asked for, or when it is shorter than requested.
        """
        if not self.records:
            return True
        if not self.cursor_advanced:
            return True
        return self.is_short(page_size)

    def is_short(self, page_size: int) -> bool:
        return 0 < len(self.records) < page_size


@dataclass
class CollectResult:
    """Records gathered by the collector, with the error that stopped it."""

    records: List[Record] = field(default_factory=list)
    pages_fetched: int = 0
    error: Optional[FetchError] = None

    @property
    def complete(self) -> bool:
        return self.error is None


@dataclass
class ChunkFailure:
    """A chunk that the store rejected, kept for postmortem."""

    chunk_index: int
    size: int
    payload: str
    error: ChunkWriteError

    @property
    def status_code(self) -> Optional[int]:
        return self.error.status_code

    @property
    def response_body(self) -> Optional[str]:
        return self.error.response_body

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunk_index": self.chunk_index,
            "size": self.size,
            "status_code": self.status_code,
            "response_body": self.response_body,
            "payload": self.payload,
            "error": self.error.to_dict(),
        }


@dataclass
class WriteOutcome:
    """Tally produced by the chunked writer."""

    written: int = 0
    chunks_attempted: int = 0
    failures: List[ChunkFailure] = field(default_factory=list)


@dataclass
class CommitResult:
    """Outcome of the final commit."""

    ok: bool
    written: int = 0
    error: Optional[CommitError] = None

    @classmethod
    def success(cls, written: int) -> "CommitResult":
        return cls(ok=True, written=written)

    @classmethod
    def failure(cls, error: CommitError) -> "CommitResult":
        return cls(ok=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "written": self.written,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class RunResult:
    """Aggregate outcome of one migration run."""

    fetched: int = 0
    eligible: int = 0
    written: int = 0
    failures: List[ChunkFailure] = field(default_factory=list)
    pages_fetched: int = 0
    chunks_attempted: int = 0
    fetch_error: Optional[FetchError] = None
    commit: Optional[CommitResult] = None
    dry_run: bool = False
    duration_seconds: float = 0.0

    @property
    def unwritten(self) -> int:
        """Eligible records that were not acknowledged by the store."""
        if self.dry_run:
            return 0
        return self.eligible - self.written

    @property
    def committed(self) -> bool:
        return self.commit is not None and self.commit.ok

    @property
    def succeeded(self) -> bool:
        if self.fetch_error is not None or self.failures:
            return False
        return self.dry_run or self.committed

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "fetched": self.fetched,
            "eligible": self.eligible,
            "written": self.written,
            "unwritten": self.unwritten,
            "pages_fetched": self.pages_fetched,
            "chunks_attempted": self.chunks_attempted,
            "failures": [f.to_dict() for f in self.failures],
            "fetch_error": self.fetch_error.to_dict() if self.fetch_error else None,
            "commit": self.commit.to_dict() if self.commit else None,
            "dry_run": self.dry_run,
            "succeeded": self.succeeded,
            "duration_seconds": round(self.duration_seconds, 3),
        }
