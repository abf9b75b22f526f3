"""Migration library modules.

Components, in the order a run uses them: Paginator, Collector,
Transformer, ChunkedWriter, Committer.
"""

from backfill.lib.client import StoreClient
from backfill.lib.collector import Collector
from backfill.lib.commit import Committer
from backfill.lib.config import MigrationConfig, config_from_dict, load_config
from backfill.lib.errors import (
    ChunkWriteError,
    CommitError,
    ConfigurationError,
    FetchError,
    MigrationError,
)
from backfill.lib.migration import FieldMigration, run_migration
from backfill.lib.models import (
    ChunkFailure,
    CollectResult,
    CommitResult,
    Page,
    Record,
    RunResult,
    WriteInstruction,
    WriteOutcome,
)
from backfill.lib.pagination import INITIAL_CURSOR, CursorMarkPagination, Paginator
from backfill.lib.transform import Transformer, transform, transform_all
from backfill.lib.writer import ChunkedWriter, chunked, serialize_chunk

__all__ = [
    "StoreClient",
    "Collector",
    "Committer",
    "MigrationConfig",
    "config_from_dict",
    "load_config",
    "ChunkWriteError",
    "CommitError",
    "ConfigurationError",
    "FetchError",
    "MigrationError",
    "FieldMigration",
    "run_migration",
    "ChunkFailure",
    "CollectResult",
    "CommitResult",
    "Page",
    "Record",
    "RunResult",
    "WriteInstruction",
    "WriteOutcome",
    "INITIAL_CURSOR",
    "CursorMarkPagination",
    "Paginator",
    "Transformer",
    "transform",
    "transform_all",
    "ChunkedWriter",
    "chunked",
    "serialize_chunk",
]
