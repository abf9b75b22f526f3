"""Bulk copy of a single-valued field into a multi-valued field.

Walks every document in a store collection that carries the source field
(cursor-mark pagination), turns each non-blank value into a set-update of
the target field, submits the updates in chunks and commits once.

Usage:
    python -m backfill --base-url http://localhost:8983/solr/products
    python -m backfill --config products.yaml --dry-run
"""

from backfill.lib.config import MigrationConfig, load_config
from backfill.lib.migration import FieldMigration, run_migration
from backfill.lib.models import RunResult

__version__ = "1.0.0"

__all__ = [
    "MigrationConfig",
    "load_config",
    "FieldMigration",
    "run_migration",
    "RunResult",
]
