"""Field migration run.

Copies a single-valued source field into a multi-valued target field on
every matching document:

    collect (all pages) -> transform -> write (chunk by chunk) -> commit

Example:
    from backfill.lib.config import MigrationConfig
    from backfill.lib.migration import FieldMigration

    config = MigrationConfig(
        base_url="http://localhost:8983/solr/products",
        source_field="category",
        target_field="categories",
    )
    result = FieldMigration(config).run()
    print(result.written, result.committed)

Runs carry no retry logic. Updates use "set" semantics, so re-running
the whole migration is the way to recover from partial failures.
"""

from __future__ import annotations

import time
from typing import Any, Optional

from backfill.lib.client import StoreClient
from backfill.lib.collector import Collector
from backfill.lib.commit import Committer
from backfill.lib.config import MigrationConfig
from backfill.lib.logging import get_migration_logger
from backfill.lib.models import RunResult
from backfill.lib.pagination import CursorMarkPagination, Paginator
from backfill.lib.transform import Transformer
from backfill.lib.writer import ChunkedWriter

__all__ = ["FieldMigration", "run_migration"]


class FieldMigration:
    """Runs one migration against one store collection."""

    def __init__(
        self,
        config: MigrationConfig,
        *,
        client: Optional[StoreClient] = None,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the migration.

        Args:
            config: Validated migration settings
            client: Store client to use; one is created (and closed after
                the run) from ``config`` when omitted
            logger: Logger receiving run events; defaults to a
                MigrationLogger carrying the run's field names
        """
        self.config = config
        self._client = client
        self.logger = logger or get_migration_logger(
            __name__,
            base_url=config.base_url,
            source_field=config.source_field,
            target_field=config.target_field,
        )

    def run(self, *, dry_run: bool = False) -> RunResult:
        """Execute the migration.

        Args:
            dry_run: Fetch and transform only; send no updates or commit

        Returns:
            RunResult with counts, chunk failures, fetch error and commit outcome
        """
        if self._client is not None:
            return self._run(self._client, dry_run)

        with StoreClient(self.config.base_url, timeout=self.config.timeout) as client:
            return self._run(client, dry_run)

    def _run(self, client: StoreClient, dry_run: bool) -> RunResult:
        started = time.monotonic()
        result = RunResult(dry_run=dry_run)

        self.logger.info(
            "Migrating %s -> %s at %s (page size %d, batch size %d)%s",
            self.config.source_field,
            self.config.target_field,
            self.config.base_url,
            self.config.page_size,
            self.config.update_batch_size,
            " [DRY RUN]" if dry_run else "",
        )

        paginator = Paginator(
            client,
            CursorMarkPagination(
                source_field=self.config.source_field,
                page_size=self.config.page_size,
                unique_key=self.config.unique_key,
            ),
        )
        collected = Collector(paginator, logger=self.logger).collect_all()
        result.fetched = len(collected.records)
        result.pages_fetched = collected.pages_fetched
        result.fetch_error = collected.error
        if collected.error is not None:
            self.logger.warning(
                "Continuing with %d records collected before the fetch error",
                result.fetched,
            )

        transformer = Transformer(self.config.target_field, self.config.unique_key)
        instructions = transformer.transform_all(collected.records)
        result.eligible = len(instructions)
        skipped = result.fetched - result.eligible
        if skipped:
            self.logger.info("Skipped %d records with a blank %s", skipped, self.config.source_field)

        if dry_run:
            self.logger.info(
                "[DRY RUN] Would write %d instructions in chunks of %d",
                result.eligible,
                self.config.update_batch_size,
            )
            result.duration_seconds = time.monotonic() - started
            return result

        writer = ChunkedWriter(client, self.config.update_batch_size, logger=self.logger)
        outcome = writer.write_all(instructions)
        result.written = outcome.written
        result.chunks_attempted = outcome.chunks_attempted
        result.failures = outcome.failures

        # Every chunk has resolved by now, failed or not
        result.commit = Committer(client, logger=self.logger).commit(result.written)

        result.duration_seconds = time.monotonic() - started
        self._log_metrics(result)
        return result

    def _log_metrics(self, result: RunResult) -> None:
        metric = getattr(self.logger, "metric", None)
        if metric is None:
            return
        metric("records_fetched", result.fetched, unit="records")
        metric("records_eligible", result.eligible, unit="records")
        metric("records_written", result.written, unit="records")
        metric("chunks_failed", len(result.failures), unit="chunks")
        metric("duration_seconds", round(result.duration_seconds, 3), unit="seconds")


def run_migration(config: MigrationConfig, *, dry_run: bool = False) -> RunResult:
    """Convenience wrapper: build a FieldMigration and run it."""
    return FieldMigration(config).run(dry_run=dry_run)
