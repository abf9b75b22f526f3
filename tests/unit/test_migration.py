"""End-to-end tests for FieldMigration against the fake store."""

import logging

import pytest

from backfill.lib.client import StoreClient
from backfill.lib.config import MigrationConfig
from backfill.lib.logging import MigrationLogger
from backfill.lib.migration import FieldMigration

from tests.fake_store import BASE_URL, FakeStore, make_docs


def _run(store: FakeStore, config: MigrationConfig, **kwargs):
    client = StoreClient(BASE_URL, client=store.client())
    return FieldMigration(config, client=client).run(**kwargs)


class TestEndToEnd:
    """Full runs with no induced failures."""

    def test_25_records_page_20_chunk_10(self, fake_store, config):
        result = _run(fake_store, config)

        assert len(fake_store.select_calls) == 2
        assert [len(c["docs"]) for c in fake_store.update_calls] == [10, 10, 5]
        assert fake_store.commit_calls == 1

        assert result.fetched == 25
        assert result.eligible == 25
        assert result.written == 25
        assert result.pages_fetched == 2
        assert result.chunks_attempted == 3
        assert result.failures == []
        assert result.committed
        assert result.succeeded

    def test_target_field_holds_source_value(self, fake_store, config):
        _run(fake_store, config)

        for doc in fake_store.docs.values():
            assert doc["categories"] == [doc["category"]]

    def test_blank_values_are_counted_but_not_written(self, config):
        docs = make_docs(6)
        docs[1]["category"] = ""
        docs[3]["category"] = "   "
        docs[4]["category"] = "  padded  "
        store = FakeStore(docs)

        result = _run(store, config)

        assert result.fetched == 6
        assert result.eligible == 4
        assert result.written == 4
        assert "categories" not in store.docs["doc-0001"]
        assert "categories" not in store.docs["doc-0003"]
        assert store.docs["doc-0004"]["categories"] == ["padded"]

    def test_empty_collection_still_commits(self, config):
        store = FakeStore([])

        result = _run(store, config)

        assert result.fetched == 0
        assert store.update_calls == []
        assert store.commit_calls == 1
        assert result.succeeded

    def test_idempotent_rerun(self, fake_store, config):
        _run(fake_store, config)
        first = {doc_id: dict(doc) for doc_id, doc in fake_store.docs.items()}

        second_result = _run(fake_store, config)

        assert fake_store.docs == first
        assert second_result.written == 25
        assert fake_store.commit_calls == 2

    def test_custom_unique_key(self):
        """Documents keyed by a field other than ``id`` are read and updated by that key."""
        store = FakeStore(make_docs(25, key="sku"), unique_key="sku")
        config = MigrationConfig(base_url=BASE_URL, unique_key="sku")

        result = _run(store, config)

        assert store.select_calls[0]["fl"] == "sku,category"
        assert store.select_calls[0]["sort"] == "sku asc"
        assert result.fetch_error is None
        assert result.fetched == result.written == 25
        assert result.failures == []
        assert all(set(doc) == {"sku", "categories"} for c in store.update_calls for doc in c["docs"])
        assert store.docs["doc-0007"]["categories"] == ["value-7"]
        assert result.succeeded

    def test_custom_sizes(self, fake_store):
        config = MigrationConfig(base_url=BASE_URL, page_size=7, update_batch_size=4)

        result = _run(fake_store, config)

        assert [len(c["docs"]) for c in fake_store.update_calls] == [4, 4, 4, 4, 4, 4, 1]
        assert result.pages_fetched == 4
        assert result.written == 25


class TestFailures:
    """Chunk isolation, commit gating and fetch errors."""

    def test_chunk_2_of_3_fails_with_400(self, config):
        store = FakeStore(make_docs(25), fail_updates={2: 400})

        result = _run(store, config)

        assert result.written == 15
        assert result.unwritten == 10
        (failure,) = result.failures
        assert failure.chunk_index == 2
        assert failure.status_code == 400
        assert '"doc-0010"' in failure.payload
        assert store.commit_calls == 1
        assert result.committed
        assert not result.succeeded

    def test_commit_happens_after_every_chunk(self, config):
        store = FakeStore(make_docs(25), fail_updates={1: 500, 3: 502})

        _run(store, config)

        assert store.events == ["select", "select", "update", "update", "update", "commit"]

    def test_commit_failure_is_top_level_outcome(self, fake_store, config):
        fake_store.fail_commit = 500

        result = _run(fake_store, config)

        assert result.written == 25
        assert result.failures == []
        assert not result.committed
        assert result.commit.error.status_code == 500
        assert not result.succeeded
        # Nothing became visible
        assert all("categories" not in doc for doc in fake_store.docs.values())

    def test_fetch_error_writes_what_was_collected(self):
        store = FakeStore(make_docs(25), fail_selects={2: 503})
        config = MigrationConfig(base_url=BASE_URL, page_size=10)

        result = _run(store, config)

        assert result.fetch_error is not None
        assert result.fetch_error.status_code == 503
        assert result.fetched == 10
        assert result.written == 10
        assert store.commit_calls == 1
        assert not result.succeeded


class TestDryRun:
    """Dry runs read but never write."""

    def test_dry_run_sends_no_updates_or_commit(self, fake_store, config):
        result = _run(fake_store, config, dry_run=True)

        assert result.dry_run
        assert result.fetched == 25
        assert result.eligible == 25
        assert result.written == 0
        assert fake_store.update_calls == []
        assert fake_store.commit_calls == 0
        assert result.commit is None
        assert result.succeeded


class TestLogging:
    """Run events go through the injected logger."""

    def test_default_logger_carries_context(self, fake_store, config, caplog):
        client = StoreClient(BASE_URL, client=fake_store.client())
        migration = FieldMigration(config, client=client)
        assert isinstance(migration.logger, MigrationLogger)

        with caplog.at_level(logging.INFO, logger="backfill"):
            migration.run()

        records = [r for r in caplog.records if r.name == "backfill.lib.migration"]
        assert records
        assert all(r.source_field == "category" for r in records)
        assert any(getattr(r, "metric_name", None) == "records_written" for r in records)

    def test_injected_logger_receives_events(self, fake_store, config, caplog):
        client = StoreClient(BASE_URL, client=fake_store.client())
        logger = logging.getLogger("tests.injected")

        with caplog.at_level(logging.INFO, logger="tests.injected"):
            FieldMigration(config, client=client, logger=logger).run()

        messages = [r.getMessage() for r in caplog.records if r.name == "tests.injected"]
        assert any("Collected 25 records in 2 pages" in m for m in messages)
        assert any("Committed 25" in m for m in messages)


def test_owned_client_is_created_from_config(monkeypatch, fake_store, config):
    """Without an injected client, one is built from the config and closed."""
    created = []

    class RecordingClient(StoreClient):
        def __init__(self, base_url, *, timeout=30.0, client=None):
            super().__init__(base_url, timeout=timeout, client=fake_store.client())
            created.append(self)
            self.closed = False

        def close(self):
            self.closed = True

    monkeypatch.setattr("backfill.lib.migration.StoreClient", RecordingClient)

    result = FieldMigration(config).run()

    assert result.written == 25
    (client,) = created
    assert client.base_url == BASE_URL
    assert client.closed


@pytest.mark.parametrize("batch_size", [1, 10, 25, 100])
def test_written_equals_eligible_for_any_batch_size(fake_store, batch_size):
    config = MigrationConfig(base_url=BASE_URL, update_batch_size=batch_size)

    result = _run(fake_store, config)

    assert result.written == result.eligible == 25
