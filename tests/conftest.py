"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from backfill.lib.client import StoreClient  # noqa: E402
from backfill.lib.config import MigrationConfig  # noqa: E402
from tests.fake_store import BASE_URL, FakeStore, make_docs  # noqa: E402


@pytest.fixture
def fake_store() -> FakeStore:
    """Store holding 25 documents with a non-blank ``category``."""
    return FakeStore(make_docs(25))


@pytest.fixture
def store_client(fake_store: FakeStore):
    client = StoreClient(BASE_URL, client=fake_store.client())
    yield client
    client.close()


@pytest.fixture
def config() -> MigrationConfig:
    return MigrationConfig(base_url=BASE_URL)
