import pytest

from pagescan.store import RecordStore


@pytest.fixture
def store():
    # in-memory SQLite, one shared connection per test
    record_store = RecordStore.from_url("sqlite://")
    record_store.create_schema()
    yield record_store
    record_store.engine.dispose()
