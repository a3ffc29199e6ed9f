"""
Shared fixtures.

Every test gets a fresh in-memory store; nothing touches liftlog.db.
"""
import os
from types import SimpleNamespace

os.environ.setdefault("LIFTLOG_STORE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from liftlog.db import create_db_engine, init_db
from liftlog.main import app
from liftlog.services.stats import StatsAggregator
from liftlog.services.storage import JsonStore, MemoryMedium, SQLMedium
from liftlog.services.tracker import Tracker, get_tracker


class CountingMedium(MemoryMedium):
    """MemoryMedium that records how many write calls it served."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = []

    def set_item(self, key, value):
        self.writes.append((key,))
        super().set_item(key, value)

    def set_items(self, items):
        self.writes.append(tuple(items))
        super().set_items(items)


@pytest.fixture
def medium():
    return CountingMedium()


@pytest.fixture
def store(medium):
    return JsonStore(medium)


@pytest.fixture
def tracker(store):
    return Tracker(store)


@pytest.fixture
def stats(tracker):
    return StatsAggregator(tracker.categories, tracker.workouts, tracker.sessions)


@pytest.fixture
def sql_store():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    return JsonStore(SQLMedium(engine))


@pytest.fixture
def client(tracker):
    app.dependency_overrides[get_tracker] = lambda: tracker
    # Not used as a context manager: startup would build the real store
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


class FakeCollection:
    def __init__(self, fail=False):
        self.docs = []
        self.fail = fail

    async def find_one(self, filter):
        if self.fail:
            raise ServerSelectionTimeoutError("no servers")
        return next((dict(d) for d in self.docs if all(d.get(k) == v for k, v in filter.items())), None)

    async def insert_one(self, document):
        if self.fail:
            raise ServerSelectionTimeoutError("no servers")
        document.setdefault("_id", len(self.docs) + 1)
        self.docs.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])


class FakeMongoClient:
    """In-memory stand-in for AsyncMongoClient: client[db][collection]."""

    def __init__(self, fail=False):
        self.databases = {}
        self.fail = fail
        self.closed = False

    def __getitem__(self, database):
        return _FakeDatabase(self.databases.setdefault(database, {}), self.fail)

    async def close(self):
        self.closed = True


class _FakeDatabase:
    def __init__(self, collections, fail):
        self._collections = collections
        self._fail = fail

    def __getitem__(self, name):
        return self._collections.setdefault(name, FakeCollection(self._fail))


@pytest.fixture
def mongo():
    return FakeMongoClient()


@pytest.fixture
def failing_mongo():
    return FakeMongoClient(fail=True)
