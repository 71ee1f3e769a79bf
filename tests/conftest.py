# tests/conftest.py
import json

import pytest
from fastapi.testclient import TestClient

from training_app.main import app
from training_app.services.state_store import StateStore, get_store
from training_app.services.storage import MemoryStorage

TEST_KEY = "test_training_db"

EMPTY_SNAPSHOT = json.dumps({
    "employees": [],
    "courses": [],
    "sessions": [],
    "registrations": [],
    "attendance": [],
}).encode("utf-8")


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """Store over empty storage, so it starts from the seed dataset."""
    return StateStore(storage, key=TEST_KEY)


@pytest.fixture
def empty_store():
    return StateStore(MemoryStorage({TEST_KEY: EMPTY_SNAPSHOT}), key=TEST_KEY)


@pytest.fixture
def notifications(store):
    """Counts change notifications emitted by `store`."""
    calls = []
    store.subscribe(lambda: calls.append(1))
    return calls


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
