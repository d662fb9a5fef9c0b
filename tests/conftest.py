"""Shared pytest fixtures: a mocked async pymongo client and a registry over it."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.config import Settings
from core.connection import ConnectionRegistry

TEST_URI = "mongodb://localhost:27017"


def _make_cursor(documents):
    """A cursor double: ``limit(n)`` returns a new cursor over the first n docs."""
    cursor = MagicMock()
    cursor.limit.side_effect = lambda n: _make_cursor(documents[:n])
    cursor.to_list = AsyncMock(return_value=list(documents))
    return cursor


@pytest.fixture
def collection():
    """Collection double with the async driver's call shapes."""
    coll = MagicMock()
    coll.find.return_value = _make_cursor([])
    coll.insert_one = AsyncMock()
    coll.update_one = AsyncMock()
    coll.update_many = AsyncMock()
    coll.delete_one = AsyncMock()
    coll.delete_many = AsyncMock()
    coll.count_documents = AsyncMock(return_value=0)
    coll.aggregate = AsyncMock(return_value=_make_cursor([]))
    return coll


@pytest.fixture
def database(collection):
    db = MagicMock()
    db.__getitem__.return_value = collection
    db.list_collections = AsyncMock(return_value=_make_cursor([]))
    return db


@pytest.fixture
def mongo_client(database):
    client = MagicMock()
    client.aconnect = AsyncMock()
    client.close = AsyncMock()
    client.get_database.return_value = database
    client.list_database_names = AsyncMock(return_value=[])
    return client


@pytest.fixture
def client_factory(mongo_client):
    return MagicMock(return_value=mongo_client)


@pytest.fixture
def settings():
    return Settings(mongodb_uri=TEST_URI)


@pytest.fixture
def registry(settings, client_factory):
    return ConnectionRegistry(settings, client_factory=client_factory)


@pytest.fixture
def make_cursor():
    return _make_cursor
