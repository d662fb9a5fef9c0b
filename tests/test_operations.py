"""Tests for core/operations.py against a mocked async driver."""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from core import operations
from core.config import ConfigurationError, Settings
from core.connection import ConnectionRegistry


@pytest.mark.asyncio
async def test_create_document_reports_inserted_id(registry, collection, database):
    collection.insert_one.return_value = MagicMock(inserted_id="665f1c2b9d3e4a0012ab34cd")

    text = await operations.create_document(registry, "shop", "orders", {"sku": "A-1", "qty": 2})

    assert text == "Document created successfully with ID: 665f1c2b9d3e4a0012ab34cd"
    database.__getitem__.assert_called_with("orders")
    collection.insert_one.assert_awaited_once_with({"sku": "A-1", "qty": 2})


@pytest.mark.asyncio
async def test_find_with_limit_returns_exactly_that_many(registry, collection, make_cursor):
    docs = [{"_id": i, "status": "open"} for i in range(10)]
    collection.find.return_value = make_cursor(docs)

    text = await operations.find_documents(registry, "shop", "orders", filter={"status": "open"}, limit=3)

    assert text.startswith("Found 3 document(s):\n\n")
    assert json.loads(text.split("\n\n", 1)[1]) == docs[:3]
    collection.find.assert_called_once_with({"status": "open"})


@pytest.mark.asyncio
async def test_find_without_filter_or_limit(registry, collection, make_cursor):
    cursor = make_cursor([{"_id": 1}])
    collection.find.return_value = cursor

    text = await operations.find_documents(registry, "shop", "orders")

    assert text == 'Found 1 document(s):\n\n[\n  {\n    "_id": 1\n  }\n]'
    collection.find.assert_called_once_with({})
    cursor.limit.assert_not_called()


@pytest.mark.asyncio
async def test_find_with_zero_limit_is_uncapped(registry, collection, make_cursor):
    cursor = make_cursor([{"_id": i} for i in range(4)])
    collection.find.return_value = cursor

    text = await operations.find_documents(registry, "shop", "orders", limit=0)

    assert text.startswith("Found 4 document(s):")
    cursor.limit.assert_not_called()


@pytest.mark.asyncio
async def test_find_bounds_large_results(registry, collection, make_cursor):
    docs = [{"_id": i, "body": "x" * 1000} for i in range(50)]
    collection.find.return_value = make_cursor(docs)

    text = await operations.find_documents(registry, "shop", "orders")

    assert text.startswith("Found 50 document(s):\n\n")
    assert "...49 more items" in text
    assert "...800 more characters" in text


@pytest.mark.asyncio
async def test_find_honours_custom_output_budget(registry, collection, make_cursor):
    collection.find.return_value = make_cursor([{"_id": 1}, {"_id": 2}])

    text = await operations.find_documents(registry, "shop", "orders", max_output_bytes=5)

    assert text.endswith("...1 more items\n]")


@pytest.mark.asyncio
async def test_update_many(registry, collection):
    collection.update_many.return_value = MagicMock(matched_count=5, modified_count=5)

    text = await operations.update_document(
        registry, "shop", "orders", {"status": "open"}, {"$set": {"status": "closed"}}, update_many=True
    )

    assert text == "Update operation completed. Matched: 5, Modified: 5"
    collection.update_many.assert_awaited_once_with({"status": "open"}, {"$set": {"status": "closed"}})
    collection.update_one.assert_not_called()


@pytest.mark.asyncio
async def test_update_defaults_to_single_document(registry, collection):
    collection.update_one.return_value = MagicMock(matched_count=1, modified_count=0)

    text = await operations.update_document(registry, "shop", "orders", {"_id": 1}, {"$set": {"a": 1}})

    assert text == "Update operation completed. Matched: 1, Modified: 0"
    collection.update_many.assert_not_called()


@pytest.mark.asyncio
async def test_delete_one_and_many(registry, collection):
    collection.delete_one.return_value = MagicMock(deleted_count=1)
    collection.delete_many.return_value = MagicMock(deleted_count=12)

    assert await operations.delete_document(registry, "shop", "orders", {"_id": 1}) == (
        "Delete operation completed. Deleted 1 document(s)"
    )
    assert await operations.delete_document(registry, "shop", "orders", {}, delete_many=True) == (
        "Delete operation completed. Deleted 12 document(s)"
    )
    collection.delete_one.assert_awaited_once_with({"_id": 1})
    collection.delete_many.assert_awaited_once_with({})


@pytest.mark.asyncio
async def test_aggregate_formats_results(registry, collection, make_cursor):
    pipeline = [{"$match": {"status": "open"}}, {"$group": {"_id": "$sku", "n": {"$sum": 1}}}]
    collection.aggregate.return_value = make_cursor([{"_id": "A-1", "n": 3}, {"_id": "B-2", "n": 1}])

    text = await operations.aggregate(registry, "shop", "orders", pipeline)

    assert text.startswith("Aggregation returned 2 document(s):\n\n")
    assert json.loads(text.split("\n\n", 1)[1]) == [{"_id": "A-1", "n": 3}, {"_id": "B-2", "n": 1}]
    collection.aggregate.assert_awaited_once_with(pipeline)


@pytest.mark.asyncio
async def test_count_documents(registry, collection):
    collection.count_documents.return_value = 7

    assert await operations.count_documents(registry, "shop", "orders") == "Found 7 document(s) matching the filter"
    collection.count_documents.assert_awaited_once_with({})


@pytest.mark.asyncio
async def test_list_collections(registry, database, make_cursor):
    database.list_collections.return_value = make_cursor([{"name": "orders"}, {"name": "customers"}])

    text = await operations.list_collections(registry, "shop")

    assert text == "Collections in database 'shop':\norders\ncustomers"


@pytest.mark.asyncio
async def test_list_collections_on_empty_database(registry):
    assert await operations.list_collections(registry, "X") == "Collections in database 'X':\n"


@pytest.mark.asyncio
async def test_list_databases(registry, mongo_client):
    mongo_client.list_database_names.return_value = ["admin", "shop"]

    assert await operations.list_databases(registry) == "Databases:\nadmin\nshop"


@pytest.mark.asyncio
async def test_missing_uri_surfaces_before_driver_call(client_factory, collection):
    registry = ConnectionRegistry(Settings(), client_factory=client_factory)

    with pytest.raises(ConfigurationError):
        await operations.count_documents(registry, "shop", "orders")

    client_factory.assert_not_called()
    collection.count_documents.assert_not_called()


@pytest.mark.asyncio
async def test_driver_errors_propagate_unchanged(registry, collection):
    error = RuntimeError("not authorized on shop to execute command")
    collection.insert_one = AsyncMock(side_effect=error)

    with pytest.raises(RuntimeError) as excinfo:
        await operations.create_document(registry, "shop", "orders", {"a": 1})

    assert excinfo.value is error
    collection.insert_one.assert_awaited_once()
