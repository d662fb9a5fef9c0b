# =============================================================================
# core/operations.py  -  One Function per Database Operation
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Each function here backs exactly one MCP tool.  Every function follows
#   the same two steps:
#     1. Get the database handle from the ConnectionRegistry
#     2. Make exactly ONE driver call and turn its result into text
#
#   Nothing is retried.  Whatever the driver raises propagates unchanged;
#   the tools/ layer adds the "Failed to <operation>: " prefix.
#
# READ vs WRITE SHAPED:
#   - find_documents / aggregate return documents, so their output goes
#     through the output budget (core/output_budget.py).
#   - Everything else returns a short status line.
# =============================================================================

from typing import Optional

from core.connection import ConnectionRegistry
from core.models import DEFAULT_MAX_OUTPUT_BYTES, Document, Pipeline
from core.output_budget import format_json_output


async def create_document(
    registry: ConnectionRegistry, database: str, collection: str, document: Document
) -> str:
    """Insert one document and report the id the server assigned (or kept)."""
    db = await registry.database(database)
    result = await db[collection].insert_one(document)
    return f"Document created successfully with ID: {result.inserted_id}"


async def find_documents(
    registry: ConnectionRegistry,
    database: str,
    collection: str,
    filter: Optional[Document] = None,
    limit: Optional[int] = None,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
) -> str:
    """Query a collection; a falsy ``limit`` (None or 0) means no cap."""
    db = await registry.database(database)
    cursor = db[collection].find(filter or {})
    if limit:
        cursor = cursor.limit(limit)
    documents = await cursor.to_list()

    formatted = format_json_output(documents, max_output_bytes)
    return f"Found {len(documents)} document(s):\n\n{formatted}"


async def update_document(
    registry: ConnectionRegistry,
    database: str,
    collection: str,
    filter: Document,
    update: Document,
    update_many: bool = False,
) -> str:
    """Run update_one, or update_many when ``update_many`` is set.

    Returns the matched and modified counts.  A document that already has
    the target values counts as matched but not modified.
    """
    db = await registry.database(database)
    coll = db[collection]
    if update_many:
        result = await coll.update_many(filter, update)
    else:
        result = await coll.update_one(filter, update)
    return f"Update operation completed. Matched: {result.matched_count}, Modified: {result.modified_count}"


async def delete_document(
    registry: ConnectionRegistry,
    database: str,
    collection: str,
    filter: Document,
    delete_many: bool = False,
) -> str:
    """Run delete_one, or delete_many when ``delete_many`` is set."""
    db = await registry.database(database)
    coll = db[collection]
    if delete_many:
        result = await coll.delete_many(filter)
    else:
        result = await coll.delete_one(filter)
    return f"Delete operation completed. Deleted {result.deleted_count} document(s)"


async def aggregate(
    registry: ConnectionRegistry,
    database: str,
    collection: str,
    pipeline: Pipeline,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
) -> str:
    """Run an aggregation pipeline and format its output like find_documents."""
    db = await registry.database(database)
    # The async driver returns the cursor from a coroutine.
    cursor = await db[collection].aggregate(pipeline)
    documents = await cursor.to_list()

    formatted = format_json_output(documents, max_output_bytes)
    return f"Aggregation returned {len(documents)} document(s):\n\n{formatted}"


async def count_documents(
    registry: ConnectionRegistry, database: str, collection: str, filter: Optional[Document] = None
) -> str:
    db = await registry.database(database)
    count = await db[collection].count_documents(filter or {})
    return f"Found {count} document(s) matching the filter"


async def list_collections(registry: ConnectionRegistry, database: str) -> str:
    """Names only, in server order.  An empty database yields just the header line."""
    db = await registry.database(database)
    cursor = await db.list_collections()
    collections = await cursor.to_list()
    names = [info["name"] for info in collections]
    return f"Collections in database '{database}':\n" + "\n".join(names)


async def list_databases(registry: ConnectionRegistry) -> str:
    client = await registry.client()
    names = await client.list_database_names()
    return "Databases:\n" + "\n".join(names)
