# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines ALL MCP tools a client can call.  Each tool is a thin wrapper
#   around a core/operations.py function.  The wrapper:
#     - declares the parameter contract (FastMCP turns the signature into
#       a JSON schema and validates incoming arguments with pydantic)
#     - logs the call
#     - turns any failure into a ToolError "Failed to <operation>: <cause>"
#
# HOW IT WORKS (the flow):
#   1. The client calls a tool by name (e.g., "find-documents")
#   2. FastMCP validates the arguments; bad ones never reach our code
#   3. The wrapper calls core/, which talks to MongoDB exactly once
#   4. The wrapper returns the text (or raises ToolError)
#
# THE COMPOSITION ROOT:
#   create_server(registry, settings) builds a fresh FastMCP instance bound
#   to ONE ConnectionRegistry.  main.py calls build_server(); tests call
#   create_server() with a registry backed by a fake client.
#
# RUNNING THIS SERVER:
#   a) As a console script:  mongo-mcp
#   b) Standalone:           python -m tools.mcp_server
# =============================================================================

import logging
import sys
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field, StrictBool, StrictInt

from core import operations
from core.config import Settings, load_settings
from core.connection import ConnectionRegistry

SERVER_NAME = "mongo-mcp"

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP protocol owns STDOUT.  A single stray
# print() to stdout corrupts the JSON-RPC stream and the client disconnects.
#
# ANSI colors make tool traffic easy to scan in a terminal:
#   CYAN = incoming call, YELLOW = progress, GREEN = response, RED = failure
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params: Any) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the size of a tool response (not the body), then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {len(text)} chars{_RESET}")
    return text


def _tool_error(tool_name: str, action: str, exc: Exception) -> ToolError:
    message = str(exc) or "Unknown error"
    logging.error(f"{_RED}  ✗ {tool_name} failed: {type(exc).__name__}: {message}{_RESET}")
    return ToolError(f"Failed to {action}: {message}")


# Parameter contracts.  Flags and limits are STRICT: "yes" or 1 must not
# quietly turn into deleteMany=True, and "3" is not a limit.
DatabaseName = Annotated[str, Field(description="Database name")]
CollectionName = Annotated[str, Field(description="Collection name")]
OptionalFilter = Annotated[
    Optional[dict[str, Any]], Field(description="Query filter as JSON object (optional)")
]


def create_server(registry: ConnectionRegistry, settings: Optional[Settings] = None) -> FastMCP:
    """Build the FastMCP server with every tool bound to ``registry``.

    Every tool returns ONE text block.  output_schema=None stops FastMCP
    from adding a structured {"result": ...} copy next to it.
    """
    settings = settings or Settings()
    mcp = FastMCP(SERVER_NAME)

    # =========================================================================
    # TOOL 1: create-document
    # =========================================================================
    @mcp.tool(name="create-document", output_schema=None)
    async def create_document(
        database: DatabaseName,
        collection: CollectionName,
        document: Annotated[dict[str, Any], Field(description="Document to insert as JSON object")],
    ) -> str:
        """Create a new document in a MongoDB collection

        WHEN TO CALL THIS: To insert exactly one new document.  The server
        assigns an _id if the document doesn't carry one.

        Args:
            database: Database name.
            collection: Collection name (created on first insert).
            document: The document to insert, as a JSON object.

        Returns:
            "Document created successfully with ID: <id>"
        """
        _log_request("create-document", database=database, collection=collection)
        try:
            text = await operations.create_document(registry, database, collection, document)
        except Exception as exc:
            raise _tool_error("create-document", "create document", exc) from exc
        return _log_response("create-document", text)

    # =========================================================================
    # TOOL 2: find-documents
    # =========================================================================
    # Read-shaped: the result goes through the output budget, so a huge
    # collection comes back as a bounded sample, not a 10 MB wall of JSON.
    # =========================================================================
    @mcp.tool(name="find-documents", output_schema=None)
    async def find_documents(
        database: DatabaseName,
        collection: CollectionName,
        filter: OptionalFilter = None,
        limit: Annotated[
            Optional[StrictInt], Field(description="Maximum number of documents to return (optional)")
        ] = None,
    ) -> str:
        """Query documents from a MongoDB collection

        WHEN TO CALL THIS: To read documents.  Pass a limit whenever you
        only need a sample; large results are shortened anyway.

        Args:
            database: Database name.
            collection: Collection name.
            filter: MongoDB query filter (default: {} matches everything).
            limit: Maximum number of documents to return (default: no cap).

        Returns:
            "Found <n> document(s):" followed by the documents as JSON.
            When the JSON is too large, long strings, arrays and objects are
            cut and annotated ("...N more characters", "...N more items",
            "...N more properties").
        """
        _log_request("find-documents", database=database, collection=collection, filter=filter, limit=limit)
        try:
            text = await operations.find_documents(
                registry,
                database,
                collection,
                filter=filter,
                limit=limit,
                max_output_bytes=settings.max_output_bytes,
            )
        except Exception as exc:
            raise _tool_error("find-documents", "find documents", exc) from exc
        _log_status(text.split("\n", 1)[0])
        return _log_response("find-documents", text)

    # =========================================================================
    # TOOL 3: update-document
    # =========================================================================
    @mcp.tool(name="update-document", output_schema=None)
    async def update_document(
        database: DatabaseName,
        collection: CollectionName,
        filter: Annotated[dict[str, Any], Field(description="Query filter to match documents to update")],
        update: Annotated[dict[str, Any], Field(description="Update operations as JSON object")],
        updateMany: Annotated[
            StrictBool, Field(description="Whether to update multiple documents (default: false)")
        ] = False,
    ) -> str:
        """Update documents in a MongoDB collection

        WHEN TO CALL THIS: To change existing documents.  Only the first
        match is updated unless updateMany is true.

        Args:
            database: Database name.
            collection: Collection name.
            filter: Query filter selecting the documents to update.
            update: Update operators, e.g. {"$set": {"status": "closed"}}.
            updateMany: true to update every match (default: false).

        Returns:
            "Update operation completed. Matched: <m>, Modified: <n>"
        """
        _log_request(
            "update-document", database=database, collection=collection, filter=filter, updateMany=updateMany
        )
        try:
            text = await operations.update_document(
                registry, database, collection, filter, update, update_many=updateMany
            )
        except Exception as exc:
            raise _tool_error("update-document", "update document(s)", exc) from exc
        return _log_response("update-document", text)

    # =========================================================================
    # TOOL 4: delete-document
    # =========================================================================
    @mcp.tool(name="delete-document", output_schema=None)
    async def delete_document(
        database: DatabaseName,
        collection: CollectionName,
        filter: Annotated[dict[str, Any], Field(description="Query filter to match documents to delete")],
        deleteMany: Annotated[
            StrictBool, Field(description="Whether to delete multiple documents (default: false)")
        ] = False,
    ) -> str:
        """Delete documents from a MongoDB collection

        WHEN TO CALL THIS: To remove documents.  Only the first match is
        deleted unless deleteMany is true.  With deleteMany and an empty
        filter, EVERY document in the collection is deleted.

        Args:
            database: Database name.
            collection: Collection name.
            filter: Query filter selecting the documents to delete.
            deleteMany: true to delete every match (default: false).

        Returns:
            "Delete operation completed. Deleted <n> document(s)"
        """
        _log_request(
            "delete-document", database=database, collection=collection, filter=filter, deleteMany=deleteMany
        )
        try:
            text = await operations.delete_document(
                registry, database, collection, filter, delete_many=deleteMany
            )
        except Exception as exc:
            raise _tool_error("delete-document", "delete document(s)", exc) from exc
        return _log_response("delete-document", text)

    # =========================================================================
    # TOOL 5: aggregate
    # =========================================================================
    @mcp.tool(name="aggregate", output_schema=None)
    async def aggregate(
        database: DatabaseName,
        collection: CollectionName,
        pipeline: Annotated[
            list[dict[str, Any]], Field(description="Aggregation pipeline as array of stage objects")
        ],
    ) -> str:
        """Execute aggregation pipeline on a MongoDB collection

        WHEN TO CALL THIS: For grouping, joining ($lookup) or computed
        fields that a plain find can't express.

        Args:
            database: Database name.
            collection: Collection name.
            pipeline: Ordered list of stage objects, e.g. [{"$match": {...}}].

        Returns:
            "Aggregation returned <n> document(s):" followed by the results
            as JSON, shortened the same way as find-documents.
        """
        _log_request("aggregate", database=database, collection=collection, stages=len(pipeline))
        try:
            text = await operations.aggregate(
                registry, database, collection, pipeline, max_output_bytes=settings.max_output_bytes
            )
        except Exception as exc:
            raise _tool_error("aggregate", "execute aggregation", exc) from exc
        _log_status(text.split("\n", 1)[0])
        return _log_response("aggregate", text)

    # =========================================================================
    # TOOL 6: count-documents
    # =========================================================================
    @mcp.tool(name="count-documents", output_schema=None)
    async def count_documents(
        database: DatabaseName,
        collection: CollectionName,
        filter: OptionalFilter = None,
    ) -> str:
        """Count documents in a MongoDB collection

        WHEN TO CALL THIS: When you need how many documents match, not the
        documents themselves.  Much cheaper than find-documents.

        Args:
            database: Database name.
            collection: Collection name.
            filter: MongoDB query filter (default: {} counts everything).

        Returns:
            "Found <n> document(s) matching the filter"
        """
        _log_request("count-documents", database=database, collection=collection, filter=filter)
        try:
            text = await operations.count_documents(registry, database, collection, filter=filter)
        except Exception as exc:
            raise _tool_error("count-documents", "count documents", exc) from exc
        return _log_response("count-documents", text)

    # =========================================================================
    # TOOL 7: list-collections
    # =========================================================================
    @mcp.tool(name="list-collections", output_schema=None)
    async def list_collections(database: DatabaseName) -> str:
        """List all collections in a MongoDB database

        WHEN TO CALL THIS: Before querying a database you haven't seen, to
        learn which collection names exist.

        Args:
            database: Database name.

        Returns:
            "Collections in database '<name>':" followed by one name per line.
        """
        _log_request("list-collections", database=database)
        try:
            text = await operations.list_collections(registry, database)
        except Exception as exc:
            raise _tool_error("list-collections", "list collections", exc) from exc
        return _log_response("list-collections", text)

    # =========================================================================
    # TOOL 8: list-databases
    # =========================================================================
    # Lets the client discover what to pass as "database" to the others.
    # =========================================================================
    @mcp.tool(name="list-databases", output_schema=None)
    async def list_databases() -> str:
        """List all databases on the MongoDB server

        WHEN TO CALL THIS: FIRST, when you don't know which database holds
        the data.  Every other tool needs a database name.

        Returns:
            "Databases:" followed by one name per line.
        """
        _log_request("list-databases")
        try:
            text = await operations.list_databases(registry)
        except Exception as exc:
            raise _tool_error("list-databases", "list databases", exc) from exc
        return _log_response("list-databases", text)

    return mcp


def build_server(settings: Optional[Settings] = None) -> FastMCP:
    """Build the production server: real settings, real pymongo client."""
    settings = settings or load_settings()
    return create_server(ConnectionRegistry(settings), settings)


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    _settings = load_settings()
    configure_logging(_settings.log_level)
    build_server(_settings).run()
