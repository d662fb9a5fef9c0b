# =============================================================================
# core/__init__.py
# =============================================================================
# Everything the MongoDB MCP server actually does lives here: settings, the
# connection registry, the database operations and the output budget.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or any MCP machinery.  The only
#   third-party dependency is the MongoDB driver.  That keeps the output
#   budget and the operations testable with plain pytest and a mocked driver.
# =============================================================================
