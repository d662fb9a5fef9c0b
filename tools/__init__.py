# =============================================================================
# tools/__init__.py
# =============================================================================
# The FastMCP layer.  tools/mcp_server.py exposes each core/operations.py
# function as an MCP tool.  It adds the parameter contract, logging and the
# "Failed to <operation>: ..." error wrapping.
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT talk to MongoDB directly (that's core/operations.py)
#   - They do NOT shape result data (that's core/output_budget.py)
# =============================================================================
