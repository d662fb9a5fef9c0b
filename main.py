# =============================================================================
# main.py  -  Entry Point for the MongoDB MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py          (or the installed console script: mongo-mcp)
#
# WHAT HAPPENS:
#   1. Loads a .env file, if present, into the environment
#   2. Reads Settings (core/config.py) and configures logging to stderr
#   3. Builds the FastMCP server and its ConnectionRegistry
#   4. Serves MCP over stdio until the client hangs up
#
# NOTE: the database is NOT contacted here.  The first tool call connects.
#   A missing MONGODB_URI is reported to the client as a tool error, not
#   as a startup crash.
#
# CLIENT CONFIG (e.g., an MCP client's servers JSON):
#   {
#     "mongo": {
#       "command": "mongo-mcp",
#       "env": {"MONGODB_URI": "mongodb://localhost:27017"}
#     }
#   }
# =============================================================================

import logging
import sys

from dotenv import load_dotenv

# Must run BEFORE load_settings() reads the environment.
load_dotenv()

from core.config import load_settings
from tools.mcp_server import build_server, configure_logging


def main() -> None:
    try:
        settings = load_settings()
        configure_logging(settings.log_level)
        server = build_server(settings)
        logging.info("MongoDB MCP Server running...")
        server.run()
    except KeyboardInterrupt:
        logging.info("Server shutting down...")
    except Exception:
        logging.exception("Error starting server")
        sys.exit(1)


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    main()
