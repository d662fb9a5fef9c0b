# =============================================================================
# core/config.py  -  Server Settings (read from the environment)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns environment variables into a Settings object.  main.py calls
#   load_dotenv() first, so a local .env file works too; real environment
#   variables always win over .env entries.
#
# VARIABLES:
#   MONGODB_URI                 Connection string (REQUIRED, checked lazily)
#   MONGO_MCP_MAX_OUTPUT_BYTES  Output budget for find/aggregate (default 25000)
#   MONGO_MCP_LOG_LEVEL         Logging level (default INFO)
#
# WHY IS THE URI CHECKED LAZILY?
#   The server must start and answer tools/list even when the URI is not
#   set yet.  The missing URI only becomes an error when a tool actually
#   needs the database (see core/connection.py).
# =============================================================================

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from core.models import DEFAULT_MAX_OUTPUT_BYTES

URI_ENV_VAR = "MONGODB_URI"
MAX_OUTPUT_ENV_VAR = "MONGO_MCP_MAX_OUTPUT_BYTES"
LOG_LEVEL_ENV_VAR = "MONGO_MCP_LOG_LEVEL"


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


@dataclass
class Settings:
    """Runtime settings for the MongoDB MCP server."""

    mongodb_uri: Optional[str] = None
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    log_level: str = "INFO"

    def require_mongodb_uri(self) -> str:
        """Return the connection URI, or fail fast if it was never set."""
        if not self.mongodb_uri:
            raise ConfigurationError(f"{URI_ENV_VAR} environment variable is not set")
        return self.mongodb_uri

    def redacted_uri(self) -> str:
        """The URI with any password masked, safe to put in a log line."""
        if not self.mongodb_uri:
            return "<not set>"
        return re.sub(r"(mongodb(?:\+srv)?://[^:/@]+:)[^@]+(@)", r"\1****\2", self.mongodb_uri)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (or from an explicit mapping in tests)."""
    env = os.environ if environ is None else environ

    raw_budget = env.get(MAX_OUTPUT_ENV_VAR)
    max_output_bytes = DEFAULT_MAX_OUTPUT_BYTES
    if raw_budget:
        try:
            max_output_bytes = int(raw_budget)
        except ValueError as exc:
            raise ConfigurationError(
                f"{MAX_OUTPUT_ENV_VAR} must be an integer, got {raw_budget!r}"
            ) from exc
        if max_output_bytes <= 0:
            raise ConfigurationError(f"{MAX_OUTPUT_ENV_VAR} must be positive, got {max_output_bytes}")

    return Settings(
        mongodb_uri=env.get(URI_ENV_VAR) or None,
        max_output_bytes=max_output_bytes,
        log_level=env.get(LOG_LEVEL_ENV_VAR, "INFO").upper(),
    )
