"""Shared configuration for dbintrospect.

This module centralizes environment variable access and default values
to prevent drift between modules.
"""

import logging
import os

logger = logging.getLogger(__name__)


def parse_timeout(value: str | None) -> int | None:
    """Parse a connect timeout in seconds.

    Unset, non-numeric and non-positive values fall back to the driver
    default (``None``) with a warning.
    """
    if not value:
        return None
    try:
        seconds = int(value)
    except ValueError:
        logger.warning(f"Ignoring SQL_CONNECT_TIMEOUT={value!r}: not an integer")
        return None
    if seconds <= 0:
        logger.warning(f"Ignoring SQL_CONNECT_TIMEOUT={value!r}: must be positive")
        return None
    return seconds


# Name of the environment variable holding the connection string
SQL_CONNECTION_ENV = os.getenv("SQL_CONNECTION_ENV", "SQL_CONNECTION")

# Schema used by list_tables when none is given (PostgreSQL only)
DEFAULT_SCHEMA = os.getenv("DEFAULT_SCHEMA", "public")

# Seconds to wait when opening a connection; unset means the driver default
CONNECT_TIMEOUT = parse_timeout(os.getenv("SQL_CONNECT_TIMEOUT"))

# Treat a query returning zero rows as an error instead of empty output
EMPTY_RESULT_IS_ERROR = os.getenv("SQL_EMPTY_RESULT_IS_ERROR", "false").lower() in (
    "1",
    "true",
    "yes",
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
