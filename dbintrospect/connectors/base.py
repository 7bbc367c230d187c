"""Base connector abstract class and connector error hierarchy.

Defines the interface that both dialect connectors implement, and the
exceptions every layer of the package raises.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import ColumnInfo, ConnectionDescriptor

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Abstract base class for database introspection connectors.

    Connectors handle:
    - Connection management (connect, disconnect)
    - Schema introspection (tables, columns, column details)
    - Ad-hoc query execution

    A connector is scoped to a single operation: it is entered, used for
    one query and exited, which releases the underlying driver handle.
    """

    def __init__(
        self,
        descriptor: "ConnectionDescriptor",
        connection_string: str,
        connect_timeout: int | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            descriptor: Classified dialect and database name
            connection_string: Raw connection string (plaintext secret)
            connect_timeout: Seconds to wait when opening the connection
        """
        self.descriptor = descriptor
        self._connection_string = connection_string
        self.connect_timeout = connect_timeout
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Check if the connector is currently connected."""
        return self._connected

    @property
    def name(self) -> str:
        return f"{self.descriptor.dialect.value}:{self.descriptor.database_name}"

    @abstractmethod
    def connect(self) -> None:
        """Open a connection to the database.

        Raises:
            DatabaseConnectionError: If the connection cannot be opened
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection. Safe to call more than once."""
        pass

    @abstractmethod
    def list_tables(self, schema: str = "public") -> list[str]:
        """List table names visible in the connected database."""
        pass

    @abstractmethod
    def list_columns(self, table: str) -> list["ColumnInfo"]:
        """List the columns of a table."""
        pass

    @abstractmethod
    def list_column_details(self, table: str, column: str) -> "ColumnInfo | None":
        """Return details for a single column, or None if it does not exist."""
        pass

    @abstractmethod
    def run_query(self, query: str, empty_result_is_error: bool = False) -> str:
        """Run a query and return its rows as comma-separated text."""
        pass

    def __enter__(self) -> "BaseConnector":
        """Context manager entry - connect."""
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - disconnect."""
        self.disconnect()

    def _log(self, level: str, message: str, **context: Any) -> None:
        """Log a message with connector context.

        Args:
            level: Log level (debug, info, warning, error)
            message: Log message
            **context: Additional context to include
        """
        log_fn = getattr(logger, level.lower(), logger.info)
        log_fn(
            f"[{self.name}] {message}",
            extra={"dialect": self.descriptor.dialect.value, **context},
        )


class ConnectorError(Exception):
    """Base exception for connector errors.

    ``context`` carries the failing connection string or query, already
    sanitized, when it is safe to include.
    """

    def __init__(self, message: str, context: str | None = None) -> None:
        super().__init__(message)
        self.context = context


class SecretResolutionError(ConnectorError):
    """The connection secret could not be resolved to plaintext."""

    pass


class DialectDetectionError(ConnectorError):
    """The connection string could not be classified."""

    pass


class UnknownDialectError(DialectDetectionError):
    """The connection string matches neither MySQL nor PostgreSQL."""

    pass


class MalformedConnectionStringError(DialectDetectionError):
    """The connection string could not be parsed."""

    pass


class MissingDatabaseNameError(DialectDetectionError):
    """No database name could be extracted from the connection string."""

    pass


class InvalidIdentifierError(ConnectorError, ValueError):
    """An identifier is unsafe to interpolate into SQL text."""

    pass


class DatabaseConnectionError(ConnectorError):
    """Error opening a database connection."""

    pass


class QueryError(ConnectorError):
    """The database rejected a query."""

    pass


class RowScanError(ConnectorError):
    """A result row could not be mapped to the expected fields."""

    pass


class RowIterationError(ConnectorError):
    """Fetching result rows failed part way through."""

    pass


class NoResultsError(ConnectorError):
    """A query returned no rows where rows were required."""

    pass
