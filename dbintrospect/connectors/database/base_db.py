"""Base database connector using SQLAlchemy.

Provides the connection lifecycle and the four introspection operations
shared by the MySQL and PostgreSQL connectors. Dialect-specific SQL comes
from ``connectors.dialect``; subclasses only translate the raw connection
string into something their driver accepts.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Sequence

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from ...utils.sanitization import sanitize_error_message
from ..base import (
    BaseConnector,
    DatabaseConnectionError,
    NoResultsError,
    QueryError,
    RowIterationError,
    RowScanError,
)
from ..dialect import build_query
from ..models import ColumnInfo, ConnectionDescriptor, QueryKind

logger = logging.getLogger(__name__)

# Error text is truncated before it is attached to exceptions
MAX_ERROR_LENGTH = 500

NULL_TEXT = "NULL"


def format_value(value: Any) -> str:
    """Render a single result value as text for ``run_query`` output."""
    if value is None:
        return NULL_TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class BaseDatabaseConnector(BaseConnector):
    """Base class for database connectors using SQLAlchemy.

    Each instance opens exactly one connection on ``connect()`` and
    releases it, along with its engine, on ``disconnect()``. Engines use
    ``NullPool`` so no driver handle outlives the connector.

    Subclasses must implement:
    - _build_connection_url(): Build the SQLAlchemy connection URL
    - _get_driver_name(): Return the driver name for the database
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        connection_string: str,
        connect_timeout: int | None = None,
    ) -> None:
        super().__init__(descriptor, connection_string, connect_timeout)
        self._engine: Engine | None = None
        self._connection: Connection | None = None

    @abstractmethod
    def _build_connection_url(self) -> str | URL:
        """Build the SQLAlchemy connection URL from the raw connection string."""
        pass

    @abstractmethod
    def _get_driver_name(self) -> str:
        """Get the database driver name.

        Returns:
            Driver name (e.g., 'postgresql+psycopg2', 'mysql+pymysql')
        """
        pass

    def _connect_args(self) -> dict[str, Any]:
        """Extra keyword arguments passed to the DBAPI ``connect()``."""
        if self.connect_timeout:
            return {"connect_timeout": self.connect_timeout}
        return {}

    def _create_engine(self) -> Engine:
        return create_engine(
            self._build_connection_url(),
            poolclass=NullPool,
            isolation_level="AUTOCOMMIT",
            connect_args=self._connect_args(),
        )

    def connect(self) -> None:
        """Establish database connection."""
        if self._connected:
            return

        try:
            self._engine = self._create_engine()
            self._connection = self._engine.connect()
        except SQLAlchemyError as e:
            self.disconnect()
            message = sanitize_error_message(str(e), MAX_ERROR_LENGTH)
            raise DatabaseConnectionError(
                f"Error opening database connection: {message}",
                context=sanitize_error_message(self._connection_string),
            ) from e

        self._connected = True
        self._log("debug", "Connected", driver=self._get_driver_name())

    def disconnect(self) -> None:
        """Close database connection."""
        if self._connection is not None:
            try:
                self._connection.close()
            except SQLAlchemyError as e:
                self._log("warning", f"Error closing connection: {sanitize_error_message(str(e))}")
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        if self._connected:
            self._log("debug", "Disconnected")
        self._connected = False

    def _execute(self, query: str, action: str) -> tuple[list[str], list[Sequence[Any]]]:
        """Execute a statement and fetch every row.

        The statement is sent to the driver as-is: no bind-parameter parsing,
        so ``%`` and ``:`` in the text are left alone.

        Args:
            query: SQL text
            action: What the query does, for error messages

        Returns:
            Tuple of (column names, rows)
        """
        if not self._connected:
            self.connect()

        assert self._connection is not None

        try:
            result = self._connection.exec_driver_sql(
                query, execution_options={"no_parameters": True}
            )
        except SQLAlchemyError as e:
            message = sanitize_error_message(str(e), MAX_ERROR_LENGTH)
            raise QueryError(f"Error {action}: {message}", context=query) from e

        if not result.returns_rows:
            return [], []

        try:
            columns = list(result.keys())
            rows = [tuple(row) for row in result]
        except SQLAlchemyError as e:
            message = sanitize_error_message(str(e), MAX_ERROR_LENGTH)
            raise RowIterationError(f"Error iterating rows: {message}", context=query) from e

        self._log("debug", f"{action.capitalize()} returned {len(rows)} rows")
        return columns, rows

    def _scan_column(self, row: Sequence[Any], query: str) -> ColumnInfo:
        try:
            name, data_type, is_nullable = (format_value(v) for v in row)
        except ValueError as e:
            raise RowScanError(
                f"Error scanning row: expected 3 columns, got {len(row)}",
                context=query,
            ) from e
        return ColumnInfo.from_row(name, data_type, is_nullable)

    def list_tables(self, schema: str = "public") -> list[str]:
        """List the tables in the database.

        PostgreSQL filters by ``schema``; MySQL lists the connected database
        and ignores it.
        """
        query = build_query(self.descriptor, QueryKind.LIST_TABLES, schema=schema)
        _, rows = self._execute(query, "querying tables")

        tables = []
        for row in rows:
            if len(row) != 1:
                raise RowScanError(
                    f"Error scanning row: expected 1 column, got {len(row)}",
                    context=query,
                )
            tables.append(format_value(row[0]))
        return tables

    def list_columns(self, table: str) -> list[ColumnInfo]:
        """List the columns in a table with their type and nullability."""
        query = build_query(self.descriptor, QueryKind.LIST_COLUMNS, table=table)
        _, rows = self._execute(query, "querying columns")
        return [self._scan_column(row, query) for row in rows]

    def list_column_details(self, table: str, column: str) -> ColumnInfo | None:
        """Get the details of one column; only the first matching row is used."""
        query = build_query(
            self.descriptor, QueryKind.COLUMN_DETAILS, table=table, column=column
        )
        _, rows = self._execute(query, "querying column details")
        if not rows:
            return None
        return self._scan_column(rows[0], query)

    def run_query(self, query: str, empty_result_is_error: bool = False) -> str:
        """Run a query and return the results in comma-separated format.

        Args:
            query: SQL text to run
            empty_result_is_error: Raise NoResultsError instead of returning ""

        Returns:
            One line per row, values joined with commas
        """
        _, rows = self._execute(query, "querying database")

        if not rows and empty_result_is_error:
            raise NoResultsError("No results found", context=query)

        return "\n".join(",".join(format_value(v) for v in row) for row in rows)
