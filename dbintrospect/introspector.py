"""Entry point for the four introspection operations.

``SQLIntrospector`` holds the connection secret handed over by the host.
Every operation resolves the secret, classifies it, opens a fresh
connection through the registry, runs one query and releases the
connection before returning. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from . import config
from .connectors import (
    BaseConnector,
    ColumnInfo,
    ConnectionDescriptor,
    classify,
    create_connector,
)
from .security import EnvSecret, Secret

logger = logging.getLogger(__name__)


class SQLIntrospector:
    """Lists tables and columns and runs queries against MySQL or PostgreSQL."""

    def __init__(
        self,
        secret: Secret,
        connect_timeout: int | None = None,
        empty_result_is_error: bool = False,
    ) -> None:
        """Initialize the introspector.

        Args:
            secret: Connection string secret, resolved on every call
            connect_timeout: Seconds to wait when opening a connection
            empty_result_is_error: Make run_query raise NoResultsError on zero rows
        """
        self._secret = secret
        self.connect_timeout = connect_timeout
        self.empty_result_is_error = empty_result_is_error

    @classmethod
    def from_settings(cls) -> "SQLIntrospector":
        """Build an introspector from environment configuration."""
        return cls(
            EnvSecret(config.SQL_CONNECTION_ENV),
            connect_timeout=config.CONNECT_TIMEOUT,
            empty_result_is_error=config.EMPTY_RESULT_IS_ERROR,
        )

    def describe(self) -> ConnectionDescriptor:
        """Classify the connection without touching the database."""
        return classify(self._secret.plaintext())

    @contextmanager
    def _connect(self) -> Iterator[BaseConnector]:
        connection_string = self._secret.plaintext()
        descriptor = classify(connection_string)
        connector = create_connector(descriptor, connection_string, self.connect_timeout)
        # The connector connects on its first query, after the SQL is built,
        # so invalid identifiers fail before any database I/O.
        try:
            yield connector
        finally:
            connector.disconnect()

    def list_tables(self, schema: str = config.DEFAULT_SCHEMA) -> list[str]:
        """List the tables in a database and return their names."""
        with self._connect() as connector:
            return connector.list_tables(schema)

    def list_columns(self, table: str) -> list[ColumnInfo]:
        """List the columns in a table with type and nullability."""
        with self._connect() as connector:
            return connector.list_columns(table)

    def list_column_details(self, table: str, column: str) -> ColumnInfo | None:
        """List the details for a specific column in a table."""
        with self._connect() as connector:
            return connector.list_column_details(table, column)

    def run_query(self, query: str) -> str:
        """Query the database and return the results in comma-separated format."""
        with self._connect() as connector:
            return connector.run_query(query, self.empty_result_is_error)
