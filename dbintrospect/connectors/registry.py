"""Connector registry mapping dialects to connector implementations.

The registry pattern lets each dialect module register itself on import
and gives the introspector a factory, so nothing outside this module
switches on the dialect.
"""

from __future__ import annotations

import logging
from typing import Type

from .base import BaseConnector, UnknownDialectError
from .models import ConnectionDescriptor, Dialect, DialectInfo

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Registry for connector implementations.

    Maintains a mapping of dialects to their implementation classes
    and provides a factory method for creating connector instances.
    """

    def __init__(self) -> None:
        self._connectors: dict[Dialect, Type[BaseConnector]] = {}
        self._info: dict[Dialect, DialectInfo] = {}

    def register(
        self,
        dialect: Dialect,
        connector_class: Type[BaseConnector],
        info: DialectInfo,
    ) -> None:
        """Register a connector implementation.

        Args:
            dialect: The dialect handled by the connector
            connector_class: The connector class to register
            info: Metadata about the connector
        """
        if dialect in self._connectors:
            logger.warning(f"Overwriting existing connector for {dialect.value}")
        self._connectors[dialect] = connector_class
        self._info[dialect] = info
        logger.debug(f"Registered connector: {dialect.value}")

    def unregister(self, dialect: Dialect) -> None:
        """Unregister a connector implementation."""
        self._connectors.pop(dialect, None)
        self._info.pop(dialect, None)

    def get_connector_class(self, dialect: Dialect) -> Type[BaseConnector] | None:
        """Get the connector class for a dialect, or None if not registered."""
        return self._connectors.get(dialect)

    def get_info(self, dialect: Dialect) -> DialectInfo | None:
        return self._info.get(dialect)

    def create_connector(
        self,
        descriptor: ConnectionDescriptor,
        connection_string: str,
        connect_timeout: int | None = None,
    ) -> BaseConnector:
        """Create a connector instance for a classified connection.

        Args:
            descriptor: Classified dialect and database name
            connection_string: Raw connection string
            connect_timeout: Seconds to wait when opening the connection

        Returns:
            Instantiated (not yet connected) connector

        Raises:
            UnknownDialectError: If no connector is registered for the dialect
        """
        connector_class = self._connectors.get(descriptor.dialect)
        if connector_class is None:
            raise UnknownDialectError(
                f"No connector registered for dialect: {descriptor.dialect.value}"
            )

        return connector_class(
            descriptor=descriptor,
            connection_string=connection_string,
            connect_timeout=connect_timeout,
        )

    def list_dialects(self) -> list[DialectInfo]:
        """List all registered dialects."""
        return list(self._info.values())

    def is_registered(self, dialect: Dialect) -> bool:
        """Check if a dialect has a connector registered."""
        return dialect in self._connectors


# Global registry instance
_registry = ConnectorRegistry()


def get_registry() -> ConnectorRegistry:
    """Get the global connector registry."""
    return _registry


def register_connector(
    dialect: Dialect,
    connector_class: Type[BaseConnector],
    name: str,
    description: str,
    driver: str,
) -> None:
    """Convenience function to register a connector.

    Args:
        dialect: The dialect handled by the connector
        connector_class: The connector class to register
        name: Human-readable name
        description: Description of the connector
        driver: SQLAlchemy driver name
    """
    info = DialectInfo(
        dialect=dialect,
        name=name,
        description=description,
        driver=driver,
    )
    _registry.register(dialect, connector_class, info)


def create_connector(
    descriptor: ConnectionDescriptor,
    connection_string: str,
    connect_timeout: int | None = None,
) -> BaseConnector:
    """Convenience function to create a connector instance."""
    return _registry.create_connector(descriptor, connection_string, connect_timeout)


def list_dialects() -> list[DialectInfo]:
    """List all registered dialects."""
    return _registry.list_dialects()
