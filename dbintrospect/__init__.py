"""MySQL/PostgreSQL introspection connector.

Given a connection string, detects the database dialect and lists tables,
lists columns, describes a column or runs an ad-hoc query.
"""

from .introspector import SQLIntrospector

__version__ = "0.1.0"

__all__ = ["SQLIntrospector", "__version__"]
