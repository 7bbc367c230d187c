"""Database connectors for PostgreSQL and MySQL.

These connectors use SQLAlchemy for database abstraction and provide
table listing, column introspection and ad-hoc query execution.
"""

from .base_db import BaseDatabaseConnector, format_value
from .mysql import MySQLConnector, parse_mysql_dsn
from .postgresql import PostgreSQLConnector, keyword_dsn_to_url

__all__ = [
    "BaseDatabaseConnector",
    "format_value",
    "MySQLConnector",
    "PostgreSQLConnector",
    "parse_mysql_dsn",
    "keyword_dsn_to_url",
]
