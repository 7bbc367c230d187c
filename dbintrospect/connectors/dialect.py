"""Dialect detection and information-schema query templates.

``classify`` sniffs a raw connection string to decide whether it targets
MySQL or PostgreSQL and extracts the database name. ``build_query``
renders the information-schema SQL for each introspection operation in
the detected dialect. Both are pure functions: no I/O and no state.

Query values are interpolated into the SQL text rather than bound as
parameters, so every value is checked by ``validate_identifier`` or
``validate_database_name`` first.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote, urlsplit

from ..utils.sanitization import sanitize_error_message
from .base import (
    InvalidIdentifierError,
    MalformedConnectionStringError,
    MissingDatabaseNameError,
    UnknownDialectError,
)
from .models import ConnectionDescriptor, Dialect, QueryKind

logger = logging.getLogger(__name__)

POSTGRES_SCHEMES = ("postgres://", "postgresql://")
MYSQL_SCHEME = "mysql://"

# Unquoted identifier: a letter or underscore, then letters, digits, _ or $
SQL_IDENTIFIER_PATTERN = re.compile(r"^[^\W\d][\w$]*$")

# Characters that would let a database name escape a quoted literal
_UNSAFE_LITERAL_PATTERN = re.compile(r"['\"`\\;\s]|--|/\*|[\x00-\x1f\x7f]")

# libpq keyword/value pairs: key=value or key='quoted value'
_KEYWORD_PAIR_PATTERN = re.compile(r"(\w+)\s*=\s*('(?:[^'\\]|\\.)*'|\S*)")

_POSTGRES_TEMPLATES: dict[QueryKind, str] = {
    QueryKind.LIST_TABLES: (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = '{schema}' AND table_catalog = '{database}' "
        "ORDER BY table_name"
    ),
    QueryKind.LIST_COLUMNS: (
        "SELECT column_name, data_type, is_nullable FROM information_schema.columns "
        "WHERE table_name = '{table}' AND table_catalog = '{database}' "
        "ORDER BY ordinal_position"
    ),
    QueryKind.COLUMN_DETAILS: (
        "SELECT column_name, data_type, is_nullable FROM information_schema.columns "
        "WHERE table_name = '{table}' AND table_catalog = '{database}' "
        "AND column_name = '{column}'"
    ),
}

# MySQL connections are already scoped to one database, so there is no
# catalog filter; table listing binds table_schema to the database name.
_MYSQL_TEMPLATES: dict[QueryKind, str] = {
    QueryKind.LIST_TABLES: (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = '{database}' "
        "ORDER BY table_name"
    ),
    QueryKind.LIST_COLUMNS: (
        "SELECT column_name, data_type, is_nullable FROM information_schema.columns "
        "WHERE table_name = '{table}' "
        "ORDER BY ordinal_position"
    ),
    QueryKind.COLUMN_DETAILS: (
        "SELECT column_name, data_type, is_nullable FROM information_schema.columns "
        "WHERE table_name = '{table}' AND column_name = '{column}'"
    ),
}

_TEMPLATES: dict[Dialect, dict[QueryKind, str]] = {
    Dialect.POSTGRES: _POSTGRES_TEMPLATES,
    Dialect.MYSQL: _MYSQL_TEMPLATES,
}


def detect_dialect(connection_string: str) -> Dialect:
    """Classify a connection string by its shape.

    First match wins, compared case-insensitively:
    PostgreSQL URIs or keyword/value DSNs, then MySQL URLs or Go-style DSNs.

    Raises:
        UnknownDialectError: If neither dialect matches
    """
    conn = connection_string.strip().lower()

    if conn.startswith(POSTGRES_SCHEMES) or ("user=" in conn and "dbname=" in conn):
        return Dialect.POSTGRES
    if conn.startswith(MYSQL_SCHEME) or "@tcp(" in conn or ("user:" in conn and "@/" in conn):
        return Dialect.MYSQL

    safe = sanitize_error_message(connection_string)
    raise UnknownDialectError(
        f"Unable to determine database type from connection string: {safe}",
        context=safe,
    )


def classify(connection_string: str) -> ConnectionDescriptor:
    """Detect the dialect of a connection string and extract its database name.

    Args:
        connection_string: Raw connection string

    Returns:
        ConnectionDescriptor with the dialect and a non-empty database name

    Raises:
        UnknownDialectError: The string matches neither dialect
        MalformedConnectionStringError: A PostgreSQL URI could not be parsed
        MissingDatabaseNameError: No database name could be extracted
    """
    if not connection_string or not connection_string.strip():
        raise UnknownDialectError(
            "Unable to determine database type from an empty connection string"
        )

    conn = connection_string.strip()
    dialect = detect_dialect(conn)

    if dialect == Dialect.POSTGRES:
        database = _postgres_database_name(conn)
    else:
        database = _mysql_database_name(conn)

    if not database:
        safe = sanitize_error_message(conn)
        raise MissingDatabaseNameError(
            f"Unable to determine database name from connection string: {safe}",
            context=safe,
        )

    logger.debug(f"Classified connection string as {dialect.value} database {database}")
    return ConnectionDescriptor(dialect=dialect, database_name=database)


def _postgres_database_name(conn: str) -> str:
    if not conn.lower().startswith(POSTGRES_SCHEMES):
        return parse_keyword_dsn(conn).get("dbname", "")

    try:
        parts = urlsplit(conn)
        # Accessing the port validates it
        parts.port
    except ValueError as e:
        safe = sanitize_error_message(conn)
        raise MalformedConnectionStringError(
            f"Error parsing connection string: {safe}", context=safe
        ) from e

    path = unquote(parts.path)
    return path[1:] if path.startswith("/") else path


def _mysql_database_name(conn: str) -> str:
    remainder = conn[len(MYSQL_SCHEME):] if conn.lower().startswith(MYSQL_SCHEME) else conn

    # Option values may contain '@' and passwords may contain '/', so the
    # separator is searched after the last '@' of the part before the options
    head = remainder.partition("?")[0]
    at = head.rfind("@")
    slash = head.find("/", at + 1)
    if slash < 0:
        safe = sanitize_error_message(conn)
        raise MissingDatabaseNameError(
            f"Unable to determine database name from connection string: {safe}",
            context=safe,
        )

    database = head[slash + 1:]
    if not database:
        raise MissingDatabaseNameError(
            "Invalid DSN: missing database name",
            context=sanitize_error_message(conn),
        )
    return unquote(database)


def parse_keyword_dsn(conn: str) -> dict[str, str]:
    """Parse a libpq keyword/value connection string into a dict.

    Keys are lower-cased; single-quoted values are unescaped.
    """
    params: dict[str, str] = {}
    for key, value in _KEYWORD_PAIR_PATTERN.findall(conn):
        if value.startswith("'") and value.endswith("'") and len(value) >= 2:
            value = re.sub(r"\\(.)", r"\1", value[1:-1])
        params[key.lower()] = value
    return params


def validate_identifier(identifier: str | None, kind: str = "identifier") -> str:
    """Validate a table, column or schema name before it is put into SQL.

    Args:
        identifier: The name to check
        kind: What the name is, for the error message

    Returns:
        The identifier unchanged

    Raises:
        InvalidIdentifierError: Empty, or not a plain unquoted identifier
    """
    if not identifier:
        raise InvalidIdentifierError(f"Empty {kind}")
    if not SQL_IDENTIFIER_PATTERN.match(identifier):
        raise InvalidIdentifierError(
            f"Invalid {kind}: '{sanitize_error_message(identifier, max_length=128)}'. "
            "Only letters, digits, '_' and '$' are allowed.",
            context=kind,
        )
    return identifier


def validate_database_name(database: str | None) -> str:
    """Validate a database name before it is put into a quoted SQL literal.

    Database names are looser than identifiers (hyphens are common), so only
    characters that could terminate the literal or start a comment are refused.
    """
    if not database:
        raise InvalidIdentifierError("Empty database name")
    if _UNSAFE_LITERAL_PATTERN.search(database):
        raise InvalidIdentifierError(
            f"Invalid database name: '{sanitize_error_message(database, max_length=128)}'. "
            "Quotes, whitespace, ';' and comment sequences are not allowed.",
            context="database name",
        )
    return database


def build_query(
    descriptor: ConnectionDescriptor,
    kind: QueryKind,
    *,
    schema: str | None = None,
    table: str | None = None,
    column: str | None = None,
) -> str:
    """Render the information-schema SQL for an operation.

    Args:
        descriptor: Classified connection
        kind: Which introspection query to build
        schema: Schema to list tables from (PostgreSQL; defaults to public)
        table: Table name for column queries
        column: Column name for COLUMN_DETAILS

    Returns:
        SQL text for the descriptor's dialect

    Raises:
        InvalidIdentifierError: A required name is missing or unsafe
    """
    values = {"database": validate_database_name(descriptor.database_name)}

    if kind == QueryKind.LIST_TABLES:
        values["schema"] = validate_identifier(schema or "public", "schema name")
    else:
        values["table"] = validate_identifier(table, "table name")
        if kind == QueryKind.COLUMN_DETAILS:
            values["column"] = validate_identifier(column, "column name")

    return _TEMPLATES[descriptor.dialect][kind].format(**values)
