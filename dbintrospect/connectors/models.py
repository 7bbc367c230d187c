"""Pydantic models for the SQL introspection connectors.

Defines the connection descriptor produced by dialect detection, the
column metadata returned by introspection, and the request/response
models used by the HTTP routes.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Dialect(str, Enum):
    """Supported SQL database families."""

    MYSQL = "mysql"
    POSTGRES = "postgres"


class QueryKind(str, Enum):
    """Information-schema queries the dialect router can build."""

    LIST_TABLES = "list_tables"
    LIST_COLUMNS = "list_columns"
    COLUMN_DETAILS = "column_details"


class ConnectionDescriptor(BaseModel):
    """Dialect and database name derived from a connection string."""

    model_config = ConfigDict(frozen=True)

    dialect: Dialect
    database_name: str = Field(..., min_length=1)


class ColumnInfo(BaseModel):
    """Metadata for a single table column."""

    name: str
    data_type: str
    nullable: bool

    @classmethod
    def from_row(cls, name: str, data_type: str, is_nullable: str) -> ColumnInfo:
        """Build from an information_schema.columns row.

        ``is_nullable`` is the raw ``YES``/``NO`` text the database reports.
        """
        return cls(name=name, data_type=data_type, nullable=is_nullable == "YES")


# --- Request/Response Models ---


class TableListResponse(BaseModel):
    """Response model for listing tables."""

    tables: list[str]
    count: int


class ColumnListResponse(BaseModel):
    """Response model for listing the columns of a table."""

    table: str
    columns: list[ColumnInfo]
    count: int


class QueryRequest(BaseModel):
    """Request model for running an ad-hoc query."""

    query: str = Field(..., min_length=1)


class QueryResponse(BaseModel):
    """Response model for an ad-hoc query."""

    output: str
    row_count: int


class DialectInfo(BaseModel):
    """Information about a registered dialect connector."""

    dialect: Dialect
    name: str
    description: str
    driver: str
