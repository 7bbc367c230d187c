"""SQL introspection routes.

Exposes the four introspection operations over HTTP. The connection
string is never part of a request; it comes from the introspector the
app is configured with.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import DEFAULT_SCHEMA
from ..connectors import (
    ColumnInfo,
    ColumnListResponse,
    ConnectorError,
    DatabaseConnectionError,
    DialectDetectionError,
    DialectInfo,
    InvalidIdentifierError,
    NoResultsError,
    QueryRequest,
    QueryResponse,
    SecretResolutionError,
    TableListResponse,
    list_dialects,
)
from ..introspector import SQLIntrospector
from ..utils.sanitization import sanitize_error_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sql", tags=["sql"])


def get_introspector() -> SQLIntrospector:
    """Dependency returning the configured introspector."""
    return SQLIntrospector.from_settings()


def _to_http_error(e: ConnectorError) -> HTTPException:
    """Map a connector error onto an HTTP status code."""
    detail = sanitize_error_message(str(e), max_length=200)

    if isinstance(e, (DialectDetectionError, InvalidIdentifierError)):
        return HTTPException(status_code=400, detail=detail)
    if isinstance(e, NoResultsError):
        return HTTPException(status_code=404, detail=detail)
    if isinstance(e, DatabaseConnectionError):
        return HTTPException(status_code=502, detail=detail)

    if isinstance(e, SecretResolutionError):
        logger.error(f"Connection secret unavailable: {detail}")
    else:
        logger.error(f"Introspection failed: {detail}", exc_info=True)
    return HTTPException(status_code=500, detail=detail)


@router.get("/dialects", response_model=list[DialectInfo])
async def get_dialects():
    """List the database dialects this service can introspect."""
    return list_dialects()


@router.get("/tables", response_model=TableListResponse)
def get_tables(
    schema: str = Query(default=DEFAULT_SCHEMA, min_length=1),
    introspector: SQLIntrospector = Depends(get_introspector),
):
    """List the tables in the configured database."""
    try:
        tables = introspector.list_tables(schema)
    except ConnectorError as e:
        raise _to_http_error(e)
    return TableListResponse(tables=tables, count=len(tables))


@router.get("/tables/{table}/columns", response_model=ColumnListResponse)
def get_columns(
    table: str,
    introspector: SQLIntrospector = Depends(get_introspector),
):
    """List the columns of a table."""
    try:
        columns = introspector.list_columns(table)
    except ConnectorError as e:
        raise _to_http_error(e)
    return ColumnListResponse(table=table, columns=columns, count=len(columns))


@router.get("/tables/{table}/columns/{column}", response_model=ColumnInfo)
def get_column_details(
    table: str,
    column: str,
    introspector: SQLIntrospector = Depends(get_introspector),
):
    """Get the type and nullability of a single column."""
    try:
        details = introspector.list_column_details(table, column)
    except ConnectorError as e:
        raise _to_http_error(e)

    if details is None:
        raise HTTPException(
            status_code=404, detail=f"Column '{column}' not found in table '{table}'"
        )
    return details


@router.post("/query", response_model=QueryResponse)
def run_query(
    request: QueryRequest,
    introspector: SQLIntrospector = Depends(get_introspector),
):
    """Run an ad-hoc query and return its rows as comma-separated text."""
    try:
        output = introspector.run_query(request.query)
    except ConnectorError as e:
        raise _to_http_error(e)
    return QueryResponse(output=output, row_count=len(output.splitlines()) if output else 0)
