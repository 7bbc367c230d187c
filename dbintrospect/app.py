"""FastAPI application exposing SQL introspection over HTTP."""

from __future__ import annotations

from fastapi import FastAPI

from .routes import sql_router

app = FastAPI(
    title="dbintrospect",
    description="MySQL and PostgreSQL schema introspection",
    version="0.1.0",
)

app.include_router(sql_router)


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}
