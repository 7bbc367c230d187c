"""API route modules."""

from .sql import router as sql_router

__all__ = ["sql_router"]
