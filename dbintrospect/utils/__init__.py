"""Shared helpers."""

from .sanitization import sanitize_error_message

__all__ = ["sanitize_error_message"]
