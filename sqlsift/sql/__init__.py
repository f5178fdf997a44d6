"""SQL parsing facade (pglast)."""

from .parser import Statement, parse_sql

__all__ = ["Statement", "parse_sql"]
