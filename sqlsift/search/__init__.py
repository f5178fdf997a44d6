"""Structural search over SQL.

Components:
- Search driver: pre-order traversal applying a pattern at every node
  (search, search_all, search_with_captures, iter_nodes)
- SqlSearchService: SQL text, files and directory trees, with match locations

Usage:
    from sqlsift.search import SqlSearchService

    service = SqlSearchService()
    for hit in service.search_text("(RangeVar (relname $t: _))", "SELECT * FROM users"):
        print(hit.line, hit.captures["t"])
"""

from .driver import MatchResult, iter_nodes, search, search_all, search_with_captures
from .service import SqlMatch, SqlSearchService, search_sql

__all__ = [
    "MatchResult",
    "iter_nodes",
    "search",
    "search_all",
    "search_with_captures",
    "SqlMatch",
    "SqlSearchService",
    "search_sql",
]
