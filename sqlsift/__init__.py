"""
sqlsift - Structural search for PostgreSQL SQL.

Finds SQL by shape rather than by text:
- S-expression patterns over the libpg_query AST (via pglast)
- Wildcards, literal field values and ordered list matching
- Named captures extracted from every match
- A small CLI for searching files, directories and inline SQL

Usage:
    from sqlsift import parse_sql, search_all

    statements = parse_sql("SELECT * FROM users, orders")
    roots = [statement.node for statement in statements]
    for result in search_all('(relname "users")', roots):
        print(result.kind, result.captures)
"""

__version__ = "0.1.0"

from .patterns import (
    AllOf,
    AnyOf,
    AnyValue,
    Capture,
    CaptureCollector,
    FieldPattern,
    KindOnly,
    KindWithFields,
    ListPattern,
    Literal,
    LoggingTraceSink,
    Matcher,
    Maybe,
    Not,
    Pattern,
    RecordingTraceSink,
    TraceEvent,
    TraceSink,
    TraceStep,
    Wildcard,
    compile_pattern,
    format_pattern,
    match,
    parse_pattern,
)
from .search import (
    MatchResult,
    SqlMatch,
    SqlSearchService,
    iter_nodes,
    search,
    search_all,
    search_sql,
    search_with_captures,
)
from .sql import Statement, parse_sql
from .tree import ABSENT, FieldShape, JsonTreeAdapter, PglastTreeAdapter, TreeAdapter
from .types import PatternSyntaxError, SqlSiftError, UpstreamParseError

__all__ = [
    "__version__",
    # Patterns
    "Pattern",
    "KindOnly",
    "KindWithFields",
    "FieldPattern",
    "Wildcard",
    "AnyValue",
    "Literal",
    "Capture",
    "ListPattern",
    "AnyOf",
    "AllOf",
    "Not",
    "Maybe",
    "parse_pattern",
    "compile_pattern",
    "format_pattern",
    # Matching
    "Matcher",
    "match",
    "CaptureCollector",
    "TraceEvent",
    "TraceStep",
    "TraceSink",
    "RecordingTraceSink",
    "LoggingTraceSink",
    # Search
    "MatchResult",
    "iter_nodes",
    "search",
    "search_all",
    "search_with_captures",
    "search_sql",
    "SqlMatch",
    "SqlSearchService",
    # SQL
    "Statement",
    "parse_sql",
    # Trees
    "ABSENT",
    "FieldShape",
    "TreeAdapter",
    "PglastTreeAdapter",
    "JsonTreeAdapter",
    # Errors
    "SqlSiftError",
    "PatternSyntaxError",
    "UpstreamParseError",
]
