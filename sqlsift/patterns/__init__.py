"""Pattern language and structural matcher.

This package turns S-expression pattern text into immutable pattern trees
and matches them against SQL syntax trees.

Components:
- Pattern types: KindOnly, KindWithFields, FieldPattern, Wildcard, AnyValue,
  Literal, Capture, ListPattern, AnyOf, AllOf, Not, Maybe
- parse_pattern / compile_pattern: DSL text to pattern tree
- format_pattern: pattern tree back to DSL text
- Matcher: pattern against node, with captures
- Trace sinks: optional per-step diagnostics

Usage:
    from sqlsift.patterns import Matcher, compile_pattern

    pattern = compile_pattern('(RangeVar (relname $t: _))')
    captures = Matcher().match(pattern, node)
"""

from .captures import CaptureCollector, CaptureSet
from .matcher import Matcher, match, scalar_equals
from .parser import compile_pattern, parse_pattern, tokenize
from .trace import LoggingTraceSink, RecordingTraceSink, TraceEvent, TraceSink, TraceStep
from .types import (
    ANY_VALUE,
    WILDCARD,
    AllOf,
    AnyOf,
    AnyValue,
    Capture,
    FieldPattern,
    KindOnly,
    KindWithFields,
    ListPattern,
    Literal,
    Maybe,
    Not,
    Pattern,
    Wildcard,
    format_pattern,
)

__all__ = [
    # Types
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
    "WILDCARD",
    "ANY_VALUE",
    # Parsing and printing
    "parse_pattern",
    "compile_pattern",
    "format_pattern",
    "tokenize",
    # Matching
    "Matcher",
    "match",
    "scalar_equals",
    "CaptureCollector",
    "CaptureSet",
    # Tracing
    "TraceEvent",
    "TraceStep",
    "TraceSink",
    "RecordingTraceSink",
    "LoggingTraceSink",
]
