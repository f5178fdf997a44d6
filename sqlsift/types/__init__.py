"""
sqlsift type definitions.

This module exports the structured error types used across sqlsift.
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    PatternSyntaxError,
    RecoveryAction,
    ResourceError,
    SqlSiftError,
    UpstreamParseError,
)

__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "RecoveryAction",
    "ErrorContext",
    "SqlSiftError",
    "PatternSyntaxError",
    "UpstreamParseError",
    "ConfigurationError",
    "ResourceError",
]
