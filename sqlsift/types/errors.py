"""
Structured error handling for sqlsift.

Every error carries an internal code, a user-facing message, a severity,
optional context and suggested recovery actions, and can be rendered for a
terminal or serialized to a dictionary.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum, IntEnum, StrEnum
from typing import Any

from sqlsift.constants import utcnow


class ErrorCode(IntEnum):
    """Stable numeric codes, grouped by the input that was at fault."""

    # Pattern text (1xx)
    PATTERN_SYNTAX = 101

    # SQL text (2xx)
    SQL_PARSE_FAILED = 201

    # Files and streams (3xx)
    FILE_NOT_FOUND = 301
    FILE_READ_FAILED = 302

    # Settings (4xx)
    INVALID_CONFIG = 401


class ErrorSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class RecoveryAction:
    """Something the user can do about an error, optionally a command to run."""

    description: str
    command: str | None = None


@dataclass
class ErrorContext:
    """Where an error happened.

    ``additional_info`` holds error-specific details such as the pattern
    position or the parser's byte location.
    """

    operation: str | None = None
    file_path: str | None = None
    component: str | None = None
    additional_info: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utcnow)


class SqlSiftError(Exception):
    """Base class of every error sqlsift raises.

    ``str(error)`` is the technical message for logs; ``user_message`` is
    what the CLI shows.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code, self.user_message, self.severity = code, user_message, severity
        self.context = context if context is not None else ErrorContext()
        self.recovery_actions = list(recovery_actions or ())
        self.original_error = original_error

    def get_formatted_message(self) -> str:
        """Render the error for a terminal: message, code, context, then actions."""
        lines = [f"[Error] {self.user_message}", f"   Code: {self.code.value}"]
        lines.extend(
            f"   {label}: {value}"
            for label, value in self._context_lines()
            if value
        )
        if self.recovery_actions:
            lines += ["", "Suggested actions:"]
        for number, action in enumerate(self.recovery_actions, start=1):
            lines.append(f"   {number}. {action.description}")
            if action.command:
                lines.append(f"      Run: {action.command}")
        return "\n".join(lines)

    def _context_lines(self) -> list[tuple[str, str | None]]:
        return [
            ("Operation", self.context.operation),
            ("File", self.context.file_path),
            ("Component", self.context.component),
        ]

    def to_dict(self) -> dict[str, Any]:
        context = asdict(self.context)
        context["timestamp"] = self.context.timestamp.isoformat()
        severity = self.severity
        return {
            "name": type(self).__name__,
            "code": int(self.code),
            "message": str(self),
            "user_message": self.user_message,
            "severity": severity.value if isinstance(severity, Enum) else severity,
            "context": context,
            "recovery_actions": [asdict(action) for action in self.recovery_actions],
            "original_error": None if self.original_error is None else str(self.original_error),
        }


class PatternSyntaxError(SqlSiftError):
    """Malformed pattern text.

    Raised by the pattern parser before any search runs. ``position`` is the
    0-based character offset of the offending token in ``pattern``.
    """

    def __init__(self, message: str, pattern: str, position: int) -> None:
        super().__init__(
            code=ErrorCode.PATTERN_SYNTAX,
            message=f"{message} at position {position}",
            user_message=f"Invalid pattern: {message}",
            severity=ErrorSeverity.MEDIUM,
            context=ErrorContext(
                operation="parse_pattern",
                component="patterns.parser",
                additional_info={"pattern": pattern, "position": position},
            ),
            recovery_actions=[
                RecoveryAction(
                    description="Check the pattern structure",
                    command=f"sqlsift explain '{pattern}'",
                )
            ],
        )
        self.reason = message
        self.pattern = pattern
        self.position = position

    def get_formatted_message(self) -> str:
        """Formatted message with a caret under the offending position."""
        pointer = " " * self.position + "^"
        return "\n".join(
            [
                f"[Error] {self.user_message}",
                f"   {self.pattern}",
                f"   {pointer}",
            ]
        )


class UpstreamParseError(SqlSiftError):
    """SQL the external parser rejected.

    The parser's own message and location are kept as-is; nothing is repaired.
    """

    def __init__(
        self,
        message: str,
        sql: str,
        location: int | None = None,
        file_path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SQL_PARSE_FAILED,
            message=message,
            user_message=f"SQL parse error: {message}",
            severity=ErrorSeverity.MEDIUM,
            context=ErrorContext(
                operation="parse_sql",
                file_path=file_path,
                component="sql.parser",
                additional_info={"location": location},
            ),
            original_error=original_error,
        )
        self.sql = sql
        self.location = location


class _CategorizedError(SqlSiftError):
    """Error whose code, severity and fallback message are set per class."""

    default_code: ErrorCode
    default_severity: ErrorSeverity = ErrorSeverity.MEDIUM
    fallback_message: str

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        *,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code or self.default_code,
            message,
            user_message or self.fallback_message,
            self.default_severity,
            context,
            recovery_actions,
            original_error,
        )


class ConfigurationError(_CategorizedError):
    """Invalid configuration file contents or environment overrides."""

    default_code = ErrorCode.INVALID_CONFIG
    default_severity = ErrorSeverity.HIGH
    fallback_message = "Configuration error occurred."


class ResourceError(_CategorizedError):
    """An input file or stream that is missing or unreadable."""

    default_code = ErrorCode.FILE_NOT_FOUND
    fallback_message = "Resource access failed."
