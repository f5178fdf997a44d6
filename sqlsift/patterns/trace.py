"""Diagnostic trace of match attempts.

A trace sink is an optional observer passed to a Matcher or a search. It
receives one TraceEvent per pattern step with the step's outcome. Sinks
only watch: the matcher never reads anything back from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from .types import Pattern, format_pattern


class TraceStep(StrEnum):
    """What the matcher was doing when it emitted an event."""

    NODE = "node"
    FIELD = "field"
    WILDCARD = "wildcard"
    LITERAL = "literal"
    CAPTURE = "capture"
    LIST = "list"
    LOGIC = "logic"


@dataclass(frozen=True)
class TraceEvent:
    """One attempted pattern step."""

    step: TraceStep
    pattern: Pattern
    candidate: Any
    outcome: bool
    depth: int = 0
    field: str | None = None

    def describe(self) -> str:
        """One-line human readable form."""
        status = "match" if self.outcome else "no match"
        where = f" .{self.field}" if self.field else ""
        try:
            text = format_pattern(self.pattern)
        except ValueError:
            text = repr(self.pattern)
        return f"{'  ' * self.depth}{self.step}{where}: {text} -> {status}"


@runtime_checkable
class TraceSink(Protocol):
    """Receives trace events."""

    def __call__(self, event: TraceEvent) -> None:
        ...


class RecordingTraceSink:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[TraceEvent] = []

    def __call__(self, event: TraceEvent) -> None:
        self.events.append(event)

    def steps(self, step: TraceStep) -> list[TraceEvent]:
        """Events of one step type."""
        return [event for event in self.events if event.step is step]

    def clear(self) -> None:
        self.events.clear()


class LoggingTraceSink:
    """Writes each event to the log at DEBUG level."""

    def __call__(self, event: TraceEvent) -> None:
        logger.debug(event.describe())
