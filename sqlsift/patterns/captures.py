"""Capture bookkeeping for a single match attempt.

Captures made at every recursion level of one top-level match end up in
one flat mapping. Branches that may fail (alternatives, negations, whole
capture sub-patterns) record into a child collector that is merged into
its parent only on success, so a failed branch never leaks bindings.
"""

from __future__ import annotations

from typing import Any, Iterator

from loguru import logger

# Capture name -> matched node or field value
CaptureSet = dict[str, Any]


class CaptureCollector:
    """Accumulates named bindings in traversal order.

    Binding a name twice keeps the later value.
    """

    def __init__(self) -> None:
        self._bindings: CaptureSet = {}

    def bind(self, name: str, value: Any) -> None:
        """Record ``name -> value``, replacing any earlier binding."""
        if name in self._bindings:
            logger.debug(f"Capture ${name} bound again; keeping the later value")
        self._bindings[name] = value

    def child(self) -> CaptureCollector:
        """Scratch collector for a branch that may still fail."""
        return CaptureCollector()

    def extend(self, other: CaptureCollector) -> None:
        """Merge a succeeded branch's bindings, in that branch's order."""
        for name, value in other._bindings.items():
            self.bind(name, value)

    def as_dict(self) -> CaptureSet:
        """Snapshot of the bindings as a plain dict."""
        return dict(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)
