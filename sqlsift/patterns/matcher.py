"""Structural matcher: does a pattern match a node?

The matcher walks the pattern and the candidate value together. Each
field pattern is bound to the field of the same name, so there is nothing
to search over and no backtracking: a match attempt is linear in the size
of the pattern and always terminates.

Dispatch is on the pattern type first, then on the shape of the value:

- ``...`` matches anything, including an absent field
- ``?p`` matches an absent value or a value matching ``p``
- ``$name: p`` matches like ``p`` and records the value
- ``!p`` matches when ``p`` does not; ``{a b}`` tries alternatives in order
- ``[a b]`` requires every option to match the same value
- ``()`` matches an empty list, which the parser stores as an absent field
- everything else fails on an absent value
- ``_`` matches any present value
- list values are matched positionally; a trailing ``...`` absorbs the rest
- literals compare scalars (and the payload of value nodes such as ``String``)
- node patterns compare kinds, then every listed field

Naming a field in a node pattern asserts that the field is present:
``(SelectStmt (whereClause ...))`` does not match a SELECT without WHERE.
Write ``(whereClause ?...)`` to accept both, or ``(whereClause !_)`` to
require the field to be absent.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlsift.tree import ABSENT, FieldShape, TreeAdapter, default_adapter

from .captures import CaptureCollector, CaptureSet
from .trace import TraceEvent, TraceSink, TraceStep
from .types import (
    AllOf,
    AnyOf,
    AnyValue,
    Capture,
    KindOnly,
    KindWithFields,
    ListPattern,
    Literal,
    Maybe,
    Not,
    Pattern,
    Wildcard,
)


class Matcher:
    """Matches patterns against AST nodes through a tree adapter.

    A Matcher holds no per-match state; captures live in a collector
    created for each call. One instance may be shared across threads.

    Usage:
        matcher = Matcher()
        captures = matcher.match(compile_pattern("$t: RangeVar"), node)
        if captures is not None:
            print(captures["t"])
    """

    def __init__(
        self,
        adapter: TreeAdapter | None = None,
        trace: TraceSink | None = None,
    ):
        """Initialize the matcher.

        Args:
            adapter: Tree adapter for the nodes being matched. Defaults to
                the pglast adapter.
            trace: Optional sink receiving one event per pattern step.
        """
        self._adapter = adapter or default_adapter()
        self._trace = trace

    @property
    def adapter(self) -> TreeAdapter:
        return self._adapter

    def match(self, pattern: Pattern, node: Any) -> CaptureSet | None:
        """Match a pattern with ``node`` as the match root.

        Returns:
            The captures made (possibly empty) on success, None otherwise.
        """
        return self.match_field(pattern, node)

    def match_field(self, pattern: Pattern, value: Any) -> CaptureSet | None:
        """Match a pattern against any field value (node, list, scalar or ABSENT)."""
        collector = CaptureCollector()
        if self._match_value(pattern, value, collector, 0):
            return collector.as_dict()
        return None

    def matches(self, pattern: Pattern, node: Any) -> bool:
        """Boolean form of match()."""
        return self.match(pattern, node) is not None

    # -- dispatch ------------------------------------------------------------

    def _match_value(
        self,
        pattern: Pattern,
        value: Any,
        captures: CaptureCollector,
        depth: int,
    ) -> bool:
        if isinstance(pattern, Wildcard):
            return self._emit(TraceStep.WILDCARD, pattern, value, True, depth)

        if isinstance(pattern, Maybe):
            if value is ABSENT or value is None:
                return self._emit(TraceStep.LOGIC, pattern, value, True, depth)
            outcome = self._match_value(pattern.pattern, value, captures, depth + 1)
            return self._emit(TraceStep.LOGIC, pattern, value, outcome, depth)

        if isinstance(pattern, Capture):
            return self._match_capture(pattern, value, captures, depth)

        if isinstance(pattern, Not):
            # Bindings made inside a negation are discarded either way.
            outcome = not self._match_value(
                pattern.pattern, value, captures.child(), depth + 1
            )
            return self._emit(TraceStep.LOGIC, pattern, value, outcome, depth)

        if isinstance(pattern, AnyOf):
            return self._match_any_of(pattern, value, captures, depth)

        if isinstance(pattern, AllOf):
            return self._match_all_of(pattern, value, captures, depth)

        shape = self._adapter.shape_of(value)
        if shape is FieldShape.ABSENT:
            if isinstance(pattern, ListPattern) and not pattern.items:
                return self._emit(TraceStep.LIST, pattern, value, True, depth)
            return self._emit(self._step_for(pattern), pattern, value, False, depth)

        if isinstance(pattern, AnyValue):
            return self._emit(TraceStep.WILDCARD, pattern, value, True, depth)

        if isinstance(pattern, ListPattern):
            if shape is not FieldShape.LIST:
                return self._emit(TraceStep.LIST, pattern, value, False, depth)
            return self._match_list(pattern, value, captures, depth)

        if shape is FieldShape.LIST:
            # A single pattern against a list is a one-element list pattern.
            return self._match_list(ListPattern((pattern,)), value, captures, depth)

        if isinstance(pattern, Literal):
            outcome = self._match_literal(pattern, value, shape)
            return self._emit(TraceStep.LITERAL, pattern, value, outcome, depth)

        if isinstance(pattern, (KindOnly, KindWithFields)):
            if shape is not FieldShape.NODE:
                return self._emit(TraceStep.NODE, pattern, value, False, depth)
            return self._match_node(pattern, value, captures, depth)

        raise TypeError(f"Not a pattern: {pattern!r}")

    # -- pattern kinds ---------------------------------------------------------

    def _match_capture(
        self,
        pattern: Capture,
        value: Any,
        captures: CaptureCollector,
        depth: int,
    ) -> bool:
        branch = captures.child()
        branch.bind(pattern.name, value)
        outcome = self._match_value(pattern.pattern, value, branch, depth + 1)
        if outcome:
            captures.extend(branch)
        return self._emit(TraceStep.CAPTURE, pattern, value, outcome, depth)

    def _match_any_of(
        self,
        pattern: AnyOf,
        value: Any,
        captures: CaptureCollector,
        depth: int,
    ) -> bool:
        for option in pattern.options:
            branch = captures.child()
            if self._match_value(option, value, branch, depth + 1):
                captures.extend(branch)
                return self._emit(TraceStep.LOGIC, pattern, value, True, depth)
        return self._emit(TraceStep.LOGIC, pattern, value, False, depth)

    def _match_all_of(
        self,
        pattern: AllOf,
        value: Any,
        captures: CaptureCollector,
        depth: int,
    ) -> bool:
        branch = captures.child()
        for option in pattern.options:
            if not self._match_value(option, value, branch, depth + 1):
                return self._emit(TraceStep.LOGIC, pattern, value, False, depth)
        captures.extend(branch)
        return self._emit(TraceStep.LOGIC, pattern, value, True, depth)

    def _match_list(
        self,
        pattern: ListPattern,
        values: Any,
        captures: CaptureCollector,
        depth: int,
    ) -> bool:
        items = pattern.items
        open_ended = bool(items) and isinstance(items[-1], Wildcard)
        prefix = items[:-1] if open_ended else items

        if open_ended:
            fits = len(values) >= len(prefix)
        else:
            fits = len(values) == len(prefix)
        if not fits:
            return self._emit(TraceStep.LIST, pattern, values, False, depth)

        for item, element in zip(prefix, values):
            if not self._match_value(item, element, captures, depth + 1):
                return self._emit(TraceStep.LIST, pattern, values, False, depth)
        return self._emit(TraceStep.LIST, pattern, values, True, depth)

    def _match_node(
        self,
        pattern: KindOnly | KindWithFields,
        node: Any,
        captures: CaptureCollector,
        depth: int,
    ) -> bool:
        if pattern.kind is not None and self._adapter.kind(node) != pattern.kind:
            return self._emit(TraceStep.NODE, pattern, node, False, depth)

        if isinstance(pattern, KindWithFields):
            for field in pattern.fields:
                value = self._adapter.get_field(node, field.key)
                if value is ABSENT and not accepts_absent(field.pattern):
                    self._emit(
                        TraceStep.FIELD, field.pattern, value, False, depth + 1, field.name
                    )
                    return self._emit(TraceStep.NODE, pattern, node, False, depth)
                outcome = self._match_value(field.pattern, value, captures, depth + 2)
                self._emit(TraceStep.FIELD, field.pattern, value, outcome, depth + 1, field.name)
                if not outcome:
                    return self._emit(TraceStep.NODE, pattern, node, False, depth)

        return self._emit(TraceStep.NODE, pattern, node, True, depth)

    def _match_literal(self, pattern: Literal, value: Any, shape: FieldShape) -> bool:
        if shape is FieldShape.NODE:
            value = self._adapter.scalar_payload(value)
            if value is ABSENT:
                return False
        return scalar_equals(pattern.value, value)

    # -- tracing ---------------------------------------------------------------

    def _emit(
        self,
        step: TraceStep,
        pattern: Pattern,
        candidate: Any,
        outcome: bool,
        depth: int,
        field: str | None = None,
    ) -> bool:
        if self._trace is not None:
            self._trace(TraceEvent(step, pattern, candidate, outcome, depth, field))
        return outcome

    @staticmethod
    def _step_for(pattern: Pattern) -> TraceStep:
        if isinstance(pattern, Literal):
            return TraceStep.LITERAL
        if isinstance(pattern, ListPattern):
            return TraceStep.LIST
        if isinstance(pattern, AnyValue):
            return TraceStep.WILDCARD
        return TraceStep.NODE


def scalar_equals(expected: str | int | float | bool, actual: Any) -> bool:
    """Compare a literal with a scalar field value.

    Strings compare exactly, booleans only equal booleans, numbers compare
    by numeric value (a numeric string such as ``Float.fval`` counts), and
    enum members compare by label.
    """
    if isinstance(actual, Enum):
        return isinstance(expected, str) and actual.name == expected

    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected == actual

    if isinstance(expected, str):
        return isinstance(actual, str) and actual == expected

    # expected is a number from here on
    if isinstance(actual, (int, float)):
        return actual == expected
    if isinstance(actual, str):
        try:
            return float(actual) == expected
        except ValueError:
            return False
    return False


def match(
    pattern: Pattern,
    node: Any,
    adapter: TreeAdapter | None = None,
    trace: TraceSink | None = None,
) -> CaptureSet | None:
    """Match one pattern against one node; see Matcher.match()."""
    return Matcher(adapter, trace).match(pattern, node)


def accepts_absent(pattern: Pattern) -> bool:
    """Whether a field pattern may be applied to a field that holds nothing.

    Optional and negated patterns qualify, as does ``()`` because the
    parser stores an empty list as an absent field. Under a capture the
    inner pattern decides; an alternative needs one such option and a
    conjunction needs all of them. A plain ``...`` does not qualify: naming
    a field in a node pattern requires the field to be present.
    """
    if isinstance(pattern, (Maybe, Not)):
        return True
    if isinstance(pattern, ListPattern):
        return not pattern.items
    if isinstance(pattern, Capture):
        return accepts_absent(pattern.pattern)
    if isinstance(pattern, AnyOf):
        return any(accepts_absent(option) for option in pattern.options)
    if isinstance(pattern, AllOf):
        return all(accepts_absent(option) for option in pattern.options)
    return False
