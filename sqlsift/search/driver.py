"""Search driver: apply one pattern at every node of one or more trees.

Traversal is pre-order (a node before its descendants, children in field
declaration order) and uses an explicit stack, so very deep expression
trees cannot exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from loguru import logger

from sqlsift.patterns import Matcher, Pattern, TraceSink, compile_pattern
from sqlsift.tree import TreeAdapter, default_adapter
from sqlsift.utils.serialization import serialize_to_primitives


@dataclass(frozen=True)
class MatchResult:
    """One node that matched, with the captures made while matching it."""

    node: Any
    kind: str
    captures: dict[str, Any] = field(default_factory=dict)
    statement_index: int = 0

    def to_dict(self, adapter: TreeAdapter | None = None) -> dict[str, Any]:
        """JSON-ready form of the match."""
        return {
            "statement_index": self.statement_index,
            "kind": self.kind,
            "node": serialize_to_primitives(self.node, adapter),
            "captures": serialize_to_primitives(self.captures, adapter),
        }


def iter_nodes(root: Any, adapter: TreeAdapter | None = None) -> Iterator[Any]:
    """Yield ``root`` and every node below it in pre-order."""
    adapter = adapter or default_adapter()
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        children = list(adapter.children(node))
        stack.extend(reversed(children))


def _resolve(pattern: Pattern | str) -> Pattern:
    if isinstance(pattern, str):
        return compile_pattern(pattern)
    return pattern


def _search_root(
    matcher: Matcher,
    pattern: Pattern,
    root: Any,
    statement_index: int,
) -> list[MatchResult]:
    adapter = matcher.adapter
    results = []
    for node in iter_nodes(root, adapter):
        captures = matcher.match(pattern, node)
        if captures is not None:
            results.append(MatchResult(node, adapter.kind(node), captures, statement_index))
    return results


def search(
    pattern: Pattern | str,
    root: Any,
    *,
    adapter: TreeAdapter | None = None,
    trace: TraceSink | None = None,
) -> list[MatchResult]:
    """Find every node in one tree that matches ``pattern``.

    Args:
        pattern: Pattern tree, or DSL text which is compiled first.
        root: Root node of the tree to search.
        adapter: Tree adapter. Defaults to the pglast adapter.
        trace: Optional trace sink.

    Returns:
        Matches in pre-order; an empty list when nothing matches.

    Raises:
        PatternSyntaxError: If ``pattern`` is text and malformed.
    """
    compiled = _resolve(pattern)
    return _search_root(Matcher(adapter, trace), compiled, root, 0)


def search_all(
    pattern: Pattern | str,
    roots: Iterable[Any],
    *,
    adapter: TreeAdapter | None = None,
    trace: TraceSink | None = None,
) -> list[MatchResult]:
    """Search several trees (typically the statements of one script).

    Results are grouped by root in input order; ``statement_index`` records
    the position of the root each match came from.
    """
    compiled = _resolve(pattern)
    matcher = Matcher(adapter, trace)
    results: list[MatchResult] = []
    searched = 0
    for index, root in enumerate(roots):
        results.extend(_search_root(matcher, compiled, root, index))
        searched += 1
    logger.debug(f"Search matched {len(results)} node(s) across {searched} root(s)")
    return results


def search_with_captures(
    pattern: Pattern | str,
    roots: Any,
    *,
    adapter: TreeAdapter | None = None,
    trace: TraceSink | None = None,
) -> list[MatchResult]:
    """Like search_all(), keeping only matches that captured something.

    ``roots`` may be a single root node or a sequence of roots.
    """
    if not isinstance(roots, (list, tuple)):
        roots = [roots]
    results = search_all(pattern, roots, adapter=adapter, trace=trace)
    return [result for result in results if result.captures]
