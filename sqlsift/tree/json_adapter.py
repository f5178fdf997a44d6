"""Tree adapter for libpg_query JSON parse trees.

libpg_query serializes every node as a single-key object ``{"Kind": {...}}``
and omits fields holding default values. This adapter lets the matcher run
over such documents (for example ``pglast.parser.parse_sql_json`` output or
parse trees stored on disk) without rebuilding pglast objects.
"""

from __future__ import annotations

import json
from typing import Any, Iterator

from .adapter import ABSENT, FieldValue, TreeAdapter

# Defaults for value-node payloads that libpg_query leaves out of the JSON.
_OMITTED_PAYLOAD_DEFAULTS: dict[str, Any] = {
    "Integer": 0,
    "Boolean": False,
    "String": "",
}

# Union members that A_Const stores without a kind wrapper, e.g.
# {"A_Const": {"sval": {"sval": "users"}}}.
_INLINE_PAYLOAD_KEYS = frozenset({"sval", "ival", "fval", "boolval", "bsval"})


class JsonTreeAdapter(TreeAdapter):
    """Adapter over decoded libpg_query JSON."""

    def is_node(self, value: Any) -> bool:
        if not isinstance(value, dict) or len(value) != 1:
            return False
        key, body = next(iter(value.items()))
        return key[:1].isupper() and isinstance(body, dict)

    def kind(self, node: Any) -> str:
        return next(iter(node))

    def fields(self, node: Any) -> Iterator[tuple[str, FieldValue]]:
        body = node[self.kind(node)]
        for name, value in body.items():
            yield name, self._unwrap(name, value)

    def scalar_payload(self, node: Any) -> FieldValue:
        value = super().scalar_payload(node)
        if value is ABSENT:
            return _OMITTED_PAYLOAD_DEFAULTS.get(self.kind(node), ABSENT)
        return value

    def statements(self, document: str | dict) -> list[Any]:
        """Statement nodes of a parse result document, in source order.

        Args:
            document: JSON text or an already decoded ``{"stmts": [...]}`` object.
        """
        if isinstance(document, str):
            document = json.loads(document)
        return [entry["stmt"] for entry in document.get("stmts", []) if "stmt" in entry]

    def _unwrap(self, name: str, value: Any) -> FieldValue:
        if value is None:
            return ABSENT
        if (
            name in _INLINE_PAYLOAD_KEYS
            and isinstance(value, dict)
            and not self.is_node(value)
        ):
            return value.get(name, ABSENT)
        return value
