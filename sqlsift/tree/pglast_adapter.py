"""Tree adapter for pglast AST objects.

pglast generates one class per libpg_query node type and declares each
class's fields in ``__slots__`` (a name -> C type mapping). Field tables are
read from those declarations once per class and cached; lookups afterwards
are plain dictionary hits.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterator

from pglast import ast

from sqlsift.utils.naming import normalize_field_key

from .adapter import ABSENT, FieldValue, TreeAdapter


@lru_cache(maxsize=None)
def field_names(node_class: type) -> tuple[str, ...]:
    """Declared field names of a pglast node class, base classes first."""
    names: list[str] = []
    for klass in reversed(node_class.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name.startswith("_") or name in names:
                continue
            names.append(name)
    return tuple(names)


@lru_cache(maxsize=None)
def field_table(node_class: type) -> dict[str, str]:
    """Map normalized field keys to attribute names for a node class."""
    return {normalize_field_key(name): name for name in field_names(node_class)}


class PglastTreeAdapter(TreeAdapter):
    """Adapter over ``pglast.ast.Node`` instances.

    Usage:
        adapter = PglastTreeAdapter()
        stmt = pglast.parse_sql("SELECT 1")[0].stmt
        adapter.kind(stmt)                    # 'SelectStmt'
        adapter.get_field(stmt, "targetlist") # (ResTarget(...),)
    """

    def is_node(self, value: Any) -> bool:
        return isinstance(value, ast.Node)

    def kind(self, node: Any) -> str:
        return type(node).__name__

    def fields(self, node: Any) -> Iterator[tuple[str, FieldValue]]:
        for name in field_names(type(node)):
            value = getattr(node, name, None)
            yield name, ABSENT if value is None else value

    def get_field(self, node: Any, key: str) -> FieldValue:
        name = field_table(type(node)).get(key)
        if name is None:
            return ABSENT
        value = getattr(node, name, None)
        return ABSENT if value is None else value
