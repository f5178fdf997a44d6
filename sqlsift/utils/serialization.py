"""JSON-ready views of match results.

Matches hold pglast nodes, enums, dataclasses and capture mappings; the
CLI's ``--json`` output and ``SqlMatch.to_dict()`` need plain dicts, lists
and scalars.
"""

from __future__ import annotations

import math
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlsift.tree.adapter import TreeAdapter


def serialize_to_primitives(data: Any, adapter: TreeAdapter | None = None) -> Any:
    """Reduce ``data`` to values ``json.dumps`` accepts.

    AST nodes (as recognized by ``adapter``, the pglast adapter by default)
    become ``{"@": kind, field: value, ...}`` without their absent fields.
    Integer enums, which is what pglast uses, are written by label. NaN,
    infinities and ``ABSENT`` become None; unknown objects fall back to
    ``to_dict()`` or ``str()``.

    Examples:
        >>> from dataclasses import dataclass
        >>> @dataclass
        ... class Hit:
        ...     kind: str
        ...     line: int
        >>> serialize_to_primitives(Hit("RangeVar", 3))
        {'kind': 'RangeVar', 'line': 3}
    """
    from sqlsift.tree import ABSENT, default_adapter

    adapter = adapter or default_adapter()

    if data is None or data is ABSENT:
        return None
    if isinstance(data, Enum):
        return data.value if isinstance(data.value, str) else data.name
    if isinstance(data, float):
        return data if math.isfinite(data) else None
    if isinstance(data, (str, int)):
        return data
    if isinstance(data, datetime):
        return data.isoformat()

    if adapter.is_node(data):
        return node_to_primitives(data, adapter)
    if isinstance(data, dict):
        return {
            serialize_to_primitives(key, adapter): serialize_to_primitives(value, adapter)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [serialize_to_primitives(item, adapter) for item in data]
    if is_dataclass(data) and not isinstance(data, type):
        return serialize_to_primitives(asdict(data), adapter)
    if callable(getattr(data, "to_dict", None)):
        return serialize_to_primitives(data.to_dict(), adapter)
    return str(data)


def node_to_primitives(node: Any, adapter: TreeAdapter) -> dict[str, Any]:
    """Serialize one AST node through the adapter's field projection."""
    from sqlsift.tree import FieldShape

    result: dict[str, Any] = {"@": adapter.kind(node)}
    for name, value in adapter.fields(node):
        if adapter.shape_of(value) is not FieldShape.ABSENT:
            result[name] = serialize_to_primitives(value, adapter)
    return result
