"""Uniform read-only view over parsed SQL trees.

The matcher and the search driver never touch parser objects directly.
They see every node through a TreeAdapter as a kind tag plus an ordered
set of named fields, each holding a node, a list, a scalar, or nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any, Iterator

from sqlsift.utils.naming import normalize_field_key


class _Absent:
    """Marker for a field that holds nothing."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

# A field value: a node, a (possibly nested) list of nodes, a scalar, or ABSENT.
FieldValue = Any


class FieldShape(StrEnum):
    """The four shapes a field value can take."""

    NODE = "node"
    LIST = "list"
    SCALAR = "scalar"
    ABSENT = "absent"


class TreeAdapter(ABC):
    """Projection of an external AST onto kinds and named fields.

    Implementations are stateless; one instance can serve any number of
    concurrent searches.
    """

    # PostgreSQL value nodes and the field holding their scalar payload.
    VALUE_NODE_FIELDS: dict[str, str] = {
        "String": "sval",
        "Integer": "ival",
        "Float": "fval",
        "Boolean": "boolval",
        "BitString": "bsval",
    }

    @abstractmethod
    def is_node(self, value: Any) -> bool:
        """Check whether a value is an AST node."""

    @abstractmethod
    def kind(self, node: Any) -> str:
        """Kind tag of a node, e.g. ``SelectStmt``."""

    @abstractmethod
    def fields(self, node: Any) -> Iterator[tuple[str, FieldValue]]:
        """Yield ``(name, value)`` pairs in the kind's declaration order.

        Missing values are reported as ABSENT.
        """

    def get_field(self, node: Any, key: str) -> FieldValue:
        """Look up a field by its normalized key.

        Args:
            node: AST node.
            key: Key produced by ``normalize_field_key``.

        Returns:
            The field value, or ABSENT when the kind has no such field.
        """
        for name, value in self.fields(node):
            if normalize_field_key(name) == key:
                return value
        return ABSENT

    def shape_of(self, value: FieldValue) -> FieldShape:
        """Classify a field value."""
        if value is None or value is ABSENT:
            return FieldShape.ABSENT
        if self.is_node(value):
            return FieldShape.NODE
        if isinstance(value, (list, tuple)):
            return FieldShape.LIST
        return FieldShape.SCALAR

    def children(self, node: Any) -> Iterator[Any]:
        """Yield child nodes in field order, flattening nested lists."""
        for _, value in self.fields(node):
            yield from self._flatten(value)

    def _flatten(self, value: FieldValue) -> Iterator[Any]:
        if self.is_node(value):
            yield value
        elif isinstance(value, (list, tuple)):
            for item in value:
                yield from self._flatten(item)

    def scalar_payload(self, node: Any) -> FieldValue:
        """Scalar wrapped by a value node (``String``, ``Integer``...).

        Returns:
            The payload, or ABSENT for any other kind of node.
        """
        field_name = self.VALUE_NODE_FIELDS.get(self.kind(node))
        if field_name is None:
            return ABSENT
        return self.get_field(node, normalize_field_key(field_name))
