"""Tree adapters: uniform access to parsed SQL nodes.

Components:
- TreeAdapter: abstract projection (kind, fields, children)
- PglastTreeAdapter: pglast AST objects (default)
- JsonTreeAdapter: libpg_query JSON documents
- ABSENT / FieldShape: field value classification
"""

from functools import lru_cache

from .adapter import ABSENT, FieldShape, FieldValue, TreeAdapter
from .json_adapter import JsonTreeAdapter
from .pglast_adapter import PglastTreeAdapter, field_names, field_table


@lru_cache(maxsize=1)
def default_adapter() -> TreeAdapter:
    """Shared stateless adapter used when callers don't pass one."""
    return PglastTreeAdapter()


__all__ = [
    "ABSENT",
    "FieldShape",
    "FieldValue",
    "TreeAdapter",
    "PglastTreeAdapter",
    "JsonTreeAdapter",
    "default_adapter",
    "field_names",
    "field_table",
]
