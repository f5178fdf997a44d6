"""Field-name conventions.

libpg_query names node fields inconsistently (``whereClause``, ``relname``,
``stmt_location``, ``agg_star``), while users write whichever spelling they
find readable. Field lookups therefore go through a normalized key that
ignores case and underscores, so ``whereClause``, ``where_clause`` and
``WHERECLAUSE`` all name the same field.
"""

from __future__ import annotations

import re
from functools import lru_cache

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@lru_cache(maxsize=4096)
def normalize_field_key(name: str) -> str:
    """Return the lookup key for a field name.

    Examples:
        >>> normalize_field_key("whereClause")
        'whereclause'
        >>> normalize_field_key("where_clause")
        'whereclause'
    """
    return name.replace("_", "").lower()


@lru_cache(maxsize=4096)
def to_snake_case(name: str) -> str:
    """Convert a camelCase field name to snake_case.

    Examples:
        >>> to_snake_case("whereClause")
        'where_clause'
        >>> to_snake_case("stmt_location")
        'stmt_location'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()
