"""
sqlsift utility modules.

Shared utilities used across the sqlsift codebase:
- Logging (loguru, STDERR-only sink)
- Field-name conventions
- JSON-ready serialization
"""

# Logger
from .logger import configure_logging, is_debug_enabled, logger

# Naming
from .naming import normalize_field_key, to_snake_case

# Serialization
from .serialization import node_to_primitives, serialize_to_primitives

__all__ = [
    # Logger
    "configure_logging",
    "is_debug_enabled",
    "logger",
    # Naming
    "normalize_field_key",
    "to_snake_case",
    # Serialization
    "node_to_primitives",
    "serialize_to_primitives",
]
