"""Shared constants and helpers for sqlsift.

Centralizes default file patterns, ignore directories, size limits
and timezone-aware datetime helpers.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware "now", usable as a dataclass ``default_factory``."""
    return datetime.now(timezone.utc)


# Default SQL file glob patterns used by the search service and CLI
DEFAULT_SQL_PATTERNS: list[str] = [
    "**/*.sql",
]

# Maximum file size to parse during directory searches (1 MB).
# Larger files are skipped to keep parse times bounded.
MAX_FILE_SIZE: int = 1_000_000

# Upper bound for the compiled pattern cache.
PATTERN_CACHE_SIZE: int = 1000

# Directories to skip during file traversal.
DEFAULT_IGNORE_DIRS: set[str] = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "__pycache__",
    "node_modules",
    "build",
    "dist",
}

# Name of the per-project configuration directory.
CONFIG_DIR_NAME: str = ".sqlsift"
CONFIG_FILE_NAME: str = "config.json"

# Environment variable prefix for configuration overrides.
ENV_PREFIX: str = "SQLSIFT_"
