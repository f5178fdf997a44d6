"""
Logging setup for sqlsift.

Library modules log through loguru and never install sinks themselves.
Entry points (the CLI) call configure_logging() once so that diagnostics
go to STDERR and STDOUT stays reserved for search output.
"""

import os
import sys

from loguru import logger as loguru_logger

from sqlsift.constants import ENV_PREFIX


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled via the environment."""
    return os.environ.get(f"{ENV_PREFIX}DEBUG", "").lower() in ("1", "true", "yes")


def configure_logging(debug: bool | None = None) -> None:
    """Install a single STDERR sink.

    Args:
        debug: Log at DEBUG level when true, WARNING otherwise.
            Defaults to the SQLSIFT_DEBUG environment variable.
    """
    if debug is None:
        debug = is_debug_enabled()

    loguru_logger.remove()
    loguru_logger.add(
        sys.stderr,
        level="DEBUG" if debug else "WARNING",
        format="<level>{level: <8}</level> | {name}:{function} - {message}",
    )


# Export loguru logger for direct use
logger = loguru_logger
