"""Fixtures for CLI tests."""

import sys

import pytest
from click.testing import CliRunner
from loguru import logger


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI installs its own sink on a stream the runner closes afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)
