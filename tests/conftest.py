"""
Pytest configuration and shared fixtures for sqlsift tests.

Fixtures parse real SQL with pglast; nothing is mocked.
"""

import pytest

from sqlsift.sql import parse_sql


@pytest.fixture
def statements():
    """Parse SQL text into statements."""

    def _parse(sql: str):
        return parse_sql(sql)

    return _parse


@pytest.fixture
def stmt():
    """Parse SQL text and return the first statement node."""

    def _first(sql: str):
        return parse_sql(sql)[0].node

    return _first
