"""Fixtures for search tests.

All fixtures create REAL files in temp directories. No mocks.
"""

from pathlib import Path

import pytest


@pytest.fixture
def sample_sql_files(tmp_path: Path) -> Path:
    """Create a small SQL project.

    Layout:
        schema/tables.sql     CREATE TABLE users / orders
        queries/report.sql    two SELECTs, one against users
        queries/broken.sql    not valid SQL
        node_modules/x.sql    must be ignored
        notes.txt             not SQL
    """
    schema = tmp_path / "schema"
    schema.mkdir()
    (schema / "tables.sql").write_text(
        "CREATE TABLE users (id int PRIMARY KEY, name text);\n"
        "CREATE TABLE orders (id int, user_id int REFERENCES users (id));\n"
    )

    queries = tmp_path / "queries"
    queries.mkdir()
    (queries / "report.sql").write_text(
        "SELECT name\n"
        "FROM users\n"
        "WHERE id = 1;\n"
        "\n"
        "SELECT count(*) FROM orders;\n"
    )
    (queries / "broken.sql").write_text("SELEC name FROM users;\n")

    ignored = tmp_path / "node_modules"
    ignored.mkdir()
    (ignored / "x.sql").write_text("SELECT * FROM users;\n")

    (tmp_path / "notes.txt").write_text("SELECT * FROM users;\n")
    return tmp_path
