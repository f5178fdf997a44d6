"""JSON tree adapter tests.

The same patterns run over libpg_query JSON documents produced by
pglast.parser.parse_sql_json.
"""

import json

import pytest
from pglast.parser import parse_sql_json

from sqlsift.search import search, search_all
from sqlsift.tree import ABSENT, FieldShape, JsonTreeAdapter


@pytest.fixture
def adapter():
    return JsonTreeAdapter()


@pytest.fixture
def json_roots(adapter):
    def _roots(sql: str):
        return adapter.statements(parse_sql_json(sql))

    return _roots


class TestJsonTreeAdapter:
    """Node view over decoded JSON."""

    def test_statements(self, adapter, json_roots):
        roots = json_roots("SELECT 1; DELETE FROM t")
        assert [adapter.kind(r) for r in roots] == ["SelectStmt", "DeleteStmt"]

    def test_statements_from_decoded_document(self, adapter):
        document = json.loads(parse_sql_json("SELECT 1"))
        assert adapter.kind(adapter.statements(document)[0]) == "SelectStmt"

    def test_is_node(self, adapter):
        assert adapter.is_node({"A_Star": {}})
        assert not adapter.is_node({"sval": "x"})
        assert not adapter.is_node({"A": {}, "B": {}})
        assert not adapter.is_node("A_Star")

    def test_omitted_fields_are_absent(self, adapter, json_roots):
        root = json_roots("SELECT 1")[0]
        assert adapter.get_field(root, "whereclause") is ABSENT
        assert adapter.shape_of(adapter.get_field(root, "targetlist")) is FieldShape.LIST

    def test_inline_const_payload(self, adapter, json_roots):
        root = json_roots("SELECT 42")[0]
        target = adapter.get_field(root, "targetlist")[0]
        const = adapter.get_field(target, "val")
        assert adapter.kind(const) == "A_Const"
        assert adapter.get_field(const, "ival") == 42

    def test_omitted_value_node_payload(self, adapter):
        assert adapter.scalar_payload({"Integer": {}}) == 0
        assert adapter.scalar_payload({"Boolean": {}}) is False
        assert adapter.scalar_payload({"String": {"sval": "x"}}) == "x"
        assert adapter.scalar_payload({"RangeVar": {}}) is ABSENT


class TestSearchOverJson:
    """Patterns behave the same over JSON trees."""

    def test_capture(self, adapter, json_roots):
        results = search_all("(RangeVar (relname $t: _))", json_roots("SELECT * FROM users, orders"), adapter=adapter)
        assert [r.captures["t"] for r in results] == ["users", "orders"]
        assert all(r.kind == "RangeVar" for r in results)

    def test_presence(self, adapter, json_roots):
        pattern = "(SelectStmt (whereClause ...))"
        assert search_all(pattern, json_roots("SELECT 1"), adapter=adapter) == []
        assert len(search_all(pattern, json_roots("SELECT 1 WHERE true"), adapter=adapter)) == 1

    def test_enum_strings(self, adapter, json_roots):
        results = search_all('(A_Expr (kind "AEXPR_OP"))', json_roots("SELECT 1 WHERE a = b"), adapter=adapter)
        assert len(results) == 1

    def test_value_nodes(self, adapter, json_roots):
        results = search_all('(ColumnRef (fields "id"))', json_roots("SELECT id FROM t"), adapter=adapter)
        assert len(results) == 1

    def test_hand_built_tree(self, adapter):
        tree = {"SelectStmt": {"fromClause": [{"RangeVar": {"relname": "users", "inh": True}}]}}
        results = search("(RangeVar (inh true))", tree, adapter=adapter)
        assert len(results) == 1
        assert results[0].node == {"RangeVar": {"relname": "users", "inh": True}}
