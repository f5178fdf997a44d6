"""
Phase 1 Tests: Tree adapters, naming and serialization

These tests verify the uniform node view over real pglast trees:
- Kinds, fields and field shapes
- Normalized field lookups
- JSON-ready serialization of nodes
"""

import json

import pytest
from pglast import ast
from pglast.enums import A_Expr_Kind

from sqlsift.tree import ABSENT, FieldShape, PglastTreeAdapter, field_names
from sqlsift.utils import normalize_field_key, serialize_to_primitives, to_snake_case


@pytest.fixture
def adapter():
    return PglastTreeAdapter()


class TestAbsent:
    """Tests for the ABSENT marker."""

    def test_singleton_and_falsy(self):
        from sqlsift.tree.adapter import _Absent

        assert _Absent() is ABSENT
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"


class TestNaming:
    """Tests for field-name conventions."""

    @pytest.mark.parametrize("name", ["whereClause", "where_clause", "WHERECLAUSE"])
    def test_normalized_keys_agree(self, name):
        assert normalize_field_key(name) == "whereclause"

    def test_snake_case(self):
        assert to_snake_case("targetList") == "target_list"
        assert to_snake_case("relname") == "relname"
        assert to_snake_case("stmt_location") == "stmt_location"


class TestPglastTreeAdapter:
    """Tests for the pglast adapter over parsed SQL."""

    def test_kind(self, adapter, stmt):
        node = stmt("SELECT 1")
        assert adapter.is_node(node)
        assert adapter.kind(node) == "SelectStmt"

    def test_field_names_follow_declaration(self):
        names = field_names(ast.SelectStmt)
        assert names.index("targetList") < names.index("fromClause") < names.index("whereClause")

    def test_get_field_by_any_spelling(self, adapter, stmt):
        node = stmt("SELECT * FROM users WHERE id = 1")
        where = adapter.get_field(node, normalize_field_key("where_clause"))
        assert adapter.kind(where) == "A_Expr"
        assert adapter.get_field(node, "whereclause") is where

    def test_missing_and_unknown_fields_are_absent(self, adapter, stmt):
        node = stmt("SELECT 1")
        assert adapter.get_field(node, "whereclause") is ABSENT
        assert adapter.get_field(node, "nosuchfield") is ABSENT

    def test_shapes(self, adapter, stmt):
        node = stmt("SELECT * FROM users WHERE id = 1")
        assert adapter.shape_of(node) is FieldShape.NODE
        assert adapter.shape_of(adapter.get_field(node, "fromclause")) is FieldShape.LIST
        assert adapter.shape_of(adapter.get_field(node, "whereclause")) is FieldShape.NODE
        assert adapter.shape_of(adapter.get_field(node, "intoclause")) is FieldShape.ABSENT
        range_var = adapter.get_field(node, "fromclause")[0]
        assert adapter.shape_of(adapter.get_field(range_var, "relname")) is FieldShape.SCALAR

    def test_enum_field(self, adapter, stmt):
        expr = adapter.get_field(stmt("SELECT 1 WHERE a = b"), "whereclause")
        assert adapter.get_field(expr, "kind") == A_Expr_Kind.AEXPR_OP

    def test_children_flatten_lists(self, adapter, stmt):
        node = stmt("SELECT a, b FROM t")
        kinds = [adapter.kind(child) for child in adapter.children(node)]
        assert kinds == ["ResTarget", "ResTarget", "RangeVar"]

    def test_scalar_payload(self, adapter, stmt):
        target = adapter.get_field(stmt("SELECT 42"), "targetlist")[0]
        const = adapter.get_field(target, "val")
        assert adapter.scalar_payload(adapter.get_field(const, "val")) == 42
        assert adapter.scalar_payload(const) is ABSENT


class TestSerialization:
    """Tests for serialize_to_primitives over nodes."""

    def test_node_to_primitives(self, stmt):
        data = serialize_to_primitives(stmt("SELECT * FROM users"))
        assert data["@"] == "SelectStmt"
        assert data["fromClause"][0]["@"] == "RangeVar"
        assert data["fromClause"][0]["relname"] == "users"
        assert "whereClause" not in data
        json.dumps(data)

    def test_enums_by_label(self, stmt):
        expr = serialize_to_primitives(stmt("SELECT 1 WHERE a = b"))["whereClause"]
        assert expr["kind"] == "AEXPR_OP"

    def test_absent_and_plain_values(self):
        assert serialize_to_primitives(ABSENT) is None
        assert serialize_to_primitives({"t": ("a", 1, float("nan"))}) == {"t": ["a", 1, None]}
