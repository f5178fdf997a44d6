"""
Phase 2 Tests: Pattern parser

Tests for DSL text to pattern tree, including:
- Every surface form
- Field-name spellings
- Error messages and positions
- The compiled pattern cache
"""

import pytest

from sqlsift.patterns import (
    ANY_VALUE,
    WILDCARD,
    AllOf,
    AnyOf,
    Capture,
    FieldPattern,
    KindOnly,
    KindWithFields,
    ListPattern,
    Literal,
    Maybe,
    Not,
    compile_pattern,
    parse_pattern,
    tokenize,
)
from sqlsift.patterns.parser import TokenType
from sqlsift.types import PatternSyntaxError


class TestTokenize:
    """Tests for the tokenizer."""

    def test_structural_characters(self):
        tokens = tokenize('(RangeVar (relname "users"))')
        assert [t.type for t in tokens] == [
            TokenType.LPAREN,
            TokenType.WORD,
            TokenType.LPAREN,
            TokenType.WORD,
            TokenType.STRING,
            TokenType.RPAREN,
            TokenType.RPAREN,
        ]
        assert tokens[4].text == "users"
        assert tokens[4].position == 19

    def test_brackets(self):
        tokens = tokenize("[RangeVar!_]")
        assert [t.type for t in tokens] == [TokenType.LBRACKET, TokenType.WORD, TokenType.RBRACKET]
        assert tokens[1].text == "RangeVar!_"

    def test_single_quotes(self):
        tokens = tokenize("'it\"s'")
        assert tokens[0].type is TokenType.STRING
        assert tokens[0].text == 'it"s'


class TestParseAtoms:
    """Tests for single-token patterns."""

    def test_kind(self):
        assert parse_pattern("SelectStmt") == KindOnly("SelectStmt")
        assert parse_pattern("A_Const") == KindOnly("A_Const")

    def test_wildcards(self):
        assert parse_pattern("...") == WILDCARD
        assert parse_pattern("_") == ANY_VALUE

    @pytest.mark.parametrize(
        "text,value",
        [
            ('"users"', "users"),
            ("'users'", "users"),
            ('""', ""),
            ("42", 42),
            ("-7", -7),
            ("1.5", 1.5),
            ("true", True),
            ("false", False),
        ],
    )
    def test_literals(self, text, value):
        parsed = parse_pattern(text)
        assert isinstance(parsed, Literal)
        assert parsed.value == value
        assert type(parsed.value) is type(value)

    def test_surrounding_whitespace(self):
        assert parse_pattern("  \n SelectStmt \t") == KindOnly("SelectStmt")


class TestParseStructures:
    """Tests for node, field, capture and list patterns."""

    def test_kind_with_fields(self):
        assert parse_pattern("(SelectStmt (whereClause ...))") == KindWithFields(
            "SelectStmt", (FieldPattern("whereClause", WILDCARD),)
        )

    def test_kind_with_no_fields(self):
        assert parse_pattern("(SelectStmt)") == KindWithFields("SelectStmt", ())

    def test_multiple_fields_keep_order(self):
        parsed = parse_pattern('(RangeVar (relname "users") (inh true))')
        assert [f.name for f in parsed.fields] == ["relname", "inh"]

    def test_bare_field_constraint(self):
        assert parse_pattern('(relname "users")') == KindWithFields(
            None, (FieldPattern("relname", Literal("users")),)
        )

    def test_field_spellings_share_a_key(self):
        snake = parse_pattern("(SelectStmt (where_clause ...))").fields[0]
        camel = parse_pattern("(SelectStmt (whereClause ...))").fields[0]
        assert snake.name == "where_clause"
        assert snake.key == camel.key == "whereclause"

    def test_nested_node(self):
        parsed = parse_pattern("(ResTarget (val (ColumnRef (fields ...))))")
        inner = parsed.fields[0].pattern
        assert inner == KindWithFields("ColumnRef", (FieldPattern("fields", WILDCARD),))

    def test_capture(self):
        assert parse_pattern("$t: RangeVar") == Capture("t", KindOnly("RangeVar"))

    def test_capture_glued_to_pattern(self):
        assert parse_pattern("$t:RangeVar") == Capture("t", KindOnly("RangeVar"))

    def test_capture_inside_field(self):
        parsed = parse_pattern("(RangeVar (relname $t: _))")
        assert parsed.fields[0].pattern == Capture("t", ANY_VALUE)

    def test_list_values(self):
        parsed = parse_pattern('(ColumnRef (fields "a" ...))')
        assert parsed.fields[0].pattern == ListPattern((Literal("a"), WILDCARD))

    def test_empty_list(self):
        parsed = parse_pattern("(SelectStmt (groupClause ()))")
        assert parsed.fields[0].pattern == ListPattern(())

    def test_alternation(self):
        assert parse_pattern("{RangeVar JoinExpr}") == AnyOf(
            (KindOnly("RangeVar"), KindOnly("JoinExpr"))
        )

    def test_conjunction(self):
        assert parse_pattern('[$t: RangeVar (relname "users")]') == AllOf(
            (
                Capture("t", KindOnly("RangeVar")),
                KindWithFields(None, (FieldPattern("relname", Literal("users")),)),
            )
        )

    def test_conjunction_inside_field(self):
        parsed = parse_pattern("(SelectStmt (whereClause [?_ !BoolExpr]))")
        assert parsed.fields[0].pattern == AllOf((Maybe(ANY_VALUE), Not(KindOnly("BoolExpr"))))

    def test_underscore_field_name(self):
        assert parse_pattern("(_private ...)") == KindWithFields(
            None, (FieldPattern("_private", WILDCARD),)
        )
        assert parse_pattern("(Foo (_x 1))").fields[0].name == "_x"

    def test_negation_and_optional(self):
        assert parse_pattern("!_") == Not(ANY_VALUE)
        assert parse_pattern("?...") == Maybe(WILDCARD)
        assert parse_pattern('!"x"') == Not(Literal("x"))
        assert parse_pattern("! (SelectStmt)") == Not(KindWithFields("SelectStmt", ()))

    def test_prefix_under_capture(self):
        assert parse_pattern("$w: ?A_Expr") == Capture("w", Maybe(KindOnly("A_Expr")))


class TestParseErrors:
    """Tests for malformed pattern reporting."""

    @pytest.mark.parametrize(
        "text,reason,position",
        [
            ("", "empty pattern", 0),
            ("   ", "empty pattern", 0),
            ("(SelectStmt", "unbalanced '(': missing ')'", 0),
            ("SelectStmt)", "unbalanced ')'", 10),
            ("()", "empty node kind", 1),
            ('"abc', "unterminated string literal", 0),
            ("(SelectStmt (whereClause))", "field pattern (whereClause) is missing its nested pattern", 13),
            ("(SelectStmt ())", "empty field pattern", 13),
            ("$x RangeVar", "capture requires ':' after its name", 0),
            ("$: RangeVar", "capture name is empty", 0),
            ("{}", "empty alternation", 0),
            ("{RangeVar", "unbalanced '{': missing '}'", 0),
            ("RangeVar}", "unbalanced '}'", 8),
            ("[]", "empty conjunction", 0),
            ("[RangeVar", "unbalanced '[': missing ']'", 0),
            ("RangeVar]", "unbalanced ']'", 8),
            ("]", "unbalanced ']'", 0),
            ("(_ ...)", "expected a node kind or field name, found '_'", 1),
            ("SelectStmt RangeVar", "unexpected 'RangeVar' after end of pattern", 11),
            ("(SelectStmt foo)", "expected a field pattern like (field pattern) inside SelectStmt", 12),
            ("relname", "field 'relname' must be written as (relname pattern)", 0),
        ],
    )
    def test_error(self, text, reason, position):
        with pytest.raises(PatternSyntaxError) as excinfo:
            parse_pattern(text)
        assert excinfo.value.reason == reason
        assert excinfo.value.position == position
        assert excinfo.value.pattern == text

    def test_error_message_mentions_position(self):
        with pytest.raises(PatternSyntaxError, match="at position 10"):
            parse_pattern("SelectStmt)")


class TestCompilePattern:
    """Tests for the compiled pattern cache."""

    def test_same_text_same_object(self):
        assert compile_pattern("(RangeVar (relname _))") is compile_pattern("(RangeVar (relname _))")

    def test_errors_are_not_cached(self):
        for _ in range(2):
            with pytest.raises(PatternSyntaxError):
                compile_pattern("(Broken")
