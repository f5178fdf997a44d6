"""Pattern parser: DSL text to pattern tree.

Tokenization treats parentheses, braces, brackets, whitespace and quotes as the only
structural characters; every other run of characters is a word. Words are
then classified: ``...``, ``_``, ``true``/``false``, numbers, capture and
prefix operators, node kinds (upper-case initial) and field names
(lower-case or underscore initial).

Errors are reported eagerly with the character offset of the offending
token, so a bad pattern never reaches a search.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from loguru import logger

from sqlsift.constants import PATTERN_CACHE_SIZE
from sqlsift.types.errors import PatternSyntaxError

from .types import (
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
    Pattern,
)

_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER = re.compile(r"[+-]?\d+")
_STRUCTURAL = frozenset("(){}[]\"'")


class TokenType(StrEnum):
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    STRING = "string"
    WORD = "word"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int


def tokenize(text: str) -> list[Token]:
    """Split pattern text into tokens.

    Raises:
        PatternSyntaxError: On an unterminated quoted string.
    """
    tokens: list[Token] = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char.isspace():
            i += 1
        elif char in "(){}[]":
            tokens.append(Token(TokenType(char), char, i))
            i += 1
        elif char in "\"'":
            end = text.find(char, i + 1)
            if end == -1:
                raise PatternSyntaxError("unterminated string literal", text, i)
            tokens.append(Token(TokenType.STRING, text[i + 1 : end], i))
            i = end + 1
        else:
            start = i
            while i < length and not text[i].isspace() and text[i] not in _STRUCTURAL:
                i += 1
            tokens.append(Token(TokenType.WORD, text[start:i], start))
    return tokens


def is_kind_name(word: str) -> bool:
    """Node kinds start with an upper-case letter (``SelectStmt``, ``A_Const``)."""
    return word[:1].isupper()


def is_field_name(word: str) -> bool:
    """Field names start with a lower-case letter or an underscore (``relname``, ``_x``).

    A lone ``_`` is the any-value atom, not a field.
    """
    return word != "_" and (word[:1].islower() or word[:1] == "_")


class _PatternParser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str, tokens: list[Token]):
        self._text = text
        self._tokens = tokens
        self._index = 0

    # -- token helpers -----------------------------------------------------

    def _peek(self, offset: int = 0) -> Token | None:
        index = self._index + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _error(self, message: str, position: int) -> PatternSyntaxError:
        return PatternSyntaxError(message, self._text, position)

    @property
    def at_end(self) -> bool:
        return self._index >= len(self._tokens)

    # -- grammar -----------------------------------------------------------

    def parse(self) -> Pattern:
        pattern = self.parse_pattern()
        leftover = self._peek()
        if leftover is not None:
            if leftover.type is TokenType.RPAREN:
                raise self._error("unbalanced ')'", leftover.position)
            if leftover.type is TokenType.RBRACE:
                raise self._error("unbalanced '}'", leftover.position)
            if leftover.type is TokenType.RBRACKET:
                raise self._error("unbalanced ']'", leftover.position)
            raise self._error(
                f"unexpected {leftover.text!r} after end of pattern", leftover.position
            )
        return pattern

    def parse_pattern(self) -> Pattern:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of pattern", len(self._text))
        self._advance()

        if token.type is TokenType.LPAREN:
            return self._parse_group(token)
        if token.type is TokenType.LBRACE:
            return AnyOf(self._parse_options(token, TokenType.RBRACE, "alternation"))
        if token.type is TokenType.LBRACKET:
            return AllOf(self._parse_options(token, TokenType.RBRACKET, "conjunction"))
        if token.type is TokenType.RPAREN:
            raise self._error("unbalanced ')'", token.position)
        if token.type is TokenType.RBRACE:
            raise self._error("unbalanced '}'", token.position)
        if token.type is TokenType.RBRACKET:
            raise self._error("unbalanced ']'", token.position)
        if token.type is TokenType.STRING:
            return Literal(token.text)
        return self._parse_word(token.text, token.position)

    def _parse_word(self, word: str, position: int) -> Pattern:
        """Classify a word; prefix operators may continue into the next token."""
        if word.startswith("$"):
            name, sep, rest = word[1:].partition(":")
            if not sep:
                raise self._error("capture requires ':' after its name", position)
            if not name:
                raise self._error("capture name is empty", position)
            inner = self._parse_rest(rest, position + len(name) + 2)
            return Capture(name, inner)

        if word[0] in "!?":
            inner = self._parse_rest(word[1:], position + 1)
            return Not(inner) if word[0] == "!" else Maybe(inner)

        return self._parse_atom(word, position)

    def _parse_rest(self, rest: str, position: int) -> Pattern:
        if rest:
            return self._parse_word(rest, position)
        return self.parse_pattern()

    def _parse_atom(self, word: str, position: int) -> Pattern:
        if word == "...":
            return WILDCARD
        if word == "_":
            return ANY_VALUE
        if word == "true":
            return Literal(True)
        if word == "false":
            return Literal(False)
        if _NUMBER.fullmatch(word):
            return Literal(int(word) if _INTEGER.fullmatch(word) else float(word))
        if is_kind_name(word):
            return KindOnly(word)
        if is_field_name(word):
            raise self._error(
                f"field {word!r} must be written as ({word} pattern)", position
            )
        raise self._error(f"unexpected {word!r}", position)

    def _parse_group(self, lparen: Token) -> Pattern:
        head = self._peek()
        if head is None:
            raise self._error("unbalanced '(': missing ')'", lparen.position)
        if head.type is TokenType.RPAREN:
            raise self._error("empty node kind", head.position)
        if head.type is not TokenType.WORD:
            raise self._error("expected a node kind or field name", head.position)
        self._advance()

        if is_field_name(head.text):
            field = self._parse_field_body(head, lparen)
            return KindWithFields(None, (field,))
        if not is_kind_name(head.text):
            raise self._error(
                f"expected a node kind or field name, found {head.text!r}", head.position
            )

        fields: list[FieldPattern] = []
        while True:
            token = self._peek()
            if token is None:
                raise self._error("unbalanced '(': missing ')'", lparen.position)
            self._advance()
            if token.type is TokenType.RPAREN:
                break
            if token.type is not TokenType.LPAREN:
                raise self._error(
                    f"expected a field pattern like (field pattern) inside {head.text}",
                    token.position,
                )
            fields.append(self._parse_field(token))
        return KindWithFields(head.text, tuple(fields))

    def _parse_field(self, lparen: Token) -> FieldPattern:
        name = self._peek()
        if name is None:
            raise self._error("unbalanced '(': missing ')'", lparen.position)
        if name.type is TokenType.RPAREN:
            raise self._error("empty field pattern", name.position)
        if name.type is not TokenType.WORD or not is_field_name(name.text):
            raise self._error("expected a field name", name.position)
        self._advance()
        return self._parse_field_body(name, lparen)

    def _parse_field_body(self, name: Token, lparen: Token) -> FieldPattern:
        values: list[Pattern] = []
        while True:
            token = self._peek()
            if token is None:
                raise self._error("unbalanced '(': missing ')'", lparen.position)
            if token.type is TokenType.RPAREN:
                self._advance()
                break
            values.append(self._parse_value())

        if not values:
            raise self._error(
                f"field pattern ({name.text}) is missing its nested pattern", name.position
            )
        pattern = values[0] if len(values) == 1 else ListPattern(tuple(values))
        return FieldPattern(name.text, pattern)

    def _parse_value(self) -> Pattern:
        """A field value: any pattern, or ``()`` for an explicit empty list."""
        token = self._peek()
        following = self._peek(1)
        if (
            token is not None
            and token.type is TokenType.LPAREN
            and following is not None
            and following.type is TokenType.RPAREN
        ):
            self._advance()
            self._advance()
            return ListPattern(())
        return self.parse_pattern()

    def _parse_options(self, opener: Token, closer: TokenType, label: str) -> tuple[Pattern, ...]:
        """Patterns up to ``closer``, for ``{...}`` alternations and ``[...]`` conjunctions."""
        options: list[Pattern] = []
        while True:
            token = self._peek()
            if token is None:
                raise self._error(
                    f"unbalanced '{opener.text}': missing '{closer.value}'", opener.position
                )
            if token.type is closer:
                self._advance()
                break
            options.append(self.parse_pattern())
        if not options:
            raise self._error(f"empty {label}", opener.position)
        return tuple(options)


def parse_pattern(text: str) -> Pattern:
    """Parse pattern text into a pattern tree.

    Args:
        text: Pattern in the S-expression DSL.

    Returns:
        The parsed, immutable pattern.

    Raises:
        PatternSyntaxError: If the text is not a well-formed pattern.

    Example:
        >>> str(parse_pattern("(SelectStmt (where_clause ...))"))
        '(SelectStmt (where_clause ...))'
    """
    if not text or not text.strip():
        raise PatternSyntaxError("empty pattern", text or "", 0)

    tokens = tokenize(text)
    pattern = _PatternParser(text, tokens).parse()
    logger.debug(f"Parsed pattern {text!r} ({len(tokens)} tokens)")
    return pattern


@lru_cache(maxsize=PATTERN_CACHE_SIZE)
def compile_pattern(text: str) -> Pattern:
    """Parse with caching; patterns are immutable so one instance is shared."""
    return parse_pattern(text)
