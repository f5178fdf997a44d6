"""Pattern tree types and the pattern printer.

A pattern is an immutable tree of the dataclasses below. Patterns are
hashable and compare structurally, so a parsed pattern can be cached,
shared between threads and compared against a re-parse of its printed form.

Surface syntax (see parser.py):
    SelectStmt                      kind only
    (SelectStmt (whereClause ...))  kind with field constraints
    (relname "users")               field constraint on any kind
    ...                             wildcard
    _                               any present value
    "text" / 123 / true             literal scalar
    $name: pattern                  capture
    {A B}  [A B]                    any-of, all-of
    !pattern  ?pattern              negation, optional
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from sqlsift.utils.naming import normalize_field_key


@dataclass(frozen=True)
class Wildcard:
    """``...``: matches any value, or absorbs the rest of a list."""

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class AnyValue:
    """``_``: matches exactly one present value of any shape."""

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class Literal:
    """A scalar compared by value."""

    value: str | int | float | bool

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class KindOnly:
    """Any node of the given kind."""

    kind: str

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class FieldPattern:
    """One field constraint inside a node pattern.

    ``name`` keeps the spelling from the pattern text; ``key`` is the
    normalized form used for lookups.
    """

    name: str
    pattern: Pattern
    key: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", normalize_field_key(self.name))

    def __str__(self) -> str:
        return _format_field(self)


@dataclass(frozen=True)
class KindWithFields:
    """A node of ``kind`` whose listed fields all match.

    ``kind`` is None for a bare field constraint such as ``(relname "users")``,
    which accepts nodes of any kind. Unlisted fields are unconstrained.
    """

    kind: str | None
    fields: tuple[FieldPattern, ...] = ()

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class Capture:
    """Binds ``name`` to the value matched by ``pattern``."""

    name: str
    pattern: Pattern

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class ListPattern:
    """Positional match against a list; a trailing ``...`` absorbs the rest."""

    items: tuple[Pattern, ...] = ()

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class AnyOf:
    """``{a b}``: the first alternative that matches wins."""

    options: tuple[Pattern, ...]

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class AllOf:
    """``[a b]``: every option matches the same value."""

    options: tuple[Pattern, ...]

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class Not:
    """``!p``: matches when ``p`` does not."""

    pattern: Pattern

    def __str__(self) -> str:
        return format_pattern(self)


@dataclass(frozen=True)
class Maybe:
    """``?p``: matches an absent value, or a value matching ``p``."""

    pattern: Pattern

    def __str__(self) -> str:
        return format_pattern(self)


Pattern = Union[
    Wildcard,
    AnyValue,
    Literal,
    KindOnly,
    KindWithFields,
    Capture,
    ListPattern,
    AnyOf,
    AllOf,
    Not,
    Maybe,
]

WILDCARD = Wildcard()
ANY_VALUE = AnyValue()


def format_pattern(pattern: Pattern) -> str:
    """Render a pattern as DSL text.

    The output parses back to an equal pattern. ``ListPattern`` only has a
    surface form as the value of a field, so a free-standing list is printed
    as its items wrapped in parentheses for display.

    Raises:
        ValueError: For a string literal containing both quote characters,
            which the DSL cannot express.
    """
    if isinstance(pattern, Wildcard):
        return "..."
    if isinstance(pattern, AnyValue):
        return "_"
    if isinstance(pattern, Literal):
        return _format_literal(pattern.value)
    if isinstance(pattern, KindOnly):
        return pattern.kind
    if isinstance(pattern, KindWithFields):
        parts = [_format_field(field) for field in pattern.fields]
        if pattern.kind is None:
            # A bare constraint has exactly one field by construction.
            return " ".join(parts)
        return "(" + " ".join([pattern.kind, *parts]) + ")"
    if isinstance(pattern, Capture):
        return f"${pattern.name}: {format_pattern(pattern.pattern)}"
    if isinstance(pattern, ListPattern):
        return "(" + " ".join(format_pattern(item) for item in pattern.items) + ")"
    if isinstance(pattern, AnyOf):
        return "{" + " ".join(format_pattern(option) for option in pattern.options) + "}"
    if isinstance(pattern, AllOf):
        return "[" + " ".join(format_pattern(option) for option in pattern.options) + "]"
    if isinstance(pattern, Not):
        return "!" + format_pattern(pattern.pattern)
    if isinstance(pattern, Maybe):
        return "?" + format_pattern(pattern.pattern)
    raise TypeError(f"Not a pattern: {pattern!r}")


def _format_field(field: FieldPattern) -> str:
    value = field.pattern
    if isinstance(value, ListPattern):
        if not value.items:
            return f"({field.name} ())"
        body = " ".join(format_pattern(item) for item in value.items)
    else:
        body = format_pattern(value)
    return f"({field.name} {body})"


def _format_literal(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    raise ValueError(f"String literal cannot be expressed in pattern syntax: {value!r}")
