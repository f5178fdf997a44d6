"""SQL facade over pglast.

Splits a script into statements and keeps enough of the source around to
report where a match came from. libpg_query reports every location as a
byte offset into the UTF-8 encoded script; the helpers here convert those
offsets into statement text and line numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pglast
from loguru import logger
from pglast.parser import ParseError

from sqlsift.types.errors import UpstreamParseError


@dataclass(frozen=True)
class Statement:
    """One top-level statement of a parsed script.

    Attributes:
        index: 0-based position of the statement in the script.
        node: Statement node (``SelectStmt``, ``InsertStmt``...).
        location: Byte offset of the statement in the script.
        length: Byte length of the statement; 0 means "to the end".
        source: The whole script text.
    """

    index: int
    node: Any
    location: int
    length: int
    source: str = field(repr=False)

    @property
    def kind(self) -> str:
        return type(self.node).__name__

    @property
    def sql(self) -> str:
        """Statement text without leading comments, surrounding whitespace or the semicolon."""
        encoded = self.source.encode("utf-8")
        end = self.location + self.length if self.length else len(encoded)
        start = min(_skip_blanks(encoded, self.location), end)
        return encoded[start:end].decode("utf-8").strip()

    @property
    def line(self) -> int:
        """1-based line of the statement's first token."""
        encoded = self.source.encode("utf-8")
        return _line_at(encoded, _skip_blanks(encoded, self.location))

    def line_of(self, node: Any) -> int:
        """1-based line of a node inside this statement.

        Nodes without a location (or with libpg_query's ``-1`` placeholder)
        are reported at the statement's first line.
        """
        location = getattr(node, "location", None)
        if not isinstance(location, int) or location < 0:
            return self.line
        return _line_at(self.source.encode("utf-8"), location)


def _line_at(encoded: bytes, offset: int) -> int:
    return encoded.count(b"\n", 0, offset) + 1


def _skip_blanks(encoded: bytes, offset: int) -> int:
    """Advance past whitespace and comments preceding a statement."""
    end = len(encoded)
    while offset < end:
        if encoded[offset : offset + 1].isspace():
            offset += 1
        elif encoded.startswith(b"--", offset):
            newline = encoded.find(b"\n", offset)
            offset = end if newline == -1 else newline + 1
        elif encoded.startswith(b"/*", offset):
            close = encoded.find(b"*/", offset + 2)
            offset = end if close == -1 else close + 2
        else:
            break
    return offset


def parse_sql(text: str, file_path: str | None = None) -> list[Statement]:
    """Parse a SQL script into statements.

    Args:
        text: One or more SQL statements.
        file_path: Where the text came from, for error context.

    Returns:
        Statements in source order; empty for a script with no statements.

    Raises:
        UpstreamParseError: If PostgreSQL's parser rejects the text. The
            parser's message and location are kept unchanged.
    """
    try:
        raw_statements = pglast.parse_sql(text)
    except ParseError as e:
        location = e.args[1] if len(e.args) > 1 else None
        message = str(e.args[0]) if e.args else str(e)
        logger.debug(f"SQL parse failed: {message} (location={location})")
        raise UpstreamParseError(
            message,
            text,
            location=location,
            file_path=file_path,
            original_error=e,
        ) from e

    statements = [
        Statement(
            index=index,
            node=raw.stmt,
            location=raw.stmt_location or 0,
            length=raw.stmt_len or 0,
            source=text,
        )
        for index, raw in enumerate(raw_statements)
    ]
    logger.debug(f"Parsed {len(statements)} statement(s)")
    return statements
