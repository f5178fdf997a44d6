"""SQL search service: patterns over SQL text, files and directory trees.

The service ties the pieces together: it reads files, parses them into
statements, runs the search driver over every statement and reports each
match with its source and line.

Errors follow one rule: anything the caller named explicitly (a text, a
file path) fails loudly; files merely discovered while walking a directory
are skipped with a warning when they can't be read or parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator

from loguru import logger

from sqlsift.config import SqlSiftConfig
from sqlsift.patterns import Pattern, TraceSink, parse_pattern
from sqlsift.sql import Statement, parse_sql
from sqlsift.types.errors import (
    ErrorCode,
    ErrorContext,
    RecoveryAction,
    ResourceError,
    UpstreamParseError,
)
from sqlsift.utils.serialization import serialize_to_primitives

from .driver import MatchResult, search_all


@dataclass(frozen=True)
class SqlMatch:
    """A match located in SQL source."""

    source: str
    statement: Statement
    match: MatchResult
    line: int

    @property
    def kind(self) -> str:
        return self.match.kind

    @property
    def captures(self) -> dict[str, Any]:
        return self.match.captures

    def to_dict(self, include_node: bool = False) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data: dict[str, Any] = {
            "source": self.source,
            "line": self.line,
            "statement_index": self.statement.index,
            "statement": self.statement.sql,
            "kind": self.match.kind,
            "captures": serialize_to_primitives(self.match.captures),
        }
        if include_node:
            data["node"] = serialize_to_primitives(self.match.node)
        return data


def _locate(results: list[MatchResult], statements: list[Statement], source: str) -> list[SqlMatch]:
    located = []
    for result in results:
        statement = statements[result.statement_index]
        located.append(SqlMatch(source, statement, result, statement.line_of(result.node)))
    return located


def search_sql(
    pattern: Pattern | str,
    sql: str,
    *,
    source: str = "<sql>",
    trace: TraceSink | None = None,
) -> list[SqlMatch]:
    """Parse ``sql`` and return every match of ``pattern`` in it.

    Raises:
        PatternSyntaxError: If the pattern text is malformed.
        UpstreamParseError: If the SQL does not parse.
    """
    compiled = parse_pattern(pattern) if isinstance(pattern, str) else pattern
    statements = parse_sql(sql)
    results = search_all(compiled, [s.node for s in statements], trace=trace)
    return _locate(results, statements, source)


class SqlSearchService:
    """Structural search over SQL text, files and directories.

    Usage:
        service = SqlSearchService(SqlSiftConfig.load("."))

        for hit in service.search_paths("(RangeVar (relname $t: _))", ["db/"]):
            print(f"{hit.source}:{hit.line} {hit.captures['t']}")
    """

    def __init__(
        self,
        config: SqlSiftConfig | None = None,
        trace: TraceSink | None = None,
    ):
        """Initialize the service.

        Args:
            config: Discovery and cache settings. Defaults to built-in defaults.
            trace: Optional trace sink passed to every search.
        """
        self._config = config or SqlSiftConfig()
        self._trace = trace
        self._compile = lru_cache(maxsize=self._config.pattern_cache_size)(parse_pattern)

    @property
    def config(self) -> SqlSiftConfig:
        return self._config

    def compile(self, pattern: Pattern | str) -> Pattern:
        """Compile pattern text through this service's cache."""
        if isinstance(pattern, str):
            return self._compile(pattern)
        return pattern

    def search_text(
        self,
        pattern: Pattern | str,
        sql: str,
        source: str = "<sql>",
    ) -> list[SqlMatch]:
        """Search SQL text.

        Raises:
            PatternSyntaxError: If the pattern text is malformed.
            UpstreamParseError: If the SQL does not parse.
        """
        compiled = self.compile(pattern)
        statements = parse_sql(sql, file_path=None if source == "<sql>" else source)
        results = search_all(compiled, [s.node for s in statements], trace=self._trace)
        return _locate(results, statements, source)

    def search_file(self, pattern: Pattern | str, path: str | Path) -> list[SqlMatch]:
        """Search one SQL file.

        Raises:
            ResourceError: If the file is missing or unreadable.
            UpstreamParseError: If its contents do not parse.
        """
        compiled = self.compile(pattern)
        file_path = Path(path)
        return self.search_text(compiled, self._read(file_path), source=str(file_path))

    def search_paths(
        self,
        pattern: Pattern | str,
        paths: Iterable[str | Path],
    ) -> list[SqlMatch]:
        """Search files and directories.

        Files given explicitly are always searched and their errors raised.
        Directories are walked with the configured globs; discovered files
        that are too large, unreadable or unparsable are skipped.

        Raises:
            PatternSyntaxError: If the pattern text is malformed. Raised
                before any file is read.
            ResourceError: If a named path does not exist or can't be read.
            UpstreamParseError: If a named file does not parse.
        """
        compiled = self.compile(pattern)
        matches: list[SqlMatch] = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                matches.extend(self._search_directory(compiled, path))
            elif path.exists():
                matches.extend(self.search_file(compiled, path))
            else:
                raise _not_found(path)
        return matches

    def iter_sql_files(self, directory: str | Path) -> Iterator[Path]:
        """SQL files under ``directory`` matching the configured globs, sorted."""
        base = Path(directory)
        found: set[Path] = set()
        for glob in self._config.file_patterns:
            for file_path in base.glob(glob):
                if not file_path.is_file():
                    continue
                relative = file_path.relative_to(base)
                if any(part in self._config.ignore_dirs for part in relative.parts[:-1]):
                    continue
                found.add(file_path)
        yield from sorted(found)

    def _search_directory(self, pattern: Pattern, directory: Path) -> list[SqlMatch]:
        matches: list[SqlMatch] = []
        for file_path in self.iter_sql_files(directory):
            try:
                size = file_path.stat().st_size
            except OSError as e:
                logger.warning(f"Skipping {file_path}: {e}")
                continue
            if size > self._config.max_file_size:
                logger.warning(
                    f"Skipping {file_path}: {size} bytes exceeds limit of "
                    f"{self._config.max_file_size}"
                )
                continue
            try:
                matches.extend(self.search_file(pattern, file_path))
            except (ResourceError, UpstreamParseError) as e:
                logger.warning(f"Skipping {file_path}: {e}")
        logger.debug(f"Found {len(matches)} match(es) under {directory}")
        return matches

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise _not_found(path, e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceError(
                f"Failed to read {path}: {e}",
                user_message=f"Could not read {path}.",
                context=ErrorContext(operation="read_sql", file_path=str(path)),
                recovery_actions=[
                    RecoveryAction(description="Check file permissions and that it is UTF-8 text")
                ],
                original_error=e,
                code=ErrorCode.FILE_READ_FAILED,
            ) from e


def _not_found(path: Path, error: Exception | None = None) -> ResourceError:
    return ResourceError(
        f"Path not found: {path}",
        user_message=f"No such file or directory: {path}",
        context=ErrorContext(operation="search_paths", file_path=str(path)),
        original_error=error,
        code=ErrorCode.FILE_NOT_FOUND,
    )
