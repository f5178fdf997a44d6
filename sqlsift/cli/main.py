"""
sqlsift command line interface.

Commands:
- search: find SQL matching a structural pattern
- explain: show how a pattern parses
- tree: print the syntax tree patterns are matched against

Exit status is 0 on success (with or without matches), 1 for unreadable
input, unparsable SQL or bad configuration, and 2 for a malformed pattern.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

import click

from sqlsift import __version__
from sqlsift.config import SqlSiftConfig
from sqlsift.patterns import (
    AllOf,
    AnyOf,
    Capture,
    KindOnly,
    KindWithFields,
    ListPattern,
    Literal,
    LoggingTraceSink,
    Maybe,
    Not,
    Pattern,
    Wildcard,
    format_pattern,
    parse_pattern,
)
from sqlsift.search import SqlMatch, SqlSearchService
from sqlsift.sql import parse_sql
from sqlsift.tree import FieldShape, TreeAdapter, default_adapter
from sqlsift.types.errors import PatternSyntaxError, SqlSiftError
from sqlsift.utils.logger import configure_logging, logger
from sqlsift.utils.naming import to_snake_case
from sqlsift.utils.serialization import serialize_to_primitives

EXIT_ERROR = 1
EXIT_PATTERN_ERROR = 2


def _fail(ctx: click.Context, error: SqlSiftError) -> None:
    click.echo(error.get_formatted_message(), err=True)
    code = EXIT_PATTERN_ERROR if isinstance(error, PatternSyntaxError) else EXIT_ERROR
    ctx.exit(code)


def _read_stdin() -> str:
    return click.get_text_stream("stdin").read()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="sqlsift", message="%(prog)s v%(version)s")
@click.option("--debug", is_flag=True, help="Log diagnostics to stderr.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """sqlsift - Structural search for PostgreSQL SQL.

    Patterns are S-expressions over the PostgreSQL parse tree, e.g.

        sqlsift search '(RangeVar (relname "users"))' schema/
    """
    configure_logging(debug or None)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("pattern")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("--from-sql", "from_sql", help="Search this SQL text instead of files.")
@click.option("--count", is_flag=True, help="Only print the number of matches.")
@click.option("--captures-only", is_flag=True, help="Only print captured values.")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON.")
@click.option("--trace", is_flag=True, help="Log every matcher step (implies --debug).")
@click.pass_context
def search(
    ctx: click.Context,
    pattern: str,
    paths: tuple[Path, ...],
    from_sql: str | None,
    count: bool,
    captures_only: bool,
    as_json: bool,
    trace: bool,
) -> None:
    """Search SQL for PATTERN.

    PATHS may be SQL files or directories. Without PATHS or --from-sql the
    SQL is read from standard input.
    """
    if trace:
        configure_logging(True)

    try:
        config = SqlSiftConfig.load(Path.cwd())
        if config.debug:
            configure_logging(True)
        service = SqlSearchService(config, trace=LoggingTraceSink() if trace else None)
        compiled = service.compile(pattern)

        if from_sql is not None:
            hits = service.search_text(compiled, from_sql)
        elif paths:
            hits = service.search_paths(compiled, paths)
        else:
            hits = service.search_text(compiled, _read_stdin(), source="<stdin>")
    except SqlSiftError as e:
        _fail(ctx, e)
        return

    logger.debug(f"{len(hits)} match(es) for {pattern!r}")

    if captures_only:
        hits = [hit for hit in hits if hit.captures]

    if count:
        click.echo(len(hits))
    elif as_json:
        click.echo(json.dumps([hit.to_dict() for hit in hits], indent=2))
    else:
        for hit in hits:
            _echo_hit(hit, captures_only)


def _echo_hit(hit: SqlMatch, captures_only: bool) -> None:
    if not captures_only:
        click.echo(f"{hit.source}:{hit.line}: {hit.kind}: {hit.statement.sql}")
    for name, value in hit.captures.items():
        prefix = f"{hit.source}:{hit.line}: " if captures_only else "    "
        click.echo(f"{prefix}${name} = {_format_value(value)}")


def _format_value(value: Any) -> str:
    adapter = default_adapter()
    if adapter.is_node(value):
        payload = adapter.scalar_payload(value)
        if adapter.shape_of(payload) is FieldShape.SCALAR:
            return f"{adapter.kind(value)}({payload!r})"
    primitive = serialize_to_primitives(value)
    if isinstance(primitive, str):
        return primitive
    return json.dumps(primitive, separators=(",", ":"))


@cli.command()
@click.argument("pattern")
@click.pass_context
def explain(ctx: click.Context, pattern: str) -> None:
    """Show how PATTERN is parsed."""
    try:
        parsed = parse_pattern(pattern)
    except PatternSyntaxError as e:
        _fail(ctx, e)
        return

    for line in _explain_lines(parsed, 0):
        click.echo(line)
    click.echo("")
    click.echo(f"Canonical: {format_pattern(parsed)}")


def _explain_lines(pattern: Pattern, depth: int, label: str = "") -> list[str]:
    indent = "  " * depth
    head = f"{indent}{label}"
    if isinstance(pattern, KindWithFields):
        kind = pattern.kind or "any node"
        lines = [f"{head}node {kind}"]
        for field in pattern.fields:
            lines.extend(_explain_lines(field.pattern, depth + 1, f"field {field.name}: "))
        return lines
    if isinstance(pattern, KindOnly):
        return [f"{head}node {pattern.kind}"]
    if isinstance(pattern, Capture):
        return [f"{head}capture ${pattern.name}"] + _explain_lines(pattern.pattern, depth + 1)
    if isinstance(pattern, ListPattern):
        if not pattern.items:
            return [f"{head}empty list"]
        lines = [f"{head}list"]
        for index, item in enumerate(pattern.items):
            lines.extend(_explain_lines(item, depth + 1, f"[{index}] "))
        return lines
    if isinstance(pattern, (AnyOf, AllOf)):
        label = "any of" if isinstance(pattern, AnyOf) else "all of"
        lines = [f"{head}{label}"]
        for option in pattern.options:
            lines.extend(_explain_lines(option, depth + 1))
        return lines
    if isinstance(pattern, Not):
        return [f"{head}not"] + _explain_lines(pattern.pattern, depth + 1)
    if isinstance(pattern, Maybe):
        return [f"{head}optional"] + _explain_lines(pattern.pattern, depth + 1)
    if isinstance(pattern, Literal):
        return [f"{head}literal {format_pattern(pattern)}"]
    if isinstance(pattern, Wildcard):
        return [f"{head}wildcard"]
    return [f"{head}any value"]


@cli.command()
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option("--from-sql", "from_sql", help="Print the tree of this SQL text.")
@click.option("--snake-case", is_flag=True, help="Print field names in snake_case.")
@click.pass_context
def tree(
    ctx: click.Context,
    path: Path | None,
    from_sql: str | None,
    snake_case: bool,
) -> None:
    """Print the syntax tree of SQL from PATH, --from-sql or standard input.

    Field names are printed as the parser spells them; patterns may use
    either that spelling or snake_case.
    """
    if path is not None and from_sql is not None:
        raise click.UsageError("Give either PATH or --from-sql, not both.")

    try:
        if from_sql is not None:
            text = from_sql
        elif path is not None:
            text = path.read_text(encoding="utf-8")
        else:
            text = _read_stdin()
        statements = parse_sql(text, file_path=str(path) if path else None)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"[Error] Could not read {path}: {e}", err=True)
        ctx.exit(EXIT_ERROR)
        return
    except SqlSiftError as e:
        _fail(ctx, e)
        return

    adapter = default_adapter()
    for statement in statements:
        click.echo(f"-- statement {statement.index} (line {statement.line})")
        for line in _tree_lines(adapter, statement.node, 0, snake_case):
            click.echo(line)


def _tree_lines(adapter: TreeAdapter, node: Any, depth: int, snake_case: bool = False) -> list[str]:
    indent = "  " * depth
    lines = [f"{indent}{adapter.kind(node)}"]
    for name, value in adapter.fields(node):
        if snake_case:
            name = to_snake_case(name)
        shape = adapter.shape_of(value)
        if shape is FieldShape.ABSENT:
            continue
        if shape is FieldShape.NODE:
            lines.append(f"{indent}  {name}:")
            lines.extend(_tree_lines(adapter, value, depth + 2, snake_case))
        elif shape is FieldShape.LIST:
            lines.append(f"{indent}  {name}: [{len(value)}]")
            lines.extend(_list_lines(adapter, value, depth + 2, snake_case))
        else:
            lines.append(f"{indent}  {name}: {_scalar_text(value)}")
    return lines


def _list_lines(adapter: TreeAdapter, values: Any, depth: int, snake_case: bool) -> list[str]:
    lines = []
    for item in values:
        shape = adapter.shape_of(item)
        if shape is FieldShape.NODE:
            lines.extend(_tree_lines(adapter, item, depth, snake_case))
        elif shape is FieldShape.LIST:
            lines.append(f"{'  ' * depth}[{len(item)}]")
            lines.extend(_list_lines(adapter, item, depth + 1, snake_case))
        else:
            lines.append(f"{'  ' * depth}{_scalar_text(item)}")
    return lines


def _scalar_text(value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    return repr(value)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
