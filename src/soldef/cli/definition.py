import json
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from soldef.config import get_settings
from soldef.core.ast import SolidityParseError, parse_source
from soldef.core.definition import cursor_offset, run_definition
from soldef.core.locator import locate
from soldef.models import Location, LocationLink
from soldef.workspace.project import create_project

console = Console()


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def _span(start: Any, end: Any) -> tuple[str, str]:
    return f"{start.row}:{start.column}", f"{end.row}:{end.column}"


def _result_row(result: Location | LocationLink) -> tuple[str, str, str]:
    if isinstance(result, LocationLink):
        return (result.target_uri, *_span(result.origin_selection_range.start, result.origin_selection_range.end))
    return (result.uri, *_span(result.range.start, result.range.end))


def definition(
    path: Annotated[Path, typer.Argument(help="Solidity file containing the cursor.")],
    offset: Annotated[int | None, typer.Option(help="Byte offset of the cursor.")] = None,
    line: Annotated[int | None, typer.Option(help="Zero-based cursor line.")] = None,
    column: Annotated[int | None, typer.Option(help="Zero-based cursor column.")] = None,
    root: Annotated[Path | None, typer.Option(help="Project root; defaults to the nearest project marker.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print results as JSON.")] = False,
) -> None:
    """Find the declaration referenced at a cursor position."""
    project = create_project(path, root, get_settings())
    try:
        results = run_definition(project, str(path), offset, line, column)
    except (FileNotFoundError, SolidityParseError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from None

    if as_json:
        typer.echo(json.dumps([result.model_dump() for result in results]))
        return
    if not results:
        console.print("[yellow]No definition found[/yellow]")
        return
    _render_table(["uri", "start", "end"], [_result_row(result) for result in results])


def nodes(
    path: Annotated[Path, typer.Argument(help="Solidity file to inspect.")],
    offset: Annotated[int | None, typer.Option(help="Byte offset of the cursor.")] = None,
    line: Annotated[int | None, typer.Option(help="Zero-based cursor line.")] = None,
    column: Annotated[int | None, typer.Option(help="Zero-based cursor column.")] = None,
    limit: Annotated[int, typer.Option(help="Max rows to return.")] = 20,
) -> None:
    """List the syntax nodes enclosing a cursor position, narrowest first."""
    try:
        text = path.read_text(encoding="utf-8")
        root = parse_source(text, str(path))
        chain = locate(root, cursor_offset(text, offset, line, column))
    except (FileNotFoundError, SolidityParseError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from None

    _render_table(
        ["index", "kind", "start_byte", "end_byte", "name"],
        [(n.index, n.kind, n.start_byte, n.end_byte, n.name or n.text or "") for n in chain[:limit]],
    )
