"""FastMCP server exposing soldef tools."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from soldef.config import Settings, get_settings
from soldef.core.ast import parse_source
from soldef.core.definition import cursor_offset, run_definition
from soldef.core.locator import locate
from soldef.workspace.project import create_project


def create_mcp_server(settings: Settings | None = None) -> FastMCP:
    """Create a FastMCP server resolving definitions with the given settings."""

    resolved_settings = settings or get_settings()
    mcp = FastMCP("soldef", instructions="Resolve references in Solidity sources to their declarations.")

    @mcp.tool()
    def definition(
        path: str,
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
        root: str | None = None,
    ) -> list[dict[str, Any]] | str:
        """Find the declaration referenced at a cursor position in a Solidity file."""
        if offset is None and (line is None or column is None):
            return "Error: either 'offset' or both 'line' and 'column' must be provided."
        project = create_project(path, root, resolved_settings)
        results = run_definition(project, path, offset, line, column)
        return [result.model_dump() for result in results]

    @mcp.tool()
    def enclosing_nodes(
        path: str,
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
        limit: int = 20,
    ) -> list[dict[str, Any]] | str:
        """List the syntax nodes enclosing a cursor position, narrowest first."""
        if offset is None and (line is None or column is None):
            return "Error: either 'offset' or both 'line' and 'column' must be provided."
        text = Path(path).read_text(encoding="utf-8")
        chain = locate(parse_source(text, path), cursor_offset(text, offset, line, column))
        return [
            {"index": n.index, "kind": n.kind, "start_byte": n.start_byte, "end_byte": n.end_byte, "name": n.name}
            for n in chain[:limit]
        ]

    return mcp
