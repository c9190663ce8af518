"""Shared fixtures and helpers for tests."""

import itertools
from collections.abc import Callable
from pathlib import Path

import pytest

from soldef.core.imports import SourceCollection
from soldef.models import Position, SourceFile, SyntaxNode


# ---------------------------------------------------------------------------
# Auto-marker: every test here is a unit test
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Hand-built syntax trees
# ---------------------------------------------------------------------------


class NodeFactory:
    """Build ``SyntaxNode`` trees with unique indices and single-line points."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    def node(
        self,
        kind: str,
        start: int = 0,
        end: int = 0,
        *children: SyntaxNode,
        field: str | None = None,
        text: str | None = None,
        index: int | None = None,
    ) -> SyntaxNode:
        return SyntaxNode(
            index=next(self._ids) if index is None else index,
            kind=kind,
            start_byte=start,
            end_byte=end,
            start_point=Position(row=0, column=start),
            end_point=Position(row=0, column=end),
            field=field,
            text=text,
            children=list(children),
        )

    def ident(self, text: str, start: int = 0, field: str | None = "name") -> SyntaxNode:
        return self.node("identifier", start, start + len(text), field=field, text=text)

    def decl(self, kind: str, name: str, start: int = 0, end: int = 0, *children: SyntaxNode) -> SyntaxNode:
        return self.node(kind, start, end, self.ident(name, start), *children)

    def root(self, *children: SyntaxNode, end: int = 1000) -> SyntaxNode:
        return self.node("source_file", 0, end, *children, index=0)


@pytest.fixture
def nodes() -> NodeFactory:
    return NodeFactory()


@pytest.fixture
def make_collection() -> Callable[..., SourceCollection]:
    """Build a ``SourceCollection`` from ``(path, root)`` pairs, in order."""

    def _make(*files: tuple[str, SyntaxNode]) -> SourceCollection:
        collection = SourceCollection()
        for path, root in files:
            collection.add(SourceFile(path=path, text="", root=root))
        return collection

    return _make


@pytest.fixture
def write_sol(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a Solidity file under ``tmp_path`` and return its resolved path."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path.resolve()

    return _write
