import itertools
from collections.abc import Iterator
from pathlib import Path

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

from soldef.models import Position, SyntaxNode

LANGUAGE = "solidity"
SOLIDITY_EXTENSIONS = frozenset({".sol"})

# String literals keep their text so import paths can be read without the source.
_TEXT_KINDS = frozenset({"string"})


class SolidityParseError(ValueError):
    def __init__(self, path: str | None, row: int, column: int) -> None:
        self.path = path
        self.row = row
        self.column = column
        where = f"{path}:" if path else "line "
        super().__init__(f"Syntax error at {where}{row + 1}:{column + 1}")


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def node_to_model(node: Node, source_bytes: bytes, counter: Iterator[int], field: str | None = None) -> SyntaxNode:
    index = next(counter)
    children = [
        node_to_model(child, source_bytes, counter, node.field_name_for_child(i))
        for i, child in enumerate(node.children)
        if child.is_named
    ]
    text = None
    if not children or node.type in _TEXT_KINDS:
        text = source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    return SyntaxNode(
        index=index,
        kind=node.type,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        start_point=Position(row=node.start_point[0], column=node.start_point[1]),
        end_point=Position(row=node.end_point[0], column=node.end_point[1]),
        field=field,
        text=text,
        children=children,
    )


def parse_source(text: str, path: str | None = None) -> SyntaxNode:
    """Parse Solidity source into a ``SyntaxNode`` tree.

    Raises ``SolidityParseError`` when tree-sitter reports any error or missing
    node; partial trees are never returned.
    """
    source_bytes = text.encode("utf-8")
    tree = get_parser(LANGUAGE).parse(source_bytes)
    root = tree.root_node

    if root.has_error:
        error = _first_error(root) or root
        raise SolidityParseError(path, error.start_point[0], error.start_point[1])

    return node_to_model(root, source_bytes, itertools.count())


def read_source(path: str) -> str:
    """Read a Solidity file, rejecting other extensions."""
    file_path = Path(path)
    if file_path.suffix.lower() not in SOLIDITY_EXTENSIONS:
        raise ValueError(f"Unsupported file extension: {file_path.suffix}")

    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
