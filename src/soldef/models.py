from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator

SELF_NAMED_KINDS = frozenset({"enum_value"})


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    column: int


class SyntaxNode(BaseModel):
    """A named tree-sitter node with its position and named children.

    ``index`` is the node's preorder position in its tree and serves as its
    identity; two nodes of the same tree never share it.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    kind: str
    start_byte: int
    end_byte: int
    start_point: Position
    end_point: Position
    field: str | None = None
    text: str | None = None
    children: list[SyntaxNode] = []

    @model_validator(mode="after")
    def _check_range(self) -> SyntaxNode:
        if self.start_byte > self.end_byte:
            raise ValueError(f"Invalid range for {self.kind}: {self.start_byte} > {self.end_byte}")
        return self

    @property
    def width(self) -> int:
        return self.end_byte - self.start_byte

    def contains(self, offset: int) -> bool:
        return self.start_byte <= offset <= self.end_byte

    def field_children(self, name: str) -> list[SyntaxNode]:
        return [child for child in self.children if child.field == name]

    def first_field(self, name: str) -> SyntaxNode | None:
        for child in self.children:
            if child.field == name:
                return child
        return None

    @property
    def name(self) -> str | None:
        """Text of the ``name`` field child, if the node has one.

        Enum values have no name field; they are named by their own text.
        """
        name_node = self.first_field("name")
        if name_node is None and self.kind in SELF_NAMED_KINDS:
            name_node = self.children[0] if self.children else self
        return name_node.text if name_node is not None else None


SyntaxNode.model_rebuild()  # necessary for recursive types


class Range(BaseModel):
    start: Position
    end: Position


class Location(BaseModel):
    uri: str
    range: Range


class LocationLink(BaseModel):
    target_uri: str
    target_range: Range
    target_selection_range: Range
    origin_selection_range: Range


@dataclass(frozen=True)
class SourceFile:
    path: str
    text: str
    root: SyntaxNode

    @property
    def uri(self) -> str:
        return Path(self.path).as_uri()


@dataclass(frozen=True)
class Declaration:
    owner: SourceFile
    node: SyntaxNode

    @property
    def kind(self) -> str:
        return self.node.kind

    @property
    def name(self) -> str | None:
        return self.node.name

    def location(self) -> Location:
        return Location(
            uri=self.owner.uri,
            range=Range(start=self.node.start_point, end=self.node.end_point),
        )
