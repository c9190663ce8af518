import logging
from pathlib import Path

from soldef.core.ast import read_source
from soldef.core.imports import (
    SourceCollection,
    build_source_collection,
    import_source,
    resolve_import_path,
    unquote,
)
from soldef.core.locator import enclosing, locate
from soldef.core.ports.project import PackageResolver
from soldef.core.resolver import (
    resolve_declaration,
    resolve_inheritance,
    resolve_member,
    resolve_member_of,
    type_path,
)
from soldef.models import Declaration, Location, LocationLink, Position, Range, SourceFile, SyntaxNode

logger = logging.getLogger(__name__)

IDENTIFIER_KINDS = frozenset({"identifier", "property_identifier"})

_WRAPPER_KINDS = frozenset({"expression", "parenthesized_expression"})

_EMPTY_RANGE = Range(start=Position(row=0, column=0), end=Position(row=0, column=0))


def offset_at(text: str, line: int, column: int) -> int:
    """Convert a zero-based line and character column to a UTF-8 byte offset."""
    lines = text.split("\n")
    if line >= len(lines):
        return len(text.encode("utf-8"))
    preceding = sum(len(previous.encode("utf-8")) + 1 for previous in lines[:line])
    return preceding + len(lines[line][:column].encode("utf-8"))


def cursor_offset(text: str, offset: int | None, line: int | None, column: int | None) -> int:
    if offset is not None:
        return offset
    if line is not None and column is not None:
        return offset_at(text, line, column)
    raise ValueError("Either an offset or both line and column must be provided.")


def provide_definition(
    document_text: str,
    offset: int,
    document_path: str,
    project: PackageResolver | None = None,
) -> Location | list[LocationLink] | None:
    """Find the declaration referenced by the node under ``offset``.

    Import directives produce a link to the imported file; every other
    supported reference produces the location of its declaration. ``None``
    means there is nothing to navigate to.
    """
    sources = build_source_collection(document_path, document_text, project)
    document = sources.first

    chain = locate(document.root, offset)
    if not chain:
        logger.debug("No node encloses offset %d in %s", offset, document.path)
        return None
    logger.debug("Clicked %s at offset %d", chain[0].kind, offset)

    directive = next((node for node in chain if node.kind == "import_directive"), None)
    if directive is not None:
        return _import_links(directive, document, project)

    declaration = _resolve_clicked(chain, document, sources)
    return declaration.location() if declaration is not None else None


def _import_links(
    directive: SyntaxNode, document: SourceFile, project: PackageResolver | None
) -> list[LocationLink] | None:
    source = import_source(directive)
    if source is None or source.text is None:
        return None

    specifier = unquote(source.text)
    target = resolve_import_path(specifier, document.path, project)
    if not Path(target).is_absolute():
        logger.debug("Import %r did not resolve to a file", specifier)
        return None

    end = source.end_point
    origin = Range(start=Position(row=end.row, column=end.column - len(specifier) - 2), end=end)
    return [
        LocationLink(
            target_uri=Path(target).as_uri(),
            target_range=_EMPTY_RANGE,
            target_selection_range=_EMPTY_RANGE,
            origin_selection_range=origin,
        )
    ]


def _resolve_clicked(
    chain: list[SyntaxNode], document: SourceFile, sources: SourceCollection
) -> Declaration | None:
    node = chain[0]
    parent = enclosing(chain, node)

    if node.kind in IDENTIFIER_KINDS and parent is not None:
        if parent.kind == "member_expression" and _member_property(parent).index == node.index:
            return _resolve_member_expression(parent, chain, document, sources)
        if parent.kind == "user_defined_type":
            name = _qualified_prefix(parent, node)
            grandparent = enclosing(chain, parent)
            if grandparent is not None and grandparent.kind == "inheritance_specifier":
                return resolve_inheritance(name, sources)
            return resolve_declaration(name, chain, document, sources)

    if parent is not None and parent.kind == "inheritance_specifier":
        name = type_path(node)
        return resolve_inheritance(name, sources) if name else None

    if node.kind == "user_defined_type":
        name = type_path(node)
        return resolve_declaration(name, chain, document, sources) if name else None
    if node.kind in IDENTIFIER_KINDS:
        return resolve_declaration(node.text, chain, document, sources) if node.text else None
    if node.kind == "member_expression":
        return _resolve_member_expression(node, chain, document, sources)
    if node.kind == "inheritance_specifier" and node.children:
        name = type_path(node.first_field("ancestor") or node.children[0])
        return resolve_inheritance(name, sources) if name else None

    logger.debug("No resolution strategy for %s", node.kind)
    return None


def _qualified_prefix(type_node: SyntaxNode, segment: SyntaxNode) -> str:
    """Dotted path of ``type_node`` up to and including ``segment`` (``Geo`` in ``Geo.Point``)."""
    parts = []
    for child in type_node.children:
        if child.kind in IDENTIFIER_KINDS and child.text:
            parts.append(child.text)
        if child.index == segment.index:
            break
    return ".".join(parts)


def _member_object(member: SyntaxNode) -> SyntaxNode:
    return member.first_field("object") or member.children[0]


def _member_property(member: SyntaxNode) -> SyntaxNode:
    return member.first_field("property") or member.children[-1]


def _unwrap(node: SyntaxNode) -> SyntaxNode:
    while node.kind in _WRAPPER_KINDS and len(node.children) == 1:
        node = node.children[0]
    return node


def _resolve_member_expression(
    member: SyntaxNode, chain: list[SyntaxNode], document: SourceFile, sources: SourceCollection
) -> Declaration | None:
    member_name = _member_property(member).text
    base = _unwrap(_member_object(member))
    if member_name is None:
        return None

    if base.kind == "member_expression":
        container = _resolve_member_expression(base, chain, document, sources)
        if container is None:
            return None
        return resolve_member_of(container, member_name, chain, document, sources)

    if not base.children and base.text:
        return resolve_member(base.text, member_name, chain, document, sources)

    logger.debug("Unsupported member access base %s", base.kind)
    return None


def run_definition(
    project: PackageResolver | None,
    path: str,
    offset: int | None = None,
    line: int | None = None,
    column: int | None = None,
) -> list[Location | LocationLink]:
    """Read ``path`` and resolve the definition under the given cursor.

    Returns an empty list when there is nothing to navigate to.
    """
    text = read_source(path)
    result = provide_definition(text, cursor_offset(text, offset, line, column), path, project)
    if result is None:
        return []
    if isinstance(result, list):
        return list(result)
    return [result]
