"""Name resolution over parsed Solidity sources.

Lookup is two-tiered: the caller's scopes (normally the nodes enclosing the
cursor, innermost first) are scanned before the top-level items of every file
in the source collection. Shadowing between sibling scopes is not modelled.
"""

import logging
from collections.abc import Iterable, Sequence

from soldef.core.imports import SourceCollection
from soldef.core.scope import find_local
from soldef.models import Declaration, SourceFile, SyntaxNode

logger = logging.getLogger(__name__)

# Environment-provided globals; they have no declaration to navigate to.
RESERVED_BASES = frozenset({"msg", "tx", "block"})

CONTRACT_KINDS = frozenset({"contract_declaration", "interface_declaration", "library_declaration"})
CONTAINER_KINDS = CONTRACT_KINDS | {"struct_declaration", "enum_declaration"}


def type_path(node: SyntaxNode) -> str | None:
    """Dotted name of a ``user_defined_type`` node (``Lib.Struct``)."""
    parts = [child.text for child in node.children if child.kind == "identifier" and child.text]
    if parts:
        return ".".join(parts)
    return node.text


def declared_type_name(node: SyntaxNode) -> str | None:
    """Name of the user-defined type annotating a declaration, if any."""
    type_node = node.first_field("type") or next(
        (child for child in node.children if child.kind in ("type_name", "user_defined_type")), None
    )
    if type_node is None:
        return None
    if type_node.kind == "user_defined_type":
        return type_path(type_node)
    if type_node.kind == "type_name":
        named = type_node.children
        if len(named) == 1 and named[0].kind == "user_defined_type":
            return type_path(named[0])
        if named and all(child.kind == "identifier" for child in named):
            return type_path(type_node)
    return None


def resolve_declaration(
    name: str,
    scopes: Sequence[SyntaxNode],
    owner: SourceFile,
    sources: SourceCollection,
) -> Declaration | None:
    """Resolve ``name`` in ``scopes`` (nodes of ``owner``), then in every source file."""
    if "." in name:
        return _resolve_path(name.split("."), scopes, owner, sources)

    node = find_local(name, scopes)
    if node is not None:
        return Declaration(owner=owner, node=node)

    owner_scanned = any(scope.index == owner.root.index for scope in scopes)
    for source in sources:
        if owner_scanned and source.path == owner.path:
            continue
        node = find_local(name, source.root.children)
        if node is not None:
            logger.debug("Resolved %s globally in %s", name, source.path)
            return Declaration(owner=source, node=node)

    logger.debug("No declaration found for %s", name)
    return None


def _resolve_path(
    parts: list[str],
    scopes: Sequence[SyntaxNode],
    owner: SourceFile,
    sources: SourceCollection,
) -> Declaration | None:
    declaration = resolve_declaration(parts[0], scopes, owner, sources)
    for part in parts[1:]:
        if declaration is None:
            return None
        declaration = resolve_member_of(declaration, part, scopes, owner, sources)
    return declaration


def container_of(
    declaration: Declaration,
    scopes: Sequence[SyntaxNode],
    owner: SourceFile,
    sources: SourceCollection,
) -> Declaration | None:
    """The declaration whose body defines members of ``declaration``.

    That is the declared type for typed variables, or the declaration itself
    for contracts, structs and enums.
    """
    type_name = declared_type_name(declaration.node)
    if type_name is not None:
        return resolve_declaration(type_name, scopes, owner, sources)
    if declaration.kind in CONTAINER_KINDS:
        return declaration
    return None


def resolve_member_of(
    declaration: Declaration,
    member_name: str,
    scopes: Sequence[SyntaxNode],
    owner: SourceFile,
    sources: SourceCollection,
) -> Declaration | None:
    container = container_of(declaration, scopes, owner, sources)
    if container is None:
        logger.debug("%s has no member container", declaration.name)
        return None
    return resolve_declaration(member_name, [container.node], container.owner, sources)


def resolve_member(
    base_name: str,
    member_name: str,
    scopes: Sequence[SyntaxNode],
    owner: SourceFile,
    sources: SourceCollection,
) -> Declaration | None:
    """Resolve ``base_name.member_name``."""
    if base_name in RESERVED_BASES:
        return None
    if base_name == "this":
        contract = enclosing_contract(scopes)
        if contract is None:
            return None
        return resolve_declaration(member_name, [contract], owner, sources)
    if base_name == "super":
        return _resolve_super_member(member_name, scopes, owner, sources)

    base = resolve_declaration(base_name, scopes, owner, sources)
    if base is None:
        return None
    return resolve_member_of(base, member_name, scopes, owner, sources)


def enclosing_contract(scopes: Iterable[SyntaxNode]) -> SyntaxNode | None:
    return next((scope for scope in scopes if scope.kind in CONTRACT_KINDS), None)


def base_contracts(contract: Declaration, sources: SourceCollection) -> list[Declaration]:
    """Declarations of the contracts named in ``contract``'s ``is`` list, in source order."""
    bases = []
    for specifier in contract.node.children:
        if specifier.kind != "inheritance_specifier" or not specifier.children:
            continue
        ancestor = specifier.first_field("ancestor") or specifier.children[0]
        name = type_path(ancestor)
        base = resolve_inheritance(name, sources) if name else None
        if base is not None:
            bases.append(base)
    return bases


def _resolve_super_member(
    member_name: str,
    scopes: Sequence[SyntaxNode],
    owner: SourceFile,
    sources: SourceCollection,
) -> Declaration | None:
    contract = enclosing_contract(scopes)
    if contract is None:
        return None
    # The right-most base is the most derived one.
    for base in reversed(base_contracts(Declaration(owner=owner, node=contract), sources)):
        node = find_local(member_name, [base.node])
        if node is not None:
            return Declaration(owner=base.owner, node=node)
    return None


def resolve_inheritance(name: str, sources: SourceCollection) -> Declaration | None:
    """Find a contract, interface or library called ``name`` among top-level items of every file."""
    for source in sources:
        for item in source.root.children:
            if item.kind in CONTRACT_KINDS and item.name == name:
                return Declaration(owner=source, node=item)
    logger.debug("No base contract named %s", name)
    return None
