from collections.abc import Iterable

from soldef.models import SyntaxNode

_DECLARATION_SUFFIXES = ("_declaration", "_definition")

# tree-sitter-solidity names these separately; they declare names all the same.
_EXTRA_DECLARATION_KINDS = frozenset({"parameter", "struct_member", "enum_value"})


def is_declaration(node: SyntaxNode) -> bool:
    return node.kind.endswith(_DECLARATION_SUFFIXES) or node.kind in _EXTRA_DECLARATION_KINDS


def declarations_in(subtree: SyntaxNode) -> list[SyntaxNode]:
    """Collect declaration nodes under ``subtree`` (itself included) in preorder."""
    result: list[SyntaxNode] = []
    seen: set[int] = set()
    stack = [subtree]
    while stack:
        node = stack.pop()
        if node.index in seen:
            continue
        seen.add(node.index)
        if is_declaration(node):
            result.append(node)
        stack.extend(reversed(node.children))
    return result


def find_local(name: str, scopes: Iterable[SyntaxNode]) -> SyntaxNode | None:
    """First declaration called ``name`` when scanning ``scopes`` in order."""
    for scope in scopes:
        for declaration in declarations_in(scope):
            if declaration.name == name:
                return declaration
    return None
