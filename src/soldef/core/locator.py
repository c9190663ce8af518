from soldef.models import SyntaxNode


def locate(root: SyntaxNode, offset: int) -> list[SyntaxNode]:
    """Return every node whose range contains ``offset``, narrowest first.

    Nodes are recorded after their children, so when a wrapper and the node it
    wraps share a span the inner one sorts first. The sort is stable; other
    ties keep depth-first order.
    """
    found: list[SyntaxNode] = []
    seen: set[int] = set()

    def visit(node: SyntaxNode) -> None:
        if node.index in seen:
            return
        seen.add(node.index)
        for child in node.children:
            visit(child)
        if node.contains(offset):
            found.append(node)

    visit(root)
    return sorted(found, key=lambda n: n.width)


def enclosing(chain: list[SyntaxNode], node: SyntaxNode) -> SyntaxNode | None:
    """Return the node in ``chain`` that has ``node`` as a direct child."""
    for candidate in chain:
        if any(child.index == node.index for child in candidate.children):
            return candidate
    return None
