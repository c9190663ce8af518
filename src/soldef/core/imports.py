import logging
from collections.abc import Iterator
from pathlib import Path

from soldef.core.ast import parse_source, read_source
from soldef.core.ports.project import PackageResolver
from soldef.models import SourceFile, SyntaxNode

logger = logging.getLogger(__name__)


def format_path(path: str) -> str:
    return path.replace("\\", "/")


def is_import_local(specifier: str) -> bool:
    return specifier.startswith(".")


def resolve_import_path(specifier: str, owner_path: str, project: PackageResolver | None = None) -> str:
    """Resolve an import specifier to an absolute path.

    Relative specifiers resolve against the importing file's directory, others
    against the package whose name prefixes them. Specifiers matching neither
    come back unchanged.
    """
    if is_import_local(specifier):
        return format_path(str((Path(owner_path).parent / specifier).resolve()))
    if project is not None:
        package = project.find_package(specifier)
        if package is not None:
            return format_path(package.resolve_import(specifier))
    return specifier


def unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] in "\"'" and literal[-1] == literal[0]:
        return literal[1:-1]
    return literal


def import_source(directive: SyntaxNode) -> SyntaxNode | None:
    """Return the string literal holding the imported path."""
    source = directive.first_field("source")
    if source is not None:
        return source
    return next((child for child in directive.children if child.kind == "string"), None)


def import_specifiers(root: SyntaxNode) -> list[str]:
    specifiers = []
    for child in root.children:
        if child.kind != "import_directive":
            continue
        source = import_source(child)
        if source is not None and source.text is not None:
            specifiers.append(unquote(source.text))
    return specifiers


class SourceCollection:
    """Files reachable from one document, unique by path, starting file first."""

    def __init__(self) -> None:
        self._files: list[SourceFile] = []
        self._by_path: dict[str, SourceFile] = {}

    def add(self, source: SourceFile) -> bool:
        if source.path in self._by_path:
            return False
        self._files.append(source)
        self._by_path[source.path] = source
        return True

    @property
    def first(self) -> SourceFile:
        return self._files[0]

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __iter__(self) -> Iterator[SourceFile]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)


def load_source(path: str, text: str | None = None) -> SourceFile:
    if text is None:
        text = read_source(path)
    return SourceFile(path=path, text=text, root=parse_source(text, path))


def build_source_collection(path: str, text: str, project: PackageResolver | None = None) -> SourceCollection:
    """Parse ``path`` and every file it transitively imports.

    Imports that do not resolve to an existing file are skipped.
    """
    collection = SourceCollection()

    def add_with_imports(source: SourceFile) -> None:
        collection.add(source)
        for specifier in import_specifiers(source.root):
            target = resolve_import_path(specifier, source.path, project)
            if target in collection:
                continue
            target_path = Path(target)
            if not target_path.is_absolute() or not target_path.is_file():
                logger.warning("Skipping unresolved import %r in %s", specifier, source.path)
                continue
            add_with_imports(load_source(target))

    add_with_imports(load_source(format_path(str(Path(path).resolve())), text))
    logger.info("Collected %d source file(s) for %s", len(collection), path)
    return collection
