import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from soldef.config import Settings

logger = logging.getLogger(__name__)

PROJECT_MARKERS = (
    "foundry.toml",
    "hardhat.config.js",
    "hardhat.config.ts",
    "truffle-config.js",
    "remappings.txt",
    "package.json",
    ".git",
)


@dataclass(frozen=True)
class DependencyPackage:
    """An installed dependency such as ``lib/forge-std`` or ``node_modules/@openzeppelin/contracts``.

    Implements the ``PackageHandle`` protocol.
    """

    name: str
    path: str
    sources_dir: str = "src"

    def is_import_for_this(self, specifier: str) -> bool:
        return specifier == self.name or specifier.startswith(self.name + "/")

    def resolve_import(self, specifier: str) -> str:
        remainder = specifier[len(self.name) :].lstrip("/")
        package_dir = Path(self.path)
        if self.sources_dir:
            preferred = package_dir / self.sources_dir / remainder
            if preferred.exists():
                return str(preferred)
        return str(package_dir / remainder)


def discover_packages(root: Path, dependency_dirs: Iterable[str], sources_dir: str = "src") -> list[DependencyPackage]:
    packages: list[DependencyPackage] = []
    for dependency_dir in dependency_dirs:
        base = root / dependency_dir
        if not base.is_dir():
            continue
        for entry in sorted(base.iterdir()):
            if not entry.is_dir():
                continue
            if entry.name.startswith("@"):
                for scoped in sorted(entry.iterdir()):
                    if scoped.is_dir():
                        packages.append(DependencyPackage(f"{entry.name}/{scoped.name}", str(scoped), sources_dir))
            else:
                packages.append(DependencyPackage(entry.name, str(entry), sources_dir))
    logger.debug("Discovered %d package(s) under %s", len(packages), root)
    return packages


class FileSystemProject:
    """A project root and the dependency packages installed beneath it.

    Implements the ``PackageResolver`` protocol.
    """

    def __init__(
        self,
        root: str | Path,
        dependency_dirs: Iterable[str] = ("lib", "node_modules"),
        sources_dir: str = "src",
    ) -> None:
        self.root = Path(root).resolve()
        self.packages = discover_packages(self.root, dependency_dirs, sources_dir)

    def find_package(self, specifier: str) -> DependencyPackage | None:
        matches = [package for package in self.packages if package.is_import_for_this(specifier)]
        return max(matches, key=lambda package: len(package.name), default=None)


def find_project_root(document_path: str | Path) -> Path:
    start = Path(document_path).resolve().parent
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate
    return start


def create_project(document_path: str | Path, root: str | Path | None, settings: Settings) -> FileSystemProject:
    project_root = Path(root) if root is not None else find_project_root(document_path)
    return FileSystemProject(project_root, settings.dependency_dirs, settings.sources_dir)
