"""Unit tests for import resolution and source collection building."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from soldef.core.ast import parse_source
from soldef.core.imports import (
    SourceCollection,
    build_source_collection,
    format_path,
    import_specifiers,
    is_import_local,
    resolve_import_path,
    unquote,
)
from soldef.models import SourceFile
from soldef.workspace.project import FileSystemProject

WriteSol = Callable[[str, str], Path]


class _StaticPackage:
    name = "@acme/tokens"

    def resolve_import(self, specifier: str) -> str:
        return "C:\\deps\\" + specifier.replace("/", "\\")


class _StaticProject:
    def __init__(self) -> None:
        self.queries: list[str] = []

    def find_package(self, specifier: str) -> _StaticPackage | None:
        self.queries.append(specifier)
        return _StaticPackage() if specifier.startswith("@acme/tokens/") else None


class TestHelpers:
    def test_format_path_uses_forward_slashes(self) -> None:
        assert format_path("C:\\work\\A.sol") == "C:/work/A.sol"

    def test_local_imports_start_with_a_dot(self) -> None:
        assert is_import_local("./A.sol")
        assert is_import_local("../lib/A.sol")
        assert not is_import_local("forge-std/Test.sol")

    def test_unquote(self) -> None:
        assert unquote('"./A.sol"') == "./A.sol"
        assert unquote("'./A.sol'") == "./A.sol"
        assert unquote("plain") == "plain"

    def test_import_specifiers_cover_every_import_form(self) -> None:
        root = parse_source(
            'import "./A.sol";\n'
            'import "./B.sol" as B;\n'
            'import {C} from "./C.sol";\n'
            'import * as D from "./D.sol";\n'
            "contract E {}\n"
        )
        assert import_specifiers(root) == ["./A.sol", "./B.sol", "./C.sol", "./D.sol"]


class TestResolveImportPath:
    def test_relative_import_resolves_against_owner_directory(self, tmp_path: Path) -> None:
        owner = tmp_path / "contracts" / "token" / "Token.sol"
        expected = format_path(str((tmp_path / "contracts" / "utils" / "Math.sol").resolve()))
        assert resolve_import_path("../utils/Math.sol", str(owner)) == expected

    def test_package_import_delegates_to_package(self) -> None:
        project = _StaticProject()
        result = resolve_import_path("@acme/tokens/ERC20.sol", "/work/A.sol", project)
        assert result == "C:/deps/@acme/tokens/ERC20.sol"
        assert project.queries == ["@acme/tokens/ERC20.sol"]

    def test_unknown_package_is_returned_verbatim(self) -> None:
        assert resolve_import_path("unknown/X.sol", "/work/A.sol", _StaticProject()) == "unknown/X.sol"

    def test_without_project_non_local_import_is_verbatim(self) -> None:
        assert resolve_import_path("forge-std/Test.sol", "/work/A.sol") == "forge-std/Test.sol"


class TestSourceCollection:
    def test_rejects_duplicate_paths(self) -> None:
        root = parse_source("contract A {}")
        collection = SourceCollection()
        assert collection.add(SourceFile(path="/p/A.sol", text="", root=root))
        assert not collection.add(SourceFile(path="/p/A.sol", text="other", root=root))
        assert len(collection) == 1
        assert "/p/A.sol" in collection
        assert collection.first.text == ""


class TestBuildSourceCollection:
    def test_follows_imports_transitively_starting_file_first(self, write_sol: WriteSol) -> None:
        write_sol("C.sol", "contract C {}\n")
        write_sol("lib/B.sol", 'import "../C.sol";\ncontract B {}\n')
        main = write_sol("A.sol", 'import "./lib/B.sol";\ncontract A {}\n')

        collection = build_source_collection(str(main), main.read_text(encoding="utf-8"))

        names = [Path(source.path).name for source in collection]
        assert names == ["A.sol", "B.sol", "C.sol"]

    def test_uses_given_text_for_starting_file(self, write_sol: WriteSol) -> None:
        main = write_sol("A.sol", "contract OnDisk {}\n")

        collection = build_source_collection(str(main), "contract Unsaved {}\n")

        assert collection.first.text == "contract Unsaved {}\n"
        assert collection.first.root.children[0].name == "Unsaved"

    def test_import_cycles_terminate(self, write_sol: WriteSol) -> None:
        write_sol("B.sol", 'import "./A.sol";\ncontract B {}\n')
        main = write_sol("A.sol", 'import "./B.sol";\ncontract A {}\n')

        collection = build_source_collection(str(main), main.read_text(encoding="utf-8"))

        assert len(collection) == 2

    def test_missing_import_is_skipped(self, write_sol: WriteSol, caplog: pytest.LogCaptureFixture) -> None:
        main = write_sol("A.sol", 'import "./Gone.sol";\ncontract A {}\n')

        with caplog.at_level(logging.WARNING, logger="soldef.core.imports"):
            collection = build_source_collection(str(main), main.read_text(encoding="utf-8"))

        assert len(collection) == 1
        assert "./Gone.sol" in caplog.text

    def test_package_imports_use_project(self, tmp_path: Path, write_sol: WriteSol) -> None:
        write_sol("lib/forge-std/src/Test.sol", "contract Test {}\n")
        main = write_sol("src/A.sol", 'import "forge-std/Test.sol";\ncontract A is Test {}\n')
        project = FileSystemProject(tmp_path)

        collection = build_source_collection(str(main), main.read_text(encoding="utf-8"), project)

        assert [Path(source.path).name for source in collection] == ["A.sol", "Test.sol"]
