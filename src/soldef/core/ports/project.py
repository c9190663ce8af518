from typing import Protocol


class PackageHandle(Protocol):
    name: str

    def resolve_import(self, specifier: str) -> str: ...


class PackageResolver(Protocol):
    def find_package(self, specifier: str) -> PackageHandle | None: ...
