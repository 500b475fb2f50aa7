"""In-process package repository."""

from __future__ import annotations

import threading
from abc import abstractmethod
from typing import Iterable

from pkgsolver.core.package import PackageDef, PackageIdentifier, PackageSpecifier, PackageVersion
from pkgsolver.repository.base import (
    PackageRepository,
    is_compatible_with_installed,
    sort_newest_first,
)


def _to_version(pkg: PackageDef) -> PackageVersion:
    return PackageVersion(pkg.name, pkg.version, pkg.architecture, pkg.os)


class PackageListRepository(PackageRepository):
    """Shared query logic for repositories that can list all their packages.

    Subclasses implement ``all_packages``; the catalog queries are answered
    by filtering that list.
    """

    @abstractmethod
    def all_packages(self) -> list[PackageDef]:
        """Return every definition in the repository."""

    def _candidates(
        self,
        compatible_with: Iterable[PackageIdentifier],
        cancellation: threading.Event | None,
    ) -> list[PackageDef]:
        if cancellation is not None and cancellation.is_set():
            return []
        compatible_with = list(compatible_with)
        return [pkg for pkg in self.all_packages() if is_compatible_with_installed(pkg, compatible_with)]

    def get_package_names(
        self,
        *compatible_with: PackageIdentifier,
        cancellation: threading.Event | None = None,
    ) -> list[str]:
        return sorted({pkg.name for pkg in self._candidates(compatible_with, cancellation)})

    def get_package_versions(
        self,
        name: str,
        *compatible_with: PackageIdentifier,
        cancellation: threading.Event | None = None,
    ) -> list[PackageVersion]:
        matching = [
            p for p in self._candidates(compatible_with, cancellation) if p.name == name and p.version is not None
        ]
        versions: list[PackageVersion] = []
        for pkg in sort_newest_first(matching):
            version = _to_version(pkg)
            if version not in versions:
                versions.append(version)
        return versions

    def get_packages(
        self,
        specifier: PackageSpecifier,
        *compatible_with: PackageIdentifier,
        cancellation: threading.Event | None = None,
    ) -> list[PackageDef]:
        matching = [p for p in self._candidates(compatible_with, cancellation) if specifier.matches(p)]
        return sort_newest_first(matching)


class InMemoryRepository(PackageListRepository):
    """A repository backed by a list of definitions held in memory.

    Args:
        url: Name identifying the repository in logs and diagnostics.
        packages: The catalog contents.
    """

    def __init__(self, url: str, packages: Iterable[PackageDef] = ()) -> None:
        self._url = url
        self._packages = list(packages)
        for pkg in self._packages:
            if pkg.package_source is None:
                pkg.package_source = url

    @property
    def url(self) -> str:
        return self._url

    def add(self, package: PackageDef) -> None:
        if package.package_source is None:
            package.package_source = self._url
        self._packages.append(package)

    def all_packages(self) -> list[PackageDef]:
        return list(self._packages)
