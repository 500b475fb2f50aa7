"""Abstract package repository contract.

A repository is a catalog of package definitions. The resolvers only talk
to repositories through ``PackageRepository``; concrete implementations
(``InMemoryRepository``, ``DirectoryRepository``) decide where the
definitions come from and how they are cached.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Iterable

from pkgsolver.core.package import PackageDef, PackageIdentifier, PackageSpecifier, PackageVersion


def is_compatible_with_installed(package: PackageDef, compatible_with: Iterable[PackageIdentifier]) -> bool:
    """Return True if ``package`` accepts every given identifier it depends on.

    A candidate that declares a dependency on one of the ``compatible_with``
    packages must accept that package's version; dependencies on other
    names are not checked here.
    """
    for ident in compatible_with:
        for dep in package.dependencies:
            if dep.name == ident.name and not dep.version.is_compatible(ident.version):
                return False
    return True


def sort_newest_first(packages: Iterable[PackageDef]) -> list[PackageDef]:
    """Sort packages by descending version; version-less packages go last."""
    packages = list(packages)
    with_version = [p for p in packages if p.version is not None]
    without = [p for p in packages if p.version is None]
    with_version.sort(key=lambda p: p.version, reverse=True)
    return with_version + without


class PackageRepository(ABC):
    """A catalog of package definitions.

    Every query accepts ``compatible_with`` identifiers (already chosen
    packages a candidate must be able to live with) and an optional
    ``cancellation`` event. Implementations may return an empty result as
    soon as the event is set.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """URL or path identifying this repository."""

    @abstractmethod
    def get_package_names(
        self,
        *compatible_with: PackageIdentifier,
        cancellation: threading.Event | None = None,
    ) -> list[str]:
        """Return the names of all packages in the repository, sorted."""

    @abstractmethod
    def get_package_versions(
        self,
        name: str,
        *compatible_with: PackageIdentifier,
        cancellation: threading.Event | None = None,
    ) -> list[PackageVersion]:
        """Return every available version of package ``name``, newest first."""

    @abstractmethod
    def get_packages(
        self,
        specifier: PackageSpecifier,
        *compatible_with: PackageIdentifier,
        cancellation: threading.Event | None = None,
    ) -> list[PackageDef]:
        """Return every package matching ``specifier``, newest first.

        Args:
            specifier: Name, version range and platform to match.
            *compatible_with: Identifiers the candidates must accept.
            cancellation: Optional event; when set, the query may stop early.

        Returns:
            Matching package definitions, newest first.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.url!r})"
