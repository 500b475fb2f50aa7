"""Broken-package analysis over a fixed package set.

Given the complete set of packages that are (or are about to be)
installed, the analyzer determines which of them are *broken*:

1. A package is directly broken if one of its dependencies is absent from
   the set (Missing) or present in a version its requirement does not
   accept (IncompatibleVersion).
2. A package that depends on a broken package is itself broken
   (DependencyMissing). This is propagated over the reverse-dependency
   ("dependers") graph with a worklist until a fixed point is reached;
   each package is marked at most once, so the propagation terminates.

The analyzer never raises for unsatisfied dependencies: the result is
data for the caller to inspect.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable

from pkgsolver.core.package import PackageDef
from pkgsolver.core.version import SemanticVersion, VersionSpecifier


class DependencyIssueType(enum.Enum):
    """Why a dependency edge is broken."""

    NONE = "none"
    MISSING = "missing"
    INCOMPATIBLE_VERSION = "incompatible_version"
    DEPENDENCY_MISSING = "dependency_missing"


@dataclass(frozen=True)
class DependencyIssue:
    """A single broken dependency edge.

    Attributes:
        package_name: Name of the required package.
        expected_version: The requirement declared on the edge.
        loaded_version: Version actually present, or None if absent.
        issue_type: Classification of the problem.
    """

    package_name: str
    expected_version: VersionSpecifier
    loaded_version: SemanticVersion | None = None
    issue_type: DependencyIssueType = DependencyIssueType.NONE

    def __str__(self) -> str:
        if self.issue_type == DependencyIssueType.MISSING:
            return f"{self.package_name} {self.expected_version} is missing"
        if self.issue_type == DependencyIssueType.INCOMPATIBLE_VERSION:
            loaded = self.loaded_version if self.loaded_version is not None else "none"
            return f"{self.package_name}: requires {self.expected_version}, found {loaded}"
        if self.issue_type == DependencyIssueType.DEPENDENCY_MISSING:
            return f"{self.package_name} is broken"
        return f"{self.package_name} {self.expected_version}"


class DependencyAnalyzer:
    """Result of analyzing a package set for broken dependencies.

    Build one with ``DependencyAnalyzer.build(packages)``.

    Attributes:
        broken_packages: Broken packages, in input order.
    """

    def __init__(
        self,
        packages: list[PackageDef],
        broken_packages: list[PackageDef],
        lookup: dict[str, PackageDef],
        dependers: dict[PackageDef, list[PackageDef]],
    ) -> None:
        self._packages = packages
        self._lookup = lookup
        self._dependers = dependers
        self.broken_packages: tuple[PackageDef, ...] = tuple(broken_packages)
        self._broken_names = {pkg.name for pkg in broken_packages}

    # -- Construction -------------------------------------------------------

    @classmethod
    def build(cls, packages: Iterable[PackageDef]) -> DependencyAnalyzer:
        """Analyze ``packages`` and compute the transitive set of broken packages.

        When several definitions share a name, the first one is the one
        dependency edges resolve to.
        """
        packages = list(packages)
        lookup: dict[str, PackageDef] = {}
        for pkg in packages:
            lookup.setdefault(pkg.name, pkg)
        dependers: dict[PackageDef, list[PackageDef]] = {pkg: [] for pkg in packages}

        broken: set[PackageDef] = set()
        for pkg in packages:
            for dep in pkg.dependencies:
                target = lookup.get(dep.name)
                if target is None:
                    # Placeholder without a version stands for "missing".
                    target = PackageDef(name=dep.name, version=None)
                    lookup[dep.name] = target
                    dependers[target] = []
                if target.version is None or not dep.version.is_compatible(target.version):
                    broken.add(pkg)
                dependers[target].append(pkg)

        worklist = list(broken)
        while worklist:
            item = worklist.pop()
            for depender in dependers[item]:
                if depender not in broken:
                    broken.add(depender)
                    worklist.append(depender)

        ordered = [pkg for pkg in packages if pkg in broken]
        return cls(packages, ordered, lookup, dependers)

    # -- Queries ------------------------------------------------------------

    def is_broken(self, package: PackageDef) -> bool:
        return package in self.broken_packages

    def get_issues(self, package: PackageDef) -> list[DependencyIssue]:
        """Classify every broken dependency edge of ``package``.

        Returns an empty list for a package that was not part of the
        analyzed set.
        """
        if package not in self._dependers or package not in self._packages:
            return []

        issues: list[DependencyIssue] = []
        for dep in package.dependencies:
            target = self._lookup.get(dep.name)
            if target is None or target.version is None:
                issues.append(DependencyIssue(dep.name, dep.version, None, DependencyIssueType.MISSING))
                continue
            if not dep.version.is_compatible(target.version):
                issue_type = DependencyIssueType.INCOMPATIBLE_VERSION
            elif dep.name in self._broken_names:
                issue_type = DependencyIssueType.DEPENDENCY_MISSING
            else:
                continue
            issues.append(DependencyIssue(dep.name, dep.version, target.version, issue_type))
        return issues

    def filter_related(self, important_packages: Iterable[PackageDef | str]) -> DependencyAnalyzer:
        """Restrict the broken-package report to packages related to a seed set.

        A package is related if it can be reached from a seed by following
        dependency edges downward or depender edges upward. Seeds may be
        given as definitions or names; unknown names are ignored.
        """
        seeds = [p if isinstance(p, str) else p.name for p in important_packages]
        seeds = [name for name in seeds if name in self._lookup]

        down = self._reach(seeds, lambda pkg: (dep.name for dep in pkg.dependencies))
        up = self._reach(seeds, lambda pkg: (d.name for d in self._dependers.get(pkg, ())))
        related = down | up

        broken = [pkg for pkg in self.broken_packages if pkg.name in related]
        return DependencyAnalyzer(self._packages, broken, self._lookup, self._dependers)

    def _reach(self, seeds: list[str], edges) -> set[str]:
        visited: set[str] = set(seeds)
        stack = list(seeds)
        while stack:
            top = stack.pop()
            pkg = self._lookup.get(top)
            if pkg is None:
                continue
            for name in edges(pkg):
                if name not in visited:
                    visited.add(name)
                    stack.append(name)
        return visited


def check_dependencies(
    installed: Iterable[PackageDef],
    new_packages: Iterable[PackageDef],
) -> DependencyAnalyzer:
    """Analyze the installation as it would be after installing ``new_packages``.

    A new package replaces the installed package of the same name. The
    report is restricted to packages related to the new ones, so problems
    that already existed elsewhere in the installation are not included.
    """
    new_packages = list(new_packages)
    new_names = {pkg.name for pkg in new_packages}
    combined = [pkg for pkg in installed if pkg.name not in new_names] + new_packages
    return DependencyAnalyzer.build(combined).filter_related(new_packages)
