"""Backtracking dependency solver.

The solver searches for a single, mutually consistent assignment of one
version per package name. The search is depth-first over a tree of
``ResolverTreeNode`` decisions:

1. Merge the outstanding requirements per package name into one
   specifier, failing immediately if two are mutually exclusive.
2. Drop requirements whose package is already chosen on the path from
   the root. The chosen version stays in the requirement list as an exact
   specifier, so a later conflicting requirement makes step 1 fail.
3. If nothing is left, the current node is a solution.
4. Otherwise take the most specific remaining requirement (highest
   ``ResolverHeuristics.value``), so broad requirements are decided last.
5. Try its candidate versions in order of fitness, then newest first.
   Each candidate gets a child node and the requirement list is extended
   with the candidate's own dependencies. The first child whose subtree
   solves is committed; a failing child is discarded (backtracked) and the
   next candidate is tried.
6. When every candidate fails the node is a dead end and its caller
   backtracks in turn.

Unsatisfiability is signalled by ``None`` from ``solve``; ``resolve``
wraps the outcome in a ``Resolution`` with human-readable conflicts.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from pkgsolver.core.package import CpuArchitecture, PackageDef, PackageSpecifier
from pkgsolver.core.version import SemanticVersion, VersionMatchBehavior, VersionSpecifier
from pkgsolver.repository.base import PackageRepository
from pkgsolver.repository.helpers import get_all_versions_from_all_repos, get_packages_from_all_repos

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Heuristics
# ---------------------------------------------------------------------------


class ResolverHeuristics:
    """Scores used to order the search."""

    @staticmethod
    def value(specifier: VersionSpecifier | PackageSpecifier) -> int:
        """Specificity of a requirement: 1 for ``Any``, up to 6 for an exact full version.

        2 for any other specifier, +1 in Exact mode, +1 for each of
        major, minor and patch that is set.
        """
        v = specifier.version if isinstance(specifier, PackageSpecifier) else specifier
        score = 1 if v.is_any else 2
        if v.is_exact_mode:
            score += 1
        for part in (v.major, v.minor, v.patch):
            if part is not None:
                score += 1
        return score

    @staticmethod
    def fitness(version: SemanticVersion, specifier: VersionSpecifier | PackageSpecifier) -> int:
        """How closely a candidate version fits a requirement (1 to 3).

        Exact requirements reward a candidate whose minor and patch equal
        the requested ones. Compatible requirements treat every accepted
        version alike, leaving the order to the version number.
        """
        target = specifier.version if isinstance(specifier, PackageSpecifier) else specifier
        # Compatible scores flat; a minor-match bonus would pick ^1.0 -> 1.0 over 1.1.
        if target.is_any or target.is_compatible_mode:
            return 1
        score = 1
        if version.minor == target.minor:
            score += 1
        if version.patch == target.patch:
            score += 1
        return score


# ---------------------------------------------------------------------------
# Repository facade
# ---------------------------------------------------------------------------


class PackageResolver:
    """Repository access for the solver.

    Filters out platform-incompatible and version-less candidates and
    memoizes version listings for the lifetime of the instance.
    """

    def __init__(
        self,
        repositories: Sequence[PackageRepository],
        cancellation: threading.Event | None = None,
    ) -> None:
        self.repositories = list(repositories)
        self._cancellation = cancellation
        self._versions: dict[tuple[str, object, object], list[SemanticVersion]] = {}

    def get_packages(self, specifier: PackageSpecifier) -> list[PackageDef]:
        packages = get_packages_from_all_repos(self.repositories, specifier, cancellation=self._cancellation)
        result: list[PackageDef] = []
        seen = set()
        for pkg in packages:
            if pkg.version is None or not pkg.is_platform_compatible(specifier.architecture, specifier.os):
                continue
            if pkg.identifier in seen:
                continue
            seen.add(pkg.identifier)
            result.append(pkg)
        return result

    def get_all_versions(self, specifier: PackageSpecifier) -> list[SemanticVersion]:
        key = (specifier.name, specifier.architecture, specifier.os)
        if key not in self._versions:
            listed = get_all_versions_from_all_repos(
                self.repositories, specifier.name, cancellation=self._cancellation
            )
            versions: list[SemanticVersion] = []
            for pv in listed:
                if pv.version is None or not pv.is_platform_compatible(specifier.architecture, specifier.os):
                    continue
                if pv.version not in versions:
                    versions.append(pv.version)
            self._versions[key] = versions
        return list(self._versions[key])


# ---------------------------------------------------------------------------
# Search tree
# ---------------------------------------------------------------------------


class SearchState(enum.Enum):
    UNEXPLORED = "unexplored"
    EXPLORING = "exploring"
    COMMITTED = "committed"
    BACKTRACKED = "backtracked"


@dataclass(eq=False)
class ResolverTreeNode:
    """One decision in the search: a package chosen for ``name``.

    The chain of parents back to the root is the partial solution at this
    point of the search.
    """

    name: str
    parent: ResolverTreeNode | None = None
    package: PackageDef | None = None
    children: list[ResolverTreeNode] = field(default_factory=list)
    state: SearchState = SearchState.UNEXPLORED

    def get_resolved(self) -> list[PackageDef]:
        """Return the packages chosen on the path from this node to the root."""
        resolved: list[PackageDef] = []
        node: ResolverTreeNode | None = self
        while node is not None:
            if node.package is not None:
                resolved.append(node.package)
            node = node.parent
        return resolved

    @property
    def depth(self) -> int:
        depth, node = 0, self.parent
        while node is not None:
            depth, node = depth + 1, node.parent
        return depth


# ---------------------------------------------------------------------------
# Resolution result
# ---------------------------------------------------------------------------


@dataclass
class Resolution:
    """Result of a tree-solver run.

    Attributes:
        success: True if a consistent assignment was found.
        packages: The chosen packages, in decision order. Empty on failure.
        conflicts: Human-readable reasons the search failed. Empty on success.
        cancelled: True if the search was abandoned through cancellation.
    """

    success: bool
    packages: list[PackageDef] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def installed(self) -> dict[str, str]:
        """Mapping of package name to resolved version string."""
        return {pkg.name: str(pkg.version) for pkg in self.packages}


# ---------------------------------------------------------------------------
# TreeSolver
# ---------------------------------------------------------------------------


class TreeSolver:
    """Depth-first backtracking solver over package versions.

    Args:
        repositories: Repositories in priority order.
        cancellation: Optional event; once set, the search stops and
            ``solve`` returns None with ``cancelled`` set.

    Raises:
        RepositoryUnavailableError: From ``solve``/``resolve`` if every
            repository failed a query.
    """

    def __init__(
        self,
        repositories: Sequence[PackageRepository],
        *,
        cancellation: threading.Event | None = None,
    ) -> None:
        self._cancellation = cancellation
        self.package_resolver = PackageResolver(repositories, cancellation)
        self.cancelled = False
        self._dead_ends: list[str] = []

    def solve(self, requirements: Iterable[PackageSpecifier]) -> ResolverTreeNode | None:
        """Search for a consistent assignment satisfying ``requirements``.

        Returns:
            The terminal node of the solution (walk ``get_resolved`` for the
            packages), or None if no consistent assignment exists.
        """
        self.cancelled = False
        self._dead_ends = []
        requirements = list(requirements)
        for spec in requirements:
            if spec.name is None:
                raise ValueError("Requirements passed to the solver must name a package")
        root = ResolverTreeNode("root", state=SearchState.COMMITTED)
        return self._solve(root, requirements)

    def resolve(self, requirements: Iterable[PackageSpecifier]) -> Resolution:
        """Like ``solve``, but return a ``Resolution`` with diagnostics."""
        node = self.solve(requirements)
        if node is not None:
            return Resolution(success=True, packages=list(reversed(node.get_resolved())))
        if self.cancelled:
            return Resolution(success=False, conflicts=["Resolution was cancelled"], cancelled=True)
        conflicts = list(dict.fromkeys(self._dead_ends))
        if not conflicts:
            conflicts.append("Resolution failed: no consistent set of package versions exists")
        return Resolution(success=False, conflicts=conflicts)

    # -- Search -------------------------------------------------------------

    def _is_cancelled(self) -> bool:
        if self._cancellation is not None and self._cancellation.is_set():
            self.cancelled = True
        return self.cancelled

    def _merge_specs(self, requirements: list[PackageSpecifier]) -> list[PackageSpecifier] | None:
        """Fold requirements on the same name into one, or None if two exclude each other."""
        groups: dict[str, list[PackageSpecifier]] = {}
        for spec in requirements:
            groups.setdefault(spec.name, []).append(spec)

        merged: list[PackageSpecifier] = []
        for name, group in groups.items():
            version = VersionSpecifier.ANY
            for spec in group:
                if version.is_satisfied_by(spec.version):
                    if not spec.version.is_satisfied_by(version):
                        version = spec.version
                    elif ResolverHeuristics.value(spec.version) > ResolverHeuristics.value(version):
                        version = spec.version
                elif not spec.version.is_satisfied_by(version):
                    logger.debug(
                        "Incompatible versions of %r: %s and %s are mutually exclusive",
                        name,
                        version,
                        spec.version,
                    )
                    self._dead_ends.append(
                        f"Requirements {version} and {spec.version} on {name!r} are mutually exclusive"
                    )
                    return None
            architecture = next(
                (s.architecture for s in group if s.architecture != CpuArchitecture.UNSPECIFIED),
                CpuArchitecture.UNSPECIFIED,
            )
            os = next((s.os for s in group if s.os), None)
            merged.append(PackageSpecifier(name, version, architecture, os))
        return merged

    def _solve(self, node: ResolverTreeNode, requirements: list[PackageSpecifier]) -> ResolverTreeNode | None:
        if self._is_cancelled():
            return None
        merged = self._merge_specs(requirements)
        if merged is None:
            return None

        resolved_names = {pkg.name for pkg in node.get_resolved()}
        to_resolve = [spec for spec in merged if spec.name not in resolved_names]
        if not to_resolve:
            return node

        # max() keeps the first of equally specific requirements.
        next_spec = max(to_resolve, key=ResolverHeuristics.value)
        rest = [spec for spec in merged if spec is not next_spec]
        return self._solve_next(node, next_spec, rest)

    def _solve_next(
        self,
        node: ResolverTreeNode,
        next_spec: PackageSpecifier,
        rest: list[PackageSpecifier],
    ) -> ResolverTreeNode | None:
        versions = self.package_resolver.get_all_versions(next_spec)
        if self._is_cancelled():
            return None
        if not versions:
            self._dead_ends.append(f"Package {next_spec.name!r} is not available in any repository")
            return None

        candidates = sorted(
            versions,
            key=lambda v: (ResolverHeuristics.fitness(v, next_spec), v),
            reverse=True,
        )
        tried = False
        for version in candidates:
            exact = PackageSpecifier(
                next_spec.name,
                VersionSpecifier.from_version(version, VersionMatchBehavior.EXACT),
                next_spec.architecture,
                next_spec.os,
            )
            if not next_spec.version.is_satisfied_by(exact.version):
                continue
            packages = self.package_resolver.get_packages(exact)
            if self._is_cancelled():
                return None
            if not packages:
                continue
            tried = True
            package = packages[0]

            child = ResolverTreeNode(f"{next_spec.name} - {version}", parent=node, package=package)
            node.children.append(child)
            child.state = SearchState.EXPLORING
            logger.debug("Trying %s %s at depth %d", package.name, version, child.depth)

            extended = rest + [exact] + [
                PackageSpecifier(d.name, d.version, next_spec.architecture, next_spec.os)
                for d in package.dependencies
            ]
            result = self._solve(child, extended)
            if result is not None:
                child.state = SearchState.COMMITTED
                return result

            child.state = SearchState.BACKTRACKED
            node.children.remove(child)
            if self._is_cancelled():
                return None
            logger.debug("Backtracking from %s %s", package.name, version)

        if not tried:
            available = ", ".join(str(v) for v in sorted(versions, reverse=True))
            self._dead_ends.append(
                f"No version of {next_spec.name!r} satisfies {next_spec.version} (available: {available})"
            )
        return None
