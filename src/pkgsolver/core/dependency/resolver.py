"""Incremental (greedy-with-replacement) dependency resolver.

Starting from the requested packages, the resolver walks dependency
edges outward. For every edge it keeps the package already chosen for
that name if it fits, otherwise it picks a candidate from the installed
packages or, failing that, from the repositories. A later, stricter
requirement may *replace* an earlier choice; when the earlier requirement
is not met by the replacement, a version-conflict issue is recorded.

The resolver is best-effort: it never raises for unsatisfiable or
conflicting requirements and records them as diagnostics instead. It does
not backtrack, so a replacement is only checked against the requirement
that selected the replaced package. ``TreeSolver`` is the strict
alternative.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Sequence

from pkgsolver.core.dependency.analyzer import DependencyIssue, DependencyIssueType
from pkgsolver.core.package import (
    CpuArchitecture,
    PackageDef,
    PackageDependency,
    PackageSpecifier,
    plugins_compatible,
)
from pkgsolver.core.version import VersionSpecifier
from pkgsolver.repository.base import PackageRepository
from pkgsolver.repository.helpers import query_repositories

logger = logging.getLogger(__name__)


class PackageOrigin(enum.Enum):
    """Where a resolved package comes from."""

    REQUESTED = "requested"
    INSTALLED = "installed"
    REPOSITORY = "repository"


@dataclass(frozen=True)
class DependencyTreeNode:
    """Resolution record for one package name.

    Attributes:
        package: The chosen package.
        version_requirement: Requirement that selected ``package``.
        parents: Names of the packages requiring it, in discovery order.
        origin: Where ``package`` was found.
    """

    package: PackageDef
    version_requirement: VersionSpecifier
    parents: tuple[str, ...] = ()
    origin: PackageOrigin = PackageOrigin.REPOSITORY

    def with_parent(self, parent: str | None) -> DependencyTreeNode:
        if parent is None or parent in self.parents:
            return self
        return replace(self, parents=self.parents + (parent,))


# ---------------------------------------------------------------------------
# Top-level requirement merging
# ---------------------------------------------------------------------------


def merge_requested_specifiers(
    specifiers: Iterable[PackageSpecifier],
) -> tuple[list[PackageSpecifier], list[DependencyIssue]]:
    """Collapse duplicate top-level requirements on the same package name.

    Two requirements are compatible when one accepts every version the
    other does; the tighter one is kept. Mutually exclusive requirements
    keep the highest-ordered specifier and record an issue for each
    discarded one.

    Returns:
        The merged specifiers (first-seen name order) and the conflicts.
    """
    merged: dict[str, PackageSpecifier] = {}
    issues: list[DependencyIssue] = []
    for spec in specifiers:
        if spec.name is None:
            raise ValueError("Requested package specifiers must name a package")
        current = merged.get(spec.name)
        if current is None:
            merged[spec.name] = spec
            continue
        if current.version.is_satisfied_by(spec.version):
            merged[spec.name] = spec
        elif spec.version.is_satisfied_by(current.version):
            pass
        else:
            keep, drop = (spec, current) if spec.version.compare_to(current.version) > 0 else (current, spec)
            logger.info(
                "Conflicting requirements %s and %s; keeping %s",
                current,
                spec,
                keep,
            )
            issues.append(
                DependencyIssue(spec.name, drop.version, None, DependencyIssueType.INCOMPATIBLE_VERSION)
            )
            merged[spec.name] = keep
    return list(merged.values()), issues


# ---------------------------------------------------------------------------
# DependencyResolver
# ---------------------------------------------------------------------------


class DependencyResolver:
    """Greedy dependency resolution with replacement.

    Resolution runs in the constructor; inspect the result attributes
    afterwards.

    Args:
        installed: Already installed packages, as a list or a name map.
        requested: Packages to resolve. ``PackageDef`` entries are taken as
            chosen; ``PackageSpecifier`` entries are looked up.
        repositories: Repositories in priority order.
        architecture: Host architecture used for requested specifiers.
        os: Host operating system used for requested specifiers.
        cancellation: Optional event; once set, resolution stops and the
            partial result is kept (``cancelled`` becomes True).

    Attributes:
        dependencies: All resolved packages, requested ones included.
        missing_dependencies: Resolved packages that are not installed.
        unknown_dependencies: Requirements no source could satisfy.
        dependency_issues: Version conflicts found along the way.
        cancelled: True if resolution was cut short by cancellation.

    Raises:
        RepositoryUnavailableError: If every repository failed a query.
    """

    def __init__(
        self,
        installed: Iterable[PackageDef] | Mapping[str, PackageDef],
        requested: Iterable[PackageDef | PackageSpecifier],
        repositories: Sequence[PackageRepository] = (),
        *,
        architecture: CpuArchitecture = CpuArchitecture.UNSPECIFIED,
        os: str | None = None,
        cancellation: threading.Event | None = None,
    ) -> None:
        if isinstance(installed, Mapping):
            self.installed_packages = dict(installed)
        else:
            self.installed_packages = {}
            for pkg in installed:
                self.installed_packages.setdefault(pkg.name, pkg)
        self.repositories = list(repositories)
        self.architecture = architecture
        self.os = os
        self._cancellation = cancellation

        self.dependencies: list[PackageDef] = []
        self.missing_dependencies: list[PackageDef] = []
        self.unknown_dependencies: list[PackageDependency] = []
        self.dependency_issues: list[DependencyIssue] = []
        self.cancelled = False

        self._nodes: dict[str, DependencyTreeNode] = {}
        self._unknown_edges: list[tuple[str | None, PackageDependency]] = []
        self._discarded: set[tuple[str, object]] = set()
        self._roots: list[str] = []

        self._resolve(list(requested))
        self._categorize()

    # -- Driver -------------------------------------------------------------

    def _resolve(self, requested: list[PackageDef | PackageSpecifier]) -> None:
        defs = [r for r in requested if isinstance(r, PackageDef)]
        specs, issues = merge_requested_specifiers(r for r in requested if isinstance(r, PackageSpecifier))
        self.dependency_issues.extend(issues)
        self._roots = [pkg.name for pkg in defs] + [spec.name for spec in specs]

        for pkg in defs:
            if pkg.name not in self._nodes:
                self._nodes[pkg.name] = DependencyTreeNode(
                    pkg, VersionSpecifier.from_version(pkg.version), (), PackageOrigin.REQUESTED
                )
        for pkg in defs:
            for dep in pkg.dependencies:
                if self._is_cancelled():
                    return
                self._resolve_dependency(pkg.name, dep, pkg.architecture, pkg.os)

        for spec in specs:
            if self._is_cancelled():
                return
            self._resolve_dependency(
                None,
                PackageDependency(spec.name, spec.version),
                spec.architecture if spec.architecture != CpuArchitecture.UNSPECIFIED else self.architecture,
                spec.os or self.os,
            )

    def _is_cancelled(self) -> bool:
        if self._cancellation is not None and self._cancellation.is_set():
            if not self.cancelled:
                logger.info("Dependency resolution cancelled; returning partial result")
            self.cancelled = True
        return self.cancelled

    def _resolve_dependency(
        self,
        parent: str | None,
        dependency: PackageDependency,
        architecture: CpuArchitecture,
        os: str | None,
    ) -> None:
        name, requirement = dependency.name, dependency.version
        node = self._nodes.get(name)
        if node is not None and self._fits(node.package, requirement, architecture):
            self._nodes[name] = node.with_parent(parent)
            return

        origin = PackageOrigin.INSTALLED
        candidate = self._from_installation(name, requirement, architecture, os)
        if candidate is None:
            origin = PackageOrigin.REPOSITORY
            candidate = self._from_repositories(name, requirement, architecture, os)
            if self._is_cancelled():
                return
        if candidate is None:
            logger.debug("No package satisfies %s (required by %s)", dependency, parent or "request")
            self._unknown_edges.append((parent, dependency))
            if dependency not in self.unknown_dependencies:
                self.unknown_dependencies.append(dependency)
            return

        parents: tuple[str, ...] = (parent,) if parent is not None else ()
        if node is not None:
            if (name, candidate.version) in self._discarded:
                # Swapping back to a previously replaced version would loop.
                self.dependency_issues.append(
                    DependencyIssue(name, requirement, node.package.version, DependencyIssueType.INCOMPATIBLE_VERSION)
                )
                self._nodes[name] = node.with_parent(parent)
                return
            self._discarded.add((name, node.package.version))
            if not node.version_requirement.is_compatible(candidate.version):
                logger.debug(
                    "Replacing %s with %s breaks requirement %s",
                    node.package,
                    candidate,
                    node.version_requirement,
                )
                self.dependency_issues.append(
                    DependencyIssue(
                        name,
                        node.version_requirement,
                        candidate.version,
                        DependencyIssueType.INCOMPATIBLE_VERSION,
                    )
                )
            else:
                logger.debug("Replacing %s with %s", node.package, candidate)
            parents = node.with_parent(parent).parents

        self._nodes[name] = DependencyTreeNode(candidate, requirement, parents, origin)
        for dep in candidate.dependencies:
            if self._is_cancelled():
                return
            self._resolve_dependency(name, dep, architecture, os)

    # -- Candidate lookup ---------------------------------------------------

    @staticmethod
    def _fits(package: PackageDef, requirement: VersionSpecifier, architecture: CpuArchitecture) -> bool:
        return requirement.is_compatible(package.version) and plugins_compatible(package.architecture, architecture)

    def _from_installation(
        self,
        name: str,
        requirement: VersionSpecifier,
        architecture: CpuArchitecture,
        os: str | None,
    ) -> PackageDef | None:
        package = self.installed_packages.get(name)
        if package is None or package.version is None:
            return None
        if self._fits(package, requirement, architecture) and package.is_platform_compatible(os=os):
            return package
        return None

    def _from_repositories(
        self,
        name: str,
        requirement: VersionSpecifier,
        architecture: CpuArchitecture,
        os: str | None,
    ) -> PackageDef | None:
        if not self.repositories:
            return None
        specifier = PackageSpecifier(name, requirement, architecture, os)
        query = query_repositories(
            self.repositories,
            lambda repo: repo.get_packages(specifier, cancellation=self._cancellation),
            self._cancellation,
        )
        candidates = [
            (index, pkg)
            for index, pkg in query.items
            if pkg.version is not None and self._fits(pkg, requirement, architecture)
        ]
        if requirement.minor is not None:
            same_minor = [(i, p) for i, p in candidates if p.version.minor == requirement.minor]
            if same_minor:
                candidates = same_minor
        if not candidates:
            return None
        # Highest version wins; on a tie the higher-priority repository wins.
        best = candidates[0]
        for index, pkg in candidates[1:]:
            if pkg.version > best[1].version or (pkg.version == best[1].version and index < best[0]):
                best = (index, pkg)
        return best[1]

    # -- Results ------------------------------------------------------------

    def _reachable(self) -> set[str]:
        """Names reachable from the requested packages over the chosen packages' edges."""
        visited = {name for name in self._roots if name in self._nodes}
        stack = list(visited)
        while stack:
            node = self._nodes[stack.pop()]
            for dep in node.package.dependencies:
                if dep.name in self._nodes and dep.name not in visited:
                    visited.add(dep.name)
                    stack.append(dep.name)
        return visited

    def _requires(self, parent: str, name: str) -> bool:
        node = self._nodes.get(parent)
        return node is not None and any(dep.name == name for dep in node.package.dependencies)

    def _prune(self) -> None:
        """Drop what only replaced packages pulled in."""
        reachable = self._reachable()
        stale = [name for name in self._nodes if name not in reachable]
        if stale:
            logger.debug("Dropping packages no longer required: %s", ", ".join(stale))
        nodes: dict[str, DependencyTreeNode] = {}
        for name in reachable:
            node = self._nodes[name]
            parents = tuple(p for p in node.parents if p in reachable and self._requires(p, name))
            nodes[name] = replace(node, parents=parents)
        self._nodes = {name: nodes[name] for name in self._nodes if name in nodes}

        self._unknown_edges = [
            (parent, dep)
            for parent, dep in self._unknown_edges
            if parent is None or (parent in reachable and dep in self._nodes[parent].package.dependencies)
        ]
        self.unknown_dependencies = []
        for _, dep in self._unknown_edges:
            if dep not in self.unknown_dependencies:
                self.unknown_dependencies.append(dep)

    def _categorize(self) -> None:
        self._prune()
        self.dependencies = [node.package for node in self._nodes.values()]
        self.missing_dependencies = [
            node.package for node in self._nodes.values() if node.origin == PackageOrigin.REPOSITORY
        ]

    @property
    def nodes(self) -> dict[str, DependencyTreeNode]:
        """Resolution records by package name."""
        return dict(self._nodes)

    def to_dot(self) -> str:
        """Render the resolved dependency tree as Graphviz DOT.

        Unknown dependencies are drawn in red.
        """
        def node_id(text: str) -> str:
            return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'

        def label(name: str) -> str:
            node = self._nodes.get(name)
            if node is None:
                return name
            return f"{name} {node.package.version}" if node.package.version is not None else name

        lines = ["digraph Dependencies {", "  node [shape=box];"]
        for name, node in self._nodes.items():
            lines.append(f"  {node_id(label(name))};")
            for parent in node.parents:
                lines.append(f"  {node_id(label(parent))} -> {node_id(label(name))};")
        for parent, dependency in self._unknown_edges:
            target = node_id(f"{dependency.name} {dependency.version}")
            lines.append(f"  {target} [color=red];")
            if parent is not None:
                lines.append(f"  {node_id(label(parent))} -> {target} [color=red];")
        lines.append("}")
        return "\n".join(lines)
