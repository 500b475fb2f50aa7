"""Dependency analysis and resolution.

- ``analyzer``: broken-package fixed point over a fixed package set.
- ``resolver``: incremental greedy resolver with replacement.
- ``tree_solver``: backtracking solver producing one consistent assignment.
"""

from pkgsolver.core.dependency.analyzer import (
    DependencyAnalyzer,
    DependencyIssue,
    DependencyIssueType,
    check_dependencies,
)
from pkgsolver.core.dependency.resolver import (
    DependencyResolver,
    DependencyTreeNode,
    PackageOrigin,
    merge_requested_specifiers,
)
from pkgsolver.core.dependency.tree_solver import (
    PackageResolver,
    Resolution,
    ResolverHeuristics,
    ResolverTreeNode,
    SearchState,
    TreeSolver,
)

__all__ = [
    "DependencyAnalyzer",
    "DependencyIssue",
    "DependencyIssueType",
    "DependencyResolver",
    "DependencyTreeNode",
    "PackageOrigin",
    "PackageResolver",
    "Resolution",
    "ResolverHeuristics",
    "ResolverTreeNode",
    "SearchState",
    "TreeSolver",
    "check_dependencies",
    "merge_requested_specifiers",
]
