"""Parallel fan-out of catalog queries across repositories.

Each repository is queried on its own worker thread. Failures are
collected instead of aborting the batch: a repository that cannot answer
is logged and skipped, and only when *every* repository failed is a
``RepositoryUnavailableError`` raised.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Sequence, TypeVar

from pkgsolver.core.package import PackageDef, PackageIdentifier, PackageSpecifier, PackageVersion
from pkgsolver.exceptions import RepositoryFailure, RepositoryUnavailableError
from pkgsolver.repository.base import PackageRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RepositoryQuery(Generic[T]):
    """Combined answer of a query sent to several repositories.

    Attributes:
        items: ``(repository_index, item)`` pairs, ordered by repository
            priority and then by each repository's own ordering.
        failures: Repositories that raised, in priority order.
        cancelled: True if the cancellation event was set.
    """

    items: list[tuple[int, T]] = field(default_factory=list)
    failures: list[RepositoryFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def values(self) -> list[T]:
        return [item for _, item in self.items]


def query_repositories(
    repositories: Sequence[PackageRepository],
    call: Callable[[PackageRepository], Iterable[T]],
    cancellation: threading.Event | None = None,
) -> RepositoryQuery[T]:
    """Run ``call`` against every repository concurrently and merge the answers.

    Args:
        repositories: Repositories in priority order (index 0 first).
        call: Query to run; receives one repository, returns its items.
        cancellation: Optional event; if set before the fan-out starts,
            nothing is queried and an empty, cancelled result is returned.

    Returns:
        The merged ``RepositoryQuery``.

    Raises:
        RepositoryUnavailableError: If every repository raised.
    """
    repositories = list(repositories)
    query: RepositoryQuery[T] = RepositoryQuery()
    if not repositories:
        return query
    if cancellation is not None and cancellation.is_set():
        query.cancelled = True
        return query

    collected: dict[int, list[T]] = {}
    failed: dict[int, RepositoryFailure] = {}
    with ThreadPoolExecutor(max_workers=len(repositories)) as ex:
        future_map = {ex.submit(call, repo): (index, repo) for index, repo in enumerate(repositories)}
        for fut in as_completed(future_map):
            index, repo = future_map[fut]
            try:
                collected[index] = list(fut.result())
            except Exception as exc:
                logger.warning("Failed to query package repository %s", repo.url, exc_info=True)
                failed[index] = RepositoryFailure(repo.url, exc)

    for index in sorted(collected):
        query.items.extend((index, item) for item in collected[index])
    query.failures = [failed[index] for index in sorted(failed)]

    if len(failed) == len(repositories):
        raise RepositoryUnavailableError(query.failures)
    if cancellation is not None and cancellation.is_set():
        query.cancelled = True
    return query


def get_packages_from_all_repos(
    repositories: Sequence[PackageRepository],
    specifier: PackageSpecifier,
    *compatible_with: PackageIdentifier,
    cancellation: threading.Event | None = None,
) -> list[PackageDef]:
    """Return the packages matching ``specifier`` from every repository, in priority order."""
    query = query_repositories(
        repositories,
        lambda repo: repo.get_packages(specifier, *compatible_with, cancellation=cancellation),
        cancellation,
    )
    return query.values


def get_all_versions_from_all_repos(
    repositories: Sequence[PackageRepository],
    name: str,
    *compatible_with: PackageIdentifier,
    cancellation: threading.Event | None = None,
) -> list[PackageVersion]:
    """Return the distinct versions of ``name`` across repositories, newest first."""
    query = query_repositories(
        repositories,
        lambda repo: repo.get_package_versions(name, *compatible_with, cancellation=cancellation),
        cancellation,
    )
    versions: list[PackageVersion] = []
    for version in query.values:
        if version not in versions:
            versions.append(version)
    versions.sort(key=lambda v: v.version, reverse=True)
    return versions


def get_package_names_from_all_repos(
    repositories: Sequence[PackageRepository],
    *compatible_with: PackageIdentifier,
    cancellation: threading.Event | None = None,
) -> list[str]:
    """Return the sorted, distinct package names offered by any repository."""
    query = query_repositories(
        repositories,
        lambda repo: repo.get_package_names(*compatible_with, cancellation=cancellation),
        cancellation,
    )
    return sorted(set(query.values))
