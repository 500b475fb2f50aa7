"""Package repositories and the parallel fan-out used to query several of them."""

from pkgsolver.repository.base import PackageRepository
from pkgsolver.repository.directory import DirectoryRepository
from pkgsolver.repository.helpers import (
    RepositoryQuery,
    get_all_versions_from_all_repos,
    get_package_names_from_all_repos,
    get_packages_from_all_repos,
    query_repositories,
)
from pkgsolver.repository.memory import InMemoryRepository, PackageListRepository

__all__ = [
    "DirectoryRepository",
    "InMemoryRepository",
    "PackageListRepository",
    "PackageRepository",
    "RepositoryQuery",
    "get_all_versions_from_all_repos",
    "get_package_names_from_all_repos",
    "get_packages_from_all_repos",
    "query_repositories",
]
