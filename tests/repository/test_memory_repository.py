"""Tests for the in-memory package repository."""

from __future__ import annotations

import threading

import pytest

from pkgsolver.core.package import (
    CpuArchitecture,
    PackageDef,
    PackageDependency,
    PackageIdentifier,
    PackageSpecifier,
    PackageVersion,
)
from pkgsolver.core.version import SemanticVersion, VersionSpecifier
from pkgsolver.repository import InMemoryRepository, PackageListRepository


def _pkg(name: str, version: str | None = "1.0.0", deps=None, arch=CpuArchitecture.ANY_CPU) -> PackageDef:
    return PackageDef(
        name=name,
        version=SemanticVersion.parse(version) if version else None,
        architecture=arch,
        dependencies=[PackageDependency(n, VersionSpecifier.parse(s)) for n, s in (deps or [])],
    )


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository(
        "memory://test",
        [
            _pkg("Beta", "1.0.0"),
            _pkg("Alpha", "1.0.0"),
            _pkg("Alpha", "2.0.0", deps=[("Core", "^2.0")]),
            _pkg("Alpha", "1.5.0-rc1"),
            _pkg("Alpha", "1.5.0", arch=CpuArchitecture.X64),
            _pkg("Alpha", None),
        ],
    )


class TestInMemoryRepository:
    """Catalog queries on a fixed list of definitions."""

    def test_url_and_repr(self, repo: InMemoryRepository) -> None:
        assert repo.url == "memory://test"
        assert repr(repo) == "InMemoryRepository('memory://test')"

    def test_package_source_defaults_to_url(self, repo: InMemoryRepository) -> None:
        assert {p.package_source for p in repo.all_packages()} == {"memory://test"}

    def test_explicit_package_source_kept(self) -> None:
        pkg = _pkg("A")
        pkg.package_source = "elsewhere"
        assert InMemoryRepository("mem", [pkg]).all_packages()[0].package_source == "elsewhere"

    def test_package_names_sorted(self, repo: InMemoryRepository) -> None:
        assert repo.get_package_names() == ["Alpha", "Beta"]

    def test_versions_newest_first(self, repo: InMemoryRepository) -> None:
        versions = repo.get_package_versions("Alpha")
        assert [str(v.version) for v in versions] == ["2.0.0", "1.5.0", "1.5.0-rc1", "1.0.0"]
        assert all(isinstance(v, PackageVersion) for v in versions)

    def test_versions_of_unknown_package(self, repo: InMemoryRepository) -> None:
        assert repo.get_package_versions("Nope") == []

    def test_get_packages_filters_by_specifier(self, repo: InMemoryRepository) -> None:
        spec = PackageSpecifier("Alpha", VersionSpecifier.parse("^1.0"))
        assert [str(p.version) for p in repo.get_packages(spec)] == ["1.5.0", "1.0.0"]

    def test_get_packages_filters_by_architecture(self, repo: InMemoryRepository) -> None:
        spec = PackageSpecifier("Alpha", VersionSpecifier.parse("^1.0"), CpuArchitecture.X86)
        assert [str(p.version) for p in repo.get_packages(spec)] == ["1.0.0"]

    def test_compatible_with_excludes_conflicting_candidates(self, repo: InMemoryRepository) -> None:
        core = PackageIdentifier("Core", SemanticVersion(1, 0, 0))
        versions = repo.get_package_versions("Alpha", core)
        assert "2.0.0" not in [str(v.version) for v in versions]
        assert "2.0.0" in [str(v.version) for v in repo.get_package_versions("Alpha")]

    def test_cancelled_query_is_empty(self, repo: InMemoryRepository) -> None:
        event = threading.Event()
        event.set()
        assert repo.get_package_names(cancellation=event) == []
        assert repo.get_packages(PackageSpecifier("Alpha"), cancellation=event) == []

    def test_add(self) -> None:
        repo = InMemoryRepository("mem")
        repo.add(_pkg("A"))
        assert repo.get_package_names() == ["A"]
        assert repo.all_packages()[0].package_source == "mem"

    def test_list_repository_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            PackageListRepository()  # type: ignore[abstract]
