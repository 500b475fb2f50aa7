"""Repository backed by a directory of manifest files."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pkgsolver.core.package import PackageDef
from pkgsolver.exceptions import ManifestError
from pkgsolver.manifest import MANIFEST_SUFFIXES, load_package_def
from pkgsolver.repository.memory import PackageListRepository

logger = logging.getLogger(__name__)


class DirectoryRepository(PackageListRepository):
    """Catalog made of every ``*.yaml``, ``*.yml`` and ``*.json`` manifest under a directory.

    The directory is scanned recursively on first use and the parsed
    definitions are cached; call ``reset`` to rescan. Manifests that fail
    to load are logged and skipped.

    Args:
        path: Root directory of the repository.

    Raises:
        FileNotFoundError: On the first query, if ``path`` is not a directory.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._cache: list[PackageDef] | None = None
        self._cache_lock = threading.Lock()

    @property
    def url(self) -> str:
        return str(self._path)

    def reset(self) -> None:
        with self._cache_lock:
            self._cache = None

    def all_packages(self) -> list[PackageDef]:
        with self._cache_lock:
            if self._cache is None:
                self._cache = self._scan()
            return list(self._cache)

    def _scan(self) -> list[PackageDef]:
        if not self._path.is_dir():
            raise FileNotFoundError(f"Package repository directory not found: {self._path}")

        packages: list[PackageDef] = []
        for manifest in sorted(self._path.rglob("*")):
            if not manifest.is_file() or manifest.suffix.lower() not in MANIFEST_SUFFIXES:
                continue
            try:
                packages.append(load_package_def(manifest))
            except ManifestError:
                logger.warning("Skipping invalid package manifest %s", manifest, exc_info=True)
        logger.debug("Loaded %d package(s) from %s", len(packages), self._path)
        return packages
