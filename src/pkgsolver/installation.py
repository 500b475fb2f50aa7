"""The set of packages installed in a directory."""

from __future__ import annotations

import logging
from pathlib import Path

from pkgsolver.core.package import PackageDef
from pkgsolver.exceptions import ManifestError
from pkgsolver.manifest import MANIFEST_SUFFIXES, load_package_def

logger = logging.getLogger(__name__)

PACKAGE_DIRECTORY = "Packages"
MANIFEST_STEM = "package"


class Installation:
    """An installation directory holding ``Packages/<name>/package.{yaml,yml,json}`` manifests.

    Args:
        directory: Root of the installation.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def get_packages(self) -> list[PackageDef]:
        """Return the installed packages, one per name, sorted by path.

        Returns an empty list when the installation has no ``Packages``
        folder. Manifests that cannot be loaded are logged and skipped.
        """
        package_dir = self.directory / PACKAGE_DIRECTORY
        if not package_dir.is_dir():
            return []

        packages: list[PackageDef] = []
        seen: set[str] = set()
        for manifest in sorted(package_dir.rglob(f"{MANIFEST_STEM}.*")):
            if not manifest.is_file() or manifest.suffix.lower() not in MANIFEST_SUFFIXES:
                continue
            try:
                package = load_package_def(manifest)
            except ManifestError:
                logger.warning("Skipping unreadable installed package %s", manifest, exc_info=True)
                continue
            if package.name in seen:
                logger.debug("Ignoring duplicate installed package %s at %s", package.name, manifest)
                continue
            seen.add(package.name)
            packages.append(package)
        return packages

    def __repr__(self) -> str:
        return f"Installation({str(self.directory)!r})"
