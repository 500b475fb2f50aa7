"""Package identity, queries and definitions.

- ``PackageIdentifier``: a concrete package build (name, version,
  architecture, OS). Hashable and compared structurally.
- ``PackageVersion``: an identifier plus catalog metadata, as listed by a
  repository.
- ``PackageSpecifier``: a *query* over packages. The name may be None
  (any package) and the version is a ``VersionSpecifier`` range.
- ``PackageDependency``: a named edge with a version requirement.
- ``PackageDef``: the full definition of a candidate package, including
  its dependency edges.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field

from pkgsolver.core.package.platform import (
    CpuArchitecture,
    architecture_compatible_with,
    os_compatible,
)
from pkgsolver.core.version import SemanticVersion, VersionMatchBehavior, VersionSpecifier


def _format_identity(name: str | None, version: object, architecture: CpuArchitecture, os: str | None) -> str:
    text = f"{name}" if version is None else f"{name} {version}"
    extras = []
    if architecture not in (CpuArchitecture.ANY_CPU, CpuArchitecture.UNSPECIFIED):
        extras.append(str(architecture))
    if os:
        extras.append(os)
    if extras:
        text += f" ({', '.join(extras)})"
    return text


# ---------------------------------------------------------------------------
# PackageIdentifier / PackageVersion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageIdentifier:
    """Identity of a concrete package build.

    Attributes:
        name: Package name.
        version: Package version; None for a package whose version is
            unknown (e.g. a placeholder for a missing dependency).
        architecture: CPU architecture the package is built for.
        os: Comma-separated list of supported operating systems, or None.
    """

    name: str
    version: SemanticVersion | None = None
    architecture: CpuArchitecture = CpuArchitecture.ANY_CPU
    os: str | None = None

    def is_platform_compatible(
        self,
        architecture: CpuArchitecture = CpuArchitecture.UNSPECIFIED,
        os: str | None = None,
    ) -> bool:
        """Return True if this build can be used on the given host."""
        return architecture_compatible_with(architecture, self.architecture) and os_compatible(os, self.os)

    def __str__(self) -> str:
        return _format_identity(self.name, self.version, self.architecture, self.os)


@dataclass(frozen=True)
class PackageVersion(PackageIdentifier):
    """A package version as listed in a repository catalog.

    Attributes:
        date: Publication date, if known. Not part of equality.
        licenses: License identifiers required by the package.
    """

    date: datetime.datetime | None = field(default=None, compare=False)
    licenses: tuple[str, ...] = field(default=(), compare=False)


# ---------------------------------------------------------------------------
# PackageSpecifier
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageSpecifier:
    """A query describing acceptable packages.

    Attributes:
        name: Package name, or None to match any package (catalog listing).
        version: Acceptable version range.
        architecture: Host architecture the package must run on.
        os: Host operating system(s) the package must support.
    """

    name: str | None = None
    version: VersionSpecifier = VersionSpecifier.ANY
    architecture: CpuArchitecture = CpuArchitecture.UNSPECIFIED
    os: str | None = None

    def __post_init__(self) -> None:
        if self.version is None:
            object.__setattr__(self, "version", VersionSpecifier.ANY)

    @classmethod
    def from_identifier(
        cls,
        package: PackageIdentifier | PackageDef,
        match_behavior: VersionMatchBehavior = VersionMatchBehavior.EXACT,
    ) -> PackageSpecifier:
        """Build a specifier that selects ``package`` (or, in Compatible mode, newer builds)."""
        return cls(
            package.name,
            VersionSpecifier.from_version(package.version, match_behavior),
            package.architecture,
            package.os,
        )

    def matches(self, package: PackageIdentifier | PackageDef) -> bool:
        """Return True if ``package`` fulfils every part of this query."""
        if self.name is not None and package.name != self.name:
            return False
        if not self.version.is_compatible(package.version):
            return False
        return architecture_compatible_with(self.architecture, package.architecture) and os_compatible(
            self.os, package.os
        )

    def __str__(self) -> str:
        text = self.name or "*"
        if not self.version.is_any:
            text += f":{self.version}"
        return text


# ---------------------------------------------------------------------------
# PackageDependency / PackageDef
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageDependency:
    """A dependency edge: the named package must satisfy ``version``."""

    name: str
    version: VersionSpecifier = VersionSpecifier.ANY

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("A package dependency must have a name")
        if self.version is None:
            raise ValueError(f"Dependency on {self.name!r} must have a version specifier")

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"


@dataclass(eq=False)
class PackageDef:
    """Full definition of a package.

    Instances compare and hash by identity: two definitions loaded from
    different sources are different candidates even when their identity
    fields coincide. Use ``identifier`` for structural comparison.

    Attributes:
        name: Package name.
        version: Package version, or None when unknown.
        architecture: CPU architecture the package is built for.
        os: Comma-separated list of supported operating systems.
        dependencies: Packages this package requires.
        description: Free-text description.
        package_source: Where the definition was loaded from (repository
            URL or manifest path), if known.
    """

    name: str
    version: SemanticVersion | None = None
    architecture: CpuArchitecture = CpuArchitecture.ANY_CPU
    os: str | None = None
    dependencies: list[PackageDependency] = field(default_factory=list)
    description: str = ""
    package_source: str | None = None

    @property
    def identifier(self) -> PackageIdentifier:
        return PackageIdentifier(self.name, self.version, self.architecture, self.os)

    def is_platform_compatible(
        self,
        architecture: CpuArchitecture = CpuArchitecture.UNSPECIFIED,
        os: str | None = None,
    ) -> bool:
        """Return True if this package can be used on the given host."""
        return self.identifier.is_platform_compatible(architecture, os)

    def __str__(self) -> str:
        return _format_identity(self.name, self.version, self.architecture, self.os)

    def __repr__(self) -> str:
        return f"PackageDef({self.name!r}, {str(self.version) if self.version else None!r})"
