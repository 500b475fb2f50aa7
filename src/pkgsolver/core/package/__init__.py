"""Package identity: identifiers, queries, definitions and platform rules."""

from pkgsolver.core.package.models import (
    PackageDef,
    PackageDependency,
    PackageIdentifier,
    PackageSpecifier,
    PackageVersion,
)
from pkgsolver.core.package.platform import (
    CpuArchitecture,
    architecture_compatible_with,
    os_compatible,
    plugins_compatible,
    split_os_list,
)

__all__ = [
    "CpuArchitecture",
    "PackageDef",
    "PackageDependency",
    "PackageIdentifier",
    "PackageSpecifier",
    "PackageVersion",
    "architecture_compatible_with",
    "os_compatible",
    "plugins_compatible",
    "split_os_list",
]
