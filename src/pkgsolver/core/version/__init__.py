"""Version model: concrete semantic versions and partial version specifiers.

``SemanticVersion`` is a totally ordered, immutable version value.
``VersionSpecifier`` is a partial pattern plus a match behavior
(Exact / Compatible, optionally ignoring pre-release labels) with the
compatibility predicate the resolvers are built on.
"""

from pkgsolver.core.version.semver import (
    SemanticVersion,
    compare_pre_release,
)
from pkgsolver.core.version.specifier import (
    VersionMatchBehavior,
    VersionSpecifier,
)

__all__ = [
    "SemanticVersion",
    "VersionMatchBehavior",
    "VersionSpecifier",
    "compare_pre_release",
]
