"""Concrete, totally ordered semantic versions.

Implements ``SemanticVersion`` following Semantic Versioning 2.0.0
precedence rules: major, minor and patch are compared numerically, a
release sorts above any of its pre-releases, and build metadata is
ignored for ordering and equality.

Supported formats::

    Major.Minor
    Major.Minor.Patch
    Major.Minor.Patch-PreRelease
    Major.Minor.Patch+BuildMetadata
    Major.Minor.Patch-PreRelease+BuildMetadata

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pkgsolver.exceptions import VersionFormatError

if TYPE_CHECKING:
    from pkgsolver.core.version.specifier import VersionMatchBehavior, VersionSpecifier


_SEMVER_RE = re.compile(
    r"(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?"
)

_VALID_LABEL_RE = re.compile(r"[0-9A-Za-z\-.]*")


# ---------------------------------------------------------------------------
# Pre-release precedence
# ---------------------------------------------------------------------------


def compare_pre_release(p1: str | None, p2: str | None) -> int:
    """Compare two pre-release labels by SemVer precedence.

    A missing (or empty) label sorts *above* any present label, because a
    release is newer than every one of its pre-releases. Labels are split
    on ``.``; identifiers that are both integers compare numerically,
    anything else compares ordinally. When one label is a prefix of the
    other, the longer one wins.

    Returns:
        A negative number if ``p1`` precedes ``p2``, zero if they are
        equivalent, a positive number otherwise.
    """
    if p1 == p2:
        return 0
    if not p1 and not p2:
        return 0
    if not p1:
        return 1
    if not p2:
        return -1

    ids1 = p1.split(".")
    ids2 = p2.split(".")
    for id1, id2 in zip(ids1, ids2):
        if id1.isdigit() and id2.isdigit():
            n1, n2 = int(id1), int(id2)
            if n1 != n2:
                return -1 if n1 < n2 else 1
        elif id1 != id2:
            return -1 if id1 < id2 else 1

    if len(ids1) != len(ids2):
        return -1 if len(ids1) < len(ids2) else 1
    return 0


def _pre_release_key(label: str | None) -> tuple[object, ...]:
    if not label:
        return ()
    return tuple(int(part) if part.isdigit() else part for part in label.split("."))


# ---------------------------------------------------------------------------
# SemanticVersion
# ---------------------------------------------------------------------------


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """An immutable semantic version.

    Attributes:
        major: Incrementing signifies a backward incompatible change.
        minor: Incrementing signifies a backward compatible addition.
        patch: Incrementing signifies a backward and forward compatible change.
        pre_release: Optional pre-release label (``beta.2``). Only ASCII
            alphanumerics, ``-`` and ``.`` are allowed.
        build_metadata: Optional build metadata, usually a short commit
            hash. Ignored when determining precedence.
    """

    major: int
    minor: int
    patch: int = 0
    pre_release: str | None = None
    build_metadata: str | None = None

    def __post_init__(self) -> None:
        for attr in ("pre_release", "build_metadata"):
            value = getattr(self, attr)
            if value is None:
                continue
            if not _VALID_LABEL_RE.fullmatch(value):
                raise ValueError(
                    f"Invalid {attr} {value!r}: only ASCII alphanumeric "
                    "characters, hyphen and dot are allowed"
                )
            if value == "":
                object.__setattr__(self, attr, None)

    # -- Parsing ------------------------------------------------------------

    @classmethod
    def try_parse(cls, version: str | None) -> SemanticVersion | None:
        """Parse a version string, returning None if it is not valid SemVer."""
        if version is None:
            return None
        m = _SEMVER_RE.fullmatch(version.strip())
        if not m:
            return None
        return cls(
            int(m.group("major")),
            int(m.group("minor")),
            int(m.group("patch")) if m.group("patch") is not None else 0,
            m.group("pre"),
            m.group("build"),
        )

    @classmethod
    def parse(cls, version: str) -> SemanticVersion:
        """Parse a version string.

        Raises:
            VersionFormatError: If the string is not a valid semantic version.
        """
        result = cls.try_parse(version)
        if result is None:
            raise VersionFormatError(f"Invalid semantic version: {version!r}")
        return result

    # -- Ordering -----------------------------------------------------------

    def compare_to(self, other: SemanticVersion) -> int:
        """Return -1, 0 or 1 as this version precedes, equals or follows ``other``."""
        if not isinstance(other, SemanticVersion):
            raise TypeError(f"Cannot compare SemanticVersion with {type(other).__name__}")
        mine = (self.major, self.minor, self.patch)
        theirs = (other.major, other.minor, other.patch)
        if mine != theirs:
            return -1 if mine < theirs else 1
        cmp = compare_pre_release(self.pre_release, other.pre_release)
        return (cmp > 0) - (cmp < 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare_to(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare_to(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, _pre_release_key(self.pre_release)))

    # -- Formatting ---------------------------------------------------------

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            text += f"-{self.pre_release}"
        if self.build_metadata:
            text += f"+{self.build_metadata}"
        return text

    def to_string(self, field_count: int) -> str:
        """Format only the first ``field_count`` numeric fields (1, 2 or 3)."""
        if field_count == 1:
            return str(self.major)
        if field_count == 2:
            return f"{self.major}.{self.minor}"
        if field_count == 3:
            return f"{self.major}.{self.minor}.{self.patch}"
        raise ValueError(f"field_count must be 1, 2 or 3, got {field_count}")

    # -- Compatibility ------------------------------------------------------

    def is_compatible(self, other: SemanticVersion) -> bool:
        """Return True if ``other`` can replace this version in every respect.

        That is: same major version and a minor version at least as high.
        """
        if other is None:
            raise ValueError("other must not be None")
        return other.major == self.major and other.minor >= self.minor

    def as_exact_specifier(self) -> VersionSpecifier:
        """Return a specifier that matches exactly this version."""
        from pkgsolver.core.version.specifier import VersionMatchBehavior, VersionSpecifier

        return VersionSpecifier.from_version(self, VersionMatchBehavior.EXACT)

    def as_specifier(self, match_behavior: VersionMatchBehavior) -> VersionSpecifier:
        """Return a specifier built from this version with the given match behavior."""
        from pkgsolver.core.version.specifier import VersionSpecifier

        return VersionSpecifier.from_version(self, match_behavior)
