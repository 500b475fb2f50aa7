"""Partial version patterns and their compatibility predicates.

A ``VersionSpecifier`` describes a *range* of acceptable versions, as
opposed to the concrete ``SemanticVersion`` of a package. It carries a
partial version (any trailing fields may be unset) plus a match behavior:

- **Exact** (``1.2``): every set field must equal the actual version's
  field; the pre-release label must match exactly.
- **Compatible** (``^1.2``): caret semantics. The major version must be
  equal, the minor version is a *floor* (``^1.2`` accepts ``1.7.0``), and
  the patch version is a floor when the minor versions are equal. The
  specifier's pre-release label must not be newer than the actual one, so
  ``^1.0`` does not accept ``1.3.0-beta``.
- **AnyPrerelease** flag: pre-release labels are ignored.

Grammar accepted by ``VersionSpecifier.parse``::

    Any
    [^]major[.minor[.patch]][-prerelease][+buildmetadata]
    [^]prerelease

Besides ``is_compatible`` (does a concrete version fit?), specifiers
support two set relations used when merging requirements on the same
package: ``is_satisfied_by`` (is every version accepted by *other* also
accepted by *self*?) and its strict form ``is_superset_of``.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import ClassVar

from pkgsolver.core.version.semver import SemanticVersion, compare_pre_release
from pkgsolver.exceptions import VersionFormatError


class VersionMatchBehavior(enum.Flag):
    """How a ``VersionSpecifier`` is matched against a version."""

    EXACT = 1
    COMPATIBLE = 2
    ANY_PRERELEASE = 4


_SPECIFIER_RE = re.compile(
    r"(?P<compatible>\^)?"
    r"(?:(?P<major>\d+)(?:\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?)?)?"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?"
)

# A bare pre-release label such as "beta" or "^rc.1".
_PRERELEASE_ONLY_RE = re.compile(r"(?P<compatible>\^)?(?P<pre>[A-Za-z\-][0-9A-Za-z\-.]*)")


def _sign(a: int, b: int) -> int:
    return (a > b) - (a < b)


def _compare_optional(a: int | None, b: int | None) -> int:
    """A set field ranks above an unset one; set fields compare numerically."""
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    return _sign(a, b)


@dataclass(frozen=True)
class VersionSpecifier:
    """A partial version plus a match behavior.

    Unset fields are treated as "any". A specifier cannot skip a level:
    ``minor`` requires ``major`` and ``patch`` requires ``minor``.

    ``build_metadata`` takes part in exact matching but not in equality,
    mirroring ``SemanticVersion``.

    Attributes:
        major: Required major version, or None.
        minor: Required (Exact) or minimum (Compatible) minor version.
        patch: Required (Exact) or minimum (Compatible) patch version.
        pre_release: Pre-release label, or None for releases.
        build_metadata: Build metadata, only checked in Exact mode.
        match_behavior: Flags selecting Exact/Compatible and AnyPrerelease.
    """

    ANY: ClassVar[VersionSpecifier]

    major: int | None = None
    minor: int | None = None
    patch: int | None = None
    pre_release: str | None = None
    build_metadata: str | None = field(default=None, compare=False)
    match_behavior: VersionMatchBehavior = VersionMatchBehavior.EXACT

    def __post_init__(self) -> None:
        if self.major is None and self.minor is not None:
            raise ValueError("A version specifier with a minor version must also set major")
        if self.minor is None and self.patch is not None:
            raise ValueError("A version specifier with a patch version must also set minor")
        if self.pre_release == "":
            object.__setattr__(self, "pre_release", None)
        if self.build_metadata == "":
            object.__setattr__(self, "build_metadata", None)

    @classmethod
    def from_version(
        cls,
        version: SemanticVersion | None,
        match_behavior: VersionMatchBehavior = VersionMatchBehavior.EXACT,
    ) -> VersionSpecifier:
        """Build a specifier pinning every field of ``version``."""
        if version is None:
            return cls(match_behavior=match_behavior)
        return cls(
            version.major,
            version.minor,
            version.patch,
            version.pre_release,
            version.build_metadata,
            match_behavior,
        )

    # -- Parsing ------------------------------------------------------------

    @classmethod
    def try_parse(cls, text: str | None) -> VersionSpecifier | None:
        """Parse a specifier string, returning None when it is malformed."""
        if text is None:
            return None
        text = text.strip()
        if not text:
            return None
        if text.lower() == "any":
            return cls.ANY

        m = _SPECIFIER_RE.fullmatch(text)
        if m is None:
            m = _PRERELEASE_ONLY_RE.fullmatch(text)
            if m is None:
                return None
            behavior = (
                VersionMatchBehavior.COMPATIBLE if m.group("compatible") else VersionMatchBehavior.EXACT
            )
            return cls(pre_release=m.group("pre"), match_behavior=behavior)

        def _int(name: str) -> int | None:
            value = m.group(name)
            return int(value) if value is not None else None

        behavior = VersionMatchBehavior.COMPATIBLE if m.group("compatible") else VersionMatchBehavior.EXACT
        return cls(
            _int("major"),
            _int("minor"),
            _int("patch"),
            m.group("pre"),
            m.group("build"),
            behavior,
        )

    @classmethod
    def parse(cls, text: str) -> VersionSpecifier:
        """Parse a specifier string.

        Raises:
            VersionFormatError: If ``text`` is not a valid version specifier.
        """
        result = cls.try_parse(text)
        if result is None:
            raise VersionFormatError(f"The string {text!r} is not a valid version specifier")
        return result

    # -- Formatting ---------------------------------------------------------

    def __str__(self) -> str:
        return self.to_string(5)

    def to_string(self, field_count: int = 5) -> str:
        """Format the specifier so that ``parse`` reads it back.

        Args:
            field_count: How many fields to include: 1 (major), 2 (minor),
                3 (patch), 4 (pre-release) or 5 (build metadata).
        """
        if not 1 <= field_count <= 5:
            raise ValueError(f"field_count must be between 1 and 5, got {field_count}")
        if self.is_any:
            return "Any"

        text = "^" if self.is_compatible_mode else ""
        if self.major is not None:
            text += str(self.major)
        if self.minor is not None and field_count >= 2:
            text += f".{self.minor}"
        if self.patch is not None and field_count >= 3:
            text += f".{self.patch}"
        if self.pre_release and field_count >= 4:
            text += f"-{self.pre_release}" if self.major is not None else self.pre_release
        if self.build_metadata and field_count == 5:
            text += f"+{self.build_metadata}"
        return text

    # -- Properties ---------------------------------------------------------

    @property
    def is_any(self) -> bool:
        """True if this specifier matches every version."""
        return self == VersionSpecifier.ANY

    @property
    def is_compatible_mode(self) -> bool:
        return VersionMatchBehavior.COMPATIBLE in self.match_behavior

    @property
    def is_exact_mode(self) -> bool:
        return VersionMatchBehavior.COMPATIBLE not in self.match_behavior

    @property
    def any_pre_release(self) -> bool:
        return VersionMatchBehavior.ANY_PRERELEASE in self.match_behavior

    @property
    def is_pinned(self) -> bool:
        """True for an Exact specifier naming a single major.minor.patch[-pre]."""
        return (
            self.is_exact_mode
            and not self.any_pre_release
            and self.major is not None
            and self.minor is not None
            and self.patch is not None
        )

    # -- Compatibility ------------------------------------------------------

    def is_compatible(self, actual: SemanticVersion | None) -> bool:
        """Return True if ``actual`` fulfils this specifier.

        A None ``actual`` stands for "not installed": it is accepted by
        ``Any`` and by a Compatible specifier with no fields set, never by
        an Exact specifier.
        """
        if self.is_any:
            return True
        if actual is None:
            return self.is_compatible_mode and self.major is None and self.pre_release is None
        if self.is_compatible_mode:
            return self._match_compatible(actual)
        return self._match_exact(actual)

    def _match_exact(self, actual: SemanticVersion) -> bool:
        if self.major is not None and self.major != actual.major:
            return False
        if self.minor is not None and self.minor != actual.minor:
            return False
        if self.patch is not None and self.patch != actual.patch:
            return False
        if not self.any_pre_release and self.pre_release != actual.pre_release:
            return False
        if self.build_metadata and self.build_metadata != actual.build_metadata:
            return False
        return True

    def _match_compatible(self, actual: SemanticVersion) -> bool:
        if self.major is not None and self.major != actual.major:
            return False
        if self.minor is not None:
            if self.minor > actual.minor:
                return False
            if self.minor == actual.minor and self.patch is not None and self.patch > actual.patch:
                return False
        if self.any_pre_release:
            return True
        return compare_pre_release(self.pre_release, actual.pre_release) <= 0

    # -- Set relations ------------------------------------------------------

    def is_satisfied_by(self, other: VersionSpecifier) -> bool:
        """Return True if every version accepted by ``other`` is accepted by this.

        Used to merge two requirements on the same package: when
        ``a.is_satisfied_by(b)`` holds, ``b`` is at least as tight as ``a``
        and can stand in for both. When neither direction holds, the two
        requirements are treated as mutually exclusive.
        """
        if self.is_any:
            return True
        if other.is_any:
            return False
        if other.is_pinned:
            return self.is_compatible(
                SemanticVersion(
                    other.major,  # type: ignore[arg-type]
                    other.minor,  # type: ignore[arg-type]
                    other.patch,  # type: ignore[arg-type]
                    other.pre_release,
                    other.build_metadata,
                )
            )

        if self.is_exact_mode:
            return self._exact_covers(other)
        return self._compatible_covers(other)

    def _exact_covers(self, other: VersionSpecifier) -> bool:
        # Every field pinned here must be pinned to the same value by other.
        if self.major is not None and other.major != self.major:
            return False
        if self.minor is not None and (other.is_compatible_mode or other.minor != self.minor):
            return False
        if self.patch is not None and (other.is_compatible_mode or other.patch != self.patch):
            return False
        if self.build_metadata and other.build_metadata != self.build_metadata:
            return False
        if self.any_pre_release:
            return True
        if other.any_pre_release:
            return False
        if other.is_exact_mode:
            return other.pre_release == self.pre_release
        # A Compatible specifier without a label only admits releases.
        return other.pre_release is None and self.pre_release is None

    def _compatible_covers(self, other: VersionSpecifier) -> bool:
        if self.major is not None and other.major != self.major:
            return False
        # The lowest minor.patch other accepts must reach this floor.
        if self.minor is not None:
            lowest = (other.minor or 0, other.patch or 0)
            if lowest < (self.minor, self.patch or 0):
                return False
        if self.any_pre_release:
            return True
        if other.any_pre_release:
            return False
        return compare_pre_release(self.pre_release, other.pre_release) <= 0

    def is_superset_of(self, other: VersionSpecifier) -> bool:
        """Strict form of ``is_satisfied_by``: the two specifiers must also differ."""
        return self != other and self.is_satisfied_by(other)

    # -- Ordering -----------------------------------------------------------

    def compare_to(self, other: VersionSpecifier) -> int:
        """Order specifiers by the version they name, set fields ranking above unset ones."""
        for mine, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            cmp = _compare_optional(mine, theirs)
            if cmp:
                return cmp
        cmp = compare_pre_release(self.pre_release, other.pre_release)
        return (cmp > 0) - (cmp < 0)


VersionSpecifier.ANY = VersionSpecifier(
    match_behavior=VersionMatchBehavior.COMPATIBLE | VersionMatchBehavior.ANY_PRERELEASE
)
