"""Tests for VersionSpecifier parsing, matching and set relations.

Covers the Exact and Compatible (caret) match modes, the AnyPrerelease
flag, the ``Any`` singleton, the ``is_satisfied_by`` / ``is_superset_of``
relations used to merge requirements, and the specifier ordering.
"""

from __future__ import annotations

import pytest

from pkgsolver.core.version import SemanticVersion, VersionMatchBehavior, VersionSpecifier
from pkgsolver.exceptions import VersionFormatError

EXACT = VersionMatchBehavior.EXACT
COMPATIBLE = VersionMatchBehavior.COMPATIBLE
ANY_PRE = VersionMatchBehavior.ANY_PRERELEASE


def _v(text: str) -> SemanticVersion:
    return SemanticVersion.parse(text)


def _s(text: str) -> VersionSpecifier:
    return VersionSpecifier.parse(text)


class TestParse:
    """Tests for ``VersionSpecifier.parse`` / ``try_parse``."""

    def test_any_literal_case_insensitive(self) -> None:
        assert _s("Any") is VersionSpecifier.ANY
        assert _s("any") is VersionSpecifier.ANY
        assert _s(" ANY ") is VersionSpecifier.ANY

    def test_compatible_prefix(self) -> None:
        spec = _s("^1.2")
        assert spec.match_behavior == COMPATIBLE
        assert (spec.major, spec.minor, spec.patch) == (1, 2, None)

    def test_exact_full(self) -> None:
        spec = _s("1.2.3-beta.1+abc")
        assert spec.match_behavior == EXACT
        assert (spec.major, spec.minor, spec.patch) == (1, 2, 3)
        assert spec.pre_release == "beta.1"
        assert spec.build_metadata == "abc"

    def test_major_only(self) -> None:
        spec = _s("9")
        assert (spec.major, spec.minor, spec.patch) == (9, None, None)

    def test_prerelease_only(self) -> None:
        assert _s("beta") == VersionSpecifier(pre_release="beta")
        assert _s("^rc.1") == VersionSpecifier(pre_release="rc.1", match_behavior=COMPATIBLE)

    @pytest.mark.parametrize("text", ["", "   ", "1.2.3.4", "1..2", "^^1", "1.2.3-", "1.x", None])
    def test_invalid(self, text) -> None:
        assert VersionSpecifier.try_parse(text) is None

    def test_parse_raises(self) -> None:
        with pytest.raises(VersionFormatError):
            VersionSpecifier.parse("1.2.3.4")

    def test_skipped_level_rejected(self) -> None:
        with pytest.raises(ValueError):
            VersionSpecifier(None, 1)
        with pytest.raises(ValueError):
            VersionSpecifier(1, None, 3)


class TestFormatting:
    """Tests for ``str()`` and ``to_string``."""

    @pytest.mark.parametrize("text", ["Any", "^1.2", "1.2.3-beta+abc", "^9.0.0-alpha.1", "7", "beta", "^rc"])
    def test_round_trip(self, text: str) -> None:
        assert str(_s(text)) == text

    def test_str_compatible_without_fields(self) -> None:
        spec = VersionSpecifier(match_behavior=COMPATIBLE)
        assert str(spec) == "^"

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(1, "^1"), (2, "^1.2"), (3, "^1.2.3"), (4, "^1.2.3-rc"), (5, "^1.2.3-rc+meta")],
    )
    def test_to_string_field_count(self, count: int, expected: str) -> None:
        assert _s("^1.2.3-rc+meta").to_string(count) == expected

    def test_to_string_invalid_count(self) -> None:
        with pytest.raises(ValueError):
            _s("1.2").to_string(0)


class TestAny:
    """Tests for the ``Any`` singleton."""

    @pytest.mark.parametrize("version", ["0.0.1", "1.2.3-alpha", "99.0.0+meta"])
    def test_any_matches_everything(self, version: str) -> None:
        assert VersionSpecifier.ANY.is_compatible(_v(version))

    def test_any_matches_none(self) -> None:
        assert VersionSpecifier.ANY.is_compatible(None)

    def test_any_structure(self) -> None:
        assert VersionSpecifier.ANY.is_any
        assert VersionSpecifier.ANY.match_behavior == COMPATIBLE | ANY_PRE
        assert not _s("^").is_any


class TestCompatibleMode:
    """Tests for caret (Compatible) matching."""

    @pytest.mark.parametrize(
        ("spec", "version", "expected"),
        [
            ("^9.0.0-alpha.1", "9.0.0-alpha.1", True),
            ("^9.0.0-alpha", "9.0.0-alpha.1", True),
            ("^9.0.0-alpha.2", "9.0.0-alpha.7", True),
            ("^9.0.1200-alpha.1.2", "9.0.1200-alpha.1.7", True),
            ("^9.0.0-alpha.1", "9.1.0-alpha.1", True),
            ("^9.0.0-alpha+test", "9.0.0-alpha+test", True),
            ("^9.0.0-alpha+test.5", "9.0.0-alpha+test.2", True),
            ("^9.0.0-beta", "9.0.0-alpha", False),
            ("^9.0.0-alpha.2", "9.0.0-alpha.1", False),
            ("^9.0.0-alpha.1", "9.0.0-alpha", False),
            ("^9.0.1200-alpha.1.7", "9.0.1200-alpha.1.2", False),
            ("^9.1.0-alpha.1", "9.0.0-alpha.1", False),
        ],
    )
    def test_prerelease_vectors(self, spec: str, version: str, expected: bool) -> None:
        assert _s(spec).is_compatible(_v(version)) is expected

    def test_minor_is_a_floor(self) -> None:
        spec = _s("^1.2")
        assert spec.is_compatible(_v("1.2.0"))
        assert spec.is_compatible(_v("1.7.0"))
        assert not spec.is_compatible(_v("1.1.9"))
        assert not spec.is_compatible(_v("2.0.0"))

    def test_patch_floor_applies_for_equal_minor(self) -> None:
        spec = _s("^1.2.3")
        assert not spec.is_compatible(_v("1.2.2"))
        assert spec.is_compatible(_v("1.2.3"))
        assert spec.is_compatible(_v("1.3.0"))

    def test_release_spec_rejects_prerelease(self) -> None:
        """``^1.0`` must not pick up ``1.2.0-rc1``."""
        assert not _s("^1.0").is_compatible(_v("1.2.0-rc1"))

    def test_any_prerelease_flag(self) -> None:
        spec = VersionSpecifier(1, 0, None, match_behavior=COMPATIBLE | ANY_PRE)
        assert spec.is_compatible(_v("1.2.0-rc1"))

    def test_none_actual(self) -> None:
        """A missing version only fits specifiers with no constraint."""
        assert VersionSpecifier(match_behavior=COMPATIBLE).is_compatible(None)
        assert not _s("^1.0").is_compatible(None)
        assert not _s("1.0").is_compatible(None)
        assert not VersionSpecifier().is_compatible(None)


class TestExactMode:
    """Tests for Exact matching."""

    @pytest.mark.parametrize(
        ("spec", "version", "expected"),
        [
            ("9.0.0-alpha", "9.0.0-alpha", True),
            ("9.0.0-alpha.1", "9.0.0-alpha.1", True),
            ("1.2.3+Build-something", "1.2.3+Build-something", True),
            ("9.0.0-beta", "9.1.0-beta", False),
            ("9.0.0-beta", "9.0.0-alpha", False),
            ("1.2.3+Build-something", "1.2.3+Build-something-else", False),
        ],
    )
    def test_exact_vectors(self, spec: str, version: str, expected: bool) -> None:
        assert _s(spec).is_compatible(_v(version)) is expected

    def test_partial_exact(self) -> None:
        spec = _s("1.2")
        assert spec.is_compatible(_v("1.2.0"))
        assert spec.is_compatible(_v("1.2.9"))
        assert not spec.is_compatible(_v("1.3.0"))

    def test_exact_prerelease_must_match(self) -> None:
        assert not _s("1.2").is_compatible(_v("1.2.0-beta"))
        assert not _s("1.2.0-beta").is_compatible(_v("1.2.0-beta.2"))

    def test_exact_any_prerelease(self) -> None:
        spec = VersionSpecifier(1, 2, None, match_behavior=EXACT | ANY_PRE)
        assert spec.is_compatible(_v("1.2.0-beta"))
        assert spec.is_compatible(_v("1.2.5"))


class TestSetRelations:
    """Tests for ``is_satisfied_by`` and ``is_superset_of``."""

    @pytest.mark.parametrize(
        ("wide", "narrow"),
        [
            ("^1.2", "^1.2.3"),
            ("^1.2", "^1.5"),
            ("^1.2", "1.4.0"),
            ("^1.2", "1.2"),
            ("1", "1.2"),
            ("1", "^1.2"),
            ("1.2", "1.2.3"),
            ("^1.0.0-beta", "^1.0"),
        ],
    )
    def test_wide_is_satisfied_by_narrow(self, wide: str, narrow: str) -> None:
        assert _s(wide).is_satisfied_by(_s(narrow))
        assert not _s(narrow).is_satisfied_by(_s(wide))

    @pytest.mark.parametrize(
        ("a", "b"),
        [("1.0", "2.0"), ("^1.0", "^2.0"), ("^1.2", "1.1"), ("1.2.3", "1.2.4"), ("1.0.0", "1.0.0-beta")],
    )
    def test_mutually_exclusive(self, a: str, b: str) -> None:
        assert not _s(a).is_satisfied_by(_s(b))
        assert not _s(b).is_satisfied_by(_s(a))

    def test_any_relations(self) -> None:
        assert VersionSpecifier.ANY.is_satisfied_by(_s("^1.2"))
        assert not _s("^1.2").is_satisfied_by(VersionSpecifier.ANY)
        assert VersionSpecifier.ANY.is_satisfied_by(VersionSpecifier.ANY)

    def test_reflexive(self) -> None:
        for text in ["^1.2", "1.2.3", "2", "^1.0.0-rc"]:
            spec = _s(text)
            assert spec.is_satisfied_by(spec)
            assert not spec.is_superset_of(spec)

    def test_superset_is_strict(self) -> None:
        assert _s("^1.2").is_superset_of(_s("^1.2.3"))
        assert not _s("^1.2.3").is_superset_of(_s("^1.2"))
        assert VersionSpecifier.ANY.is_superset_of(_s("1.0"))


class TestOrdering:
    """Tests for ``compare_to``."""

    def test_numeric_order(self) -> None:
        assert _s("2.0").compare_to(_s("1.9")) == 1
        assert _s("1.2").compare_to(_s("1.10")) == -1

    def test_set_field_beats_unset(self) -> None:
        assert _s("1.2.3").compare_to(_s("1.2")) == 1
        assert _s("1").compare_to(_s("1.0")) == -1
        assert VersionSpecifier.ANY.compare_to(_s("0")) == -1

    def test_prerelease_breaks_ties(self) -> None:
        assert _s("1.0.0").compare_to(_s("1.0.0-rc")) == 1
        assert _s("^1.0").compare_to(_s("1.0")) == 0

    def test_equality_ignores_build_metadata(self) -> None:
        assert _s("1.2.3+a") == _s("1.2.3+b")
        assert hash(_s("1.2.3+a")) == hash(_s("1.2.3+b"))
