"""Tests for the semantic version model.

Coverage:
* Parsing of valid and malformed strings, ASCII digits only.
* Rendering with and without metadata.
* Numeric, field-by-field ordering with metadata ignored.
"""

from __future__ import annotations

import pytest

from venv_wrap.core.semver import Ordering, SemanticVersion, compare
from venv_wrap.exceptions import InvalidVersionError, VenvWrapError


def _v(text: str) -> SemanticVersion:
    return SemanticVersion.parse(text)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParse:
    def test_plain_triple(self) -> None:
        version = _v("1.2.3")
        assert (version.major, version.minor, version.patch) == (1, 2, 3)
        assert version.metadata is None

    def test_metadata_is_kept(self) -> None:
        version = _v("1.0.0+build.5")
        assert version.metadata == "build.5"

    def test_surrounding_whitespace_is_ignored(self) -> None:
        assert _v("  2.0.1\n") == SemanticVersion(2, 0, 1)

    def test_large_components(self) -> None:
        assert _v("10.200.3000").precedence == (10, 200, 3000)

    @pytest.mark.parametrize(
        "text",
        ["", "1", "1.2", "1.2.3.4", "a.b.c", "1.2.x", "v1.2.3", "1.2.3-rc1", "1.2.3+", "-1.0.0"],
    )
    def test_malformed_strings_fail(self, text: str) -> None:
        with pytest.raises(InvalidVersionError):
            SemanticVersion.parse(text)

    def test_error_is_a_venv_wrap_error_with_hint(self) -> None:
        with pytest.raises(VenvWrapError) as exc_info:
            SemanticVersion.parse("nope")
        assert exc_info.value.hint is not None

    def test_negative_component_rejected(self) -> None:
        with pytest.raises(InvalidVersionError):
            SemanticVersion(1, -1, 0)

    @pytest.mark.parametrize("text", ["\u0661.\u0662.\u0663", "1.\uff12.3", "1.2.\u0be9"])
    def test_non_ascii_digits_rejected(self, text: str) -> None:
        with pytest.raises(InvalidVersionError):
            SemanticVersion.parse(text)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class TestToString:
    def test_round_trip_of_numeric_triple(self) -> None:
        assert _v("4.5.6").to_string() == "4.5.6"

    def test_metadata_dropped_by_default(self) -> None:
        assert _v("1.0.0+abc").to_string() == "1.0.0"

    def test_metadata_included_on_request(self) -> None:
        assert _v("1.0.0+abc").to_string(with_metadata=True) == "1.0.0+abc"

    def test_str_includes_metadata(self) -> None:
        assert str(_v("0.1.0+deadbee")) == "0.1.0+deadbee"
        assert str(_v("0.1.0")) == "0.1.0"


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

class TestCompare:
    def test_patch_less(self) -> None:
        assert compare(_v("1.2.3"), _v("1.2.4")) is Ordering.LESS

    def test_major_dominates(self) -> None:
        assert compare(_v("2.0.0"), _v("1.9.9")) is Ordering.GREATER

    def test_metadata_ignored(self) -> None:
        assert compare(_v("1.0.0+a"), _v("1.0.0+b")) is Ordering.EQUAL

    def test_numeric_not_lexicographic(self) -> None:
        assert compare(_v("1.10.0"), _v("1.9.0")) is Ordering.GREATER

    def test_rich_comparisons(self) -> None:
        assert _v("1.0.0") < _v("1.0.1")
        assert _v("1.0.1") > _v("1.0.0")
        assert _v("1.0.0+a") <= _v("1.0.0+b")
        assert _v("1.0.0+a") >= _v("1.0.0+b")

    def test_sorting(self) -> None:
        versions = [_v("1.10.0"), _v("0.9.9"), _v("1.2.0")]
        assert [v.to_string() for v in sorted(versions)] == ["0.9.9", "1.2.0", "1.10.0"]
