"""Tests for version, constraint and requirement parsing."""
import pytest
from semantic_version import Version

from errors import VersionParseError
from versioning.models import Package, Requirement
from versioning.parser import (
    coerce_requirement,
    parse_range,
    parse_requirement,
    parse_version,
    tokenize_rightmost_colon,
)
from versioning.range import Range


def v(text):
    return Version(text)


class TestParseVersion:
    """Loose version text is accepted and normalized."""

    def test_strict(self):
        assert parse_version("1.2.3") == v("1.2.3")

    def test_leading_v(self):
        assert parse_version("v1.2.3") == v("1.2.3")

    def test_partial_is_coerced(self):
        assert parse_version("1.2") == v("1.2.0")
        assert parse_version("3") == v("3.0.0")

    def test_build_metadata_dropped(self):
        assert parse_version("1.0.0+build.5") == v("1.0.0")

    def test_prerelease_kept(self):
        assert parse_version("2.0.0-rc.1") < v("2.0.0")

    @pytest.mark.parametrize("text", ["", "abc", "v"])
    def test_invalid(self, text):
        with pytest.raises(VersionParseError):
            parse_version(text)

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_version("not-a-version")


class TestParseRange:
    """Constraint syntax."""

    @pytest.mark.parametrize("text", [None, "", "*", "x", "  "])
    def test_any(self, text):
        assert parse_range(text).is_any()

    def test_range_passthrough(self):
        r = Range.at_least(v("1.0.0"))
        assert parse_range(r) is r

    def test_exact(self):
        assert parse_range("1.2.3") == Range.exactly(v("1.2.3"))
        assert parse_range("==1.2.3") == Range.exactly(v("1.2.3"))
        assert parse_range("=1.2.3") == Range.exactly(v("1.2.3"))

    def test_explicit_equality_on_partial_version_is_exact(self):
        assert parse_range("==1.2") == Range.exactly(v("1.2.0"))

    def test_comparisons(self):
        assert parse_range(">1.0.0") == Range.greater_than(v("1.0.0"))
        assert parse_range(">=1.0") == Range.at_least(v("1.0.0"))
        assert parse_range("<2") == Range.less_than(v("2.0.0"))
        assert parse_range("<=2.0.0") == Range.at_most(v("2.0.0"))
        assert parse_range("!=1.5.0") == Range.exactly(v("1.5.0")).complement()

    def test_conjunction(self):
        expected = Range.between(v("1.0.0"), v("2.0.0"))
        assert parse_range(">=1.0,<2.0") == expected
        assert parse_range(">=1.0 <2.0") == expected
        assert parse_range(">= 1.0, < 2.0") == expected

    def test_disjunction(self):
        expected = Range.less_than(v("1.0.0")).union(Range.at_least(v("2.0.0")))
        assert parse_range("<1.0 || >=2.0") == expected

    def test_caret(self):
        assert parse_range("^1.2.3") == Range.between(v("1.2.3"), v("2.0.0"))
        assert parse_range("^0.2.3") == Range.between(v("0.2.3"), v("0.3.0"))
        assert parse_range("^0.0.3") == Range.between(v("0.0.3"), v("0.0.4"))

    def test_tilde(self):
        assert parse_range("~1.2.3") == Range.between(v("1.2.3"), v("1.3.0"))
        assert parse_range("~1") == Range.between(v("1.0.0"), v("2.0.0"))

    def test_pessimistic(self):
        assert parse_range("~>1.2") == Range.between(v("1.2.0"), v("2.0.0"))
        assert parse_range("~>1.2.3") == Range.between(v("1.2.3"), v("1.3.0"))
        assert parse_range("~=1.4.5") == Range.between(v("1.4.5"), v("1.5.0"))

    def test_wildcards(self):
        assert parse_range("1.2.*") == Range.between(v("1.2.0"), v("1.3.0"))
        assert parse_range("1.x") == Range.between(v("1.0.0"), v("2.0.0"))
        assert parse_range("!=1.x") == Range.between(v("1.0.0"), v("2.0.0")).complement()

    @pytest.mark.parametrize("text,expected", [
        ("<1.x", Range.less_than(Version("1.0.0"))),
        ("<=1.x", Range.less_than(Version("2.0.0"))),
        (">1.x", Range.at_least(Version("2.0.0"))),
        (">=1.x", Range.at_least(Version("1.0.0"))),
        ("<=1.2.*", Range.less_than(Version("1.3.0"))),
        (">1.2.*", Range.at_least(Version("1.3.0"))),
    ])
    def test_comparison_against_wildcard_span(self, text, expected):
        assert parse_range(text) == expected

    def test_wildcard_comparison_membership(self):
        assert parse_range("<=1.x").allows(v("1.5.0"))
        assert not parse_range(">1.x").allows(v("1.5.0"))
        assert parse_range(">1.x").allows(v("2.0.0"))

    def test_bare_partial_version_is_wildcard(self):
        assert parse_range("1.2") == Range.between(v("1.2.0"), v("1.3.0"))

    def test_hyphen_range_is_inclusive(self):
        assert parse_range("1.0.0 - 2.0.0") == Range.between(v("1.0.0"), v("2.0.0"), True, True)

    def test_unsatisfiable_conjunction_is_empty(self):
        assert parse_range(">=2.0,<1.0").is_empty()

    @pytest.mark.parametrize("text", [">=abc", "^", ">>1.0", "1.x.3"])
    def test_invalid(self, text):
        with pytest.raises(VersionParseError):
            parse_range(text)

    def test_render_round_trip(self):
        assert str(parse_range(">=1.0,<2.0")) == ">=1.0.0,<2.0.0"
        assert parse_range(str(parse_range("^1.2.3"))) == parse_range("^1.2.3")


class TestRequirements:
    """``name:constraint`` tokens and coercion."""

    def test_tokenize_rightmost_colon(self):
        assert tokenize_rightmost_colon("a:>=1.0") == ("a", ">=1.0")
        assert tokenize_rightmost_colon("group:artifact:1.0") == ("group:artifact", "1.0")
        assert tokenize_rightmost_colon("a") == ("a", None)
        assert tokenize_rightmost_colon("a:") == ("a", None)

    def test_parse_requirement(self):
        req = parse_requirement("a:>=1.0")
        assert req == Requirement(Package("a"), Range.at_least(v("1.0.0")))

    def test_parse_requirement_without_constraint(self):
        assert parse_requirement("a").range.is_any()

    def test_parse_requirement_missing_name(self):
        with pytest.raises(VersionParseError):
            parse_requirement(":1.0")

    def test_coerce_pair(self):
        req = coerce_requirement(("b", "^1.0"))
        assert req.package == Package("b")
        assert req.range == Range.between(v("1.0.0"), v("2.0.0"))

    def test_coerce_package_and_range(self):
        pkg = Package("b", source="internal")
        req = coerce_requirement((pkg, Range.any()))
        assert req.package is pkg

    def test_coerce_passthrough(self):
        req = Requirement(Package("a"), Range.any())
        assert coerce_requirement(req) is req

    def test_coerce_rejects_garbage(self):
        with pytest.raises(VersionParseError):
            coerce_requirement(42)
