"""Tests for terms and their set relations."""
from semantic_version import Version

from solver.term import SetRelation, Term, describe
from versioning.models import Package
from versioning.range import Range

A = Package("a")


def v(text):
    return Version(text)


def between(lo, hi):
    return Range.between(v(lo), v(hi))


class TestRelation:
    """How one term's allowed selections relate to another's."""

    def test_positive_subset(self):
        narrow = Term(A, between("1.0.0", "2.0.0"))
        wide = Term(A, between("1.0.0", "3.0.0"))
        assert narrow.relation(wide) is SetRelation.SUBSET
        assert narrow.satisfies(wide)
        assert not wide.satisfies(narrow)

    def test_positive_disjoint(self):
        low = Term(A, between("1.0.0", "2.0.0"))
        high = Term(A, between("2.0.0", "3.0.0"))
        assert low.relation(high) is SetRelation.DISJOINT

    def test_positive_overlapping(self):
        first = Term(A, between("1.0.0", "2.5.0"))
        second = Term(A, between("2.0.0", "3.0.0"))
        assert first.relation(second) is SetRelation.OVERLAPPING

    def test_positive_against_negative(self):
        selected = Term(A, between("1.0.0", "2.0.0"))
        assert selected.relation(Term(A, between("3.0.0", "4.0.0"), False)) is SetRelation.SUBSET
        assert selected.relation(Term(A, Range.any(), False)) is SetRelation.DISJOINT
        assert selected.relation(Term(A, between("1.5.0", "4.0.0"), False)) is SetRelation.OVERLAPPING

    def test_negative_against_positive(self):
        excluded = Term(A, Range.any(), False)
        assert excluded.relation(Term(A, between("1.0.0", "2.0.0"))) is SetRelation.DISJOINT
        partly = Term(A, between("1.0.0", "2.0.0"), False)
        assert partly.relation(Term(A, Range.any())) is SetRelation.OVERLAPPING

    def test_negative_against_negative(self):
        wide = Term(A, between("1.0.0", "3.0.0"), False)
        narrow = Term(A, between("1.0.0", "2.0.0"), False)
        assert wide.relation(narrow) is SetRelation.SUBSET
        assert narrow.relation(wide) is SetRelation.OVERLAPPING

    def test_different_packages_never_satisfy(self):
        assert not Term(A, Range.any()).satisfies(Term(Package("b"), Range.any()))


class TestCombination:
    """Intersection and difference of terms."""

    def test_positive_intersection(self):
        result = Term(A, between("1.0.0", "3.0.0")).intersect(Term(A, between("2.0.0", "4.0.0")))
        assert result == Term(A, between("2.0.0", "3.0.0"))

    def test_positive_and_negative(self):
        result = Term(A, between("1.0.0", "3.0.0")).intersect(Term(A, between("2.0.0", "4.0.0"), False))
        assert result == Term(A, between("1.0.0", "2.0.0"))
        assert result.positive

    def test_negative_intersection_is_union_of_exclusions(self):
        result = Term(A, between("1.0.0", "2.0.0"), False).intersect(Term(A, between("2.0.0", "3.0.0"), False))
        assert result == Term(A, between("1.0.0", "3.0.0"), False)

    def test_impossible_intersection(self):
        assert Term(A, between("1.0.0", "2.0.0")).intersect(Term(A, between("2.0.0", "3.0.0"))) is None

    def test_difference(self):
        result = Term(A, between("1.0.0", "3.0.0")).difference(Term(A, between("2.0.0", "3.0.0")))
        assert result == Term(A, between("1.0.0", "2.0.0"))

    def test_inverse(self):
        term = Term(A, Range.exactly(v("1.0.0")))
        assert term.inverse == Term(A, Range.exactly(v("1.0.0")), False)
        assert term.inverse.inverse == term


class TestDescribe:
    """Human-readable forms."""

    def test_describe(self):
        assert describe(A, Range.any()) == "a"
        assert describe(A, Range.exactly(v("1.0.0"))) == "a 1.0.0"
        assert describe(A, between("1.0.0", "2.0.0")) == "a >=1.0.0,<2.0.0"
        assert describe(Package.root(), Range.exactly(v("0.0.0"))) == "root"

    def test_str(self):
        assert str(Term(A, Range.exactly(v("1.0.0")))) == "a 1.0.0"
        assert str(Term(A, Range.any(), False)) == "not a"
