"""Tests for the partial solution assignment log."""
import pytest
from semantic_version import Version

from errors import InternalInconsistency
from solver.partial_solution import PartialSolution
from solver.term import SetRelation, Term
from versioning.models import Package
from versioning.range import Range

ROOT = Package.root()
A = Package("a")
B = Package("b")


def v(text):
    return Version(text)


@pytest.fixture
def solution():
    sol = PartialSolution()
    sol.derive(Term(ROOT, Range.any()), 0)
    sol.decide(ROOT, v("0.0.0"))
    return sol


class TestAssignments:
    """Decisions, derivations and decision levels."""

    def test_root_decision_is_level_one(self, solution):
        assert solution.decision_level == 1
        assert solution.assignments[0].decision_level == 0
        assert solution.assignments[1].decision_level == 1
        assert solution.assignments[1].is_decision

    def test_derivation_records_cause(self, solution):
        solution.derive(Term(A, Range.at_least(v("1.0.0"))), 4)
        last = solution.assignments[-1]
        assert last.cause == 4
        assert not last.is_decision
        assert last.decision_level == 1

    def test_unsatisfied_lists_undecided_positive_terms(self, solution):
        solution.derive(Term(A, Range.at_least(v("1.0.0"))), 1)
        solution.derive(Term(B, Range.any(), False), 2)
        assert solution.unsatisfied() == [Term(A, Range.at_least(v("1.0.0")))]
        solution.decide(A, v("1.5.0"))
        assert solution.unsatisfied() == []
        assert solution.decisions[A] == v("1.5.0")

    def test_assignments_are_intersected(self, solution):
        solution.derive(Term(A, Range.at_least(v("1.0.0"))), 1)
        solution.derive(Term(A, Range.less_than(v("2.0.0"))), 2)
        solution.derive(Term(A, Range.exactly(v("1.5.0")), False), 3)
        term = solution.positive_terms()[A]
        assert term.range.allows(v("1.2.0"))
        assert not term.range.allows(v("1.5.0"))
        assert not term.range.allows(v("2.0.0"))

    def test_contradictory_assignment_raises(self, solution):
        solution.derive(Term(A, Range.exactly(v("1.0.0"))), 1)
        with pytest.raises(InternalInconsistency):
            solution.derive(Term(A, Range.exactly(v("2.0.0"))), 2)


class TestRelation:
    """Queries against the current assignments."""

    def test_unknown_package_overlaps(self, solution):
        assert solution.relation(Term(A, Range.any())) is SetRelation.OVERLAPPING

    def test_negative_only(self, solution):
        solution.derive(Term(A, Range.at_least(v("2.0.0")), False), 1)
        assert solution.satisfies(Term(A, Range.at_least(v("3.0.0")), False))
        assert solution.relation(Term(A, Range.at_least(v("2.5.0")))) is SetRelation.DISJOINT

    def test_satisfier_is_earliest_sufficient_assignment(self, solution):
        solution.derive(Term(A, Range.between(v("1.0.0"), v("3.0.0"))), 1)
        solution.decide(A, v("2.0.0"))
        wide = solution.satisfier(Term(A, Range.between(v("1.0.0"), v("3.0.0"))))
        assert wide.cause == 1
        exact = solution.satisfier(Term(A, Range.exactly(v("2.0.0"))))
        assert exact.is_decision
        assert exact.decision_level == 2

    def test_satisfier_of_unsatisfied_term_raises(self, solution):
        solution.derive(Term(A, Range.at_least(v("1.0.0"))), 1)
        with pytest.raises(InternalInconsistency):
            solution.satisfier(Term(A, Range.exactly(v("1.0.0"))))


class TestBacktrack:
    """Truncation of the log."""

    def test_backtrack_drops_higher_levels(self, solution):
        solution.derive(Term(A, Range.any()), 1)
        solution.decide(A, v("1.0.0"))
        solution.derive(Term(B, Range.at_least(v("1.0.0"))), 2)
        solution.backtrack(1)
        assert solution.decision_level == 1
        assert A not in solution.decisions
        assert B not in solution.positive_terms()
        assert solution.positive_terms()[A] == Term(A, Range.any())
        assert len(solution.assignments) == 3

    def test_attempts_counted_after_backtrack(self, solution):
        assert solution.attempted_solutions == 1
        solution.derive(Term(A, Range.any()), 1)
        solution.decide(A, v("1.0.0"))
        solution.backtrack(1)
        solution.decide(A, v("0.9.0"))
        assert solution.attempted_solutions == 2
