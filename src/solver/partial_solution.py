"""The evolving assignment log of a resolution run."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from semantic_version import Version

from common.logging_utils import extra_context, is_debug_enabled
from errors import InternalInconsistency
from versioning.models import Package
from versioning.range import Range

from .term import SetRelation, Term

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    """One entry of the partial solution.

    ``cause`` is the store index of the incompatibility a derivation came
    from; decisions have no cause.
    """
    term: Term
    decision_level: int
    index: int
    cause: Optional[int] = None

    @property
    def package(self) -> Package:
        return self.term.package

    @property
    def is_decision(self) -> bool:
        return self.cause is None

    def __str__(self) -> str:
        kind = "decision" if self.is_decision else f"derived from #{self.cause}"
        return f"[{self.decision_level}] {self.term} ({kind})"


class PartialSolution:
    """Ordered log of decisions and derivations.

    Assignments are appended in order and only ever removed from the end, by
    :meth:`backtrack`. For each package the intersection of its assignments is
    kept in ``_positive`` (once any assignment is positive) or ``_negative``.
    """

    def __init__(self) -> None:
        self._assignments: List[Assignment] = []
        self._by_package: Dict[Package, List[Assignment]] = {}
        self._decisions: Dict[Package, Version] = {}
        self._positive: Dict[Package, Term] = {}
        self._negative: Dict[Package, Term] = {}
        self._attempted_solutions = 1
        self._backtracking = False

    @property
    def assignments(self) -> List[Assignment]:
        return list(self._assignments)

    @property
    def decisions(self) -> Dict[Package, Version]:
        return dict(self._decisions)

    @property
    def decision_level(self) -> int:
        return len(self._decisions)

    @property
    def attempted_solutions(self) -> int:
        return self._attempted_solutions

    def positive_terms(self) -> Dict[Package, Term]:
        return dict(self._positive)

    def unsatisfied(self) -> List[Term]:
        """Positive terms for packages that are required but not yet decided."""
        return [
            term for package, term in self._positive.items()
            if package not in self._decisions
        ]

    def decide(self, package: Package, version: Version) -> None:
        """Select ``version`` for ``package`` at a new decision level."""
        # A decision made after backtracking starts a new attempt.
        if self._backtracking:
            self._attempted_solutions += 1
            self._backtracking = False
        self._decisions[package] = version
        self._assign(Assignment(
            Term(package, Range.exactly(version), True),
            self.decision_level,
            len(self._assignments),
        ))

    def derive(self, term: Term, cause: int) -> None:
        """Record ``term`` as forced by the incompatibility at index ``cause``."""
        self._assign(Assignment(term, self.decision_level, len(self._assignments), cause))

    def _assign(self, assignment: Assignment) -> None:
        self._assignments.append(assignment)
        self._by_package.setdefault(assignment.package, []).append(assignment)
        self._register(assignment)
        if is_debug_enabled(logger):
            logger.debug(
                "%s %s",
                "Decided" if assignment.is_decision else "Derived",
                assignment,
                extra=extra_context(
                    event="decide" if assignment.is_decision else "derive",
                    component="partial_solution",
                    package=str(assignment.package),
                    decision_level=assignment.decision_level,
                ),
            )

    def backtrack(self, decision_level: int) -> None:
        """Drop every assignment made above ``decision_level``."""
        self._backtracking = True
        removed = {}
        while self._assignments and self._assignments[-1].decision_level > decision_level:
            assignment = self._assignments.pop()
            self._by_package[assignment.package].pop()
            removed[assignment.package] = None
            if assignment.is_decision:
                self._decisions.pop(assignment.package, None)

        for package in removed:
            self._positive.pop(package, None)
            self._negative.pop(package, None)
            for assignment in self._by_package.get(package, ()):
                self._register(assignment)

        if is_debug_enabled(logger):
            logger.debug(
                "Backtracked to level %d",
                decision_level,
                extra=extra_context(
                    event="backtrack",
                    component="partial_solution",
                    decision_level=decision_level,
                    removed=len(removed),
                ),
            )

    def _register(self, assignment: Assignment) -> None:
        package = assignment.package
        old_positive = self._positive.get(package)
        if old_positive is not None:
            self._positive[package] = self._combine(old_positive, assignment.term)
            return

        old_negative = self._negative.get(package)
        term = assignment.term if old_negative is None else self._combine(assignment.term, old_negative)
        if term.positive:
            self._negative.pop(package, None)
            self._positive[package] = term
        else:
            self._negative[package] = term

    @staticmethod
    def _combine(first: Term, second: Term) -> Term:
        combined = first.intersect(second)
        if combined is None:
            raise InternalInconsistency(f"Assignments {first} and {second} contradict each other")
        return combined

    def relation(self, term: Term) -> SetRelation:
        """How the current assignments for ``term.package`` relate to ``term``."""
        positive = self._positive.get(term.package)
        if positive is not None:
            return positive.relation(term)
        negative = self._negative.get(term.package)
        if negative is None:
            return SetRelation.OVERLAPPING
        return negative.relation(term)

    def satisfies(self, term: Term) -> bool:
        return self.relation(term) is SetRelation.SUBSET

    def satisfier(self, term: Term) -> Assignment:
        """The earliest assignment after which ``term`` is satisfied."""
        assigned: Optional[Term] = None
        for assignment in self._by_package.get(term.package, ()):
            assigned = assignment.term if assigned is None else self._combine(assigned, assignment.term)
            if assigned.satisfies(term):
                return assignment
        raise InternalInconsistency(f"{term} is not satisfied by the partial solution")
