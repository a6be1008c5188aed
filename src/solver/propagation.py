"""Unit propagation and conflict resolution over the incompatibility store."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple, Union

from common.logging_utils import extra_context, is_debug_enabled
from errors import InternalInconsistency
from versioning.models import Package

from .incompatibility import Cause, Incompatibility
from .partial_solution import Assignment, PartialSolution
from .store import IncompatibilityStore
from .term import SetRelation, Term

logger = logging.getLogger(__name__)


class _Conflict:  # pylint: disable=too-few-public-methods
    """Marker returned when every term of an incompatibility is satisfied."""

    def __repr__(self) -> str:
        return "CONFLICT"


CONFLICT = _Conflict()


class Propagator:
    """Derives forced assignments and learns from conflicts.

    Owns no state of its own: it reads and extends the store and the partial
    solution it is given.
    """

    def __init__(self, store: IncompatibilityStore, solution: PartialSolution) -> None:
        self._store = store
        self._solution = solution
        self.conflicts = 0

    def propagate(self, packages: Iterable[Package]) -> Optional[int]:
        """Run unit propagation to a fixed point starting from ``packages``.

        Returns:
            The store index of a fully satisfied incompatibility, or None
            once nothing more can be derived.
        """
        changed: Dict[Package, None] = dict.fromkeys(packages)
        while changed:
            package = next(iter(changed))
            del changed[package]
            # Newer incompatibilities are more specific, so visit them first.
            for idx in reversed(self._store.for_package(package)):
                result = self.propagate_incompatibility(idx)
                if result is CONFLICT:
                    self.conflicts += 1
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Conflict on #%d: %s",
                            idx,
                            self._store[idx],
                            extra=extra_context(event="conflict", component="propagation"),
                        )
                    return idx
                if result is not None:
                    changed[result] = None
        return None

    def propagate_incompatibility(self, idx: int) -> Union[Package, _Conflict, None]:
        """Apply the propagation rule to a single incompatibility.

        Returns the package of a newly derived term, ``CONFLICT`` if all terms
        are satisfied, or None if nothing follows.
        """
        unsatisfied: Optional[Term] = None
        for term in self._store[idx].terms:
            relation = self._solution.relation(term)
            if relation is SetRelation.DISJOINT:
                return None
            if relation is SetRelation.OVERLAPPING:
                if unsatisfied is not None:
                    return None
                unsatisfied = term

        if unsatisfied is None:
            return CONFLICT
        self._solution.derive(unsatisfied.inverse, idx)
        return unsatisfied.package

    def resolve_conflict(self, idx: int) -> Tuple[int, bool]:
        """Learn a new incompatibility from the conflict at ``idx`` and backtrack.

        Returns:
            ``(index, failed)``. When ``failed`` is True the index points at an
            incompatibility proving that no solution exists. Otherwise the
            partial solution has been backtracked so that the incompatibility
            at ``index`` is almost satisfied and will propagate.
        """
        incompatibility = self._store[idx]
        learned = False
        while not incompatibility.is_failure():
            most_recent_term: Optional[Term] = None
            most_recent_satisfier: Optional[Assignment] = None
            difference: Optional[Term] = None
            # Never backtrack past the root decision.
            previous_level = 1

            for term in incompatibility.terms:
                satisfier = self._solution.satisfier(term)
                if most_recent_satisfier is None or most_recent_satisfier.index < satisfier.index:
                    if most_recent_satisfier is not None:
                        previous_level = max(previous_level, most_recent_satisfier.decision_level)
                    most_recent_term = term
                    most_recent_satisfier = satisfier
                    difference = None
                    # The satisfier may only partially satisfy the term; the
                    # remainder must be satisfied by an earlier assignment.
                    if not most_recent_satisfier.term.satisfies(most_recent_term):
                        difference = most_recent_satisfier.term.difference(most_recent_term)
                        if difference is not None:
                            previous_level = max(
                                previous_level,
                                self._solution.satisfier(difference.inverse).decision_level,
                            )
                else:
                    previous_level = max(previous_level, satisfier.decision_level)

            if most_recent_satisfier is None or most_recent_term is None:
                raise InternalInconsistency(f"Conflict #{idx} has no satisfied terms")

            if previous_level < most_recent_satisfier.decision_level or most_recent_satisfier.is_decision:
                self._solution.backtrack(previous_level)
                if learned:
                    self._store.index(idx)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Learned #%d: %s",
                        idx,
                        incompatibility,
                        extra=extra_context(
                            event="learned",
                            component="propagation",
                            decision_level=previous_level,
                        ),
                    )
                return idx, False

            cause = most_recent_satisfier.cause
            new_terms = [t for t in incompatibility.terms if t != most_recent_term]
            new_terms.extend(
                t for t in self._store[cause].terms
                if t.package != most_recent_satisfier.package
            )
            if difference is not None:
                new_terms.append(difference.inverse)

            incompatibility = Incompatibility(new_terms, Cause.derived(idx, cause))
            idx = self._store.record(incompatibility)
            learned = True

        return idx, True
