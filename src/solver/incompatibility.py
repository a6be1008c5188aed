"""Incompatibilities: sets of terms that must never all hold at once."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from errors import InternalInconsistency
from versioning.models import Package, Requirement

from .term import Term, describe


class CauseKind(Enum):
    """Why an incompatibility exists."""
    ROOT = "root"
    ROOT_DEPENDENCY = "root_dependency"
    DEPENDENCY = "dependency"
    NO_VERSIONS = "no_versions"
    CONFLICTING_ROOT_REQUIREMENTS = "conflicting_root_requirements"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Cause:
    """Tagged cause of an incompatibility.

    Leaf kinds describe an external fact. ``CONFLICT`` marks an
    incompatibility derived by resolution; ``conflict`` and ``other`` are then
    the store indices of its two parents. A leaf whose terms do not name the
    requirements behind it lists them in ``requirements``.
    """
    kind: CauseKind
    conflict: Optional[int] = None
    other: Optional[int] = None
    detail: Optional[str] = None
    requirements: Tuple[Requirement, ...] = ()

    @classmethod
    def derived(cls, conflict: int, other: int) -> "Cause":
        return cls(CauseKind.CONFLICT, conflict=conflict, other=other)

    @property
    def is_derived(self) -> bool:
        return self.kind is CauseKind.CONFLICT

    @property
    def parents(self) -> Tuple[int, int]:
        if not self.is_derived:
            raise InternalInconsistency(f"{self.kind.value} cause has no parents")
        return self.conflict, self.other


class Incompatibility:
    """An ordered set of terms that cannot all be true in a solution.

    Terms on the same package are merged by intersection. A positive root
    term is dropped from derived incompatibilities with other terms, since the
    root is always selected.
    """

    __slots__ = ("_terms", "_cause")

    def __init__(self, terms: Iterable[Term], cause: Cause) -> None:
        terms = list(terms)
        if (
            cause.is_derived
            and len(terms) != 1
            and any(t.positive and t.package.is_root for t in terms)
        ):
            terms = [t for t in terms if not (t.positive and t.package.is_root)]

        merged: Dict[Package, Term] = {}
        for term in terms:
            existing = merged.get(term.package)
            if existing is None:
                merged[term.package] = term
                continue
            combined = existing.intersect(term)
            if combined is None:
                raise InternalInconsistency(
                    f"Malformed incompatibility: {existing} and {term} cannot both hold"
                )
            merged[term.package] = combined

        self._terms: Tuple[Term, ...] = tuple(merged.values())
        self._cause = cause

    @property
    def terms(self) -> Tuple[Term, ...]:
        return self._terms

    @property
    def cause(self) -> Cause:
        return self._cause

    @property
    def packages(self) -> List[Package]:
        return [term.package for term in self._terms]

    def is_failure(self) -> bool:
        """True when no solution can exist at all."""
        return not self._terms or (
            len(self._terms) == 1
            and self._terms[0].positive
            and self._terms[0].package.is_root
        )

    def __repr__(self) -> str:
        return f"Incompatibility({str(self)!r})"

    def __str__(self) -> str:
        kind = self._cause.kind
        if self._cause.detail:
            return self._cause.detail
        if kind in (CauseKind.DEPENDENCY, CauseKind.ROOT_DEPENDENCY) and len(self._terms) == 2:
            depender, dependee = self._terms
            return f"{_terse(depender)} depends on {_terse(dependee.inverse)}"
        if kind is CauseKind.NO_VERSIONS:
            term = self._terms[0]
            if term.range.is_any():
                return f"no versions of {term.package} are available"
            return f"no versions of {term.package} match {term.range}"
        if kind is CauseKind.ROOT:
            return f"{self._terms[0].package} is required"
        return self._describe_terms()

    def _describe_terms(self) -> str:
        if self.is_failure():
            return "version solving failed"

        terms = self._terms
        if len(terms) == 1:
            term = terms[0]
            if term.positive:
                return f"{_terse(term)} is forbidden"
            return f"{_terse(term.inverse)} is required"

        positive = [_terse(t) for t in terms if t.positive]
        negative = [_terse(t.inverse) for t in terms if not t.positive]
        if positive and negative:
            if len(positive) == 1:
                return f"{positive[0]} requires {' or '.join(negative)}"
            return f"if {' and '.join(positive)} then {' or '.join(negative)}"
        if positive:
            if len(positive) == 2:
                return f"{positive[0]} is incompatible with {positive[1]}"
            return f"{', '.join(positive[:-1])} and {positive[-1]} are incompatible"
        return f"one of {' or '.join(negative)} must be true"


def _terse(term: Term) -> str:
    """Describe the versions a term talks about, ignoring polarity."""
    return describe(term.package, term.range)


def and_to_string(
    first: Incompatibility,
    second: Incompatibility,
    first_line: Optional[int] = None,
    second_line: Optional[int] = None,
) -> str:
    """Join two incompatibilities into one clause, citing known line numbers."""
    left = str(first)
    if first_line is not None:
        left = f"{left} ({first_line})"
    right = str(second)
    if second_line is not None:
        right = f"{right} ({second_line})"
    return f"{left} and {right}"
