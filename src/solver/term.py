"""Terms: assertions that a package is or is not selected within a range."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from versioning.models import Package
from versioning.range import Range


class SetRelation(Enum):
    """How the versions allowed by one term relate to another's."""
    SUBSET = "subset"
    DISJOINT = "disjoint"
    OVERLAPPING = "overlapping"


class Term:
    """A statement about one package.

    A positive term holds when the package is selected at a version inside
    ``range``. A negative term holds when the package is not selected at a
    version inside ``range``, including when it is not selected at all.
    """

    __slots__ = ("package", "range", "positive")

    def __init__(self, package: Package, range_: Range, positive: bool = True) -> None:
        self.package = package
        self.range = range_
        self.positive = positive

    @property
    def inverse(self) -> "Term":
        return Term(self.package, self.range, not self.positive)

    def satisfies(self, other: "Term") -> bool:
        """Whether this term being true forces ``other`` to be true."""
        return self.package == other.package and self.relation(other) is SetRelation.SUBSET

    def relation(self, other: "Term") -> SetRelation:
        """Relation between the version sets of two terms on the same package."""
        if other.positive:
            if self.positive:
                if other.range.allows_all(self.range):
                    return SetRelation.SUBSET
                if not self.range.allows_any(other.range):
                    return SetRelation.DISJOINT
                return SetRelation.OVERLAPPING
            # "not a R" excludes every selection "a S" when S lies inside R.
            if self.range.allows_all(other.range):
                return SetRelation.DISJOINT
            return SetRelation.OVERLAPPING

        if self.positive:
            if not other.range.allows_any(self.range):
                return SetRelation.SUBSET
            if other.range.allows_all(self.range):
                return SetRelation.DISJOINT
            return SetRelation.OVERLAPPING
        # Two negative terms always share "not selected".
        if self.range.allows_all(other.range):
            return SetRelation.SUBSET
        return SetRelation.OVERLAPPING

    def intersect(self, other: "Term") -> Optional["Term"]:
        """Term satisfied exactly when both terms are, or None if impossible."""
        if self.positive != other.positive:
            positive, negative = (self, other) if self.positive else (other, self)
            return _non_empty(self.package, positive.range.difference(negative.range), True)
        if self.positive:
            return _non_empty(self.package, self.range.intersect(other.range), True)
        return _non_empty(self.package, self.range.union(other.range), False)

    def difference(self, other: "Term") -> Optional["Term"]:
        """Term satisfied when this one is and ``other`` is not."""
        return self.intersect(other.inverse)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Term):
            return NotImplemented
        return (
            self.package == other.package
            and self.positive == other.positive
            and self.range == other.range
        )

    def __hash__(self) -> int:
        return hash((self.package, self.range, self.positive))

    def __repr__(self) -> str:
        return f"Term({str(self)!r})"

    def __str__(self) -> str:
        text = describe(self.package, self.range)
        return text if self.positive else f"not {text}"


def _non_empty(package: Package, range_: Range, positive: bool) -> Optional[Term]:
    if range_.is_empty():
        return None
    return Term(package, range_, positive)


def describe(package: Package, range_: Range) -> str:
    """Human form of a package and range: ``a``, ``a 1.0.0`` or ``a >=1.0.0``."""
    if package.is_root or range_.is_any():
        return str(package)
    point = range_.single_version
    if point is not None:
        return f"{package} {point}"
    return f"{package} {range_}"
