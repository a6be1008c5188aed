"""Version ranges as normalized unions of intervals.

A :class:`Range` is a set of versions. Its intervals are kept sorted,
non-overlapping and merged at construction time, so two ranges describing the
same set compare equal regardless of how they were written. Every operation
is total: the empty range is an ordinary value.
"""
from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional, Tuple

from semantic_version import Version


class Interval(NamedTuple):
    """A contiguous span of versions. ``None`` bounds are unbounded."""
    lower: Optional[Version]
    upper: Optional[Version]
    include_lower: bool
    include_upper: bool


def _interval(lower, upper, include_lower, include_upper) -> Interval:
    return Interval(
        lower,
        upper,
        bool(include_lower) and lower is not None,
        bool(include_upper) and upper is not None,
    )


def _is_empty(iv: Interval) -> bool:
    if iv.lower is None or iv.upper is None:
        return False
    if iv.lower < iv.upper:
        return False
    if iv.lower == iv.upper:
        return not (iv.include_lower and iv.include_upper)
    return True


def _contains(iv: Interval, version: Version) -> bool:
    if iv.lower is not None:
        if version < iv.lower or (version == iv.lower and not iv.include_lower):
            return False
    if iv.upper is not None:
        if version > iv.upper or (version == iv.upper and not iv.include_upper):
            return False
    return True


def _lower_key(iv: Interval):
    # Unbounded first; at equal bounds the inclusive interval sorts first.
    if iv.lower is None:
        return (0,)
    return (1, iv.lower, 0 if iv.include_lower else 1)


def _intersect_intervals(a: Interval, b: Interval) -> Interval:
    lower, include_lower = a.lower, a.include_lower
    if b.lower is not None and (
        lower is None or b.lower > lower or (b.lower == lower and not b.include_lower)
    ):
        lower, include_lower = b.lower, b.include_lower

    upper, include_upper = a.upper, a.include_upper
    if b.upper is not None and (
        upper is None or b.upper < upper or (b.upper == upper and not b.include_upper)
    ):
        upper, include_upper = b.upper, b.include_upper

    return _interval(lower, upper, include_lower, include_upper)


def _touches(a: Interval, b: Interval) -> bool:
    """Whether ``b`` (sorted after ``a``) overlaps or abuts ``a``."""
    if a.upper is None or b.lower is None:
        return True
    if a.upper > b.lower:
        return True
    if a.upper == b.lower:
        return a.include_upper or b.include_lower
    return False


def _merge(a: Interval, b: Interval) -> Interval:
    if a.upper is None or b.upper is None:
        upper, include_upper = None, False
    elif a.upper > b.upper:
        upper, include_upper = a.upper, a.include_upper
    elif b.upper > a.upper:
        upper, include_upper = b.upper, b.include_upper
    else:
        upper, include_upper = a.upper, a.include_upper or b.include_upper
    return _interval(a.lower, upper, a.include_lower, include_upper)


def _normalize(intervals: Iterable[Interval]) -> Tuple[Interval, ...]:
    items = sorted((iv for iv in intervals if not _is_empty(iv)), key=_lower_key)
    merged: List[Interval] = []
    for iv in items:
        if merged and _touches(merged[-1], iv):
            merged[-1] = _merge(merged[-1], iv)
        else:
            merged.append(iv)
    return tuple(merged)


class Range:
    """An immutable set of versions."""

    __slots__ = ("_intervals",)

    def __init__(self, intervals: Iterable[Interval] = ()) -> None:
        self._intervals = _normalize(
            _interval(*iv) for iv in intervals
        )

    # Constructors

    @classmethod
    def any(cls) -> "Range":
        return cls([Interval(None, None, False, False)])

    @classmethod
    def empty(cls) -> "Range":
        return cls()

    @classmethod
    def exactly(cls, version: Version) -> "Range":
        return cls([Interval(version, version, True, True)])

    @classmethod
    def at_least(cls, version: Version) -> "Range":
        return cls([Interval(version, None, True, False)])

    @classmethod
    def greater_than(cls, version: Version) -> "Range":
        return cls([Interval(version, None, False, False)])

    @classmethod
    def at_most(cls, version: Version) -> "Range":
        return cls([Interval(None, version, False, True)])

    @classmethod
    def less_than(cls, version: Version) -> "Range":
        return cls([Interval(None, version, False, False)])

    @classmethod
    def between(
        cls,
        lower: Optional[Version],
        upper: Optional[Version],
        include_lower: bool = True,
        include_upper: bool = False,
    ) -> "Range":
        return cls([Interval(lower, upper, include_lower, include_upper)])

    # Queries

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        return self._intervals

    @property
    def single_version(self) -> Optional[Version]:
        """The only version in this range, or None if it holds zero or many."""
        if len(self._intervals) == 1:
            iv = self._intervals[0]
            if iv.lower is not None and iv.lower == iv.upper:
                return iv.lower
        return None

    def is_empty(self) -> bool:
        return not self._intervals

    def is_any(self) -> bool:
        return (
            len(self._intervals) == 1
            and self._intervals[0].lower is None
            and self._intervals[0].upper is None
        )

    def allows(self, version: Version) -> bool:
        return any(_contains(iv, version) for iv in self._intervals)

    def __contains__(self, version: Version) -> bool:
        return self.allows(version)

    def allows_any(self, other: "Range") -> bool:
        return not self.intersect(other).is_empty()

    def allows_all(self, other: "Range") -> bool:
        return other.difference(self).is_empty()

    def is_subset_of(self, other: "Range") -> bool:
        return other.allows_all(self)

    def is_disjoint_from(self, other: "Range") -> bool:
        return not self.allows_any(other)

    # Set algebra

    def intersect(self, other: "Range") -> "Range":
        return Range(
            _intersect_intervals(a, b)
            for a in self._intervals
            for b in other._intervals
        )

    def union(self, other: "Range") -> "Range":
        return Range(self._intervals + other._intervals)

    def complement(self) -> "Range":
        gaps: List[Interval] = []
        cursor, cursor_inclusive = None, False
        for iv in self._intervals:
            if iv.lower is not None:
                gaps.append(_interval(cursor, iv.lower, cursor_inclusive, not iv.include_lower))
            if iv.upper is None:
                return Range(gaps)
            cursor, cursor_inclusive = iv.upper, not iv.include_upper
        gaps.append(_interval(cursor, None, cursor_inclusive, False))
        return Range(gaps)

    def difference(self, other: "Range") -> "Range":
        return self.intersect(other.complement())

    # Dunder protocol

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return self._intervals == other._intervals

    def __hash__(self) -> int:
        return hash(self._intervals)

    def __repr__(self) -> str:
        return f"Range({str(self)!r})"

    def __str__(self) -> str:
        if self.is_empty():
            return "<empty>"
        if self.is_any():
            return "*"
        point = self.single_version
        if point is not None:
            return f"=={point}"
        if len(self._intervals) == 2:
            first, second = self._intervals
            if (
                first.lower is None
                and second.upper is None
                and first.upper == second.lower
                and not first.include_upper
                and not second.include_lower
            ):
                return f"!={first.upper}"
        return " || ".join(_format_interval(iv) for iv in self._intervals)


def _format_interval(iv: Interval) -> str:
    if iv.lower is not None and iv.lower == iv.upper:
        return f"=={iv.lower}"
    parts = []
    if iv.lower is not None:
        parts.append(f"{'>=' if iv.include_lower else '>'}{iv.lower}")
    if iv.upper is not None:
        parts.append(f"{'<=' if iv.include_upper else '<'}{iv.upper}")
    return ",".join(parts) if parts else "*"
