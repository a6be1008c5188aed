"""Append-only arena of incompatibilities."""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List

from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import Package

from .incompatibility import Incompatibility

logger = logging.getLogger(__name__)


class IncompatibilityStore:
    """Holds every incompatibility of a run, addressed by insertion index.

    Recorded incompatibilities are never removed. Only *indexed* ones take
    part in propagation; intermediate resolution steps are recorded so that
    derived causes can reference them, but are not indexed.
    """

    def __init__(self) -> None:
        self._items: List[Incompatibility] = []
        self._by_package: Dict[Package, List[int]] = {}
        self._first_seen: Dict[Package, int] = {}

    def add(self, incompatibility: Incompatibility) -> int:
        """Record and index an incompatibility; return its index."""
        idx = self.record(incompatibility)
        self.index(idx)
        return idx

    def record(self, incompatibility: Incompatibility) -> int:
        """Record an incompatibility without making it visible to propagation."""
        self._items.append(incompatibility)
        return len(self._items) - 1

    def index(self, idx: int) -> None:
        """Make a recorded incompatibility visible to propagation."""
        incompatibility = self._items[idx]
        for term in incompatibility.terms:
            self._by_package.setdefault(term.package, []).append(idx)
            self._first_seen.setdefault(term.package, len(self._first_seen))
        if is_debug_enabled(logger):
            logger.debug(
                "Added incompatibility #%d: %s",
                idx,
                incompatibility,
                extra=extra_context(
                    event="incompatibility_added",
                    component="store",
                    cause=incompatibility.cause.kind.value,
                ),
            )

    def for_package(self, package: Package) -> List[int]:
        """Indices of indexed incompatibilities mentioning ``package``, oldest first."""
        return list(self._by_package.get(package, ()))

    def registration_order(self, package: Package) -> int:
        """Position at which ``package`` was first mentioned by an indexed incompatibility."""
        return self._first_seen.get(package, len(self._first_seen))

    def __getitem__(self, idx: int) -> Incompatibility:
        return self._items[idx]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Incompatibility]:
        return iter(self._items)
