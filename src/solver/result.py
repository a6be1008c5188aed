"""Outcome of a resolution run."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from semantic_version import Version

from errors import InternalInconsistency, UnsatisfiableRoot
from versioning.models import Package, Requirement

from .partial_solution import PartialSolution
from .report import FailureReporter
from .store import IncompatibilityStore


@dataclass(frozen=True)
class ConflictExplanation:
    """Why no solution exists: the numbered proof and the requirements it rests on."""
    lines: Tuple[str, ...]
    conflict_set: Tuple[Requirement, ...]

    def __str__(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class ResolutionStats:
    decisions: int = 0
    conflicts: int = 0
    attempted_solutions: int = 1
    incompatibilities: int = 0
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "decisions": self.decisions,
            "conflicts": self.conflicts,
            "attempted_solutions": self.attempted_solutions,
            "incompatibilities": self.incompatibilities,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class LockResult:
    """Either a complete selection or an explanation, never both."""
    solution: Optional[Dict[Package, Version]] = None
    explanation: Optional[ConflictExplanation] = None
    stats: ResolutionStats = field(default_factory=ResolutionStats)

    @property
    def ok(self) -> bool:
        return self.solution is not None

    def raise_for_failure(self) -> None:
        """Raise UnsatisfiableRoot if the run found no solution."""
        if not self.ok:
            raise UnsatisfiableRoot(self.explanation)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form of the result."""
        data: Dict[str, Any] = {"ok": self.ok, "stats": self.stats.to_dict()}
        if self.solution is not None:
            data["solution"] = {str(package): str(version) for package, version in self.solution.items()}
        if self.explanation is not None:
            data["explanation"] = list(self.explanation.lines)
            data["conflict_set"] = [
                {"package": str(req.package), "range": str(req.range)}
                for req in self.explanation.conflict_set
            ]
        return data


def extract_solution(solution: PartialSolution) -> Dict[Package, Version]:
    """Read the selection out of a complete partial solution.

    Every positive term must be backed by a decision inside its range. The
    root package is left out. Packages are ordered by name.
    """
    decisions = solution.decisions
    for package, term in solution.positive_terms().items():
        version = decisions.get(package)
        if version is None:
            raise InternalInconsistency(f"{term} is required but {package} was never decided")
        if not term.range.allows(version):
            raise InternalInconsistency(f"Decision {package} {version} violates {term}")
    return {
        package: decisions[package]
        for package in sorted(decisions, key=lambda p: p.sort_key)
        if not package.is_root
    }


def explain_failure(store: IncompatibilityStore, failure: int) -> ConflictExplanation:
    reporter = FailureReporter(store, failure)
    return ConflictExplanation(tuple(reporter.lines()), tuple(reporter.conflict_set()))
