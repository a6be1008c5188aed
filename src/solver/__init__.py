"""Conflict-driven version solver.

This package provides:
- term.py / incompatibility.py: the clauses the solver reasons with
- store.py: the append-only incompatibility arena
- partial_solution.py: decisions and derivations of the current attempt
- propagation.py: unit propagation and conflict-driven learning
- strategy.py: package selection and version preference policies
- resolver.py: the driver loop and the ``resolve`` entry point
- result.py / report.py: lock results and failure explanations
"""

from .incompatibility import Cause, CauseKind, Incompatibility
from .resolver import CancellationToken, Resolver, SolverState, resolve
from .result import ConflictExplanation, LockResult, ResolutionStats
from .strategy import NewestFirst, OldestFirst, PreferLocked, VersionPreference, preference_from_name
from .term import SetRelation, Term

__all__ = [
    "CancellationToken",
    "Cause",
    "CauseKind",
    "ConflictExplanation",
    "Incompatibility",
    "LockResult",
    "NewestFirst",
    "OldestFirst",
    "PreferLocked",
    "ResolutionStats",
    "Resolver",
    "SetRelation",
    "SolverState",
    "Term",
    "VersionPreference",
    "preference_from_name",
    "resolve",
]
