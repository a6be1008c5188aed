"""Resolution driver: alternates unit propagation, conflict resolution and decisions."""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from semantic_version import Version

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer
from errors import InternalInconsistency, ResolutionAborted, ResolutionCancelled, SourceUnavailable
from sources.base import PackageSource
from sources.cache import MemoizedSource
from versioning.models import Package, Requirement, ROOT_VERSION
from versioning.parser import coerce_requirement
from versioning.range import Range

from .incompatibility import Cause, CauseKind, Incompatibility
from .partial_solution import PartialSolution
from .propagation import Propagator
from .result import LockResult, ResolutionStats, explain_failure, extract_solution
from .store import IncompatibilityStore
from .strategy import VersionPreference, preference_from_name, select_package
from .term import Term, describe

logger = logging.getLogger(__name__)


class SolverState(Enum):
    """Phases of the search loop."""
    PROPAGATING = "propagating"
    DECIDING = "deciding"
    CONFLICT = "conflict"
    SUCCESS = "success"
    FAILURE = "failure"


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ResolutionCancelled("Resolution cancelled")


class Resolver:
    """Finds one version per required package such that every dependency holds.

    A resolver instance is good for any number of :meth:`solve` calls; each
    call starts from scratch with a fresh memo over ``source``.

    Args:
        requirements: Root requirements, as accepted by
            :func:`versioning.parser.coerce_requirement`.
        source: Where versions and dependencies come from.
        preference: Version ordering strategy, or its configured name.
        cancel: Token checked before every decision.
        max_steps: Maximum number of decisions; 0 means unbounded.
        root_name: Display name of the root package.
    """

    def __init__(
        self,
        requirements: Iterable[Any],
        source: PackageSource,
        *,
        preference: Union[VersionPreference, str, None] = None,
        cancel: Optional[CancellationToken] = None,
        max_steps: Optional[int] = None,
        root_name: Optional[str] = None,
    ) -> None:
        self.requirements: List[Requirement] = [coerce_requirement(r) for r in requirements]
        self._raw_source = source
        if preference is None:
            preference = Constants.DEFAULT_PREFERENCE
        self.preference = preference_from_name(preference) if isinstance(preference, str) else preference
        self.cancel = cancel or CancellationToken()
        self.max_steps = Constants.MAX_STEPS if max_steps is None else max_steps
        self.root = Package.root(root_name or Constants.ROOT_PACKAGE_NAME)
        self.state: Optional[SolverState] = None

    def _reset(self) -> None:
        self._source = MemoizedSource(self._raw_source)
        self._store = IncompatibilityStore()
        self._solution = PartialSolution()
        self._propagator = Propagator(self._store, self._solution)
        self._decisions = 0

    def _transition(self, state: SolverState) -> None:
        self.state = state
        if is_debug_enabled(logger):
            logger.debug(
                "State %s",
                state.value,
                extra=extra_context(
                    event="state",
                    component="resolver",
                    state=state.value,
                    decision_level=self._solution.decision_level,
                ),
            )

    def solve(self) -> LockResult:
        """Run the search.

        Returns:
            A LockResult holding either the selection or the explanation.

        Raises:
            SourceUnavailable: The source failed a query.
            ResolutionCancelled: The cancellation token was set.
            ResolutionAborted: ``max_steps`` decisions were made without an answer.
            InternalInconsistency: The solver detected a logic defect.
        """
        self._reset()
        logger.info(
            "Resolving %d root requirement(s)",
            len(self.requirements),
            extra=extra_context(event="resolve_start", component="resolver", preference=self.preference.name),
        )
        with Timer() as t:
            try:
                failure = self._run()
            except SourceUnavailable as exc:
                logger.error(
                    "Package source failed: %s",
                    exc,
                    extra=extra_context(event="source_error", component="resolver", outcome="error"),
                )
                raise

        stats = ResolutionStats(
            decisions=self._decisions,
            conflicts=self._propagator.conflicts,
            attempted_solutions=self._solution.attempted_solutions,
            incompatibilities=len(self._store),
            duration_ms=t.duration_ms(),
        )
        if failure is None:
            result = LockResult(solution=extract_solution(self._solution), stats=stats)
        else:
            result = LockResult(explanation=explain_failure(self._store, failure), stats=stats)

        logger.info(
            "Resolution %s after %d decision(s) and %d conflict(s)",
            "succeeded" if result.ok else "failed",
            stats.decisions,
            stats.conflicts,
            extra=extra_context(
                event="resolve_end",
                component="resolver",
                outcome="success" if result.ok else "unsatisfiable",
                duration_ms=stats.duration_ms,
            ),
        )
        return result

    def _run(self) -> Optional[int]:
        """Drive the state machine; return the failure index or None on success."""
        self._store.add(Incompatibility([Term(self.root, Range.any(), False)], Cause(CauseKind.ROOT)))
        changed: Package = self.root
        conflict: Optional[int] = None
        self._transition(SolverState.PROPAGATING)

        while True:
            if self.state is SolverState.PROPAGATING:
                conflict = self._propagator.propagate([changed])
                self._transition(SolverState.DECIDING if conflict is None else SolverState.CONFLICT)

            elif self.state is SolverState.CONFLICT:
                learned, failed = self._propagator.resolve_conflict(conflict)
                if failed:
                    self._transition(SolverState.FAILURE)
                    return learned
                derived = self._propagator.propagate_incompatibility(learned)
                if not isinstance(derived, Package):
                    raise InternalInconsistency(f"Learned incompatibility #{learned} did not propagate")
                changed = derived
                self._transition(SolverState.PROPAGATING)

            elif self.state is SolverState.DECIDING:
                decided = self._decide()
                if decided is None:
                    self._transition(SolverState.SUCCESS)
                    return None
                changed = decided
                self._transition(SolverState.PROPAGATING)

            else:
                raise InternalInconsistency(f"Unexpected solver state {self.state}")

    def _versions(self, package: Package) -> Sequence[Version]:
        if package.is_root:
            return (ROOT_VERSION,)
        return self._source.list_versions(package)

    def _decide(self) -> Optional[Package]:
        """Pick a package and version, or return None when everything is decided.

        Returns the package whose assignments changed, so propagation can
        continue from it.
        """
        self.cancel.raise_if_cancelled()
        unsatisfied = self._solution.unsatisfied()
        if not unsatisfied:
            return None

        allowed: Dict[Package, List[Version]] = {}
        for term in unsatisfied:
            allowed[term.package] = [v for v in self._versions(term.package) if term.range.allows(v)]
        package = select_package([
            (term.package, len(allowed[term.package]), self._store.registration_order(term.package))
            for term in unsatisfied
        ])
        term = next(t for t in unsatisfied if t.package == package)

        candidates = self.preference.order(package, allowed[package])
        if not candidates:
            self._store.add(Incompatibility([Term(package, term.range, True)], Cause(CauseKind.NO_VERSIONS)))
            return package

        version = candidates[0]
        conflict = False
        for incompatibility in self._dependency_incompatibilities(package, version):
            self._store.add(incompatibility)
            conflict = conflict or all(
                t.package == package or self._solution.satisfies(t)
                for t in incompatibility.terms
            )

        if not conflict:
            if not package.is_root:
                if self.max_steps and self._decisions >= self.max_steps:
                    raise ResolutionAborted(self._decisions)
                self._decisions += 1
            self._solution.decide(package, version)
        return package

    def _dependency_incompatibilities(self, package: Package, version: Version) -> List[Incompatibility]:
        """Translate the requirements of ``package`` at ``version`` into incompatibilities."""
        if package.is_root:
            requirements = self.requirements
            depender = Term(package, Range.any(), True)
        else:
            requirements = self._source.dependencies_of(package, version)
            depender = Term(package, Range.exactly(version), True)

        grouped: Dict[Package, List[Range]] = {}
        for requirement in requirements:
            grouped.setdefault(requirement.package, []).append(requirement.range)

        incompatibilities = []
        for dependency, ranges in grouped.items():
            combined = ranges[0]
            for other in ranges[1:]:
                combined = combined.intersect(other)

            if combined.is_empty():
                detail = "{} depends on both {}".format(
                    describe(package, depender.range) if not package.is_root else package,
                    " and ".join(describe(dependency, r) for r in ranges),
                )
                kind = CauseKind.CONFLICTING_ROOT_REQUIREMENTS if package.is_root else CauseKind.DEPENDENCY
                requirements = tuple(Requirement(dependency, r) for r in ranges)
                incompatibilities.append(Incompatibility(
                    [depender],
                    Cause(kind, detail=detail, requirements=requirements),
                ))
            elif dependency == package:
                # A package may name itself; only an excluding range matters.
                if combined.allows(version):
                    continue
                detail = f"{describe(package, depender.range)} depends on {describe(dependency, combined)}"
                incompatibilities.append(Incompatibility([depender], Cause(CauseKind.DEPENDENCY, detail=detail)))
            else:
                kind = CauseKind.ROOT_DEPENDENCY if package.is_root else CauseKind.DEPENDENCY
                incompatibilities.append(Incompatibility([depender, Term(dependency, combined, False)], Cause(kind)))
        return incompatibilities


def resolve(
    requirements: Iterable[Any],
    source: PackageSource,
    *,
    preference: Union[VersionPreference, str, None] = None,
    cancel: Optional[CancellationToken] = None,
    max_steps: Optional[int] = None,
    root_name: Optional[str] = None,
) -> LockResult:
    """Resolve ``requirements`` against ``source``; see :class:`Resolver`."""
    return Resolver(
        requirements,
        source,
        preference=preference,
        cancel=cancel,
        max_steps=max_steps,
        root_name=root_name,
    ).solve()
