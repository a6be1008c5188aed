"""Tests for failure explanations."""
import re

from semantic_version import Version

from solver import resolve
from solver.incompatibility import Cause, CauseKind, Incompatibility
from solver.report import FailureReporter
from solver.result import explain_failure
from solver.store import IncompatibilityStore
from solver.term import Term
from sources.memory import InMemorySource
from versioning.models import Package, Requirement
from versioning.range import Range

ROOT = Package.root()
A = Package("a")


class TestFailureReporter:
    """Rendering of hand-built proofs."""

    def test_external_failure_is_one_line(self):
        store = IncompatibilityStore()
        idx = store.add(Incompatibility(
            [Term(ROOT, Range.any())],
            Cause(CauseKind.CONFLICTING_ROOT_REQUIREMENTS, detail="root depends on both a 1.0.0 and a 2.0.0"),
        ))
        assert FailureReporter(store, idx).lines() == [
            "Because root depends on both a 1.0.0 and a 2.0.0, version solving failed."
        ]

    def test_single_derivation(self):
        store = IncompatibilityStore()
        dep = store.add(Incompatibility(
            [Term(ROOT, Range.any()), Term(A, Range.any(), False)],
            Cause(CauseKind.ROOT_DEPENDENCY),
        ))
        none = store.add(Incompatibility([Term(A, Range.any())], Cause(CauseKind.NO_VERSIONS)))
        failure = store.record(Incompatibility([Term(ROOT, Range.any())], Cause.derived(none, dep)))
        explanation = explain_failure(store, failure)
        assert explanation.lines == (
            "Because no versions of a are available and root depends on a, version solving failed.",
        )
        assert explanation.conflict_set == (Requirement(A, Range.any()),)


class TestResolverExplanations:
    """Explanations produced by real runs."""

    def test_two_step_proof(self):
        source = InMemorySource({
            "a": {"1.0.0": {"b": ">=2.0"}},
            "b": {"1.0.0": None},
        })
        result = resolve(["a"], source)
        assert result.explanation.lines == (
            "Because no versions of a match !=1.0.0 and a 1.0.0 depends on b >=2.0.0, a requires b >=2.0.0.",
            "So, because no versions of b match >=2.0.0 and root depends on a, version solving failed.",
        )
        names = [req.package.name for req in result.explanation.conflict_set]
        assert names[0] == "a"
        assert "b" in names

    def test_line_references_point_backwards(self):
        source = InMemorySource({
            "a": {"1.0.0": {"c": "==1.0.0"}, "2.0.0": {"c": "==1.0.0"}},
            "b": {"1.0.0": {"c": "==2.0.0"}, "2.0.0": {"c": "==2.0.0"}},
            "c": {"1.0.0": None, "2.0.0": None},
        })
        result = resolve(["a", "b"], source)
        assert not result.ok
        defined = set()
        for line in result.explanation.lines:
            numbered = re.match(r"^\((\d+)\) ", line)
            cited = re.findall(r"\((\d+)\)", line[numbered.end():] if numbered else line)
            assert all(int(n) in defined for n in cited), line
            if numbered:
                defined.add(int(numbered.group(1)))
        assert result.explanation.lines[-1].strip().endswith("version solving failed.")

    def test_conflict_set_has_no_duplicates(self):
        result = resolve(["a:>=1.0,<2.0", "b:>=1.0,<2.0"], InMemorySource({
            "a": {"1.0.0": {"c": "==1.0.0"}},
            "b": {"1.0.0": {"c": "==2.0.0"}},
            "c": {"1.0.0": None, "2.0.0": None},
        }))
        conflict_set = result.explanation.conflict_set
        assert len(conflict_set) == len(set(conflict_set))
        assert Requirement(Package("c"), Range.exactly(Version("2.0.0"))) in conflict_set
