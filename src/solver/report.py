"""Renders a failed resolution as a numbered proof.

Each derived incompatibility is explained from its two parents. Lines that
are referenced more than once get a number so later lines can cite them
instead of repeating the reasoning.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from versioning.models import Requirement

from .incompatibility import Incompatibility, and_to_string
from .store import IncompatibilityStore


class FailureReporter:
    """Builds explanation lines for the failure incompatibility at ``root``."""

    def __init__(self, store: IncompatibilityStore, root: int) -> None:
        self._store = store
        self._root = root
        self._derivations: Dict[int, int] = {}
        self._lines: List[Tuple[str, Optional[int]]] = []
        self._line_numbers: Dict[int, int] = {}
        self._count_derivations(root)

    def _incompat(self, idx: int) -> Incompatibility:
        return self._store[idx]

    def _is_derived(self, idx: int) -> bool:
        return self._store[idx].cause.is_derived

    def lines(self) -> List[str]:
        """Return the rendered explanation, one string per line."""
        self._lines = []
        self._line_numbers = {}
        if self._is_derived(self._root):
            self._visit(self._root)
        else:
            self._write(self._root, f"Because {self._incompat(self._root)}, version solving failed.")

        padding = 0
        if self._line_numbers:
            padding = len(f"({max(self._line_numbers.values())}) ")

        rendered: List[str] = []
        last_was_empty = False
        for message, number in self._lines:
            if not message:
                if not last_was_empty:
                    rendered.append("")
                last_was_empty = True
                continue
            last_was_empty = False
            if number is not None:
                rendered.append(f"({number}) ".ljust(padding) + message)
            else:
                rendered.append(" " * padding + message)
        return rendered

    def conflict_set(self) -> List[Requirement]:
        """Every ``(package, range)`` stated by a leaf of the proof, first-seen order."""
        seen: Dict[Requirement, None] = {}
        visited = set()
        stack = [self._root]
        while stack:
            idx = stack.pop()
            if idx in visited:
                continue
            visited.add(idx)
            incompat = self._incompat(idx)
            if incompat.cause.is_derived:
                conflict, other = incompat.cause.parents
                stack.append(other)
                stack.append(conflict)
                continue
            for requirement in incompat.cause.requirements:
                seen.setdefault(requirement, None)
            for term in incompat.terms:
                if not term.package.is_root:
                    seen.setdefault(Requirement(term.package, term.range), None)
        return list(seen)

    def _write(self, idx: int, message: str, numbered: bool = False) -> None:
        if numbered:
            number = len(self._line_numbers) + 1
            self._line_numbers[idx] = number
            self._lines.append((message, number))
        else:
            self._lines.append((message, None))

    def _visit(self, idx: int, conclusion: bool = False) -> None:
        numbered = conclusion or self._derivations[idx] > 1
        conjunction = "So," if conclusion or idx == self._root else "And"
        text = str(self._incompat(idx))
        if idx == self._root:
            text = "version solving failed"

        conflict, other = self._incompat(idx).cause.parents
        conflict_derived = self._is_derived(conflict)
        other_derived = self._is_derived(other)

        if conflict_derived and other_derived:
            conflict_line = self._line_numbers.get(conflict)
            other_line = self._line_numbers.get(other)
            if conflict_line is not None and other_line is not None:
                self._write(idx, "Because {}, {}.".format(
                    and_to_string(self._incompat(conflict), self._incompat(other), conflict_line, other_line),
                    text,
                ), numbered)
            elif conflict_line is not None or other_line is not None:
                if conflict_line is not None:
                    with_line, without_line, line = conflict, other, conflict_line
                else:
                    with_line, without_line, line = other, conflict, other_line
                self._visit(without_line)
                self._write(idx, "{} because {} ({}), {}.".format(
                    conjunction, self._incompat(with_line), line, text,
                ), numbered)
            else:
                single_line_conflict = self._is_single_line(conflict)
                single_line_other = self._is_single_line(other)
                if single_line_conflict or single_line_other:
                    first = conflict if single_line_other else other
                    second = other if single_line_other else conflict
                    self._visit(first)
                    self._visit(second)
                    self._write(idx, f"Thus, {text}.", numbered)
                else:
                    self._visit(conflict, conclusion=True)
                    self._lines.append(("", None))
                    self._visit(other)
                    self._write(idx, "{} because {} ({}), {}.".format(
                        conjunction, self._incompat(conflict), self._line_numbers[conflict], text,
                    ), numbered)
        elif conflict_derived or other_derived:
            derived, external = (conflict, other) if conflict_derived else (other, conflict)
            derived_line = self._line_numbers.get(derived)
            if derived_line is not None:
                self._write(idx, "Because {}, {}.".format(
                    and_to_string(self._incompat(external), self._incompat(derived), None, derived_line),
                    text,
                ), numbered)
            elif self._is_collapsible(derived):
                derived_conflict, derived_other = self._incompat(derived).cause.parents
                if self._is_derived(derived_conflict):
                    collapsed_derived, collapsed_external = derived_conflict, derived_other
                else:
                    collapsed_derived, collapsed_external = derived_other, derived_conflict
                self._visit(collapsed_derived)
                self._write(idx, "{} because {}, {}.".format(
                    conjunction,
                    and_to_string(self._incompat(collapsed_external), self._incompat(external)),
                    text,
                ), numbered)
            else:
                self._visit(derived)
                self._write(idx, f"{conjunction} because {self._incompat(external)}, {text}.", numbered)
        else:
            self._write(idx, "Because {}, {}.".format(
                and_to_string(self._incompat(conflict), self._incompat(other)),
                text,
            ), numbered)

    def _is_collapsible(self, idx: int) -> bool:
        """Whether a derivation can be folded into the line that uses it."""
        if self._derivations[idx] > 1:
            return False
        conflict, other = self._incompat(idx).cause.parents
        conflict_derived = self._is_derived(conflict)
        other_derived = self._is_derived(other)
        if conflict_derived == other_derived:
            return False
        complex_idx = conflict if conflict_derived else other
        return complex_idx not in self._line_numbers

    def _is_single_line(self, idx: int) -> bool:
        conflict, other = self._incompat(idx).cause.parents
        return not self._is_derived(conflict) and not self._is_derived(other)

    def _count_derivations(self, idx: int) -> None:
        if idx in self._derivations:
            self._derivations[idx] += 1
            return
        self._derivations[idx] = 1
        incompat = self._incompat(idx)
        if incompat.cause.is_derived:
            conflict, other = incompat.cause.parents
            self._count_derivations(conflict)
            self._count_derivations(other)
