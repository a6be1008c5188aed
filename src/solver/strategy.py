"""Pluggable decision policies: which package to decide next, which version to try first."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from semantic_version import Version

from constants import VersionPreferences
from versioning.models import Package
from versioning.parser import parse_version


class VersionPreference(ABC):
    """Orders the candidate versions of a package, most preferred first."""

    name = "abstract"

    @abstractmethod
    def order(self, package: Package, versions: Sequence[Version]) -> List[Version]:
        """Return ``versions`` in the order they should be tried."""


class NewestFirst(VersionPreference):
    """Prefer the newest satisfying version."""

    name = VersionPreferences.NEWEST.value

    def order(self, package: Package, versions: Sequence[Version]) -> List[Version]:
        return sorted(versions, reverse=True)


class OldestFirst(VersionPreference):
    """Prefer the oldest satisfying version (minimal version selection)."""

    name = VersionPreferences.OLDEST.value

    def order(self, package: Package, versions: Sequence[Version]) -> List[Version]:
        return sorted(versions)


class PreferLocked(VersionPreference):
    """Try a previously locked version first, then fall back to another policy.

    Args:
        locked: Mapping of package (or package name) to version (or version text).
        fallback: Ordering for everything else; newest first by default.
    """

    name = "locked"

    def __init__(
        self,
        locked: Mapping[Union[Package, str], Union[Version, str]],
        fallback: Optional[VersionPreference] = None,
    ) -> None:
        self._locked: Dict[Package, Version] = {}
        for key, value in locked.items():
            package = key if isinstance(key, Package) else Package(str(key))
            self._locked[package] = parse_version(value)
        self._fallback = fallback or NewestFirst()

    def order(self, package: Package, versions: Sequence[Version]) -> List[Version]:
        ordered = self._fallback.order(package, versions)
        locked = self._locked.get(package)
        if locked is not None and locked in ordered:
            ordered.remove(locked)
            ordered.insert(0, locked)
        return ordered


_PREFERENCES: Dict[str, Callable[[], VersionPreference]] = {
    VersionPreferences.NEWEST.value: NewestFirst,
    VersionPreferences.OLDEST.value: OldestFirst,
}


def preference_from_name(name: str) -> VersionPreference:
    """Build a preference from its configuration name."""
    try:
        return _PREFERENCES[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown version preference: {name!r}") from None


def select_package(candidates: Sequence[Tuple[Package, int, int]]) -> Package:
    """Pick the package to decide next.

    Args:
        candidates: ``(package, allowed_version_count, registration_order)``
            for every undecided required package.

    Returns:
        The package with the fewest allowed versions; ties go to the package
        registered first. Packages with no allowed versions come first so that
        the failure is reported without further guessing.
    """
    package, _, _ = min(candidates, key=lambda item: (item[1], item[2]))
    return package
