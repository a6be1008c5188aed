"""In-memory package universe."""
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union

from semantic_version import Version

from errors import SourceUnavailable
from versioning.models import Package, Requirement
from versioning.parser import coerce_requirement, parse_range, parse_version

from .base import PackageSource

PackageLike = Union[Package, str]


def _as_package(value: PackageLike) -> Package:
    return value if isinstance(value, Package) else Package(str(value))


def coerce_dependencies(deps: Any) -> List[Requirement]:
    """Normalize a dependency declaration.

    Accepts a mapping of name to constraint text, or an iterable of anything
    :func:`versioning.parser.coerce_requirement` understands.
    """
    if deps is None:
        return []
    if isinstance(deps, Mapping):
        return [Requirement(_as_package(name), parse_range(spec)) for name, spec in deps.items()]
    return [coerce_requirement(item) for item in deps]


class InMemorySource(PackageSource):
    """A universe held in dictionaries.

    Query counts are kept per package in ``version_queries`` and per
    ``(package, version)`` in ``dependency_queries``.
    """

    def __init__(self, universe: Optional[Mapping[Any, Mapping[Any, Any]]] = None) -> None:
        self._packages: Dict[Package, Dict[Version, List[Requirement]]] = {}
        self._unavailable: Set[Tuple[Package, Optional[Version]]] = set()
        self.version_queries: Counter = Counter()
        self.dependency_queries: Counter = Counter()
        if universe:
            for name, versions in universe.items():
                for version, deps in (versions or {}).items():
                    self.add(name, version, deps)

    def add(self, package: PackageLike, version: Union[Version, str], dependencies: Any = None) -> "InMemorySource":
        """Register ``package`` at ``version`` with its dependencies."""
        self._packages.setdefault(_as_package(package), {})[parse_version(version)] = coerce_dependencies(dependencies)
        return self

    def mark_unavailable(self, package: PackageLike, version: Union[Version, str, None] = None) -> None:
        """Make dependency queries fail, for one version or all of them."""
        parsed = None if version is None else parse_version(version)
        self._unavailable.add((_as_package(package), parsed))

    @property
    def packages(self) -> List[Package]:
        return sorted(self._packages, key=lambda p: p.sort_key)

    def list_versions(self, package: Package) -> Sequence[Version]:
        self.version_queries[package] += 1
        return sorted(self._packages.get(package, {}), reverse=True)

    def dependencies_of(self, package: Package, version: Version) -> Sequence[Requirement]:
        self.dependency_queries[(package, version)] += 1
        if (package, None) in self._unavailable or (package, version) in self._unavailable:
            raise SourceUnavailable(package, version, "marked unavailable")
        try:
            return list(self._packages[package][version])
        except KeyError:
            raise SourceUnavailable(package, version, "unknown version") from None

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)
