"""Per-run memoization of package source queries."""
from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

from semantic_version import Version

from common.logging_utils import extra_context, is_debug_enabled, Timer
from versioning.models import Package, Requirement

from .base import PackageSource

logger = logging.getLogger(__name__)


class MemoizedSource(PackageSource):
    """Wraps a source so that repeated queries return the identical answer.

    Version lists are de-duplicated and sorted newest first. Dependencies
    given as an unordered set are sorted so iteration order never depends on
    hashing. Failures are not cached; they end the run anyway.
    """

    def __init__(self, source: PackageSource) -> None:
        self._source = source
        self._versions: Dict[Package, Tuple[Version, ...]] = {}
        self._dependencies: Dict[Tuple[Package, Version], Tuple[Requirement, ...]] = {}
        self.hits = 0
        self.misses = 0

    def list_versions(self, package: Package) -> Sequence[Version]:
        cached = self._versions.get(package)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        with Timer() as t:
            versions = tuple(sorted(set(self._source.list_versions(package)), reverse=True))
        if is_debug_enabled(logger):
            logger.debug(
                "Listed %d versions of %s",
                len(versions),
                package,
                extra=extra_context(
                    event="list_versions",
                    component="source",
                    package=str(package),
                    count=len(versions),
                    duration_ms=t.duration_ms(),
                ),
            )
        self._versions[package] = versions
        return versions

    def dependencies_of(self, package: Package, version: Version) -> Sequence[Requirement]:
        key = (package, version)
        cached = self._dependencies.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        with Timer() as t:
            result = self._source.dependencies_of(package, version)
            if isinstance(result, (set, frozenset)):
                result = sorted(result, key=_requirement_key)
            dependencies = tuple(result)
        if is_debug_enabled(logger):
            logger.debug(
                "Fetched %d dependencies of %s %s",
                len(dependencies),
                package,
                version,
                extra=extra_context(
                    event="dependencies_of",
                    component="source",
                    package=str(package),
                    version=str(version),
                    count=len(dependencies),
                    duration_ms=t.duration_ms(),
                ),
            )
        self._dependencies[key] = dependencies
        return dependencies


def _requirement_key(requirement: Requirement):
    return requirement.package.sort_key, str(requirement.range)
