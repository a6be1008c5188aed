"""Interface between the solver and whatever knows about packages."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from semantic_version import Version

from versioning.models import Package, Requirement


class PackageSource(ABC):
    """Read-only view of a package universe.

    Implementations may block (network, disk). The solver calls them from a
    single thread and never retries a failed query.
    """

    @abstractmethod
    def list_versions(self, package: Package) -> Sequence[Version]:
        """Return the available versions of ``package``, newest first.

        An unknown package yields an empty sequence rather than an error.
        """

    @abstractmethod
    def dependencies_of(self, package: Package, version: Version) -> Sequence[Requirement]:
        """Return the requirements declared by ``package`` at ``version``.

        Raises:
            SourceUnavailable: If the metadata cannot be obtained.
        """
