"""Data models for packages, versions and requirements."""

from dataclasses import dataclass
from typing import Optional, Tuple

from semantic_version import Version

from .range import Range

# The root package is always decided at this version; it is rendered as "root".
ROOT_VERSION = Version("0.0.0")


@dataclass(frozen=True)
class Package:
    """Package identity within a namespace.

    Two packages with the same name but different ``source`` tags are distinct.
    """
    name: str
    source: Optional[str] = None
    is_root: bool = False

    @classmethod
    def root(cls, name: str = "root") -> "Package":
        """Return the distinguished package standing for the project itself."""
        return cls(name=name, is_root=True)

    @property
    def sort_key(self) -> Tuple[str, str]:
        """Stable ordering key; None sources sort first."""
        return (self.name, self.source or "")

    def __str__(self) -> str:
        if self.source:
            return f"{self.name} ({self.source})"
        return self.name


@dataclass(frozen=True)
class Requirement:
    """A package together with the range of versions it is required in."""
    package: Package
    range: Range

    def __str__(self) -> str:
        if self.range.is_any():
            return str(self.package)
        return f"{self.package} {self.range}"
