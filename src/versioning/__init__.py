"""Version and requirement model.

- range.py: normalized interval sets of versions and their algebra
- models.py: Package and Requirement identities
- parser.py: version, constraint and requirement text parsing
"""

from semantic_version import Version

from .range import Interval, Range
from .models import Package, Requirement, ROOT_VERSION
from .parser import coerce_requirement, parse_range, parse_requirement, parse_version

__all__ = [
    "Interval",
    "Package",
    "Range",
    "Requirement",
    "ROOT_VERSION",
    "Version",
    "coerce_requirement",
    "parse_range",
    "parse_requirement",
    "parse_version",
]
