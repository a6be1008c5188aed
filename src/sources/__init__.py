"""Package sources: where available versions and their dependencies come from.

This package provides:
- base.py: the PackageSource interface consumed by the solver
- memory.py: an in-memory universe, used by tests and as a building block
- index.py: a universe loaded from a YAML or JSON index file
- registry.py: a JSON index served over HTTP
- cache.py: the per-run memoizing wrapper the resolver applies to any source
"""

from .base import PackageSource
from .cache import MemoizedSource
from .index import IndexFileSource
from .memory import InMemorySource
from .registry import RegistrySource

__all__ = [
    "IndexFileSource",
    "InMemorySource",
    "MemoizedSource",
    "PackageSource",
    "RegistrySource",
]
