"""Package universe read from a YAML (or JSON) index file.

Layout::

    packages:
      a:
        "1.0.0":
          b: ">=1.0"
        "2.0.0": ["b:^1.0", "c"]
    requirements:       # optional, used by the CLI when no -r is given
      - "a:>=1.0"

The ``packages`` wrapper may be omitted, in which case every top-level key
other than ``requirements`` is a package. Quote version keys: YAML reads an
unquoted ``1.10`` as the float ``1.1``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import yaml

from common.logging_utils import extra_context
from versioning.models import Requirement

from .memory import InMemorySource, coerce_dependencies

logger = logging.getLogger(__name__)


class IndexFileSource(InMemorySource):
    """An :class:`InMemorySource` populated from a file.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML/JSON.
        ValueError: If the document does not have the expected shape.
    """

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path
        with open(path, "r", encoding="utf-8") as fh:
            document = yaml.safe_load(fh) or {}
        if not isinstance(document, dict):
            raise ValueError(f"{path}: top level must be a mapping")

        self.requirements: List[Requirement] = coerce_dependencies(document.get("requirements"))
        packages: Dict[Any, Any] = document.get("packages")
        if packages is None:
            packages = {k: v for k, v in document.items() if k != "requirements"}
        if not isinstance(packages, dict):
            raise ValueError(f"{path}: 'packages' must be a mapping")

        count = 0
        for name, versions in packages.items():
            if versions is None:
                versions = {}
            if not isinstance(versions, dict):
                raise ValueError(f"{path}: versions of {name!r} must be a mapping")
            for version, deps in versions.items():
                if not isinstance(version, str):
                    logger.warning(
                        "Skipping unquoted version key %r for %s in %s; quote it to keep its exact text",
                        version,
                        name,
                        path,
                        extra=extra_context(event="index_load", component="source", package=str(name)),
                    )
                    continue
                self.add(str(name), str(version), deps)
                count += 1
        logger.info(
            "Loaded %d versions of %d packages from %s",
            count,
            len(packages),
            path,
            extra=extra_context(event="index_load", component="source", outcome="success"),
        )
