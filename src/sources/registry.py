"""Package source backed by a JSON index served over HTTP.

Each package is one document at ``<base_url><canonical-name>.json``::

    {"name": "a", "versions": {"1.0.0": {"dependencies": {"b": ">=1.0"}}}}

Names are canonicalized the PyPI way (``packaging.utils.canonicalize_name``)
both for the URL and for the packages the source returns.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from packaging.utils import canonicalize_name
from semantic_version import Version

from constants import Constants
from common.http_client import get_json
from common.logging_utils import extra_context, safe_url
from errors import SourceUnavailable, VersionParseError
from versioning.models import Package, Requirement
from versioning.parser import parse_range, parse_version

from .base import PackageSource

logger = logging.getLogger(__name__)


class RegistrySource(PackageSource):
    """Fetches package documents on demand, one request per package."""

    def __init__(self, base_url: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> None:
        base = base_url or Constants.REGISTRY_URL
        self.base_url = base if base.endswith("/") else base + "/"
        self.headers = {"Accept": "application/json"}
        if headers:
            self.headers.update(headers)
        self._documents: Dict[str, Optional[Dict[Version, List[Requirement]]]] = {}

    def _url(self, package: Package) -> str:
        return f"{self.base_url}{canonicalize_name(package.name)}.json"

    def _document(self, package: Package) -> Optional[Dict[Version, List[Requirement]]]:
        name = canonicalize_name(package.name)
        if name in self._documents:
            return self._documents[name]

        url = self._url(package)
        status, _, data = get_json(url, headers=self.headers)
        if status == 404:
            logger.warning(
                "Package %s not found in registry",
                package,
                extra=extra_context(
                    event="http_response",
                    component="registry_source",
                    outcome="not_found",
                    status_code=404,
                    target=safe_url(url),
                ),
            )
            self._documents[name] = None
            return None
        if status != 200:
            logger.error(
                "Registry request for %s failed",
                package,
                extra=extra_context(
                    event="http_error",
                    component="registry_source",
                    outcome="error",
                    status_code=status,
                    target=safe_url(url),
                ),
            )
            raise SourceUnavailable(package, reason=f"HTTP {status}" if status else "request failed")
        if not isinstance(data, dict) or not isinstance(data.get("versions", {}), dict):
            raise SourceUnavailable(package, reason="malformed registry document")

        document = self._parse_versions(package, data.get("versions") or {})
        self._documents[name] = document
        return document

    @staticmethod
    def _parse_versions(package: Package, versions: Dict[str, Any]) -> Dict[Version, List[Requirement]]:
        parsed: Dict[Version, List[Requirement]] = {}
        for text, meta in versions.items():
            try:
                version = parse_version(text)
            except VersionParseError:
                logger.warning("Skipping unparseable version %r of %s", text, package)
                continue
            try:
                deps = (meta or {}).get("dependencies") or {}
                parsed[version] = [
                    Requirement(Package(canonicalize_name(dep)), parse_range(spec))
                    for dep, spec in deps.items()
                ]
            except (AttributeError, VersionParseError) as exc:
                raise SourceUnavailable(package, version, f"bad dependency metadata: {exc}") from exc
        return parsed

    def list_versions(self, package: Package) -> Sequence[Version]:
        document = self._document(package)
        if document is None:
            return []
        return sorted(document, reverse=True)

    def dependencies_of(self, package: Package, version: Version) -> Sequence[Requirement]:
        document = self._document(package)
        if document is None or version not in document:
            raise SourceUnavailable(package, version, "version not in registry")
        return list(document[version])
