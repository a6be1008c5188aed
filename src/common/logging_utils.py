"""Logging helpers shared by the solver, sources and CLI.

Structured fields are attached through ``extra=extra_context(...)`` so that
handlers which understand them can render events, while the default format
keeps plain human-readable messages.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from constants import Constants

_SENSITIVE_QUERY_KEYS = ("token", "key", "secret", "password", "auth")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    The level is taken from ``level``, then ``LOCKSTEP_LOG_LEVEL``, then INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level_value)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping, dropping unset fields."""
    return {key: value for key, value in fields.items() if value is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def redact(value: str) -> str:
    """Mask all but the first characters of a secret value."""
    if not value:
        return value
    return value[:2] + "***"


def safe_url(url: str) -> str:
    """Strip credentials and sensitive query values from a URL for logging."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    netloc = parts.netloc.rsplit("@", 1)[-1]
    query = parts.query
    if query:
        pairs = []
        for pair in query.split("&"):
            key, _, value = pair.partition("=")
            if any(s in key.lower() for s in _SENSITIVE_QUERY_KEYS):
                value = redact(value)
            pairs.append(f"{key}={value}" if value else key)
        query = "&".join(pairs)
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._end = time.perf_counter()
        return False

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
