"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    UNSATISFIABLE = 3
    INTERNAL_ERROR = 4


class VersionPreferences(Enum):
    """Candidate ordering policies selectable from the CLI and config.

    Args:
        Enum (string): Names of the version preference strategies.
    """

    NEWEST = "newest"
    OLDEST = "oldest"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    ROOT_PACKAGE_NAME = "root"
    SUPPORTED_PREFERENCES = [
        VersionPreferences.NEWEST.value,
        VersionPreferences.OLDEST.value,
    ]
    DEFAULT_PREFERENCE = VersionPreferences.NEWEST.value
    MAX_STEPS = 0  # 0 disables the decision limit
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "LOCKSTEP_LOG_LEVEL"
    ENV_CONFIG = "LOCKSTEP_CONFIG"
    CONFIG_FILE_NAMES = ["lockstep.yml", "lockstep.yaml"]
    REGISTRY_URL = "http://localhost:8080/index/"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3


def _config_candidates() -> list:
    """Return config file paths in lookup order."""
    paths = []
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        paths.append(env_path)
    for name in Constants.CONFIG_FILE_NAMES:
        paths.append(os.path.join(os.getcwd(), name))
    home = os.path.expanduser("~")
    for name in Constants.CONFIG_FILE_NAMES:
        paths.append(os.path.join(home, ".config", "lockstep", name))
    return paths


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first readable YAML config file.

    Args:
        path: Explicit config path. When omitted the default locations are tried.

    Returns:
        Parsed mapping, or an empty dict when no config file is present.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    candidates = [path] if path else _config_candidates()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: top level is not a mapping", candidate)
            return {}
        logger.debug("Loaded config file %s", candidate)
        return data
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Overlay known config sections onto Constants.

    Recognized keys: ``resolver.prefer``, ``resolver.max_steps``,
    ``registry.url``, ``http.timeout``, ``http.retries``.
    """
    resolver = cfg.get("resolver") or {}
    if isinstance(resolver, dict):
        prefer = resolver.get("prefer")
        if prefer in Constants.SUPPORTED_PREFERENCES:
            Constants.DEFAULT_PREFERENCE = prefer
        elif prefer is not None:
            logger.warning("Unknown resolver.prefer value %r, keeping %s", prefer, Constants.DEFAULT_PREFERENCE)
        if resolver.get("max_steps") is not None:
            Constants.MAX_STEPS = int(resolver["max_steps"])

    registry = cfg.get("registry") or {}
    if isinstance(registry, dict) and registry.get("url"):
        Constants.REGISTRY_URL = str(registry["url"])

    http = cfg.get("http") or {}
    if isinstance(http, dict):
        if http.get("timeout") is not None:
            Constants.REQUEST_TIMEOUT = int(http["timeout"])
        if http.get("retries") is not None:
            Constants.HTTP_RETRY_MAX = max(1, int(http["retries"]))
