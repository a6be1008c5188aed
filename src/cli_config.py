"""CLI configuration overrides for resolver tunables.

Kept out of lockstep.py to keep the entrypoint slim. Config file values are
applied first; CLI flags then win.
"""

from __future__ import annotations

import logging

from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def load_config(args) -> None:
    """Overlay the YAML config file (explicit ``--config`` or default locations)."""
    apply_config(_load_yaml_config(getattr(args, "CONFIG", None)))


def apply_resolver_overrides(args) -> None:
    """Apply CLI overrides for resolver and registry settings."""
    if getattr(args, "PREFER", None):
        Constants.DEFAULT_PREFERENCE = args.PREFER
    if getattr(args, "MAX_STEPS", None) is not None:
        if args.MAX_STEPS < 0:
            raise ValueError("--max-steps must not be negative")
        Constants.MAX_STEPS = int(args.MAX_STEPS)
    if getattr(args, "REGISTRY", None):
        Constants.REGISTRY_URL = args.REGISTRY
    logger.debug(
        "Resolver settings: prefer=%s max_steps=%s registry=%s",
        Constants.DEFAULT_PREFERENCE,
        Constants.MAX_STEPS,
        Constants.REGISTRY_URL,
    )
