"""Runtime configuration: YAML file, environment and CLI overrides.

Precedence from lowest to highest: built-in Constants defaults, YAML config,
DEVLOCK_* environment variables, CLI flags. Everything lands on Constants;
``build_strategy`` then turns the result into an explicit
ResolutionStrategy so the resolver itself never reads global toggles.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

from constants import Constants, ProtocolMode, _load_yaml_config, apply_config
from lock.resolve import ResolutionStrategy

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(value: str) -> Optional[bool]:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return None


def apply_file_config(path: Optional[str] = None) -> None:
    """Load the YAML config (explicit path or default locations) onto Constants.

    Invalid values are logged and skipped key by key.
    """
    cfg = _load_yaml_config(path)
    if not cfg:
        if path:
            logger.warning("Config file not found or empty: %s", path)
        return
    apply_config(cfg)


def apply_env_overrides(environ: Optional[Mapping[str, str]] = None) -> None:
    """Apply DEVLOCK_* environment overrides onto Constants."""
    env = os.environ if environ is None else environ
    if env.get("DEVLOCK_SEARCH_URL"):
        Constants.SEARCH_API_BASE = env["DEVLOCK_SEARCH_URL"].rstrip("/")
    if env.get("DEVLOCK_BINARY_CACHE"):
        Constants.BINARY_CACHE_URL = env["DEVLOCK_BINARY_CACHE"].rstrip("/")
    if env.get("DEVLOCK_SYSTEM"):
        Constants.SYSTEM = env["DEVLOCK_SYSTEM"]
    protocol = env.get("DEVLOCK_PROTOCOL")
    if protocol:
        try:
            Constants.PROTOCOL = ProtocolMode(protocol.strip().lower()).value
        except ValueError:
            logger.warning("Ignoring unknown DEVLOCK_PROTOCOL=%s", protocol)
    store_paths = env.get("DEVLOCK_STORE_PATHS")
    if store_paths is not None:
        parsed = _parse_bool(store_paths)
        if parsed is None:
            logger.warning("Ignoring non-boolean DEVLOCK_STORE_PATHS=%s", store_paths)
        else:
            Constants.FETCH_STORE_PATHS = parsed


def apply_cli_overrides(args: Any) -> None:
    """Apply parsed CLI flags onto Constants (highest precedence)."""
    if getattr(args, "SEARCH_URL", None):
        Constants.SEARCH_API_BASE = args.SEARCH_URL.rstrip("/")
    if getattr(args, "BINARY_CACHE", None):
        Constants.BINARY_CACHE_URL = args.BINARY_CACHE.rstrip("/")
    if getattr(args, "SYSTEM", None):
        Constants.SYSTEM = args.SYSTEM
    if getattr(args, "PROTOCOL", None):
        Constants.PROTOCOL = ProtocolMode(args.PROTOCOL).value
    if getattr(args, "STORE_PATHS", None) is not None:
        Constants.FETCH_STORE_PATHS = bool(args.STORE_PATHS)


def build_strategy() -> ResolutionStrategy:
    """Snapshot the configured protocol and store-path flag."""
    return ResolutionStrategy(
        protocol=ProtocolMode(Constants.PROTOCOL),
        fetch_store_paths=bool(Constants.FETCH_STORE_PATHS),
    )
