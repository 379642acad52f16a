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
    USER_ERROR = 3
    RESOLUTION_ERROR = 4


class ProtocolMode(Enum):
    """Remote resolution protocols supported by the search service.

    Args:
        Enum (string): Protocol name as accepted on the CLI and in config.
    """

    LEGACY = "legacy"
    ENRICHED = "enriched"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SEARCH_API_BASE = "https://search.devbox.sh"
    SEARCH_RESOLVE_PATH = "/v1/resolve"
    SEARCH_RESOLVE_PATH_V2 = "/v2/resolve"
    SEARCH_SOURCE = "remote-search"
    BINARY_CACHE_URL = "https://cache.nixos.org"
    NIXPKGS_FLAKE_REF = "github:NixOS/nixpkgs"
    DEFAULT_SYSTEM = "x86_64-linux"
    RUNX_PREFIX = "runx:"
    GITHUB_API_BASE = "https://api.github.com"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for search and GitHub requests
    # Binary cache lookups have no deadline unless configured.
    STORE_REQUEST_TIMEOUT: Optional[float] = None

    # Runtime tunables (overridden by YAML config, env and CLI)
    SYSTEM: Optional[str] = None
    PROTOCOL = ProtocolMode.LEGACY.value
    FETCH_STORE_PATHS = False

    CONFIG_ENV = "DEVLOCK_CONFIG"
    CONFIG_FILENAMES = ["devlock.yml", "devlock.yaml"]
    CONFIG_USER_PATH = os.path.join("~", ".config", "devlock", "devlock.yml")


def _config_candidates() -> list:
    """Return config file paths in lookup order."""
    paths = []
    env_path = os.environ.get(Constants.CONFIG_ENV)
    if env_path:
        paths.append(env_path)
    paths.extend(Constants.CONFIG_FILENAMES)
    paths.append(os.path.expanduser(Constants.CONFIG_USER_PATH))
    return paths


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first readable YAML config file.

    Args:
        path: Explicit config path. When omitted the default locations are
            searched.

    Returns:
        Parsed mapping, or an empty dict when no usable file exists.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    candidates = [path] if path else _config_candidates()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", candidate, exc)
            continue
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: top level is not a mapping", candidate)
            continue
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}

def _url(value: Any) -> str:
    return str(value).rstrip("/")


def _timeout(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _protocol(value: Any) -> str:
    return ProtocolMode(str(value).lower()).value


# (section, key, Constants attribute, converter, whether an explicit null applies)
_CONFIG_KEYS = [
    ("search", "base_url", "SEARCH_API_BASE", _url, False),
    ("search", "timeout", "REQUEST_TIMEOUT", _timeout, False),
    ("store", "binary_cache", "BINARY_CACHE_URL", _url, False),
    ("store", "timeout", "STORE_REQUEST_TIMEOUT", _timeout, True),
    ("resolution", "protocol", "PROTOCOL", _protocol, False),
    ("resolution", "store_paths", "FETCH_STORE_PATHS", bool, False),
    ("runx", "github_api_base", "GITHUB_API_BASE", _url, False),
    (None, "system", "SYSTEM", str, False),
]


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply a parsed config mapping onto Constants.

    Each key is converted on its own, so an invalid value is logged and
    skipped while the remaining keys still apply. Unknown keys are ignored.
    """
    for section, key, attr, convert, null_applies in _CONFIG_KEYS:
        scope = cfg if section is None else cfg.get(section)
        if not isinstance(scope, dict) or key not in scope:
            continue
        value = scope[key]
        if value is None and not null_applies:
            continue
        if value == "" and convert is not bool:
            continue
        name = key if section is None else f"{section}.{key}"
        try:
            setattr(Constants, attr, convert(value))
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring invalid config value for %s: %s", name, exc)
