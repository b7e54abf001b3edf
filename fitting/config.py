"""
Search defaults (fitting/config.py).

Values here apply when a problem YAML leaves them out. The file is
fitting/config/defaults.yaml unless PWFIT_CONFIG points elsewhere.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_VAR = "PWFIT_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "config" / "defaults.yaml"

_cache: Optional[Dict[str, Any]] = None


def _resolve_path(config_path: Optional[str]) -> Path:
    if config_path:
        return Path(config_path)
    return Path(os.environ.get(ENV_VAR) or DEFAULTS_PATH)


def get_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Defaults dict, loaded once and cached.

    An explicit config_path always reloads and replaces the cache.

    Raises:
        FileNotFoundError: If the resolved file is missing
        yaml.YAMLError: If it is not valid YAML
    """
    global _cache
    if _cache is not None and config_path is None:
        return _cache

    path = _resolve_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        _cache = yaml.safe_load(f) or {}
    logger.debug(f"Loaded defaults from {path} (sections: {sorted(_cache)})")
    return _cache


def get(section: str, key: str, default: Any = None) -> Any:
    """
    One value from a section, e.g. get('search', 'n_jobs', -1).

    Missing sections and keys (or a null section) give default.
    """
    return (get_config().get(section) or {}).get(key, default)


def reset() -> None:
    """Drop the cache; the next get_config() rereads the file."""
    global _cache
    _cache = None
