"""
Canonical config serialization for deterministic fit and combination IDs.

Float precision: 10 decimal places so equal configs hash equally across
sessions and platforms.
"""

import hashlib
import json
from typing import Any, Dict, Optional

import numpy as np


def _serialize_value(value: Any) -> Any:
    """Serialize a single value with deterministic float formatting."""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (float, np.floating)):
        return f"{float(value):.10f}"
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    return value


def canonicalize(config: Dict[str, Any]) -> str:
    """
    Convert a config dict to a canonical JSON string.

    Keys are sorted at all levels and floats use 10 decimal places.
    """
    return json.dumps(_serialize_value(config), sort_keys=True, separators=(',', ':'))


def config_hash(config: Dict[str, Any]) -> str:
    """Full sha256 of the canonical config."""
    return hashlib.sha256(canonicalize(config).encode()).hexdigest()


def combination_id(config: Dict[str, Any], global_index: Optional[int] = None) -> str:
    """
    Short ID of a problem config, or of one combination within it.

    Returns:
        First 12 characters of sha256
    """
    payload = {'config': config}
    if global_index is not None:
        payload['global_index'] = int(global_index)
    return hashlib.sha256(canonicalize(payload).encode()).hexdigest()[:12]
