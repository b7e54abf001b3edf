"""Utility modules for pwfit."""

from .canonical import canonicalize, config_hash, combination_id
from .reason_codes import (
    E_SCHEMA, E_CONFIG, E_EMPTY_SPACE, E_ABSENT_MODEL,
    E_NONFINITE_SCORE, E_DATA, REASON_CODES
)

__all__ = [
    'canonicalize', 'config_hash', 'combination_id',
    'E_SCHEMA', 'E_CONFIG', 'E_EMPTY_SPACE', 'E_ABSENT_MODEL',
    'E_NONFINITE_SCORE', 'E_DATA', 'REASON_CODES',
]
