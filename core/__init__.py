"""Segment entries and the orchestrator composing them."""

from .errors import ConfigurationError
from .entries import Entry, FreeEntry, ConstrainedEntry
from .orchestrator import Orchestrator, Snapshot

__all__ = [
    'ConfigurationError',
    'Entry', 'FreeEntry', 'ConstrainedEntry',
    'Orchestrator', 'Snapshot',
]
