"""Observation data handling."""

from .observations import load_observations, synthesize_observations, sample_grid
from .validate import validate_observations, ValidationReport

__all__ = [
    'load_observations', 'synthesize_observations', 'sample_grid',
    'validate_observations', 'ValidationReport',
]
