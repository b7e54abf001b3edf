"""Problem configs, fit runner and the built-in demo."""

from .problem import (
    load_problem_config,
    validate_problem_schema,
    build_orchestrator,
    parse_range,
    parse_domain,
)
from .runner import FitResult, run_fit, build_manifest, save_fit_results
from .demo import build_demo_orchestrator, demo_observations

__all__ = [
    'load_problem_config',
    'validate_problem_schema',
    'build_orchestrator',
    'parse_range',
    'parse_domain',
    'FitResult',
    'run_fit',
    'build_manifest',
    'save_fit_results',
    'build_demo_orchestrator',
    'demo_observations',
]
