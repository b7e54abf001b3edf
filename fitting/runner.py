"""
Fit runner (fitting/runner.py).

Order of a fit:
1. Load problem YAML (required fields + schema)
2. Build the orchestrator
3. Load and validate observations (integrity gate)
4. Exhaustive search (joblib threads, or sequential when n_jobs == 1)
5. Parameter table of the best combination
6. Save manifest.json + best.md
"""

import json
import logging
import platform
import subprocess
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import joblib
import numpy as np
import pandas as pd
import scipy

from analysis.reports import combination_frame, generate_fit_report
from analysis.scoring import make_scorer
from data.observations import load_observations
from data.validate import validate_observations
from search.parallel import ProgressFn, SearchResult, parallel_search, sequential_search
from utils import reason_codes
from utils.canonical import combination_id, config_hash
from . import config as defaults
from .problem import build_orchestrator, load_problem_config, segment_sizes

logger = logging.getLogger(__name__)


@dataclass
class FitResult:
    """Result of a complete fit."""
    name: str
    n_total: int
    search: Optional[SearchResult] = None
    best_params: Optional[pd.DataFrame] = None
    manifest: Dict[str, Any] = field(default_factory=dict)
    output_dir: Optional[Path] = None
    dry_run: bool = False

    @property
    def best_index(self) -> Optional[int]:
        return self.search.best_index if self.search is not None else None

    @property
    def best_score(self) -> Optional[float]:
        return self.search.best_score if self.search is not None else None


def resolve_data(
    config: dict,
    config_path: Union[str, Path],
    data: Optional[Union[pd.DataFrame, str, Path]] = None,
) -> pd.DataFrame:
    """
    Observations for a fit: explicit DataFrame or path, else config['data']['path'].

    A relative config path is resolved against the config file's directory
    when it does not exist relative to the working directory.

    Raises:
        ValueError: If no data source is given
    """
    if isinstance(data, pd.DataFrame):
        return data
    if data is not None:
        return load_observations(data)

    path = (config.get('data') or {}).get('path')
    if not path:
        raise ValueError(
            f"No observations for {config['name']}: pass data or set data.path in the config"
        )

    path = Path(path)
    if not path.is_absolute() and not path.exists():
        path = Path(config_path).parent / path
    return load_observations(path)


def run_fit(
    config_path: str,
    data: Optional[Union[pd.DataFrame, str, Path]] = None,
    output_dir: Optional[str] = None,
    n_jobs: Optional[int] = None,
    dry_run: bool = False,
    progress: Optional[ProgressFn] = None,
) -> FitResult:
    """
    Fit a piecewise model to observations by exhaustive search.

    Args:
        config_path: Problem YAML
        data: DataFrame with x, y columns, or a CSV path (default: config data.path)
        output_dir: Results root; results go to <output_dir>/fits/<name>/
        n_jobs: joblib workers (default: search.n_jobs from config, then defaults)
        dry_run: Only build the orchestrator and count combinations
        progress: Optional callback(done, total)

    Returns:
        FitResult

    Raises:
        ValueError: If observations fail validation
    """
    start_time = time.time()

    config = load_problem_config(config_path)
    name = config['name']
    search_cfg = config.get('search') or {}

    orchestrator = build_orchestrator(config)
    n_total = orchestrator.size()

    if dry_run:
        print(f"Problem: {name}")
        for seg in segment_sizes(orchestrator):
            kind = 'constrained' if seg['constrained'] else 'free'
            print(f"  {seg['name']}: {seg['size']} ({kind})")
        print(f"Total combinations: {n_total}")
        return FitResult(name=name, n_total=n_total, dry_run=True)

    observations = resolve_data(config, config_path, data)
    validation = validate_observations(
        observations, min_points=defaults.get('data', 'min_points', 2)
    )
    if not validation.passed:
        raise ValueError(f"{reason_codes.E_DATA}: Data validation failed: {validation.errors}")
    for w in validation.warnings:
        logger.warning(f"{name}: {w}")

    score_name = search_cfg.get('score') or defaults.get('search', 'score', 'pearson')
    score_fn, maximize = make_scorer(score_name, observations['x'], observations['y'])
    override = search_cfg.get('maximize', defaults.get('search', 'maximize'))
    if override is not None:
        maximize = bool(override)

    if n_jobs is None:
        n_jobs = search_cfg.get('n_jobs', defaults.get('search', 'n_jobs', -1))
    n_chunks = search_cfg.get('n_chunks') or defaults.get('search', 'n_chunks')

    print(f"Searching {n_total} combinations of {name} with {n_jobs} workers...")

    if n_jobs == 1:
        result = sequential_search(orchestrator, score_fn, maximize=maximize)
    else:
        result = parallel_search(
            orchestrator,
            score_fn,
            n_jobs=n_jobs,
            maximize=maximize,
            n_chunks=n_chunks,
            progress=progress,
            progress_every=defaults.get('search', 'progress_every', 10000),
        )

    best_params = None
    if result.found:
        best_params = combination_frame(orchestrator, result.best_index)
    else:
        logger.warning(f"{name}: no combination produced a finite score ({result.skipped})")

    runtime = time.time() - start_time

    manifest = build_manifest(
        config=config,
        config_path=config_path,
        result=result,
        orchestrator=orchestrator,
        observations=observations,
        score_name=score_name,
        n_jobs=n_jobs,
        runtime_seconds=runtime,
    )

    fit_dir = None
    if output_dir:
        fit_dir = save_fit_results(output_dir, name, result, best_params, manifest)

    return FitResult(
        name=name,
        n_total=n_total,
        search=result,
        best_params=best_params,
        manifest=manifest,
        output_dir=fit_dir,
    )


def _git_commit() -> str:
    try:
        return subprocess.check_output(
            ['git', 'rev-parse', '--short', 'HEAD'],
            stderr=subprocess.DEVNULL,
        ).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def build_manifest(
    config: dict,
    config_path: str,
    result: SearchResult,
    orchestrator,
    observations: pd.DataFrame,
    score_name: str,
    n_jobs: int,
    runtime_seconds: float,
) -> dict:
    """Build fit manifest."""
    best_id = None
    if result.found:
        best_id = combination_id(config, result.best_index)

    return {
        'problem_name': config['name'],
        'config_path': str(config_path),
        'git_commit': _git_commit(),
        'config_hash': config_hash(config),
        'strategy': orchestrator.strategy_cls.KEY,
        'score': score_name,
        'n_jobs': n_jobs,
        'segments': segment_sizes(orchestrator),
        'search': result.to_dict(),
        'best_combination_id': best_id,
        'observations': {
            'n_points': int(len(observations)),
            'x_min': float(observations['x'].min()),
            'x_max': float(observations['x'].max()),
        },
        'runtime_seconds': round(runtime_seconds, 2),
        'environment': {
            'python_version': sys.version.split()[0],
            'numpy_version': np.__version__,
            'pandas_version': pd.__version__,
            'scipy_version': scipy.__version__,
            'joblib_version': joblib.__version__,
            'platform': platform.system() + '-' + platform.machine(),
        },
    }


def save_fit_results(
    output_dir: str,
    name: str,
    result: SearchResult,
    best_params: Optional[pd.DataFrame],
    manifest: dict,
) -> Path:
    """Save manifest.json and best.md to <output_dir>/fits/<name>/."""
    fit_dir = Path(output_dir) / 'fits' / name
    fit_dir.mkdir(parents=True, exist_ok=True)

    with open(fit_dir / 'manifest.json', 'w') as f:
        json.dump(manifest, f, indent=2, default=str)

    params = best_params if best_params is not None else pd.DataFrame()
    generate_fit_report(name, result.to_dict(), params, output_path=fit_dir / 'best.md')

    print(f"Results saved to {fit_dir}")
    return fit_dir
