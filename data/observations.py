"""
Observation loading and synthesis (data/observations.py).

Observations are a DataFrame with float columns x (input) and y (output).
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def load_observations(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load observations from CSV with x and y columns.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If x or y columns are missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Observation file not found: {path}")

    df = pd.read_csv(path)
    missing = [c for c in ('x', 'y') if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing columns {missing}")

    df = df[['x', 'y']].astype(float)
    logger.debug(f"Loaded {len(df)} observations from {path}")
    return df


def sample_grid(start: float, stop: float, step: float) -> np.ndarray:
    """Inputs start, start+step, ... <= stop (inclusive within 1e-12)."""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    n = int(np.floor((stop - start) / step + 1e-12)) + 1
    return start + step * np.arange(max(n, 0))


def synthesize_observations(
    model,
    start: float = -5.0,
    stop: float = 5.0,
    step: float = 0.05,
    noise_std: float = 0.0,
    seed: int = 42,
) -> pd.DataFrame:
    """
    Sample a model on a regular grid, optionally with gaussian noise.

    Args:
        model: Anything exposing evaluate(x)
        start, stop, step: Input grid
        noise_std: Standard deviation of additive noise on y
        seed: Random seed for the noise

    Returns:
        DataFrame with x, y columns
    """
    xs = sample_grid(start, stop, step)
    ys = np.asarray([model.evaluate(x) for x in xs], dtype=float)

    if noise_std > 0:
        rng = np.random.default_rng(seed)
        ys = ys + rng.normal(0.0, noise_std, size=len(ys))

    return pd.DataFrame({'x': xs, 'y': ys})
