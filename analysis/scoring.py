"""
Fit scores for piecewise models (analysis/scoring.py).

Scores compare model predictions to observations at the observed inputs.
Zero-variance and size-mismatch inputs raise ValueError; searches never
intercept these errors.
"""

from typing import Any, Callable, Dict, Tuple

import numpy as np
from scipy import stats


def _as_pair(predicted, observed) -> Tuple[np.ndarray, np.ndarray]:
    p = np.asarray(predicted, dtype=float)
    o = np.asarray(observed, dtype=float)
    if p.shape != o.shape or p.size == 0:
        raise ValueError(
            f"Arrays must have same non-zero size, got {p.shape} and {o.shape}"
        )
    return p, o


def pearson_correlation(predicted, observed) -> float:
    """
    Pearson correlation coefficient.

    Raises:
        ValueError: On size mismatch, empty input, or zero variance
    """
    p, o = _as_pair(predicted, observed)

    dp = p - p.mean()
    do = o - o.mean()
    denominator = np.sqrt(np.sum(dp * dp) * np.sum(do * do))

    if denominator == 0.0:
        raise ValueError("Zero variance in data")

    return float(np.sum(dp * do) / denominator)


def spearman_correlation(predicted, observed) -> float:
    """
    Spearman rank correlation.

    Raises:
        ValueError: On size mismatch, empty input, or zero variance
    """
    p, o = _as_pair(predicted, observed)
    if np.all(p == p[0]) or np.all(o == o[0]):
        raise ValueError("Zero variance in data")
    rho, _ = stats.spearmanr(p, o)
    return float(rho)


def mse(predicted, observed) -> float:
    """Mean squared error. NaN predictions propagate to a NaN score."""
    p, o = _as_pair(predicted, observed)
    d = p - o
    return float(np.mean(d * d))


def neg_mse(predicted, observed) -> float:
    """Negated MSE so that higher is better."""
    return -mse(predicted, observed)


# name -> (metric, higher_is_better)
SCORES: Dict[str, Tuple[Callable[[Any, Any], float], bool]] = {
    'pearson': (pearson_correlation, True),
    'spearman': (spearman_correlation, True),
    'mse': (mse, False),
    'neg_mse': (neg_mse, True),
}


def make_scorer(name: str, xs, ys) -> Tuple[Callable[[Any], float], bool]:
    """
    Build a model -> score function over fixed observations.

    Args:
        name: Key of SCORES
        xs: Observed inputs
        ys: Observed outputs

    Returns:
        (score_fn, maximize)

    Raises:
        KeyError: If name is not a known score
    """
    if name not in SCORES:
        raise KeyError(f"Unknown score: {name}. Available: {sorted(SCORES.keys())}")

    metric, maximize = SCORES[name]
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)

    def score_fn(model) -> float:
        return metric(model.evaluate_many(xs), ys)

    return score_fn, maximize
