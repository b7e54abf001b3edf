"""
Piecewise (segmented) model (model/piecewise.py).

Ordered (domain, model) pairs evaluated by first match. When no domain
accepts an input the sentinel is returned; evaluation never raises for
that case.
"""

import math
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from .base import as_predicate


class PiecewiseModel:
    """
    Composed model built from one combination of segment parameters.

    Args:
        sentinel: Output for inputs no segment accepts. NaN by default;
                  pass a zero default for non-float outputs.

    Note: Insertion order matters. With overlapping domains the first
    matching segment wins. A matching slot whose model is absent (None)
    yields the sentinel.
    """

    def __init__(self, sentinel: Any = math.nan):
        self.sentinel = sentinel
        self._segments: List[Tuple[Any, Callable[[Any], bool], Optional[Any]]] = []

    def add(self, domain: Any, model: Optional[Any]) -> None:
        self._segments.append((domain, as_predicate(domain), model))

    @property
    def segments(self) -> List[Tuple[Any, Optional[Any]]]:
        return [(d, m) for d, _, m in self._segments]

    @property
    def models(self) -> List[Optional[Any]]:
        return [m for _, _, m in self._segments]

    @property
    def complete(self) -> bool:
        """False if any slot has no model."""
        return all(m is not None for _, _, m in self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def evaluate(self, x: Any) -> Any:
        for _, accepts, model in self._segments:
            if accepts(x):
                return self.sentinel if model is None else model(x)
        return self.sentinel

    def __call__(self, x: Any) -> Any:
        return self.evaluate(x)

    def evaluate_many(self, xs) -> np.ndarray:
        """Evaluate point by point. Unmatched points hold the sentinel."""
        return np.asarray([self.evaluate(x) for x in xs])
