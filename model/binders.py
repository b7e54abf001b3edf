"""
Boundary binders for constrained segments (model/binders.py).

A binder is called as binder(model, left_output, right_output) and sets the
model's free fields so that it matches its neighbors at the boundaries.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .primitives import Constant, Line

Binder = Callable[[Any, Any, Any], None]


@dataclass(frozen=True)
class LineBetween:
    """
    Fit a line through (x_left, y_left) and (x_right, y_right).

    Expects a model with writable k and m fields.
    """
    x_left: float
    x_right: float

    def __post_init__(self):
        if self.x_left == self.x_right:
            raise ValueError(
                f"LineBetween: boundaries must differ, got x_left == x_right == {self.x_left}"
            )

    def __call__(self, line: Line, y_left: float, y_right: float) -> None:
        k = (y_right - y_left) / (self.x_right - self.x_left)
        line.k = k
        line.m = y_left - k * self.x_left


@dataclass(frozen=True)
class MeanLevel:
    """Set a constant model to the mean of both boundary outputs."""

    def __call__(self, model: Constant, y_left: float, y_right: float) -> None:
        model.c = 0.5 * (y_left + y_right)


_BINDERS: Dict[str, Callable[..., Binder]] = {
    'line_between': lambda left, right: LineBetween(left, right),
    'mean_level': lambda left, right: MeanLevel(),
}


def get_binder(name: str, left: float, right: float) -> Binder:
    """
    Build a binder by name for a segment bounded by [left, right].

    Raises:
        KeyError: If binder not found
    """
    if name not in _BINDERS:
        raise KeyError(f"Unknown binder: {name}. Available: {list(_BINDERS.keys())}")
    return _BINDERS[name](left, right)


def list_binders() -> List[str]:
    return sorted(_BINDERS.keys())
