"""
Model and domain contracts (model/base.py).

- Model: evaluate(x) -> output, pure and safe under concurrent calls
- Domain: accepts(x) -> bool, pure predicate selecting a segment
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Optional

import numpy as np


class Model(ABC):
    """
    Base class for sub-models of a piecewise model.

    Subclasses implement evaluate(). Dataclass subclasses get params()
    for free.
    """

    @abstractmethod
    def evaluate(self, x: Any) -> Any:
        pass

    def __call__(self, x: Any) -> Any:
        return self.evaluate(x)

    def evaluate_many(self, xs) -> np.ndarray:
        return np.asarray([self.evaluate(x) for x in xs])

    def params(self) -> Dict[str, Any]:
        """Current parameter values keyed by field name."""
        try:
            return {f.name: getattr(self, f.name) for f in fields(self)}
        except TypeError:
            return dict(vars(self))


class Domain(ABC):
    """Predicate selecting which segment handles an input."""

    @abstractmethod
    def accepts(self, x: Any) -> bool:
        pass

    def __call__(self, x: Any) -> bool:
        return self.accepts(x)


@dataclass(frozen=True)
class Interval(Domain):
    """
    Half-open interval [lo, hi) on scalar inputs.

    lo=None / hi=None leave that side unbounded. closed_hi=True makes the
    upper bound inclusive.
    """
    lo: Optional[float] = None
    hi: Optional[float] = None
    closed_hi: bool = False

    def accepts(self, x: Any) -> bool:
        if self.lo is not None and x < self.lo:
            return False
        if self.hi is not None:
            if self.closed_hi:
                return x <= self.hi
            return x < self.hi
        return True


@dataclass(frozen=True)
class Everywhere(Domain):
    """Domain accepting every input."""

    def accepts(self, x: Any) -> bool:
        return True


def as_predicate(domain: Any) -> Callable[[Any], bool]:
    """
    Normalize a domain to a plain predicate.

    Accepts Domain instances, objects exposing accepts(), or any callable.

    Raises:
        TypeError: If domain is neither
    """
    accepts = getattr(domain, 'accepts', None)
    if callable(accepts):
        return accepts
    if callable(domain):
        return domain
    raise TypeError(f"Domain must be callable or expose accepts(), got {type(domain).__name__}")
