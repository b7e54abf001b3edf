"""
Index traversal strategies and registry (search/strategies.py).

- One strategy = one traversal order over an IndexSpace
- Registry via ClassVar KEY, not instance field
- Strategies are stateful: reset(space), then next() until None
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Dict, List, Optional, Tuple

from .index_space import IndexSpace, linear_to_multi_index

MultiIndex = Tuple[int, ...]


class IndexStrategy(ABC):
    """
    Base class for index traversal strategies.

    Contract:
    - reset(space) initializes traversal of a new space
    - next() returns the next multi-index, or None once exhausted
    - exactly space.total successful next() calls per reset (0 if total == 0)
    - no duplicates, full coverage
    - next() before any reset() returns None
    """

    KEY: ClassVar[str]

    @abstractmethod
    def reset(self, space: IndexSpace) -> None:
        pass

    @abstractmethod
    def next(self) -> Optional[MultiIndex]:
        pass


# Registry
_REGISTRY: Dict[str, type] = {}
STRATEGY_REGISTRY = _REGISTRY  # Public alias for tests


def register_strategy(cls: type) -> type:
    """
    Decorator to register a strategy class.

    Raises:
        ValueError: If KEY is missing or duplicate
    """
    key = getattr(cls, 'KEY', None)
    if not key:
        raise ValueError(f"{cls.__name__} is missing KEY ClassVar")

    if key in _REGISTRY:
        raise ValueError(f"Duplicate strategy KEY: {key}")

    _REGISTRY[key] = cls
    return cls


def get_strategy(name: str) -> type:
    """
    Get a strategy class by name.

    Raises:
        KeyError: If strategy not found
    """
    if name not in _REGISTRY:
        raise KeyError(
            f"Unknown strategy: {name}. Available: {list(_REGISTRY.keys())}"
        )
    return _REGISTRY[name]


def list_strategies() -> List[str]:
    """Return sorted list of registered strategy KEYs."""
    return sorted(_REGISTRY.keys())


@register_strategy
class EnumerationStrategy(IndexStrategy):
    """
    Forward mixed-radix enumeration.

    Dimension 0 changes fastest; the carry propagates left to right.
    """

    KEY: ClassVar[str] = 'enumeration'

    def __init__(self):
        self._space: Optional[IndexSpace] = None
        self._current: List[int] = []
        self._first = True
        self._finished = True

    def reset(self, space: IndexSpace) -> None:
        self._space = space
        self._current = [0] * space.n_dims
        self._finished = space.total == 0
        self._first = True

    def next(self) -> Optional[MultiIndex]:
        if self._space is None or self._finished:
            return None

        if self._first:
            self._first = False
            return tuple(self._current)

        for i, base in enumerate(self._space.bases):
            self._current[i] += 1
            if self._current[i] < base:
                return tuple(self._current)
            self._current[i] = 0  # carry

        self._finished = True
        return None


@register_strategy
class ReverseEnumerationStrategy(IndexStrategy):
    """
    Reverse enumeration.

    Counts the local ordinal down from total - 1 to 0 and decodes each one
    by repeated modulo/divide, so it visits exactly the forward sequence
    backwards.
    """

    KEY: ClassVar[str] = 'reverse'

    def __init__(self):
        self._space: Optional[IndexSpace] = None
        self._local = 0
        self._finished = True

    def reset(self, space: IndexSpace) -> None:
        self._space = space
        total = space.total
        self._finished = total == 0
        self._local = total - 1 if total > 0 else 0

    def next(self) -> Optional[MultiIndex]:
        if self._space is None or self._finished:
            return None

        idx = linear_to_multi_index(self._space, self._local)

        if self._local == 0:
            self._finished = True
        else:
            self._local -= 1

        return idx
