"""
Orchestrator segments (core/entries.py).

One entry = one piece of the future piecewise model:
- domain: predicate selecting where the piece is active
- grid:   ParamGrid (or UnitGrid) enumerated for that piece
- cursor: current multi-index, mutated only by sequential iteration

Two kinds:
- FreeEntry: parameters come straight from the grid
- ConstrainedEntry: a blank model from the grid is fit to the outputs of
  its already-built left and right neighbors by a caller-supplied binder

Cursor states: Unset -> reset() -> Positioned | Exhausted -> advance() ->
Positioned | Exhausted. Exhausted is terminal until the next reset().
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type

from search.index_space import (
    IndexSpace,
    linear_to_multi_index,
    make_index_space,
    multi_index_to_linear,
)
from search.strategies import EnumerationStrategy, IndexStrategy, MultiIndex
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ParamCallback = Callable[[Optional[str], int, Any], None]


class Entry(ABC):
    """
    Base class for orchestrator segments.

    build_at() is stateless and never touches the cursor, so it is safe to
    call from many threads. reset()/advance() are not.
    """

    def __init__(
        self,
        domain: Any,
        grid: Any,
        name: Optional[str] = None,
        strategy_cls: Type[IndexStrategy] = EnumerationStrategy,
    ):
        self.domain = domain
        self.grid = grid
        self._name = name
        self._strategy_cls = strategy_cls

        self._space = IndexSpace()
        self._strategy: IndexStrategy = strategy_cls()
        self._current: Optional[MultiIndex] = None

    @property
    def name(self) -> str:
        if self._name:
            return self._name
        factory = getattr(self.grid, 'model_factory', None)
        return getattr(factory, '__name__', type(self.grid).__name__)

    def size(self) -> int:
        """Number of local parameter combinations (1 with no free parameters)."""
        return self.grid.size()

    # Sequential iteration (single thread only)

    def reset(self) -> None:
        """Rebuild the index space and position the cursor on the first variant."""
        self._space = make_index_space(self.grid)
        self._strategy = self._strategy_cls()
        self._strategy.reset(self._space)
        self._current = self._strategy.next()

    def advance(self) -> bool:
        """Move to the next variant. False once exhausted."""
        if self._current is None:
            return False
        self._current = self._strategy.next()
        return self._current is not None

    def current_index(self) -> Optional[MultiIndex]:
        return self._current

    def current_local(self) -> Optional[int]:
        """Cursor encoded as a local ordinal; None if unset, exhausted or empty."""
        if self._current is None:
            return None
        return multi_index_to_linear(self._space, self._current)

    # Stateless access

    def local_from_index(self, idx: Sequence[int]) -> Optional[int]:
        return multi_index_to_linear(make_index_space(self.grid), tuple(idx))

    def decode_local(self, local: int) -> MultiIndex:
        return linear_to_multi_index(make_index_space(self.grid), local)

    def for_each_param_at(self, local: int, fn: ParamCallback) -> None:
        """Call fn(label, param_index, value) for every parameter of variant local."""
        idx = self.decode_local(local)
        self.grid.for_each_param(
            lambda meta, r: fn(meta.label, meta.index, r.value_at(idx[meta.index]))
        )

    def param_values_at(self, local: int) -> List[Tuple[Optional[str], int, Any]]:
        rows = []
        self.for_each_param_at(local, lambda label, i, value: rows.append((label, i, value)))
        return rows

    @abstractmethod
    def build_at(self, local: int, built: Sequence[Optional[Any]], position: int) -> Optional[Any]:
        """
        Build the model of variant local.

        Args:
            local: Local ordinal in [0, size())
            built: Models already built for every position (None if not yet)
            position: This entry's position in the orchestrator

        Returns:
            A new model instance, or None if a required neighbor is absent
        """
        pass

    @abstractmethod
    def is_constrained(self) -> bool:
        pass

    def __repr__(self) -> str:
        kind = 'constrained' if self.is_constrained() else 'free'
        return f"{type(self).__name__}(name={self.name!r}, kind={kind}, size={self.size()})"


class FreeEntry(Entry):
    """Segment whose parameters are chosen directly from its grid."""

    def build_at(self, local: int, built: Sequence[Optional[Any]], position: int) -> Optional[Any]:
        return self.grid.make_model(self.decode_local(local))

    def is_constrained(self) -> bool:
        return False


class ConstrainedEntry(Entry):
    """
    Segment fit between its two neighbors.

    The left neighbor is evaluated at left_input, the right neighbor at
    right_input, and binder(model, left_output, right_output) sets the
    free fields of a blank model built from this entry's own grid.
    """

    def __init__(
        self,
        domain: Any,
        grid: Any,
        left_input: Any,
        right_input: Any,
        binder: Callable[[Any, Any, Any], None],
        name: Optional[str] = None,
        strategy_cls: Type[IndexStrategy] = EnumerationStrategy,
    ):
        super().__init__(domain, grid, name=name, strategy_cls=strategy_cls)
        if not callable(binder):
            raise TypeError(f"{self.name}: binder must be callable")
        self.left_input = left_input
        self.right_input = right_input
        self.binder = binder

    def build_at(self, local: int, built: Sequence[Optional[Any]], position: int) -> Optional[Any]:
        if position == 0 or position + 1 >= len(built):
            raise ConfigurationError(
                f"{self.name}: constrained segment at position {position} of {len(built)} "
                f"needs a neighbor on each side"
            )

        left_model = built[position - 1]
        right_model = built[position + 1]
        if left_model is None or right_model is None:
            logger.debug(f"{self.name}: neighbor not built yet at position {position}")
            return None

        left_out = left_model(self.left_input)
        right_out = right_model(self.right_input)

        model = self.grid.make_model(self.decode_local(local))
        self.binder(model, left_out, right_out)
        return model

    def is_constrained(self) -> bool:
        return True
