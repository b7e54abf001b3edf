"""
Segment orchestrator (core/orchestrator.py).

Composes an ordered list of entries into PiecewiseModels, two ways:

- Sequential: reset() then next() until None. Entry 0 varies fastest
  (odometer). Mutates entry cursors, single thread only.
- Stateless: make_at(global_index). The global index is a mixed-radix
  number whose bases are the entry sizes, entry 0 fastest. Reads only
  immutable grids and domains, safe to call concurrently.

Build order is two-pass: free entries first, then constrained entries,
each of which reads its immediate neighbors. Constrained entries must
therefore sit between two free entries; this is checked at registration
and again before any build.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, Union

from model.piecewise import PiecewiseModel
from search.strategies import EnumerationStrategy, IndexStrategy, MultiIndex, get_strategy
from .entries import ConstrainedEntry, Entry, FreeEntry
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """Position of sequential iteration, for reproducing a combination."""
    step: int
    indices: List[Optional[MultiIndex]] = field(default_factory=list)
    locals: Optional[List[int]] = None
    global_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'step': self.step,
            'indices': [list(i) if i is not None else None for i in self.indices],
            'locals': self.locals,
            'global_index': self.global_index,
        }


class Orchestrator:
    """
    Ordered collection of segments composing one piecewise model.

    Args:
        strategy: Strategy class or registry KEY used for each entry's cursor
        sentinel: Output of built models for inputs no segment accepts
    """

    def __init__(
        self,
        strategy: Union[str, Type[IndexStrategy]] = EnumerationStrategy,
        sentinel: Any = math.nan,
    ):
        self.strategy_cls = get_strategy(strategy) if isinstance(strategy, str) else strategy
        self.sentinel = sentinel
        self._entries: List[Entry] = []

        self._ready = False
        self._finished = False
        self._step = 0
        self._last_indices: List[Optional[MultiIndex]] = []
        self._last_locals: Optional[List[int]] = None

    # Registration

    def add(self, domain: Any, grid: Any, name: Optional[str] = None) -> FreeEntry:
        """Register a free segment."""
        entry = FreeEntry(domain, grid, name=name, strategy_cls=self.strategy_cls)
        self._entries.append(entry)
        self._invalidate()
        logger.debug(f"Added free segment {entry.name} (size={entry.size()})")
        return entry

    def add_constrained(
        self,
        domain: Any,
        grid: Any,
        left_input: Any,
        right_input: Any,
        binder: Callable[[Any, Any, Any], None],
        name: Optional[str] = None,
    ) -> ConstrainedEntry:
        """
        Register a segment fit between its two neighbors.

        Raises:
            ConfigurationError: If it would be first, or its left neighbor is
                                itself constrained
        """
        entry = ConstrainedEntry(
            domain, grid, left_input, right_input, binder,
            name=name, strategy_cls=self.strategy_cls,
        )
        if not self._entries:
            raise ConfigurationError(
                f"{entry.name}: a constrained segment cannot be first; add its left neighbor first"
            )
        if self._entries[-1].is_constrained():
            raise ConfigurationError(
                f"{entry.name}: left neighbor {self._entries[-1].name} is constrained; "
                f"chained constrained segments are not supported"
            )
        self._entries.append(entry)
        self._invalidate()
        logger.debug(f"Added constrained segment {entry.name} (size={entry.size()})")
        return entry

    def clear(self) -> None:
        self._entries.clear()
        self._invalidate()

    def _invalidate(self) -> None:
        self._ready = False
        self._finished = False
        self._step = 0
        self._last_indices = []
        self._last_locals = None

    def validate(self) -> None:
        """
        Check the segment layout.

        Raises:
            ConfigurationError: If a constrained entry is first, last, or
                                adjacent to another constrained entry
        """
        n = len(self._entries)
        for i, e in enumerate(self._entries):
            if not e.is_constrained():
                continue
            if i == 0 or i == n - 1:
                raise ConfigurationError(
                    f"{e.name}: constrained segment at position {i} of {n} "
                    f"must sit between two free segments"
                )
            if self._entries[i - 1].is_constrained() or self._entries[i + 1].is_constrained():
                raise ConfigurationError(
                    f"{e.name}: chained constrained segments are not supported"
                )

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def size(self) -> int:
        """Number of global combinations (0 if empty or any entry is empty)."""
        if not self._entries:
            return 0
        total = 1
        for e in self._entries:
            s = e.size()
            if s == 0:
                return 0
            total *= s
        return total

    # Index arithmetic

    def decompose(self, global_index: int) -> List[int]:
        """Split a global index into per-entry locals (entry 0 fastest)."""
        locals_ = []
        for e in self._entries:
            s = e.size()
            if s > 0:
                locals_.append(global_index % s)
                global_index //= s
            else:
                locals_.append(0)
                global_index = 0
        return locals_

    def compose(self, locals_: Sequence[int]) -> int:
        """Inverse of decompose: sum(local_i * prod(sizes before i))."""
        if len(locals_) != len(self._entries):
            raise ValueError(f"Expected {len(self._entries)} locals, got {len(locals_)}")
        global_index = 0
        weight = 1
        for local, e in zip(locals_, self._entries):
            global_index += local * weight
            weight *= e.size()
        return global_index

    # Building

    def _build(self, locals_: Sequence[int]) -> PiecewiseModel:
        built: List[Optional[Any]] = [None] * len(self._entries)

        for i, e in enumerate(self._entries):
            if not e.is_constrained():
                built[i] = e.build_at(locals_[i], built, i)

        for i, e in enumerate(self._entries):
            if e.is_constrained():
                built[i] = e.build_at(locals_[i], built, i)

        pm = PiecewiseModel(sentinel=self.sentinel)
        for e, m in zip(self._entries, built):
            if m is None:
                logger.warning(f"Segment {e.name} has no model for this combination")
            pm.add(e.domain, m)
        return pm

    def make_at(self, global_index: int) -> PiecewiseModel:
        """
        Build the piecewise model for one global index (stateless).

        Raises:
            IndexError: If global_index is outside [0, size())
            ConfigurationError: If the segment layout is invalid
        """
        total = self.size()
        if global_index < 0 or global_index >= total:
            raise IndexError(f"Global index {global_index} out of range [0, {total})")
        self.validate()
        return self._build(self.decompose(global_index))

    # Sequential iteration

    def reset(self) -> None:
        """
        Reset sequential iteration.

        After reset() the first next() returns the first combination (if any).
        """
        self.validate()
        self._ready = True
        self._finished = False
        self._step = 0
        self._last_indices = []
        self._last_locals = None

        if not self._entries:
            self._finished = True
            return

        for e in self._entries:
            e.reset()

        if any(e.size() == 0 for e in self._entries):
            logger.warning("Orchestrator has an empty segment; search space is empty")
            self._finished = True

    def next(self) -> Optional[PiecewiseModel]:
        """
        Build the current combination and advance the odometer.

        Returns:
            PiecewiseModel, or None once iteration is exhausted
        """
        if not self._ready:
            self.reset()
        if self._finished:
            return None

        # 1) current locals
        locals_ = []
        for e in self._entries:
            local = e.current_local()
            if local is None:
                self._finished = True
                return None
            locals_.append(local)

        # 2) build
        indices = [e.current_index() for e in self._entries]
        pm = self._build(locals_)

        # 3) odometer: entry 0 fastest
        for i, e in enumerate(self._entries):
            if e.advance():
                break
            e.reset()
            if i + 1 == len(self._entries):
                self._finished = True

        self._step += 1
        self._last_indices = indices
        self._last_locals = locals_
        return pm

    def __iter__(self):
        self.reset()
        while True:
            pm = self.next()
            if pm is None:
                return
            yield pm

    @property
    def step(self) -> int:
        """Number of models returned by next() since the last reset()."""
        return self._step

    def snapshot(self) -> Snapshot:
        """
        Capture the combination most recently returned by next().

        indices/locals are empty/None before the first next().
        """
        global_index = None
        if self._last_locals is not None:
            global_index = self.compose(self._last_locals)
        return Snapshot(
            step=self._step,
            indices=list(self._last_indices),
            locals=list(self._last_locals) if self._last_locals is not None else None,
            global_index=global_index,
        )

    # Reporting

    def for_each_param_at(
        self,
        global_index: int,
        fn: Callable[[Entry, Optional[str], int, Any], None],
    ) -> None:
        """Call fn(entry, label, param_index, value) for every parameter of a combination."""
        for e, local in zip(self._entries, self.decompose(global_index)):
            e.for_each_param_at(local, lambda label, i, value, e=e: fn(e, label, i, value))

    def describe(self, global_index: int) -> List[Dict[str, Any]]:
        """Flat rows (segment, position, constrained, label, index, value)."""
        rows: List[Dict[str, Any]] = []
        position = {id(e): p for p, e in enumerate(self._entries)}

        def _collect(entry, label, i, value):
            rows.append({
                'segment': entry.name,
                'position': position[id(entry)],
                'constrained': entry.is_constrained(),
                'label': label,
                'index': i,
                'value': value,
            })

        self.for_each_param_at(global_index, _collect)
        return rows
