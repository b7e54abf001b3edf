"""
Discretized parameter ranges (params/ranges.py).

A Range is one parameter dimension's ordered value set:
- size() is the number of values (0 if misconfigured)
- value_at(i) returns the i-th value for 0 <= i < size()

Ranges are configured before a search and never mutated during one.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Sequence

# Relative slack so that e.g. (0.95 - 0.05) / 0.1 counts 10 steps, not 9.
_SIZE_TOLERANCE = 1e-9


class Range(ABC):
    """Base class for parameter ranges."""

    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def _value(self, i: int) -> Any:
        pass

    def value_at(self, i: int) -> Any:
        """
        Value at ordinal i.

        Raises:
            IndexError: If i is outside [0, size())
        """
        n = self.size()
        if i < 0 or i >= n:
            raise IndexError(f"{type(self).__name__}: index {i} out of range [0, {n})")
        return self._value(i)

    def values(self) -> List[Any]:
        return [self._value(i) for i in range(self.size())]

    def __len__(self) -> int:
        return self.size()

    def __getitem__(self, i: int) -> Any:
        return self.value_at(i)

    def __iter__(self) -> Iterator[Any]:
        for i in range(self.size()):
            yield self._value(i)


@dataclass(frozen=True)
class UniformRange(Range):
    """
    Uniform range min, min + step, min + 2*step, ... <= max.

    size() is 0 if step <= 0 or max < min. When min, max and step are all
    integers the values are integers too.
    """
    min: float = 0.0
    max: float = 0.0
    step: float = 1.0

    @property
    def is_integer(self) -> bool:
        return all(
            isinstance(v, int) and not isinstance(v, bool)
            for v in (self.min, self.max, self.step)
        )

    def size(self) -> int:
        if not self.step > 0:
            return 0
        if self.max < self.min:
            return 0

        if self.is_integer:
            return (self.max - self.min) // self.step + 1

        span = (float(self.max) - float(self.min)) / float(self.step)
        return int(math.floor(span + _SIZE_TOLERANCE * max(1.0, abs(span)))) + 1

    def _value(self, i: int) -> Any:
        if self.is_integer:
            return self.min + i * self.step
        return float(self.min) + i * float(self.step)

    @classmethod
    def fixed(cls, value: float) -> 'UniformRange':
        """Single-value range (size 1)."""
        return cls(value, value, 1 if isinstance(value, int) else 1.0)


@dataclass(frozen=True)
class ValueListRange(Range):
    """Explicit ordered value list. Empty list means size 0."""
    items: Sequence[Any] = field(default_factory=tuple)

    def __post_init__(self):
        # Freeze caller-owned lists
        object.__setattr__(self, 'items', tuple(self.items))

    def size(self) -> int:
        return len(self.items)

    def _value(self, i: int) -> Any:
        return self.items[i]
