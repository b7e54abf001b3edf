"""
Index spaces for discretized parameter grids (search/index_space.py).

An IndexSpace is the list of per-dimension bases (range sizes) of a grid.
Multi-indices are mixed-radix numbers: dimension 0 has weight 1 and
dimension i has weight prod(bases[:i]).
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class IndexSpace:
    """Per-dimension cardinalities of a grid."""
    bases: Tuple[int, ...] = ()

    @property
    def n_dims(self) -> int:
        return len(self.bases)

    @property
    def total(self) -> int:
        """Product of bases. 0 if any dimension is empty, 1 for no dimensions."""
        total = 1
        for b in self.bases:
            if b == 0:
                return 0
            total *= b
        return total


def make_index_space(grid) -> IndexSpace:
    """
    Build an IndexSpace by querying each grid dimension's range size.

    Args:
        grid: Any object exposing n_params and get(i) -> Range

    Returns:
        IndexSpace with one base per parameter
    """
    return IndexSpace(tuple(int(grid.get(i).size()) for i in range(grid.n_params)))


def linear_to_multi_index(space: IndexSpace, linear: int) -> Tuple[int, ...]:
    """
    Decode a linear ordinal into a multi-index.

    idx[0] = linear % b0; linear //= b0; idx[1] = linear % b1; ...

    A zero base decodes to digit 0; callers should not decode into an
    empty space.
    """
    out = []
    for b in space.bases:
        if b == 0:
            out.append(0)
            linear = 0
        else:
            out.append(linear % b)
            linear //= b
    return tuple(out)


def multi_index_to_linear(space: IndexSpace, idx: Sequence[int]) -> Optional[int]:
    """
    Encode a multi-index into its linear ordinal.

    Returns:
        The ordinal, or None if the arity does not match, any base is 0,
        or any digit is out of range.
    """
    if len(idx) != space.n_dims:
        return None

    linear = 0
    weight = 1
    for digit, b in zip(idx, space.bases):
        if b == 0:
            return None
        if digit < 0 or digit >= b:
            return None
        linear += digit * weight
        weight *= b
    return linear
