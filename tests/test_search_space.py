"""
Tests for search/index_space.py and search/strategies.py

Verifies:
- Mixed-radix decode/encode (dimension 0 fastest)
- Forward enumeration covers the space exactly once
- Reverse enumeration is the forward order backwards
- Empty and zero-dimensional spaces
- Strategy registry
"""

import pytest

from params.grid import ParamGrid, UnitGrid
from params.ranges import UniformRange, ValueListRange
from model.primitives import Parabola
from search.index_space import (
    IndexSpace, make_index_space, linear_to_multi_index, multi_index_to_linear
)
from search.strategies import (
    EnumerationStrategy, ReverseEnumerationStrategy,
    get_strategy, list_strategies, register_strategy, STRATEGY_REGISTRY,
)


def drain(strategy, space):
    strategy.reset(space)
    out = []
    while True:
        idx = strategy.next()
        if idx is None:
            return out
        out.append(idx)


class TestIndexSpace:
    """Tests for IndexSpace arithmetic."""

    def test_total_is_product(self):
        assert IndexSpace((2, 3, 4)).total == 24

    def test_zero_base_gives_empty_space(self):
        assert IndexSpace((2, 0, 4)).total == 0

    def test_no_dimensions_has_one_point(self):
        space = IndexSpace(())
        assert space.n_dims == 0
        assert space.total == 1

    def test_make_index_space_from_grid(self):
        grid = ParamGrid.for_fields(
            Parabola,
            a=UniformRange(0, 4, 1),
            b=ValueListRange([1.0, 2.0]),
        )
        assert make_index_space(grid).bases == (5, 2)

    def test_make_index_space_from_unit_grid(self):
        assert make_index_space(UnitGrid(Parabola)).bases == ()

    def test_decode_dimension_zero_fastest(self):
        space = IndexSpace((2, 3))
        assert linear_to_multi_index(space, 0) == (0, 0)
        assert linear_to_multi_index(space, 1) == (1, 0)
        assert linear_to_multi_index(space, 2) == (0, 1)
        assert linear_to_multi_index(space, 5) == (1, 2)

    def test_encode_inverts_decode(self):
        space = IndexSpace((3, 1, 4, 2))
        for linear in range(space.total):
            idx = linear_to_multi_index(space, linear)
            assert multi_index_to_linear(space, idx) == linear

    def test_encode_rejects_bad_input(self):
        space = IndexSpace((2, 3))
        assert multi_index_to_linear(space, (0,)) is None
        assert multi_index_to_linear(space, (2, 0)) is None
        assert multi_index_to_linear(space, (0, -1)) is None
        assert multi_index_to_linear(IndexSpace((2, 0)), (0, 0)) is None


class TestEnumerationStrategy:
    """Tests for forward enumeration."""

    def test_visits_every_index_once(self):
        space = IndexSpace((2, 3, 2))
        seen = drain(EnumerationStrategy(), space)

        assert len(seen) == 12
        assert len(set(seen)) == 12

    def test_order_matches_linear_order(self):
        space = IndexSpace((3, 2))
        seen = drain(EnumerationStrategy(), space)

        assert seen == [linear_to_multi_index(space, i) for i in range(6)]

    def test_empty_space_yields_nothing(self):
        assert drain(EnumerationStrategy(), IndexSpace((3, 0))) == []

    def test_zero_dimensions_yields_one_empty_index(self):
        assert drain(EnumerationStrategy(), IndexSpace(())) == [()]

    def test_next_before_reset_is_none(self):
        assert EnumerationStrategy().next() is None

    def test_stays_exhausted(self):
        s = EnumerationStrategy()
        drain(s, IndexSpace((2,)))
        assert s.next() is None
        assert s.next() is None

    def test_reset_restarts(self):
        s = EnumerationStrategy()
        space = IndexSpace((2, 2))
        first = drain(s, space)
        assert drain(s, space) == first


class TestReverseEnumerationStrategy:
    """Tests for reverse enumeration."""

    def test_exact_reverse_of_forward(self):
        space = IndexSpace((3, 2, 4))
        forward = drain(EnumerationStrategy(), space)
        backward = drain(ReverseEnumerationStrategy(), space)

        assert backward == list(reversed(forward))

    def test_empty_space_yields_nothing(self):
        assert drain(ReverseEnumerationStrategy(), IndexSpace((0,))) == []

    def test_zero_dimensions_yields_one_empty_index(self):
        assert drain(ReverseEnumerationStrategy(), IndexSpace(())) == [()]


class TestStrategyRegistry:
    """Tests for the strategy registry."""

    def test_builtin_strategies_registered(self):
        assert 'enumeration' in list_strategies()
        assert 'reverse' in list_strategies()

    def test_get_strategy(self):
        assert get_strategy('enumeration') is EnumerationStrategy
        assert get_strategy('reverse') is ReverseEnumerationStrategy

    def test_unknown_strategy_raises(self):
        with pytest.raises(KeyError, match="Unknown strategy"):
            get_strategy('random_walk')

    def test_duplicate_key_rejected(self):
        class Dup(EnumerationStrategy):
            KEY = 'enumeration'

        with pytest.raises(ValueError, match="Duplicate strategy KEY"):
            register_strategy(Dup)

    def test_missing_key_rejected(self):
        class NoKey:
            pass

        with pytest.raises(ValueError, match="missing KEY"):
            register_strategy(NoKey)

    def test_registry_alias(self):
        assert STRATEGY_REGISTRY['reverse'] is ReverseEnumerationStrategy
