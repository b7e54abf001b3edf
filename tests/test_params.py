"""
Tests for params/ranges.py and params/grid.py

Verifies:
- UniformRange sizing (float tolerance, integer ranges, degenerate ranges)
- ValueListRange ordering and freezing
- ParamGrid binding, labels, range replacement and model construction
- UnitGrid as a single parameterless variant
"""

import pytest

from model.primitives import Line, Parabola
from params.grid import ParamBinding, ParamGrid, UnitGrid, attribute_setter
from params.ranges import UniformRange, ValueListRange


class TestUniformRange:
    """Tests for UniformRange."""

    def test_inclusive_upper_bound(self):
        r = UniformRange(0.0, 1.0, 0.25)
        assert r.size() == 5
        assert r.values() == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])

    def test_float_step_not_lost_to_rounding(self):
        """(1.65 - 0.75) / 0.05 is just under 18 in floating point."""
        r = UniformRange(0.75, 1.65, 0.05)
        assert r.size() == 19
        assert r.value_at(18) == pytest.approx(1.65)

    def test_partial_last_step_excluded(self):
        assert UniformRange(0.0, 1.0, 0.3).size() == 4

    def test_integer_range_yields_ints(self):
        r = UniformRange(0, 10, 2)
        assert r.size() == 6
        assert r.values() == [0, 2, 4, 6, 8, 10]
        assert all(isinstance(v, int) for v in r.values())

    def test_zero_step_is_empty(self):
        assert UniformRange(0.0, 1.0, 0.0).size() == 0

    def test_negative_step_is_empty(self):
        assert UniformRange(0.0, 1.0, -0.1).size() == 0

    def test_inverted_bounds_are_empty(self):
        assert UniformRange(1.0, 0.0, 0.1).size() == 0

    def test_single_point(self):
        r = UniformRange.fixed(-0.3)
        assert r.size() == 1
        assert r.value_at(0) == -0.3

    def test_value_at_out_of_range(self):
        r = UniformRange(0, 2, 1)
        with pytest.raises(IndexError, match="out of range"):
            r.value_at(3)
        with pytest.raises(IndexError):
            r.value_at(-1)

    def test_value_at_on_empty_range(self):
        with pytest.raises(IndexError):
            UniformRange(0.0, 1.0, 0.0).value_at(0)

    def test_sequence_protocol(self):
        r = UniformRange(1, 3, 1)
        assert len(r) == 3
        assert r[1] == 2
        assert list(r) == [1, 2, 3]


class TestValueListRange:
    """Tests for ValueListRange."""

    def test_keeps_order(self):
        r = ValueListRange([3.0, 1.0, 2.0])
        assert r.values() == [3.0, 1.0, 2.0]

    def test_empty_list_is_empty(self):
        assert ValueListRange([]).size() == 0

    def test_frozen_against_caller_mutation(self):
        items = [1.0, 2.0]
        r = ValueListRange(items)
        items.append(3.0)
        assert r.size() == 2


class TestParamGrid:
    """Tests for ParamGrid."""

    @pytest.fixture
    def grid(self):
        return ParamGrid.for_fields(
            Parabola,
            a=UniformRange(0, 2, 1),
            b=ValueListRange([-1.0, 1.0]),
        )

    def test_size_is_product(self, grid):
        assert grid.n_params == 2
        assert grid.size() == 6

    def test_empty_dimension_empties_grid(self):
        grid = ParamGrid.for_fields(
            Parabola,
            a=UniformRange(0, 2, 1),
            b=UniformRange(1.0, 0.0, 0.1),
        )
        assert grid.size() == 0

    def test_no_bindings_has_one_variant(self):
        assert ParamGrid(Parabola, []).size() == 1

    def test_make_model_sets_fields(self, grid):
        m = grid.make_model((2, 0))
        assert isinstance(m, Parabola)
        assert m.a == 2
        assert m.b == -1.0
        assert m.c == 0.0

    def test_make_model_returns_fresh_instances(self, grid):
        assert grid.make_model((0, 0)) is not grid.make_model((0, 0))

    def test_make_model_wrong_arity(self, grid):
        with pytest.raises(ValueError, match="expected 2 indices"):
            grid.make_model((0,))

    def test_labels(self, grid):
        assert grid.labels() == ['a', 'b']
        assert grid.index_of('b') == 1
        assert grid.index_of('c') is None
        assert grid.find('c') is None

    def test_get_by_label(self, grid):
        assert grid.get_by_label('b').values() == [-1.0, 1.0]
        with pytest.raises(KeyError, match="no parameter labelled 'c'"):
            grid.get_by_label('c')

    def test_get_out_of_range(self, grid):
        with pytest.raises(IndexError):
            grid.get(2)

    def test_set_range_by_label(self, grid):
        grid.set_range('a', UniformRange(0, 9, 1))
        assert grid.size() == 20
        assert grid.labels() == ['a', 'b']

    def test_set_range_by_index(self, grid):
        grid.set_range(1, ValueListRange([5.0]))
        assert grid.make_model((0, 0)).b == 5.0

    def test_set_range_unknown_label(self, grid):
        with pytest.raises(KeyError):
            grid.set_range('zz', UniformRange(0, 1, 1))

    def test_for_each_param(self, grid):
        seen = []
        grid.for_each_param(lambda meta, r: seen.append((meta.label, meta.index, r.size())))
        assert seen == [('a', 0, 3), ('b', 1, 2)]

    def test_unlabelled_dimension(self):
        grid = ParamGrid(Line, [
            ParamBinding(None, ValueListRange([2.0]), attribute_setter('k')),
            ParamBinding('m', ValueListRange([1.0]), attribute_setter('m')),
        ])
        metas = []
        grid.for_each_param(lambda meta, r: metas.append(meta))

        assert not metas[0].is_named
        assert metas[1].is_named
        assert grid.make_model((0, 0)).evaluate(1.0) == 3.0


class TestUnitGrid:
    """Tests for UnitGrid."""

    def test_single_variant(self):
        grid = UnitGrid(Line)
        assert grid.n_params == 0
        assert grid.size() == 1
        assert grid.labels() == []

    def test_make_model(self):
        assert isinstance(UnitGrid(Line).make_model(()), Line)

    def test_rejects_indices(self):
        with pytest.raises(ValueError):
            UnitGrid(Line).make_model((0,))

    def test_get_raises(self):
        with pytest.raises(IndexError):
            UnitGrid(Line).get(0)
