"""
Parameter grids (params/grid.py).

A ParamGrid is the Cartesian product of Ranges bound to a model's fields.
Each dimension is a ParamBinding: an optional label, the Range, and a
setter closure that writes one value into a freshly built model.

Labels are resolved through a runtime table; the first dimension carrying
a label wins.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .ranges import Range

Setter = Callable[[Any, Any], None]
Getter = Callable[[Any], Any]


@dataclass(frozen=True)
class ParamMeta:
    """Runtime description of one grid dimension."""
    label: Optional[str]
    index: int

    @property
    def is_named(self) -> bool:
        return bool(self.label)


@dataclass(frozen=True)
class ParamBinding:
    """One grid dimension: label + range + how to write the value into a model."""
    label: Optional[str]
    range: Range
    setter: Setter
    getter: Optional[Getter] = None


def attribute_setter(name: str) -> Setter:
    """Setter closure assigning model.<name> = value."""
    def _set(model: Any, value: Any) -> None:
        setattr(model, name, value)
    return _set


def attribute_getter(name: str) -> Getter:
    """Getter closure reading model.<name>."""
    def _get(model: Any) -> Any:
        return getattr(model, name)
    return _get


class ParamGrid:
    """
    Grid of controlled model parameters.

    Args:
        model_factory: Zero-argument callable returning a blank model
        bindings: Ordered dimensions; dimension i is driven by multi-index digit i

    Example:
        grid = ParamGrid.for_fields(
            Parabola,
            a=UniformRange(0.75, 1.65, 0.05),
            b=UniformRange(-0.2, 0.2, 0.1),
            c=UniformRange.fixed(-0.3),
        )
    """

    def __init__(self, model_factory: Callable[[], Any], bindings: Sequence[ParamBinding]):
        self.model_factory = model_factory
        self._bindings: List[ParamBinding] = list(bindings)
        self._label_index: Dict[str, int] = {}
        self._rebuild_labels()

    @classmethod
    def for_fields(cls, model_factory: Callable[[], Any], **ranges: Range) -> 'ParamGrid':
        """Bind each keyword to the model attribute of the same name, in keyword order."""
        bindings = [
            ParamBinding(
                label=name,
                range=r,
                setter=attribute_setter(name),
                getter=attribute_getter(name),
            )
            for name, r in ranges.items()
        ]
        return cls(model_factory, bindings)

    def _rebuild_labels(self) -> None:
        self._label_index = {}
        for i, b in enumerate(self._bindings):
            if b.label and b.label not in self._label_index:
                self._label_index[b.label] = i

    @property
    def n_params(self) -> int:
        return len(self._bindings)

    @property
    def bindings(self) -> List[ParamBinding]:
        return list(self._bindings)

    def size(self) -> int:
        """Number of parameter combinations (0 if any range is empty)."""
        total = 1
        for b in self._bindings:
            total *= b.range.size()
        return total

    def get(self, i: int) -> Range:
        if i < 0 or i >= self.n_params:
            raise IndexError(f"ParamGrid.get: index {i} out of range [0, {self.n_params})")
        return self._bindings[i].range

    def index_of(self, label: str) -> Optional[int]:
        return self._label_index.get(label)

    def get_by_label(self, label: str) -> Range:
        """
        Range for a labelled parameter.

        Raises:
            KeyError: If no dimension carries this label
        """
        i = self.index_of(label)
        if i is None:
            raise KeyError(
                f"ParamGrid: no parameter labelled '{label}'. Available: {self.labels()}"
            )
        return self._bindings[i].range

    def find(self, label: str) -> Optional[Range]:
        i = self.index_of(label)
        return None if i is None else self._bindings[i].range

    def labels(self) -> List[Optional[str]]:
        return [b.label for b in self._bindings]

    def set_range(self, key: Union[int, str], new_range: Range) -> None:
        """
        Replace one dimension's range. Configuration only, never mid-search.

        Args:
            key: Dimension index or label
        """
        i = key if isinstance(key, int) else self.index_of(key)
        if i is None:
            raise KeyError(f"ParamGrid: no parameter labelled '{key}'")
        self.get(i)  # bounds check
        old = self._bindings[i]
        self._bindings[i] = ParamBinding(old.label, new_range, old.setter, old.getter)

    def for_each_param(self, fn: Callable[[ParamMeta, Range], None]) -> None:
        for i, b in enumerate(self._bindings):
            fn(ParamMeta(b.label, i), b.range)

    def make_model(self, idx: Sequence[int]) -> Any:
        """
        Build a model with parameter i set to get(i).value_at(idx[i]).

        Raises:
            ValueError: If len(idx) != n_params
        """
        if len(idx) != self.n_params:
            raise ValueError(
                f"ParamGrid.make_model: expected {self.n_params} indices, got {len(idx)}"
            )
        model = self.model_factory()
        for b, i in zip(self._bindings, idx):
            b.setter(model, b.range.value_at(i))
        return model


class UnitGrid:
    """
    Grid with a single variant and no free parameters.

    Useful for constrained segments whose parameters are fully fit by a
    boundary binder (e.g. a line through two boundary points).
    """

    def __init__(self, model_factory: Callable[[], Any]):
        self.model_factory = model_factory

    n_params = 0

    def size(self) -> int:
        return 1

    def get(self, i: int) -> Range:
        raise IndexError("UnitGrid has no parameters")

    def index_of(self, label: str) -> Optional[int]:
        return None

    def find(self, label: str) -> Optional[Range]:
        return None

    def labels(self) -> List[Optional[str]]:
        return []

    def for_each_param(self, fn: Callable[[ParamMeta, Range], None]) -> None:
        return None

    def make_model(self, idx: Sequence[int] = ()) -> Any:
        if len(idx) != 0:
            raise ValueError(f"UnitGrid.make_model: expected 0 indices, got {len(idx)}")
        return self.model_factory()
