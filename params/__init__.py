"""Parameter ranges and grids."""

from .ranges import Range, UniformRange, ValueListRange
from .grid import ParamGrid, UnitGrid, ParamBinding, ParamMeta, attribute_setter, attribute_getter

__all__ = [
    'Range', 'UniformRange', 'ValueListRange',
    'ParamGrid', 'UnitGrid', 'ParamBinding', 'ParamMeta',
    'attribute_setter', 'attribute_getter',
]
