"""Models, domains and boundary binders."""

from .base import Model, Domain, Interval, Everywhere, as_predicate
from .piecewise import PiecewiseModel
from .primitives import (
    Constant, Line, Parabola, Hyperbola,
    register_model, get_model, list_models, get_model_info, MODEL_REGISTRY
)
from .binders import LineBetween, MeanLevel, get_binder, list_binders

__all__ = [
    'Model', 'Domain', 'Interval', 'Everywhere', 'as_predicate',
    'PiecewiseModel',
    'Constant', 'Line', 'Parabola', 'Hyperbola',
    'register_model', 'get_model', 'list_models', 'get_model_info', 'MODEL_REGISTRY',
    'LineBetween', 'MeanLevel', 'get_binder', 'list_binders',
]
