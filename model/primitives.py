"""
Primitive sub-models and registry (model/primitives.py).

- Registry via ClassVar KEY, not instance field
- All parameters are dataclass fields so grids can bind them by name
- evaluate() works on scalars and numpy arrays alike
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List

from .base import Model

# Registry
_REGISTRY: Dict[str, type] = {}
MODEL_REGISTRY = _REGISTRY  # Public alias for tests


def register_model(cls: type) -> type:
    """
    Decorator to register a model class.

    Raises:
        ValueError: If KEY is missing or duplicate
    """
    key = getattr(cls, 'KEY', None)
    if not key:
        raise ValueError(f"{cls.__name__} is missing KEY ClassVar")

    if key in _REGISTRY:
        raise ValueError(f"Duplicate model KEY: {key}")

    _REGISTRY[key] = cls
    return cls


def get_model(name: str) -> type:
    """
    Get a model class by name.

    Raises:
        KeyError: If model not found
    """
    if name not in _REGISTRY:
        raise KeyError(
            f"Unknown model: {name}. Available: {list(_REGISTRY.keys())}"
        )
    return _REGISTRY[name]


def list_models() -> List[str]:
    """Return sorted list of registered model KEYs."""
    return sorted(_REGISTRY.keys())


def get_model_info(name: str) -> Dict[str, Any]:
    cls = get_model(name)
    return {
        'key': cls.KEY,
        'params': list(cls().params().keys()),
        'formula': cls.FORMULA,
    }


@register_model
@dataclass
class Constant(Model):
    """y = c"""

    KEY: ClassVar[str] = 'constant'
    FORMULA: ClassVar[str] = 'c'

    c: float = 0.0

    def evaluate(self, x: Any) -> Any:
        return x * 0.0 + self.c


@register_model
@dataclass
class Line(Model):
    """y = k*x + m"""

    KEY: ClassVar[str] = 'line'
    FORMULA: ClassVar[str] = 'k*x + m'

    k: float = 0.0
    m: float = 0.0

    def evaluate(self, x: Any) -> Any:
        return self.k * x + self.m


@register_model
@dataclass
class Parabola(Model):
    """y = a*x^2 + b*x + c"""

    KEY: ClassVar[str] = 'parabola'
    FORMULA: ClassVar[str] = 'a*x^2 + b*x + c'

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0

    def evaluate(self, x: Any) -> Any:
        return self.a * x * x + self.b * x + self.c


@register_model
@dataclass
class Hyperbola(Model):
    """
    y = a/x + b

    Undefined at x == 0; keep its domain away from the origin.
    """

    KEY: ClassVar[str] = 'hyperbola'
    FORMULA: ClassVar[str] = 'a/x + b'

    a: float = 0.0
    b: float = 0.0

    def evaluate(self, x: Any) -> Any:
        return self.a / x + self.b
