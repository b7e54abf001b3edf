"""
Problem configuration (fitting/problem.py).

A problem YAML names an ordered list of segments. Each segment picks a
registered model, a domain and a range per parameter; a segment with a
`constrained` block is fit between its neighbors by a binder instead.

Example:
    name: three_segments
    segments:
      - model: parabola
        domain: {max: -1}
        params:
          a: {min: 0.75, max: 1.65, step: 0.05}
      - model: line
        domain: {min: -1, max: 1}
        constrained: {left: -1, right: 1, binder: line_between}
      - model: parabola
        domain: {min: 1}
        params:
          a: {values: [0.25, 0.5, 0.75]}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from core.orchestrator import Orchestrator
from model.base import Interval
from model.binders import get_binder
from model.primitives import get_model
from params.grid import ParamGrid, UnitGrid
from params.ranges import Range, UniformRange, ValueListRange
from . import config as defaults

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "config" / "schema_problem.json"

REQUIRED_FIELDS = ['name', 'segments']
REQUIRED_SEGMENT_FIELDS = ['model', 'domain']


def load_schema() -> dict:
    with open(SCHEMA_PATH) as f:
        return json.load(f)


def validate_problem_schema(config: dict) -> None:
    """
    Validate a problem dict against schema_problem.json.

    Raises:
        jsonschema.ValidationError: On the first schema violation
    """
    jsonschema.validate(instance=config, schema=load_schema())


def load_problem_config(config_path: str, validate_schema: bool = True) -> dict:
    """
    Load and validate a problem YAML config.

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If required fields are missing
        jsonschema.ValidationError: If validate_schema and the schema check fails
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Problem config not found: {path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError(f"{path}: problem config must be a mapping")

    missing = [k for k in REQUIRED_FIELDS if k not in config]
    if missing:
        raise ValueError(f"Missing required fields in problem config: {missing}")

    segments = config['segments']
    if not isinstance(segments, list) or not segments:
        raise ValueError("Problem config must list at least one segment")

    for i, seg in enumerate(segments):
        seg_missing = [k for k in REQUIRED_SEGMENT_FIELDS if k not in seg]
        if seg_missing:
            raise ValueError(f"Segment {i}: missing required fields {seg_missing}")

    if validate_schema:
        validate_problem_schema(config)

    return config


def parse_range(raw: Any) -> Range:
    """
    Range from its config form.

    {min, max, step} -> UniformRange
    {values: [...]}  -> ValueListRange
    number           -> single-value UniformRange
    """
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return UniformRange.fixed(raw)

    if isinstance(raw, dict):
        if 'values' in raw:
            return ValueListRange(raw['values'])
        if all(k in raw for k in ('min', 'max', 'step')):
            return UniformRange(raw['min'], raw['max'], raw['step'])

    raise ValueError(f"Unrecognized range: {raw!r}")


def parse_domain(raw: Optional[dict]) -> Interval:
    raw = raw or {}
    return Interval(
        lo=raw.get('min'),
        hi=raw.get('max'),
        closed_hi=bool(raw.get('closed_max', False)),
    )


def _check_params(model_cls: type, params: Dict[str, Any], where: str) -> None:
    known = set(model_cls().params().keys())
    unknown = [p for p in params if p not in known]
    if unknown:
        raise ValueError(
            f"{where}: unknown parameters {unknown} for model "
            f"'{model_cls.KEY}' (has {sorted(known)})"
        )


def build_grid(model_cls: type, params: Optional[Dict[str, Any]]):
    """ParamGrid over the listed fields, or a UnitGrid when none are listed."""
    if not params:
        return UnitGrid(model_cls)
    return ParamGrid.for_fields(model_cls, **{k: parse_range(v) for k, v in params.items()})


def build_orchestrator(
    config: dict,
    strategy: Optional[str] = None,
) -> Orchestrator:
    """
    Build an Orchestrator from a loaded problem config.

    Args:
        config: Problem dict (see load_problem_config)
        strategy: Strategy KEY, overrides config['search']['strategy']

    Raises:
        KeyError: Unknown model, binder or strategy name
        ValueError: Unknown parameter names
        ConfigurationError: Invalid segment layout
    """
    search_cfg = config.get('search') or {}
    strategy = strategy or search_cfg.get('strategy') or defaults.get('search', 'strategy', 'enumeration')
    orchestrator = Orchestrator(strategy=strategy)

    for i, seg in enumerate(config['segments']):
        model_cls = get_model(seg['model'])
        params = seg.get('params') or {}
        name = seg.get('name') or f"{seg['model']}_{i}"
        _check_params(model_cls, params, name)

        grid = build_grid(model_cls, params)
        domain = parse_domain(seg.get('domain'))

        constrained = seg.get('constrained')
        if constrained:
            binder = get_binder(constrained['binder'], constrained['left'], constrained['right'])
            orchestrator.add_constrained(
                domain, grid,
                left_input=constrained['left'],
                right_input=constrained['right'],
                binder=binder,
                name=name,
            )
        else:
            orchestrator.add(domain, grid, name=name)

    orchestrator.validate()
    logger.info(
        f"Built orchestrator for {config['name']}: "
        f"{len(orchestrator)} segments, {orchestrator.size()} combinations"
    )
    return orchestrator


def segment_sizes(orchestrator: Orchestrator) -> List[Dict[str, Any]]:
    """Per-segment summary rows: name, constrained, size."""
    return [
        {'name': e.name, 'constrained': e.is_constrained(), 'size': e.size()}
        for e in orchestrator.entries
    ]
