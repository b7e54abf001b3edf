"""
Built-in demo problem: a line bound between two parabolas.

    x < -1       parabola a in [0.75, 1.65] step 0.05
    -1 <= x < 1  line through both neighbors at x = -1 and x = 1
    x >= 1       parabola a in [0.25, 0.75] step 0.25

Observations come from the a=1 / a=0.5 member of the family. Scoring uses
negated MSE: Pearson correlation cannot tell the truth from its scaled
copy a=1.5 / a=0.75, which is also in the grid.
"""

import logging
from typing import Tuple

import pandas as pd

from core.orchestrator import Orchestrator
from data.observations import synthesize_observations
from model.base import Interval
from model.binders import LineBetween
from model.primitives import Line, Parabola
from params.grid import ParamGrid, UnitGrid
from params.ranges import UniformRange

logger = logging.getLogger(__name__)

LEFT_BOUNDARY = -1.0
RIGHT_BOUNDARY = 1.0
DEMO_SCORE = "neg_mse"


def build_demo_orchestrator(strategy: str = 'enumeration') -> Orchestrator:
    orchestrator = Orchestrator(strategy=strategy)
    orchestrator.add(
        Interval(hi=LEFT_BOUNDARY),
        ParamGrid.for_fields(Parabola, a=UniformRange(0.75, 1.65, 0.05)),
        name='left',
    )
    orchestrator.add_constrained(
        Interval(lo=LEFT_BOUNDARY, hi=RIGHT_BOUNDARY),
        UnitGrid(Line),
        left_input=LEFT_BOUNDARY,
        right_input=RIGHT_BOUNDARY,
        binder=LineBetween(LEFT_BOUNDARY, RIGHT_BOUNDARY),
        name='middle',
    )
    orchestrator.add(
        Interval(lo=RIGHT_BOUNDARY),
        ParamGrid.for_fields(Parabola, a=UniformRange(0.25, 0.75, 0.25)),
        name='right',
    )
    return orchestrator


def demo_observations(noise_std: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Samples of the a=1 / a=0.5 member on [-5, 5]."""
    truth = Orchestrator()
    truth.add(Interval(hi=LEFT_BOUNDARY), ParamGrid.for_fields(Parabola, a=UniformRange.fixed(1.0)))
    truth.add_constrained(
        Interval(lo=LEFT_BOUNDARY, hi=RIGHT_BOUNDARY),
        UnitGrid(Line),
        left_input=LEFT_BOUNDARY,
        right_input=RIGHT_BOUNDARY,
        binder=LineBetween(LEFT_BOUNDARY, RIGHT_BOUNDARY),
    )
    truth.add(Interval(lo=RIGHT_BOUNDARY), ParamGrid.for_fields(Parabola, a=UniformRange.fixed(0.5)))
    return synthesize_observations(truth.make_at(0), noise_std=noise_std, seed=seed)


def build_demo() -> Tuple[Orchestrator, pd.DataFrame]:
    return build_demo_orchestrator(), demo_observations()
