"""Scoring and reporting for fits."""

from .scoring import (
    pearson_correlation,
    spearman_correlation,
    mse,
    neg_mse,
    make_scorer,
    SCORES,
)
from .reports import combination_frame, generate_fit_report

__all__ = [
    'pearson_correlation',
    'spearman_correlation',
    'mse',
    'neg_mse',
    'make_scorer',
    'SCORES',
    'combination_frame',
    'generate_fit_report',
]
