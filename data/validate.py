"""
Data integrity gate for observation validation.

Runs automatically before each fit. If validation fails, the fit is aborted.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np
import pandas as pd


@dataclass
class ValidationReport:
    """Result of observation validation."""
    passed: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    total_rows: int = 0
    x_min: float = float('nan')
    x_max: float = float('nan')

    def __str__(self) -> str:
        lines = [
            f"Validation: {'PASSED' if self.passed else 'FAILED'}",
            f"Observations: {self.total_rows}, x in [{self.x_min}, {self.x_max}]",
        ]
        for title, items in (("Errors", self.errors), ("Warnings", self.warnings)):
            if items:
                lines.append(f"{title}:")
                lines.extend(f"  - {item}" for item in items)
        return "\n".join(lines)


def validate_observations(df: pd.DataFrame, min_points: int = 2) -> ValidationReport:
    """
    Validate observed (x, y) data.

    Checks:
    1. Columns x and y present and numeric
    2. No NaN / inf values
    3. At least min_points rows
    4. Warn if x is unsorted or has duplicates (allowed, but unusual)

    Args:
        df: DataFrame with x, y columns
        min_points: Minimum number of observations

    Returns:
        ValidationReport with pass/fail
    """
    report = ValidationReport(passed=True, total_rows=len(df))

    if df.empty:
        report.passed = False
        report.errors.append("DataFrame is empty")
        return report

    missing_cols = [c for c in ('x', 'y') if c not in df.columns]
    if missing_cols:
        report.passed = False
        report.errors.append(f"Missing columns: {missing_cols}")
        return report

    for col in ('x', 'y'):
        if not pd.api.types.is_numeric_dtype(df[col]):
            report.passed = False
            report.errors.append(f"{col} is not numeric (dtype {df[col].dtype})")
    if not report.passed:
        return report

    for col in ('x', 'y'):
        nan_count = int(df[col].isna().sum())
        if nan_count > 0:
            report.passed = False
            report.errors.append(f"{nan_count} NaN values in {col}")
        inf_count = int(np.isinf(df[col].to_numpy(dtype=float)).sum())
        if inf_count > 0:
            report.passed = False
            report.errors.append(f"{inf_count} infinite values in {col}")

    if len(df) < min_points:
        report.passed = False
        report.errors.append(f"{len(df)} observations, need at least {min_points}")

    if not df['x'].is_monotonic_increasing:
        report.warnings.append("x is not sorted ascending")

    duplicates = int(df['x'].duplicated().sum())
    if duplicates > 0:
        report.warnings.append(f"{duplicates} duplicate x values")

    report.x_min = float(df['x'].min())
    report.x_max = float(df['x'].max())

    return report
