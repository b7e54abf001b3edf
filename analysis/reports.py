"""
Report generation (analysis/reports.py).
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd


def combination_frame(orchestrator, global_index: int) -> pd.DataFrame:
    """
    Parameter table of one combination.

    Free segments list their grid values. Constrained segments list the
    values their binder fit, taken from the built model.

    Columns: segment, position, constrained, label, index, value
    """
    rows = orchestrator.describe(global_index)

    pm = orchestrator.make_at(global_index)
    for position, (entry, model) in enumerate(zip(orchestrator.entries, pm.models)):
        if not entry.is_constrained() or model is None or not hasattr(model, 'params'):
            continue
        # Fitted values override the blank grid values
        rows = [r for r in rows if r['position'] != position]
        for i, (label, value) in enumerate(model.params().items()):
            rows.append({
                'segment': entry.name,
                'position': position,
                'constrained': True,
                'label': label,
                'index': i,
                'value': value,
            })

    columns = ['segment', 'position', 'constrained', 'label', 'index', 'value']
    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values(['position', 'index']).reset_index(drop=True)


def generate_fit_report(
    name: str,
    result: Dict[str, Any],
    params: pd.DataFrame,
    output_path: Optional[Path] = None,
) -> str:
    """
    Generate a markdown report for the best combination of a fit.

    Args:
        name: Problem name
        result: SearchResult.to_dict()
        params: combination_frame() of the best index
        output_path: Optional path to save report

    Returns:
        Markdown report string
    """
    score = result.get('best_score')
    score_str = f"{score:.6f}" if score is not None else 'N/A'
    direction = 'max' if result.get('maximize', True) else 'min'

    lines = [
        f"# Fit Report: {name}",
        "",
        f"Generated: {datetime.now().isoformat()}",
        "",
        "## Summary",
        "",
        f"- **Combinations**: {result.get('n_total', 0)}",
        f"- **Scored**: {result.get('n_scored', 0)}",
        f"- **Best index**: {result.get('best_index', 'N/A')}",
        f"- **Best score** ({direction}): {score_str}",
        f"- **Runtime**: {result.get('runtime_seconds', 0):.2f}s",
        "",
    ]

    skipped = result.get('skipped') or {}
    if skipped:
        lines.extend(["## Skipped", ""])
        for code, n in sorted(skipped.items()):
            lines.append(f"- {code}: {n}")
        lines.append("")

    if not params.empty:
        lines.extend([
            "## Parameters",
            "",
            "| Segment | Kind | Param | Value |",
            "|---------|------|-------|-------|",
        ])
        for row in params.itertuples(index=False):
            kind = 'constrained' if row.constrained else 'free'
            label = row.label if row.label else f"p{row.index}"
            value = f"{row.value:.6g}" if isinstance(row.value, float) else str(row.value)
            lines.append(f"| {row.segment} | {kind} | {label} | {value} |")
        lines.append("")

    report = "\n".join(lines)

    if output_path is not None:
        Path(output_path).write_text(report)

    return report
