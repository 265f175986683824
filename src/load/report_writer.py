"""
Report Writer - Load Layer

Renders the summary statistics and the top-N tables as a markdown report.
"""

import os
from datetime import date
from typing import Any, Dict, Optional

import polars as pl
import logging

from .plots import METRIC_LABELS

logger = logging.getLogger(__name__)


def format_table(df: pl.DataFrame) -> str:
    """Render a DataFrame as a markdown table"""
    with pl.Config(
        tbl_formatting="MARKDOWN",
        tbl_hide_column_data_types=True,
        tbl_hide_dataframe_shape=True,
        tbl_rows=-1,
        tbl_cols=-1,
        tbl_width_chars=1000,
        thousands_separator=",",
        float_precision=0,
    ):
        return str(df)


def render_report(
    stats: Dict[str, Any],
    metric_description: pl.DataFrame,
    aggregates: Dict[str, pl.DataFrame],
    figures: Optional[Dict[str, str]] = None,
    base_year: Optional[int] = None,
    report_date: Optional[date] = None,
) -> str:
    """
    Build the markdown report body

    Args:
        stats: Output of get_summary_stats
        metric_description: Output of describe_metrics
        aggregates: metric -> top-N table
        figures: metric -> chart path (relative links are written as given)
        base_year: Inflation reference year
        report_date: Date printed in the header (defaults to today)

    Returns:
        str: Markdown text
    """
    figures = figures or {}
    report_date = report_date or date.today()
    lines = [
        "# Health and economic impact of severe weather events",
        "",
        f"Generated {report_date.isoformat()}.",
        "",
        "## Summary",
        "",
        f"- Events: {stats['total_events']:,} ({stats['first_year']}-{stats['last_year']})",
        f"- Distinct recorded labels: {stats['evtype_unique']:,}",
        f"- Canonical event types present: {stats['event_type_unique']}",
        f"- Events with a canonical type: {stats['matched_events']:,} "
        f"({stats['matched_share']:.2%})",
    ]
    if base_year is not None:
        lines.append(f"- Damages are expressed relative to {base_year} CPI")

    lines += ["", "## Descriptive statistics", "", format_table(metric_description)]

    for metric, df in aggregates.items():
        label = METRIC_LABELS.get(metric, metric)
        lines += ["", f"## Top event types by {label.lower()}", "", format_table(df)]
        if metric in figures:
            lines += ["", f"![{label}]({figures[metric]})"]

    return "\n".join(lines) + "\n"


def write_report(text: str, filepath: str) -> str:
    """Write the markdown report to disk"""
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    with open(filepath, "w") as f:
        f.write(text)

    logger.info(f"Saved report to {filepath}")
    return filepath
