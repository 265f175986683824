"""
Bar charts of the top-N aggregates.
"""

import os
from typing import Dict

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import polars as pl
import logging

logger = logging.getLogger(__name__)

METRIC_LABELS = {
    "fatalities": "Fatalities",
    "injuries": "Injuries",
    "casualties": "Fatalities + injuries",
    "property_damage": "Property damage (CPI-adjusted USD)",
    "crop_damage": "Crop damage (CPI-adjusted USD)",
    "economic_damage": "Property + crop damage (CPI-adjusted USD)",
}


def plot_top_events(aggregate_df: pl.DataFrame, metric: str, filepath: str) -> str:
    """
    Horizontal bar chart, largest total on top

    Args:
        aggregate_df: Output of aggregate_top_events
        metric: Metric the aggregate was built from
        filepath: PNG path to write

    Returns:
        str: Path to saved chart
    """
    label = METRIC_LABELS.get(metric, metric)
    labels = aggregate_df.get_column("event_type").to_list()[::-1]
    values = aggregate_df.get_column("total").to_list()[::-1]

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)

    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        ax.barh(range(len(values)), values)
        ax.set_yticks(range(len(labels)))
        ax.set_yticklabels(labels)
        ax.set_title(f"Top {len(values)} event types by {label.lower()}")
        ax.set_xlabel(label)
        ax.grid(True, axis="x", alpha=0.3)
        fig.tight_layout()
        fig.savefig(filepath, dpi=150)
    finally:
        plt.close(fig)

    logger.info(f"Saved {metric} chart to {filepath}")
    return filepath


def plot_all_aggregates(
    aggregates: Dict[str, pl.DataFrame], output_dir: str = "output"
) -> Dict[str, str]:
    """metric -> path of its bar chart"""
    return {
        metric: plot_top_events(
            df, metric, os.path.join(output_dir, "figures", f"top_{metric}.png")
        )
        for metric, df in aggregates.items()
    }
