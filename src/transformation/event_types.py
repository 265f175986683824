"""
Event-type canonicalization

Historical EVTYPE labels are matched against a manually curated lookup
(normalized label -> one of the 48 NWS Directive 10-1605 event types).
Automated fuzzy matching is not used.
"""

import polars as pl
from typing import Optional
import logging

logger = logging.getLogger(__name__)

CANONICAL_EVENT_TYPES = frozenset(
    [
        "Astronomical Low Tide",
        "Avalanche",
        "Blizzard",
        "Coastal Flood",
        "Cold/Wind Chill",
        "Debris Flow",
        "Dense Fog",
        "Dense Smoke",
        "Drought",
        "Dust Devil",
        "Dust Storm",
        "Excessive Heat",
        "Extreme Cold/Wind Chill",
        "Flash Flood",
        "Flood",
        "Frost/Freeze",
        "Funnel Cloud",
        "Freezing Fog",
        "Hail",
        "Heat",
        "Heavy Rain",
        "Heavy Snow",
        "High Surf",
        "High Wind",
        "Hurricane (Typhoon)",
        "Ice Storm",
        "Lake-Effect Snow",
        "Lakeshore Flood",
        "Lightning",
        "Marine Hail",
        "Marine High Wind",
        "Marine Strong Wind",
        "Marine Thunderstorm Wind",
        "Rip Current",
        "Seiche",
        "Sleet",
        "Storm Surge/Tide",
        "Strong Wind",
        "Thunderstorm Wind",
        "Tornado",
        "Tropical Depression",
        "Tropical Storm",
        "Tsunami",
        "Volcanic Ash",
        "Waterspout",
        "Wildfire",
        "Winter Storm",
        "Winter Weather",
    ]
)


def normalize_event_label(label: Optional[str]) -> Optional[str]:
    """Uppercase and strip a free-text label"""
    if label is None:
        return None
    return label.upper().strip()


def normalize_event_label_expr(column: str) -> pl.Expr:
    """Column form of normalize_event_label"""
    return pl.col(column).str.to_uppercase().str.strip_chars()


def prepare_lookup(lookup_df: pl.DataFrame) -> pl.DataFrame:
    """Normalize lookup keys and drop exact duplicate entries"""
    return (
        lookup_df.select(
            [
                normalize_event_label_expr("evtype").alias("evtype_normalized"),
                pl.col("event_type"),
            ]
        )
        .drop_nulls("evtype_normalized")
        .unique(maintain_order=True)
    )


def canonicalize_event_types(
    df: pl.DataFrame, lookup_df: pl.DataFrame, label_column: str = "EVTYPE"
) -> pl.DataFrame:
    """
    Attach the canonical event type to each row

    Args:
        df: Events with a free-text label column
        lookup_df: Curated lookup (evtype, event_type)
        label_column: Name of the free-text label column

    Returns:
        pl.DataFrame: df plus evtype_normalized and event_type (null when unmatched)
    """
    logger.info(f"Canonicalizing {label_column} against {lookup_df.height} lookup entries")

    lookup = prepare_lookup(lookup_df)
    if lookup.get_column("evtype_normalized").is_duplicated().any():
        raise ValueError("Event type lookup maps a label to more than one event type")

    result = df.with_columns(
        normalize_event_label_expr(label_column).alias("evtype_normalized")
    ).join(lookup, on="evtype_normalized", how="left", maintain_order="left")

    unmatched = result.get_column("event_type").null_count()
    if unmatched:
        logger.warning(
            f"{unmatched} of {result.height} rows have no canonical event type"
        )
    return result


def find_unmatched_labels(df: pl.DataFrame) -> pl.DataFrame:
    """
    Normalized labels without a canonical event type, most frequent first

    Args:
        df: Output of canonicalize_event_types

    Returns:
        pl.DataFrame: evtype_normalized, rows
    """
    return (
        df.filter(pl.col("event_type").is_null())
        .group_by("evtype_normalized")
        .agg(pl.len().alias("rows"))
        .sort(["rows", "evtype_normalized"], descending=[True, False])
    )
