"""
Data Validators - Transform Layer

Pure functions for validating inputs and transformation outputs.
Ensures data quality and schema compliance.
"""

import polars as pl
from typing import Dict, Any
from src.extract.schemas import RAW_STORM_SCHEMA
from .event_types import CANONICAL_EVENT_TYPES, prepare_lookup
import logging

logger = logging.getLogger(__name__)


def validate_raw_storm_data(df: pl.DataFrame) -> bool:
    """
    Validate raw storm events before transformation

    Args:
        df: Raw storm events DataFrame

    Returns:
        bool: True if valid, raises exception if invalid
    """
    missing = [name for name in RAW_STORM_SCHEMA.names() if name not in df.columns]
    if missing:
        raise ValueError(f"Raw storm data is missing columns: {missing}")

    # Check for null values in required fields
    required_fields = ["REFNUM", "EVTYPE", "BGN_DATE"]
    for field in required_fields:
        null_count = df.get_column(field).null_count()
        if null_count > 0:
            raise ValueError(
                f"Null values found in required field '{field}': {null_count}"
            )

    duplicate_count = df.height - df.get_column("REFNUM").n_unique()
    if duplicate_count > 0:
        raise ValueError(f"Duplicate REFNUM values found: {duplicate_count}")

    logger.info(f"Raw storm data validation passed: {df.height} records")
    return True


def validate_event_type_lookup(lookup_df: pl.DataFrame, strict: bool = True) -> bool:
    """
    Validate the curated event type lookup

    Args:
        lookup_df: Lookup (evtype, event_type)
        strict: Require every canonical label to be an NWS event type

    Returns:
        bool: True if valid, raises exception if invalid
    """
    prepared = prepare_lookup(lookup_df)

    conflicting = (
        prepared.filter(pl.col("evtype_normalized").is_duplicated())
        .get_column("evtype_normalized")
        .unique()
        .sort()
        .to_list()
    )
    if conflicting:
        raise ValueError(f"Conflicting lookup entries for labels: {conflicting}")

    null_targets = prepared.get_column("event_type").null_count()
    if null_targets > 0:
        raise ValueError(f"Lookup has {null_targets} labels without an event type")

    if strict:
        unknown = sorted(
            set(prepared.get_column("event_type").to_list()) - CANONICAL_EVENT_TYPES
        )
        if unknown:
            raise ValueError(f"Lookup targets unknown event types: {unknown}")

    logger.info(f"Event type lookup validation passed: {prepared.height} entries")
    return True


def validate_data_quality(tidy_df: pl.DataFrame) -> Dict[str, Any]:
    """
    Validate data quality and return quality metrics

    Args:
        tidy_df: Tidy events DataFrame

    Returns:
        Dict: Quality metrics and validation results
    """
    logger.info("Validating data quality for tidy events")

    quality_metrics = {
        "total_records": tidy_df.height,
        "null_counts": {},
        "unmatched_records": tidy_df.get_column("event_type").null_count(),
        "negative_damage_records": tidy_df.filter(
            (pl.col("property_damage") < 0) | (pl.col("crop_damage") < 0)
        ).height,
    }

    # Check for null values in all columns
    for column in tidy_df.columns:
        quality_metrics["null_counts"][column] = tidy_df.get_column(column).null_count()

    # Log quality issues
    if quality_metrics["unmatched_records"] > 0:
        logger.warning(
            f"{quality_metrics['unmatched_records']} records have no canonical "
            "event type and are excluded from aggregates"
        )
    if quality_metrics["negative_damage_records"] > 0:
        logger.warning(
            f"Found {quality_metrics['negative_damage_records']} records "
            "with negative damage values"
        )

    logger.info("Data quality validation completed for tidy events")
    return quality_metrics


def validate_aggregate(
    aggregate_df: pl.DataFrame, tidy_df: pl.DataFrame, metric: str
) -> bool:
    """
    Validate a top-N aggregate against the tidy events it came from

    Args:
        aggregate_df: Output of aggregate_top_events
        tidy_df: Tidy events
        metric: Metric the aggregate was built from

    Returns:
        bool: True if valid, raises exception if invalid
    """
    totals = aggregate_df.get_column("total")
    if not totals.equals(totals.sort(descending=True)):
        raise ValueError(f"Aggregate for {metric} is not sorted by total descending")

    if aggregate_df.get_column("event_type").is_duplicated().any():
        raise ValueError(f"Aggregate for {metric} repeats an event type")

    aggregate_sum = totals.sum()
    raw_sum = tidy_df.get_column(metric).sum()
    # relative tolerance for summation order
    if aggregate_sum > raw_sum + abs(raw_sum) * 1e-9:
        raise ValueError(
            f"Aggregate total for {metric} ({aggregate_sum}) exceeds "
            f"the raw total ({raw_sum})"
        )

    logger.info(f"Aggregate validation passed for {metric}")
    return True
