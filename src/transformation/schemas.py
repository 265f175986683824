"""
Transformation Layer Schemas

Schemas for the tidy event table, the inflation ratio table and the
top-N aggregates built from them.
"""

import polars as pl

INFLATION_RATIO_SCHEMA = pl.Schema(
    [
        ("year", pl.Int32()),
        ("cpi_mean", pl.Float64()),
        ("ratio", pl.Float64()),
    ]
)

TIDY_EVENTS_SCHEMA = pl.Schema(
    [
        ("REFNUM", pl.Int64()),
        ("STATE", pl.String()),
        ("COUNTYNAME", pl.String()),
        ("EVTYPE", pl.String()),
        ("evtype_normalized", pl.String()),
        ("event_type", pl.String()),
        ("begin_date", pl.Date()),
        ("end_date", pl.Date()),
        ("year", pl.Int32()),
        ("fatalities", pl.Float64()),
        ("injuries", pl.Float64()),
        ("casualties", pl.Float64()),
        ("PROPDMG", pl.Float64()),
        ("PROPDMGEXP", pl.String()),
        ("prop_exponent", pl.Float64()),
        ("CROPDMG", pl.Float64()),
        ("CROPDMGEXP", pl.String()),
        ("crop_exponent", pl.Float64()),
        ("inflation_ratio", pl.Float64()),
        ("property_damage", pl.Float64()),
        ("crop_damage", pl.Float64()),
        ("economic_damage", pl.Float64()),
    ]
)

AGGREGATE_SCHEMA = pl.Schema(
    [
        ("event_type", pl.String()),
        ("total", pl.Float64()),
    ]
)

# Metric name -> tidy column summed by the aggregator
HEALTH_METRICS = ["fatalities", "injuries", "casualties"]
ECONOMIC_METRICS = ["property_damage", "crop_damage", "economic_damage"]
METRICS = HEALTH_METRICS + ECONOMIC_METRICS
