"""
Extract Layer Schemas

Raw data schemas for data coming from external sources.
These represent the structure of the storm events file, the curated
event-type lookup and the CPI series as they are read from disk / FRED.
"""

import polars as pl

# Columns read from StormData.csv (the file has 37; the rest are unused)
RAW_STORM_SCHEMA = pl.Schema(
    [
        ("REFNUM", pl.Int64()),
        ("STATE", pl.String()),
        ("COUNTYNAME", pl.String()),
        ("EVTYPE", pl.String()),
        ("BGN_DATE", pl.String()),
        ("END_DATE", pl.String()),
        ("FATALITIES", pl.Float64()),
        ("INJURIES", pl.Float64()),
        ("PROPDMG", pl.Float64()),
        ("PROPDMGEXP", pl.String()),
        ("CROPDMG", pl.Float64()),
        ("CROPDMGEXP", pl.String()),
    ]
)

EVENT_TYPE_LOOKUP_SCHEMA = pl.Schema(
    [
        ("evtype", pl.String()),
        ("event_type", pl.String()),
    ]
)

RAW_CPI_SCHEMA = pl.Schema(
    [
        ("date", pl.Date()),
        ("value", pl.Float64()),
    ]
)
