"""
Test Transform Layer - tidy events and top-N aggregates
"""

import os
import sys
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import polars as pl
import pytest
from src.transformation.exponents import InvalidExponentError
from src.transformation.inflation import InflationRangeError, compute_inflation_ratios
from src.transformation.schemas import TIDY_EVENTS_SCHEMA, AGGREGATE_SCHEMA
from src.transformation.transformers import (
    aggregate_all_metrics,
    aggregate_top_events,
    build_tidy_events,
    describe_metrics,
    determine_base_year,
    get_summary_stats,
    parse_noaa_date,
)
from sample_data import make_cpi, make_flat_cpi, make_lookup, make_raw_events


def test_parse_noaa_date_handles_unpadded_fields():
    df = pl.DataFrame(
        {"BGN_DATE": ["4/18/1950 0:00:00", "12/31/2011 0:00:00", None]}
    )

    result = df.select(parse_noaa_date("BGN_DATE").alias("d"))

    assert result["d"].to_list() == [date(1950, 4, 18), date(2011, 12, 31), None]


def test_determine_base_year_is_earliest_event_year():
    raw_df = make_raw_events(
        [
            {"BGN_DATE": "6/1/1996 0:00:00"},
            {"BGN_DATE": "1/3/1952 0:00:00"},
            {"BGN_DATE": "11/30/2011 0:00:00"},
        ]
    )

    assert determine_base_year(raw_df) == 1952


def test_build_tidy_events_decodes_and_adjusts_damages():
    raw_df = make_raw_events(
        [
            {
                "EVTYPE": " tornado ",
                "BGN_DATE": "4/18/1950 0:00:00",
                "END_DATE": "4/19/1950 0:00:00",
                "FATALITIES": 2.0,
                "INJURIES": 5.0,
                "PROPDMG": 25.0,
                "PROPDMGEXP": "K",
                "CROPDMG": 1.5,
                "CROPDMGEXP": "m",
            },
            {
                "EVTYPE": "SUMMARY OF JUNE 3",
                "BGN_DATE": "6/3/1951 0:00:00",
                "PROPDMG": 4.0,
                "PROPDMGEXP": None,
                "CROPDMGEXP": "?",
            },
        ]
    )
    inflation_df = compute_inflation_ratios(
        make_cpi({1950: [20.0, 20.0], 1951: [40.0]}), 1950
    )
    lookup_df = make_lookup({"TORNADO": "Tornado"})

    tidy_df = build_tidy_events(raw_df, inflation_df, lookup_df)

    assert tidy_df.schema == TIDY_EVENTS_SCHEMA
    first, second = tidy_df.to_dicts()

    assert first["event_type"] == "Tornado"
    assert first["begin_date"] == date(1950, 4, 18)
    assert first["end_date"] == date(1950, 4, 19)
    assert first["year"] == 1950
    assert first["casualties"] == 7.0
    assert first["property_damage"] == 25_000.0
    assert first["crop_damage"] == 1_500_000.0
    assert first["economic_damage"] == 1_525_000.0

    # unmatched label is kept with a null canonical type
    assert second["event_type"] is None
    assert second["evtype_normalized"] == "SUMMARY OF JUNE 3"
    assert second["inflation_ratio"] == 2.0
    assert second["property_damage"] == 8.0
    assert second["end_date"] is None


def test_build_tidy_events_invalid_exponent_aborts():
    raw_df = make_raw_events([{"PROPDMG": 1.0, "PROPDMGEXP": "x"}])

    with pytest.raises(InvalidExponentError):
        build_tidy_events(
            raw_df,
            compute_inflation_ratios(make_flat_cpi(1950, 1950), 1950),
            make_lookup({"TORNADO": "Tornado"}),
        )


def test_build_tidy_events_year_outside_cpi_aborts():
    raw_df = make_raw_events(
        [{"BGN_DATE": "4/18/1950 0:00:00"}, {"BGN_DATE": "7/4/1960 0:00:00"}]
    )
    inflation_df = compute_inflation_ratios(make_flat_cpi(1950, 1955), 1950)

    with pytest.raises(InflationRangeError) as exc_info:
        build_tidy_events(raw_df, inflation_df, make_lookup({"TORNADO": "Tornado"}))

    assert exc_info.value.years == [1960]


def _tidy_from(rows, lookup):
    raw_df = make_raw_events(rows)
    inflation_df = compute_inflation_ratios(make_flat_cpi(1950, 1950), 1950)
    return build_tidy_events(raw_df, inflation_df, make_lookup(lookup))


def test_end_to_end_tornado_and_flood_fatalities():
    tidy_df = _tidy_from(
        [
            {"EVTYPE": " tornado ", "FATALITIES": 1.0},
            {"EVTYPE": "TORNADO", "FATALITIES": 2.0},
            {"EVTYPE": "FLOOD", "FATALITIES": 5.0},
        ],
        {"TORNADO": "TORNADO", "FLOOD": "FLOOD"},
    )

    result = aggregate_top_events(tidy_df, "fatalities")

    assert result.schema == AGGREGATE_SCHEMA
    assert result.to_dicts() == [
        {"event_type": "FLOOD", "total": 5.0},
        {"event_type": "TORNADO", "total": 3.0},
    ]


def test_aggregate_keeps_ties_at_the_cutoff():
    totals = [12, 11, 10, 9, 8, 7, 6, 5, 4, 3, 3, 1]
    labels = [f"T{i:02d}" for i in range(len(totals))]
    tidy_df = _tidy_from(
        [
            {"EVTYPE": label, "INJURIES": float(total)}
            for label, total in zip(labels, totals)
        ],
        {label: label for label in labels},
    )

    result = aggregate_top_events(tidy_df, "injuries", top_n=10)

    assert result.height == 11
    assert result["event_type"].to_list()[-2:] == ["T09", "T10"]
    assert result["total"].to_list() == sorted(result["total"].to_list(), reverse=True)
    assert result["total"].sum() <= tidy_df["injuries"].sum()


def test_aggregate_without_ties_is_exactly_top_n():
    labels = [f"T{i:02d}" for i in range(15)]
    tidy_df = _tidy_from(
        [{"EVTYPE": label, "FATALITIES": float(i + 1)} for i, label in enumerate(labels)],
        {label: label for label in labels},
    )

    result = aggregate_top_events(tidy_df, "fatalities")

    assert result.height == 10
    assert result["total"].to_list()[0] == 15.0
    assert result["total"].to_list()[-1] == 6.0


def test_aggregate_excludes_unmatched_rows():
    tidy_df = _tidy_from(
        [
            {"EVTYPE": "HAIL", "PROPDMG": 1.0, "PROPDMGEXP": "K"},
            {"EVTYPE": "APACHE COUNTY", "PROPDMG": 9.0, "PROPDMGEXP": "B"},
        ],
        {"HAIL": "Hail"},
    )

    result = aggregate_top_events(tidy_df, "property_damage")

    assert result.to_dicts() == [{"event_type": "Hail", "total": 1000.0}]
    assert result["total"].sum() <= tidy_df["property_damage"].sum()


def test_aggregate_rejects_unknown_metric():
    tidy_df = _tidy_from([{"EVTYPE": "HAIL"}], {"HAIL": "Hail"})

    with pytest.raises(ValueError):
        aggregate_top_events(tidy_df, "REFNUM")


def test_aggregate_all_metrics_covers_every_metric():
    tidy_df = _tidy_from(
        [
            {"EVTYPE": "HAIL", "FATALITIES": 1.0, "CROPDMG": 2.0, "CROPDMGEXP": "k"},
            {"EVTYPE": "FLOOD", "INJURIES": 4.0, "PROPDMG": 3.0, "PROPDMGEXP": "M"},
        ],
        {"HAIL": "Hail", "FLOOD": "Flood"},
    )

    aggregates = aggregate_all_metrics(tidy_df)

    assert set(aggregates) == {
        "fatalities",
        "injuries",
        "casualties",
        "property_damage",
        "crop_damage",
        "economic_damage",
    }
    assert aggregates["economic_damage"].to_dicts() == [
        {"event_type": "Flood", "total": 3_000_000.0},
        {"event_type": "Hail", "total": 2_000.0},
    ]
    assert aggregates["casualties"]["event_type"].to_list() == ["Flood", "Hail"]


def test_summary_stats_and_description():
    tidy_df = _tidy_from(
        [
            {"EVTYPE": "HAIL", "FATALITIES": 1.0},
            {"EVTYPE": "HAIL", "FATALITIES": 2.0},
            {"EVTYPE": "OTHER", "FATALITIES": 4.0},
        ],
        {"HAIL": "Hail"},
    )

    stats = get_summary_stats(tidy_df)

    assert stats["total_events"] == 3
    assert stats["first_year"] == 1950
    assert stats["matched_events"] == 2
    assert stats["event_type_unique"] == 1
    assert stats["fatalities_sum"] == 7.0
    assert stats["matched_fatalities_sum"] == 3.0

    description = describe_metrics(tidy_df)
    assert "statistic" in description.columns
    assert "economic_damage" in description.columns


def test_aggregate_excludes_empty_canonical_label():
    tidy_df = _tidy_from(
        [
            {"EVTYPE": "HAIL", "FATALITIES": 8.0},
            {"EVTYPE": "FLOOD", "FATALITIES": 2.0},
        ],
        {"HAIL": "", "FLOOD": "Flood"},
    )

    result = aggregate_top_events(tidy_df, "fatalities")

    assert result.to_dicts() == [{"event_type": "Flood", "total": 2.0}]


def test_tidy_damages_scale_with_magnitude():
    rows = [
        {"PROPDMG": magnitude, "PROPDMGEXP": "K", "CROPDMG": magnitude, "CROPDMGEXP": "m",
         "BGN_DATE": "8/24/1951 0:00:00"}
        for magnitude in [0.75, 3.0, 41.5]
    ]
    doubled = [
        {**row, "PROPDMG": row["PROPDMG"] * 2, "CROPDMG": row["CROPDMG"] * 2}
        for row in rows
    ]
    inflation_df = compute_inflation_ratios(
        make_cpi({1950: [100.0], 1951: [113.7]}), 1950
    )
    lookup_df = make_lookup({"TORNADO": "Tornado"})

    single_df = build_tidy_events(make_raw_events(rows), inflation_df, lookup_df)
    double_df = build_tidy_events(make_raw_events(doubled), inflation_df, lookup_df)

    for column in ["property_damage", "crop_damage", "economic_damage"]:
        assert double_df[column].to_list() == [
            value * 2 for value in single_df[column].to_list()
        ], column
