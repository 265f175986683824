"""
List EVTYPE labels that the event type lookup does not cover yet.

Used when curating data/event_type_lookup_v1.csv: prints the most frequent
unmatched labels with their fatalities, injuries and damages so the rows
that matter for the aggregates get mapped first.
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import polars as pl
from src.coreutils.env import get_report_settings
from src.extract.data_fetcher import (
    ensure_storm_data,
    load_raw_storm_data,
    load_event_type_lookup,
)
from src.transformation.event_types import (
    canonicalize_event_types,
    find_unmatched_labels,
)


def unmatched_label_impact(df: pl.DataFrame) -> pl.DataFrame:
    """Unmatched labels with their row counts and raw impact, worst first"""
    # per-label impact; the join keeps only the unmatched labels
    impact = df.group_by("evtype_normalized").agg(
        [
            pl.col("FATALITIES").sum().alias("fatalities"),
            pl.col("INJURIES").sum().alias("injuries"),
            (pl.col("PROPDMG") + pl.col("CROPDMG")).sum().alias("raw_damage"),
        ]
    )
    return (
        find_unmatched_labels(df)
        .join(impact, on="evtype_normalized", how="left")
        .sort(["fatalities", "injuries", "rows"], descending=True)
    )


def main():
    settings = get_report_settings()

    parser = argparse.ArgumentParser(description="List unmatched EVTYPE labels")
    parser.add_argument("--data-dir", default=settings["data_dir"])
    parser.add_argument("--lookup", default=settings["lookup_path"])
    parser.add_argument("--limit", type=int, default=50)
    args = parser.parse_args()

    raw_df = load_raw_storm_data(
        ensure_storm_data(args.data_dir, settings["storm_data_url"])
    )
    lookup_df = load_event_type_lookup(args.lookup)

    df = canonicalize_event_types(raw_df, lookup_df)
    unmatched = unmatched_label_impact(df)

    print(f"{unmatched.height} unmatched labels ({df['event_type'].null_count()} rows)")
    with pl.Config(tbl_rows=args.limit, fmt_str_lengths=60):
        print(unmatched.head(args.limit))


if __name__ == "__main__":
    main()
