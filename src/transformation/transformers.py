"""
Data Transformers - Transform Layer

Pure functions building the tidy event table and the top-N impact
aggregates from the raw storm events, the CPI ratios and the curated
event-type lookup.
"""

import polars as pl
import duckdb
from typing import Dict, Any, List, Optional
from .schemas import (
    TIDY_EVENTS_SCHEMA,
    AGGREGATE_SCHEMA,
    METRICS,
)
from .exponents import decode_exponent_column
from .inflation import InflationRangeError
from .event_types import canonicalize_event_types
import logging

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10


def parse_noaa_date(column: str) -> pl.Expr:
    """
    Parse 'M/D/YYYY H:MM:SS' strings (month and day are not zero-padded)

    Args:
        column: Name of the string column

    Returns:
        pl.Expr: Date expression (null where the input is null)
    """
    parts = pl.col(column).str.split(" ").list.first().str.split("/")
    return pl.date(
        parts.list.get(2).cast(pl.Int32),
        parts.list.get(0).cast(pl.Int32),
        parts.list.get(1).cast(pl.Int32),
    )


def determine_base_year(raw_df: pl.DataFrame) -> int:
    """
    Earliest event year, used as the inflation reference

    Args:
        raw_df: Raw storm events

    Returns:
        int: Minimum year of BGN_DATE
    """
    base_year = raw_df.select(parse_noaa_date("BGN_DATE").dt.year().min()).item()
    if base_year is None:
        raise ValueError("Cannot determine base year: no parseable BGN_DATE values")

    logger.info(f"Base year for inflation adjustment: {base_year}")
    return int(base_year)


def build_tidy_events(
    raw_df: pl.DataFrame,
    inflation_df: pl.DataFrame,
    lookup_df: pl.DataFrame,
) -> pl.DataFrame:
    """
    Join raw events with decoded, inflation-adjusted damages and canonical types

    Args:
        raw_df: Raw storm events (RAW_STORM_SCHEMA)
        inflation_df: Yearly ratios (INFLATION_RATIO_SCHEMA)
        lookup_df: Curated event type lookup (evtype, event_type)

    Returns:
        pl.DataFrame: Tidy events with TIDY_EVENTS_SCHEMA

    Raises:
        InvalidExponentError: on an unknown PROPDMGEXP/CROPDMGEXP code
        InflationRangeError: when an event year has no CPI ratio
    """
    logger.info(f"Building tidy events from {raw_df.height} raw records")

    try:
        dated_df = raw_df.with_columns(
            [
                parse_noaa_date("BGN_DATE").alias("begin_date"),
                parse_noaa_date("END_DATE").alias("end_date"),
                pl.col("FATALITIES").fill_null(0.0).alias("fatalities"),
                pl.col("INJURIES").fill_null(0.0).alias("injuries"),
                pl.col("PROPDMG").fill_null(0.0),
                pl.col("CROPDMG").fill_null(0.0),
            ]
        ).with_columns(pl.col("begin_date").dt.year().cast(pl.Int32).alias("year"))

        # Decode every distinct code up front: an invalid one aborts the run
        decoded_df = dated_df.with_columns(
            [
                decode_exponent_column(dated_df, "PROPDMGEXP").alias("prop_exponent"),
                decode_exponent_column(dated_df, "CROPDMGEXP").alias("crop_exponent"),
            ]
        )

        adjusted_df = decoded_df.join(
            inflation_df.select(
                [pl.col("year"), pl.col("ratio").alias("inflation_ratio")]
            ),
            on="year",
            how="left",
            maintain_order="left",
        )

        uncovered = adjusted_df.filter(pl.col("inflation_ratio").is_null())
        if uncovered.height > 0:
            raise InflationRangeError(
                uncovered.get_column("year").drop_nulls().unique().to_list()
            )

        valued_df = adjusted_df.with_columns(
            [
                (
                    pl.col("PROPDMG")
                    * pl.lit(10.0).pow(pl.col("prop_exponent"))
                    * pl.col("inflation_ratio")
                ).alias("property_damage"),
                (
                    pl.col("CROPDMG")
                    * pl.lit(10.0).pow(pl.col("crop_exponent"))
                    * pl.col("inflation_ratio")
                ).alias("crop_damage"),
                (pl.col("fatalities") + pl.col("injuries")).alias("casualties"),
            ]
        ).with_columns(
            (pl.col("property_damage") + pl.col("crop_damage")).alias(
                "economic_damage"
            )
        )

        tidy_df = canonicalize_event_types(valued_df, lookup_df).select(
            [pl.col(name).cast(dtype) for name, dtype in TIDY_EVENTS_SCHEMA.items()]
        )

        logger.info(f"Created {tidy_df.height} tidy event records")
        return tidy_df

    except Exception as e:
        logger.error(f"❌ Error building tidy events: {e}")
        raise


def aggregate_top_events(
    tidy_df: pl.DataFrame, metric: str, top_n: int = DEFAULT_TOP_N
) -> pl.DataFrame:
    """
    Sum a metric per canonical event type and keep the top N

    Rows without a canonical event type are excluded. Groups tied with the
    N-th total are kept, so the result may be longer than N.

    Args:
        tidy_df: Tidy events
        metric: One of METRICS
        top_n: Rank cut-off

    Returns:
        pl.DataFrame: AGGREGATE_SCHEMA sorted by total descending
    """
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric!r} (expected one of {METRICS})")
    if top_n < 1:
        raise ValueError(f"top_n must be positive, got {top_n}")

    logger.info(f"Aggregating top {top_n} event types by {metric}")

    conn = duckdb.connect()
    try:
        conn.register("tidy_events", tidy_df.select(["event_type", metric]))

        sql = f"""
            WITH totals AS (
                SELECT
                    event_type
                    , COALESCE(SUM({metric}), 0)::DOUBLE AS total
                FROM tidy_events
                WHERE event_type IS NOT NULL
                  AND event_type <> ''
                GROUP BY event_type
            )
            , ranked AS (
                SELECT
                    event_type
                    , total
                    , RANK() OVER (ORDER BY total DESC) AS rnk
                FROM totals
            )
            SELECT
                event_type
                , total
            FROM ranked
            WHERE rnk <= ?
            ORDER BY total DESC, event_type
        """

        result_df = conn.execute(sql, [top_n]).pl()
    finally:
        conn.close()

    result_df = result_df.cast(dict(AGGREGATE_SCHEMA))
    logger.info(f"Aggregated {result_df.height} event types for {metric}")
    return result_df


def aggregate_all_metrics(
    tidy_df: pl.DataFrame,
    top_n: int = DEFAULT_TOP_N,
    metrics: Optional[List[str]] = None,
) -> Dict[str, pl.DataFrame]:
    """metric -> top-N aggregate table"""
    return {
        metric: aggregate_top_events(tidy_df, metric, top_n)
        for metric in (metrics or METRICS)
    }


def get_summary_stats(tidy_df: pl.DataFrame) -> Dict[str, Any]:
    """
    Get summary statistics for the tidy events

    Args:
        tidy_df: Tidy events

    Returns:
        Dict: Summary statistics
    """
    logger.info("Generating summary stats for tidy events")

    matched = tidy_df.height - tidy_df.get_column("event_type").null_count()
    stats = {
        "total_events": tidy_df.height,
        "first_year": tidy_df.get_column("year").min(),
        "last_year": tidy_df.get_column("year").max(),
        "evtype_unique": tidy_df.get_column("evtype_normalized").n_unique(),
        "event_type_unique": tidy_df.get_column("event_type").drop_nulls().n_unique(),
        "matched_events": matched,
        "matched_share": matched / tidy_df.height if tidy_df.height else 0.0,
    }
    for metric in METRICS:
        stats[f"{metric}_sum"] = tidy_df.get_column(metric).sum()
        stats[f"matched_{metric}_sum"] = (
            tidy_df.filter(pl.col("event_type").is_not_null())
            .get_column(metric)
            .sum()
        )

    logger.info(f"Generated summary stats: {list(stats.keys())}")
    return stats


def describe_metrics(tidy_df: pl.DataFrame) -> pl.DataFrame:
    """Descriptive statistics (count, mean, std, quantiles) per metric"""
    return tidy_df.select(METRICS).describe()
