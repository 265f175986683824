"""
Data Fetcher - Extract Layer

Pure functions for loading the report inputs.
No business logic, just I/O operations that return raw data.
"""

import io
import os
import polars as pl
from .schemas import RAW_STORM_SCHEMA, EVENT_TYPE_LOOKUP_SCHEMA, RAW_CPI_SCHEMA
from .sources_api import ReportSourcesClient, decompress_bz2
from src.coreutils.env import DEFAULT_CPI_SERIES_URL, DEFAULT_STORM_DATA_URL
import logging

logger = logging.getLogger(__name__)

STORM_DATA_FILE = "StormData.csv"
STORM_ARCHIVE_FILE = "StormData.csv.bz2"


def ensure_storm_data(
    data_dir: str, storm_data_url: str = DEFAULT_STORM_DATA_URL
) -> str:
    """
    Make sure the decompressed storm events CSV exists locally

    Downloads and/or decompresses the archive only when the CSV is missing.
    Partial files never land on the final paths; an archive that fails to
    decompress is removed.

    Args:
        data_dir: Directory holding the report inputs
        storm_data_url: Where to download the archive from

    Returns:
        str: Path to StormData.csv
    """
    csv_path = os.path.join(data_dir, STORM_DATA_FILE)
    archive_path = os.path.join(data_dir, STORM_ARCHIVE_FILE)

    if os.path.exists(csv_path):
        logger.info(f"Storm data already present: {csv_path}")
        return csv_path

    if not os.path.exists(archive_path):
        logger.info(f"{archive_path} not found, downloading")
        client = ReportSourcesClient(storm_data_url=storm_data_url)
        client.download_storm_data(archive_path)

    try:
        return decompress_bz2(archive_path, csv_path)
    except (EOFError, OSError) as e:
        # a truncated or corrupt archive is downloaded again on the next run
        logger.error(f"❌ Could not decompress {archive_path}, removing it: {e}")
        if os.path.exists(archive_path):
            os.remove(archive_path)
        raise


def load_raw_storm_data(csv_path: str) -> pl.DataFrame:
    """
    Load the raw storm events file

    Every field is read as text first; numeric fields in the file are written
    as decimals ("1.00"), so integer columns go through Float64.

    Args:
        csv_path: Path to StormData.csv

    Returns:
        pl.DataFrame: Raw events with RAW_STORM_SCHEMA
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Storm data file not found: {csv_path}")

    logger.info(f"Loading raw storm data from {csv_path}")

    lazy_df = pl.scan_csv(csv_path, infer_schema=False)
    available = set(lazy_df.collect_schema().names())
    missing = [name for name in RAW_STORM_SCHEMA.names() if name not in available]
    if missing:
        raise ValueError(f"Storm data file {csv_path} is missing columns: {missing}")

    casts = []
    for name, dtype in RAW_STORM_SCHEMA.items():
        if dtype == pl.Int64:
            casts.append(pl.col(name).cast(pl.Float64).cast(pl.Int64))
        else:
            casts.append(pl.col(name).cast(dtype))

    df = lazy_df.select(casts).collect()

    logger.info(f"Loaded {df.height} raw storm event records")
    return df


def load_event_type_lookup(lookup_path: str) -> pl.DataFrame:
    """
    Load the curated historical label -> canonical event type table

    Args:
        lookup_path: Path to the lookup CSV (lines starting with '#' are comments)

    Returns:
        pl.DataFrame: Lookup with EVENT_TYPE_LOOKUP_SCHEMA
    """
    if not os.path.exists(lookup_path):
        raise FileNotFoundError(f"Event type lookup not found: {lookup_path}")

    df = pl.read_csv(
        lookup_path,
        schema=EVENT_TYPE_LOOKUP_SCHEMA,
        comment_prefix="#",
    )

    logger.info(f"Loaded {df.height} event type lookup entries from {lookup_path}")
    return df


def parse_cpi_csv(data: bytes) -> pl.DataFrame:
    """
    Parse a FRED series CSV into (date, value)

    FRED has named the date column both DATE and observation_date, so
    columns are taken by position. Missing observations ('.') are dropped.
    """
    df = pl.read_csv(io.BytesIO(data), infer_schema=False)
    if df.width < 2:
        raise ValueError(f"Unexpected CPI series layout: columns={df.columns}")

    date_col, value_col = df.columns[0], df.columns[1]
    return (
        df.select(
            [
                pl.col(date_col).str.to_date("%Y-%m-%d").alias("date"),
                pl.col(value_col).cast(pl.Float64, strict=False).alias("value"),
            ]
        )
        .drop_nulls()
        .sort("date")
        .cast(dict(RAW_CPI_SCHEMA))
    )


def fetch_raw_cpi_data(cpi_series_url: str = DEFAULT_CPI_SERIES_URL) -> pl.DataFrame:
    """
    Fetch the monthly CPI series

    Returns:
        pl.DataFrame: CPI observations with RAW_CPI_SCHEMA
    """
    logger.info("Fetching raw CPI data")

    client = ReportSourcesClient(cpi_series_url=cpi_series_url)
    df = parse_cpi_csv(client.get_cpi_csv())

    logger.info(
        f"Fetched {df.height} CPI observations "
        f"({df['date'].min()} to {df['date'].max()})"
    )
    return df
