"""
Local Storage - Load Layer

Pure functions for local file storage operations.
Handles Parquet and CSV outputs of the report tables.
"""

import polars as pl
import os
from typing import Dict
import logging

logger = logging.getLogger(__name__)


def save_parquet(df: pl.DataFrame, filepath: str) -> str:
    """
    Save DataFrame to Parquet file

    Args:
        df: DataFrame to save
        filepath: Path to save file

    Returns:
        str: Path to saved file
    """
    logger.info(f"Saving DataFrame to Parquet: {filepath}")

    # Ensure directory exists
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)

    df.write_parquet(filepath)

    logger.info(f"Saved {df.height} records to {filepath}")
    return filepath


def save_csv(df: pl.DataFrame, filepath: str) -> str:
    """
    Save DataFrame to CSV file

    Args:
        df: DataFrame to save
        filepath: Path to save file

    Returns:
        str: Path to saved file
    """
    logger.info(f"Saving DataFrame to CSV: {filepath}")

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)

    df.write_csv(filepath)

    logger.info(f"Saved {df.height} records to {filepath}")
    return filepath


def load_parquet(filepath: str) -> pl.DataFrame:
    """
    Load DataFrame from Parquet file

    Args:
        filepath: Path to Parquet file

    Returns:
        pl.DataFrame: Loaded DataFrame
    """
    logger.info(f"Loading DataFrame from Parquet: {filepath}")

    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Parquet file not found: {filepath}")

    df = pl.read_parquet(filepath)

    logger.info(f"Loaded {df.height} records from {filepath}")
    return df


def save_tidy_events(tidy_df: pl.DataFrame, output_dir: str = "output") -> str:
    """Save the tidy event table"""
    return save_parquet(tidy_df, os.path.join(output_dir, "tidy_events.parquet"))


def save_aggregates(
    aggregates: Dict[str, pl.DataFrame], output_dir: str = "output"
) -> Dict[str, str]:
    """
    Save one CSV per metric aggregate

    Args:
        aggregates: metric -> top-N table
        output_dir: Output directory

    Returns:
        Dict: metric -> path of saved file
    """
    return {
        metric: save_csv(df, os.path.join(output_dir, f"top_{metric}.csv"))
        for metric, df in aggregates.items()
    }
