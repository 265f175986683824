"""
Inflation adjustment

Yearly CPI ratios relative to a base year and the damage normalizer that
applies them.
"""

import polars as pl
from typing import Dict, Mapping, Iterable
from .exponents import decode_exponent
from .schemas import INFLATION_RATIO_SCHEMA
import logging

logger = logging.getLogger(__name__)


class MissingBaseYearError(LookupError):
    """The base year has no observations in the CPI series"""

    def __init__(self, base_year: int):
        self.base_year = base_year
        super().__init__(f"Base year {base_year} not present in the CPI series")


class InflationRangeError(ValueError):
    """Event years fall outside the CPI series coverage"""

    def __init__(self, years: Iterable[int]):
        self.years = sorted(years)
        super().__init__(
            f"No inflation ratio for event years {self.years}; "
            "the CPI series does not cover them"
        )


def compute_inflation_ratios(cpi_df: pl.DataFrame, base_year: int) -> pl.DataFrame:
    """
    Average the monthly index per year and divide by the base year's average

    Args:
        cpi_df: Monthly observations with columns date, value
        base_year: Reference year (ratio 1.0)

    Returns:
        pl.DataFrame: INFLATION_RATIO_SCHEMA, one row per year
    """
    logger.info(f"Computing inflation ratios relative to {base_year}")

    yearly = (
        cpi_df.group_by(pl.col("date").dt.year().cast(pl.Int32).alias("year"))
        .agg(pl.col("value").mean().alias("cpi_mean"))
        .sort("year")
    )

    base = yearly.filter(pl.col("year") == base_year)
    if base.height == 0:
        raise MissingBaseYearError(base_year)
    base_mean = base.get_column("cpi_mean").item()

    ratios = yearly.with_columns(
        (pl.col("cpi_mean") / base_mean).alias("ratio")
    ).cast(dict(INFLATION_RATIO_SCHEMA))

    logger.info(
        f"Computed {ratios.height} yearly ratios "
        f"({ratios['year'].min()}-{ratios['year'].max()})"
    )
    return ratios


def ratios_to_mapping(ratios_df: pl.DataFrame) -> Dict[int, float]:
    """year -> ratio"""
    return dict(zip(ratios_df["year"].to_list(), ratios_df["ratio"].to_list()))


def normalize_damage(
    magnitude: float, code: str, year: int, ratios: Mapping[int, float]
) -> float:
    """
    Inflation-adjusted damage value: magnitude * 10**exponent * ratio

    Raises:
        InvalidExponentError: if code is not a known exponent
        InflationRangeError: if year has no ratio
    """
    if year not in ratios:
        raise InflationRangeError([year])
    return magnitude * 10.0 ** decode_exponent(code) * ratios[year]
