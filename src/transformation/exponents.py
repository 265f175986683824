"""
Damage exponent decoding

PROPDMGEXP / CROPDMGEXP carry a single code giving the power of ten to
apply to PROPDMG / CROPDMG.
"""

import re
import polars as pl
from typing import Union

LETTER_EXPONENTS = {"h": 2, "k": 3, "m": 6, "b": 9}
ZERO_EXPONENT_CODES = {"", "-", "?", "+"}

# plain decimal number, no surrounding whitespace
_NUMBER_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")


class InvalidExponentError(ValueError):
    """Raised for a damage exponent code outside the known set"""

    def __init__(self, code):
        self.code = code
        super().__init__(f"Invalid damage exponent code: {code!r}")


def decode_exponent(code: str) -> Union[int, float]:
    """
    Decode an exponent code to a power of ten

    h/H→2, k/K→3, m/M→6, b/B→9, ""/-/?/+→0, a numeric string → its value.
    Letters are case-insensitive; the code is not trimmed.

    Raises:
        InvalidExponentError: for any other value
    """
    if not isinstance(code, str):
        raise InvalidExponentError(code)

    if code in ZERO_EXPONENT_CODES:
        return 0

    if len(code) == 1 and code.lower() in LETTER_EXPONENTS:
        return LETTER_EXPONENTS[code.lower()]

    if _NUMBER_PATTERN.fullmatch(code):
        value = float(code)
        return int(value) if value.is_integer() else value

    raise InvalidExponentError(code)


def build_exponent_table(codes) -> dict:
    """Decode each distinct code once; the first invalid code aborts"""
    return {code: float(decode_exponent(code)) for code in set(codes)}


def decode_exponent_column(df: pl.DataFrame, column: str) -> pl.Expr:
    """
    Expression decoding every code of `column` (nulls read as "")

    Args:
        df: Frame holding the code column
        column: Code column name

    Returns:
        pl.Expr: Float64 exponent per row
    """
    codes = df.get_column(column).fill_null("")
    table = build_exponent_table(codes.unique().to_list())
    return (
        pl.col(column)
        .fill_null("")
        .replace_strict(table, return_dtype=pl.Float64)
    )
