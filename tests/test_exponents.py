"""
Test damage exponent decoding
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import polars as pl
import pytest
from src.transformation.exponents import (
    InvalidExponentError,
    decode_exponent,
    decode_exponent_column,
)


def test_letter_codes_are_case_insensitive():
    codes = ["h", "H", "k", "K", "m", "M", "b", "B"]
    expected = [2, 2, 3, 3, 6, 6, 9, 9]

    assert [decode_exponent(code) for code in codes] == expected


def test_blank_and_symbol_codes_decode_to_zero():
    for code in ["", "-", "?", "+"]:
        assert decode_exponent(code) == 0, f"code {code!r}"


def test_numeric_codes_decode_to_their_value():
    assert decode_exponent("3") == 3
    assert decode_exponent("0") == 0
    assert decode_exponent("8") == 8
    assert isinstance(decode_exponent("5"), int)
    assert decode_exponent("1.5") == 1.5


def test_unknown_codes_raise():
    for code in ["x", "KK", " K", "K ", "1e3", "nan"]:
        with pytest.raises(InvalidExponentError):
            decode_exponent(code)


def test_non_string_code_raises():
    with pytest.raises(InvalidExponentError):
        decode_exponent(None)


def test_invalid_exponent_error_is_value_error():
    with pytest.raises(ValueError) as exc_info:
        decode_exponent("x")

    assert exc_info.value.code == "x"
    assert "'x'" in str(exc_info.value)


def test_decode_exponent_column_reads_null_as_blank():
    df = pl.DataFrame({"PROPDMGEXP": ["K", None, "m", "", "2"]})

    result = df.select(decode_exponent_column(df, "PROPDMGEXP").alias("exp"))

    assert result["exp"].to_list() == [3.0, 0.0, 6.0, 0.0, 2.0]
    assert result["exp"].dtype == pl.Float64


def test_decode_exponent_column_rejects_invalid_code():
    df = pl.DataFrame({"CROPDMGEXP": ["K", "z"]})

    with pytest.raises(InvalidExponentError):
        decode_exponent_column(df, "CROPDMGEXP")
