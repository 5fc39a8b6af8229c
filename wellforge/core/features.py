"""
Derived well features: pure functions of columns already in the table.
"""
from datetime import date
from enum import Enum
from typing import Optional
import polars as pl

from wellforge.domain.exceptions import SchemaMismatchError, InvalidDataException
from wellforge.config.logging_config import logger


class RatePolicy(str, Enum):
    """What a rate does when the elapsed time is zero, negative or unknown."""
    NULL = "null"
    RAISE = "raise"


def add_derived_feature(df: pl.DataFrame, name: str, expression: pl.Expr) -> pl.DataFrame:
    """Add expression as a new column; an existing column of that name is an error."""
    if name in df.columns:
        raise SchemaMismatchError(f"Derived column '{name}' already exists")
    return df.with_columns(expression.alias(name))


def add_elapsed_days(
    df: pl.DataFrame,
    date_column: str,
    name: str,
    reference: Optional[date] = None,
) -> pl.DataFrame:
    """
    Days from reference to each row's date_column.
    The reference defaults to the earliest date observed across all rows.
    """
    if date_column not in df.columns:
        raise SchemaMismatchError(f"Date column '{date_column}' not found; available: {df.columns}")
    if df.schema[date_column] != pl.Date:
        raise SchemaMismatchError(f"Column '{date_column}' must be a date, found {df.schema[date_column]}")
    if reference is None:
        reference = df.get_column(date_column).min()
    if reference is None:
        return add_derived_feature(df, name, pl.lit(None, dtype=pl.Int64))
    return add_derived_feature(
        df, name, (pl.col(date_column) - pl.lit(reference)).dt.total_days()
    )


def add_rate_feature(
    df: pl.DataFrame,
    numerator: str,
    date_column: str,
    name: str,
    reference: Optional[date] = None,
    zero_policy: RatePolicy = RatePolicy.NULL,
) -> pl.DataFrame:
    """
    numerator divided by the days elapsed since the reference date.

    With RatePolicy.NULL, rows whose elapsed time is zero, negative or
    unknown get a missing rate. RatePolicy.RAISE rejects such rows with
    InvalidDataException instead.
    """
    zero_policy = RatePolicy(zero_policy)
    if numerator not in df.columns:
        raise SchemaMismatchError(f"Rate numerator '{numerator}' not found; available: {df.columns}")
    if not df.schema[numerator].is_numeric():
        raise SchemaMismatchError(f"Rate numerator '{numerator}' is not numeric")

    elapsed_column = f"__{name}_elapsed_days"
    df = add_elapsed_days(df, date_column, elapsed_column, reference)
    elapsed = pl.col(elapsed_column)

    invalid = df.filter(elapsed.is_null() | (elapsed <= 0)).height
    if invalid:
        if zero_policy is RatePolicy.RAISE:
            raise InvalidDataException(
                f"{invalid} row(s) have zero, negative or unknown time elapsed in '{date_column}' for rate '{name}'"
            )
        logger.warning(f"Rate '{name}': {invalid} row(s) without positive elapsed time left missing")

    rate = (
        pl.when(elapsed > 0)
        .then(pl.col(numerator).cast(pl.Float64) / elapsed.cast(pl.Float64))
        .otherwise(None)
    )
    return add_derived_feature(df, name, rate).drop(elapsed_column)


def add_ratio_feature(df: pl.DataFrame, numerator: str, denominator: str, name: str) -> pl.DataFrame:
    """numerator / denominator per row; a zero or missing denominator gives a missing ratio."""
    for column in (numerator, denominator):
        if column not in df.columns:
            raise SchemaMismatchError(f"Column '{column}' not found; available: {df.columns}")
        if not df.schema[column].is_numeric():
            raise SchemaMismatchError(f"Column '{column}' is not numeric")
    ratio = (
        pl.when(pl.col(denominator) != 0)
        .then(pl.col(numerator).cast(pl.Float64) / pl.col(denominator).cast(pl.Float64))
        .otherwise(None)
    )
    return add_derived_feature(df, name, ratio)
