"""
Per-well cumulative aggregation and key-safe left joins.
"""
from typing import List, Optional
import time
import polars as pl

from wellforge.domain.exceptions import NonUniqueJoinKeyError, SchemaMismatchError
from wellforge.config.logging_utils import log_operation_start, log_operation_success, log_operation_error


def numeric_columns(df: pl.DataFrame, exclude: Optional[List[str]] = None) -> List[str]:
    """Names of numeric columns, in table order, minus exclude."""
    exclude = set(exclude or [])
    return [
        column for column, dtype in df.schema.items()
        if dtype.is_numeric() and column not in exclude
    ]


def aggregate_by_key(
    df: pl.DataFrame,
    key: str = "well_id",
    prefix: str = "cum_",
    columns: Optional[List[str]] = None,
    count_column: Optional[str] = None,
) -> pl.DataFrame:
    """
    Sum numeric columns per key value.

    Every non-key numeric column is summed unless columns narrows the set.
    Output columns are named prefix + input name; a group whose values are
    all missing sums to 0. Exactly one row per key value present in df,
    sorted by key. count_column, when given, adds the row count per group.
    """
    if key not in df.columns:
        raise SchemaMismatchError(f"Grouping column '{key}' not found; available: {df.columns}")
    if columns is None:
        columns = numeric_columns(df, exclude=[key])
    else:
        missing = [column for column in columns if column not in df.columns]
        if missing:
            raise SchemaMismatchError(f"Column(s) {missing} not found; available: {df.columns}")
        non_numeric = [column for column in columns if not df.schema[column].is_numeric()]
        if non_numeric:
            raise SchemaMismatchError(f"Cannot sum non-numeric column(s) {non_numeric}")

    start_time = time.time()
    stage = f"aggregate-{prefix.rstrip('_') or 'sum'}"
    log_operation_start(stage, len(df), key=key, columns=len(columns))

    expressions = [pl.col(column).fill_null(0).sum().alias(f"{prefix}{column}") for column in columns]
    if count_column:
        expressions.append(pl.len().cast(pl.Int64).alias(count_column))

    aggregated = df.group_by(key).agg(expressions).sort(key)

    log_operation_success(stage, len(aggregated), time.time() - start_time)
    return aggregated


def left_join_unique(left: pl.DataFrame, right: pl.DataFrame, on: str = "well_id") -> pl.DataFrame:
    """
    Left-join right onto left by on.

    Every row of left is kept exactly once; unmatched right-hand cells are
    missing. right must hold each key value at most once.
    """
    for side, frame in (("left", left), ("right", right)):
        if on not in frame.columns:
            raise SchemaMismatchError(f"Join column '{on}' not found in {side} table; available: {frame.columns}")

    duplicated = right.filter(pl.col(on).is_duplicated())
    if duplicated.height:
        values = duplicated.get_column(on).unique().sort().head(5).to_list()
        log_operation_error("join", f"non-unique join key '{on}' (e.g. {values})", len(right))
        raise NonUniqueJoinKeyError(
            f"Join key '{on}' is not unique in the right-hand table; repeated values include {values}"
        )

    clashes = sorted((set(left.columns) & set(right.columns)) - {on})
    if clashes:
        raise SchemaMismatchError(f"Both tables define column(s) {clashes}")

    try:
        right = right.with_columns(pl.col(on).cast(left.schema[on]))
    except pl.exceptions.PolarsError as e:
        raise SchemaMismatchError(
            f"Join column '{on}' of type {right.schema[on]} cannot be matched to {left.schema[on]}"
        ) from e
    joined = (
        left.with_row_index("__left_row")
        .join(right, on=on, how="left")
        .sort("__left_row")
        .drop("__left_row")
    )
    return joined
