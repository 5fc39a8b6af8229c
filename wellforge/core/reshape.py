"""
Reversible wide/long reshaping of record tables.

A long table holds one (row-key, key, value) fact per row; the wide form
holds one row per row-key and one column per distinct key. Both
directions go through reshape() so that long -> wide -> long reproduces
the original facts.
"""
from enum import Enum
from typing import List, Optional, Sequence
import time
import polars as pl

from wellforge.domain.exceptions import DuplicateKeyError, ParseError, SchemaMismatchError, InvalidDataException
from wellforge.config.logging_utils import log_operation_start, log_operation_success, log_operation_error


class ReshapeDirection(str, Enum):
    """Direction of a reshape."""
    LONG_TO_WIDE = "long_to_wide"
    WIDE_TO_LONG = "wide_to_long"


def _require_columns(df: pl.DataFrame, columns: Sequence[str]) -> None:
    missing = [column for column in columns if column not in df.columns]
    if missing:
        raise SchemaMismatchError(f"Column(s) {missing} not found; available: {df.columns}")


def _check_unique_facts(df: pl.DataFrame, index: List[str], key: str) -> None:
    duplicates = (
        df.group_by(index + [key])
        .agg(pl.len().alias("__fact_rows"))
        .filter(pl.col("__fact_rows") > 1)
    )
    if duplicates.height:
        example = duplicates.drop("__fact_rows").row(0, named=True)
        raise DuplicateKeyError(
            f"{duplicates.height} (row-key, {key}) combination(s) appear more than once; "
            f"first: {example}"
        )


def _long_to_wide(df: pl.DataFrame, key: str, value: str, index: Optional[List[str]]) -> pl.DataFrame:
    _require_columns(df, [key, value])
    if index is None:
        index = [column for column in df.columns if column not in (key, value)]
    else:
        _require_columns(df, index)
    if not index:
        raise InvalidDataException("A long-to-wide reshape needs at least one row-key column")
    key_dtype = df.schema[key]
    if not (key_dtype == pl.Utf8 or key_dtype == pl.Null or isinstance(key_dtype, (pl.Categorical, pl.Enum))):
        # Wide column names are always strings
        raise SchemaMismatchError(f"Key column '{key}' must hold text labels, found {key_dtype}")

    df = df.select(index + [key, value]).with_columns(pl.col(key).cast(pl.Utf8))
    if df.get_column(key).null_count():
        raise ParseError(f"Key column '{key}' contains missing values")

    clashes = sorted(set(df.get_column(key).unique().to_list()) & set(index))
    if clashes:
        raise SchemaMismatchError(f"Key value(s) {clashes} collide with row-key column names")

    _check_unique_facts(df, index, key)
    if df.height == 0:
        return df.select(index)

    wide = df.pivot(on=key, index=index, values=value, aggregate_function=None)
    return wide.sort(index)


def _wide_to_long(
    df: pl.DataFrame,
    key: str,
    value: str,
    index: Optional[List[str]],
    fold: Optional[List[str]],
    drop_missing: bool,
) -> pl.DataFrame:
    if index is None and fold is None:
        raise InvalidDataException("A wide-to-long reshape needs the row-key columns or the columns to fold")
    if fold is None:
        _require_columns(df, index)
        fold = [column for column in df.columns if column not in index]
    elif index is None:
        _require_columns(df, fold)
        index = [column for column in df.columns if column not in fold]
    else:
        _require_columns(df, index + fold)
    if set(index) & set(fold):
        raise InvalidDataException(f"Columns {sorted(set(index) & set(fold))} cannot be both row-key and folded")

    long = df.unpivot(on=fold, index=index, variable_name=key, value_name=value)
    if drop_missing:
        long = long.filter(pl.col(value).is_not_null())
    return long.sort(index + [key], maintain_order=True)


def reshape(
    df: pl.DataFrame,
    direction: ReshapeDirection,
    key: str,
    value: str,
    index: Optional[List[str]] = None,
    fold: Optional[List[str]] = None,
    drop_missing: bool = False,
) -> pl.DataFrame:
    """
    Convert df between long and wide form.

    Args:
        df: Table to reshape
        direction: LONG_TO_WIDE or WIDE_TO_LONG
        key: Long-form column naming the measurement (becomes wide column names)
        value: Long-form column holding the measurement value
        index: Row-key columns; for long-to-wide defaults to every column but key/value
        fold: Wide columns to fold into key/value rows (wide-to-long only)
        drop_missing: Drop folded rows whose value is missing (wide-to-long only)

    Raises:
        DuplicateKeyError: a (row-key, key) pair appears twice in long input
        SchemaMismatchError: a named column is absent or the key is not text
    """
    direction = ReshapeDirection(direction)
    stage = f"reshape-{direction.value.replace('_', '-')}"
    start_time = time.time()
    log_operation_start(stage, len(df), key=key, value=value)

    try:
        if direction is ReshapeDirection.LONG_TO_WIDE:
            result = _long_to_wide(df, key, value, index)
        else:
            result = _wide_to_long(df, key, value, index, fold, drop_missing)
    except Exception as e:
        log_operation_error(stage, str(e), len(df))
        raise

    log_operation_success(stage, len(result), time.time() - start_time, columns=result.width)
    return result


def long_to_wide(
    df: pl.DataFrame,
    key: str = "measurement_type",
    value: str = "volume",
    index: Optional[List[str]] = None,
) -> pl.DataFrame:
    return reshape(df, ReshapeDirection.LONG_TO_WIDE, key, value, index=index)


def wide_to_long(
    df: pl.DataFrame,
    key: str = "measurement_type",
    value: str = "volume",
    index: Optional[List[str]] = None,
    fold: Optional[List[str]] = None,
    drop_missing: bool = False,
) -> pl.DataFrame:
    return reshape(df, ReshapeDirection.WIDE_TO_LONG, key, value, index=index, fold=fold, drop_missing=drop_missing)
