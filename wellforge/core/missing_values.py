"""
Missing-value strategies. Each is an independent combinator over a
DataFrame, so a pipeline may fill some columns and replace others.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
import polars as pl

from wellforge.domain.exceptions import SchemaMismatchError


class FillDirection(str, Enum):
    """Direction in which valid values are propagated."""
    FORWARD = "forward"
    BACKWARD = "backward"


def _require_columns(df: pl.DataFrame, columns: Sequence[str]) -> None:
    missing = [column for column in columns if column not in df.columns]
    if missing:
        raise SchemaMismatchError(f"Column(s) {missing} not found; available: {df.columns}")


def drop_missing(df: pl.DataFrame, subset: Optional[List[str]] = None) -> pl.DataFrame:
    """Remove every row holding at least one missing cell (within subset, if given)."""
    if subset is not None:
        _require_columns(df, subset)
    return df.drop_nulls(subset=subset)


def fill_missing(
    df: pl.DataFrame,
    columns: List[str],
    direction: FillDirection = FillDirection.FORWARD,
    group_by: Optional[List[str]] = None,
    order_by: Optional[List[str]] = None,
) -> pl.DataFrame:
    """
    Propagate the nearest valid value along order_by within each group.

    Values never cross group boundaries. A leading run (forward) or
    trailing run (backward) with no valid value in the propagation
    direction stays missing. The result is sorted by group_by + order_by.
    """
    direction = FillDirection(direction)
    _require_columns(df, list(columns) + list(group_by or []) + list(order_by or []))

    sort_columns = list(group_by or []) + list(order_by or [])
    if sort_columns:
        df = df.sort(sort_columns, maintain_order=True)

    expressions = []
    for column in columns:
        expression = pl.col(column).fill_null(strategy=direction.value)
        if group_by:
            expression = expression.over(group_by)
        expressions.append(expression)
    return df.with_columns(expressions)


def replace_missing(df: pl.DataFrame, defaults: Dict[str, Any]) -> pl.DataFrame:
    """Substitute a caller-specified default for missing cells, column by column."""
    _require_columns(df, list(defaults))
    return df.with_columns(
        [pl.col(column).fill_null(pl.lit(default)) for column, default in defaults.items()]
    )
