"""
Column-name canonicalization and type coercion for freshly read tables.
"""
from typing import Iterable, List, Optional
import polars as pl

from wellforge.domain.entities.schema import Schema, canonicalize_column_name
from wellforge.domain.exceptions import ParseError, SchemaMismatchError


# Tried in order when no explicit date format is configured
_FALLBACK_DATE_FORMATS = ["%m/%d/%Y", "%Y/%m/%d", "%d-%b-%Y"]


def canonicalize_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Rename every column to its canonical form ("Well ID" -> "well_id")."""
    renamed = {}
    seen = {}
    for column in df.columns:
        canonical = canonicalize_column_name(column)
        if not canonical:
            raise ParseError(f"Column name {column!r} has no usable characters")
        if canonical in seen:
            raise ParseError(
                f"Columns {seen[canonical]!r} and {column!r} both canonicalize to {canonical!r}"
            )
        seen[canonical] = column
        renamed[column] = canonical
    return df.rename(renamed)


def _parse_date_series(series: pl.Series, date_format: Optional[str]) -> pl.Series:
    if date_format is not None:
        try:
            return series.str.to_date(format=date_format, strict=True)
        except pl.exceptions.PolarsError as e:
            raise ParseError(f"Column '{series.name}' does not match date format {date_format!r}: {e}") from e

    for fmt in [None] + _FALLBACK_DATE_FORMATS:
        try:
            return series.str.to_date(format=fmt, strict=True)
        except pl.exceptions.PolarsError:
            continue
    try:
        return series.str.to_datetime(strict=True).dt.date()
    except pl.exceptions.PolarsError:
        pass
    # Monthly periods such as "2020-01"
    try:
        return (series + "-01").str.to_date(format="%Y-%m-%d", strict=True)
    except pl.exceptions.PolarsError:
        pass

    sample = series.drop_nulls().head(3).to_list()
    raise ParseError(f"Column '{series.name}' could not be parsed as dates (sample values: {sample})")


def parse_dates(df: pl.DataFrame, columns: Iterable[str], date_format: Optional[str] = None) -> pl.DataFrame:
    """Parse each named column into a polars Date column."""
    for column in columns:
        if column not in df.columns:
            continue
        dtype = df.schema[column]
        if dtype == pl.Date:
            continue
        if dtype == pl.Datetime:
            df = df.with_columns(pl.col(column).dt.date())
        elif dtype == pl.Utf8:
            df = df.with_columns(_parse_date_series(df.get_column(column), date_format))
        elif dtype == pl.Null:
            df = df.with_columns(pl.col(column).cast(pl.Date))
        else:
            raise ParseError(f"Column '{column}' has type {dtype} and cannot hold dates")
    return df


def cast_to_schema(df: pl.DataFrame, schema: Schema) -> pl.DataFrame:
    """Cast every non-date schema column present in df to its declared type."""
    polars_schema = schema.to_polars_schema()
    date_columns = set(schema.get_date_columns())
    for column, dtype in polars_schema.items():
        if column not in df.columns or column in date_columns:
            continue
        if df.schema[column] == dtype:
            continue
        try:
            df = df.with_columns(pl.col(column).cast(dtype, strict=True))
        except pl.exceptions.PolarsError as e:
            raise ParseError(f"Column '{column}' cannot be read as {schema.get_property(column).type.value}: {e}") from e
    return df


def normalize_labels(df: pl.DataFrame, column: str) -> pl.DataFrame:
    """Canonicalize categorical labels so " Oil" and "oil" name the same measurement."""
    if column not in df.columns:
        raise SchemaMismatchError(f"Column '{column}' not found; available: {df.columns}")
    return df.with_columns(
        pl.col(column)
        .cast(pl.Utf8)
        .str.strip_chars()
        .str.to_lowercase()
        .str.replace_all(r"[^0-9a-z]+", "_")
        .str.strip_chars("_")
    )


def apply_schema(df: pl.DataFrame, schema: Schema, date_format: Optional[str] = None) -> pl.DataFrame:
    """Canonicalize, validate and coerce a raw table to the given schema."""
    df = canonicalize_columns(df)
    schema.validate_columns(df.columns)
    df = parse_dates(df, schema.get_date_columns(), date_format)
    return cast_to_schema(df, schema)


def required_nulls(df: pl.DataFrame, schema: Schema) -> List[str]:
    """Names of required columns holding at least one null."""
    return [
        prop.name for prop in schema.get_required_properties()
        if prop.name in df.columns and df.get_column(prop.name).null_count() > 0
    ]


def duplicate_primary_keys(df: pl.DataFrame, schema: Schema) -> List[dict]:
    """Primary-key values held by more than one row; skipped when a key column is absent."""
    key = [prop.name for prop in schema.get_primary_key_properties()]
    if not key or any(column not in df.columns for column in key):
        return []
    return (
        df.group_by(key)
        .agg(pl.len().alias("rows"))
        .filter(pl.col("rows") > 1)
        .sort(key)
        .to_dicts()
    )
