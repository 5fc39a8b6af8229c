"""
I/O operations for Well Forge: delimited-file ingestion and enriched-table export.
Each read or write is a single scoped acquisition and release of the file.
"""
import time
import os
import re
from typing import Optional
import polars as pl
import duckdb

from wellforge.core.config import (
    CSV_INFER_SCHEMA_LENGTH, CSV_NULL_VALUES, CSV_DATE_FORMAT, PARQUET_WRITE_CONFIG,
    get_file_size_mb, ensure_parent_directory
)
from wellforge.core.normalization import apply_schema, required_nulls, duplicate_primary_keys
from wellforge.domain.entities.schema import Schema
from wellforge.domain.entities.pipeline_models import ExportResult
from wellforge.domain.exceptions import MissingFileError, ParseError, DuplicateKeyError, InvalidDataException
from wellforge.config.logging_utils import log_operation_start, log_operation_success, log_operation_read, log_operation_error


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# ============================================================================
# READ OPERATIONS
# ============================================================================

def read_table(
    path: str,
    schema: Schema,
    separator: str = ",",
    date_format: Optional[str] = None
) -> pl.DataFrame:
    """
    Read a delimited file into a DataFrame validated against schema.

    Column names are canonicalized, required columns checked and schema
    columns coerced to their declared types. Columns the schema does not
    name are kept with their inferred types. Rows repeating the declared
    primary key are rejected.
    """
    stage = f"read-{schema.name}"
    if not os.path.exists(path):
        log_operation_error(stage, f"file not found: {path}")
        raise MissingFileError(f"Input file for '{schema.name}' not found: {path}")

    start_time = time.time()
    try:
        df = pl.read_csv(
            path,
            separator=separator,
            infer_schema_length=CSV_INFER_SCHEMA_LENGTH,
            null_values=CSV_NULL_VALUES,
            try_parse_dates=False,
        )
    except pl.exceptions.NoDataError as e:
        log_operation_error(stage, f"empty file: {path}")
        raise ParseError(f"Input file for '{schema.name}' is empty: {path}") from e
    except pl.exceptions.PolarsError as e:
        log_operation_error(stage, str(e))
        raise ParseError(f"Could not parse '{path}' as delimited text: {e}") from e

    try:
        df = apply_schema(df, schema, date_format)
    except Exception as e:
        log_operation_error(stage, str(e), len(df))
        raise

    null_columns = required_nulls(df, schema)
    if null_columns:
        log_operation_error(stage, f"nulls in required columns {null_columns}", len(df))
        raise ParseError(f"Required column(s) {null_columns} contain missing values in {path}")

    duplicates = duplicate_primary_keys(df, schema)
    if duplicates:
        log_operation_error(stage, f"{len(duplicates)} repeated primary key value(s)", len(df))
        raise DuplicateKeyError(
            f"{len(duplicates)} primary key value(s) of '{schema.name}' repeat in {path}; first: {duplicates[0]}"
        )

    log_operation_read(stage, len(df), time.time() - start_time, source=path)
    return df


# ============================================================================
# WRITE OPERATIONS
# ============================================================================

def write_table(
    df: pl.DataFrame,
    path: str,
    fmt: str = "csv",
    separator: str = ","
) -> ExportResult:
    """
    Write df to path as CSV or Parquet, replacing any previous file.
    The file is written beside the target and moved into place so a failed
    write never leaves a partial output.
    """
    if fmt not in ("csv", "parquet"):
        raise InvalidDataException(f"Unsupported export format: {fmt}")

    start_time = time.time()
    records_count = len(df)
    log_operation_start("export", records_count, format=fmt, path=path)

    ensure_parent_directory(path)
    temp_path = f"{path}.partial"
    try:
        if fmt == "csv":
            df.write_csv(temp_path, separator=separator, date_format=CSV_DATE_FORMAT)
        else:
            df.write_parquet(temp_path, **PARQUET_WRITE_CONFIG)
        os.replace(temp_path, path)
    except Exception as e:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        log_operation_error("export", str(e), records_count)
        raise

    write_time = time.time() - start_time
    throughput = int(records_count / write_time) if write_time > 0 else 0
    log_operation_success("export", records_count, write_time)

    return ExportResult(
        success=True,
        message=f"Wrote {records_count} rows as {fmt}",
        records_written=records_count,
        destination=path,
        write_time_seconds=round(write_time, 3),
        throughput_records_per_second=throughput,
        file_size_mb=round(get_file_size_mb(path), 4),
    )


def write_duckdb_table(df: pl.DataFrame, database_path: str, table_name: str) -> ExportResult:
    """
    Replace table_name in the DuckDB database with the contents of df.
    """
    if not _IDENTIFIER.match(table_name):
        raise InvalidDataException(f"Invalid DuckDB table name: {table_name!r}")

    start_time = time.time()
    records_count = len(df)
    log_operation_start("export-duckdb", records_count, table=table_name)

    ensure_parent_directory(database_path)
    conn = duckdb.connect(database_path)
    try:
        # Arrow hand-off avoids a row-by-row copy
        arrow_table = df.to_arrow()
        conn.register("incoming_features", arrow_table)
        conn.execute(f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM incoming_features")
        conn.unregister("incoming_features")

        result = conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()
        actual_count = result[0] if result else 0
    except Exception as e:
        log_operation_error("export-duckdb", str(e), records_count)
        raise
    finally:
        conn.close()

    write_time = time.time() - start_time
    throughput = int(actual_count / write_time) if write_time > 0 else 0
    log_operation_success("export-duckdb", actual_count, write_time)

    return ExportResult(
        success=True,
        message=f"DuckDB: {actual_count} rows into {table_name}",
        records_written=actual_count,
        destination=f"duckdb:{database_path}:{table_name}",
        write_time_seconds=round(write_time, 3),
        throughput_records_per_second=throughput,
        file_size_mb=round(get_file_size_mb(database_path), 4),
    )
