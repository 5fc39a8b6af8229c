"""
Result models for export and pipeline runs.
"""
from typing import Dict, Optional
from pydantic import BaseModel, Field


class ExportResult(BaseModel):
    """Response model for an export with performance metrics."""
    success: bool
    message: str
    records_written: int
    destination: str
    write_time_seconds: float
    throughput_records_per_second: int
    file_size_mb: float = 0.0


class PipelineResult(BaseModel):
    """Summary of one pipeline run."""
    headers_rows: int
    treatments_rows: int
    production_rows: int
    wide_rows: int
    aggregate_rows: int
    feature_rows: int
    feature_columns: int
    output: ExportResult
    duckdb_output: Optional[ExportResult] = None
    plot_path: Optional[str] = None
    cluster_count: Optional[int] = Field(default=None, description="Distinct labels excluding noise")
    noise_count: Optional[int] = None
    stage_timings_ms: Dict[str, float] = Field(default_factory=dict)
    process_memory_mb: float = 0.0

    @property
    def message(self) -> str:
        return f"Built {self.feature_rows:,} well feature rows into {self.output.destination}"
