"""
Well feature pipeline: ingestion, normalization, aggregation, derived
features, optional clustering and export.

Every stage receives its input tables as arguments and returns new
tables; nothing is carried between stages except those values.
"""
from typing import Dict, List, Optional
import polars as pl

from wellforge.config.settings import Settings, settings as default_settings
from wellforge.config.logging_config import logger
from wellforge.config.logging_utils import log_application_event, log_operation_error
from wellforge.application.services.schema_service import SchemaService, schema_service
from wellforge.core import io_operations
from wellforge.core.aggregation import aggregate_by_key, left_join_unique, numeric_columns
from wellforge.core.clustering import cluster_wells, summarize_labels
from wellforge.core.config import CLUSTER_LABEL_COLUMN, get_plot_path
from wellforge.core.features import add_elapsed_days, add_rate_feature, add_ratio_feature
from wellforge.core.geospatial import add_nearest_well_distance
from wellforge.core.missing_values import drop_missing, fill_missing, replace_missing
from wellforge.core.normalization import normalize_labels
from wellforge.core.performance import PerformanceMonitor, performance_context
from wellforge.core.plotting import PlotSpec, render_plot
from wellforge.core.reshape import long_to_wide
from wellforge.domain.entities.pipeline_models import PipelineResult
from wellforge.domain.exceptions import DomainException


WELL_KEY = "well_id"
PERIOD_KEY = "production_date"
MEASUREMENT_KEY = "measurement_type"
VALUE_COLUMN = "volume"
TREATMENT_COUNT_COLUMN = "treatment_stages"
ELAPSED_DAYS_COLUMN = "days_since_first_spud"
FLUID_PER_STAGE_COLUMN = "fluid_per_stage_bbl"


class WellPipeline:
    """Builds one enriched feature row per well from the three source tables."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        schemas: Optional[SchemaService] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ):
        self.settings = settings or default_settings
        self.schemas = schemas or schema_service
        self.monitor = monitor or PerformanceMonitor()

    # ------------------------------------------------------------------
    # Stage 1: ingestion
    # ------------------------------------------------------------------

    def _read(self, schema_name: str, file_name: str) -> pl.DataFrame:
        return io_operations.read_table(
            self.settings.input_path(file_name),
            self.schemas.require_schema(schema_name),
            separator=self.settings.csv_separator,
            date_format=self.settings.date_format,
        )

    def ingest(self) -> Dict[str, pl.DataFrame]:
        """Read and validate headers, treatments and production."""
        return {
            "headers": self._read("well_headers", self.settings.headers_file),
            "treatments": self._read("well_treatments", self.settings.treatments_file),
            "production": self._read("well_production", self.settings.production_file),
        }

    # ------------------------------------------------------------------
    # Stage 2: normalization
    # ------------------------------------------------------------------

    def normalize(self, production: pl.DataFrame) -> pl.DataFrame:
        """Long production -> one row per well and period, one column per measurement."""
        production = normalize_labels(production, MEASUREMENT_KEY)
        wide = long_to_wide(
            production,
            key=MEASUREMENT_KEY,
            value=VALUE_COLUMN,
            index=[WELL_KEY, PERIOD_KEY],
        )
        if self.settings.fill_direction:
            measurements = [column for column in wide.columns if column not in (WELL_KEY, PERIOD_KEY)]
            wide = fill_missing(
                wide,
                measurements,
                direction=self.settings.fill_direction,
                group_by=[WELL_KEY],
                order_by=[PERIOD_KEY],
            )
        return wide

    # ------------------------------------------------------------------
    # Stage 3: aggregation and derived features
    # ------------------------------------------------------------------

    def aggregate(self, headers: pl.DataFrame, wide: pl.DataFrame, treatments: pl.DataFrame) -> pl.DataFrame:
        """Per-well totals of production and treatments, left-joined onto the headers."""
        production_totals = aggregate_by_key(
            wide,
            key=WELL_KEY,
            prefix=self.settings.aggregate_prefix,
        )
        treatment_totals = aggregate_by_key(
            treatments,
            key=WELL_KEY,
            prefix=self.settings.treatment_prefix,
            columns=numeric_columns(treatments, exclude=[WELL_KEY, "stage_number"]),
            count_column=TREATMENT_COUNT_COLUMN,
        )
        features = left_join_unique(headers, production_totals, on=WELL_KEY)
        return left_join_unique(features, treatment_totals, on=WELL_KEY)

    def derive(self, features: pl.DataFrame) -> pl.DataFrame:
        """Add elapsed-time, rate, fluid-per-stage and spacing features, then apply the missing-value policy."""
        date_column = self.settings.rate_date_column
        if date_column in features.columns:
            features = add_elapsed_days(features, date_column, ELAPSED_DAYS_COLUMN)
            if self.settings.rate_numerator in features.columns:
                features = add_rate_feature(
                    features,
                    numerator=self.settings.rate_numerator,
                    date_column=date_column,
                    name=self.settings.rate_feature_name,
                    zero_policy=self.settings.rate_zero_policy,
                )
            else:
                logger.warning(
                    f"Rate feature '{self.settings.rate_feature_name}' skipped: "
                    f"no '{self.settings.rate_numerator}' column"
                )

        fluid_column = f"{self.settings.treatment_prefix}fluid_volume_bbl"
        if {fluid_column, TREATMENT_COUNT_COLUMN} <= set(features.columns):
            features = add_ratio_feature(features, fluid_column, TREATMENT_COUNT_COLUMN, FLUID_PER_STAGE_COLUMN)

        if {"latitude", "longitude"} <= set(features.columns):
            features = add_nearest_well_distance(features)

        if self.settings.replace_defaults:
            features = replace_missing(features, self.settings.replace_defaults)
        if self.settings.drop_incomplete:
            features = drop_missing(features)
        return features

    # ------------------------------------------------------------------
    # Stage 4: analysis and export
    # ------------------------------------------------------------------

    def cluster_features(self, features: pl.DataFrame) -> List[str]:
        """Configured clustering features, or every cumulative production column."""
        if self.settings.cluster_features:
            return list(self.settings.cluster_features)
        return [
            column for column in features.columns
            if column.startswith(self.settings.aggregate_prefix)
        ]

    def cluster(self, features: pl.DataFrame) -> pl.DataFrame:
        return cluster_wells(
            features,
            self.cluster_features(features),
            method=self.settings.cluster_method,
            n_clusters=self.settings.n_clusters,
            eps=self.settings.dbscan_eps,
            min_samples=self.settings.dbscan_min_samples,
            scale=self.settings.scale_features,
            random_state=self.settings.random_state,
        )

    def plot(self, features: pl.DataFrame) -> Optional[str]:
        """Well map coloured by cluster (or by the rate feature when not clustered)."""
        if not {"latitude", "longitude"} <= set(features.columns):
            logger.warning("Well map skipped: no latitude/longitude columns")
            return None
        color = None
        if CLUSTER_LABEL_COLUMN in features.columns:
            color = CLUSTER_LABEL_COLUMN
        elif self.settings.rate_feature_name in features.columns:
            color = self.settings.rate_feature_name
        spec = PlotSpec(kind="scatter", x="longitude", y="latitude", color=color, title="Well locations")
        return render_plot(features, spec, get_plot_path(self.settings.plot_dir, "well_map"))

    def export(self, features: pl.DataFrame):
        output = io_operations.write_table(
            features,
            self.settings.output_path,
            fmt=self.settings.output_format,
            separator=self.settings.csv_separator,
        )
        duckdb_output = None
        if self.settings.duckdb_path:
            duckdb_output = io_operations.write_duckdb_table(
                features, self.settings.duckdb_path, self.settings.duckdb_table
            )
        return output, duckdb_output

    # ------------------------------------------------------------------

    def run(self) -> PipelineResult:
        """Execute every stage in order; any failure aborts the run."""
        self.monitor.reset()
        log_application_event("Pipeline started", f"data_dir={self.settings.data_dir}")
        try:
            with performance_context("ingest", self.monitor):
                tables = self.ingest()
            with performance_context("normalize", self.monitor):
                wide = self.normalize(tables["production"])
            with performance_context("aggregate", self.monitor):
                aggregated = self.aggregate(tables["headers"], wide, tables["treatments"])
            with performance_context("derive", self.monitor):
                features = self.derive(aggregated)

            cluster_summary = None
            if self.settings.clustering_enabled:
                with performance_context("cluster", self.monitor):
                    features = self.cluster(features)
                cluster_summary = summarize_labels(features)

            plot_path = None
            if self.settings.plot_dir:
                with performance_context("plot", self.monitor):
                    plot_path = self.plot(features)

            with performance_context("export", self.monitor):
                output, duckdb_output = self.export(features)
        except DomainException as e:
            log_operation_error("pipeline", f"{type(e).__name__}: {e}")
            raise

        stage_timings = {
            name.replace("_context", ""): round(self.monitor.latest(name), 3)
            for name in self.monitor.metrics
        }
        result = PipelineResult(
            headers_rows=len(tables["headers"]),
            treatments_rows=len(tables["treatments"]),
            production_rows=len(tables["production"]),
            wide_rows=len(wide),
            aggregate_rows=len(aggregated),
            feature_rows=len(features),
            feature_columns=features.width,
            output=output,
            duckdb_output=duckdb_output,
            plot_path=plot_path,
            cluster_count=cluster_summary["clusters"] if cluster_summary else None,
            noise_count=cluster_summary["noise"] if cluster_summary else None,
            stage_timings_ms=stage_timings,
            process_memory_mb=self.monitor.get_system_metrics()["process_memory_mb"],
        )
        log_application_event("Pipeline finished", result.message)
        return result
