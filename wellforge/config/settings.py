"""
Centralized settings configuration for the Well Forge pipeline.
Using Pydantic for validation and environment variable support.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional
import os


class Settings(BaseSettings):
    """
    Pipeline settings with environment variable support (WELLFORGE_ prefix).
    """
    model_config = SettingsConfigDict(
        env_prefix="WELLFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Input Configuration
    data_dir: str = Field(default="data")
    treatments_file: str = Field(default="well_treatments.csv")
    headers_file: str = Field(default="well_headers.csv")
    production_file: str = Field(default="well_production.csv")
    csv_separator: str = Field(default=",")
    date_format: Optional[str] = Field(default=None, description="strptime format; ISO inference when unset")

    # Output Configuration
    output_path: str = Field(default=os.path.join("output", "well_features.csv"))
    output_format: str = Field(default="csv")
    duckdb_path: Optional[str] = Field(default=None)
    duckdb_table: str = Field(default="well_features")
    plot_dir: Optional[str] = Field(default=None)

    # Missing Values
    fill_direction: Optional[str] = Field(default=None, description="forward or backward")
    replace_defaults: Dict[str, Any] = Field(default_factory=dict)
    drop_incomplete: bool = Field(default=False)

    # Aggregation and Features
    aggregate_prefix: str = Field(default="cum_")
    treatment_prefix: str = Field(default="total_")
    rate_numerator: str = Field(default="cum_hours")
    rate_date_column: str = Field(default="spud_date")
    rate_feature_name: str = Field(default="hours_per_day")
    rate_zero_policy: str = Field(default="null")

    # Clustering
    clustering_enabled: bool = Field(default=False)
    cluster_method: str = Field(default="dbscan")
    cluster_features: List[str] = Field(default_factory=list)
    n_clusters: int = Field(default=3, ge=1)
    dbscan_eps: float = Field(default=0.5, gt=0)
    dbscan_min_samples: int = Field(default=5, ge=1)
    scale_features: bool = Field(default=True)
    random_state: int = Field(default=42)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v):
        """Validate export format."""
        allowed_formats = ["csv", "parquet"]
        if v.lower() not in allowed_formats:
            raise ValueError(f"Output format must be one of: {allowed_formats}")
        return v.lower()

    @field_validator("cluster_method")
    @classmethod
    def validate_cluster_method(cls, v):
        """Validate clustering algorithm."""
        allowed_methods = ["kmeans", "dbscan"]
        if v.lower() not in allowed_methods:
            raise ValueError(f"Cluster method must be one of: {allowed_methods}")
        return v.lower()

    @field_validator("fill_direction")
    @classmethod
    def validate_fill_direction(cls, v):
        if v is None or v.lower() == "none":
            return None
        if v.lower() not in ["forward", "backward"]:
            raise ValueError("Fill direction must be forward, backward or None")
        return v.lower()

    @field_validator("rate_zero_policy")
    @classmethod
    def validate_rate_zero_policy(cls, v):
        if v.lower() not in ["null", "raise"]:
            raise ValueError("Rate zero policy must be 'null' or 'raise'")
        return v.lower()

    def input_path(self, file_name: str) -> str:
        """Resolve an input file name against the data directory."""
        return os.path.join(self.data_dir, file_name)


# Global settings instance
settings = Settings()
