"""
Centralized I/O and table-operation constants for Well Forge.
"""
import os

# ============================================================================
# READ SETTINGS
# ============================================================================

CSV_INFER_SCHEMA_LENGTH = 10000   # Rows scanned before column types are fixed
CSV_NULL_VALUES = ["", "NA", "N/A", "NaN", "nan", "null", "NULL"]

# ============================================================================
# WRITE SETTINGS
# ============================================================================

PARQUET_WRITE_CONFIG = {
    "compression": "zstd",
    "use_pyarrow": True,
    "statistics": True,
}

CSV_DATE_FORMAT = "%Y-%m-%d"

# ============================================================================
# ANALYSIS SETTINGS
# ============================================================================

CLUSTER_LABEL_COLUMN = "cluster"
NOISE_LABEL = -1                  # DBSCAN marker for points in no cluster
NEAREST_WELL_COLUMN = "nearest_well_distance_m"
WGS84 = "EPSG:4326"

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_file_size_mb(file_path: str) -> float:
    """Get file size in MB."""
    return os.path.getsize(file_path) / (1024 * 1024)

def ensure_parent_directory(file_path: str) -> None:
    """Create the directory that will hold file_path."""
    parent = os.path.dirname(os.path.abspath(file_path))
    os.makedirs(parent, exist_ok=True)

def get_plot_path(plot_dir: str, name: str) -> str:
    """Generate a PNG path for a named plot."""
    os.makedirs(plot_dir, exist_ok=True)
    return os.path.join(plot_dir, f"{name}.png")
