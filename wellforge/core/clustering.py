"""
Unsupervised grouping of wells by their feature rows.
"""
from enum import Enum
from typing import List, Optional
import time
import numpy as np
import polars as pl
from sklearn.cluster import DBSCAN, KMeans
from sklearn.preprocessing import StandardScaler

from wellforge.core.config import CLUSTER_LABEL_COLUMN, NOISE_LABEL
from wellforge.domain.exceptions import InvalidDataException, SchemaMismatchError
from wellforge.config.logging_utils import log_operation_start, log_operation_success, log_operation_error


class ClusterMethod(str, Enum):
    KMEANS = "kmeans"
    DBSCAN = "dbscan"


def clean_feature_matrix(df: pl.DataFrame, features: List[str]):
    """
    Numeric matrix of the rows with no missing feature, and the row mask used.
    """
    missing = [column for column in features if column not in df.columns]
    if missing:
        raise SchemaMismatchError(f"Clustering feature(s) {missing} not found; available: {df.columns}")
    non_numeric = [column for column in features if not df.schema[column].is_numeric()]
    if non_numeric:
        raise SchemaMismatchError(f"Clustering feature(s) {non_numeric} are not numeric")

    selected = df.select([pl.col(column).cast(pl.Float64) for column in features])
    mask = selected.select(
        pl.all_horizontal([pl.col(column).is_not_null() & pl.col(column).is_not_nan() for column in features])
    ).to_series()
    matrix = selected.filter(mask).to_numpy()
    return matrix, mask


def cluster_wells(
    df: pl.DataFrame,
    features: List[str],
    method: ClusterMethod = ClusterMethod.DBSCAN,
    n_clusters: int = 3,
    eps: float = 0.5,
    min_samples: int = 5,
    scale: bool = True,
    random_state: Optional[int] = 42,
    label_column: str = CLUSTER_LABEL_COLUMN,
) -> pl.DataFrame:
    """
    Attach a cluster label per row as label_column.

    Rows with a missing feature are left out of the fit and receive a
    missing label. DBSCAN marks noise points with -1.
    """
    method = ClusterMethod(method)
    if not features:
        raise InvalidDataException("At least one clustering feature is required")
    if label_column in df.columns:
        raise SchemaMismatchError(f"Label column '{label_column}' already exists")

    matrix, mask = clean_feature_matrix(df, features)
    stage = f"cluster-{method.value}"
    start_time = time.time()
    log_operation_start(stage, len(matrix), features=len(features))

    if method is ClusterMethod.KMEANS and len(matrix) < n_clusters:
        message = f"k-means needs at least {n_clusters} complete rows, got {len(matrix)}"
        log_operation_error(stage, message)
        raise InvalidDataException(message)

    labels = np.array([], dtype=np.int64)
    if len(matrix):
        if scale:
            matrix = StandardScaler().fit_transform(matrix)
        if method is ClusterMethod.KMEANS:
            model = KMeans(n_clusters=n_clusters, random_state=random_state, n_init=10).fit(matrix)
        else:
            model = DBSCAN(eps=eps, min_samples=min_samples).fit(matrix)
        labels = model.labels_.astype(np.int64)

    full_labels: List[Optional[int]] = [None] * df.height
    clean_rows = [i for i, keep in enumerate(mask.to_list()) if keep]
    for i, label in zip(clean_rows, labels.tolist()):
        full_labels[i] = label

    found = len({label for label in labels.tolist() if label != NOISE_LABEL})
    log_operation_success(stage, df.height, time.time() - start_time, clusters=found)
    return df.with_columns(pl.Series(label_column, full_labels, dtype=pl.Int64))


def summarize_labels(df: pl.DataFrame, label_column: str = CLUSTER_LABEL_COLUMN) -> dict:
    """Count of distinct clusters and of noise points in label_column."""
    labels = df.get_column(label_column).drop_nulls()
    return {
        "clusters": labels.filter(labels != NOISE_LABEL).n_unique(),
        "noise": labels.filter(labels == NOISE_LABEL).len(),
    }
