"""
Geodesic distances between well locations.

Coordinates in any CRS are projected to WGS84 with geopandas and measured
on the ellipsoid with geopy.
"""
import math
from typing import List, Optional, Sequence
import numpy as np
import polars as pl
import geopandas as gpd
from geopy.distance import geodesic
from sklearn.neighbors import BallTree

from wellforge.core.config import WGS84, NEAREST_WELL_COLUMN
from wellforge.domain.exceptions import InvalidDataException, SchemaMismatchError


def _is_valid(value) -> bool:
    return value is not None and not (isinstance(value, float) and math.isnan(value))


def _to_wgs84(xs: Sequence[float], ys: Sequence[float], crs: str) -> gpd.GeoSeries:
    points = gpd.GeoSeries(gpd.points_from_xy(xs, ys), crs=crs)
    if points.crs.to_epsg() != 4326:
        points = points.to_crs(WGS84)
    return points


def geodesic_distances(
    xs_a: Sequence[Optional[float]],
    ys_a: Sequence[Optional[float]],
    xs_b: Sequence[Optional[float]],
    ys_b: Sequence[Optional[float]],
    crs_a: str = WGS84,
    crs_b: str = WGS84,
) -> List[Optional[float]]:
    """
    Distance in metres between each pair (a[i], b[i]).

    x is the easting/longitude and y the northing/latitude of each CRS.
    A pair with any missing coordinate gets None.
    """
    lengths = {len(xs_a), len(ys_a), len(xs_b), len(ys_b)}
    if len(lengths) != 1:
        raise InvalidDataException("Coordinate sequences must all have the same length")

    valid = [
        i for i in range(len(xs_a))
        if all(_is_valid(values[i]) for values in (xs_a, ys_a, xs_b, ys_b))
    ]
    distances: List[Optional[float]] = [None] * len(xs_a)
    if not valid:
        return distances

    points_a = _to_wgs84([xs_a[i] for i in valid], [ys_a[i] for i in valid], crs_a)
    points_b = _to_wgs84([xs_b[i] for i in valid], [ys_b[i] for i in valid], crs_b)
    for i, point_a, point_b in zip(valid, points_a, points_b):
        distances[i] = geodesic((point_a.y, point_a.x), (point_b.y, point_b.x)).meters
    return distances


def add_nearest_well_distance(
    df: pl.DataFrame,
    latitude: str = "latitude",
    longitude: str = "longitude",
    name: str = NEAREST_WELL_COLUMN,
) -> pl.DataFrame:
    """
    Distance in metres from each well to its nearest other well.
    Wells without coordinates, or with no other located well, get a missing value.
    """
    for column in (latitude, longitude):
        if column not in df.columns:
            raise SchemaMismatchError(f"Coordinate column '{column}' not found; available: {df.columns}")
    if name in df.columns:
        raise SchemaMismatchError(f"Derived column '{name}' already exists")

    lats = df.get_column(latitude).cast(pl.Float64).to_list()
    lons = df.get_column(longitude).cast(pl.Float64).to_list()
    located = [i for i in range(df.height) if _is_valid(lats[i]) and _is_valid(lons[i])]

    distances: List[Optional[float]] = [None] * df.height
    if len(located) >= 2:
        coordinates = np.radians([[lats[i], lons[i]] for i in located])
        tree = BallTree(coordinates, leaf_size=40, metric="haversine")
        _, indices = tree.query(coordinates, k=2)
        for position, i in enumerate(located):
            # The nearest hit is usually the point itself
            neighbour_position = indices[position, 1] if indices[position, 0] == position else indices[position, 0]
            j = located[neighbour_position]
            distances[i] = geodesic((lats[i], lons[i]), (lats[j], lons[j])).meters

    return df.with_columns(pl.Series(name, distances, dtype=pl.Float64))
