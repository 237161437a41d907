#!/usr/bin/env python3
"""
Geographic helpers for callers of the engine.
"""

import math
from collections.abc import Iterable, Sequence

from ..core.base import BoundingBox

KM_PER_DEGREE_LAT = 111.0


def expanded_area(
    start_lat: float,
    start_lon: float,
    end_lat: float,
    end_lon: float,
    margin_km: float = 30.0,
) -> BoundingBox:
    """Bounding box around a trip's endpoints, widened by ``margin_km``.

    The longitude margin is scaled by the cosine of the mean latitude so
    the margin is roughly the same distance on every side.

    Args:
        start_lat, start_lon: Trip start
        end_lat, end_lon: Trip end
        margin_km: Margin added on every side

    Returns:
        Normalized BoundingBox
    """
    lat_center = (start_lat + end_lat) / 2.0
    lat_offset = margin_km / KM_PER_DEGREE_LAT
    lon_offset = margin_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(lat_center)))

    return BoundingBox(
        north=max(start_lat, end_lat) + lat_offset,
        south=min(start_lat, end_lat) - lat_offset,
        east=max(start_lon, end_lon) + lon_offset,
        west=min(start_lon, end_lon) - lon_offset,
    )


def swap_axes(polygons: Iterable[Sequence[Sequence[float]]]) -> list[list[list[float]]]:
    """Reverse (lon, lat) pairs to (lat, lon) for consumers that want it."""
    return [[[point[1], point[0]] for point in polygon] for polygon in polygons]
