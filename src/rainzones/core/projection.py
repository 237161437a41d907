#!/usr/bin/env python3
"""
Web Mercator (slippy-map) tile and pixel math.

Forward formulas map longitude/latitude to tile indices at a zoom level;
the inverse maps global pixel coordinates back to longitude/latitude.
Global pixel space at zoom z spans ``tile_size * 2**z`` pixels per axis,
with (0, 0) at the north-west corner of the world map.
"""

import math

TILE_SIZE = 256

# Web Mercator tiles stop at +/- atan(sinh(pi)) degrees
MAX_LATITUDE = 85.0511287798066


def lon_to_tile_x(lon: float, zoom: int) -> int:
    """Column index of the tile containing ``lon`` at ``zoom``."""
    return math.floor((lon + 180.0) / 360.0 * (1 << zoom))


def lat_to_tile_y(lat: float, zoom: int) -> int:
    """Row index of the tile containing ``lat`` at ``zoom``."""
    return math.floor(lat_to_tile_fraction(lat, zoom))


def lon_to_tile_fraction(lon: float, zoom: int) -> float:
    return (lon + 180.0) / 360.0 * (1 << zoom)


def lat_to_tile_fraction(lat: float, zoom: int) -> float:
    rad = math.radians(lat)
    return (1.0 - math.log(math.tan(rad) + 1.0 / math.cos(rad)) / math.pi) / 2.0 * (1 << zoom)


def pixel_to_lonlat(
    pixel_x: float, pixel_y: float, zoom: int, tile_size: int = TILE_SIZE
) -> tuple[float, float]:
    """Convert global pixel coordinates to (lon, lat) degrees.

    Args:
        pixel_x: Global pixel column (tile index * tile_size + in-tile offset)
        pixel_y: Global pixel row, growing southwards
        zoom: Zoom level the pixel coordinates belong to
        tile_size: Tile edge length in pixels

    Returns:
        (longitude, latitude) tuple in degrees
    """
    map_size = tile_size * math.pow(2, zoom)
    lon = pixel_x / map_size * 360.0 - 180.0
    n = math.pi - 2.0 * math.pi * pixel_y / map_size
    lat = math.degrees(math.atan(math.sinh(n)))
    return lon, lat


def tile_origin_lonlat(zoom: int, x: int, y: int, tile_size: int = TILE_SIZE) -> tuple[float, float]:
    """(lon, lat) of the north-west corner of tile (zoom, x, y)."""
    return pixel_to_lonlat(x * tile_size, y * tile_size, zoom, tile_size)
