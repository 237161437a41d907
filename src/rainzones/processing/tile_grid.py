#!/usr/bin/env python3
"""
Tile grid planning.

Maps a bounding box to a zoom level and tile rectangle. Zoom starts high
for detail and drops until the box fits both the east-west width limit
and the tile budget, which bounds the number of downloaded pixels for any
input box.
"""

from ..config.settings import EngineSettings
from ..core.base import BoundingBox, TileRange
from ..core.logging import get_logger
from ..core.projection import MAX_LATITUDE, lat_to_tile_y, lon_to_tile_x

logger = get_logger(__name__)


def choose_zoom(bbox: BoundingBox, max_zoom: int = 9, min_zoom: int = 3, max_tiles_across: int = 12) -> int:
    """Highest zoom at which the box spans at most ``max_tiles_across`` tiles east-west."""
    zoom = max_zoom
    while zoom > min_zoom:
        tiles_across = bbox.lon_span / (360.0 / (1 << zoom))
        if tiles_across <= max_tiles_across:
            break
        zoom -= 1
    return zoom


def _clamp_lat(lat: float) -> float:
    return max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))


def tile_range_for(bbox: BoundingBox, zoom: int) -> TileRange:
    """Tile rectangle covering a normalized box at ``zoom``."""
    last = (1 << zoom) - 1

    def clamp(index: int) -> int:
        return max(0, min(last, index))

    return TileRange(
        zoom=zoom,
        x_min=clamp(lon_to_tile_x(bbox.west, zoom)),
        x_max=clamp(lon_to_tile_x(bbox.east, zoom)),
        y_min=clamp(lat_to_tile_y(_clamp_lat(bbox.north), zoom)),
        y_max=clamp(lat_to_tile_y(_clamp_lat(bbox.south), zoom)),
    )


def plan_tile_grid(bbox: BoundingBox, settings: EngineSettings | None = None) -> TileRange:
    """Choose zoom and tile rectangle for ``bbox`` within the tile budget.

    The box is normalized first, so corners may be given in any order.
    Budget overruns are resolved by lowering the zoom, never by failing;
    at ``min_zoom`` the range is returned as is.
    """
    settings = settings or EngineSettings()
    bbox = bbox.normalized()

    zoom = choose_zoom(bbox, settings.max_zoom, settings.min_zoom, settings.max_tiles_across)
    tiles = tile_range_for(bbox, zoom)

    while tiles.tile_count > settings.max_tiles and zoom > settings.min_zoom:
        zoom -= 1
        tiles = tile_range_for(bbox, zoom)

    logger.debug(
        f"Planned zoom {tiles.zoom}: x {tiles.x_min}-{tiles.x_max}, "
        f"y {tiles.y_min}-{tiles.y_max} ({tiles.tile_count} tiles)",
        extra={"stage": "plan", "zoom": tiles.zoom, "count": tiles.tile_count},
    )
    return tiles
