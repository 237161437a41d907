#!/usr/bin/env python3
"""
Single-point rain check.

Answers "is it raining here" from one tile at a fixed zoom, without
building a mask or tracing contours.
"""

import math

from PIL import Image

from ..config.settings import EngineSettings
from ..core.base import Frame
from ..core.logging import get_logger
from ..core.projection import MAX_LATITUDE, lat_to_tile_fraction, lon_to_tile_fraction
from ..sources.rainviewer import build_tile_url
from .tile_fetcher import TileFetcher

logger = get_logger(__name__)


def sample_alpha(image: Image.Image, x_frac: float, y_frac: float) -> int:
    """Alpha value at a fractional (0..1) position inside a tile image."""
    width, height = image.size
    px = min(max(math.floor(x_frac * width), 0), width - 1)
    py = min(max(math.floor(y_frac * height), 0), height - 1)
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return image.getpixel((px, py))[3]


class PointSampler:
    """Checks for rain at a single coordinate"""

    def __init__(self, settings: EngineSettings | None = None, fetcher: TileFetcher | None = None):
        self.settings = settings or EngineSettings()
        self.fetcher = fetcher or TileFetcher(self.settings)

    def is_raining(self, lat: float, lon: float, frame: Frame, host: str) -> bool:
        """True if the frame's radar tile shows rain at (lat, lon).

        Out-of-range coordinates, coordinates beyond the Web Mercator
        latitude limit, a missing or undecodable tile and a transparent
        pixel all answer False.
        """
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            return False
        if abs(lat) > MAX_LATITUDE:
            return False

        zoom = self.settings.point_zoom
        n = 1 << zoom
        x_float = lon_to_tile_fraction(lon, zoom)
        y_float = lat_to_tile_fraction(lat, zoom)
        tile_x = math.floor(x_float)
        tile_y = math.floor(y_float)
        if not (0 <= tile_x < n and 0 <= tile_y < n):
            return False

        s = self.settings
        url = build_tile_url(
            host, frame, zoom, tile_x, tile_y,
            tile_size=s.tile_size, color_scheme=s.color_scheme,
            smooth=s.smooth, snow=s.snow, ext=s.ext,
        )
        image = self.fetcher.fetch_tile(url)
        if image is None:
            logger.debug(f"No tile for point ({lat}, {lon})", extra={"stage": "point"})
            return False

        return sample_alpha(image, x_float - tile_x, y_float - tile_y) > 0
