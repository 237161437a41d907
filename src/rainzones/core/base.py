#!/usr/bin/env python3
"""
Core data model for the rain polygon engine
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .projection import TILE_SIZE, pixel_to_lonlat

Point = tuple[int, int]
Ring = list[Point]
LonLat = tuple[float, float]
Polygon = list[LonLat]


class TimeMode(Enum):
    """Policy used to pick one radar frame from the catalog."""

    OLDEST_PAST = "oldest_past"
    LATEST_PAST = "latest_past"
    NEAREST_TO_NOW = "nearest_to_now"
    PAST_INDEX = "past_index"
    FUTURE_INDEX = "future_index"
    CLOSEST_TO_TIMESTAMP = "closest_to_timestamp"


@dataclass(frozen=True)
class Frame:
    """One radar observation or nowcast snapshot."""

    timestamp: int
    path: str


@dataclass(frozen=True)
class Catalog:
    """Frames currently published by the radar tile provider.

    Attributes:
        host: Tile host prefix, e.g. "https://tilecache.rainviewer.com"
        past: Observed frames, oldest first
        nowcast: Forecast frames, soonest first
    """

    host: str
    past: tuple[Frame, ...] = ()
    nowcast: tuple[Frame, ...] = ()

    def all_frames(self) -> tuple[Frame, ...]:
        return self.past + self.nowcast


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    @classmethod
    def from_corners(
        cls, top_lat: float, left_lon: float, bottom_lat: float, right_lon: float
    ) -> "BoundingBox":
        """Build a normalized box from two corners given in any order."""
        return cls(north=top_lat, south=bottom_lat, east=right_lon, west=left_lon).normalized()

    def normalized(self) -> "BoundingBox":
        """Return a copy with north >= south and east >= west."""
        return BoundingBox(
            north=max(self.north, self.south),
            south=min(self.north, self.south),
            east=max(self.east, self.west),
            west=min(self.east, self.west),
        )

    @property
    def lon_span(self) -> float:
        return abs(self.east - self.west)


@dataclass(frozen=True)
class TileAddress:
    zoom: int
    x: int
    y: int


@dataclass(frozen=True)
class TileRange:
    """Rectangle of slippy-map tiles chosen for one extraction.

    Mask coordinates are local to this rectangle: mask column 0 is the
    west edge of tile ``x_min`` and mask row 0 the north edge of ``y_min``.
    """

    zoom: int
    x_min: int
    x_max: int
    y_min: int
    y_max: int

    @property
    def width_tiles(self) -> int:
        return self.x_max - self.x_min + 1

    @property
    def height_tiles(self) -> int:
        return self.y_max - self.y_min + 1

    @property
    def tile_count(self) -> int:
        return self.width_tiles * self.height_tiles

    def addresses(self) -> Iterator[TileAddress]:
        for x in range(self.x_min, self.x_max + 1):
            for y in range(self.y_min, self.y_max + 1):
                yield TileAddress(self.zoom, x, y)

    def mask_shape(self, tile_size: int = TILE_SIZE) -> tuple[int, int]:
        """(rows, cols) of the stitched mask covering this range."""
        return self.height_tiles * tile_size, self.width_tiles * tile_size

    def corner_to_lonlat(self, px: int, py: int, tile_size: int = TILE_SIZE) -> LonLat:
        """Project a mask-local grid corner to (lon, lat)."""
        return pixel_to_lonlat(
            self.x_min * tile_size + px,
            self.y_min * tile_size + py,
            self.zoom,
            tile_size,
        )


@dataclass(frozen=True)
class ExtractionResult:
    """Rain polygons extracted from one radar frame.

    Polygons are non-closed rings of (lon, lat) pairs.
    """

    polygons: tuple[tuple[LonLat, ...], ...]
    frame_timestamp: int
    mode: TimeMode

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "polygons": [[list(point) for point in polygon] for polygon in self.polygons],
            "frameTime": self.frame_timestamp,
            "mode": self.mode.name,
        }
