"""
Rainzones - rain polygons from RainViewer radar tiles

Turns RainViewer radar imagery into geographic rain polygons for a
bounding box: the frame catalog is fetched, one frame is picked by a
time policy, the covering tiles are downloaded in parallel, and the
stitched rain mask is traced, simplified and projected to (lon, lat).
"""

__version__ = "1.0.0"
__author__ = "Radar Processing Team"

# Main exports
from .core.base import BoundingBox, ExtractionResult, TimeMode
from .core.errors import (
    ExtractionTimeoutError,
    NetworkError,
    NoDataError,
    ParseError,
    RainZoneError,
)
from .config.settings import EngineSettings, load_settings
from .processing.extractor import RainPolygonExtractor

__all__ = [
    "BoundingBox",
    "ExtractionResult",
    "TimeMode",
    "RainZoneError",
    "NetworkError",
    "ParseError",
    "NoDataError",
    "ExtractionTimeoutError",
    "EngineSettings",
    "load_settings",
    "RainPolygonExtractor",
]
