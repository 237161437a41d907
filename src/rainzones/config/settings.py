#!/usr/bin/env python3
"""
Engine configuration.

Defaults match the public RainViewer API. Every value can be overridden
through a ``RAINZONES_*`` environment variable, which keeps deployments
free of config files.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

DEFAULT_CATALOG_URL = "https://api.rainviewer.com/public/weather-maps.json"


@dataclass(frozen=True)
class EngineSettings:
    """Tunables shared by every pipeline stage.

    Attributes:
        catalog_url: RainViewer weather-maps catalog endpoint
        max_tiles: Tile budget per extraction
        tile_size: Tile edge length requested from the tile host
        color_scheme: RainViewer color scheme id (2 = Universal Blue)
        smooth: 1 to request smoothed tiles
        snow: 1 to render snow separately
        ext: Tile image extension
        tile_timeout: Per-tile request timeout in seconds
        catalog_timeout: Catalog request timeout in seconds
        max_workers: Concurrent tile downloads
        tolerance_degrees: Douglas-Peucker tolerance
        point_zoom: Zoom used for single-point rain checks
        max_zoom: First zoom tried by the tile planner
        min_zoom: Lowest zoom the planner will fall back to
        max_tiles_across: Widest east-west span, in tiles, at the chosen zoom
    """

    catalog_url: str = DEFAULT_CATALOG_URL
    max_tiles: int = 180
    tile_size: int = 256
    color_scheme: int = 2
    smooth: int = 1
    snow: int = 1
    ext: str = "png"
    tile_timeout: float = 5.0
    catalog_timeout: float = 10.0
    max_workers: int = 6
    tolerance_degrees: float = 0.05
    point_zoom: int = 9
    max_zoom: int = 9
    min_zoom: int = 3
    max_tiles_across: int = 12


def _env_name(field_name: str) -> str:
    return f"RAINZONES_{field_name.upper()}"


def load_settings(env: Mapping[str, str] | None = None, **overrides) -> EngineSettings:
    """Build settings from defaults, environment and explicit overrides.

    Explicit keyword overrides win over environment variables.

    Raises:
        ValueError: If an environment variable cannot be converted to the
            field's type
    """
    env = os.environ if env is None else env
    values = {}

    for field in fields(EngineSettings):
        raw = env.get(_env_name(field.name))
        if raw is None:
            continue
        converter = type(field.default)
        try:
            values[field.name] = converter(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {_env_name(field.name)}: {raw!r}") from e

    values.update(overrides)
    return replace(EngineSettings(), **values)
