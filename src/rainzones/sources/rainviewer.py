#!/usr/bin/env python3
"""
RainViewer radar source

Fetches the public weather-maps catalog (available past and nowcast
frames plus the tile host) and builds tile URLs for a frame.
"""

from typing import Any

import requests

from ..config.settings import EngineSettings
from ..core.base import Catalog, Frame, TileAddress
from ..core.errors import NetworkError, ParseError
from ..core.logging import get_logger

logger = get_logger(__name__)


def build_tile_url(
    host: str,
    frame: Frame,
    zoom: int,
    x: int,
    y: int,
    tile_size: int = 256,
    color_scheme: int = 2,
    smooth: int = 1,
    snow: int = 1,
    ext: str = "png",
) -> str:
    """Format a RainViewer tile URL.

    Layout: {host}{path}/{size}/{z}/{x}/{y}/{color}/{smooth}_{snow}.{ext}
    """
    return f"{host}{frame.path}/{tile_size}/{zoom}/{x}/{y}/{color_scheme}/{smooth}_{snow}.{ext}"


def _parse_frames(entries: Any, section: str) -> tuple[Frame, ...]:
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise ParseError(f"radar.{section} is not a list")

    frames = []
    for position, entry in enumerate(entries):
        try:
            frames.append(Frame(timestamp=int(entry["time"]), path=str(entry["path"])))
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Malformed frame radar.{section}[{position}]: {e}") from e
    return tuple(frames)


def parse_catalog(payload: Any) -> Catalog:
    """Convert the weather-maps JSON document into a Catalog.

    Raises:
        ParseError: If ``host`` or the ``radar`` section is missing, or a
            frame lacks its ``time``/``path`` fields
    """
    if not isinstance(payload, dict):
        raise ParseError("Catalog document is not a JSON object")

    host = payload.get("host")
    if not isinstance(host, str) or not host:
        raise ParseError("Catalog is missing 'host'")

    radar = payload.get("radar")
    if not isinstance(radar, dict):
        raise ParseError("Catalog is missing the 'radar' section")

    return Catalog(
        host=host,
        past=_parse_frames(radar.get("past"), "past"),
        nowcast=_parse_frames(radar.get("nowcast"), "nowcast"),
    )


class RainViewerCatalogClient:
    """Client for the RainViewer weather-maps catalog"""

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()
        self.catalog_url = self.settings.catalog_url

    def fetch(self, timeout: float | None = None) -> Catalog:
        """Download and parse the current catalog.

        One request per call, no caching and no retry.

        Args:
            timeout: Request timeout in seconds (default: settings.catalog_timeout)

        Raises:
            NetworkError: On transport failure or an error status
            ParseError: On an invalid or incomplete document
        """
        timeout = self.settings.catalog_timeout if timeout is None else timeout
        logger.debug(f"Fetching radar catalog: {self.catalog_url}", extra={"stage": "catalog"})

        try:
            response = requests.get(self.catalog_url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Catalog request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"Catalog is not valid JSON: {e}") from e

        catalog = parse_catalog(payload)
        logger.info(
            f"Catalog: {len(catalog.past)} past, {len(catalog.nowcast)} nowcast frames",
            extra={"stage": "catalog", "count": len(catalog.past) + len(catalog.nowcast)},
        )
        return catalog

    def tile_url(self, host: str, frame: Frame, address: TileAddress) -> str:
        """Tile URL for ``address`` rendered with the configured parameters."""
        s = self.settings
        return build_tile_url(
            host,
            frame,
            address.zoom,
            address.x,
            address.y,
            tile_size=s.tile_size,
            color_scheme=s.color_scheme,
            smooth=s.smooth,
            snow=s.snow,
            ext=s.ext,
        )
