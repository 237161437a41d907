#!/usr/bin/env python3
"""
Rain polygon extraction pipeline.

Runs catalog -> frame selection -> tile planning -> tile download ->
mask -> contour tracing -> simplification/projection for one bounding
box. Every intermediate (mask, edge index, rings) belongs to the call
that created it, so one extractor can serve concurrent requests.

Failure policy:
- catalog errors abort the call (NetworkError / ParseError)
- a frame policy that cannot be resolved raises NoDataError
- failed tiles count as "no rain" and are only logged
- an expired caller deadline raises ExtractionTimeoutError instead of
  returning partial polygons
"""

import time

from ..config.settings import EngineSettings
from ..core.base import (
    BoundingBox,
    Catalog,
    ExtractionResult,
    Frame,
    Polygon,
    Ring,
    TileRange,
    TimeMode,
)
from ..core.errors import ExtractionTimeoutError, NetworkError, NoDataError
from ..core.logging import get_logger
from ..sources.rainviewer import RainViewerCatalogClient, build_tile_url
from .contour import trace_rings
from .frames import select_frame
from .mask import build_mask
from .point_sampler import PointSampler
from .simplify import remove_collinear, simplify_ring
from .tile_fetcher import TileFetcher
from .tile_grid import plan_tile_grid

logger = get_logger(__name__)


def _deadline_from(seconds: float | None) -> float | None:
    return None if seconds is None else time.monotonic() + seconds


def _check_deadline(deadline: float | None, stage: str) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise ExtractionTimeoutError("Deadline exceeded", stage=stage)


class RainPolygonExtractor:
    """Extracts rain polygons from RainViewer radar tiles.

    Example:
        extractor = RainPolygonExtractor()
        bbox = BoundingBox(north=48.9, south=48.6, east=2.55, west=2.1)
        result = extractor.extract(bbox, TimeMode.LATEST_PAST)
        for polygon in result.polygons:
            print(len(polygon), polygon[0])
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        catalog_client: RainViewerCatalogClient | None = None,
        fetcher: TileFetcher | None = None,
        sampler: PointSampler | None = None,
    ):
        self.settings = settings or EngineSettings()
        self.catalog_client = catalog_client or RainViewerCatalogClient(self.settings)
        self.fetcher = fetcher or TileFetcher(self.settings)
        self.sampler = sampler or PointSampler(self.settings, self.fetcher)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def fetch_catalog(self, deadline: float | None = None) -> Catalog:
        """Fetch the catalog, shortening the request timeout to the deadline."""
        _check_deadline(deadline, "catalog")
        timeout = self.settings.catalog_timeout
        if deadline is not None:
            # requests rejects non-positive timeouts
            timeout = max(0.001, min(timeout, deadline - time.monotonic()))

        try:
            return self.catalog_client.fetch(timeout=timeout)
        except NetworkError as e:
            if deadline is not None and time.monotonic() >= deadline:
                raise ExtractionTimeoutError("Deadline exceeded", stage="catalog") from e
            raise

    # ------------------------------------------------------------------
    # Polygon extraction
    # ------------------------------------------------------------------

    def extract(
        self,
        bbox: BoundingBox,
        mode: TimeMode = TimeMode.LATEST_PAST,
        index: int | None = None,
        target_timestamp: int | None = None,
        simplify: bool = True,
        deadline_seconds: float | None = None,
        now: int | None = None,
    ) -> ExtractionResult:
        """Extract rain polygons for one frame.

        Args:
            bbox: Area of interest; corners may be given in any order
            mode: Frame selection policy
            index: Frame index for PAST_INDEX / FUTURE_INDEX
            target_timestamp: UNIX seconds for CLOSEST_TO_TIMESTAMP
            simplify: Apply Douglas-Peucker simplification (collinear
                raster points are always removed)
            deadline_seconds: Bound on the whole call
            now: Current UNIX time override for time-relative policies

        Returns:
            ExtractionResult with (lon, lat) polygons

        Raises:
            NetworkError, ParseError: Catalog failure
            NoDataError: No frame matches the policy
            ExtractionTimeoutError: Deadline expired
        """
        deadline = _deadline_from(deadline_seconds)
        bbox = bbox.normalized()

        catalog = self.fetch_catalog(deadline)
        frame = select_frame(catalog, mode, index=index, target_timestamp=target_timestamp, now=now)
        if frame is None:
            raise NoDataError(f"No radar frame available for {mode.name}")

        return self.extract_frame(bbox, catalog.host, frame, mode, simplify=simplify, deadline=deadline)

    def extract_frame(
        self,
        bbox: BoundingBox,
        host: str,
        frame: Frame,
        mode: TimeMode,
        simplify: bool = True,
        deadline: float | None = None,
    ) -> ExtractionResult:
        """Run the tile-to-polygon stages for an already selected frame."""
        tiles = plan_tile_grid(bbox, self.settings)
        urls = {address: self.catalog_client.tile_url(host, frame, address) for address in tiles.addresses()}

        images = self.fetcher.fetch_tiles(urls, deadline=deadline)
        mask = build_mask(images, tiles, self.settings.tile_size)
        _check_deadline(deadline, "extraction")

        rings = trace_rings(mask)
        polygons = self.rings_to_polygons(rings, tiles, simplify=simplify)
        _check_deadline(deadline, "extraction")

        logger.info(
            f"Frame {frame.timestamp}: {len(polygons)} polygons at zoom {tiles.zoom}",
            extra={"stage": "extraction", "frame": frame.timestamp, "zoom": tiles.zoom, "count": len(polygons)},
        )
        return ExtractionResult(
            polygons=tuple(tuple(polygon) for polygon in polygons),
            frame_timestamp=frame.timestamp,
            mode=mode,
        )

    def rings_to_polygons(self, rings: list[Ring], tiles: TileRange, simplify: bool = True) -> list[Polygon]:
        """Simplify traced rings and project them to (lon, lat)."""
        tile_size = self.settings.tile_size

        def project(x: float, y: float) -> tuple[float, float]:
            return tiles.corner_to_lonlat(x, y, tile_size)

        polygons = []
        for ring in rings:
            if simplify:
                polygon = simplify_ring(ring, self.settings.tolerance_degrees, project)
            else:
                polygon = [project(x, y) for x, y in remove_collinear(ring)]
            if len(polygon) < 3:
                continue
            polygons.append(polygon)
        return polygons

    def extract_all(self, bbox: BoundingBox, simplify: bool = True, deadline_seconds: float | None = None) -> list[ExtractionResult]:
        """Extract polygons for every past and nowcast frame.

        The catalog is fetched once and shared by all frames of the run.

        Returns:
            Results sorted by frame timestamp, oldest first
        """
        deadline = _deadline_from(deadline_seconds)
        bbox = bbox.normalized()
        catalog = self.fetch_catalog(deadline)

        jobs = [(frame, TimeMode.PAST_INDEX) for frame in catalog.past]
        jobs += [(frame, TimeMode.FUTURE_INDEX) for frame in catalog.nowcast]

        results = [
            self.extract_frame(bbox, catalog.host, frame, mode, simplify=simplify, deadline=deadline)
            for frame, mode in jobs
        ]
        results.sort(key=lambda result: result.frame_timestamp)
        return results

    # ------------------------------------------------------------------
    # Point check and tile passthrough
    # ------------------------------------------------------------------

    def is_raining_at(
        self,
        lat: float,
        lon: float,
        mode: TimeMode = TimeMode.OLDEST_PAST,
        index: int | None = None,
        target_timestamp: int | None = None,
    ) -> bool:
        """Check for rain at one coordinate in the frame chosen by ``mode``.

        Returns False without any request for out-of-range coordinates,
        and False when the catalog has no matching frame.
        """
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            return False

        catalog = self.fetch_catalog()
        frame = select_frame(catalog, mode, index=index, target_timestamp=target_timestamp)
        if frame is None:
            return False
        return self.sampler.is_raining(lat, lon, frame, catalog.host)

    def fetch_tile_bytes(
        self,
        zoom: int,
        x: int,
        y: int,
        tile_size: int | None = None,
        color_scheme: int | None = None,
        smooth: int | None = None,
        snow: int | None = None,
        mode: TimeMode = TimeMode.OLDEST_PAST,
    ) -> bytes | None:
        """Raw tile bytes for a caching image endpoint.

        Unset render parameters use the configured defaults.

        Returns:
            PNG bytes, or None if no frame exists or the tile is unavailable
        """
        catalog = self.fetch_catalog()
        frame = select_frame(catalog, mode)
        if frame is None:
            return None

        s = self.settings
        url = build_tile_url(
            catalog.host,
            frame,
            zoom,
            x,
            y,
            tile_size=s.tile_size if tile_size is None else tile_size,
            color_scheme=s.color_scheme if color_scheme is None else color_scheme,
            smooth=s.smooth if smooth is None else smooth,
            snow=s.snow if snow is None else snow,
            ext=s.ext,
        )
        return self.fetcher.fetch_bytes(url)
