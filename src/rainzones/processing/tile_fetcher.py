#!/usr/bin/env python3
"""
Radar tile downloads.

A single tile failure never aborts an extraction: transport errors,
non-200 responses and undecodable images all yield ``None`` and the tile
is treated as "no rain" downstream. Batches run on a bounded thread pool
and return only after every tile attempt has finished.
"""

import time
from concurrent.futures import ThreadPoolExecutor, wait
from io import BytesIO

import requests
from PIL import Image

from ..config.settings import EngineSettings
from ..core.base import TileAddress
from ..core.errors import ExtractionTimeoutError
from ..core.logging import get_logger

logger = get_logger(__name__)


class TileFetcher:
    """Downloads and decodes radar tiles"""

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()

    def fetch_bytes(self, url: str) -> bytes | None:
        """Raw tile payload, or None on any transport error or non-200 status."""
        try:
            response = requests.get(url, timeout=self.settings.tile_timeout)
        except requests.RequestException as e:
            logger.debug(f"Tile request failed {url}: {e}", extra={"stage": "tiles"})
            return None

        if response.status_code != 200:
            logger.debug(f"Tile {url} returned HTTP {response.status_code}", extra={"stage": "tiles"})
            return None
        return response.content

    def fetch_tile(self, url: str) -> Image.Image | None:
        """Download and decode one tile, or None if either step fails."""
        content = self.fetch_bytes(url)
        if content is None:
            return None

        try:
            image = Image.open(BytesIO(content))
            image.load()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.debug(f"Tile {url} could not be decoded: {e}", extra={"stage": "tiles"})
            return None
        return image

    def fetch_tiles(
        self,
        urls: dict[TileAddress, str],
        deadline: float | None = None,
    ) -> dict[TileAddress, Image.Image]:
        """Fetch a batch of tiles in parallel.

        Args:
            urls: Tile URL per tile address
            deadline: Absolute ``time.monotonic()`` limit for the whole batch

        Returns:
            Decoded images for the tiles that succeeded

        Raises:
            ExtractionTimeoutError: If the deadline passes before every tile
                attempt has completed
        """
        if not urls:
            return {}

        max_workers = max(1, min(self.settings.max_workers, len(urls)))
        logger.debug(
            f"Fetching {len(urls)} tiles (max {max_workers} concurrent)",
            extra={"stage": "tiles"},
        )

        executor = ThreadPoolExecutor(max_workers=max_workers)
        try:
            future_to_address = {
                executor.submit(self.fetch_tile, url): address for address, url in urls.items()
            }

            timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
            done, pending = wait(future_to_address, timeout=timeout)
            if pending:
                raise ExtractionTimeoutError(
                    f"{len(pending)} of {len(urls)} tiles still pending at deadline",
                    stage="tiles",
                )

            images = {}
            for future in done:
                image = future.result()
                if image is not None:
                    images[future_to_address[future]] = image
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        failed = len(urls) - len(images)
        logger.info(
            f"Fetched {len(images)} tiles ({failed} failed)",
            extra={"stage": "tiles", "count": len(images)},
        )
        return images
