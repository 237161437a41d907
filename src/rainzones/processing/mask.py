#!/usr/bin/env python3
"""
Rain mask construction.

Stitches the alpha channel of the fetched tiles into one boolean raster
covering the planned tile rectangle. A pixel is "rain" when its alpha is
non-zero. Tiles that failed to download leave their block False, so a
fetch failure under-reports rain rather than inventing it.
"""

import numpy as np
from PIL import Image

from ..core.base import TileAddress, TileRange
from ..core.logging import get_logger

logger = get_logger(__name__)


def alpha_mask(image: Image.Image) -> np.ndarray:
    """Boolean array (rows, cols) that is True where the image alpha is > 0.

    Images without an alpha channel convert to fully opaque RGBA and count
    as rain everywhere.
    """
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    alpha = np.asarray(image.getchannel("A"))
    return alpha > 0


def build_mask(
    tiles: dict[TileAddress, Image.Image],
    tile_range: TileRange,
    tile_size: int = 256,
) -> np.ndarray:
    """Stitch tile alpha channels into a single rain mask.

    Args:
        tiles: Decoded tile images keyed by address; missing tiles are skipped
        tile_range: Tile rectangle the mask covers
        tile_size: Nominal tile edge length in pixels

    Returns:
        Boolean array of shape (height_tiles * tile_size, width_tiles * tile_size)
    """
    mask = np.zeros(tile_range.mask_shape(tile_size), dtype=bool)

    for address, image in tiles.items():
        if not (tile_range.x_min <= address.x <= tile_range.x_max
                and tile_range.y_min <= address.y <= tile_range.y_max):
            logger.warning(f"Ignoring tile {address} outside planned range", extra={"stage": "mask"})
            continue

        tile_alpha = alpha_mask(image)
        # Odd-sized tiles are cropped to the nominal block
        rows = min(tile_size, tile_alpha.shape[0])
        cols = min(tile_size, tile_alpha.shape[1])
        row0 = (address.y - tile_range.y_min) * tile_size
        col0 = (address.x - tile_range.x_min) * tile_size
        mask[row0:row0 + rows, col0:col0 + cols] = tile_alpha[:rows, :cols]

    logger.debug(
        f"Mask {mask.shape[1]}x{mask.shape[0]}: {int(mask.sum())} rain pixels",
        extra={"stage": "mask", "count": int(mask.sum())},
    )
    return mask
