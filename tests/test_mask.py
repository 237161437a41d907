#!/usr/bin/env python3
"""
Tests for stitching tile alpha channels into a rain mask
"""

import numpy as np
from PIL import Image

from rainzones.core.base import TileAddress, TileRange
from rainzones.processing.mask import alpha_mask, build_mask

RANGE_2X2 = TileRange(zoom=3, x_min=4, x_max=5, y_min=2, y_max=3)


class TestAlphaMask:
    """Per-tile alpha thresholding"""

    def test_alpha_threshold(self):
        """Test that any non-zero alpha counts as rain."""
        image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
        image.putpixel((1, 2), (10, 10, 200, 1))

        mask = alpha_mask(image)

        assert mask.shape == (4, 4)
        assert mask.sum() == 1
        assert mask[2, 1]

    def test_opaque_modes_count_as_rain(self):
        """Test that images without alpha count as rain everywhere."""
        assert alpha_mask(Image.new("RGB", (3, 3), (0, 0, 0))).all()

    def test_palette_transparency(self):
        """Test that palette transparency is respected."""
        image = Image.new("P", (2, 2), 0)
        image.info["transparency"] = 0
        assert not alpha_mask(image).any()


class TestBuildMask:
    """Stitched mask layout"""

    def test_shape_and_empty_without_tiles(self):
        """Test that the mask covers the whole range and is dry without tiles."""
        mask = build_mask({}, RANGE_2X2)

        assert mask.shape == (512, 512)
        assert mask.dtype == np.bool_
        assert not mask.any()

    def test_tiles_land_in_their_blocks(self, tile_image):
        """Test that each tile fills its own block of the mask."""
        tiles = {
            TileAddress(3, 5, 2): tile_image(255),
            TileAddress(3, 4, 3): tile_image(0),
        }

        mask = build_mask(tiles, RANGE_2X2)

        assert mask[0:256, 256:512].all()
        assert not mask[0:256, 0:256].any()
        assert not mask[256:512, :].any()

    def test_failed_tile_leaves_no_rain(self, tile_image):
        """Test that a tile missing from the batch leaves its block dry."""
        tiles = {TileAddress(3, 4, 2): tile_image(255)}

        mask = build_mask(tiles, RANGE_2X2)

        assert mask.sum() == 256 * 256

    def test_out_of_range_tile_is_ignored(self, tile_image):
        """Test that tiles outside the range are ignored."""
        tiles = {TileAddress(3, 7, 7): tile_image(255)}
        assert not build_mask(tiles, RANGE_2X2).any()

    def test_undersized_tile_fills_top_left(self, tile_image):
        """Test that a small tile fills only the top-left of its block."""
        tiles = {TileAddress(3, 4, 2): tile_image(255, size=100)}

        mask = build_mask(tiles, RANGE_2X2)

        assert mask[:100, :100].all()
        assert mask.sum() == 100 * 100

    def test_oversized_tile_is_cropped(self, tile_image):
        """Test that a large tile is cropped to its block."""
        tiles = {TileAddress(3, 4, 2): tile_image(255, size=300)}

        mask = build_mask(tiles, RANGE_2X2)

        assert mask[:256, :256].all()
        assert mask.sum() == 256 * 256
