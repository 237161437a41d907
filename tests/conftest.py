"""Shared fixtures: in-memory radar tiles and canned HTTP responses."""

import copy
import logging
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

CATALOG_PAYLOAD = {
    "version": "2.0",
    "generated": 1700001500,
    "host": "https://tilecache.rainviewer.com",
    "radar": {
        "past": [
            {"time": 1700000000, "path": "/v2/radar/1700000000"},
            {"time": 1700000600, "path": "/v2/radar/1700000600"},
            {"time": 1700001200, "path": "/v2/radar/1700001200"},
        ],
        "nowcast": [
            {"time": 1700001800, "path": "/v2/radar/nowcast_1700001800"},
        ],
    },
}


def _png(alpha: int, size: int = 256, mode: str = "RGBA") -> bytes:
    color = (0, 120, 255, alpha) if mode == "RGBA" else (0, 120, 255)
    buffer = BytesIO()
    Image.new(mode, (size, size), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def tile_png():
    """Factory for PNG tile bytes: tile_png(alpha, size=256, mode="RGBA")."""
    return _png


@pytest.fixture
def tile_image():
    """Factory for decoded tiles: tile_image(alpha, size=256)."""

    def make(alpha: int, size: int = 256) -> Image.Image:
        return Image.new("RGBA", (size, size), (0, 120, 255, alpha))

    return make


@pytest.fixture
def make_response():
    """Factory for fake ``requests`` responses."""

    def make(status: int = 200, content: bytes = b"", payload=None) -> MagicMock:
        response = MagicMock()
        response.status_code = status
        response.content = content
        if payload is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = payload
        if status >= 400:
            response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
        else:
            response.raise_for_status = MagicMock()
        return response

    return make


@pytest.fixture
def catalog_payload():
    return copy.deepcopy(CATALOG_PAYLOAD)


@pytest.fixture(autouse=True)
def reset_rainzones_logger():
    """Drop handlers installed by setup_logging between tests."""
    yield
    logger = logging.getLogger("rainzones")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
