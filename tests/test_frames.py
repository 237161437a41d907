#!/usr/bin/env python3
"""
Tests for radar frame selection policies
"""

import pytest

from rainzones.core.base import Catalog, Frame, TimeMode
from rainzones.processing.frames import select_frame

PAST = tuple(Frame(ts, f"/v2/radar/{ts}") for ts in (1000, 1600, 2200))
NOWCAST = tuple(Frame(ts, f"/v2/radar/nowcast_{ts}") for ts in (2800, 3400))


@pytest.fixture
def catalog():
    return Catalog(host="https://tilecache.rainviewer.com", past=PAST, nowcast=NOWCAST)


class TestSelectFrame:
    """Frame policies over a catalog with past and nowcast frames"""

    def test_oldest_past(self, catalog):
        """Test that OLDEST_PAST picks the first past frame."""
        assert select_frame(catalog, TimeMode.OLDEST_PAST) == PAST[0]

    def test_latest_past(self, catalog):
        """Test that LATEST_PAST picks the last past frame."""
        assert select_frame(catalog, TimeMode.LATEST_PAST) == PAST[-1]

    def test_past_index(self, catalog):
        """Test that PAST_INDEX picks the frame at the index."""
        assert select_frame(catalog, TimeMode.PAST_INDEX, index=1) == PAST[1]

    @pytest.mark.parametrize("index, expected", [(-3, 0), (None, 0), (99, 2)])
    def test_past_index_is_clamped(self, catalog, index, expected):
        """Test that out-of-range and missing past indices are clamped."""
        assert select_frame(catalog, TimeMode.PAST_INDEX, index=index) == PAST[expected]

    def test_future_index(self, catalog):
        """Test that FUTURE_INDEX picks a nowcast frame and clamps the index."""
        assert select_frame(catalog, TimeMode.FUTURE_INDEX, index=1) == NOWCAST[1]
        assert select_frame(catalog, TimeMode.FUTURE_INDEX, index=7) == NOWCAST[1]

    def test_future_index_without_nowcast(self):
        """Test that FUTURE_INDEX gives None without nowcast frames."""
        catalog = Catalog(host="h", past=PAST)
        assert select_frame(catalog, TimeMode.FUTURE_INDEX, index=0) is None

    def test_nearest_to_now_prefers_closer_frame(self, catalog):
        """Test that NEAREST_TO_NOW picks whichever side is closer."""
        assert select_frame(catalog, TimeMode.NEAREST_TO_NOW, now=2300) == PAST[-1]
        assert select_frame(catalog, TimeMode.NEAREST_TO_NOW, now=2700) == NOWCAST[0]

    def test_nearest_to_now_tie_goes_to_past(self, catalog):
        """Test that an equal distance favours the past frame."""
        assert select_frame(catalog, TimeMode.NEAREST_TO_NOW, now=2500) == PAST[-1]

    def test_nearest_to_now_without_nowcast(self):
        """Test that NEAREST_TO_NOW falls back to the latest past frame."""
        catalog = Catalog(host="h", past=PAST)
        assert select_frame(catalog, TimeMode.NEAREST_TO_NOW, now=99999) == PAST[-1]

    def test_closest_to_timestamp_spans_past_and_nowcast(self, catalog):
        """Test that CLOSEST_TO_TIMESTAMP searches past and nowcast frames."""
        assert select_frame(catalog, TimeMode.CLOSEST_TO_TIMESTAMP, target_timestamp=1500) == PAST[1]
        assert select_frame(catalog, TimeMode.CLOSEST_TO_TIMESTAMP, target_timestamp=3300) == NOWCAST[1]

    def test_closest_to_timestamp_tie_keeps_first(self, catalog):
        """Test that the earlier frame wins a tie."""
        assert select_frame(catalog, TimeMode.CLOSEST_TO_TIMESTAMP, target_timestamp=1300) == PAST[0]

    def test_closest_to_timestamp_defaults_to_now(self, catalog):
        """Test that a missing target timestamp uses the current time."""
        assert select_frame(catalog, TimeMode.CLOSEST_TO_TIMESTAMP, now=3000) == NOWCAST[0]

    @pytest.mark.parametrize("mode", list(TimeMode))
    def test_no_past_frames_gives_none(self, mode):
        """Test that every policy gives None without past frames."""
        assert select_frame(Catalog(host="h", nowcast=NOWCAST), mode, index=0, now=0) is None

    def test_missing_catalog_gives_none(self):
        """Test that a missing catalog gives None."""
        assert select_frame(None, TimeMode.LATEST_PAST) is None

    @pytest.mark.parametrize("mode", [m for m in TimeMode if m != TimeMode.FUTURE_INDEX])
    @pytest.mark.parametrize("index", [None, -1, 0, 1, 5])
    @pytest.mark.parametrize("now", [0, 2000, 10000])
    def test_selection_stays_within_catalog_range(self, catalog, mode, index, now):
        """Test that every selection lies within the catalog's time range."""
        frame = select_frame(catalog, mode, index=index, target_timestamp=now, now=now)
        assert PAST[0].timestamp <= frame.timestamp <= NOWCAST[-1].timestamp
