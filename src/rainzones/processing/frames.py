#!/usr/bin/env python3
"""
Radar frame selection.

Picks a single frame from a catalog according to a TimeMode policy.
Pure lookup: no I/O, and ``now`` is injectable for deterministic tests.
"""

import time

from ..core.base import Catalog, Frame, TimeMode


def _clamp(index: int | None, length: int) -> int:
    if index is None or index < 0:
        return 0
    return min(index, length - 1)


def _closest(frames: tuple[Frame, ...], target: int) -> Frame | None:
    # Strict comparison keeps the first frame on ties
    best = None
    best_diff = None
    for frame in frames:
        diff = abs(frame.timestamp - target)
        if best_diff is None or diff < best_diff:
            best, best_diff = frame, diff
    return best


def select_frame(
    catalog: Catalog | None,
    mode: TimeMode,
    index: int | None = None,
    target_timestamp: int | None = None,
    now: int | None = None,
) -> Frame | None:
    """Select one frame from the catalog.

    Args:
        catalog: Catalog to choose from
        mode: Selection policy
        index: Position for PAST_INDEX / FUTURE_INDEX, clamped into range
        target_timestamp: UNIX seconds for CLOSEST_TO_TIMESTAMP (default: now)
        now: Current UNIX time override

    Returns:
        The selected frame, or None when the catalog has no past frames or
        FUTURE_INDEX is requested without nowcast frames
    """
    if catalog is None or not catalog.past:
        return None

    past, nowcast = catalog.past, catalog.nowcast
    if now is None:
        now = int(time.time())

    if mode == TimeMode.OLDEST_PAST:
        return past[0]

    if mode == TimeMode.LATEST_PAST:
        return past[-1]

    if mode == TimeMode.NEAREST_TO_NOW:
        last_past = past[-1]
        if not nowcast:
            return last_past
        first_future = nowcast[0]
        if abs(now - last_past.timestamp) <= abs(first_future.timestamp - now):
            return last_past
        return first_future

    if mode == TimeMode.PAST_INDEX:
        return past[_clamp(index, len(past))]

    if mode == TimeMode.FUTURE_INDEX:
        if not nowcast:
            return None
        return nowcast[_clamp(index, len(nowcast))]

    if mode == TimeMode.CLOSEST_TO_TIMESTAMP:
        target = now if target_timestamp is None else target_timestamp
        return _closest(past + nowcast, target)

    raise ValueError(f"Unsupported time mode: {mode!r}")
