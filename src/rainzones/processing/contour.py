#!/usr/bin/env python3
"""
Boundary-edge contour tracing.

Converts a boolean raster into closed rings of grid-corner points. Every
filled cell contributes a unit edge on each side that borders an empty
cell or the raster edge. Edges are oriented clockwise around filled
cells (top left->right, right top->bottom, bottom right->left, left
bottom->top), so the boundary of each connected region chains head to
tail and can be walked edge by edge.

Corner (x, y) is the top-left corner of cell (row y, column x); the
raster spans corners 0..width and 0..height. Filled cells that touch
across a tile seam belong to one region and come out as one ring.
Holes inside a region are emitted as separate, counter-clockwise rings.
"""

from collections import defaultdict

import numpy as np

from ..core.base import Point, Ring
from ..core.logging import get_logger

logger = get_logger(__name__)

# Start/end corner offsets per side, in emission order: top, right, bottom, left
_START_DX = np.array([0, 1, 1, 0])
_START_DY = np.array([0, 0, 1, 1])
_END_DX = np.array([1, 1, 0, 0])
_END_DY = np.array([0, 1, 1, 0])


def boundary_edges(mask: np.ndarray) -> tuple[list[Point], list[Point]]:
    """Oriented boundary edges of the filled cells of ``mask``.

    Edges are ordered by cell in row-major order and, within a cell, by
    side (top, right, bottom, left).

    Returns:
        (starts, ends): parallel lists of edge start and end corners
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.ndim != 2 or mask.size == 0:
        return [], []

    padded = np.pad(mask, 1, mode="constant", constant_values=False)
    above = padded[:-2, 1:-1]
    below = padded[2:, 1:-1]
    left = padded[1:-1, :-2]
    right = padded[1:-1, 2:]

    sides = np.stack([mask & ~above, mask & ~right, mask & ~below, mask & ~left], axis=-1)
    ys, xs, ks = np.nonzero(sides)

    starts = list(zip((xs + _START_DX[ks]).tolist(), (ys + _START_DY[ks]).tolist()))
    ends = list(zip((xs + _END_DX[ks]).tolist(), (ys + _END_DY[ks]).tolist()))
    return starts, ends


def _next_unused(candidates: list[int] | None, used: list[bool]) -> int | None:
    if candidates:
        for edge in candidates:
            if not used[edge]:
                return edge
    return None


def trace_rings(mask: np.ndarray) -> list[Ring]:
    """Assemble the boundary edges of ``mask`` into closed rings.

    Rings are returned without a closing duplicate of their first point.
    Chains that cannot be closed and rings with fewer than 3 distinct
    points are dropped.

    Args:
        mask: 2D boolean raster, True where rain was observed

    Returns:
        List of rings, each a list of (x, y) corner points
    """
    starts, ends = boundary_edges(mask)
    if not starts:
        return []

    edges_from: dict[Point, list[int]] = defaultdict(list)
    for edge, point in enumerate(starts):
        edges_from[point].append(edge)

    used = [False] * len(starts)
    rings: list[Ring] = []
    broken = 0
    degenerate = 0

    for first in range(len(starts)):
        if used[first]:
            continue

        origin = starts[first]
        ring: Ring | None = [origin]
        current = first
        while True:
            used[current] = True
            point = ends[current]
            ring.append(point)
            if point == origin:
                break
            current = _next_unused(edges_from.get(point), used)
            if current is None:
                ring = None
                break

        if ring is None:
            broken += 1
            continue

        if len(ring) > 1 and ring[-1] == ring[0]:
            ring.pop()
        if len(set(ring)) < 3:
            degenerate += 1
            continue
        rings.append(ring)

    if broken or degenerate:
        logger.debug(
            f"Dropped {broken} open chains and {degenerate} degenerate rings",
            extra={"stage": "contour"},
        )
    logger.debug(f"Traced {len(rings)} rings from {len(starts)} edges", extra={"stage": "contour", "count": len(rings)})
    return rings
