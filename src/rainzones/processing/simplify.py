#!/usr/bin/env python3
"""
Ring simplification.

Two passes shrink traced rings before they leave the engine:

1. Collinear removal drops the points in the middle of straight vertical
   or horizontal runs that boundary tracing produces on every pixel step.
   Topology is unchanged.
2. Douglas-Peucker removes points within ``tolerance`` degrees of the
   chord between the retained neighbours. Closed rings are first split
   at the point farthest from their start, and a ring that would end up
   with fewer than three points is left at its collinear-reduced shape.
"""

import math
from collections.abc import Callable, Sequence

Coord = tuple[float, float]


def remove_collinear(points: Sequence[Coord]) -> list[Coord]:
    """Drop points whose incoming and outgoing steps share an axis.

    Both neighbours are taken from the input ring (cyclically), so a whole
    straight run collapses to its two end corners in one pass. Rings of
    fewer than 4 points are returned unchanged.
    """
    n = len(points)
    if n < 4:
        return list(points)

    kept = []
    for i in range(n):
        prev_x, prev_y = points[i - 1]
        cur_x, cur_y = points[i]
        next_x, next_y = points[(i + 1) % n]
        if cur_x == prev_x and next_x == cur_x:
            continue
        if cur_y == prev_y and next_y == cur_y:
            continue
        kept.append(points[i])
    return kept


def distance_to_segment(point: Coord, start: Coord, end: Coord) -> float:
    """Euclidean distance from ``point`` to the segment start-end."""
    x, y = point
    x1, y1 = start
    x2, y2 = end
    dx = x2 - x1
    dy = y2 - y1

    if dx == 0 and dy == 0:
        return math.hypot(x - x1, y - y1)

    t = ((x - x1) * dx + (y - y1) * dy) / (dx * dx + dy * dy)
    if t < 0:
        return math.hypot(x - x1, y - y1)
    if t > 1:
        return math.hypot(x - x2, y - y2)
    return math.hypot(x - (x1 + t * dx), y - (y1 + t * dy))


def douglas_peucker(points: Sequence[Coord], tolerance: float) -> list[Coord]:
    """Douglas-Peucker simplification of an open point sequence.

    The first and last points are always kept. Each span is split at its
    first point of maximum deviation while that deviation exceeds
    ``tolerance``. Uses an explicit stack, so long rings cannot hit the
    recursion limit; the result matches the recursive formulation.
    """
    n = len(points)
    if n < 3:
        return list(points)

    keep = [False] * n
    keep[0] = keep[-1] = True
    stack = [(0, n - 1)]

    while stack:
        first, last = stack.pop()
        max_distance = 0.0
        split = 0
        for i in range(first + 1, last):
            d = distance_to_segment(points[i], points[first], points[last])
            if d > max_distance:
                max_distance = d
                split = i

        if max_distance > tolerance:
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))

    return [p for p, k in zip(points, keep) if k]


def douglas_peucker_ring(points: Sequence[Coord], tolerance: float) -> list[Coord]:
    """Douglas-Peucker simplification of a closed ring.

    The ring is split at the point farthest from ``points[0]`` and both
    halves are simplified as open sequences, so the first chord spans the
    ring instead of joining two neighbouring corners. ``points[0]`` stays
    the first point of the result.
    """
    n = len(points)
    if n < 4:
        return list(points)

    origin = points[0]
    far = 0
    max_distance = 0.0
    for i in range(1, n):
        d = math.hypot(points[i][0] - origin[0], points[i][1] - origin[1])
        if d > max_distance:
            max_distance = d
            far = i
    if far == 0:
        return list(points)

    head = douglas_peucker(points[: far + 1], tolerance)
    tail = douglas_peucker(list(points[far:]) + [origin], tolerance)
    return head[:-1] + tail[:-1]


def simplify_ring(
    ring: Sequence[Coord],
    tolerance: float,
    project: Callable[[float, float], Coord] | None = None,
) -> list[Coord]:
    """Simplify a traced ring.

    Collinear points are removed from the corner ring, the survivors are
    optionally projected (e.g. pixel corners to lon/lat), then
    Douglas-Peucker and collinear removal are repeated until the ring
    stops changing. Running it again on its own output returns the same
    ring.

    A ring that Douglas-Peucker would flatten below a triangle (a region
    narrower than ``tolerance``) keeps its collinear-reduced shape, so
    small cells are never dropped by simplification alone.

    Args:
        ring: Ring points, not explicitly closed
        tolerance: Douglas-Peucker tolerance in output units (degrees)
        project: Optional point mapping applied after the collinear pass

    Returns:
        Simplified ring points
    """
    points = remove_collinear(ring)
    if project is not None:
        points = [project(x, y) for x, y in points]

    while True:
        reduced = remove_collinear(douglas_peucker_ring(points, tolerance))
        if len(reduced) < 3 or reduced == points:
            return points
        points = reduced
