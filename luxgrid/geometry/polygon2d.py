from __future__ import annotations

from typing import Sequence, Tuple


Point2 = Tuple[float, float]

EPS_BOUNDARY = 1e-9


def _signed_area(poly: Sequence[Point2]) -> float:
    if len(poly) < 3:
        return 0.0
    s = 0.0
    for i in range(len(poly)):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % len(poly)]
        s += x1 * y2 - x2 * y1
    return 0.5 * s


def polygon_area(poly: Sequence[Point2]) -> float:
    return abs(_signed_area(poly))


def polygon_bounds(poly: Sequence[Point2]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""
    if not poly:
        raise ValueError("Polygon has no vertices")
    xs = [float(p[0]) for p in poly]
    ys = [float(p[1]) for p in poly]
    return min(xs), min(ys), max(xs), max(ys)


def _on_segment(pt: Point2, a: Point2, b: Point2, eps: float) -> bool:
    x, y = pt
    cross = (b[0] - a[0]) * (y - a[1]) - (b[1] - a[1]) * (x - a[0])
    seg_len = max(abs(b[0] - a[0]), abs(b[1] - a[1]), 1.0)
    if abs(cross) > eps * seg_len:
        return False
    return (
        min(a[0], b[0]) - eps <= x <= max(a[0], b[0]) + eps
        and min(a[1], b[1]) - eps <= y <= max(a[1], b[1]) + eps
    )


def point_in_polygon(pt: Point2, poly: Sequence[Point2], *, include_boundary: bool = True) -> bool:
    """
    Even-odd ray casting test. Points lying on an edge count as inside when
    `include_boundary` is set, so grids that start on the room outline keep
    their first row and column.
    """
    n = len(poly)
    if n < 3:
        return False
    if include_boundary:
        for i in range(n):
            if _on_segment(pt, poly[i], poly[(i + 1) % n], EPS_BOUNDARY):
                return True
    x, y = pt
    inside = False
    for i in range(n):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % n]
        if ((y1 > y) != (y2 > y)) and (x < (x2 - x1) * (y - y1) / (y2 - y1) + x1):
            inside = not inside
    return inside
