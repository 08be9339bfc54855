"""Minimum enclosing circle (Welzl's algorithm).

Planar computation over projected coordinates. The iterative
move-to-front form is used so large vertex sets cannot exhaust the
recursion limit; points are shuffled with a fixed seed so the result is
deterministic for a given input.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable

Point = tuple[float, float]
Circle = tuple[float, float, float]  # (cx, cy, radius)

# Relative slack when testing containment, absorbs rounding on the boundary
_CONTAINMENT_EPS = 1e-12
# Below this |determinant| three points are treated as collinear
_COLLINEAR_EPS = 1e-12

_SHUFFLE_SEED = 0x5EED


def minimum_enclosing_circle(points: Iterable[Point]) -> Circle:
    """Return the smallest circle containing every point.

    Args:
        points: Planar ``(x, y)`` coordinates. Duplicates are ignored.

    Returns:
        ``(cx, cy, radius)``.

    Raises:
        ValueError: If ``points`` is empty.
    """
    pts = list(dict.fromkeys((float(x), float(y)) for x, y in points))
    if not pts:
        msg = "Cannot compute an enclosing circle of an empty point set"
        raise ValueError(msg)

    random.Random(_SHUFFLE_SEED).shuffle(pts)

    circle: Circle = (pts[0][0], pts[0][1], 0.0)
    for i, p in enumerate(pts):
        if _contains(circle, p):
            continue
        circle = (p[0], p[1], 0.0)
        for j in range(i):
            q = pts[j]
            if _contains(circle, q):
                continue
            circle = _circle_from_two(p, q)
            for k in range(j):
                r = pts[k]
                if not _contains(circle, r):
                    circle = _circle_from_three(p, q, r)
    return circle


def _contains(circle: Circle, point: Point) -> bool:
    cx, cy, radius = circle
    slack = _CONTAINMENT_EPS * max(1.0, radius, abs(cx), abs(cy))
    return math.hypot(point[0] - cx, point[1] - cy) <= radius + slack


def _circle_from_two(a: Point, b: Point) -> Circle:
    cx = (a[0] + b[0]) / 2
    cy = (a[1] + b[1]) / 2
    return (cx, cy, math.hypot(a[0] - cx, a[1] - cy))


def _circle_from_three(a: Point, b: Point, c: Point) -> Circle:
    """Circumcircle of three points, or the widest pair circle if collinear."""
    # Translate to ``a`` to keep the determinant well conditioned
    bx, by = b[0] - a[0], b[1] - a[1]
    cx, cy = c[0] - a[0], c[1] - a[1]
    d = 2 * (bx * cy - by * cx)
    scale = max(abs(bx), abs(by), abs(cx), abs(cy), 1.0)
    if abs(d) <= _COLLINEAR_EPS * scale * scale:
        candidates = [_circle_from_two(a, b), _circle_from_two(a, c), _circle_from_two(b, c)]
        return max(candidates, key=lambda circle: circle[2])

    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy
    ux = (cy * b2 - by * c2) / d
    uy = (bx * c2 - cx * b2) / d
    return (ux + a[0], uy + a[1], math.hypot(ux, uy))
