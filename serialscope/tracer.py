"""Choosing the data point nearest to the mouse."""

from __future__ import annotations

import bisect
import math
from collections.abc import Callable, Sequence

from serialscope.plotcore import Range


def _candidate_indices(keys: Sequence[float], key_range: Range | None) -> range:
    if key_range is None:
        return range(len(keys))
    begin = bisect.bisect_left(keys, key_range.lower)
    if begin > 0:
        begin -= 1
    end = bisect.bisect_right(keys, key_range.upper)
    if end < len(keys):
        end += 1
    return range(begin, end)


def nearest_point_index(
    points: Sequence[tuple[float, float]],
    point: tuple[float, float],
    x_to_pixel: Callable[[float], float],
    y_to_pixel: Callable[[float], float],
    key_range: Range | None = None,
) -> int | None:
    """Index of the point nearest to ``point`` measured in pixels on both axes.

    With ``key_range`` the points must be sorted by key and only those inside
    the range, plus one neighbour on each side, are searched. Without it every
    point is searched, as for an XY curve. Returns ``None`` for no points and
    0 when no point lies in the searched part.
    """
    if len(points) == 0:
        return None
    keys = [key for key, _ in points]
    px, py = point
    nearest = 0
    nearest_dist = math.inf
    for index in _candidate_indices(keys, key_range):
        key, value = points[index]
        dx = x_to_pixel(key) - px
        dy = y_to_pixel(value) - py
        dist = dx * dx + dy * dy
        if dist < nearest_dist:
            nearest_dist = dist
            nearest = index
    return nearest