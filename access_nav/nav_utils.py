"""Index wrapping and the small geometry helpers shared by the navigators."""

from __future__ import annotations

import math
from typing import Tuple

EMPTY_INDEX = -1

Position = Tuple[float, float]

_COMPASS = (
    "east", "northeast", "north", "northwest",
    "west", "southwest", "south", "southeast",
)


def wrap_index(index: int, count: int) -> int:
    """Wrap ``index`` into ``[0, count)``; ``EMPTY_INDEX`` when ``count`` is 0."""
    if count <= 0:
        return EMPTY_INDEX
    return index % count


def step_index(current: int, delta: int, count: int) -> int:
    """Move ``current`` by ``delta`` with wrap-around.

    An empty selection (``-1``) steps onto the first item going forward and
    the last item going backward.
    """
    if count <= 0:
        return EMPTY_INDEX
    if current < 0:
        return 0 if delta >= 0 else count - 1
    return wrap_index(current + delta, count)


def clamp_index(index: int, count: int) -> int:
    """Clamp a remembered index after the level it points into was rebuilt."""
    if count <= 0:
        return EMPTY_INDEX
    return min(max(index, 0), count - 1)


def euclidean_distance(a: Position, b: Position) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def compass_direction(dx: float, dy: float) -> str:
    """Bucket the vector ``(dx, dy)`` into one of eight compass points.

    Positive ``y`` points north. Each bucket spans 45 degrees centred on its
    compass point; the zero vector has no direction and yields ``""``.
    """
    if dx == 0 and dy == 0:
        return ""
    angle = math.degrees(math.atan2(dy, dx)) % 360.0
    return _COMPASS[int((angle + 22.5) // 45) % 8]
