"""2-D geometry utilities for the floor-plan editor.

Point math, id generation, the screen↔canvas transform and the Shapely
helpers used to reason about rooms inside a floor boundary.
"""

from __future__ import annotations

import random
import string
import time
from typing import Iterable, Optional, Sequence

from shapely import affinity
from shapely.geometry import MultiPoint, Polygon, box

from officemap.floorplan.model import Boundary, Point, Room

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def gen_id(prefix: str = "") -> str:
    """Return an opaque id: prefix + base-36 millisecond clock + 6 random chars."""
    stamp = _to_base36(int(time.time() * 1000))
    tail = "".join(random.choices(_BASE36, k=6))
    return f"{prefix}{stamp}{tail}"


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# --------------------------------------------------------------------------- #
# Coordinate transform
# --------------------------------------------------------------------------- #


def screen_to_canvas(screen: Point, offset: Point, zoom: float) -> Point:
    """Map a point relative to the canvas element into canvas coordinates.

    Every handler that needs canvas coordinates from a pointer event goes
    through this function.
    """
    return ((screen[0] - offset[0]) / zoom, (screen[1] - offset[1]) / zoom)


def canvas_to_screen(canvas: Point, offset: Point, zoom: float) -> Point:
    """Inverse of :func:`screen_to_canvas`."""
    return (canvas[0] * zoom + offset[0], canvas[1] * zoom + offset[1])


# --------------------------------------------------------------------------- #
# Shapes
# --------------------------------------------------------------------------- #


def bounding_box(points: Iterable[Point]) -> tuple[float, float, float, float]:
    """Return ``(min_x, min_y, max_x, max_y)`` of a point set."""
    pts = list(points)
    if not pts:
        raise ValueError("Cannot compute the bounding box of an empty point set.")
    return MultiPoint(pts).bounds


def room_polygon(room: Room) -> Polygon:
    """Return the room footprint in canvas coordinates.

    Shaped rooms keep their polygon in local coordinates; it is drawn
    translated by the room origin, so the footprint is translated the same way.
    """
    if room.shape and len(room.shape) >= 3:
        return affinity.translate(Polygon(room.shape), xoff=room.x, yoff=room.y)
    return box(room.x, room.y, room.x2, room.y2)


def boundary_polygon(boundary: Boundary) -> Optional[Polygon]:
    """Return the Shapely polygon of a usable boundary, or None."""
    if not boundary.is_usable:
        return None
    return Polygon(boundary.points)


def point_in_rect(point: Point, x: float, y: float, width: float, height: float) -> bool:
    return x <= point[0] <= x + width and y <= point[1] <= y + height


def check_overlaps(rooms: Sequence[Room], tol: float = 0.01) -> list[str]:
    """Return a list of overlap descriptions (empty = no overlaps)."""
    issues: list[str] = []
    polys = [(r, room_polygon(r)) for r in rooms]
    for i in range(len(polys)):
        for j in range(i + 1, len(polys)):
            (a, pa), (b, pb) = polys[i], polys[j]
            inter = pa.intersection(pb)
            if inter.area > tol:
                issues.append(
                    f"Overlap between '{a.name or a.id}' and '{b.name or b.id}': area={inter.area:.1f}"
                )
    return issues


def rooms_outside_boundary(
    rooms: Sequence[Room],
    boundary: Boundary,
    tol: float = 0.5,
) -> list[Room]:
    """Return rooms whose footprint is not contained in the boundary polygon."""
    outline = boundary_polygon(boundary)
    if outline is None:
        return list(rooms)
    envelope = outline.buffer(tol)
    return [r for r in rooms if not envelope.contains(room_polygon(r))]
