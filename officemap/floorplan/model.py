"""Floor-plan data model.

Room          – placed room on one floor (optionally polygon-shaped)
Preset        – immutable template used to stamp new rooms
Boundary      – outline polygon of one floor
ViewportState – zoom / pan of the editor canvas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

Point = tuple[float, float]


def _as_points(raw: Any) -> list[Point]:
    """Coerce ``[[x, y], ...]`` JSON data to a list of float tuples."""
    return [(float(p[0]), float(p[1])) for p in raw or []]


# --------------------------------------------------------------------------- #
# Enumerations
# --------------------------------------------------------------------------- #


class PresetKind(str, Enum):
    RECT = "rect"
    POLY = "poly"

    @classmethod
    def from_str(cls, value: str) -> "PresetKind":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown preset kind: {value!r}")


class EditorMode(str, Enum):
    EDIT = "edit"
    VIEW = "view"


# --------------------------------------------------------------------------- #
# Room
# --------------------------------------------------------------------------- #


@dataclass
class Room:
    """Axis-aligned room placement in canvas coordinates."""

    id: str
    name: str
    x: float          # left edge
    y: float          # top edge
    width: float
    height: float
    shape: Optional[list[Point]] = None  # polygon in its own local coordinates

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
        if self.shape is not None:
            data["shape"] = [[px, py] for px, py in self.shape]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Room":
        shape = data.get("shape")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            shape=_as_points(shape) if shape is not None else None,
        )


# --------------------------------------------------------------------------- #
# Preset
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class Preset:
    """Reusable room template (rectangle or polygon)."""

    id: str
    name: str
    kind: PresetKind = PresetKind.RECT
    width: Optional[float] = None
    height: Optional[float] = None
    points: Optional[tuple[Point, ...]] = None  # relative polygon for POLY presets

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "type": self.kind.value}
        if self.width is not None:
            data["width"] = self.width
        if self.height is not None:
            data["height"] = self.height
        if self.points is not None:
            data["poly"] = [[px, py] for px, py in self.points]
        return data


# --------------------------------------------------------------------------- #
# Boundary
# --------------------------------------------------------------------------- #


@dataclass
class Boundary:
    """Outline polygon of one floor.  ``closed`` implies at least 3 points."""

    points: list[Point] = field(default_factory=list)
    closed: bool = False

    def __post_init__(self) -> None:
        if self.closed and len(self.points) < 3:
            raise ValueError(
                f"A closed boundary needs at least 3 points, got {len(self.points)}."
            )

    @property
    def is_usable(self) -> bool:
        """True when rooms may be placed inside this boundary."""
        return self.closed and len(self.points) >= 3

    def to_dict(self) -> dict:
        return {"points": [[px, py] for px, py in self.points], "closed": self.closed}

    @classmethod
    def from_dict(cls, data: dict) -> "Boundary":
        points = _as_points(data.get("points"))
        # Tolerate documents that claim closure on a degenerate outline.
        closed = bool(data.get("closed")) and len(points) >= 3
        return cls(points=points, closed=closed)


# --------------------------------------------------------------------------- #
# Viewport
# --------------------------------------------------------------------------- #


@dataclass
class ViewportState:
    """Canvas transform: ``screen = canvas * zoom + offset``."""

    zoom: float = 1.0
    offset: Point = (0.0, 0.0)

    def to_dict(self) -> dict:
        return {"zoom": self.zoom, "offset": [self.offset[0], self.offset[1]]}
