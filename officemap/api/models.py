"""Wire shapes of the booking/admin REST API that the editor depends on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from officemap.floorplan.model import Point


def _xy_list(raw: Any) -> list[Point]:
    return [(float(p["x"]), float(p["y"])) for p in raw or []]


@dataclass
class SpaceType:
    id: int
    type: str

    @classmethod
    def from_dict(cls, data: dict) -> "SpaceType":
        return cls(id=int(data["id"]), type=str(data.get("type", "")))


@dataclass
class RemoteSpace:
    """One bookable space as returned by the per-floor query."""

    id: int
    space_type_id: Optional[int]
    space_type: str
    capacity: int
    floor_number: Optional[int]
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteSpace":
        bounds = data.get("bounds") or {}
        floor = data.get("floor")
        floor_number = floor.get("floorNumber") if isinstance(floor, dict) else floor
        type_id = data.get("spaceTypeId")
        return cls(
            id=int(data["id"]),
            space_type_id=int(type_id) if type_id is not None else None,
            space_type=str(data.get("spaceType") or ""),
            capacity=int(data.get("capacity") or 1),
            floor_number=int(floor_number) if floor_number is not None else None,
            x=float(bounds.get("x", 0.0)),
            y=float(bounds.get("y", 0.0)),
            width=float(bounds.get("width", 0.0)),
            height=float(bounds.get("height", 0.0)),
        )


@dataclass
class FloorSpaces:
    """Response of ``GET /api/locations/{id}/spaces?floorNumber=n``."""

    floor_number: int
    polygon: list[Point] = field(default_factory=list)
    spaces: list[RemoteSpace] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.polygon and not self.spaces

    @classmethod
    def from_dict(cls, floor_number: int, data: Optional[dict]) -> "FloorSpaces":
        data = data or {}
        floor = data.get("floor") or {}
        return cls(
            floor_number=int(floor.get("floorNumber") or floor_number),
            polygon=_xy_list(floor.get("polygon")),
            spaces=[RemoteSpace.from_dict(s) for s in data.get("spaces") or []],
        )


@dataclass
class SpacePayload:
    space_type_id: int
    capacity: int
    location_id: int
    floor_number: int
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> dict:
        return {
            "spaceTypeId": self.space_type_id,
            "capacity": self.capacity,
            "locationId": self.location_id,
            "floorNumber": self.floor_number,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class FloorSpacesPayload:
    """Body of the create-floor-spaces request."""

    location_id: int
    floor_number: int
    polygon: list[Point]
    spaces: list[SpacePayload]

    def to_dict(self) -> dict:
        return {
            "locationId": self.location_id,
            "floorNumber": self.floor_number,
            "polygon": [{"x": x, "y": y} for x, y in self.polygon],
            "spaces": [s.to_dict() for s in self.spaces],
        }
