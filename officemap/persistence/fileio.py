"""JSON export / import of a floor plan.

File layout::

    {"floors": {"<floorName>": [Room, ...]},
     "boundary": {"points": [[x, y], ...], "closed": bool},
     "floorBoundaries": {"<floorName>": Boundary}}

``boundary`` is the active floor's outline.  ``floorBoundaries`` is optional
and, when present, carries the closed outline of every floor.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from officemap.errors import ImportFormatError
from officemap.floorplan.model import Boundary, Room

logger = logging.getLogger(__name__)


@dataclass
class PlanDocument:
    floors: dict[str, list[Room]] = field(default_factory=dict)
    boundary: Optional[Boundary] = None
    floor_boundaries: Optional[dict[str, Boundary]] = None

    def to_dict(self) -> dict:
        data: dict = {
            "floors": {name: [r.to_dict() for r in rooms] for name, rooms in self.floors.items()},
        }
        boundary = self.boundary or Boundary()
        data["boundary"] = boundary.to_dict()
        if self.floor_boundaries is not None:
            data["floorBoundaries"] = {name: b.to_dict() for name, b in self.floor_boundaries.items()}
        return data


def dumps_plan(doc: PlanDocument) -> str:
    return json.dumps(doc.to_dict(), indent=2, ensure_ascii=False)


def parse_plan(text: str) -> PlanDocument:
    """Parse an exported plan.

    Raises
    ------
    ImportFormatError
        If the text is not valid JSON or does not have the plan layout.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ImportFormatError("Plan document must be a JSON object.")

    raw_floors = data.get("floors") or {}
    if not isinstance(raw_floors, dict):
        raise ImportFormatError("'floors' must map floor names to room lists.")
    raw_floor_boundaries = data.get("floorBoundaries")
    if raw_floor_boundaries is not None and not isinstance(raw_floor_boundaries, dict):
        raise ImportFormatError("'floorBoundaries' must map floor names to boundaries.")
    try:
        floors = {
            str(name): [Room.from_dict(r) for r in rooms or []]
            for name, rooms in raw_floors.items()
        }
        raw_boundary = data.get("boundary")
        boundary = Boundary.from_dict(raw_boundary) if raw_boundary else None
        floor_boundaries = None
        if raw_floor_boundaries is not None:
            floor_boundaries = {
                str(name): Boundary.from_dict(b) for name, b in raw_floor_boundaries.items()
            }
    except (AttributeError, KeyError, TypeError, ValueError, IndexError) as exc:
        raise ImportFormatError(f"Malformed plan data: {exc}") from exc

    return PlanDocument(floors=floors, boundary=boundary, floor_boundaries=floor_boundaries)


def save_plan(doc: PlanDocument, path: Path) -> None:
    path.write_text(dumps_plan(doc), encoding="utf-8")
    logger.debug("Saved plan JSON → %s", path)


def load_plan(path: Path) -> PlanDocument:
    return parse_plan(Path(path).read_text(encoding="utf-8"))
