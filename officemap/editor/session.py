"""EditorSession – the state of one mounted floor-plan editor.

The session owns every piece of mutable editor state (floors, boundaries,
viewport, interaction engines, preset catalog, room assignments) and
translates host pointer / wheel / keyboard events into engine calls.  A
session is created when the editor mounts and closed when it unmounts;
nothing is shared between sessions.

Pointer surface
---------------
* left click          – boundary point / select room / start move
* left+shift or right – pan
* wheel               – zoom to cursor
* double click        – close boundary
* drag resize handle  – resize room
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from officemap.config import Config
from officemap.editor.boundary import BoundaryDrawingFSM, state_from_boundary
from officemap.editor.notices import NoticeSink
from officemap.editor.presets import PresetCatalog, PresetDragEngine
from officemap.editor.rooms import RoomInteractionEngine, find_room
from officemap.editor.viewport import PRIMARY_BUTTON, ViewportController
from officemap.errors import BoundaryNotClosedError, FloorExistsError, ImportFormatError
from officemap.floorplan.geometry import clamp
from officemap.floorplan.model import Boundary, EditorMode, Point, Preset, Room, ViewportState
from officemap.persistence.fileio import PlanDocument, parse_plan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointerEvent:
    """Pointer event with coordinates relative to the canvas element origin."""

    x: float
    y: float
    button: int = PRIMARY_BUTTON
    shift: bool = False

    @property
    def pos(self) -> Point:
        return (self.x, self.y)


@dataclass(frozen=True)
class WheelEvent:
    x: float
    y: float
    delta_y: float

    @property
    def pos(self) -> Point:
        return (self.x, self.y)


class EditorSession:
    """Headless model of the floor-plan editor."""

    def __init__(
        self,
        config: Optional[Config] = None,
        mode: EditorMode = EditorMode.EDIT,
        notices: Optional[NoticeSink] = None,
        presets: Optional[PresetCatalog] = None,
    ) -> None:
        self.config = config or Config.default()
        self.mode = mode
        self.notices = notices or NoticeSink()
        self.presets = presets or PresetCatalog()

        editable = mode is EditorMode.EDIT
        self.viewport = ViewportController(config=self.config.editor)
        self.boundary_fsm = BoundaryDrawingFSM(editable=editable)
        self.room_engine = RoomInteractionEngine(self.config.editor, editable=editable)
        self.preset_drag = PresetDragEngine(self.config.editor)

        default_floor = self.config.persistence.default_floor_name
        self.floors: dict[str, list[Room]] = {default_floor: []}
        self.boundaries: dict[str, Boundary] = {}
        self.current_floor: str = default_floor
        self.room_space_types: dict[str, int] = {}
        self.room_capacities: dict[str, int] = {}

        self._listeners: list[Callable[[], None]] = []
        self.closed = False

    # ------------------------------------------------------------------ #
    # Lifecycle / change notification
    # ------------------------------------------------------------------ #

    @property
    def editable(self) -> bool:
        return self.mode is EditorMode.EDIT

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register *callback* to run after every persisted-state mutation."""
        self._listeners.append(callback)

    def _changed(self) -> None:
        if self.closed or not self.editable:
            return
        for callback in list(self._listeners):
            callback()

    def close(self) -> None:
        self.closed = True
        self._listeners.clear()
        self.viewport.end_pan()
        self.preset_drag.cancel()
        self.room_engine.release()

    # ------------------------------------------------------------------ #
    # Active floor
    # ------------------------------------------------------------------ #

    @property
    def rooms(self) -> list[Room]:
        return self.floors.setdefault(self.current_floor, [])

    @property
    def boundary(self) -> Boundary:
        """Live boundary of the active floor."""
        return self.boundary_fsm.boundary()

    @property
    def selected_room(self) -> Optional[Room]:
        return find_room(self.rooms, self.room_engine.selected_room_id)

    def to_canvas(self, screen: Point) -> Point:
        return self.viewport.to_canvas(screen)

    # ------------------------------------------------------------------ #
    # Pointer surface
    # ------------------------------------------------------------------ #

    def pointer_down(self, event: PointerEvent) -> None:
        if self.viewport.start_pan(event.pos, event.button, event.shift):
            return
        if event.button != PRIMARY_BUTTON or self.preset_drag.is_dragging:
            return

        canvas = self.to_canvas(event.pos)
        hit = self.room_engine.hit_test(self.rooms, canvas)
        if hit is not None:
            if hit.on_resize_handle:
                self.room_engine.start_resize(hit.room)
            elif not self.room_engine.start_move(hit.room, canvas):
                self.room_engine.select(hit.room.id)
            return

        if self.boundary_fsm.add_point(canvas):
            self._changed()

    def pointer_move(self, event: PointerEvent) -> None:
        self.viewport.pan_move(event.pos)
        self.preset_drag.move(event.pos)
        if self.room_engine.drag(self.rooms, self.to_canvas(event.pos)):
            self._changed()

    def pointer_up(self, event: PointerEvent) -> None:
        self.viewport.end_pan()
        if self.preset_drag.is_dragging:
            self.drop_preset(event.pos)
        self.room_engine.release()

    def wheel(self, event: WheelEvent) -> None:
        self.viewport.wheel(event.delta_y, event.pos)

    def double_click(self) -> None:
        self.close_boundary()

    # ------------------------------------------------------------------ #
    # Boundary
    # ------------------------------------------------------------------ #

    def close_boundary(self) -> bool:
        if not self.boundary_fsm.close():
            return False
        self.boundaries[self.current_floor] = self.boundary_fsm.boundary()
        logger.info("Closed boundary of %s with %d points", self.current_floor, len(self.boundary_fsm.points))
        self._changed()
        return True

    def reset_boundary(self) -> bool:
        if not self.boundary_fsm.reset():
            return False
        self.boundaries.pop(self.current_floor, None)
        self._changed()
        return True

    # ------------------------------------------------------------------ #
    # Presets
    # ------------------------------------------------------------------ #

    def start_preset_drag(self, preset: Preset, screen_pos: Point) -> bool:
        if not self.editable:
            return False
        self.preset_drag.start(preset, screen_pos)
        return True

    def drop_preset(self, screen_pos: Point) -> Optional[Room]:
        try:
            room = self.preset_drag.drop(self.to_canvas(screen_pos), self.boundary, self.rooms)
        except BoundaryNotClosedError as exc:
            self.notices.error(str(exc), title="Boundary not closed")
            return None
        if room is not None:
            self._changed()
        return room

    # ------------------------------------------------------------------ #
    # Rooms
    # ------------------------------------------------------------------ #

    def rename_room(self, room_id: str, name: str) -> bool:
        if not self.editable or not self.room_engine.rename(self.rooms, room_id, name):
            return False
        self._changed()
        return True

    def delete_room(self, room_id: str) -> bool:
        if not self.editable or not self.room_engine.delete(self.rooms, room_id):
            return False
        self.room_space_types.pop(room_id, None)
        self.room_capacities.pop(room_id, None)
        self._changed()
        return True

    def assign_space_type(self, room_id: str, space_type_id: int) -> bool:
        if not self.editable:
            return False
        self.room_space_types[room_id] = int(space_type_id)
        self._changed()
        return True

    def assign_capacity(self, room_id: str, capacity: int) -> bool:
        if not self.editable:
            return False
        if int(capacity) < 1:
            raise ValueError(f"Capacity must be at least 1, got {capacity}.")
        self.room_capacities[room_id] = int(capacity)
        self._changed()
        return True

    # ------------------------------------------------------------------ #
    # Floors
    # ------------------------------------------------------------------ #

    def add_floor(self, name: str) -> bool:
        if not self.editable:
            return False
        name = name.strip()
        if not name:
            raise ValueError("Floor name must not be empty.")
        if name in self.floors:
            raise FloorExistsError(f"Floor '{name}' already exists.")
        self.floors[name] = []
        self.switch_floor(name)
        return True

    def switch_floor(self, name: str) -> None:
        if name not in self.floors:
            raise KeyError(name)
        self.room_engine.release()
        self.room_engine.select(None)
        self.preset_drag.cancel()
        self.current_floor = name
        self.boundary_fsm.load(self.boundaries.get(name))
        self._changed()

    def rename_floor(self, old: str, new: str) -> bool:
        """Rename a floor in the room map and the boundary map together."""
        if not self.editable:
            return False
        if old not in self.floors:
            raise KeyError(old)
        if new in self.floors:
            raise FloorExistsError(f"Floor '{new}' already exists.")
        self.floors = {(new if k == old else k): v for k, v in self.floors.items()}
        if old in self.boundaries:
            self.boundaries[new] = self.boundaries.pop(old)
        if self.current_floor == old:
            self.current_floor = new
        self._changed()
        return True

    def delete_floor(self, name: str) -> bool:
        """Remove a floor with its boundary and room assignments."""
        if not self.editable:
            return False
        if name not in self.floors:
            raise KeyError(name)
        for room in self.floors.pop(name):
            self.room_space_types.pop(room.id, None)
            self.room_capacities.pop(room.id, None)
        self.boundaries.pop(name, None)
        if not self.floors:
            self.floors[self.config.persistence.default_floor_name] = []
        if self.current_floor == name:
            self.switch_floor(next(iter(self.floors)))
        else:
            self._changed()
        return True

    # ------------------------------------------------------------------ #
    # Export / import
    # ------------------------------------------------------------------ #

    def export_plan(self) -> PlanDocument:
        return PlanDocument(
            floors={name: list(rooms) for name, rooms in self.floors.items()},
            boundary=self.boundary,
            floor_boundaries=dict(self.boundaries),
        )

    def import_plan(self, text: str) -> bool:
        """Replace floors from an exported document.

        Per-floor outlines are taken from ``floorBoundaries`` when present,
        else the single ``boundary`` applies to the active floor.  A document
        with neither keeps the outlines of floors that still exist.  Room
        assignments for rooms absent from the document are dropped.

        A malformed document raises a blocking notice and leaves the session
        untouched.
        """
        try:
            doc = parse_plan(text)
        except ImportFormatError as exc:
            self.notices.error(f"Could not read the JSON file: {exc}", title="Import failed")
            return False

        previous_floor = self.current_floor
        self.floors = doc.floors or {self.config.persistence.default_floor_name: []}
        if self.current_floor not in self.floors:
            self.current_floor = next(iter(self.floors))
        self.room_engine.release()
        self.room_engine.select(None)

        if doc.floor_boundaries is not None:
            self.boundaries = {
                name: b for name, b in doc.floor_boundaries.items() if name in self.floors and b.is_usable
            }
        elif doc.boundary is not None:
            self.boundaries = {self.current_floor: doc.boundary} if doc.boundary.is_usable else {}
        else:
            self.boundaries = {name: b for name, b in self.boundaries.items() if name in self.floors}

        if self.current_floor in self.boundaries:
            self.boundary_fsm.load(self.boundaries[self.current_floor])
        elif doc.boundary is not None and not (doc.floor_boundaries is not None and doc.boundary.closed):
            # An outline still being drawn on the active floor.
            self.boundary_fsm.state = state_from_boundary(doc.boundary, self.editable)
        elif doc.floor_boundaries is not None or self.current_floor != previous_floor:
            self.boundary_fsm.load(None)

        room_ids = {room.id for rooms in self.floors.values() for room in rooms}
        self.room_space_types = {k: v for k, v in self.room_space_types.items() if k in room_ids}
        self.room_capacities = {k: v for k, v in self.room_capacities.items() if k in room_ids}

        logger.info("Imported plan with %d floors", len(self.floors))
        self._changed()
        return True

    # ------------------------------------------------------------------ #
    # Cache snapshot
    # ------------------------------------------------------------------ #

    def snapshot(self) -> dict[str, Any]:
        """Serialisable local-cache record of the session."""
        return {
            "floors": {name: [r.to_dict() for r in rooms] for name, rooms in self.floors.items()},
            "floorBoundaries": {name: b.to_dict() for name, b in self.boundaries.items()},
            "roomSpaceTypes": dict(self.room_space_types),
            "roomCapacities": dict(self.room_capacities),
            "currentFloor": self.current_floor,
            "viewport": self.viewport.state.to_dict(),
        }

    def restore(self, record: dict[str, Any]) -> None:
        """Apply a local-cache record produced by :meth:`snapshot`."""
        floors = {
            str(name): [Room.from_dict(r) for r in rooms or []]
            for name, rooms in (record.get("floors") or {}).items()
        }
        self.floors = floors or {self.config.persistence.default_floor_name: []}
        self.boundaries = {
            str(name): Boundary.from_dict(b)
            for name, b in (record.get("floorBoundaries") or {}).items()
        }
        self.room_space_types = {str(k): int(v) for k, v in (record.get("roomSpaceTypes") or {}).items()}
        self.room_capacities = {str(k): int(v) for k, v in (record.get("roomCapacities") or {}).items()}
        current = record.get("currentFloor")
        self.current_floor = current if current in self.floors else next(iter(self.floors))
        viewport = record.get("viewport")
        if viewport:
            ox, oy = viewport.get("offset", (0.0, 0.0))
            zoom = clamp(float(viewport.get("zoom", 1.0)), self.config.editor.min_zoom, self.config.editor.max_zoom)
            self.viewport.state = ViewportState(zoom, (float(ox), float(oy)))
        self.boundary_fsm.load(self.boundaries.get(self.current_floor))
