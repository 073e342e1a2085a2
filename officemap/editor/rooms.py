"""Room selection, move and resize.

Interaction state is an explicit tagged union (``Idle | Moving | Resizing``);
the engine applies drags directly to the :class:`Room` objects of the active
floor.  Rooms may overlap; there is no snapping and no undo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from shapely.geometry import Point as ShapelyPoint

from officemap.config import EditorConfig
from officemap.floorplan.geometry import point_in_rect, room_polygon
from officemap.floorplan.model import Point, Room

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Moving:
    room_id: str
    offset: Point  # pointer position relative to the room origin


@dataclass(frozen=True)
class Resizing:
    room_id: str


InteractionState = Union[Idle, Moving, Resizing]


@dataclass(frozen=True)
class RoomHit:
    room: Room
    on_resize_handle: bool = False


def find_room(rooms: Sequence[Room], room_id: Optional[str]) -> Optional[Room]:
    if room_id is None:
        return None
    return next((r for r in rooms if r.id == room_id), None)


class RoomInteractionEngine:
    """Single-selection room editor for the active floor."""

    def __init__(self, config: Optional[EditorConfig] = None, editable: bool = True) -> None:
        self.config = config or EditorConfig()
        self.editable = editable
        self.state: InteractionState = Idle()
        self.selected_room_id: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return not isinstance(self.state, Idle)

    # ------------------------------------------------------------------ #
    # Hit testing
    # ------------------------------------------------------------------ #

    def hit_test(self, rooms: Sequence[Room], point: Point) -> Optional[RoomHit]:
        """Return the topmost room under *point* (last drawn wins)."""
        handle = self.config.resize_handle_size
        for room in reversed(rooms):
            if self.editable and not room.shape and point_in_rect(
                point, room.x2 - handle, room.y2 - handle, handle, handle
            ):
                return RoomHit(room, on_resize_handle=True)
            if room.shape:
                if room_polygon(room).intersects(ShapelyPoint(point)):
                    return RoomHit(room)
            elif point_in_rect(point, room.x, room.y, room.width, room.height):
                return RoomHit(room)
        return None

    # ------------------------------------------------------------------ #
    # Move / resize
    # ------------------------------------------------------------------ #

    def select(self, room_id: Optional[str]) -> None:
        self.selected_room_id = room_id

    def start_move(self, room: Room, pointer: Point) -> bool:
        if not self.editable:
            return False
        self.selected_room_id = room.id
        self.state = Moving(room.id, (pointer[0] - room.x, pointer[1] - room.y))
        return True

    def start_resize(self, room: Room) -> bool:
        if not self.editable:
            return False
        self.state = Resizing(room.id)
        return True

    def drag(self, rooms: Sequence[Room], pointer: Point) -> bool:
        """Apply the current drag to the affected room; return True if one changed."""
        state = self.state
        if isinstance(state, Moving):
            room = find_room(rooms, state.room_id)
            if room is None:
                return False
            room.x = pointer[0] - state.offset[0]
            room.y = pointer[1] - state.offset[1]
            return True
        if isinstance(state, Resizing):
            room = find_room(rooms, state.room_id)
            if room is None:
                return False
            floor = self.config.min_room_size
            room.width = max(floor, pointer[0] - room.x)
            room.height = max(floor, pointer[1] - room.y)
            return True
        return False

    def release(self) -> bool:
        """Commit the current drag; return True if one was in progress."""
        was_busy = self.is_busy
        self.state = Idle()
        return was_busy

    # ------------------------------------------------------------------ #
    # Rename / delete
    # ------------------------------------------------------------------ #

    def rename(self, rooms: Sequence[Room], room_id: str, name: str) -> bool:
        room = find_room(rooms, room_id)
        if room is None:
            return False
        room.name = name
        return True

    def delete(self, rooms: list[Room], room_id: str) -> bool:
        room = find_room(rooms, room_id)
        if room is None:
            return False
        rooms.remove(room)
        if self.selected_room_id == room_id:
            self.selected_room_id = None
        if getattr(self.state, "room_id", None) == room_id:
            self.state = Idle()
        logger.debug("Deleted room %s", room_id)
        return True
