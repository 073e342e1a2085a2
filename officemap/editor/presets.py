"""Preset catalog and drag-and-drop room instantiation."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional, Sequence

from officemap.config import EditorConfig
from officemap.errors import BoundaryNotClosedError, PresetError
from officemap.floorplan.geometry import bounding_box, gen_id
from officemap.floorplan.model import Boundary, Point, Preset, PresetKind, Room

logger = logging.getLogger(__name__)

# Fallback outline for polygon presets that carry no points.
_DEFAULT_POLY: tuple[Point, ...] = ((0.0, 0.0), (40.0, 0.0), (40.0, 40.0), (0.0, 40.0))


def default_presets() -> list[Preset]:
    return [
        Preset(gen_id("p_"), "Square", PresetKind.RECT, width=80.0, height=80.0),
        Preset(gen_id("p_"), "Rectangle", PresetKind.RECT, width=140.0, height=80.0),
    ]


class PresetCatalog:
    """Ordered preset list of one editor session (defaults + user presets)."""

    def __init__(self, presets: Optional[Sequence[Preset]] = None) -> None:
        self._presets: list[Preset] = list(presets) if presets is not None else default_presets()

    def __iter__(self) -> Iterator[Preset]:
        return iter(self._presets)

    def __len__(self) -> int:
        return len(self._presets)

    def get(self, preset_id: str) -> Preset:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        raise KeyError(preset_id)

    def add(self, preset: Preset) -> Preset:
        self._presets.append(preset)
        return preset

    def add_custom(self, points: Sequence[Point], name: Optional[str] = None) -> Preset:
        """Append a polygon preset drawn by the user."""
        if len(points) < 3:
            raise PresetError("Draw a polygon with at least 3 points.")
        preset = Preset(
            id=gen_id("p_"),
            name=name or f"Custom {len(self._presets) + 1}",
            kind=PresetKind.POLY,
            points=tuple((float(x), float(y)) for x, y in points),
        )
        logger.info("Added custom preset %s with %d points", preset.name, len(points))
        return self.add(preset)


def create_room_from_preset(
    preset: Preset,
    x: float,
    y: float,
    id_factory: Callable[[str], str] = gen_id,
    config: Optional[EditorConfig] = None,
) -> Room:
    """Instantiate *preset* centred at canvas point ``(x, y)``."""
    config = config or EditorConfig()
    room_id = id_factory("r_")

    if preset.kind is PresetKind.RECT:
        width = preset.width or config.default_preset_size
        height = preset.height or config.default_preset_size
        return Room(room_id, preset.name, x - width / 2, y - height / 2, width, height)

    poly = list(preset.points or _DEFAULT_POLY)
    min_x, min_y, max_x, max_y = bounding_box(poly)
    width = (max_x - min_x) or config.default_poly_extent
    height = (max_y - min_y) or config.default_poly_extent
    return Room(
        room_id,
        preset.name,
        x - width / 2,
        y - height / 2,
        width,
        height,
        shape=poly,
    )


class PresetDragEngine:
    """Tracks a preset being dragged from the palette onto the canvas."""

    def __init__(self, config: Optional[EditorConfig] = None) -> None:
        self.config = config or EditorConfig()
        self.preset: Optional[Preset] = None
        self.ghost_pos: Optional[Point] = None  # screen position of the floating ghost

    @property
    def is_dragging(self) -> bool:
        return self.preset is not None

    def start(self, preset: Preset, screen_pos: Point) -> None:
        self.preset = preset
        self.ghost_pos = screen_pos

    def move(self, screen_pos: Point) -> None:
        if self.preset is not None:
            self.ghost_pos = screen_pos

    def cancel(self) -> None:
        self.preset = None
        self.ghost_pos = None

    def drop(
        self,
        canvas_pos: Point,
        boundary: Boundary,
        rooms: list[Room],
    ) -> Optional[Room]:
        """Finish the drag at *canvas_pos* and append the new room to *rooms*.

        Returns None when nothing was being dragged.

        Raises
        ------
        BoundaryNotClosedError
            If the floor outline is not closed; no room is created.
        """
        preset = self.preset
        self.cancel()
        if preset is None:
            return None
        if not boundary.is_usable:
            raise BoundaryNotClosedError(
                "Draw and close the floor boundary before adding rooms."
            )
        room = create_room_from_preset(preset, canvas_pos[0], canvas_pos[1], config=self.config)
        rooms.append(room)
        logger.debug("Dropped preset %s as room %s at (%.1f, %.1f)", preset.name, room.id, room.x, room.y)
        return room
