"""Viewport controller: zoom-to-cursor, discrete zoom and pan dragging."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from officemap.config import EditorConfig
from officemap.floorplan.geometry import clamp, screen_to_canvas
from officemap.floorplan.model import Point, ViewportState

PRIMARY_BUTTON = 0
SECONDARY_BUTTON = 2


@dataclass
class _PanDrag:
    last: Point


class ViewportController:
    """Owns the :class:`ViewportState` of one editor session.

    The pan drag (last pointer position) is transient and never part of the
    persisted state.
    """

    def __init__(
        self,
        state: Optional[ViewportState] = None,
        config: Optional[EditorConfig] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.state = state or ViewportState()
        self._pan: Optional[_PanDrag] = None

    @property
    def zoom(self) -> float:
        return self.state.zoom

    @property
    def offset(self) -> Point:
        return self.state.offset

    @property
    def is_panning(self) -> bool:
        return self._pan is not None

    def to_canvas(self, screen: Point) -> Point:
        return screen_to_canvas(screen, self.state.offset, self.state.zoom)

    def _clamp_zoom(self, zoom: float) -> float:
        return clamp(zoom, self.config.min_zoom, self.config.max_zoom)

    # ------------------------------------------------------------------ #
    # Zoom
    # ------------------------------------------------------------------ #

    def wheel(self, delta_y: float, cursor: Point) -> None:
        """Zoom by a wheel step keeping the canvas point under *cursor* fixed.

        *cursor* is relative to the canvas element origin.
        """
        factor = math.exp(-delta_y / self.config.wheel_sensitivity)
        new_zoom = self._clamp_zoom(self.state.zoom * factor)
        before = self.to_canvas(cursor)
        self.state.offset = (
            cursor[0] - before[0] * new_zoom,
            cursor[1] - before[1] * new_zoom,
        )
        self.state.zoom = new_zoom

    def zoom_in(self) -> None:
        self.state.zoom = self._clamp_zoom(self.state.zoom * self.config.zoom_step)

    def zoom_out(self) -> None:
        self.state.zoom = self._clamp_zoom(self.state.zoom / self.config.zoom_step)

    def reset(self) -> None:
        self.state.zoom = 1.0
        self.state.offset = (0.0, 0.0)

    # ------------------------------------------------------------------ #
    # Pan
    # ------------------------------------------------------------------ #

    @staticmethod
    def is_pan_gesture(button: int, modifier: bool) -> bool:
        return button == SECONDARY_BUTTON or (button == PRIMARY_BUTTON and modifier)

    def start_pan(self, pos: Point, button: int, modifier: bool = False) -> bool:
        """Begin panning if the gesture asks for it; return whether it did."""
        if not self.is_pan_gesture(button, modifier):
            return False
        self._pan = _PanDrag(last=pos)
        return True

    def pan_move(self, pos: Point) -> None:
        if self._pan is None:
            return
        dx = pos[0] - self._pan.last[0]
        dy = pos[1] - self._pan.last[1]
        self._pan.last = pos
        ox, oy = self.state.offset
        self.state.offset = (ox + dx, oy + dy)

    def end_pan(self) -> None:
        self._pan = None
