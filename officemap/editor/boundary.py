"""Boundary drawing state machine.

The outline of a floor is captured point by point while ``DRAWING`` and
frozen once ``CLOSED``.  Transitions are pure functions over an immutable
:class:`BoundaryState`; :class:`BoundaryDrawingFSM` holds the current state
and the read-only gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from officemap.floorplan.model import Boundary, Point

logger = logging.getLogger(__name__)

MIN_BOUNDARY_POINTS = 3


class BoundaryPhase(str, Enum):
    IDLE = "idle"          # read-only, outline not closed
    DRAWING = "drawing"
    CLOSED = "closed"


@dataclass(frozen=True)
class BoundaryState:
    phase: BoundaryPhase = BoundaryPhase.DRAWING
    points: tuple[Point, ...] = ()

    @property
    def closed(self) -> bool:
        return self.phase is BoundaryPhase.CLOSED


# --------------------------------------------------------------------------- #
# Pure transitions
# --------------------------------------------------------------------------- #


def add_point(state: BoundaryState, point: Point) -> BoundaryState:
    if state.phase is not BoundaryPhase.DRAWING:
        return state
    return replace(state, points=state.points + (point,))


def close(state: BoundaryState) -> BoundaryState:
    """Close the outline; fewer than 3 points leaves the state unchanged."""
    if state.phase is not BoundaryPhase.DRAWING or len(state.points) < MIN_BOUNDARY_POINTS:
        return state
    return replace(state, phase=BoundaryPhase.CLOSED)


def reset(state: BoundaryState) -> BoundaryState:
    return BoundaryState(phase=BoundaryPhase.DRAWING, points=())


def state_from_boundary(boundary: Boundary | None, editable: bool = True) -> BoundaryState:
    if boundary is not None and boundary.is_usable:
        return BoundaryState(BoundaryPhase.CLOSED, tuple(boundary.points))
    points = tuple(boundary.points) if boundary is not None else ()
    phase = BoundaryPhase.DRAWING if editable else BoundaryPhase.IDLE
    return BoundaryState(phase, points)


def state_to_boundary(state: BoundaryState) -> Boundary:
    return Boundary(points=list(state.points), closed=state.closed)


# --------------------------------------------------------------------------- #
# Stateful wrapper
# --------------------------------------------------------------------------- #


class BoundaryDrawingFSM:
    """Holds the live boundary of the active floor.

    Each mutator returns True when the state actually changed so the caller
    can snapshot the outline or schedule a cache write.
    """

    def __init__(self, state: BoundaryState | None = None, editable: bool = True) -> None:
        self.editable = editable
        self.state = state or BoundaryState(
            BoundaryPhase.DRAWING if editable else BoundaryPhase.IDLE
        )

    @property
    def phase(self) -> BoundaryPhase:
        return self.state.phase

    @property
    def points(self) -> list[Point]:
        return list(self.state.points)

    @property
    def closed(self) -> bool:
        return self.state.closed

    @property
    def is_drawing(self) -> bool:
        return self.state.phase is BoundaryPhase.DRAWING

    def boundary(self) -> Boundary:
        return state_to_boundary(self.state)

    def load(self, boundary: Boundary | None) -> None:
        self.state = state_from_boundary(boundary, self.editable)

    def _apply(self, new: BoundaryState) -> bool:
        if not self.editable or new == self.state:
            return False
        logger.debug("Boundary %s -> %s (%d points)", self.state.phase.value, new.phase.value, len(new.points))
        self.state = new
        return True

    def add_point(self, point: Point) -> bool:
        return self._apply(add_point(self.state, point))

    def close(self) -> bool:
        return self._apply(close(self.state))

    def reset(self) -> bool:
        return self._apply(reset(self.state))
