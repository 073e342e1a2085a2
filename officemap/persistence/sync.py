"""Reconciliation between an editor session, the local cache and the REST API.

Local cache
    Every relevant mutation in edit mode snapshots the session on the editor
    thread and re-arms a debouncer; after a quiet period the timer thread
    writes the latest snapshot under the location key.  Only that frozen
    record crosses threads.
Load
    Floors ``probe_floor_min..probe_floor_max`` are queried concurrently;
    any floor with a polygon or with spaces is accepted, failures count as
    absent.  In edit mode a cached snapshot wins over the remote data, with
    missing boundaries back-filled from the remote load; in view mode the
    remote data always wins.  A load superseded by a location switch, a newer
    load or session close is discarded.
Save
    Floors with rooms are submitted one by one.  A floor with rooms but no
    closed outline aborts the save before anything is sent; a failed request
    stops the remaining floors.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Optional

from officemap.api.client import BookingApiClient
from officemap.api.models import FloorSpaces, FloorSpacesPayload, RemoteSpace, SpacePayload, SpaceType
from officemap.config import PersistenceConfig
from officemap.editor.session import EditorSession
from officemap.errors import ApiError, SaveError
from officemap.floorplan.model import Boundary, Point, Room
from officemap.persistence.cache import Debouncer, KeyValueStore, cache_key

logger = logging.getLogger(__name__)

_FLOOR_NUMBER_RE = re.compile(r"\d+")


def floor_number_from_name(name: str) -> int:
    """Return the first integer embedded in a floor name (default 1)."""
    match = _FLOOR_NUMBER_RE.search(name)
    return int(match.group()) if match else 1


def floor_name_for(number: int) -> str:
    return f"Floor {number}"


def room_from_space(space: RemoteSpace) -> Room:
    label = space.space_type or "Space"
    return Room(
        id=f"space_{space.id}",
        name=f"{label} #{space.id}",
        x=space.x,
        y=space.y,
        width=space.width,
        height=space.height,
    )


@dataclass
class RemoteFloorState:
    """Editor state reconstructed from the per-floor probe."""

    floors: dict[str, list[Room]] = field(default_factory=dict)
    boundaries: dict[str, Boundary] = field(default_factory=dict)
    room_space_types: dict[str, int] = field(default_factory=dict)
    room_capacities: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_floors(cls, floors: list[FloorSpaces]) -> "RemoteFloorState":
        state = cls()
        for fs in sorted(floors, key=lambda f: f.floor_number):
            name = floor_name_for(fs.floor_number)
            rooms = [room_from_space(s) for s in fs.spaces]
            state.floors[name] = rooms
            if len(fs.polygon) >= 3:
                state.boundaries[name] = Boundary(points=list(fs.polygon), closed=True)
            for space, room in zip(fs.spaces, rooms):
                if space.space_type_id is not None:
                    state.room_space_types[room.id] = space.space_type_id
                state.room_capacities[room.id] = space.capacity
        return state


class PersistenceSync:
    """Keeps one :class:`EditorSession` in step with its cache and the API."""

    def __init__(
        self,
        session: EditorSession,
        location_id: int,
        api: Optional[BookingApiClient] = None,
        store: Optional[KeyValueStore] = None,
        config: Optional[PersistenceConfig] = None,
    ) -> None:
        self.session = session
        self.location_id = location_id
        self.api = api
        self.store = store
        self.config = config or session.config.persistence
        self.space_types: list[SpaceType] = []
        self.debouncer = Debouncer(self.config.debounce_seconds, self._write_pending)
        self._pending: Optional[tuple[str, dict]] = None
        self._pending_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._generation = 0
        session.on_change(self._schedule_cache_write)

    # ------------------------------------------------------------------ #
    # Local cache
    # ------------------------------------------------------------------ #

    @property
    def key(self) -> str:
        return cache_key(self.location_id)

    def _schedule_cache_write(self) -> None:
        # Runs on the editor thread; the timer thread only sees this frozen record.
        if self.store is None or not self.session.editable:
            return
        record = (self.key, self.session.snapshot())
        with self._pending_lock:
            self._pending = record
        self.debouncer.trigger()

    def _write_pending(self) -> None:
        with self._write_lock:
            with self._pending_lock:
                record, self._pending = self._pending, None
            if record is None or self.store is None:
                return
            key, snapshot = record
            self.store.set(key, snapshot)
        logger.debug("Cached editor state under %s", key)

    def write_cache(self) -> None:
        """Write the current session state immediately (editor thread only)."""
        if self.store is None or self.session.closed:
            return
        self.debouncer.cancel()
        snapshot = self.session.snapshot()
        with self._write_lock:
            with self._pending_lock:
                self._pending = None
            self.store.set(self.key, snapshot)
        logger.debug("Cached editor state for location %s", self.location_id)

    def read_cache(self) -> Optional[dict]:
        return self.store.get(self.key) if self.store is not None else None

    def clear_cache(self) -> None:
        self.debouncer.cancel()
        with self._pending_lock:
            self._pending = None
        if self.store is not None:
            self.store.delete(self.key)

    def switch_location(self, location_id: int) -> None:
        """Point the sync at another location; in-flight loads become stale."""
        self.debouncer.flush()
        self._generation += 1
        self.location_id = location_id

    def close(self) -> None:
        """Flush the pending cache write and detach from the session."""
        self.debouncer.flush()
        self._generation += 1
        self.session.close()

    # ------------------------------------------------------------------ #
    # Load
    # ------------------------------------------------------------------ #

    def _require_api(self) -> BookingApiClient:
        if self.api is None:
            raise RuntimeError("No API client configured for remote sync")
        return self.api

    async def probe_floors(self) -> list[FloorSpaces]:
        """Query every candidate floor concurrently; failures count as absent."""
        api = self._require_api()
        numbers = list(range(self.config.probe_floor_min, self.config.probe_floor_max + 1))
        results = await asyncio.gather(
            *(api.get_floor_spaces(self.location_id, n) for n in numbers),
            return_exceptions=True,
        )
        found: list[FloorSpaces] = []
        for number, result in zip(numbers, results):
            if isinstance(result, BaseException):
                logger.debug("Floor %d of location %s treated as absent: %s", number, self.location_id, result)
                continue
            if not result.is_empty:
                found.append(result)
        logger.info("Location %s: %d floors found", self.location_id, len(found))
        return found

    async def fetch_space_types(self) -> list[SpaceType]:
        try:
            self.space_types = await self._require_api().get_space_types(self.location_id)
        except ApiError as exc:
            logger.warning("Could not load space types for location %s: %s", self.location_id, exc)
        return self.space_types

    async def load(self) -> bool:
        """Load remote floors and reconcile them into the session.

        Returns False when the result was discarded as stale.
        """
        self._generation += 1
        generation = self._generation
        floors = await self.probe_floors()
        await self.fetch_space_types()
        if generation != self._generation or self.session.closed:
            logger.info("Discarding stale floor load for location %s", self.location_id)
            return False
        self.apply(RemoteFloorState.from_floors(floors))
        return True

    def apply(self, remote: RemoteFloorState) -> None:
        """Merge *remote* into the session following the cache/remote policy."""
        session = self.session
        cached = self.read_cache() if session.editable else None
        if cached:
            session.restore(cached)
            for name, boundary in remote.boundaries.items():
                session.boundaries.setdefault(name, boundary)
            logger.info("Restored cached editor state for location %s", self.location_id)
        elif remote.floors:
            session.floors = remote.floors
            session.boundaries = remote.boundaries
            session.room_space_types = remote.room_space_types
            session.room_capacities = remote.room_capacities
            if session.current_floor not in session.floors:
                session.current_floor = next(iter(session.floors))
        session.boundary_fsm.load(session.boundaries.get(session.current_floor))

    # ------------------------------------------------------------------ #
    # Save
    # ------------------------------------------------------------------ #

    def _floor_polygon(self, name: str) -> list[Point]:
        boundary = self.session.boundaries.get(name)
        if boundary is not None and boundary.is_usable:
            return list(boundary.points)
        if name == self.session.current_floor and self.session.boundary_fsm.closed:
            return self.session.boundary_fsm.points
        return []

    def build_payloads(self) -> list[tuple[str, FloorSpacesPayload]]:
        """Build one payload per floor with rooms.

        Raises
        ------
        SaveError
            For the first floor that has rooms but no closed outline, or a
            room without a space type when none is available.
        """
        session = self.session
        default_type = self.space_types[0].id if self.space_types else None
        payloads: list[tuple[str, FloorSpacesPayload]] = []
        for name, rooms in session.floors.items():
            if not rooms:
                continue
            polygon = self._floor_polygon(name)
            if not polygon:
                raise SaveError(name, "the floor has rooms but no closed boundary; draw and close it first")
            number = floor_number_from_name(name)
            spaces = []
            for room in rooms:
                type_id = session.room_space_types.get(room.id, default_type)
                if type_id is None:
                    raise SaveError(name, f"no space type for room '{room.name}'")
                spaces.append(
                    SpacePayload(
                        space_type_id=type_id,
                        capacity=session.room_capacities.get(room.id, 1),
                        location_id=self.location_id,
                        floor_number=number,
                        x=round(room.x),
                        y=round(room.y),
                        width=round(room.width),
                        height=round(room.height),
                    )
                )
            payloads.append((name, FloorSpacesPayload(self.location_id, number, polygon, spaces)))
        return payloads

    async def save(self) -> list[str]:
        """Submit every floor with rooms, sequentially.

        Failures are reported through the session's notice sink and raised
        as :class:`SaveError`; floors after the failing one are not sent.
        """
        api = self._require_api()
        saved: list[str] = []
        try:
            payloads = self.build_payloads()
            for name, payload in payloads:
                try:
                    await api.create_floor_spaces(payload)
                except ApiError as exc:
                    raise SaveError(name, exc.message) from exc
                saved.append(name)
                logger.info("Saved %s (%d spaces)", name, len(payload.spaces))
        except SaveError as exc:
            self.session.notices.error(str(exc), title="Save failed")
            raise
        if saved:
            self.session.notices.success(f"Saved {len(saved)} floor(s).")
        return saved
