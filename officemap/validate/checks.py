"""Validation checks for exported floor plans."""

from __future__ import annotations

from shapely.validation import explain_validity

from officemap.floorplan.geometry import boundary_polygon, check_overlaps, rooms_outside_boundary
from officemap.floorplan.model import Boundary, Room
from officemap.persistence.fileio import PlanDocument


def validate_boundary(boundary: Boundary | None) -> list[str]:
    """Return a list of boundary-level validation errors."""
    errors: list[str] = []
    if boundary is None or not boundary.closed:
        errors.append("Floor boundary is not closed.")
        return errors

    outline = boundary_polygon(boundary)
    if outline is None:
        errors.append("Floor boundary has fewer than 3 points.")
    elif not outline.is_valid:
        errors.append(f"Floor boundary is not a simple polygon: {explain_validity(outline)}.")
    elif outline.area <= 0:
        errors.append("Floor boundary encloses no area.")
    return errors


def validate_rooms(
    rooms: list[Room],
    boundary: Boundary | None = None,
    min_size: float = 20.0,
    tol: float = 0.01,
) -> list[str]:
    """Return a list of room-level validation errors for one floor."""
    errors: list[str] = []

    # Check overlaps
    errors.extend(check_overlaps(rooms, tol=tol))

    # Check rooms sit inside the outline
    if boundary is not None and boundary.is_usable:
        for room in rooms_outside_boundary(rooms, boundary):
            errors.append(f"Room '{room.name or room.id}' lies outside the floor boundary.")

    # Check minimum size
    for room in rooms:
        if room.width < min_size - tol or room.height < min_size - tol:
            errors.append(
                f"Room '{room.name or room.id}' size {room.width:.0f}x{room.height:.0f} "
                f"< min {min_size:.0f}."
            )

    ids = [r.id for r in rooms]
    for dup in sorted({i for i in ids if ids.count(i) > 1}):
        errors.append(f"Duplicate room id '{dup}'.")

    return errors


def validate_plan(
    doc: PlanDocument,
    min_size: float = 20.0,
) -> dict[str, list[str]]:
    """Validate every floor of *doc*.

    When the document carries per-floor outlines each floor with rooms is
    checked against its own.  Otherwise the single ``boundary`` (the active
    floor's) is checked against every floor's rooms only when the plan has a
    single floor.

    Returns ``{floor_name: [errors...]}`` including floors without errors.
    """
    results: dict[str, list[str]] = {}
    single_floor = len(doc.floors) == 1
    for name, rooms in doc.floors.items():
        errors: list[str] = []
        if doc.floor_boundaries is not None:
            boundary = doc.floor_boundaries.get(name)
            if rooms:
                errors.extend(validate_boundary(boundary))
        else:
            boundary = doc.boundary if single_floor else None
            if single_floor:
                errors.extend(validate_boundary(boundary))
        errors.extend(validate_rooms(rooms, boundary, min_size=min_size))
        results[name] = errors
    return results
