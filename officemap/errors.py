"""Exception hierarchy shared by the editor, persistence and booking layers."""

from __future__ import annotations

from typing import Optional


class OfficeMapError(Exception):
    """Base class for all officemap errors."""


class DurationFormatError(OfficeMapError, ValueError):
    """An ISO-8601 duration string could not be parsed."""


class BoundaryNotClosedError(OfficeMapError):
    """A room was placed on a floor whose boundary is not closed."""


class PresetError(OfficeMapError):
    """A preset could not be created from the given points."""


class FloorExistsError(OfficeMapError):
    """A floor with the requested name already exists."""


class ImportFormatError(OfficeMapError):
    """An imported floor-plan document is malformed."""


class SaveError(OfficeMapError):
    """Saving one floor to the remote API failed; later floors were skipped."""

    def __init__(self, floor: str, message: str) -> None:
        super().__init__(f"Floor '{floor}': {message}")
        self.floor = floor
        self.message = message


class ApiError(OfficeMapError):
    """The remote API answered with a non-success status or was unreachable."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message if status is None else f"[{status}] {message}")
        self.message = message
        self.status = status
