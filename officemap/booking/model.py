"""Availability windows reported by the booking API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

_KNOWN_KEYS = {"start", "end", "offset", "status", "available", "availableDurations"}


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def from_flags(cls, status: Optional[str], available: Optional[bool] = None) -> "SlotStatus":
        """Normalise the server's ``status`` string and legacy ``available`` flag."""
        normalized = (status or "").strip().lower()
        if normalized == cls.AVAILABLE.value:
            return cls.AVAILABLE
        if available is True and normalized != cls.UNAVAILABLE.value:
            return cls.AVAILABLE
        return cls.UNAVAILABLE


@dataclass
class TimeIntervalItem:
    """One availability window (or one slot once decomposed).

    ``start``/``end`` are ISO-8601 instants; the server sends them in UTC
    without a zone suffix.  ``offset`` is the ``±HH:MM`` displacement used to
    render wall-clock labels.
    """

    start: str
    end: str
    offset: Optional[str] = None
    status: Optional[str] = None
    available: Optional[bool] = None
    available_durations: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)  # unknown server fields, carried along

    @property
    def slot_status(self) -> SlotStatus:
        return SlotStatus.from_flags(self.status, self.available)

    @property
    def is_available(self) -> bool:
        return self.slot_status is SlotStatus.AVAILABLE

    @classmethod
    def from_dict(cls, data: dict) -> "TimeIntervalItem":
        available = data.get("available")
        return cls(
            start=str(data["start"]),
            end=str(data["end"]),
            offset=data.get("offset"),
            status=data.get("status"),
            available=bool(available) if available is not None else None,
            available_durations=[str(d) for d in data.get("availableDurations") or []],
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict:
        data: dict[str, Any] = dict(self.extra)
        data["start"] = self.start
        data["end"] = self.end
        if self.offset is not None:
            data["offset"] = self.offset
        if self.status is not None:
            data["status"] = self.status
        if self.available is not None:
            data["available"] = self.available
        data["availableDurations"] = list(self.available_durations)
        return data
