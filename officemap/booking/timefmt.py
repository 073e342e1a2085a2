"""Wall-clock labels for slots, independent of the host timezone."""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Optional

from officemap.booking.intervals import parse_utc
from officemap.booking.model import TimeIntervalItem

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):(\d{2})$")


def parse_offset(offset: str) -> timedelta:
    """Parse a signed ``±HH:MM`` offset."""
    match = _OFFSET_RE.match(offset.strip())
    if not match:
        raise ValueError(f"Invalid offset format: {offset!r}")
    sign = 1 if match.group(1) == "+" else -1
    return sign * timedelta(hours=int(match.group(2)), minutes=int(match.group(3)))


def format_time_with_offset(iso_string: str, offset: Optional[str] = None) -> str:
    """Render the ``HH:MM`` wall clock of *iso_string* shifted by *offset*.

    >>> format_time_with_offset("2025-11-27T06:00:00", "+03:00")
    '09:00'
    """
    moment = parse_utc(iso_string)
    if offset:
        try:
            moment = moment + parse_offset(offset)
        except ValueError as exc:
            logger.debug("Ignoring offset: %s", exc)
    return f"{moment.hour:02d}:{moment.minute:02d}"


def format_slot_label(item: TimeIntervalItem) -> str:
    """Return ``"HH:MM–HH:MM"`` for a slot in its own offset."""
    start = format_time_with_offset(item.start, item.offset)
    end = format_time_with_offset(item.end, item.offset)
    return f"{start}–{end}"
