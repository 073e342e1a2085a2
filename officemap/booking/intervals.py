"""Booking-slot decomposition.

The booking API reports coarse availability windows, each carrying the
ISO-8601 durations a space may be booked for.  This module expands every
window into discrete slots:

1. Unavailable windows and windows without durations pass through unchanged.
2. ``start``/``end`` are parsed as UTC (a missing zone means UTC).
3. Each duration ``d`` independently tiles the window from its start:
   ``[t, t+d]`` while ``t + d <= end``.  Each slot lists only ``d``.
4. Slots from all durations are deduplicated by ``(start, end)`` and sorted
   by start.
5. A window that yields no slot at all falls back to itself.

:func:`process_intervals` applies this to a batch and deduplicates / sorts
again so no duplicate survives across windows.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from officemap.booking.model import SlotStatus, TimeIntervalItem
from officemap.errors import DurationFormatError

logger = logging.getLogger(__name__)

DEFAULT_OFFSET = "+03:00"

_DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?$")
_ZONE_RE = re.compile(r"(?:[+-]\d{2}:\d{2}|Z)$")


def parse_duration(value: str) -> timedelta:
    """Parse ``PT#H#M`` (at least one component, non-zero total)."""
    match = _DURATION_RE.match(value.strip()) if value else None
    if not match or (match.group(1) is None and match.group(2) is None):
        raise DurationFormatError(f"Invalid duration format: {value!r}")
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    duration = timedelta(hours=hours, minutes=minutes)
    if duration <= timedelta(0):
        raise DurationFormatError(f"Duration must be positive: {value!r}")
    return duration


def parse_utc(value: str) -> datetime:
    """Parse an ISO-8601 instant, treating a zone-less value as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    elif not _ZONE_RE.search(text):
        text += "+00:00"
    return datetime.fromisoformat(text).astimezone(timezone.utc)


def format_utc(moment: datetime) -> str:
    """Format an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# --------------------------------------------------------------------------- #
# Dedup / ordering
# --------------------------------------------------------------------------- #


def _instant_key(item: TimeIntervalItem) -> tuple:
    try:
        return (0, parse_utc(item.start), parse_utc(item.end))
    except ValueError:
        # Unparseable pass-through windows sort last, compared verbatim.
        return (1, item.start, item.end)


def dedupe_and_sort(items: Iterable[TimeIntervalItem]) -> list[TimeIntervalItem]:
    """Keep the first item per ``(start, end)`` pair and sort by start."""
    unique: dict[tuple, TimeIntervalItem] = {}
    for item in items:
        unique.setdefault(_instant_key(item), item)
    return [unique[k] for k in sorted(unique, key=lambda k: k[:2])]


# --------------------------------------------------------------------------- #
# Decomposition
# --------------------------------------------------------------------------- #


def split_interval(
    interval: TimeIntervalItem,
    default_offset: str = DEFAULT_OFFSET,
) -> list[TimeIntervalItem]:
    """Expand one availability window into duration-sized slots."""
    if not interval.is_available or not interval.available_durations:
        return [interval]

    try:
        start = parse_utc(interval.start)
        end = parse_utc(interval.end)
    except ValueError as exc:
        logger.warning("Cannot parse interval %s..%s: %s", interval.start, interval.end, exc)
        return [interval]

    offset = interval.offset or default_offset
    slots: list[TimeIntervalItem] = []
    for raw in interval.available_durations:
        try:
            step = parse_duration(raw)
        except DurationFormatError as exc:
            logger.error("Skipping duration: %s", exc)
            continue

        cursor = start
        while cursor + step <= end:
            slots.append(
                replace(
                    interval,
                    start=format_utc(cursor),
                    end=format_utc(cursor + step),
                    offset=offset,
                    status=SlotStatus.AVAILABLE.value,
                    available=True,
                    available_durations=[raw],
                    extra=dict(interval.extra),
                )
            )
            cursor += step

    if not slots:
        logger.debug("No slot fits %s..%s; keeping the window as is", interval.start, interval.end)
        return [interval]
    return dedupe_and_sort(slots)


def process_intervals(
    intervals: Iterable[TimeIntervalItem],
    default_offset: Optional[str] = None,
) -> list[TimeIntervalItem]:
    """Decompose a batch of windows into one ordered, duplicate-free slot list."""
    offset = default_offset or DEFAULT_OFFSET
    result: list[TimeIntervalItem] = []
    for interval in intervals:
        result.extend(split_interval(interval, offset))
    return dedupe_and_sort(result)
