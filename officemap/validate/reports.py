"""Validation reporting."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def build_validation_report(
    floor_errors: dict[str, list[str]],
    room_counts: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Build a serialisable report dict."""
    return {
        "floors": {name: {"errors": errors, "rooms": (room_counts or {}).get(name, 0)} for name, errors in floor_errors.items()},
        "error_count": sum(len(e) for e in floor_errors.values()),
        "ok": all(len(e) == 0 for e in floor_errors.values()),
    }


def save_validation_report(report: dict[str, Any], path: Path) -> None:
    path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
