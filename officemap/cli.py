"""Command-line interface for officemap.

Usage
-----
    officemap slots availability.json --offset +03:00
    officemap validate plan.json --report report.json
    officemap --config office.yaml pull --location 7 --output plan.json
    officemap --config office.yaml push plan.json --location 7
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from officemap.api.client import BookingApiClient
from officemap.booking.intervals import process_intervals
from officemap.booking.model import TimeIntervalItem
from officemap.booking.timefmt import format_slot_label
from officemap.config import Config
from officemap.editor.session import EditorSession
from officemap.errors import ImportFormatError, SaveError
from officemap.floorplan.model import EditorMode
from officemap.persistence.cache import JsonFileStore
from officemap.persistence.fileio import load_plan, save_plan
from officemap.persistence.sync import PersistenceSync
from officemap.validate.checks import validate_plan
from officemap.validate.reports import build_validation_report, save_validation_report

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("officemap.cli")


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="YAML configuration file")
@click.option("--base-url", default=None, help="Override the API base URL")
@click.option("--token", envvar="OFFICEMAP_TOKEN", default=None, help="Bearer token (or $OFFICEMAP_TOKEN)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[str],
    base_url: Optional[str],
    token: Optional[str],
    verbose: bool,
) -> None:
    """Office floor-plan and booking-slot tooling."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cfg = Config.from_yaml(config_path) if config_path else Config.default()
    if base_url:
        cfg.api.base_url = base_url
    if token:
        cfg.api.token = token
    ctx.obj = cfg


# --------------------------------------------------------------------------- #
# Booking slots
# --------------------------------------------------------------------------- #


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--offset", default=None, help="Display offset (±HH:MM) for windows without one")
@click.option("--json", "as_json", is_flag=True, help="Print the slots as JSON instead of labels")
@click.pass_obj
def slots(cfg: Config, input_path: str, offset: Optional[str], as_json: bool) -> None:
    """Decompose availability windows into bookable slots."""
    try:
        raw = json.loads(Path(input_path).read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("intervals") or []
        windows = [TimeIntervalItem.from_dict(item) for item in raw]
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as exc:
        logger.error("Cannot read availability windows from %s: %s", input_path, exc)
        raise SystemExit(1)

    result = process_intervals(windows, offset or cfg.booking.default_offset)
    logger.info("Decomposed %d windows into %d slots", len(windows), len(result))

    if as_json:
        click.echo(json.dumps([item.to_dict() for item in result], indent=2, ensure_ascii=False))
        return
    for item in result:
        marker = "" if item.is_available else "  (unavailable)"
        durations = ",".join(item.available_durations)
        click.echo(f"{format_slot_label(item)}  {durations}{marker}".rstrip())


# --------------------------------------------------------------------------- #
# Floor plans
# --------------------------------------------------------------------------- #


@main.command()
@click.argument("plan_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--report", "report_path", default=None, help="Write a JSON validation report here")
@click.pass_obj
def validate(cfg: Config, plan_path: str, report_path: Optional[str]) -> None:
    """Validate an exported floor plan."""
    try:
        doc = load_plan(Path(plan_path))
    except ImportFormatError as exc:
        logger.error("Cannot read plan %s: %s", plan_path, exc)
        raise SystemExit(1)

    floor_errors = validate_plan(doc, min_size=cfg.editor.min_room_size)
    report = build_validation_report(floor_errors, {name: len(rooms) for name, rooms in doc.floors.items()})
    if report_path:
        save_validation_report(report, Path(report_path))
        logger.info("Validation report → %s", report_path)

    for name, errors in floor_errors.items():
        for e in errors:
            logger.error("%s: %s", name, e)
    if not report["ok"]:
        raise SystemExit(1)
    click.echo(f"OK: {len(doc.floors)} floor(s) valid")


async def _pull(cfg: Config, location_id: int, prefer_cache: bool) -> Optional[EditorSession]:
    mode = EditorMode.EDIT if prefer_cache else EditorMode.VIEW
    session = EditorSession(cfg, mode=mode)
    store = JsonFileStore(cfg.persistence.cache_dir) if prefer_cache else None
    async with BookingApiClient(cfg.api) as api:
        sync = PersistenceSync(session, location_id, api=api, store=store)
        if not await sync.load():
            return None
    return session


@main.command()
@click.option("--location", "location_id", required=True, type=int, help="Location id")
@click.option("--output", "-o", "output_path", default="plan.json", show_default=True, help="Output plan file")
@click.option("--prefer-cache", is_flag=True, help="Let the local cache win over the remote plan")
@click.pass_obj
def pull(cfg: Config, location_id: int, output_path: str, prefer_cache: bool) -> None:
    """Load a location's floors from the API and write them as a plan file."""
    if prefer_cache and cfg.persistence.cache_dir is None:
        raise click.UsageError("--prefer-cache needs persistence.cache_dir in the configuration")

    logger.info("Loading floors of location %d from %s", location_id, cfg.api.base_url)
    session = asyncio.run(_pull(cfg, location_id, prefer_cache))
    if session is None:
        logger.error("Floor load for location %d was superseded", location_id)
        raise SystemExit(1)

    save_plan(session.export_plan(), Path(output_path))
    logger.info("Done. %d floor(s) written to %s", len(session.floors), output_path)


async def _push(cfg: Config, session: EditorSession, location_id: int) -> list[str]:
    async with BookingApiClient(cfg.api) as api:
        sync = PersistenceSync(session, location_id, api=api)
        await sync.fetch_space_types()
        return await sync.save()


@main.command()
@click.argument("plan_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--location", "location_id", required=True, type=int, help="Location id")
@click.pass_obj
def push(cfg: Config, plan_path: str, location_id: int) -> None:
    """Submit every floor of a plan file to the API."""
    session = EditorSession(cfg, mode=EditorMode.EDIT)
    if not session.import_plan(Path(plan_path).read_text(encoding="utf-8")):
        logger.error("Cannot read plan %s: %s", plan_path, session.notices.last.message)
        raise SystemExit(1)

    try:
        saved = asyncio.run(_push(cfg, session, location_id))
    except SaveError as exc:
        logger.error("Save failed: %s", exc)
        raise SystemExit(1)
    logger.info("Done. %d floor(s) saved for location %d", len(saved), location_id)


if __name__ == "__main__":
    main()
