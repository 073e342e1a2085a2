"""Tests for the click command-line interface."""

import json

import httpx
from click.testing import CliRunner

from officemap import cli
from officemap.api.client import BookingApiClient
from officemap.floorplan.model import Boundary, Room
from officemap.persistence.fileio import PlanDocument, load_plan, save_plan

SQUARE = [(0.0, 0.0), (400.0, 0.0), (400.0, 400.0), (0.0, 400.0)]


def _write_plan(path, rooms=None, closed=True):
    doc = PlanDocument(
        floors={"Floor 1": rooms if rooms is not None else [Room("r1", "R1", 10.0, 10.0, 60.0, 60.0)]},
        boundary=Boundary(list(SQUARE), closed=closed),
    )
    save_plan(doc, path)
    return path


def _patch_client(monkeypatch, handler):
    def factory(config):
        return BookingApiClient(config, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli, "BookingApiClient", factory)


class TestSlots:
    def test_prints_offset_labels(self, tmp_path):
        path = tmp_path / "avail.json"
        path.write_text(json.dumps([{
            "start": "2025-11-27T06:00:00",
            "end": "2025-11-27T09:00:00",
            "status": "available",
            "availableDurations": ["PT1H"],
        }]), encoding="utf-8")

        result = CliRunner().invoke(cli.main, ["slots", str(path)])

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines == ["09:00–10:00  PT1H", "10:00–11:00  PT1H", "11:00–12:00  PT1H"]

    def test_json_output_with_offset(self, tmp_path):
        path = tmp_path / "avail.json"
        path.write_text(json.dumps({"intervals": [{
            "start": "2025-11-27T06:00:00",
            "end": "2025-11-27T07:00:00",
            "status": "available",
            "availableDurations": ["PT30M"],
        }]}), encoding="utf-8")

        result = CliRunner().invoke(cli.main, ["slots", str(path), "--offset", "+01:00", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [d["offset"] for d in data] == ["+01:00", "+01:00"]

    def test_unreadable_input(self, tmp_path):
        path = tmp_path / "avail.json"
        path.write_text("{oops", encoding="utf-8")
        assert CliRunner().invoke(cli.main, ["slots", str(path)]).exit_code == 1


class TestValidate:
    def test_valid_plan(self, tmp_path):
        plan = _write_plan(tmp_path / "plan.json")
        report = tmp_path / "report.json"

        result = CliRunner().invoke(cli.main, ["validate", str(plan), "--report", str(report)])

        assert result.exit_code == 0, result.output
        assert json.loads(report.read_text(encoding="utf-8"))["ok"] is True

    def test_invalid_plan_exits_nonzero(self, tmp_path):
        plan = _write_plan(tmp_path / "plan.json", closed=False)
        assert CliRunner().invoke(cli.main, ["validate", str(plan)]).exit_code == 1


class TestRemoteCommands:
    def test_pull_writes_plan(self, tmp_path, monkeypatch):
        def handler(request):
            if request.url.path.endswith("/spacetypes"):
                return httpx.Response(200, json=[])
            if request.url.params["floorNumber"] == "2":
                return httpx.Response(200, json={
                    "floor": {"floorNumber": 2, "polygon": [{"x": x, "y": y} for x, y in SQUARE]},
                    "spaces": [{"id": 4, "spaceType": "Desk", "bounds": {"x": 1, "y": 2, "width": 30, "height": 30}}],
                })
            return httpx.Response(200, json={"floor": None, "spaces": []})

        _patch_client(monkeypatch, handler)
        output = tmp_path / "pulled.json"

        result = CliRunner().invoke(cli.main, ["pull", "--location", "3", "--output", str(output)])

        assert result.exit_code == 0, result.output
        doc = load_plan(output)
        assert list(doc.floors) == ["Floor 2"]
        assert doc.floors["Floor 2"][0].id == "space_4"
        assert doc.boundary.closed

    def test_push_sends_floors(self, tmp_path, monkeypatch):
        bodies = []

        def handler(request):
            if request.url.path.endswith("/spacetypes"):
                return httpx.Response(200, json=[{"id": 2, "type": "Desk"}])
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={})

        _patch_client(monkeypatch, handler)
        plan = _write_plan(tmp_path / "plan.json")

        result = CliRunner().invoke(cli.main, ["push", str(plan), "--location", "3"])

        assert result.exit_code == 0, result.output
        assert bodies[0]["locationId"] == 3
        assert bodies[0]["spaces"][0]["spaceTypeId"] == 2

    def test_pull_then_push_keeps_every_floor(self, tmp_path, monkeypatch):
        bodies = []

        def handler(request):
            if request.url.path.endswith("/spacetypes"):
                return httpx.Response(200, json=[{"id": 2, "type": "Desk"}])
            if request.method == "POST":
                bodies.append(json.loads(request.content))
                return httpx.Response(200, json={})
            number = int(request.url.params["floorNumber"])
            if number in (1, 2):
                return httpx.Response(200, json={
                    "floor": {"floorNumber": number, "polygon": [{"x": x, "y": y} for x, y in SQUARE]},
                    "spaces": [{"id": number * 10, "spaceTypeId": 2, "spaceType": "Desk",
                                "bounds": {"x": 10, "y": 10, "width": 30, "height": 30}}],
                })
            return httpx.Response(200, json={"floor": None, "spaces": []})

        _patch_client(monkeypatch, handler)
        plan = tmp_path / "pulled.json"

        pulled = CliRunner().invoke(cli.main, ["pull", "--location", "3", "--output", str(plan)])
        assert pulled.exit_code == 0, pulled.output
        pushed = CliRunner().invoke(cli.main, ["push", str(plan), "--location", "3"])

        assert pushed.exit_code == 0, pushed.output
        assert [b["floorNumber"] for b in bodies] == [1, 2]
        assert all(len(b["polygon"]) == 4 for b in bodies)

    def test_push_without_boundary_fails(self, tmp_path, monkeypatch):
        _patch_client(monkeypatch, lambda r: httpx.Response(200, json=[{"id": 2, "type": "Desk"}]))
        plan = _write_plan(tmp_path / "plan.json", closed=False)
        assert CliRunner().invoke(cli.main, ["push", str(plan), "--location", "3"]).exit_code == 1

    def test_prefer_cache_needs_cache_dir(self):
        result = CliRunner().invoke(cli.main, ["pull", "--location", "3", "--prefer-cache"])
        assert result.exit_code == 2
