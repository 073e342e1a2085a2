from officemap.floorplan.model import Boundary, Room
from officemap.persistence.fileio import PlanDocument
from officemap.validate.checks import validate_boundary, validate_plan, validate_rooms
from officemap.validate.reports import build_validation_report, save_validation_report

SQUARE = Boundary([(0.0, 0.0), (300.0, 0.0), (300.0, 300.0), (0.0, 300.0)], closed=True)


def _plan(*rooms: Room, boundary: Boundary | None = SQUARE) -> PlanDocument:
    return PlanDocument(floors={"Floor 1": list(rooms)}, boundary=boundary)


def test_validate_plan_passes_for_clean_floor():
    doc = _plan(Room("a", "A", 10, 10, 50, 50), Room("b", "B", 100, 10, 50, 50))
    assert validate_plan(doc) == {"Floor 1": []}


def test_validate_boundary_requires_closure():
    errors = validate_boundary(Boundary([(0, 0), (10, 0), (10, 10)]))
    assert any("not closed" in e for e in errors)


def test_validate_boundary_rejects_self_intersection():
    bowtie = Boundary([(0, 0), (100, 100), (100, 0), (0, 100)], closed=True)
    assert any("simple polygon" in e for e in validate_boundary(bowtie))


def test_validate_rooms_reports_overlap_outside_and_size():
    rooms = [
        Room("a", "A", 10, 10, 50, 50),
        Room("b", "B", 30, 30, 50, 50),
        Room("c", "C", 280, 280, 50, 50),
        Room("d", "D", 150, 150, 10, 30),
    ]
    errors = validate_rooms(rooms, SQUARE)
    assert any("Overlap" in e for e in errors)
    assert any("'C'" in e and "outside" in e for e in errors)
    assert any("'D'" in e and "min" in e for e in errors)


def test_validate_rooms_reports_duplicate_ids():
    errors = validate_rooms([Room("a", "A", 0, 0, 30, 30), Room("a", "A2", 100, 100, 30, 30)])
    assert any("Duplicate" in e for e in errors)


def test_multi_floor_plan_skips_boundary_checks():
    doc = PlanDocument(
        floors={"Floor 1": [Room("a", "A", 500, 500, 50, 50)], "Floor 2": []},
        boundary=SQUARE,
    )
    assert validate_plan(doc) == {"Floor 1": [], "Floor 2": []}


def test_report_ok_flag_and_save(tmp_path):
    report = build_validation_report({"Floor 1": [], "Floor 2": ["Overlap"]}, {"Floor 1": 2})
    assert report["ok"] is False
    assert report["error_count"] == 1
    assert report["floors"]["Floor 1"]["rooms"] == 2

    path = tmp_path / "report.json"
    save_validation_report(report, path)
    assert '"ok": false' in path.read_text(encoding="utf-8")


def test_per_floor_boundaries_checked_independently():
    doc = PlanDocument(
        floors={"Floor 1": [Room("a", "A", 10, 10, 50, 50)], "Floor 2": [Room("b", "B", 500, 500, 50, 50)]},
        boundary=SQUARE,
        floor_boundaries={"Floor 1": SQUARE, "Floor 2": SQUARE},
    )
    results = validate_plan(doc)
    assert results["Floor 1"] == []
    assert any("'B'" in e and "outside" in e for e in results["Floor 2"])


def test_per_floor_boundaries_flag_floor_without_outline():
    doc = PlanDocument(
        floors={"Floor 1": [Room("a", "A", 10, 10, 50, 50)], "Floor 2": []},
        boundary=SQUARE,
        floor_boundaries={},
    )
    results = validate_plan(doc)
    assert any("not closed" in e for e in results["Floor 1"])
    assert results["Floor 2"] == []
