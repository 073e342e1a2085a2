"""Tests for the floor-plan geometry helpers."""

import pytest

from officemap.floorplan.geometry import (
    bounding_box,
    canvas_to_screen,
    check_overlaps,
    gen_id,
    room_polygon,
    rooms_outside_boundary,
    screen_to_canvas,
)
from officemap.floorplan.model import Boundary, Room


def _make_room(room_id: str, x: float, y: float, w: float = 40.0, h: float = 40.0, **kw) -> Room:
    return Room(room_id, room_id.upper(), x, y, w, h, **kw)


def _square_boundary(size: float = 200.0) -> Boundary:
    return Boundary([(0.0, 0.0), (size, 0.0), (size, size), (0.0, size)], closed=True)


class TestCoordinateTransform:
    def test_screen_to_canvas_applies_offset_then_zoom(self):
        assert screen_to_canvas((110.0, 60.0), (10.0, 20.0), 2.0) == pytest.approx((50.0, 20.0))

    def test_canvas_to_screen_is_inverse(self):
        canvas = screen_to_canvas((123.0, -45.0), (7.5, 3.0), 0.75)
        assert canvas_to_screen(canvas, (7.5, 3.0), 0.75) == pytest.approx((123.0, -45.0))


class TestShapes:
    def test_bounding_box(self):
        assert bounding_box([(1, 5), (4, -2), (3, 3)]) == pytest.approx((1.0, -2.0, 4.0, 5.0))

    def test_bounding_box_empty_raises(self):
        with pytest.raises(ValueError):
            bounding_box([])

    def test_rect_room_polygon(self):
        poly = room_polygon(_make_room("a", 10, 20, 30, 40))
        assert poly.bounds == pytest.approx((10.0, 20.0, 40.0, 60.0))

    def test_shaped_room_polygon_is_translated(self):
        room = _make_room("tri", 100, 50, shape=[(0, 0), (40, 0), (0, 40)])
        poly = room_polygon(room)
        assert poly.bounds == pytest.approx((100.0, 50.0, 140.0, 90.0))
        assert poly.area == pytest.approx(800.0)

    def test_gen_id_prefix_and_uniqueness(self):
        ids = {gen_id("r_") for _ in range(50)}
        assert len(ids) == 50
        assert all(i.startswith("r_") for i in ids)


class TestOverlapAndContainment:
    def test_no_overlap_for_touching_rooms(self):
        rooms = [_make_room("a", 0, 0), _make_room("b", 40, 0)]
        assert check_overlaps(rooms) == []

    def test_overlap_reported(self):
        rooms = [_make_room("a", 0, 0), _make_room("b", 20, 20)]
        issues = check_overlaps(rooms)
        assert len(issues) == 1
        assert "'A'" in issues[0] and "'B'" in issues[0]

    def test_rooms_outside_boundary(self):
        inside = _make_room("in", 10, 10)
        straddling = _make_room("out", 180, 180)
        assert rooms_outside_boundary([inside, straddling], _square_boundary()) == [straddling]

    def test_open_boundary_contains_nothing(self):
        rooms = [_make_room("a", 10, 10)]
        assert rooms_outside_boundary(rooms, Boundary([(0, 0), (10, 0)])) == rooms
