"""Tests for zoom-to-cursor and panning."""

import pytest

from officemap.config import EditorConfig
from officemap.editor.viewport import PRIMARY_BUTTON, SECONDARY_BUTTON, ViewportController
from officemap.floorplan.model import ViewportState


def _make_viewport(zoom: float = 1.0, offset=(0.0, 0.0)) -> ViewportController:
    return ViewportController(ViewportState(zoom, offset), EditorConfig())


class TestWheelZoom:
    @pytest.mark.parametrize("delta", [-120.0, 120.0, -5.0, 300.0])
    def test_point_under_cursor_stays_fixed(self, delta):
        vp = _make_viewport(1.5, (30.0, -10.0))
        cursor = (200.0, 150.0)
        before = vp.to_canvas(cursor)
        vp.wheel(delta, cursor)
        assert vp.to_canvas(cursor) == pytest.approx(before)

    def test_wheel_up_zooms_in(self):
        vp = _make_viewport()
        vp.wheel(-100.0, (0.0, 0.0))
        assert vp.zoom > 1.0

    def test_zoom_is_clamped(self):
        vp = _make_viewport()
        vp.wheel(-100000.0, (10.0, 10.0))
        assert vp.zoom == pytest.approx(3.0)
        vp.wheel(100000.0, (10.0, 10.0))
        assert vp.zoom == pytest.approx(0.3)

    def test_clamped_zoom_still_keeps_cursor_fixed(self):
        vp = _make_viewport(2.9, (5.0, 5.0))
        before = vp.to_canvas((40.0, 80.0))
        vp.wheel(-5000.0, (40.0, 80.0))
        assert vp.zoom == pytest.approx(3.0)
        assert vp.to_canvas((40.0, 80.0)) == pytest.approx(before)


class TestDiscreteZoom:
    def test_zoom_in_out_steps(self):
        vp = _make_viewport()
        vp.zoom_in()
        assert vp.zoom == pytest.approx(1.2)
        vp.zoom_out()
        vp.zoom_out()
        assert vp.zoom == pytest.approx(1 / 1.2)

    def test_discrete_zoom_stays_in_bounds(self):
        vp = _make_viewport()
        for _ in range(30):
            vp.zoom_in()
        assert vp.zoom == pytest.approx(3.0)
        for _ in range(30):
            vp.zoom_out()
        assert vp.zoom == pytest.approx(0.3)

    def test_reset(self):
        vp = _make_viewport(2.0, (50.0, 50.0))
        vp.reset()
        assert vp.zoom == 1.0
        assert vp.offset == (0.0, 0.0)


class TestPan:
    def test_secondary_button_pans(self):
        vp = _make_viewport()
        assert vp.start_pan((0.0, 0.0), SECONDARY_BUTTON)
        vp.pan_move((10.0, 5.0))
        vp.pan_move((15.0, 5.0))
        assert vp.offset == pytest.approx((15.0, 5.0))
        vp.end_pan()
        assert not vp.is_panning

    def test_shift_primary_pans(self):
        vp = _make_viewport()
        assert vp.start_pan((0.0, 0.0), PRIMARY_BUTTON, modifier=True)

    def test_plain_primary_does_not_pan(self):
        vp = _make_viewport()
        assert not vp.start_pan((0.0, 0.0), PRIMARY_BUTTON)
        vp.pan_move((100.0, 100.0))
        assert vp.offset == (0.0, 0.0)
