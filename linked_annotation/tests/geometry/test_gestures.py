"""
Tests for the gesture controller.
"""

import pytest

from linked_annotation.config import get_default_config
from linked_annotation.core.annotation.state import Box
from linked_annotation.core.geometry import GestureController, GestureKind, Point, Rect
from linked_annotation.core.geometry.boxes import ResizeHandle

CANVAS = (600, 400)


@pytest.fixture
def controller():
    return GestureController.from_config(get_default_config().geometry)


@pytest.fixture
def boxes():
    return [
        Box("under", 100, 100, 100, 100, "#fff"),
        Box("over", 150, 150, 100, 100, "#fff"),
    ]


def down(controller, x, y, boxes=(), active=None, modifier=False):
    return controller.pointer_down(Point(x, y), Point(x, y), boxes, active, modifier)


class TestClassification:
    def test_empty_space_draws(self, controller):
        start = down(controller, 10, 10)
        assert start.kind is GestureKind.DRAWING
        assert start.box_id is None

    def test_active_handle_beats_topmost_box(self, controller, boxes):
        start = down(controller, 200, 200, boxes, active=boxes[0])

        assert start.kind is GestureKind.RESIZING
        assert start.box_id == "under"
        assert controller.handle is ResizeHandle.SE

    def test_active_body_beats_topmost_box(self, controller, boxes):
        start = down(controller, 160, 160, boxes, active=boxes[0])
        assert (start.kind, start.box_id) == (GestureKind.DRAGGING, "under")

    def test_topmost_box_without_selection(self, controller, boxes):
        start = down(controller, 175, 175, boxes)
        assert (start.kind, start.box_id) == (GestureKind.DRAGGING, "over")

    def test_modifier_pans(self, controller, boxes):
        assert down(controller, 500, 350, boxes, modifier=True).kind is GestureKind.PANNING

    def test_box_beats_modifier(self, controller, boxes):
        assert down(controller, 175, 175, boxes, modifier=True).kind is GestureKind.DRAGGING


class TestSession:
    def test_draw_lifecycle(self, controller):
        down(controller, 10, 10)
        assert controller.pointer_move(Point(30, 40), Point(30, 40), CANVAS) is None
        assert controller.preview_rect() == Rect(10, 10, 20, 30)

        assert controller.pointer_up() == Rect(10, 10, 20, 30)
        assert controller.kind is GestureKind.IDLE
        assert controller.preview_rect() is None

    def test_small_draw_yields_nothing(self, controller):
        down(controller, 10, 10)
        controller.pointer_move(Point(13, 13), Point(13, 13), CANVAS)
        assert controller.pointer_up() is None

    def test_drag_returns_geometry(self, controller, boxes):
        down(controller, 175, 175, boxes)
        rect = controller.pointer_move(Point(185, 195), Point(185, 195), CANVAS)
        assert rect == Rect(160, 170, 100, 100)
        assert controller.pointer_up() is None

    def test_resize_returns_geometry_or_none(self, controller, boxes):
        down(controller, 200, 200, boxes, active=boxes[0])
        assert controller.pointer_move(Point(210, 220), Point(210, 220), CANVAS) == Rect(
            100, 100, 110, 120
        )
        assert controller.pointer_move(Point(105, 200), Point(105, 200), CANVAS) is None

    def test_pan_moves_view(self, controller):
        down(controller, 100, 100, modifier=True)
        controller.pointer_move(Point(0, 0), Point(102, 99), CANVAS)
        controller.pointer_move(Point(0, 0), Point(103, 99), CANVAS)

        assert (controller.view.pan_x, controller.view.pan_y) == (30, -10)

    def test_cancel(self, controller):
        down(controller, 10, 10)
        controller.cancel()
        assert not controller.is_active


class TestView:
    def test_set_scale_clamps(self, controller):
        assert controller.set_scale(5).scale == 3.0
        assert controller.set_scale(0.05).scale == 0.2
        assert controller.reset_view().is_identity

    def test_scale_keeps_pan(self, controller):
        down(controller, 100, 100, modifier=True)
        controller.pointer_move(Point(0, 0), Point(101, 100), CANVAS)
        controller.pointer_up()

        assert controller.set_scale(2).pan_x == 10


class TestCursor:
    def test_cursor_while_idle_and_busy(self, controller, boxes):
        assert controller.cursor(Point(10, 10), []) == "crosshair"
        assert controller.cursor(Point(175, 175), boxes) == "move"

        down(controller, 10, 10, boxes)
        assert controller.cursor(Point(175, 175), boxes) is None
        controller.pointer_up()

        down(controller, 10, 10, boxes, modifier=True)
        assert controller.cursor(Point(175, 175), boxes) == "grabbing"
