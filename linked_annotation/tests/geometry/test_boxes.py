"""
Tests for box hit-testing and the resize, drag and draw transforms.
"""

import pytest

from linked_annotation.core.annotation.state import Box
from linked_annotation.core.geometry.boxes import (
    Rect,
    ResizeHandle,
    box_at,
    cursor_at,
    drag_rect,
    drawn_rect,
    handle_at,
    normalized_rect,
    point_in_box,
    resize_candidate,
    resize_handles,
    resize_rect,
)
from linked_annotation.core.geometry.transform import Point


def make_box(box_id, x, y, width, height):
    return Box(box_id, x, y, width, height, "#fff")


class TestHitTesting:
    def test_point_in_box_is_inclusive(self):
        box = make_box("a", 10, 10, 20, 20)
        assert point_in_box(10, 10, box)
        assert point_in_box(30, 30, box)
        assert not point_in_box(30.5, 30, box)

    def test_topmost_box_wins(self):
        first = make_box("first", 0, 0, 100, 100)
        second = make_box("second", 50, 50, 100, 100)

        assert box_at(75, 75, [first, second]) is second
        assert box_at(25, 25, [first, second]) is first
        assert box_at(500, 500, [first, second]) is None


class TestHandles:
    def test_eight_handles_centered(self):
        regions = resize_handles(make_box("a", 100, 100, 200, 100), 50)

        assert [r.handle for r in regions] == list(ResizeHandle)
        se = regions[3]
        assert (se.x, se.y, se.size) == (275, 175, 50)

    def test_handle_at(self):
        box = make_box("a", 100, 100, 200, 100)
        assert handle_at(100, 100, box, 50) is ResizeHandle.NW
        assert handle_at(200, 200, box, 50) is ResizeHandle.S
        assert handle_at(200, 150, box, 50) is None

    def test_corners_win_over_edges_in_small_boxes(self):
        box = make_box("a", 0, 0, 20, 20)
        assert handle_at(10, 0, box, 50) is ResizeHandle.NW


class TestResize:
    @pytest.mark.parametrize(
        "handle,expected",
        [
            (ResizeHandle.NW, (15, 25, 95, 85)),
            (ResizeHandle.NE, (10, 25, 105, 85)),
            (ResizeHandle.SW, (15, 10, 95, 115)),
            (ResizeHandle.SE, (10, 10, 105, 115)),
            (ResizeHandle.N, (10, 25, 100, 85)),
            (ResizeHandle.S, (10, 10, 100, 115)),
            (ResizeHandle.W, (15, 10, 95, 100)),
            (ResizeHandle.E, (10, 10, 105, 100)),
        ],
    )
    def test_resize_rect(self, handle, expected):
        assert resize_rect(Rect(10, 10, 100, 100), handle, 5, 15) == expected

    def test_minimum_size_guard(self):
        original = Rect(0, 0, 20, 20)
        assert resize_candidate(original, ResizeHandle.SE, -10, 0, 10) is None
        assert resize_candidate(original, ResizeHandle.SE, -9, -9, 10) == Rect(0, 0, 11, 11)


class TestDragAndDraw:
    def test_drag_keeps_grab_offset(self):
        rect = drag_rect(Rect(10, 10, 50, 50), Point(100, 80), Point(5, 5), 600, 400, 1)
        assert rect == Rect(95, 75, 50, 50)

    def test_drag_clamped_to_canvas(self):
        original = Rect(0, 0, 50, 50)
        assert drag_rect(original, Point(590, 10), Point(10, 10), 600, 400, 1) == Rect(550, 0, 50, 50)
        assert drag_rect(original, Point(-20, -20), Point(10, 10), 600, 400, 1) == Rect(0, 0, 50, 50)

    def test_drag_clamp_follows_scale(self):
        rect = drag_rect(Rect(0, 0, 50, 50), Point(590, 390), Point(0, 0), 600, 400, 2)
        assert rect == Rect(250, 150, 50, 50)

    def test_draw_threshold(self):
        assert drawn_rect(Point(10, 10), Point(13, 13), 5) is None
        assert drawn_rect(Point(10, 10), Point(15, 15), 5) is None
        assert drawn_rect(Point(10, 10), Point(16, 16), 5) == Rect(10, 10, 6, 6)

    def test_normalized_rect(self):
        assert normalized_rect(Point(50, 60), Point(10, 20)) == Rect(10, 20, 40, 40)


class TestCursor:
    def test_cursor_at(self):
        boxes = [make_box("a", 100, 100, 200, 100)]
        assert cursor_at(10, 10, boxes) == "crosshair"
        assert cursor_at(200, 150, boxes) == "move"
        assert cursor_at(300, 200, boxes, boxes[0]) == "se-resize"
        assert cursor_at(300, 200, boxes) == "move"
