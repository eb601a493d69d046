"""
Box geometry: hit-testing, resize handles and the resize, drag and draw
transforms.

Functions accept anything with ``x``, ``y``, ``width`` and ``height``
attributes (``Box`` or ``Rect``) and never mutate their inputs.
"""

from enum import Enum
from typing import List, NamedTuple, Optional, Sequence

from .transform import Point


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


class ResizeHandle(Enum):
    """Resize handles, in hit-test order."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"
    N = "n"
    S = "s"
    W = "w"
    E = "e"

    @property
    def cursor(self) -> str:
        return RESIZE_CURSORS[self]


RESIZE_CURSORS = {handle: f"{handle.value}-resize" for handle in ResizeHandle}

DEFAULT_CURSOR = "crosshair"
MOVE_CURSOR = "move"
PAN_CURSOR = "grabbing"


class HandleRegion(NamedTuple):
    """Square hit-region of a resize handle; (x, y) is its top-left corner."""

    handle: ResizeHandle
    x: float
    y: float
    size: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.size and self.y <= py <= self.y + self.size


def rect_of(box) -> Rect:
    return Rect(box.x, box.y, box.width, box.height)


def point_in_box(x: float, y: float, box) -> bool:
    """Inclusive containment test on all four edges."""
    return box.x <= x <= box.x + box.width and box.y <= y <= box.y + box.height


def box_at(x: float, y: float, boxes: Sequence):
    """
    Topmost box under the point.

    Boxes are scanned from the last created to the first, so later boxes
    occlude earlier ones.

    Returns:
        The matching box or None
    """
    for box in reversed(boxes):
        if point_in_box(x, y, box):
            return box
    return None


def resize_handles(box, handle_size: float) -> List[HandleRegion]:
    """
    Hit-regions of the eight resize handles of ``box``.

    Each region is a ``handle_size`` square centered on a corner or on an
    edge midpoint.
    """
    half = handle_size / 2
    left, top = box.x, box.y
    right, bottom = box.x + box.width, box.y + box.height
    mid_x, mid_y = box.x + box.width / 2, box.y + box.height / 2
    centers = [
        (ResizeHandle.NW, left, top),
        (ResizeHandle.NE, right, top),
        (ResizeHandle.SW, left, bottom),
        (ResizeHandle.SE, right, bottom),
        (ResizeHandle.N, mid_x, top),
        (ResizeHandle.S, mid_x, bottom),
        (ResizeHandle.W, left, mid_y),
        (ResizeHandle.E, right, mid_y),
    ]
    return [HandleRegion(h, cx - half, cy - half, handle_size) for h, cx, cy in centers]


def handle_at(x: float, y: float, box, handle_size: float) -> Optional[ResizeHandle]:
    for region in resize_handles(box, handle_size):
        if region.contains(x, y):
            return region.handle
    return None


def resize_rect(original, handle: ResizeHandle, dx: float, dy: float) -> Rect:
    """
    Apply a pointer delta to the edges touched by ``handle``.

    Corner handles move two edges, edge handles one; the opposite edges stay
    put. The result is not validated.
    """
    x, y, width, height = original.x, original.y, original.width, original.height

    if handle in (ResizeHandle.NW, ResizeHandle.SW, ResizeHandle.W):
        x += dx
        width -= dx
    if handle in (ResizeHandle.NE, ResizeHandle.SE, ResizeHandle.E):
        width += dx
    if handle in (ResizeHandle.NW, ResizeHandle.NE, ResizeHandle.N):
        y += dy
        height -= dy
    if handle in (ResizeHandle.SW, ResizeHandle.SE, ResizeHandle.S):
        height += dy

    return Rect(x, y, width, height)


def resize_candidate(
    original, handle: ResizeHandle, dx: float, dy: float, min_size: float
) -> Optional[Rect]:
    """
    Resized geometry, or None when the candidate is too small.

    A candidate whose width or height is at or below ``min_size`` is thrown
    away as a whole rather than clamped; the box keeps its last valid
    geometry for that frame.
    """
    candidate = resize_rect(original, handle, dx, dy)
    if candidate.width <= min_size or candidate.height <= min_size:
        return None
    return candidate


def clamp_origin(
    x: float,
    y: float,
    width: float,
    height: float,
    canvas_width: float,
    canvas_height: float,
    scale: float,
) -> Point:
    """Keep a box of the given size inside [0, canvas/scale] on both axes."""
    clamped_x = max(0.0, min(x, canvas_width / scale - width))
    clamped_y = max(0.0, min(y, canvas_height / scale - height))
    return Point(clamped_x, clamped_y)


def drag_rect(
    original,
    pointer: Point,
    drag_offset: Point,
    canvas_width: float,
    canvas_height: float,
    scale: float,
) -> Rect:
    """
    Geometry of a dragged box.

    The new origin is the pointer minus the offset captured at gesture
    start, clamped to the visible canvas extent.
    """
    origin = clamp_origin(
        pointer.x - drag_offset.x,
        pointer.y - drag_offset.y,
        original.width,
        original.height,
        canvas_width,
        canvas_height,
        scale,
    )
    return Rect(origin.x, origin.y, original.width, original.height)


def normalized_rect(start: Point, current: Point) -> Rect:
    """Rectangle spanned by two corners, with its origin at the top-left."""
    return Rect(
        min(start.x, current.x),
        min(start.y, current.y),
        abs(current.x - start.x),
        abs(current.y - start.y),
    )


def drawn_rect(start: Point, current: Point, min_draw_size: float) -> Optional[Rect]:
    """Rectangle for a finished draw gesture, None below the size threshold."""
    if abs(current.x - start.x) > min_draw_size and abs(current.y - start.y) > min_draw_size:
        return normalized_rect(start, current)
    return None


def cursor_at(
    x: float, y: float, boxes: Sequence, active_box=None, handle_size: float = 50
) -> str:
    """Cursor to show while hovering at (x, y) with no gesture running."""
    if active_box is not None:
        handle = handle_at(x, y, active_box, handle_size)
        if handle is not None:
            return handle.cursor
    if box_at(x, y, boxes) is not None:
        return MOVE_CURSOR
    return DEFAULT_CURSOR
