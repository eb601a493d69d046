"""
Geometry engine - pure coordinate math for the image canvas.

Coordinate transforms, hit-testing, resize handles and the gesture state
machine. Nothing here knows about links or highlights.
"""

from .boxes import Rect, ResizeHandle, box_at, handle_at, point_in_box, resize_handles
from .gestures import GestureController, GestureKind, GestureStart
from .transform import Point, SurfaceRect, ViewTransform, screen_to_content

__all__ = [
    "GestureController",
    "GestureKind",
    "GestureStart",
    "Point",
    "Rect",
    "ResizeHandle",
    "SurfaceRect",
    "ViewTransform",
    "box_at",
    "handle_at",
    "point_in_box",
    "resize_handles",
    "screen_to_content",
]
