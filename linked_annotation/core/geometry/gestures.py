"""
Gesture handler - classifies pointer sessions and turns pointer motion into
box geometry.

One pointer-down to pointer-up session is exactly one gesture: drawing,
resizing, dragging or panning. The controller does not own any boxes; it
returns geometry for the caller to commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from .boxes import (
    DEFAULT_CURSOR,
    PAN_CURSOR,
    Rect,
    ResizeHandle,
    box_at,
    cursor_at,
    drag_rect,
    drawn_rect,
    handle_at,
    normalized_rect,
    point_in_box,
    rect_of,
    resize_candidate,
)
from .transform import IDENTITY, Point, SurfaceRect, ViewTransform, clamp_scale, screen_to_content

logger = logging.getLogger(__name__)


class GestureKind(Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    RESIZING = "resizing"
    DRAGGING = "dragging"
    PANNING = "panning"


@dataclass
class GestureState:
    """State of the running pointer session."""

    kind: GestureKind = GestureKind.IDLE
    start: Point = Point(0.0, 0.0)
    current: Point = Point(0.0, 0.0)
    handle: Optional[ResizeHandle] = None
    target_id: Optional[str] = None
    original: Optional[Rect] = None
    drag_offset: Point = Point(0.0, 0.0)
    last_screen: Point = Point(0.0, 0.0)


@dataclass(frozen=True)
class GestureStart:
    """Outcome of a pointer-down: the gesture started and the box it claimed."""

    kind: GestureKind
    box_id: Optional[str] = None


class GestureController:
    """Handles pointer gestures over the canvas and owns the pan/zoom view."""

    def __init__(
        self,
        handle_size: float = 50,
        min_box_size: float = 10,
        min_draw_size: float = 5,
        pan_factor: float = 10,
        min_scale: float = 0.2,
        max_scale: float = 3.0,
    ):
        self.handle_size = handle_size
        self.min_box_size = min_box_size
        self.min_draw_size = min_draw_size
        self.pan_factor = pan_factor
        self.min_scale = min_scale
        self.max_scale = max_scale

        self.view = IDENTITY
        self._state = GestureState()

    @classmethod
    def from_config(cls, cfg) -> "GestureController":
        """Build from the ``geometry`` section of the configuration."""
        return cls(
            handle_size=cfg.handle_size,
            min_box_size=cfg.min_box_size,
            min_draw_size=cfg.min_draw_size,
            pan_factor=cfg.pan_factor,
            min_scale=cfg.min_scale,
            max_scale=cfg.max_scale,
        )

    @property
    def kind(self) -> GestureKind:
        return self._state.kind

    @property
    def is_active(self) -> bool:
        return self._state.kind is not GestureKind.IDLE

    @property
    def target_id(self) -> Optional[str]:
        """Box being dragged or resized."""
        return self._state.target_id

    @property
    def handle(self) -> Optional[ResizeHandle]:
        return self._state.handle

    # View

    def set_scale(self, scale: float) -> ViewTransform:
        self.view = self.view.scaled(clamp_scale(scale, self.min_scale, self.max_scale))
        return self.view

    def reset_view(self) -> ViewTransform:
        self.view = IDENTITY
        return self.view

    def to_content(self, screen_x: float, screen_y: float, surface: SurfaceRect) -> Point:
        return screen_to_content(screen_x, screen_y, surface, self.view)

    # Pointer session

    def pointer_down(
        self,
        point: Point,
        screen: Point,
        boxes: Sequence,
        active_box=None,
        modifier: bool = False,
    ) -> GestureStart:
        """
        Classify a pointer-down and start the matching gesture.

        Priority: resize handle of the active box, body of the active box,
        body of the topmost other box, pan when ``modifier`` is held, and a
        new draw gesture otherwise.

        Args:
            point: Pointer in content coordinates
            screen: Pointer in screen coordinates, used for panning
            boxes: Boxes in creation order
            active_box: Currently selected box, if any
            modifier: Whether the pan modifier key is held

        Returns:
            GestureStart with the claimed box id for drag/resize
        """
        if self.is_active:
            logger.debug(f"Pointer down during {self._state.kind.value}, restarting")

        if active_box is not None:
            handle = handle_at(point.x, point.y, active_box, self.handle_size)
            if handle is not None:
                self._state = GestureState(
                    kind=GestureKind.RESIZING,
                    start=point,
                    current=point,
                    handle=handle,
                    target_id=active_box.id,
                    original=rect_of(active_box),
                )
                return GestureStart(GestureKind.RESIZING, active_box.id)

        if active_box is not None and point_in_box(point.x, point.y, active_box):
            hit = active_box
        else:
            hit = box_at(point.x, point.y, boxes)
        if hit is not None:
            self._state = GestureState(
                kind=GestureKind.DRAGGING,
                start=point,
                current=point,
                target_id=hit.id,
                original=rect_of(hit),
                drag_offset=Point(point.x - hit.x, point.y - hit.y),
            )
            return GestureStart(GestureKind.DRAGGING, hit.id)

        if modifier:
            self._state = GestureState(kind=GestureKind.PANNING, last_screen=screen)
            return GestureStart(GestureKind.PANNING)

        self._state = GestureState(kind=GestureKind.DRAWING, start=point, current=point)
        return GestureStart(GestureKind.DRAWING)

    def pointer_move(
        self, point: Point, screen: Point, canvas_size: Tuple[float, float]
    ) -> Optional[Rect]:
        """
        Advance the running gesture.

        Returns:
            New geometry for the dragged or resized box, or None when there
            is nothing to commit (idle, drawing, panning, or a rejected
            resize frame)
        """
        state = self._state
        if state.kind is GestureKind.PANNING:
            dx = screen.x - state.last_screen.x
            dy = screen.y - state.last_screen.y
            self.view = self.view.panned(dx * self.pan_factor, dy * self.pan_factor)
            state.last_screen = screen
            return None

        if state.kind is GestureKind.DRAGGING:
            state.current = point
            canvas_width, canvas_height = canvas_size
            return drag_rect(
                state.original,
                point,
                state.drag_offset,
                canvas_width,
                canvas_height,
                self.view.scale,
            )

        if state.kind is GestureKind.RESIZING:
            state.current = point
            return resize_candidate(
                state.original,
                state.handle,
                point.x - state.start.x,
                point.y - state.start.y,
                self.min_box_size,
            )

        if state.kind is GestureKind.DRAWING:
            state.current = point
        return None

    def pointer_up(self) -> Optional[Rect]:
        """
        End the gesture and return to idle.

        Returns:
            Geometry of the box to create when a draw gesture passed the
            size threshold, otherwise None
        """
        state = self._state
        self._state = GestureState()
        if state.kind is GestureKind.DRAWING:
            return drawn_rect(state.start, state.current, self.min_draw_size)
        return None

    def cancel(self) -> None:
        self._state = GestureState()

    def preview_rect(self) -> Optional[Rect]:
        """Normalized rectangle of the draw gesture in progress."""
        if self._state.kind is not GestureKind.DRAWING:
            return None
        return normalized_rect(self._state.start, self._state.current)

    def cursor(self, point: Point, boxes: Sequence, active_box=None) -> Optional[str]:
        """
        Cursor for a hover at ``point``.

        Returns None while a gesture other than panning is running, meaning
        the cursor should stay as it is.
        """
        if self._state.kind is GestureKind.PANNING:
            return PAN_CURSOR
        if self.is_active:
            return None
        if not boxes:
            return DEFAULT_CURSOR
        return cursor_at(point.x, point.y, boxes, active_box, self.handle_size)
