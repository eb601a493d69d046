"""
Annotation session management.

Core logic for an interactive box/highlight linking session.
UI-agnostic - can be used with any interface (GUI, Web, CLI).
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ...config import get_default_config
from ..geometry import GestureController, GestureKind, Point, SurfaceRect
from ..geometry.boxes import resize_handles
from . import linking
from .events import AnnotationEvent, EventEmitter, EventType
from .export import build_export_document
from .rebase import rebase_highlights
from .state import AnnotationState, Box, Highlight, SelectionMode
from .utils import (
    ColorPalette,
    ids_of,
    is_blank_selection,
    new_id,
    replace_box,
    replace_highlight,
    validate_id,
)

logger = logging.getLogger(__name__)


class AnnotationSession:
    """
    Owns the boxes, the highlights and the selection, and keeps them
    consistent.

    This class handles:
    - Selection with the auto-link policy
    - Link/unlink/delete through the linking engine
    - Pointer gestures through the geometry engine
    - Text edits through the offset rebaser
    - Event emission for UI updates

    Every change replaces ``self.state`` with a new ``AnnotationState``, so
    consumers can detect updates by identity. Operations on unknown or stale
    ids are absorbed as no-ops and reported through the return value.
    """

    def __init__(
        self,
        cfg=None,
        palette: Optional[Callable[[], str]] = None,
        text: Optional[str] = None,
    ):
        """
        Initialize annotation session.

        Args:
            cfg: Configuration tree, see ``linked_annotation.config``
            palette: Zero-argument callable returning a color for new entities
            text: Initial text buffer, defaults to the configured text
        """
        self.cfg = cfg if cfg is not None else get_default_config()
        self.palette = palette or ColorPalette(self.cfg.palette.colors)

        if text is None:
            text = self.cfg.annotation.default_text
        self.state = AnnotationState(auto_link=self.cfg.annotation.auto_link, text=text)

        self.gestures = GestureController.from_config(self.cfg.geometry)
        self.surface: Optional[SurfaceRect] = None

        # Event emitter for UI notifications
        self.events = EventEmitter()

        self._image: Optional[np.ndarray] = None

    # Accessors

    @property
    def boxes(self):
        return self.state.boxes

    @property
    def highlights(self):
        return self.state.highlights

    @property
    def active_box(self) -> Optional[str]:
        return self.state.active_box

    @property
    def active_highlight(self) -> Optional[str]:
        return self.state.active_highlight

    @property
    def text(self) -> str:
        return self.state.text

    @property
    def view(self):
        return self.gestures.view

    def get_box(self, box_id: Optional[str]) -> Optional[Box]:
        return self.state.get_box(box_id)

    def get_highlight(self, highlight_id: Optional[str]) -> Optional[Highlight]:
        return self.state.get_highlight(highlight_id)

    # Image and view

    def load_image(self, image: np.ndarray, image_path: Optional[str] = None):
        """
        Load a new image for annotation.

        The canvas takes the image's natural size. Existing boxes are
        cleared, highlights lose their box links and the view goes back to
        identity.

        Args:
            image: Decoded image as numpy array (H, W) or (H, W, C)
            image_path: Optional path to the image file

        Raises:
            ValueError: If image is not a 2D or 3D numpy array
        """
        if not isinstance(image, np.ndarray):
            raise ValueError(f"Image must be numpy array, got {type(image)}")
        if image.ndim not in (2, 3):
            raise ValueError(f"Image must be 2D or 3D, got shape {image.shape}")

        self._image = image
        height, width = image.shape[:2]
        self.surface = SurfaceRect.unscaled(width, height)
        self.gestures.cancel()
        self.gestures.reset_view()

        highlights = self.state.highlights
        if any(h.is_linked for h in highlights):
            highlights = tuple(
                replace(h, box_ref=None) if h.is_linked else h for h in highlights
            )
        self._commit(
            replace(
                self.state,
                boxes=(),
                highlights=highlights,
                active_box=None,
                image_shape=tuple(image.shape),
            )
        )
        self.events.emit(
            AnnotationEvent(
                EventType.IMAGE_LOADED, {"image_shape": image.shape, "path": image_path}
            )
        )
        self._emit_view_changed()

    @property
    def has_image(self) -> bool:
        return self._image is not None

    def set_surface(self, left: float, top: float, width: float, height: float) -> bool:
        """
        Record where the canvas is displayed on screen.

        The canvas backing store always matches the loaded image; only the
        displayed rectangle changes.
        """
        if self.state.canvas_size is None:
            logger.debug("Ignoring surface update without a loaded image")
            return False
        canvas_width, canvas_height = self.state.canvas_size
        self.surface = SurfaceRect(left, top, width, height, canvas_width, canvas_height)
        return True

    def set_scale(self, scale: float) -> float:
        """Set the zoom factor, clamped to the configured range."""
        view = self.gestures.set_scale(scale)
        self._emit_view_changed()
        return view.scale

    def reset_view(self):
        self.gestures.reset_view()
        self._emit_view_changed()

    def to_content(self, client_x: float, client_y: float) -> Optional[Point]:
        """Screen position -> content coordinates, None without a surface."""
        if self.surface is None:
            return None
        return self.gestures.to_content(client_x, client_y, self.surface)

    # Pointer gestures

    def pointer_down(self, client_x: float, client_y: float, modifier: bool = False) -> GestureKind:
        """
        Start a gesture at a screen position.

        Args:
            client_x: Pointer x in screen coordinates
            client_y: Pointer y in screen coordinates
            modifier: Whether the pan modifier key (ctrl/meta) is held

        Returns:
            The gesture that started, IDLE without an image
        """
        point = self.to_content(client_x, client_y)
        if point is None:
            return GestureKind.IDLE

        start = self.gestures.pointer_down(
            point,
            Point(client_x, client_y),
            self.state.boxes,
            self.state.get_box(self.state.active_box),
            modifier,
        )
        if start.kind is GestureKind.DRAGGING:
            self.handle_box_select(start.box_id)

        self.events.emit(
            AnnotationEvent(
                EventType.GESTURE_STARTED,
                {"kind": start.kind.value, "box_id": start.box_id},
            )
        )
        return start.kind

    def pointer_move(self, client_x: float, client_y: float) -> bool:
        """
        Feed a pointer move into the running gesture.

        Returns:
            True if the state, the view or the draw preview changed
        """
        point = self.to_content(client_x, client_y)
        if point is None or not self.gestures.is_active:
            return False

        kind = self.gestures.kind
        rect = self.gestures.pointer_move(
            point, Point(client_x, client_y), self.state.canvas_size
        )
        if kind is GestureKind.PANNING:
            self._emit_view_changed()
            return True
        if kind is GestureKind.DRAWING:
            preview = self.gestures.preview_rect()
            self.events.emit(
                AnnotationEvent(EventType.PREVIEW_CHANGED, {"rect": preview})
            )
            return True
        if rect is None:
            return False

        box = self.state.get_box(self.gestures.target_id)
        if box is None:
            logger.debug("Gesture target vanished, ignoring move")
            return False
        updated = box.with_geometry(*rect)
        return self._commit(
            replace(self.state, boxes=replace_box(self.state.boxes, updated)),
            EventType.BOX_UPDATED,
            {"box_id": updated.id},
        )

    def pointer_up(
        self, client_x: Optional[float] = None, client_y: Optional[float] = None
    ) -> Optional[Box]:
        """
        End the gesture.

        A finished draw gesture above the size threshold creates a box and
        selects it.

        Args:
            client_x: Optional release position, applied as a last move
            client_y: Optional release position, applied as a last move

        Returns:
            The created box, if any
        """
        if not self.gestures.is_active:
            return None
        if client_x is not None and client_y is not None:
            self.pointer_move(client_x, client_y)

        kind = self.gestures.kind
        rect = self.gestures.pointer_up()
        self.events.emit(AnnotationEvent(EventType.GESTURE_ENDED, {"kind": kind.value}))
        if rect is None:
            return None

        box = Box(
            id=new_id(),
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            color=self.palette(),
        )
        self._commit(
            replace(self.state, boxes=self.state.boxes + (box,)),
            EventType.BOX_CREATED,
            {"box_id": box.id},
        )
        self.handle_box_select(box.id)
        return box

    def pointer_leave(self) -> Optional[Box]:
        """Pointer left the canvas; ends the gesture like a release."""
        return self.pointer_up()

    def hover(self, client_x: float, client_y: float) -> Optional[str]:
        """Cursor name for the pointer position, None to keep the current one."""
        point = self.to_content(client_x, client_y)
        if point is None:
            return None
        return self.gestures.cursor(
            point, self.state.boxes, self.state.get_box(self.state.active_box)
        )

    # Selection

    def handle_box_select(self, box_id: Optional[str]) -> bool:
        """
        Select a box, following its link or auto-linking it.

        - None clears the box selection and leaves the highlight selection
        - a linked box also selects its highlight
        - with auto-link on, an unlinked box is linked to the selected
          highlight when that highlight is unlinked too
        - otherwise the highlight selection is cleared
        """
        state = self.state
        if not validate_id(box_id):
            return self._commit(
                replace(state, active_box=None), EventType.SELECTION_CHANGED
            )

        box = state.get_box(box_id)
        if box is None:
            logger.debug(f"Ignoring selection of unknown box {box_id}")
            return self._commit(
                replace(state, active_box=None), EventType.SELECTION_CHANGED
            )

        selected = replace(state, active_box=box_id)
        if box.text_ref:
            selected = replace(selected, active_highlight=box.text_ref)
        elif self._can_auto_link(state.get_highlight(state.active_highlight)):
            return self._link_and_commit(selected, box_id, state.active_highlight)
        else:
            selected = replace(selected, active_highlight=None)
        return self._commit(selected, EventType.SELECTION_CHANGED)

    def handle_highlight_select(self, highlight_id: Optional[str]) -> bool:
        """Mirror of ``handle_box_select`` with the roles swapped."""
        state = self.state
        if not validate_id(highlight_id):
            return self._commit(
                replace(state, active_highlight=None), EventType.SELECTION_CHANGED
            )

        highlight = state.get_highlight(highlight_id)
        if highlight is None:
            logger.debug(f"Ignoring selection of unknown highlight {highlight_id}")
            return self._commit(
                replace(state, active_highlight=None), EventType.SELECTION_CHANGED
            )

        selected = replace(state, active_highlight=highlight_id)
        if highlight.box_ref:
            selected = replace(selected, active_box=highlight.box_ref)
        elif self._can_auto_link(state.get_box(state.active_box)):
            return self._link_and_commit(selected, state.active_box, highlight_id)
        else:
            selected = replace(selected, active_box=None)
        return self._commit(selected, EventType.SELECTION_CHANGED)

    def _can_auto_link(self, partner) -> bool:
        return self.state.auto_link and partner is not None and not partner.is_linked

    def _link_and_commit(self, state: AnnotationState, box_id: str, highlight_id: str) -> bool:
        result = linking.link(state, box_id, highlight_id)
        return self._commit(
            result.state, EventType.LINKED, {"box_id": box_id, "highlight_id": highlight_id}
        )

    # Linking

    def link(self, box_id: str, highlight_id: str) -> bool:
        """Link a box and a highlight; the box takes the highlight's color."""
        result = linking.link(self.state, box_id, highlight_id)
        if not result.ok:
            logger.warning(
                f"Cannot link box {box_id!r} to highlight {highlight_id!r}: {result.outcome.value}"
            )
            return False
        return self._commit(
            result.state, EventType.LINKED, {"box_id": box_id, "highlight_id": highlight_id}
        )

    def unlink(self, box_id: str, highlight_id: str) -> bool:
        """Unlink a box and a highlight that point at each other."""
        result = linking.unlink(self.state, box_id, highlight_id)
        if not result.ok:
            logger.debug(
                f"Nothing to unlink for box {box_id!r} and highlight {highlight_id!r}: {result.outcome.value}"
            )
            return False
        return self._commit(
            result.state, EventType.UNLINKED, {"box_id": box_id, "highlight_id": highlight_id}
        )

    def unlink_box(self, box_id: str) -> bool:
        """Unlink a box from whatever highlight it holds and drop the highlight selection."""
        box = self.state.get_box(box_id)
        if box is None or box.text_ref is None:
            return False
        unlinked = self.unlink(box.id, box.text_ref)
        self.handle_highlight_select(None)
        return unlinked

    def unlink_highlight(self, highlight_id: str) -> bool:
        """Unlink a highlight from whatever box it holds and drop the box selection."""
        highlight = self.state.get_highlight(highlight_id)
        if highlight is None or highlight.box_ref is None:
            return False
        unlinked = self.unlink(highlight.box_ref, highlight.id)
        self.handle_box_select(None)
        return unlinked

    def delete_box(self, box_id: str) -> bool:
        result = linking.delete_box(self.state, box_id)
        if not result.ok:
            logger.debug(f"Ignoring delete of box {box_id!r}: {result.outcome.value}")
            return False
        return self._commit(result.state, EventType.BOX_DELETED, {"box_id": box_id})

    def delete_highlight(self, highlight_id: str) -> bool:
        result = linking.delete_highlight(self.state, highlight_id)
        if not result.ok:
            logger.debug(
                f"Ignoring delete of highlight {highlight_id!r}: {result.outcome.value}"
            )
            return False
        return self._commit(
            result.state, EventType.HIGHLIGHT_DELETED, {"highlight_id": highlight_id}
        )

    def delete_active_box(self) -> bool:
        if self.state.active_box is None:
            return False
        return self.delete_box(self.state.active_box)

    def delete_active_highlight(self) -> bool:
        if self.state.active_highlight is None:
            return False
        return self.delete_highlight(self.state.active_highlight)

    def clear_annotations(self):
        """Remove every box and highlight and clear the selection."""
        self._commit(
            replace(
                self.state, boxes=(), highlights=(), active_box=None, active_highlight=None
            ),
            EventType.ANNOTATIONS_CLEARED,
        )

    # Text

    def set_text(self, new_text: str) -> List[str]:
        """Replace the text buffer, rebasing highlights from the current text."""
        return self.handle_text_change(self.state.text, new_text)

    def handle_text_change(self, old_text: str, new_text: str) -> List[str]:
        """
        Apply a buffer edit delivered by the text surface.

        Highlights are rebased onto ``new_text``; highlights whose span
        collapsed are dropped and their boxes lose the link.

        Args:
            old_text: Buffer content before the edit
            new_text: Buffer content after the edit

        Returns:
            Ids of the dropped highlights
        """
        state = self.state
        if old_text != state.text:
            logger.debug("Text change does not start from the current buffer")
        if old_text == new_text and new_text == state.text:
            return []

        highlights = rebase_highlights(old_text, new_text, state.highlights)
        dropped = sorted(ids_of(state.highlights) - ids_of(highlights))

        updated = replace(state, text=new_text, highlights=tuple(highlights))
        updated = linking.detach_boxes_from(updated, dropped)
        if updated.active_highlight in dropped:
            updated = replace(updated, active_highlight=None)

        self._commit(updated, EventType.TEXT_CHANGED, {"dropped": dropped})
        self.events.emit(
            AnnotationEvent(
                EventType.HIGHLIGHTS_REBASED,
                {"count": len(highlights), "dropped": dropped},
            )
        )
        if dropped:
            logger.debug(f"Text edit dropped {len(dropped)} highlight(s)")
        return dropped

    def handle_text_selection(
        self, start: int, end: int, selected: Optional[str] = None
    ) -> Optional[Highlight]:
        """
        Turn a text selection into a new highlight, or extend/reduce the
        active one depending on the selection mode.

        Args:
            start: Selection start offset
            end: Selection end offset (exclusive)
            selected: Selected substring as reported by the surface

        Returns:
            The created or updated highlight, None when nothing changed
        """
        text = self.state.text
        if selected is None:
            selected = text[start:end]
        if is_blank_selection(selected):
            return None
        if not 0 <= start < end <= len(text):
            logger.debug(f"Ignoring selection [{start}, {end}) outside the text")
            return None

        mode = self.state.selection_mode
        active = self.state.get_highlight(self.state.active_highlight)
        if mode is SelectionMode.EXTEND:
            return self._extend_highlight(active, start, end) if active else None
        if mode is SelectionMode.REDUCE:
            return self._reduce_highlight(active, start, end) if active else None

        highlight = Highlight(
            id=new_id(),
            start=start,
            end=end,
            text=text[start:end],
            color=self.palette(),
        )
        self._commit(
            replace(self.state, highlights=self.state.highlights + (highlight,)),
            EventType.HIGHLIGHT_CREATED,
            {"highlight_id": highlight.id},
        )
        self.handle_highlight_select(highlight.id)
        return self.state.get_highlight(highlight.id)

    def set_selection_mode(self, mode: SelectionMode) -> bool:
        """
        Choose how the next text selections are applied.

        Extend and reduce need an active highlight; the mode falls back to
        create whenever the active highlight changes.
        """
        if mode is not SelectionMode.CREATE and self.state.active_highlight is None:
            return False
        return self._commit(replace(self.state, selection_mode=mode))

    def _extend_highlight(self, active: Highlight, start: int, end: int) -> Highlight:
        new_start = min(active.start, start)
        new_end = max(active.end, end)
        return self._update_span(active, new_start, new_end)

    def _reduce_highlight(self, active: Highlight, start: int, end: int) -> Optional[Highlight]:
        if start < active.start or end > active.end:
            return None
        if start == active.start:
            new_start, new_end = end, active.end
        elif end == active.end:
            new_start, new_end = active.start, start
        else:
            return None
        if new_end <= new_start:
            logger.debug(f"Reduce would empty highlight {active.id}, ignoring")
            return None
        return self._update_span(active, new_start, new_end)

    def _update_span(self, highlight: Highlight, start: int, end: int) -> Highlight:
        updated = replace(
            highlight, start=start, end=end, text=self.state.text[start:end]
        )
        self._commit(
            replace(
                self.state,
                highlights=replace_highlight(self.state.highlights, updated),
            ),
            EventType.HIGHLIGHT_UPDATED,
            {"highlight_id": updated.id},
        )
        return updated

    # Modes

    def set_auto_link(self, enabled: bool) -> bool:
        return self._commit(replace(self.state, auto_link=bool(enabled)))

    def set_edit_mode(self, enabled: bool) -> bool:
        return self._commit(replace(self.state, is_edit_mode=bool(enabled)))

    def toggle_edit_mode(self) -> bool:
        self.set_edit_mode(not self.state.is_edit_mode)
        return self.state.is_edit_mode

    # Output

    def export(self, exported_at=None, include_timestamp: bool = True) -> Dict[str, Any]:
        """Export document for the current state."""
        return build_export_document(self.state, exported_at, include_timestamp)

    def get_visualization_data(self) -> Dict[str, Any]:
        """
        Get data needed by an external renderer.

        Returns:
            Dictionary with visualization data
        """
        active = self.state.get_box(self.state.active_box)
        return {
            "image": self._image,
            "boxes": self.state.boxes,
            "active_box": active,
            "handles": resize_handles(active, self.gestures.handle_size) if active else [],
            "drawing_rect": self.gestures.preview_rect(),
            "view": self.gestures.view,
            "highlights": self.state.highlights,
            "active_highlight": self.state.get_highlight(self.state.active_highlight),
            "text": self.state.text,
        }

    # Internals

    def _commit(
        self,
        new_state: AnnotationState,
        event_type: Optional[EventType] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Replace the current state and notify listeners.

        Returns:
            False when ``new_state`` equals the current state
        """
        previous = self.state
        if new_state.active_highlight != previous.active_highlight:
            new_state = replace(new_state, selection_mode=SelectionMode.CREATE)
        if new_state == previous:
            return False

        self.state = new_state
        if event_type is not None:
            self.events.emit(AnnotationEvent(event_type, data))
        if (
            event_type is not EventType.SELECTION_CHANGED
            and (
                new_state.active_box != previous.active_box
                or new_state.active_highlight != previous.active_highlight
            )
        ):
            self.events.emit(
                AnnotationEvent(
                    EventType.SELECTION_CHANGED,
                    {
                        "active_box": new_state.active_box,
                        "active_highlight": new_state.active_highlight,
                    },
                )
            )
        self.events.emit(AnnotationEvent(EventType.STATE_CHANGED))
        return True

    def _emit_view_changed(self):
        view = self.gestures.view
        self.events.emit(
            AnnotationEvent(
                EventType.VIEW_CHANGED,
                {"pan_x": view.pan_x, "pan_y": view.pan_y, "scale": view.scale},
            )
        )
