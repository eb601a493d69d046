"""
Event adapter for annotation session.

Bridges the AnnotationSession with UI event payloads, one dict per user
action, as a browser bridge or a recorded replay script delivers them.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..core.annotation import AnnotationEvent, AnnotationSession, EventType, SelectionMode
from ..utils.env import coerce_value

logger = logging.getLogger(__name__)


class EventScriptAdapter:
    """
    Adapter connecting AnnotationSession to UI event payloads.

    Provides a translation layer that:
    - Maps ``{"type": ..., ...}`` payloads onto session calls
    - Forwards session changes to a refresh callback
    """

    def __init__(
        self,
        session: AnnotationSession,
        refresh_callback: Optional[Callable[[AnnotationEvent], None]] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core annotation session
            refresh_callback: Called after every state, view or draw preview
                change, and when a gesture ends
        """
        self.session = session
        self.refresh_callback = refresh_callback
        self.dispatched = 0

        self._handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "surface": self._on_surface,
            "pointer_down": self._on_pointer_down,
            "pointer_move": self._on_pointer_move,
            "pointer_up": self._on_pointer_up,
            "pointer_leave": lambda p: self.session.pointer_leave(),
            "hover": lambda p: self.session.hover(_number(p, "x"), _number(p, "y")),
            "select_box": lambda p: self.session.handle_box_select(p.get("id")),
            "select_highlight": lambda p: self.session.handle_highlight_select(p.get("id")),
            "link": lambda p: self.session.link(p.get("box"), p.get("highlight")),
            "unlink": lambda p: self.session.unlink(p.get("box"), p.get("highlight")),
            "unlink_box": lambda p: self.session.unlink_box(p.get("id")),
            "unlink_highlight": lambda p: self.session.unlink_highlight(p.get("id")),
            "delete_box": lambda p: self.session.delete_box(p.get("id")),
            "delete_highlight": lambda p: self.session.delete_highlight(p.get("id")),
            "delete_active_box": lambda p: self.session.delete_active_box(),
            "delete_active_highlight": lambda p: self.session.delete_active_highlight(),
            "text_change": self._on_text_change,
            "text_selection": self._on_text_selection,
            "selection_mode": self._on_selection_mode,
            "set_scale": lambda p: self.session.set_scale(_number(p, "scale")),
            "reset_view": lambda p: self.session.reset_view(),
            "auto_link": lambda p: self.session.set_auto_link(_flag(p, "enabled")),
            "edit_mode": lambda p: self.session.set_edit_mode(_flag(p, "enabled")),
            "toggle_edit_mode": lambda p: self.session.toggle_edit_mode(),
            "clear": lambda p: self.session.clear_annotations(),
        }

        # Subscribe to session events
        self._setup_event_handlers()

    @property
    def event_types(self):
        return sorted(self._handlers)

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        self.session.events.on(EventType.STATE_CHANGED, self._on_refresh)
        self.session.events.on(EventType.VIEW_CHANGED, self._on_refresh)
        self.session.events.on(EventType.PREVIEW_CHANGED, self._on_refresh)
        self.session.events.on(EventType.GESTURE_ENDED, self._on_refresh)

    def _on_refresh(self, event: AnnotationEvent):
        if self.refresh_callback:
            self.refresh_callback(event)

    def dispatch(self, payload: Dict[str, Any]) -> Any:
        """
        Apply one UI event to the session.

        Args:
            payload: Mapping with a ``type`` key and the event fields

        Returns:
            Whatever the session call returned

        Raises:
            ValueError: If the payload is not a mapping, has an unknown type
                or misses a required field
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Event must be an object, got {type(payload).__name__}")
        event_type = payload.get("type")
        handler = self._handlers.get(event_type)
        if handler is None:
            raise ValueError(f"Unknown event type: {event_type!r}")

        result = handler(payload)
        self.dispatched += 1
        logger.debug(f"Dispatched {event_type} -> {result!r}")
        return result

    # Handlers needing more than one line

    def _on_surface(self, payload):
        return self.session.set_surface(
            _number(payload, "left"),
            _number(payload, "top"),
            _number(payload, "width"),
            _number(payload, "height"),
        )

    def _on_pointer_down(self, payload):
        return self.session.pointer_down(
            _number(payload, "x"),
            _number(payload, "y"),
            modifier=bool(payload.get("modifier", False)),
        )

    def _on_pointer_move(self, payload):
        return self.session.pointer_move(_number(payload, "x"), _number(payload, "y"))

    def _on_pointer_up(self, payload):
        if "x" in payload and "y" in payload:
            return self.session.pointer_up(_number(payload, "x"), _number(payload, "y"))
        return self.session.pointer_up()

    def _on_text_change(self, payload):
        new_text = payload.get("text")
        if not isinstance(new_text, str):
            raise ValueError("text_change needs a string 'text' field")
        old_text = payload.get("old")
        if old_text is None:
            return self.session.set_text(new_text)
        return self.session.handle_text_change(old_text, new_text)

    def _on_text_selection(self, payload):
        return self.session.handle_text_selection(
            int(_number(payload, "start")),
            int(_number(payload, "end")),
            payload.get("selected"),
        )

    def _on_selection_mode(self, payload):
        try:
            mode = SelectionMode(payload.get("mode"))
        except ValueError:
            raise ValueError(f"Unknown selection mode: {payload.get('mode')!r}") from None
        return self.session.set_selection_mode(mode)


def _flag(payload: Dict[str, Any], key: str, default: bool = True) -> bool:
    """Boolean field; JSON booleans and strings such as "false" or "0" are accepted."""
    value = payload.get(key, default)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return bool(value)
    value = coerce_value(True, value)
    if not isinstance(value, bool):
        raise ValueError(f"Event {payload.get('type')!r} needs a boolean '{key}' field")
    return value


def _number(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Event {payload.get('type')!r} needs a numeric '{key}' field")
    return value
