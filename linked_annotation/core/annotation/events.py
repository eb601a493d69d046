"""
Event system for the annotation workflow.

Provides a decoupled way for the annotation core to notify UI components
about state changes without depending on specific UI frameworks.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # Image and view events
    IMAGE_LOADED = "image_loaded"
    VIEW_CHANGED = "view_changed"

    # Box events
    BOX_CREATED = "box_created"
    BOX_UPDATED = "box_updated"
    BOX_DELETED = "box_deleted"

    # Highlight events
    HIGHLIGHT_CREATED = "highlight_created"
    HIGHLIGHT_UPDATED = "highlight_updated"
    HIGHLIGHT_DELETED = "highlight_deleted"
    HIGHLIGHTS_REBASED = "highlights_rebased"

    # Link events
    LINKED = "linked"
    UNLINKED = "unlinked"

    # Gesture events
    GESTURE_STARTED = "gesture_started"
    PREVIEW_CHANGED = "preview_changed"
    GESTURE_ENDED = "gesture_ended"

    # Session events
    SELECTION_CHANGED = "selection_changed"
    TEXT_CHANGED = "text_changed"
    ANNOTATIONS_CLEARED = "annotations_cleared"
    STATE_CHANGED = "state_changed"


@dataclass
class AnnotationEvent:
    """Event that occurs during annotation."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners and callback in self._listeners[event_type]:
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        for callback in list(self._listeners.get(event.event_type, ())):
            try:
                callback(event)
            except Exception:
                # Log but don't crash on listener errors
                logger.exception(
                    f"Error in event listener for {event.event_type.value}"
                )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
