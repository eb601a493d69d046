"""
Core annotation module - UI-agnostic box/highlight linking logic.

This module provides the session, the immutable state and the pure engines
(linking, offset rebasing, export) that any UI can drive.
"""

from .session import AnnotationSession
from .events import AnnotationEvent, EventType, EventEmitter
from .linking import LinkOutcome, LinkResult, find_link_violations
from .rebase import TextEdit, find_text_diff, rebase_highlights
from .state import AnnotationState, Box, Highlight, SelectionMode
from .utils import ColorPalette

__all__ = [
    "AnnotationSession",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "AnnotationState",
    "Box",
    "Highlight",
    "SelectionMode",
    "LinkOutcome",
    "LinkResult",
    "find_link_violations",
    "TextEdit",
    "find_text_diff",
    "rebase_highlights",
    "ColorPalette",
]
