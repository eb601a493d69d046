"""
State management for annotation sessions.

Contains the immutable data classes for boxes, highlights and the whole
session snapshot. Every edit goes through ``dataclasses.replace`` so a changed
collection always has a new identity.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class Box:
    """Rectangular region over the image, in content-space coordinates."""

    id: str
    x: float
    y: float
    width: float
    height: float
    color: str
    text_ref: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return self.text_ref is not None

    def with_geometry(self, x: float, y: float, width: float, height: float) -> "Box":
        """Copy of this box with new geometry; color and link are kept."""
        return replace(self, x=x, y=y, width=width, height=height)

    def to_dict(self):
        """Convert to dictionary for export."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "color": self.color,
            "textRef": self.text_ref,
        }


@dataclass(frozen=True)
class Highlight:
    """Character-offset span over the text buffer."""

    id: str
    start: int
    end: int
    text: str
    color: str
    box_ref: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return self.box_ref is not None

    def is_valid_for(self, text: str) -> bool:
        """Whether the span is non-empty and inside ``text``."""
        return 0 <= self.start < self.end <= len(text)

    def to_dict(self):
        """Convert to dictionary for export."""
        return {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "color": self.color,
            "boxRef": self.box_ref,
        }


class SelectionMode(Enum):
    """How a text selection in read mode is interpreted."""

    CREATE = "create"
    EXTEND = "extend"
    REDUCE = "reduce"


@dataclass(frozen=True)
class AnnotationState:
    """
    Complete snapshot of an annotation session.

    Boxes are kept in creation order, which is also the paint order: later
    boxes occlude earlier ones during hit-testing.
    """

    boxes: Tuple[Box, ...] = ()
    highlights: Tuple[Highlight, ...] = ()
    active_box: Optional[str] = None
    active_highlight: Optional[str] = None
    auto_link: bool = True
    is_edit_mode: bool = False
    text: str = ""
    image_shape: Optional[Tuple[int, ...]] = None
    selection_mode: SelectionMode = SelectionMode.CREATE

    def get_box(self, box_id: Optional[str]) -> Optional[Box]:
        if not box_id:
            return None
        for box in self.boxes:
            if box.id == box_id:
                return box
        return None

    def get_highlight(self, highlight_id: Optional[str]) -> Optional[Highlight]:
        if not highlight_id:
            return None
        for highlight in self.highlights:
            if highlight.id == highlight_id:
                return highlight
        return None

    @property
    def canvas_size(self) -> Optional[Tuple[int, int]]:
        """(width, height) of the loaded image, which is also the canvas size."""
        if self.image_shape is None:
            return None
        height, width = self.image_shape[:2]
        return (width, height)

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "boxes": [b.to_dict() for b in self.boxes],
            "highlights": [h.to_dict() for h in self.highlights],
            "activeBox": self.active_box,
            "activeHighlight": self.active_highlight,
            "autoLink": self.auto_link,
            "isEditMode": self.is_edit_mode,
            "text": self.text,
        }
