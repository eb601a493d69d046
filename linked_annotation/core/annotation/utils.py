"""
Pure utility functions for annotation logic.

These functions have no side effects and can be tested in isolation.
"""

import random
import uuid
from typing import Callable, Iterable, Optional, Sequence, Tuple

from .state import Box, Highlight

ColorProvider = Callable[[], str]


def validate_id(entity_id: Optional[str]) -> bool:
    """
    Check that an id is usable as a lookup key.

    Args:
        entity_id: Candidate id

    Returns:
        False for None, non-strings and blank strings
    """
    return isinstance(entity_id, str) and entity_id.strip() != ""


def new_id() -> str:
    """Generate an opaque unique id for a new entity."""
    return str(uuid.uuid4())


def replace_box(boxes: Sequence[Box], updated: Box) -> Tuple[Box, ...]:
    """Return a new tuple with the box sharing ``updated.id`` swapped in."""
    return tuple(updated if b.id == updated.id else b for b in boxes)


def replace_highlight(
    highlights: Sequence[Highlight], updated: Highlight
) -> Tuple[Highlight, ...]:
    """Return a new tuple with the highlight sharing ``updated.id`` swapped in."""
    return tuple(updated if h.id == updated.id else h for h in highlights)


def ids_of(entities: Iterable) -> set:
    return {e.id for e in entities}


def slice_text(text: str, start: int, end: int) -> str:
    """Substring cached on a highlight for the span [start, end)."""
    return text[start:end]


def is_blank_selection(selected: Optional[str]) -> bool:
    """Text selections that are empty or whitespace-only create nothing."""
    return not selected or not selected.strip()


class ColorPalette:
    """
    Default color palette provider.

    Picks a random color from a fixed list for every new box or highlight.
    The core only compares and copies colors, it never interprets them.
    """

    def __init__(self, colors: Sequence[str], seed: Optional[int] = None):
        if not colors:
            raise ValueError("Color palette must contain at least one color")
        self.colors = list(colors)
        self._rng = random.Random(seed)

    def __call__(self) -> str:
        return self._rng.choice(self.colors)
