"""
Offset rebasing for text highlights.

Repositions highlight spans after a single contiguous edit of the text
buffer, the way an editor moves its live markers.
"""

from dataclasses import replace
from typing import NamedTuple, Sequence, Tuple

from .state import Highlight


class TextEdit(NamedTuple):
    """Single contiguous edit turning one text into another."""

    index: int
    removed: str
    added: str

    @property
    def delta(self) -> int:
        return len(self.added) - len(self.removed)

    @property
    def removed_end(self) -> int:
        """End offset (exclusive) of the removed region in the old text."""
        return self.index + len(self.removed)


def find_text_diff(old_text: str, new_text: str) -> TextEdit:
    """
    Locate the edit window between two texts.

    The common prefix is trimmed first, then the common suffix of what is
    left, so the suffix never overlaps the prefix.

    Args:
        old_text: Text before the edit
        new_text: Text after the edit

    Returns:
        TextEdit with the edit index and the removed/added substrings
    """
    start = 0
    limit = min(len(old_text), len(new_text))
    while start < limit and old_text[start] == new_text[start]:
        start += 1

    end_old = len(old_text) - 1
    end_new = len(new_text) - 1
    while end_old >= start and end_new >= start and old_text[end_old] == new_text[end_new]:
        end_old -= 1
        end_new -= 1

    return TextEdit(
        index=start,
        removed=old_text[start:end_old + 1],
        added=new_text[start:end_new + 1],
    )


def rebase_span(start: int, end: int, edit: TextEdit) -> Tuple[int, int]:
    """
    Move the span [start, end) across ``edit``.

    - edit at or before the span: the whole span shifts by the edit delta,
      but the start never moves before the edit index, so a removal eating
      into the head of the span shortens it instead
    - edit inside or at the tail of the span: start stays, end shifts
    - edit after the span: unchanged

    The result may be empty or out of bounds; callers drop such spans.
    """
    delta = edit.delta
    if edit.index <= start:
        return max(edit.index, start + delta), end + delta
    if edit.index <= end:
        return start, end + delta
    return start, end


def rebase_highlights(
    old_text: str, new_text: str, highlights: Sequence[Highlight]
) -> Sequence[Highlight]:
    """
    Recompute highlight offsets after the text changed from ``old_text`` to
    ``new_text``.

    Highlights whose span collapses or leaves the new text are dropped; this
    is the only way an edit removes highlights. Callers must clear the
    ``text_ref`` of boxes linked to a dropped highlight.

    Args:
        old_text: Text before the edit
        new_text: Text after the edit
        highlights: Current highlights, in order

    Returns:
        Surviving highlights with refreshed text caches, as a new list when
        a list was given and as a tuple otherwise
    """
    edit = find_text_diff(old_text, new_text)

    rebased = []
    for h in highlights:
        start, end = rebase_span(h.start, h.end, edit)
        if end <= start or start < 0 or end > len(new_text):
            continue
        rebased.append(replace(h, start=start, end=end, text=new_text[start:end]))
    if isinstance(highlights, list):
        return rebased
    return tuple(rebased)
