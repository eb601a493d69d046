"""
Linking engine.

Pure functions that link, unlink and delete boxes and highlights while
keeping the one-to-one, bidirectional link invariant. Each operation takes
an ``AnnotationState`` and returns a ``LinkResult`` carrying the new state
and an explicit outcome; rejected operations hand back the input state
untouched. The session collapses failures into logged no-ops.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .state import AnnotationState, Box, Highlight
from .utils import validate_id


class LinkOutcome(Enum):
    OK = "ok"
    INVALID_ID = "invalid_id"
    UNKNOWN_BOX = "unknown_box"
    UNKNOWN_HIGHLIGHT = "unknown_highlight"
    NOT_LINKED = "not_linked"


@dataclass(frozen=True)
class LinkResult:
    state: AnnotationState
    outcome: LinkOutcome

    @property
    def ok(self) -> bool:
        return self.outcome is LinkOutcome.OK


class ColorSource(Enum):
    BOX = "box"
    HIGHLIGHT = "highlight"


# Which side's color both partners take after an operation. None keeps the
# colors as they are.
COLOR_MERGE_RULES: Dict[str, Optional[ColorSource]] = {
    "link": ColorSource.HIGHLIGHT,
    "unlink": None,
}


def merged_color(operation: str, box: Box, highlight: Highlight) -> Optional[str]:
    """Shared color for ``operation`` according to ``COLOR_MERGE_RULES``."""
    source = COLOR_MERGE_RULES.get(operation)
    if source is ColorSource.HIGHLIGHT:
        return highlight.color
    if source is ColorSource.BOX:
        return box.color
    return None


def link(state: AnnotationState, box_id: str, highlight_id: str) -> LinkResult:
    """
    Link a box with a highlight.

    Any link either entity already holds is broken first, so linking
    steals partners. Both entities end up with the color chosen by
    ``COLOR_MERGE_RULES``.

    Args:
        state: Current state
        box_id: Box to link
        highlight_id: Highlight to link

    Returns:
        LinkResult with the new state on success
    """
    if not validate_id(box_id) or not validate_id(highlight_id):
        return LinkResult(state, LinkOutcome.INVALID_ID)

    box = state.get_box(box_id)
    if box is None:
        return LinkResult(state, LinkOutcome.UNKNOWN_BOX)
    highlight = state.get_highlight(highlight_id)
    if highlight is None:
        return LinkResult(state, LinkOutcome.UNKNOWN_HIGHLIGHT)

    color = merged_color("link", box, highlight)

    boxes = []
    for b in state.boxes:
        if b.id == box_id:
            b = replace(b, text_ref=highlight_id, color=b.color if color is None else color)
        elif b.text_ref == highlight_id:
            b = replace(b, text_ref=None)
        boxes.append(b)

    highlights = []
    for h in state.highlights:
        if h.id == highlight_id:
            h = replace(h, box_ref=box_id, color=h.color if color is None else color)
        elif h.box_ref == box_id:
            h = replace(h, box_ref=None)
        highlights.append(h)

    return LinkResult(
        replace(state, boxes=tuple(boxes), highlights=tuple(highlights)),
        LinkOutcome.OK,
    )


def unlink(state: AnnotationState, box_id: str, highlight_id: str) -> LinkResult:
    """
    Break the link between a box and a highlight.

    Only acts when both references point at each other; colors are left as
    they are.
    """
    if not validate_id(box_id) or not validate_id(highlight_id):
        return LinkResult(state, LinkOutcome.INVALID_ID)

    box = state.get_box(box_id)
    if box is None:
        return LinkResult(state, LinkOutcome.UNKNOWN_BOX)
    highlight = state.get_highlight(highlight_id)
    if highlight is None:
        return LinkResult(state, LinkOutcome.UNKNOWN_HIGHLIGHT)
    if box.text_ref != highlight_id or highlight.box_ref != box_id:
        return LinkResult(state, LinkOutcome.NOT_LINKED)

    boxes = tuple(
        replace(b, text_ref=None) if b.id == box_id else b for b in state.boxes
    )
    highlights = tuple(
        replace(h, box_ref=None) if h.id == highlight_id else h
        for h in state.highlights
    )
    return LinkResult(
        replace(state, boxes=boxes, highlights=highlights), LinkOutcome.OK
    )


def delete_box(state: AnnotationState, box_id: str) -> LinkResult:
    """Remove a box, detach its partner highlight and clear the box selection."""
    if not validate_id(box_id):
        return LinkResult(state, LinkOutcome.INVALID_ID)
    if state.get_box(box_id) is None:
        return LinkResult(state, LinkOutcome.UNKNOWN_BOX)

    boxes = tuple(b for b in state.boxes if b.id != box_id)
    highlights = state.highlights
    if any(h.box_ref == box_id for h in highlights):
        highlights = tuple(
            replace(h, box_ref=None) if h.box_ref == box_id else h
            for h in highlights
        )
    return LinkResult(
        replace(state, boxes=boxes, highlights=highlights, active_box=None),
        LinkOutcome.OK,
    )


def delete_highlight(state: AnnotationState, highlight_id: str) -> LinkResult:
    """Remove a highlight, detach its partner box and clear the highlight selection."""
    if not validate_id(highlight_id):
        return LinkResult(state, LinkOutcome.INVALID_ID)
    if state.get_highlight(highlight_id) is None:
        return LinkResult(state, LinkOutcome.UNKNOWN_HIGHLIGHT)

    highlights = tuple(h for h in state.highlights if h.id != highlight_id)
    boxes = state.boxes
    if any(b.text_ref == highlight_id for b in boxes):
        boxes = tuple(
            replace(b, text_ref=None) if b.text_ref == highlight_id else b
            for b in boxes
        )
    return LinkResult(
        replace(
            state, boxes=boxes, highlights=highlights, active_highlight=None
        ),
        LinkOutcome.OK,
    )


def detach_boxes_from(state: AnnotationState, highlight_ids: Iterable[str]) -> AnnotationState:
    """
    Clear ``text_ref`` on every box pointing at one of ``highlight_ids``.

    Used after a rebase dropped highlights. Returns the same state object
    when no box referenced a dropped highlight.
    """
    dropped = set(highlight_ids)
    if not dropped or not any(b.text_ref in dropped for b in state.boxes):
        return state
    boxes = tuple(
        replace(b, text_ref=None) if b.text_ref in dropped else b
        for b in state.boxes
    )
    return replace(state, boxes=boxes)


def find_link_violations(state: AnnotationState) -> List[str]:
    """
    List every broken link invariant in ``state``.

    An empty list means links are symmetric, one-to-one and color-consistent.
    """
    problems = []
    highlights = {h.id: h for h in state.highlights}
    boxes = {b.id: b for b in state.boxes}

    seen_refs = set()
    for b in state.boxes:
        if b.text_ref is None:
            continue
        if b.text_ref in seen_refs:
            problems.append(f"highlight {b.text_ref} referenced by several boxes")
        seen_refs.add(b.text_ref)
        h = highlights.get(b.text_ref)
        if h is None:
            problems.append(f"box {b.id} references missing highlight {b.text_ref}")
        elif h.box_ref != b.id:
            problems.append(f"box {b.id} -> {h.id} is not mirrored")
        elif h.color != b.color:
            problems.append(f"box {b.id} and highlight {h.id} differ in color")

    for h in state.highlights:
        if h.box_ref is None:
            continue
        b = boxes.get(h.box_ref)
        if b is None:
            problems.append(f"highlight {h.id} references missing box {h.box_ref}")
        elif b.text_ref != h.id:
            problems.append(f"highlight {h.id} -> {b.id} is not mirrored")

    return problems
