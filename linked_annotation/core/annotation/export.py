"""
Export document builder.

The export is write-only: there is no matching import format.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .state import AnnotationState


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_export_document(
    state: AnnotationState,
    exported_at: Optional[datetime] = None,
    include_timestamp: bool = True,
) -> Dict[str, Any]:
    """
    Build the export document for a session snapshot

    Args:
        state: Snapshot to export
        exported_at: Export time, defaults to now
        include_timestamp: Whether to add the optional ``exportedAt`` field

    Returns:
        Dict with ``boxes``, ``highlights``, ``text`` and ``exportedAt``
    """
    document: Dict[str, Any] = {
        "boxes": [b.to_dict() for b in state.boxes],
        "highlights": [h.to_dict() for h in state.highlights],
        "text": state.text,
    }
    if include_timestamp:
        document["exportedAt"] = iso_timestamp(exported_at)
    return document


def export_filename(moment: Optional[datetime] = None) -> str:
    """Default file name for an export, e.g. ``annotations-2024-05-01.json``."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    return f"annotations-{moment.strftime('%Y-%m-%d')}.json"
