"""
Tests for the export document.
"""

import json
from datetime import datetime, timedelta, timezone

from linked_annotation.core.annotation.export import (
    build_export_document,
    export_filename,
    iso_timestamp,
)
from linked_annotation.core.annotation.state import AnnotationState, Box, Highlight


def test_iso_timestamp():
    moment = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
    assert iso_timestamp(moment) == "2024-05-01T12:30:45.123Z"


def test_iso_timestamp_converts_to_utc():
    moment = datetime(2024, 5, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert iso_timestamp(moment) == "2024-05-01T12:00:00.000Z"


def test_export_filename():
    assert export_filename(datetime(2024, 5, 1)) == "annotations-2024-05-01.json"


def test_build_export_document():
    state = AnnotationState(
        boxes=(Box("b", 1.5, 2, 30, 40, "#c", text_ref="h"),),
        highlights=(Highlight("h", 4, 7, "red", "#c", box_ref="b"),),
        text="The red ball",
        active_box="b",
    )

    document = build_export_document(state, datetime(2024, 5, 1, tzinfo=timezone.utc))

    assert set(document) == {"boxes", "highlights", "text", "exportedAt"}
    assert document["boxes"] == [
        {
            "id": "b",
            "x": 1.5,
            "y": 2,
            "width": 30,
            "height": 40,
            "color": "#c",
            "textRef": "h",
        }
    ]
    assert document["highlights"] == [
        {"id": "h", "start": 4, "end": 7, "text": "red", "color": "#c", "boxRef": "b"}
    ]
    assert document["text"] == "The red ball"
    json.dumps(document)


def test_build_export_document_without_timestamp():
    document = build_export_document(AnnotationState(), include_timestamp=False)
    assert document == {"boxes": [], "highlights": [], "text": ""}
