import json
from argparse import Namespace

import cv2
import numpy as np
import pytest

from linked_annotation.cli import build_parser, get_version
from linked_annotation.cli.replay.replay import handle, read_script, run_replay


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "image.png"
    cv2.imwrite(str(path), np.zeros((200, 300, 3), dtype=np.uint8))
    return path


@pytest.fixture
def script_path(tmp_path):
    events = [
        {"type": "text_change", "text": "A red ball."},
        {"type": "text_selection", "start": 2, "end": 10},
        {"type": "pointer_down", "x": 10, "y": 10},
        {"type": "pointer_move", "x": 60, "y": 80},
        {"type": "pointer_up"},
    ]
    path = tmp_path / "events.jsonl"
    lines = ["# recorded session", ""] + [json.dumps(e) for e in events]
    path.write_text("\n".join(lines) + "\n")
    return path


def test_version():
    assert get_version() == "0.1.0"


def test_read_script_skips_comments(script_path):
    events = read_script(script_path)
    assert len(events) == 5
    assert events[0]["type"] == "text_change"


def test_read_script_rejects_bad_lines(tmp_path):
    path = tmp_path / "bad.jsonl"
    path.write_text('{"type": "pointer_up"}\nnot json\n')
    with pytest.raises(ValueError):
        read_script(path)

    path.write_text("[1, 2]\n")
    with pytest.raises(ValueError):
        read_script(path)


def test_run_replay(script_path):
    session = run_replay(np.zeros((200, 300, 3), dtype=np.uint8), read_script(script_path))

    (box,) = session.boxes
    (highlight,) = session.highlights
    assert (box.x, box.y, box.width, box.height) == (10, 10, 50, 70)
    assert box.text_ref == highlight.id
    assert highlight.text == "red ball"


def test_replay_writes_export(image_path, script_path, tmp_path):
    output = tmp_path / "out.json"
    parser = build_parser()
    args = parser.parse_args(
        ["replay", str(image_path), str(script_path), "-o", str(output), "--no-timestamp"]
    )

    args.fn(args)

    document = json.loads(output.read_text())
    assert set(document) == {"boxes", "highlights", "text"}
    assert document["text"] == "A red ball."
    assert document["boxes"][0]["textRef"] == document["highlights"][0]["id"]


def test_replay_default_output_name(image_path, script_path, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    handle(Namespace(image=image_path, script=script_path, output=None, include_timestamp=True))

    (written,) = tmp_path.glob("annotations-*.json")
    assert "exportedAt" in json.loads(written.read_text())


def test_replay_undecodable_image(tmp_path, script_path):
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")

    with pytest.raises(SystemExit) as excinfo:
        handle(Namespace(image=broken, script=script_path, output=None, include_timestamp=True))
    assert excinfo.value.code == 1


def test_replay_missing_script(image_path, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        handle(
            Namespace(
                image=image_path,
                script=tmp_path / "missing.jsonl",
                output=None,
                include_timestamp=True,
            )
        )
    assert excinfo.value.code == 1


def test_replay_malformed_event(image_path, tmp_path):
    script = tmp_path / "events.jsonl"
    script.write_text('{"type": "explode"}\n')

    with pytest.raises(SystemExit) as excinfo:
        handle(Namespace(image=image_path, script=script, output=None, include_timestamp=True))
    assert excinfo.value.code == 1
