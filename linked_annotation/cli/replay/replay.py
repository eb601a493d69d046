import json
import logging
import sys
from gettext import gettext as _
from pathlib import Path
from typing import Any, Dict, Iterable, List

import cv2
import numpy as np

from linked_annotation.config import load_config
from linked_annotation.core.annotation import AnnotationSession
from linked_annotation.core.annotation.export import export_filename
from linked_annotation.interfaces import EventScriptAdapter

logger = logging.getLogger(__name__)


def read_script(script_path: Path) -> List[Dict[str, Any]]:
    """
    Parse a JSON-lines event script.

    Blank lines and lines starting with ``#`` are skipped.

    Raises:
        ValueError: On a line that is not a JSON object
    """
    events = []
    with open(script_path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(
                    _("Line {lineno}: invalid JSON ({error})").format(lineno=lineno, error=e)
                ) from e
            if not isinstance(event, dict):
                raise ValueError(
                    _("Line {lineno}: event must be a JSON object").format(lineno=lineno)
                )
            events.append(event)
    return events


def run_replay(
    image: np.ndarray, events: Iterable[Dict[str, Any]], cfg=None
) -> AnnotationSession:
    """Load ``image`` into a fresh session and apply every event in order."""
    session = AnnotationSession(cfg)
    session.load_image(image)
    adapter = EventScriptAdapter(session)
    for event in events:
        adapter.dispatch(event)
    logger.debug(f"Replayed {adapter.dispatched} event(s)")
    return session


def handle(args):
    image = cv2.imread(str(args.image))
    if image is None:
        logger.error(_("Cannot decode image {image}").format(image=args.image))
        sys.exit(1)
    image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    try:
        events = read_script(args.script)
    except OSError as e:
        logger.error(_("Cannot read script {script}: {error}").format(script=args.script, error=e))
        sys.exit(1)
    except ValueError as e:
        logger.error(_("Malformed script {script}: {error}").format(script=args.script, error=e))
        sys.exit(1)

    try:
        session = run_replay(image, events, load_config())
    except ValueError as e:
        logger.error(_("Replay failed: {error}").format(error=e))
        sys.exit(1)

    output = args.output
    if output is None:
        output = Path(export_filename())
    document = session.export(include_timestamp=args.include_timestamp)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
    logger.info(
        _("Exported {boxes} box(es) and {highlights} highlight(s) to {output}").format(
            boxes=len(document["boxes"]),
            highlights=len(document["highlights"]),
            output=output,
        )
    )
