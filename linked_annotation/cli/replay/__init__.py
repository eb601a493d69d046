from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Replay a recorded event script over an image and export the annotations")


def command(subparser):
    subparser.add_argument("image", type=Path, help=_("Image to annotate"))
    subparser.add_argument(
        "script",
        type=Path,
        help=_("JSON-lines file with one UI event per line"),
    )
    subparser.add_argument(
        "-o",
        "--output",
        dest="output",
        type=Path,
        help=_("Where to save the export document (default: annotations-<date>.json)"),
    )
    subparser.add_argument(
        "--no-timestamp",
        dest="include_timestamp",
        action="store_false",
        help=_("Leave the exportedAt field out of the document"),
    )

    def handle(args):
        from .replay import handle as replay_handle

        replay_handle(args)

    return handle
