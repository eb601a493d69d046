"""
Configuration settings for linked_annotation.

Every tunable constant of the geometry and linking engines lives here so the
session can be built from a single EasyDict. Values can be overridden with
``LINKANNO_`` prefixed environment variables, ``__`` separating nesting
levels (``LINKANNO_geometry__handle_size=20``).
"""
import os
from typing import Dict, Optional

from easydict import EasyDict as edict

from .utils.env import load_cfg_from_env

DEFAULT_TEXT = (
    "One human is playing ball, while another is watching. The ball is bright "
    "red and bouncing high in the air. In the background, there's a tree "
    "providing shade on this sunny day. A small dog is sitting nearby, "
    "observing the game with curiosity."
)

BOX_COLORS = [
    "#FF5733",
    "#33FF57",
    "#3357FF",
    "#FF33F5",
    "#33FFF5",
    "#F5FF33",
    "#FF3333",
    "#33FF33",
]


def get_default_config() -> edict:
    """
    Build a fresh configuration tree with the built-in defaults

    Returns:
        EasyDict with ``geometry``, ``annotation`` and ``palette`` sections
    """
    cfg = edict()

    cfg.geometry = edict()
    # Side of the square hit-region around each resize handle (content px)
    cfg.geometry.handle_size = 50
    cfg.geometry.min_box_size = 10
    cfg.geometry.min_draw_size = 5
    # Screen-pixel pan deltas are multiplied by this factor
    cfg.geometry.pan_factor = 10
    cfg.geometry.min_scale = 0.2
    cfg.geometry.max_scale = 3.0

    cfg.annotation = edict()
    cfg.annotation.auto_link = True
    cfg.annotation.default_text = DEFAULT_TEXT

    cfg.palette = edict()
    cfg.palette.colors = list(BOX_COLORS)

    return cfg


def load_config(env: Optional[Dict[str, str]] = None) -> edict:
    """Default configuration overlaid with environment overrides."""
    if env is None:
        env = dict(os.environ)
    return load_cfg_from_env(get_default_config(), env)
