"""
Test fixtures and utilities for linked annotation tests.

Provides reusable fixtures for images, palettes and sessions.
"""

import itertools

import numpy as np
import pytest

from linked_annotation.config import get_default_config

TEST_TEXT = "The red ball bounces high while a small dog watches."


@pytest.fixture
def test_image():
    """Create a blank RGB image, 600 wide and 400 high."""
    return np.zeros((400, 600, 3), dtype=np.uint8)


@pytest.fixture
def palette():
    """Deterministic color provider cycling through distinct colors."""
    colors = itertools.cycle(["#000001", "#000002", "#000003", "#000004", "#000005"])
    return lambda: next(colors)


@pytest.fixture
def cfg():
    return get_default_config()


@pytest.fixture
def session(cfg, palette):
    """Session without an image, seeded with ``TEST_TEXT``."""
    from linked_annotation.core.annotation import AnnotationSession

    return AnnotationSession(cfg, palette=palette, text=TEST_TEXT)


@pytest.fixture
def loaded_session(session, test_image):
    """Session with ``test_image`` loaded; screen and content coordinates coincide."""
    session.load_image(test_image, "test.png")
    return session


@pytest.fixture
def draw_box():
    """Draw a box on a session with a full pointer gesture and return it."""

    def draw(session, x, y, width, height):
        session.pointer_down(x, y)
        session.pointer_move(x + width, y + height)
        return session.pointer_up()

    return draw


@pytest.fixture
def select_text():
    """Create a highlight over the first occurrence of a word."""

    def select(session, word):
        start = session.text.index(word)
        return session.handle_text_selection(start, start + len(word))

    return select
