"""
Tests for the offset rebaser.
"""

import pytest

from linked_annotation.core.annotation.rebase import (
    TextEdit,
    find_text_diff,
    rebase_highlights,
    rebase_span,
)
from linked_annotation.core.annotation.state import Highlight


def make_highlight(text, start, end, hid="h", box_ref=None):
    return Highlight(hid, start, end, text[start:end], "#fff", box_ref)


class TestFindTextDiff:
    def test_insertion(self):
        assert find_text_diff("abcdef", "abXYcdef") == TextEdit(2, "", "XY")

    def test_deletion(self):
        assert find_text_diff("abcdef", "abef") == TextEdit(2, "cd", "")

    def test_replacement(self):
        edit = find_text_diff("abcdef", "abcXYZef")
        assert edit == TextEdit(3, "d", "XYZ")
        assert edit.delta == 2
        assert edit.removed_end == 4

    def test_identical(self):
        assert find_text_diff("abc", "abc") == TextEdit(3, "", "")

    def test_repeated_characters_do_not_overlap(self):
        # Suffix trimming never crosses the common prefix
        edit = find_text_diff("aaa", "aaaa")
        assert edit == TextEdit(3, "", "a")

    def test_from_and_to_empty(self):
        assert find_text_diff("", "abc") == TextEdit(0, "", "abc")
        assert find_text_diff("abc", "") == TextEdit(0, "abc", "")


class TestRebaseSpan:
    def test_edit_after_span(self):
        assert rebase_span(1, 3, TextEdit(5, "x", "")) == (1, 3)

    def test_edit_before_span(self):
        assert rebase_span(4, 6, TextEdit(0, "", "ab")) == (6, 8)

    def test_edit_at_span_end_extends(self):
        assert rebase_span(1, 3, TextEdit(3, "", "xy")) == (1, 5)

    def test_removal_eating_span_head(self):
        # "abcdef" [2, 5) "cde", remove "bcd"
        assert rebase_span(2, 5, TextEdit(1, "bcd", "")) == (1, 2)

    def test_overtype_first_character_keeps_span(self):
        # "abcdef" [2, 4) "cd", replace "c" with "X"
        assert rebase_span(2, 4, TextEdit(2, "c", "X")) == (2, 4)

    def test_replacement_eating_span_head(self):
        # "abcdef" [2, 5) "cde", replace "bcd" with "XY"
        assert rebase_span(2, 5, TextEdit(1, "bcd", "XY")) == (1, 4)


class TestRebaseHighlights:
    def test_noop(self):
        text = "abcdef"
        highlights = (make_highlight(text, 1, 3, "a"), make_highlight(text, 3, 6, "b"))

        assert rebase_highlights(text, text, highlights) == highlights
        assert rebase_highlights(text, text, list(highlights)) == list(highlights)

    def test_insert_before_shifts(self):
        highlights = [make_highlight("abcdef", 2, 4)]

        rebased = rebase_highlights("abcdef", "abXYcdef", highlights)

        assert [(h.start, h.end, h.text) for h in rebased] == [(4, 6, "cd")]

    def test_replace_inside_grows(self):
        highlights = [make_highlight("abcdef", 1, 5)]

        rebased = rebase_highlights("abcdef", "abcXYZef", highlights)

        assert [(h.start, h.end, h.text) for h in rebased] == [(1, 7, "bcXYZe")]

    def test_overtype_first_character(self):
        highlights = [make_highlight("abcdef", 2, 4)]

        rebased = rebase_highlights("abcdef", "abXdef", highlights)

        assert [(h.start, h.end, h.text) for h in rebased] == [(2, 4, "Xd")]

    def test_deleting_whole_span_drops_highlight(self):
        highlights = [make_highlight("abcdef", 2, 4, box_ref="box")]

        assert rebase_highlights("abcdef", "abef", highlights) == []

    def test_deleting_past_end_of_text_drops(self):
        highlights = [make_highlight("abcdef", 3, 6)]

        assert rebase_highlights("abcdef", "ab", highlights) == []

    def test_keeps_ids_colors_and_links(self):
        highlights = (make_highlight("hello world", 6, 11, "w", box_ref="box"),)

        (rebased,) = rebase_highlights("hello world", "hello big world", highlights)

        assert rebased.id == "w"
        assert rebased.box_ref == "box"
        assert rebased.color == "#fff"
        assert rebased.text == "world"

    @pytest.mark.parametrize(
        "old,new",
        [
            ("The red ball", "The big red ball"),
            ("The red ball", "The ball"),
            ("The red ball", "A red ball!"),
            ("The red ball", ""),
        ],
    )
    def test_surviving_highlights_match_new_text(self, old, new):
        highlights = [
            make_highlight(old, 0, 3, "a"),
            make_highlight(old, 4, 7, "b"),
            make_highlight(old, 8, 12, "c"),
        ]

        for h in rebase_highlights(old, new, highlights):
            assert 0 <= h.start < h.end <= len(new)
            assert h.text == new[h.start:h.end]
