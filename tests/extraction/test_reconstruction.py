from __future__ import annotations

import math
import random

from chordsheet.extraction.models import Glyph
from chordsheet.extraction.reconstruction import (
    ReconstructionOptions,
    gap_spacing,
    group_lines,
    is_valid_glyph,
    join_pages,
    merge_fragmented_lines,
    reconstruct,
    reconstruct_page,
)


def _glyph(text: str, x: float, y: float, size: float = 12.0) -> Glyph:
    return Glyph(text=text, x=x, y=y, font_size_scale_x=size, font_size_scale_y=size)


SHEET_PAGE = [
    _glyph("C", 72, 700),
    _glyph("G", 160, 700),
    _glyph("Hello", 72, 686),
    _glyph("darkness", 112, 686),
    _glyph("Am", 72, 660),
    _glyph("F", 160, 661.5),
    _glyph("My", 72, 646),
    _glyph("old", 92, 646),
    _glyph("friend", 117, 646),
]


# ---------------------------------------------------------------------------
# Glyph handling
# ---------------------------------------------------------------------------

def test_invalid_glyphs_are_skipped() -> None:
    assert not is_valid_glyph(_glyph("", 10, 10))
    assert not is_valid_glyph(_glyph("   ", 10, 10))
    assert not is_valid_glyph(_glyph("C", math.nan, 10))
    assert not is_valid_glyph(_glyph("C", 10, math.inf))
    assert not is_valid_glyph(_glyph("C", 10, 10, size=0))
    assert is_valid_glyph(_glyph("C", 10, 10))

    page = [_glyph("C", math.nan, 700), _glyph("G", 72, 700), _glyph("", 90, 700)]
    assert reconstruct_page(page) == "G"


def test_gap_spacing_thresholds() -> None:
    hello = _glyph("Hello", 72, 700)

    assert gap_spacing(hello, _glyph("x", 108, 700)) == ""
    assert gap_spacing(hello, _glyph("x", 112, 700)) == " "
    assert gap_spacing(hello, _glyph("x", 150, 700)) == " " * 5
    assert gap_spacing(hello, _glyph("x", 500, 700)) == " " * 8


# ---------------------------------------------------------------------------
# Line grouping and ordering
# ---------------------------------------------------------------------------

def test_lines_are_ordered_top_to_bottom_and_left_to_right() -> None:
    lines = group_lines(SHEET_PAGE)

    assert [[glyph.text for glyph in line] for line in lines] == [
        ["C", "G"],
        ["Hello", "darkness"],
        ["Am", "F"],
        ["My", "old", "friend"],
    ]


def test_line_tolerance_merges_nearby_baselines() -> None:
    lines = group_lines([_glyph("A", 10, 100), _glyph("B", 40, 102.5), _glyph("C", 70, 96)])

    assert [[glyph.text for glyph in line] for line in lines] == [["A", "B"], ["C"]]


def test_reconstruction_is_deterministic_regardless_of_input_order() -> None:
    expected = reconstruct([SHEET_PAGE])
    shuffled = list(SHEET_PAGE)
    random.Random(7).shuffle(shuffled)

    assert reconstruct([shuffled]) == expected
    assert reconstruct([SHEET_PAGE]) == expected


def test_chord_sheet_layout_is_preserved() -> None:
    text = reconstruct([SHEET_PAGE])

    assert text.splitlines() == [
        "C        G",
        "Hello darkness",
        "Am        F",
        "My old friend",
    ]


# ---------------------------------------------------------------------------
# Merging and page joining
# ---------------------------------------------------------------------------

def test_fragmented_lines_are_merged() -> None:
    assert merge_fragmented_lines("when the night\nhas come") == "when the night has come"
    assert merge_fragmented_lines("the end.\nand again") == "the end.\nand again"
    assert merge_fragmented_lines("first line\nSecond line") == "first line\nSecond line"
    assert merge_fragmented_lines("lyrics here\nAm G") == "lyrics here\nAm G"
    assert "\n" not in merge_fragmented_lines("some-\nthing")


def test_long_lines_are_not_merged() -> None:
    long_line = "x" * 60
    assert merge_fragmented_lines(f"{long_line}\nmore") == f"{long_line}\nmore"


def test_join_pages_adds_markers_between_non_empty_pages() -> None:
    assert join_pages(["C G", "", "Am F"]) == "C G\n--- Page 3 ---\nAm F"
    assert join_pages(["", "Am F"]) == "Am F"
    assert join_pages(["C G", "Am F"], ReconstructionOptions(page_markers=False)) == "C G\nAm F"


def test_empty_input_reconstructs_to_empty_string() -> None:
    assert reconstruct([]) == ""
    assert reconstruct([[], []]) == ""
    assert reconstruct([[_glyph(" ", 10, 10)]]) == ""


def test_merge_can_be_disabled() -> None:
    page = [_glyph("when", 72, 700), _glyph("the", 72, 680)]

    assert reconstruct([page]) == "when the"
    assert reconstruct([page], ReconstructionOptions(merge_lines=False)) == "when\nthe"
