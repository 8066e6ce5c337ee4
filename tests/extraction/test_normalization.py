from __future__ import annotations

from chordsheet.extraction.normalization import (
    fold_punctuation,
    normalize_line_breaks,
    normalize_sheet_text,
    normalize_whitespace,
)


def test_fold_punctuation_to_ascii() -> None:
    assert fold_punctuation("“Hi”—there…") == '"Hi"--there...'
    assert fold_punctuation("don’t stop") == "don't stop"
    assert fold_punctuation("C–G") == "C-G"


def test_line_breaks_are_unified() -> None:
    assert normalize_line_breaks("a\r\nb\rc\fd") == "a\nb\nc\nd"


def test_sheet_normalization_keeps_layout() -> None:
    text = "C\t    G\r\nla\x07 la"

    assert normalize_sheet_text(text) == "C     G\nla la"


def test_normalize_whitespace_collapses_runs() -> None:
    assert normalize_whitespace("  a \n  b\t c ") == "a b c"
