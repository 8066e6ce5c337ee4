from __future__ import annotations

import pytest

from chordsheet.detection.models import ChordToken, ChordType, Key, build_chord_string


def test_key_parse_and_name() -> None:
    assert Key.parse("Am") == Key("A", minor=True)
    assert Key.parse(" F#m ").name == "F#m"
    assert Key.parse("Bb") == Key("Bb")
    assert str(Key("C")) == "C"
    with pytest.raises(ValueError):
        Key.parse("  ")


def test_chord_token_text_tracks_current_notes() -> None:
    token = ChordToken(
        original_text="Am7/G",
        note="A",
        suffix="m7",
        bass_note="G",
        position=4,
        length=5,
        chord_type=ChordType.MINOR,
        is_complex=True,
    )

    moved = token.with_notes("B", "A")

    assert token.text == "Am7/G"
    assert moved.text == "Bm7/A"
    assert moved.original_text == "Am7/G"
    assert moved.end == 9
    assert moved.to_dict()["type"] == "minor"


def test_build_chord_string() -> None:
    assert build_chord_string("C", "", None) == "C"
    assert build_chord_string("F#", "m", "E") == "F#m/E"
