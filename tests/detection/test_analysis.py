from __future__ import annotations

from chordsheet.detection.analysis import (
    CUSTOM_PROGRESSION_CONFIDENCE,
    analyze_progression,
    detect_key,
    score_keys,
    suggested_chords,
)
from chordsheet.detection.detector import ChordDetector
from chordsheet.detection.models import Key


def _tokens(text: str):
    return ChordDetector().detect(text)


def test_detect_key_for_pop_progression() -> None:
    key = detect_key(_tokens("C G Am F"))

    assert key == Key("C")
    assert key is not None and key.name == "C"


def test_detect_key_compares_pitch_classes() -> None:
    assert detect_key(_tokens("D A Bm G")) == Key("D")
    assert detect_key(_tokens("F Bb C Dm")) == Key("F")
    assert detect_key(_tokens("A# F Gm")) == Key("F")


def test_detect_key_needs_enough_chords() -> None:
    assert detect_key(_tokens("C G")) is None
    assert detect_key([]) is None


def test_detect_key_rejects_weak_evidence() -> None:
    assert detect_key(_tokens("C# D# F# G# A#")) is None


def test_score_keys_reports_every_supported_key() -> None:
    scores = score_keys(_tokens("C G Am F"))

    assert set(scores) == {"C", "G", "D", "A", "E", "F"}
    assert scores["C"] > scores["F"] > scores["G"]


def test_analyze_progression_finds_common_pattern() -> None:
    match = analyze_progression(_tokens("D C G Am F"))

    assert match.name == "I-V-vi-IV"
    assert match.start == 1
    assert match.confidence == 0.8


def test_analyze_progression_tolerates_one_mismatch() -> None:
    match = analyze_progression(_tokens("Am F C E"))

    assert match.name == "vi-IV-I-V"
    assert match.start == 0


def test_analyze_progression_falls_back_to_custom() -> None:
    match = analyze_progression(_tokens("E B"))

    assert match.name == "custom"
    assert match.pattern == ("E", "B")
    assert match.confidence == CUSTOM_PROGRESSION_CONFIDENCE
    assert match.start is None


def test_suggested_chords_for_detected_key() -> None:
    chords = suggested_chords(Key("G"))

    assert [chord.chord for chord in chords] == ["G", "Am", "Bm", "C", "D", "Em", "F#dim"]
    assert chords[0].degree == "I"
    assert chords[0].function == "Tonic"
    assert chords[4].function == "Dominant"
    assert suggested_chords(Key("A", minor=True)) == []
    assert suggested_chords(None) == []
