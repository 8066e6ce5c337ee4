"""Key detection and progression matching over detected chord tokens."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

from chordsheet.detection.models import ChordToken, Key, ProgressionMatch
from chordsheet.theory.notes import note_index

logger = logging.getLogger(__name__)

MIN_CHORDS_FOR_KEY = 3
KEY_ACCEPTANCE_THRESHOLD = 0.6
MINOR_DEGREE_CREDIT = 0.8
PROGRESSION_AGREEMENT = 0.75
MATCHED_PROGRESSION_CONFIDENCE = 0.8
CUSTOM_PROGRESSION_CONFIDENCE = 0.5

# Diatonic chords of each supported major key, in degree order.
KEY_PATTERNS: dict[str, tuple[str, ...]] = {
    "C": ("C", "Dm", "Em", "F", "G", "Am", "Bdim"),
    "G": ("G", "Am", "Bm", "C", "D", "Em", "F#dim"),
    "D": ("D", "Em", "F#m", "G", "A", "Bm", "C#dim"),
    "A": ("A", "Bm", "C#m", "D", "E", "F#m", "G#dim"),
    "E": ("E", "F#m", "G#m", "A", "B", "C#m", "D#dim"),
    "F": ("F", "Gm", "Am", "Bb", "C", "Dm", "Edim"),
}

COMMON_PROGRESSIONS: dict[str, tuple[str, ...]] = {
    "I-V-vi-IV": ("C", "G", "Am", "F"),
    "vi-IV-I-V": ("Am", "F", "C", "G"),
    "I-vi-IV-V": ("C", "Am", "F", "G"),
    "ii-V-I": ("Dm", "G", "C"),
}

SCALE_DEGREES = ("I", "ii", "iii", "IV", "V", "vi", "vii°")
HARMONIC_FUNCTIONS = ("Tonic", "Supertonic", "Mediant", "Subdominant", "Dominant", "Submediant", "Leading tone")


@dataclass(frozen=True, slots=True)
class DiatonicChord:
    chord: str
    degree: str
    function: str

    def to_dict(self) -> dict[str, str]:
        return {"chord": self.chord, "degree": self.degree, "function": self.function}


def _split_root(chord: str) -> tuple[str, str]:
    root = chord[:2] if len(chord) > 1 and chord[1] in "#b" else chord[:1]
    return root, chord[len(root) :]


def _degree_indexes(pattern: Sequence[str]) -> tuple[set[int], set[int]]:
    major_roots: set[int] = set()
    minor_roots: set[int] = set()
    for chord in pattern:
        root, suffix = _split_root(chord)
        index = note_index(root)
        if index is None:
            continue
        if suffix == "":
            major_roots.add(index)
        elif suffix == "m":
            minor_roots.add(index)
    return major_roots, minor_roots


_KEY_DEGREES = {key: _degree_indexes(pattern) for key, pattern in KEY_PATTERNS.items()}


def score_keys(tokens: Sequence[ChordToken]) -> dict[str, float]:
    """Score every supported key by how many detected roots fall inside it."""

    roots = [note_index(token.note) for token in tokens]
    scores: dict[str, float] = {}
    for key, (major_roots, minor_roots) in _KEY_DEGREES.items():
        score = 0.0
        for root in roots:
            if root in major_roots:
                score += 1.0
            elif root in minor_roots:
                score += MINOR_DEGREE_CREDIT
        scores[key] = score / len(roots) if roots else 0.0
    return scores


def detect_key(tokens: Sequence[ChordToken]) -> Key | None:
    """Return the best-scoring major key, or None without enough evidence."""

    if len(tokens) < MIN_CHORDS_FOR_KEY:
        return None

    scores = score_keys(tokens)
    best_key: str | None = None
    best_score = KEY_ACCEPTANCE_THRESHOLD
    for key, score in scores.items():
        if score > best_score:
            best_key = key
            best_score = score

    logger.debug("Key scores: %s -> %s", scores, best_key)
    return Key(root=best_key) if best_key is not None else None


def _matching_window(progression: Sequence[str], pattern: Sequence[str]) -> int | None:
    if len(progression) < len(pattern):
        return None

    required = len(pattern) * PROGRESSION_AGREEMENT
    for start in range(len(progression) - len(pattern) + 1):
        window = progression[start : start + len(pattern)]
        agreements = sum(1 for actual, expected in zip(window, pattern) if actual == expected)
        if agreements >= required:
            return start
    return None


def analyze_progression(tokens: Sequence[ChordToken]) -> ProgressionMatch:
    """Match the chord sequence against well-known progressions."""

    progression = tuple(f"{token.note}{token.suffix}" for token in tokens)
    for name, pattern in COMMON_PROGRESSIONS.items():
        start = _matching_window(progression, pattern)
        if start is not None:
            return ProgressionMatch(
                name=name,
                pattern=pattern,
                confidence=MATCHED_PROGRESSION_CONFIDENCE,
                start=start,
            )

    return ProgressionMatch(name="custom", pattern=progression, confidence=CUSTOM_PROGRESSION_CONFIDENCE)


def suggested_chords(key: Key | None) -> list[DiatonicChord]:
    """Diatonic chords of a supported major key with degree and function."""

    if key is None or key.minor or key.root not in KEY_PATTERNS:
        return []
    return [
        DiatonicChord(chord=chord, degree=degree, function=function)
        for chord, degree, function in zip(KEY_PATTERNS[key.root], SCALE_DEGREES, HARMONIC_FUNCTIONS)
    ]
