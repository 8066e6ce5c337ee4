"""Canonical data structures shared by detection, analysis and transposition."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class ChordType(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    AUGMENTED = "augmented"
    SUSPENDED = "suspended"
    EXTENDED = "extended"
    ADDED = "added"
    OTHER = "other"


class AnalysisStatus(str, Enum):
    CHORDS_DETECTED = "chords_detected"
    NO_CHORDS_DETECTED = "no_chords_detected"


@dataclass(frozen=True, slots=True)
class ChordToken:
    """One chord occurrence located in the text it was detected in.

    ``position`` and ``length`` always refer to the span of ``original_text`` in
    the detected text; transposed tokens keep them so presentation layers can
    highlight the original span.
    """

    original_text: str
    note: str
    suffix: str = ""
    bass_note: str | None = None
    position: int = 0
    length: int = 0
    confidence: float = 1.0
    chord_type: ChordType = ChordType.MAJOR
    is_complex: bool = False

    @property
    def text(self) -> str:
        """Printable chord built from its current components, e.g. ``Am7/G``."""
        return build_chord_string(self.note, self.suffix, self.bass_note)

    @property
    def end(self) -> int:
        return self.position + self.length

    @property
    def has_bass_note(self) -> bool:
        return self.bass_note is not None

    def with_notes(self, note: str, bass_note: str | None) -> "ChordToken":
        return replace(self, note=note, bass_note=bass_note)

    def to_dict(self) -> dict[str, object]:
        return {
            "original": self.original_text,
            "text": self.text,
            "note": self.note,
            "suffix": self.suffix,
            "bass_note": self.bass_note,
            "position": self.position,
            "length": self.length,
            "confidence": round(self.confidence, 3),
            "type": self.chord_type.value,
            "is_complex": self.is_complex,
        }


@dataclass(frozen=True, slots=True)
class Key:
    """A musical key: root spelling plus major/minor mode."""

    root: str
    minor: bool = False

    @property
    def name(self) -> str:
        return f"{self.root}m" if self.minor else self.root

    @classmethod
    def parse(cls, value: str) -> "Key":
        """Parse ``"Am"``/``"F#"``-style key names; a trailing ``m`` marks minor."""

        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Key name cannot be empty")
        if cleaned.endswith("m") and not cleaned.endswith("maj"):
            return cls(root=cleaned[:-1], minor=True)
        return cls(root=cleaned)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class ProgressionMatch:
    name: str
    pattern: tuple[str, ...]
    confidence: float
    start: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "pattern": list(self.pattern),
            "confidence": self.confidence,
            "start": self.start,
        }


@dataclass(slots=True)
class DetectionStats:
    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_note: dict[str, int] = field(default_factory=dict)
    basic: int = 0
    complex: int = 0
    average_confidence: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "by_type": dict(self.by_type),
            "by_note": dict(self.by_note),
            "basic": self.basic,
            "complex": self.complex,
            "average_confidence": round(self.average_confidence, 3),
        }


def build_chord_string(note: str, suffix: str, bass_note: str | None) -> str:
    chord = f"{note}{suffix or ''}"
    if bass_note:
        chord += f"/{bass_note}"
    return chord
