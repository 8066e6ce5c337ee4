"""Pitch-class tables shared by chord detection and transposition."""

from __future__ import annotations

# Index 0 = C; canonical spellings use sharps.
CHROMATIC_SCALE: tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

ENHARMONIC_EQUIVALENTS: dict[str, str] = {
    "C#": "Db",
    "Db": "C#",
    "D#": "Eb",
    "Eb": "D#",
    "F#": "Gb",
    "Gb": "F#",
    "G#": "Ab",
    "Ab": "G#",
    "A#": "Bb",
    "Bb": "A#",
}

# 12 chromatic spellings plus the 5 flat aliases, in chromatic order.
NOTE_SPELLINGS: tuple[str, ...] = (
    "C", "C#", "Db", "D", "D#", "Eb", "E", "F", "F#", "Gb", "G", "G#", "Ab", "A", "A#", "Bb", "B",
)

CIRCLE_OF_FIFTHS: tuple[str, ...] = ("C", "G", "D", "A", "E", "B", "F#", "Db", "Ab", "Eb", "Bb", "F")

# Relative minors of CIRCLE_OF_FIFTHS, position for position.
MINOR_CIRCLE_OF_FIFTHS: tuple[str, ...] = ("A", "E", "B", "F#", "C#", "G#", "D#", "Bb", "F", "C", "G", "D")

SHARP_PREFERRING_ROOTS: frozenset[str] = frozenset({"C", "G", "D", "A", "E", "B", "F#"})
FLAT_PREFERRING_ROOTS: frozenset[str] = frozenset({"F", "Bb", "Eb", "Ab", "Db"})

SHARP_PREFERRING_MINOR_ROOTS: frozenset[str] = frozenset({"A", "E", "B", "F#", "C#", "G#", "D#"})
FLAT_PREFERRING_MINOR_ROOTS: frozenset[str] = frozenset({"D", "G", "C", "F", "Bb", "Eb", "Ab"})

_NOTE_INDEX: dict[str, int] = {
    spelling: CHROMATIC_SCALE.index(spelling if spelling in CHROMATIC_SCALE else ENHARMONIC_EQUIVALENTS[spelling])
    for spelling in NOTE_SPELLINGS
}


def is_valid_note(note: str | None) -> bool:
    return note is not None and note in _NOTE_INDEX


def note_index(note: str | None) -> int | None:
    """Return the chromatic index 0-11 for a note spelling, or None when unknown."""

    if note is None:
        return None
    return _NOTE_INDEX.get(note.strip())


def are_enharmonic(first: str, second: str) -> bool:
    first_index = note_index(first)
    return first_index is not None and first_index == note_index(second)


def has_flat(note: str) -> bool:
    return len(note) > 1 and note.endswith("b")


def has_sharp(note: str) -> bool:
    return note.endswith("#")


def spell_note(note: str, *, prefer_flats: bool) -> str:
    """Re-spell an accidental using the requested preference; naturals pass through."""

    if prefer_flats and has_sharp(note):
        return ENHARMONIC_EQUIVALENTS.get(note, note)
    if not prefer_flats and has_flat(note):
        return ENHARMONIC_EQUIVALENTS.get(note, note)
    return note
