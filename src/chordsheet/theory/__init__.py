"""Music-theory tables and the transposition engine."""

from .notes import CHROMATIC_SCALE, CIRCLE_OF_FIFTHS, NOTE_SPELLINGS, note_index
from .transposition import (
    KeySuggestion,
    TranspositionWarning,
    preferred_key,
    rank_alternative_keys,
    transpose_chord,
    transpose_chords,
    transpose_key,
    transpose_note,
)

__all__ = [
    "CHROMATIC_SCALE",
    "CIRCLE_OF_FIFTHS",
    "KeySuggestion",
    "NOTE_SPELLINGS",
    "TranspositionWarning",
    "note_index",
    "preferred_key",
    "rank_alternative_keys",
    "transpose_chord",
    "transpose_chords",
    "transpose_key",
    "transpose_note",
]
