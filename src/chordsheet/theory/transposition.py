"""Chromatic transposition of notes, chords and keys.

The transposition table is built once at import time for every accepted note
spelling and every semitone offset in ``[-12, 12]`` and is never mutated
afterwards, so it can be shared freely across threads.  Unknown spellings are
passed through unchanged and reported with :class:`TranspositionWarning`
instead of failing a batch.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence
import warnings

from chordsheet.detection.models import ChordToken, Key
from chordsheet.theory.notes import (
    CHROMATIC_SCALE,
    CIRCLE_OF_FIFTHS,
    ENHARMONIC_EQUIVALENTS,
    FLAT_PREFERRING_MINOR_ROOTS,
    FLAT_PREFERRING_ROOTS,
    MINOR_CIRCLE_OF_FIFTHS,
    NOTE_SPELLINGS,
    SHARP_PREFERRING_MINOR_ROOTS,
    SHARP_PREFERRING_ROOTS,
    are_enharmonic,
    has_flat,
    has_sharp,
    note_index,
    spell_note,
)

logger = logging.getLogger(__name__)

MAX_SEMITONES = 12
MIN_SEMITONES = -12
UNKNOWN_KEY_DIFFICULTY = 8
MISSING_KEY_DIFFICULTY = 10

_INTERVAL_NAMES = (
    "Unison",
    "Minor second",
    "Major second",
    "Minor third",
    "Major third",
    "Perfect fourth",
    "Tritone",
    "Perfect fifth",
    "Minor sixth",
    "Major sixth",
    "Minor seventh",
    "Major seventh",
)

_ALTERNATIVE_REASONS = {
    -2: "One whole tone lower (deeper register)",
    -1: "One semitone lower (warmer)",
    1: "One semitone higher (brighter)",
    2: "One whole tone higher (higher register)",
}


class TranspositionWarning(UserWarning):
    """A note spelling could not be resolved and was left untouched."""


@dataclass(frozen=True, slots=True)
class KeySuggestion:
    key: Key
    semitones_used: int
    difficulty: int
    reason: str

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key.name,
            "semitones": self.semitones_used,
            "difficulty": self.difficulty,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class TranspositionCheck:
    is_valid: bool
    warnings: tuple[str, ...]
    recommendations: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AccidentalCount:
    sharps: int
    flats: int

    @property
    def total(self) -> int:
        return self.sharps + self.flats


def normalize_semitones(semitones: int) -> int:
    """Reduce offsets outside ``[-12, 12]`` modulo 12, keeping the direction sign."""

    value = int(semitones)
    if MIN_SEMITONES <= value <= MAX_SEMITONES:
        return value
    reduced = abs(value) % 12
    return reduced if value > 0 else -reduced


def _build_transposition_table() -> Mapping[int, Mapping[str, str]]:
    table: dict[int, Mapping[str, str]] = {}
    for semitones in range(MIN_SEMITONES, MAX_SEMITONES + 1):
        row: dict[str, str] = {}
        for spelling in NOTE_SPELLINGS:
            index = note_index(spelling)
            if index is None:
                continue
            target = CHROMATIC_SCALE[((index + semitones) % 12 + 12) % 12]
            row[spelling] = spell_note(target, prefer_flats=has_flat(spelling))
        table[semitones] = MappingProxyType(row)
    return MappingProxyType(table)


TRANSPOSITION_TABLE: Mapping[int, Mapping[str, str]] = _build_transposition_table()


def _warn_unresolvable(note: str) -> None:
    logger.warning("Cannot transpose unrecognized note spelling: %r", note)
    warnings.warn(f"Cannot transpose note {note!r}; leaving it unchanged", TranspositionWarning, stacklevel=3)


def transpose_note(note: str, semitones: int) -> str:
    """Transpose a single note spelling.

    Flat spellings come back spelled with flats and everything else with sharps,
    so ``transpose_note(n, 12) == n`` for every accepted spelling.
    """

    if not note:
        return note
    normalized = note.strip()
    steps = normalize_semitones(semitones)

    row = TRANSPOSITION_TABLE.get(steps)
    if row is not None and normalized in row:
        return row[normalized]

    index = note_index(normalized)
    if index is None:
        _warn_unresolvable(note)
        return note
    target = CHROMATIC_SCALE[((index + steps) % 12 + 12) % 12]
    return spell_note(target, prefer_flats=has_flat(normalized))


def _respell(note: str, prefer_flats: bool) -> str:
    if note_index(note) is None:
        return note
    return spell_note(note, prefer_flats=prefer_flats)


def _original_spellings(original_text: str) -> tuple[str, str | None]:
    root = original_text[:2] if len(original_text) > 1 and original_text[1] in "#b" else original_text[:1]
    _, slash, bass = original_text.rpartition("/")
    return root, (bass.strip() if slash else None)


def _restore_spelling(note: str, original: str | None) -> str:
    if original is not None and are_enharmonic(note, original):
        return original
    return note


def transpose_chord(token: ChordToken, semitones: int, *, prefer_flats: bool | None = None) -> ChordToken:
    """Return a new token with root and bass transposed; the suffix is never touched.

    With ``prefer_flats`` unset, root and bass each keep the accidental style of
    their own spelling.  A root or bass that lands back on the pitch of the
    detected chord takes the detected spelling again.
    """

    note = transpose_note(token.note, semitones)
    bass_note = transpose_note(token.bass_note, semitones) if token.bass_note else None
    if prefer_flats is not None:
        note = _respell(note, prefer_flats)
        bass_note = _respell(bass_note, prefer_flats) if bass_note else None

    original_root, original_bass = _original_spellings(token.original_text)
    note = _restore_spelling(note, original_root)
    if bass_note:
        bass_note = _restore_spelling(bass_note, original_bass)
    return token.with_notes(note, bass_note)


def transpose_chords(
    tokens: Sequence[ChordToken],
    semitones: int,
    *,
    key: Key | None = None,
) -> list[ChordToken]:
    """Transpose a batch of tokens, spelling accidentals for the target key when known."""

    prefer_flats: bool | None = None
    if key is not None:
        prefer_flats = key_prefers_flats(preferred_key(key, semitones))
    return [transpose_chord(token, semitones, prefer_flats=prefer_flats) for token in tokens]


def transpose_key(key: Key, semitones: int) -> Key:
    """Transpose the key root and keep its mode marker."""

    return Key(root=transpose_note(key.root, semitones), minor=key.minor)


def _preferred_spelling(root: str, minor: bool) -> str:
    sharp_roots = SHARP_PREFERRING_MINOR_ROOTS if minor else SHARP_PREFERRING_ROOTS
    flat_roots = FLAT_PREFERRING_MINOR_ROOTS if minor else FLAT_PREFERRING_ROOTS
    if root in sharp_roots or root in flat_roots:
        return root
    alias = ENHARMONIC_EQUIVALENTS.get(root)
    if alias is not None and (alias in sharp_roots or alias in flat_roots):
        return alias
    return root


def preferred_key(key: Key, semitones: int) -> Key:
    """Transpose ``key`` and re-spell it with the conventional enharmonic name."""

    transposed = transpose_key(key, semitones)
    return Key(root=_preferred_spelling(transposed.root, transposed.minor), minor=transposed.minor)


def key_prefers_flats(key: Key) -> bool:
    flat_roots = FLAT_PREFERRING_MINOR_ROOTS if key.minor else FLAT_PREFERRING_ROOTS
    return key.root in flat_roots


def key_difficulty(key: Key | None) -> int:
    """Distance from the accidental-free key on the circle of fifths (0-6)."""

    if key is None:
        return MISSING_KEY_DIFFICULTY
    circle = MINOR_CIRCLE_OF_FIFTHS if key.minor else CIRCLE_OF_FIFTHS
    root = _preferred_spelling(key.root, key.minor)
    if root not in circle:
        return UNKNOWN_KEY_DIFFICULTY
    index = circle.index(root)
    return min(index, 12 - index)


def rank_alternative_keys(key: Key, semitones: int) -> list[KeySuggestion]:
    """Rank neighbouring transpositions (±1, ±2 semitones) by key difficulty."""

    suggestions: list[KeySuggestion] = []
    for offset in (-2, -1, 1, 2):
        used = semitones + offset
        candidate = preferred_key(key, used)
        suggestions.append(
            KeySuggestion(
                key=candidate,
                semitones_used=used,
                difficulty=key_difficulty(candidate),
                reason=_ALTERNATIVE_REASONS[offset],
            )
        )
    return sorted(suggestions, key=lambda item: item.difficulty)


def interval_name(semitones: int) -> str:
    return _INTERVAL_NAMES[((semitones % 12) + 12) % 12]


def validate_transposition(semitones: int) -> TranspositionCheck:
    warnings_found: list[str] = []
    recommendations: list[str] = []

    if abs(semitones) > 6:
        warnings_found.append("Large transposition (more than 6 semitones)")
        recommendations.append("Consider transposing in the opposite direction")
    if semitones == 0:
        warnings_found.append("No transposition")
    if abs(semitones) == 6:
        warnings_found.append("Tritone: a drastic change of colour")

    return TranspositionCheck(
        is_valid=True,
        warnings=tuple(warnings_found),
        recommendations=tuple(recommendations),
    )


def count_accidentals(tokens: Iterable[ChordToken]) -> AccidentalCount:
    sharps = 0
    flats = 0
    for token in tokens:
        for note in (token.note, token.bass_note):
            if not note:
                continue
            if has_sharp(note):
                sharps += 1
            elif has_flat(note):
                flats += 1
    return AccidentalCount(sharps=sharps, flats=flats)


def apply_to_text(text: str, tokens: Sequence[ChordToken]) -> str:
    """Rebuild ``text`` with each token's span replaced by its current spelling.

    Tokens must index into ``text`` and must not overlap, which detection
    guarantees.
    """

    pieces: list[str] = []
    cursor = 0
    for token in sorted(tokens, key=lambda item: item.position):
        if token.position < cursor or token.end > len(text):
            continue
        pieces.append(text[cursor : token.position])
        pieces.append(token.text)
        cursor = token.end
    pieces.append(text[cursor:])
    return "".join(pieces)
