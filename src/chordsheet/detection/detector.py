"""Chord detection over plain text with a heuristic confidence model."""

from __future__ import annotations

from dataclasses import replace
import logging
import re
from typing import Iterable, Sequence

from chordsheet.config import DetectionConfig
from chordsheet.detection.grammar import (
    CHORD_SHAPED_RE,
    COMPLEX_INDICATORS,
    KNOWN_SUFFIXES,
    PERMISSIVE_PATTERN,
    SECTION_KEYWORDS,
    STRICT_PATTERN,
)
from chordsheet.detection.models import ChordToken, ChordType, DetectionStats
from chordsheet.theory.notes import is_valid_note

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.5
VALID_NOTE_BONUS = 0.3
KNOWN_SUFFIX_BONUS = 0.2
MUSICAL_CONTEXT_BONUS = 0.2
PART_OF_WORD_PENALTY = 0.3
CONTEXT_RADIUS = 20


def classify_chord_type(suffix: str) -> ChordType:
    """Classify a suffix; checks run in a fixed precedence order."""

    if not suffix:
        return ChordType.MAJOR
    if "m" in suffix and "maj" not in suffix:
        return ChordType.MINOR
    if "dim" in suffix or "°" in suffix:
        return ChordType.DIMINISHED
    if "aug" in suffix or "+" in suffix:
        return ChordType.AUGMENTED
    if "sus" in suffix:
        return ChordType.SUSPENDED
    if any(degree in suffix for degree in ("7", "9", "11", "13")):
        return ChordType.EXTENDED
    if "add" in suffix:
        return ChordType.ADDED
    return ChordType.MAJOR


def is_complex_chord(suffix: str) -> bool:
    return any(indicator in suffix for indicator in COMPLEX_INDICATORS)


def is_known_suffix(suffix: str) -> bool:
    return suffix == "" or suffix in KNOWN_SUFFIXES


def _context(text: str, position: int, radius: int = CONTEXT_RADIUS) -> str:
    start = max(0, position - radius)
    end = min(len(text), position + radius)
    return text[start:end]


def has_musical_context(context: str) -> bool:
    """True when the window names a song section or holds more than one chord-shaped token."""

    lowered = context.lower()
    if any(keyword in lowered for keyword in SECTION_KEYWORDS):
        return True
    return len(CHORD_SHAPED_RE.findall(context)) > 1


def is_part_of_word(text: str, position: int, length: int) -> bool:
    before = text[position - 1] if position > 0 else " "
    after = text[position + length] if position + length < len(text) else " "
    return before.isalpha() or after.isalpha()


def score_match(text: str, position: int, matched: str, note: str, suffix: str) -> float:
    confidence = BASE_CONFIDENCE
    if is_valid_note(note):
        confidence += VALID_NOTE_BONUS
    if is_known_suffix(suffix):
        confidence += KNOWN_SUFFIX_BONUS
    if has_musical_context(_context(text, position)):
        confidence += MUSICAL_CONTEXT_BONUS
    if is_part_of_word(text, position, len(matched)):
        confidence -= PART_OF_WORD_PENALTY
    return max(0.0, min(1.0, confidence))


def resolve_overlaps(tokens: Iterable[ChordToken]) -> list[ChordToken]:
    """Keep a left-to-right, non-overlapping sequence; the first token at a spot wins."""

    ordered = sorted(tokens, key=lambda token: token.position)
    kept: list[ChordToken] = []
    last_end = 0
    for token in ordered:
        if token.position >= last_end:
            kept.append(token)
            last_end = token.position + token.length
    return kept


def _token_from_match(match: re.Match[str], confidence: float) -> ChordToken:
    suffix = match.group("suffix") or ""
    return ChordToken(
        original_text=match.group(0),
        note=match.group("note"),
        suffix=suffix,
        bass_note=match.group("bass"),
        position=match.start(),
        length=match.end() - match.start(),
        confidence=confidence,
        chord_type=classify_chord_type(suffix),
        is_complex=is_complex_chord(suffix),
    )


class ChordDetector:
    """Find chord tokens in text.

    Positions are offsets into the exact string passed to :meth:`detect`; the
    text is never rewritten before matching.
    """

    def __init__(self, config: DetectionConfig | None = None) -> None:
        self._config = config or DetectionConfig()

    @property
    def config(self) -> DetectionConfig:
        return self._config

    def detect(self, text: str, config: DetectionConfig | None = None) -> list[ChordToken]:
        active = config or self._config
        if not text:
            return []

        pattern = PERMISSIVE_PATTERN if active.complex_mode else STRICT_PATTERN
        accepted: list[ChordToken] = []
        for match in pattern.finditer(text):
            confidence = score_match(
                text,
                match.start(),
                match.group(0),
                match.group("note"),
                match.group("suffix") or "",
            )
            if confidence < active.min_confidence:
                continue
            accepted.append(_token_from_match(match, confidence))

        tokens = resolve_overlaps(accepted)
        logger.debug("Detected %d chords in %d characters", len(tokens), len(text))
        return tokens

    def parse_chord(self, chord_text: str, *, position: int = 0) -> ChordToken | None:
        """Validate one chord string against the full grammar."""

        cleaned = chord_text.strip()
        match = PERMISSIVE_PATTERN.fullmatch(cleaned)
        if match is None:
            return None
        return replace(_token_from_match(match, 1.0), position=position)


def detection_stats(tokens: Sequence[ChordToken]) -> DetectionStats:
    stats = DetectionStats(total=len(tokens))
    confidence_sum = 0.0
    for token in tokens:
        type_name = token.chord_type.value
        stats.by_type[type_name] = stats.by_type.get(type_name, 0) + 1
        stats.by_note[token.note] = stats.by_note.get(token.note, 0) + 1
        if token.is_complex:
            stats.complex += 1
        else:
            stats.basic += 1
        confidence_sum += token.confidence

    if tokens:
        stats.average_confidence = confidence_sum / len(tokens)
    return stats
