"""Chord grammar: note spellings, suffix vocabulary and compiled patterns.

A chord is ``NOTE SUFFIX? (/ NOTE)?``.  Suffix alternatives are ordered
longest-first so ``maj7`` wins over ``maj`` and every alternative is escaped
before it goes into the alternation.
"""

from __future__ import annotations

import re

from chordsheet.theory.notes import NOTE_SPELLINGS

BASIC_SUFFIXES: tuple[str, ...] = ("m", "maj", "min", "dim", "aug", "sus2", "sus4")

EXTENDED_SUFFIXES: tuple[str, ...] = (
    "2", "4", "5", "6", "7", "9", "11", "13",
    "maj7", "min7", "m7", "maj9", "min9", "m9",
    "add2", "add4", "add9", "add11",
    "dim7", "aug7", "aug9",
    "7sus4", "9sus4", "maj7sus4",
    "+", "°", "ø",
    "b5", "#5", "b9", "#9", "#11", "b13",
)

KNOWN_SUFFIXES: frozenset[str] = frozenset(BASIC_SUFFIXES + EXTENDED_SUFFIXES)

COMPLEX_INDICATORS: tuple[str, ...] = (
    "7", "9", "11", "13", "add", "sus", "dim", "aug", "b5", "#5", "b9", "#9", "#11", "b13",
)

SECTION_KEYWORDS: tuple[str, ...] = (
    "intro", "verso", "coro", "bridge", "solo", "estrofa",
    "verse", "chorus", "estribillo", "puente", "outro", "coda", "interludio",
)

# Characters that may never directly touch a chord on either side.
_BOUNDARY_BEFORE = r"(?<![\w#])"
_BOUNDARY_AFTER = r"(?![\w#+°ø])"
_STRICT_BEFORE = r"(?<!\S)"
_STRICT_AFTER = r"(?=[\s,.!?;:]|$)"

CHORD_SHAPED_RE = re.compile(r"\b[A-G][#b]?[a-z0-9]*\b")
LINE_STARTS_WITH_NOTE_RE = re.compile(r"^[A-G][#b]?")


def ordered_suffixes() -> list[str]:
    """Unique suffixes, longest first; ties keep vocabulary order."""

    unique = list(dict.fromkeys(EXTENDED_SUFFIXES + BASIC_SUFFIXES))
    return sorted((suffix for suffix in unique if suffix), key=len, reverse=True)


def _note_alternation() -> str:
    spellings = sorted(NOTE_SPELLINGS, key=len, reverse=True)
    return "|".join(re.escape(spelling) for spelling in spellings)


def _suffix_alternation() -> str:
    return "|".join(re.escape(suffix) for suffix in ordered_suffixes())


def build_permissive_pattern() -> re.Pattern[str]:
    """Suffix optional; used when complex mode is on."""

    notes = _note_alternation()
    return re.compile(
        rf"{_BOUNDARY_BEFORE}(?P<note>{notes})(?P<suffix>{_suffix_alternation()})?"
        rf"(?:/(?P<bass>{notes}))?{_BOUNDARY_AFTER}"
    )


def build_strict_pattern() -> re.Pattern[str]:
    """Suffix mandatory and anchored to whitespace or line boundaries."""

    notes = _note_alternation()
    return re.compile(
        rf"{_STRICT_BEFORE}(?P<note>{notes})(?P<suffix>{_suffix_alternation()})"
        rf"(?:/(?P<bass>{notes}))?{_STRICT_AFTER}",
        re.MULTILINE,
    )


PERMISSIVE_PATTERN = build_permissive_pattern()
STRICT_PATTERN = build_strict_pattern()
