"""Manual chord entry for sheets whose text could not be extracted."""

from __future__ import annotations

import re

from chordsheet.detection.detector import ChordDetector
from chordsheet.detection.models import ChordToken

_WORD_RE = re.compile(r"[^\s\-|,;]+")


def parse_manual_entry(text: str, detector: ChordDetector | None = None) -> list[ChordToken]:
    """Return the valid chords typed by a user, located in the entered text.

    Words are separated by whitespace, ``-``, ``|``, ``,`` or ``;``; words that
    are not chords are ignored.
    """

    parser = detector or ChordDetector()
    tokens: list[ChordToken] = []
    for match in _WORD_RE.finditer(text):
        token = parser.parse_chord(match.group(0), position=match.start())
        if token is not None:
            tokens.append(token)
    return tokens
