"""Text normalization helpers used during extraction."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\f")

_PUNCTUATION_FOLDS = str.maketrans(
    {
        "\u00a0": " ",
        "\u2007": " ",
        "\u2009": " ",
        "\u202f": " ",
        "\u2010": "-",
        "\u2011": "-",
        "\u2012": "-",
        "\u2013": "-",
        "\u2014": "--",
        "\u2212": "-",
        "\u2018": "'",
        "\u2019": "'",
        "\u201a": "'",
        "\u201b": "'",
        "\u201c": '"',
        "\u201d": '"',
        "\u201e": '"',
        "\u2026": "...",
        "\t": " ",
    }
)


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_line_breaks(text: str) -> str:
    """Turn CRLF, CR and form-feed into plain line breaks."""

    return _LINE_BREAK_RE.sub("\n", text)


def fold_punctuation(text: str) -> str:
    """Fold typographic punctuation and exotic spaces to ASCII equivalents."""

    return text.translate(_PUNCTUATION_FOLDS)


def strip_control_characters(text: str) -> str:
    return "".join(char for char in text if char == "\n" or unicodedata.category(char) != "Cc")


def normalize_sheet_text(text: str) -> str:
    """Produce stable sheet text; character order is preserved."""

    return strip_control_characters(fold_punctuation(normalize_line_breaks(text)))
