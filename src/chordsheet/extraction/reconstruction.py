"""Rebuild ordered, line-structured text from positioned glyph runs.

Glyphs are bucketed into lines by vertical proximity, lines are read top to
bottom (descending ``y``) and glyphs left to right.  Horizontal gaps become
spaces according to an average-character-width estimate, short fragmented
lines are merged back together, and punctuation is folded to ASCII.

The reconstructor never raises: unusable input yields an empty string, which
callers treat as "extraction needs a fallback".
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import re
from typing import Sequence

from chordsheet.detection.grammar import LINE_STARTS_WITH_NOTE_RE
from chordsheet.extraction.models import Glyph
from chordsheet.extraction.normalization import normalize_sheet_text

DEFAULT_LINE_TOLERANCE = 3.0
AVERAGE_CHAR_WIDTH = 0.6
WIDE_GAP_CHARS = 2.0
NARROW_GAP_CHARS = 0.3
MAX_GAP_SPACES = 8
MERGE_MAX_PREVIOUS_LENGTH = 50

_PAGE_MARKER_RE = re.compile(r"^--- Page \d+ ---$")
_TERMINAL_PUNCTUATION = (".", "!", "?", ":", ";")


@dataclass(frozen=True, slots=True)
class ReconstructionOptions:
    line_tolerance: float = DEFAULT_LINE_TOLERANCE
    merge_lines: bool = True
    page_markers: bool = True


@dataclass(slots=True)
class _LineBucket:
    y: float
    glyphs: list[Glyph] = field(default_factory=list)


def _is_finite(value: object) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def is_valid_glyph(glyph: Glyph) -> bool:
    """A glyph needs visible text, a finite position and a usable scale."""

    if not isinstance(glyph.text, str) or not glyph.text.strip():
        return False
    if not (_is_finite(glyph.x) and _is_finite(glyph.y)):
        return False
    if not (_is_finite(glyph.font_size_scale_x) and _is_finite(glyph.font_size_scale_y)):
        return False
    return glyph.font_size_scale_x > 0


def estimated_width(glyph: Glyph) -> float:
    return len(glyph.text) * glyph.font_size_scale_x * AVERAGE_CHAR_WIDTH


def char_width(glyph: Glyph) -> float:
    return glyph.font_size_scale_x * AVERAGE_CHAR_WIDTH


def gap_spacing(previous: Glyph, current: Glyph) -> str:
    """Spaces to insert between two neighbouring glyphs on one line."""

    gap = current.x - (previous.x + estimated_width(previous))
    width = char_width(current)
    if gap > WIDE_GAP_CHARS * width:
        return " " * max(1, min(math.floor(gap / width), MAX_GAP_SPACES))
    if gap > NARROW_GAP_CHARS * width:
        return " "
    return ""


def group_lines(glyphs: Sequence[Glyph], tolerance: float = DEFAULT_LINE_TOLERANCE) -> list[list[Glyph]]:
    """Bucket valid glyphs into lines; top line first, glyphs left to right."""

    buckets: list[_LineBucket] = []
    for glyph in glyphs:
        if not is_valid_glyph(glyph):
            continue
        target = next((bucket for bucket in buckets if abs(bucket.y - glyph.y) <= tolerance), None)
        if target is None:
            target = _LineBucket(y=glyph.y)
            buckets.append(target)
        target.glyphs.append(glyph)

    buckets.sort(key=lambda bucket: -bucket.y)
    return [sorted(bucket.glyphs, key=lambda glyph: glyph.x) for bucket in buckets]


def render_line(line: Sequence[Glyph]) -> str:
    pieces: list[str] = []
    previous: Glyph | None = None
    for glyph in line:
        if previous is not None:
            pieces.append(gap_spacing(previous, glyph))
        pieces.append(glyph.text)
        previous = glyph
    return "".join(pieces).strip()


def reconstruct_page(glyphs: Sequence[Glyph], options: ReconstructionOptions | None = None) -> str:
    """Reconstruct one page without merging or normalization."""

    settings = options or ReconstructionOptions()
    lines = (render_line(line) for line in group_lines(glyphs, settings.line_tolerance))
    return "\n".join(line for line in lines if line)


def page_marker(page_number: int) -> str:
    return f"--- Page {page_number} ---"


def _should_merge(previous: str, current: str) -> bool:
    if not previous or not current:
        return False
    if _PAGE_MARKER_RE.match(previous) or _PAGE_MARKER_RE.match(current):
        return False
    if previous.endswith("-"):
        return True
    if len(previous) >= MERGE_MAX_PREVIOUS_LENGTH or previous.endswith(_TERMINAL_PUNCTUATION):
        return False
    if current[0].isupper() or LINE_STARTS_WITH_NOTE_RE.match(current):
        return False
    return True


def merge_fragmented_lines(text: str) -> str:
    """Join lines broken mid-sentence by the source layout."""

    raw_lines = [line.strip() for line in text.split("\n")]
    merged: list[str] = []
    for index, line in enumerate(raw_lines):
        if merged and _should_merge(raw_lines[index - 1], line):
            merged[-1] = f"{merged[-1]} {line}"
        else:
            merged.append(line)
    return "\n".join(merged)


def join_pages(page_texts: Sequence[str], options: ReconstructionOptions | None = None) -> str:
    """Combine per-page texts, merge fragmented lines and normalize the result."""

    settings = options or ReconstructionOptions()
    combined = ""
    for page_number, page_text in enumerate(page_texts, start=1):
        body = normalize_sheet_text(page_text).strip()
        if not body:
            continue
        if combined:
            combined += f"\n{page_marker(page_number)}\n" if settings.page_markers else "\n"
        combined += body

    if settings.merge_lines:
        combined = merge_fragmented_lines(combined)
    return normalize_sheet_text(combined).strip()


def reconstruct(pages: Sequence[Sequence[Glyph]], options: ReconstructionOptions | None = None) -> str:
    """Turn per-page glyph collections into reading-order plain text."""

    return join_pages([reconstruct_page(page, options) for page in pages], options)
