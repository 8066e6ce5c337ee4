"""Canonical data structures shared by extraction adapters and the reconstructor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ExtractionMethod(str, Enum):
    EMBEDDED = "embedded"   # text reconstructed from positioned glyphs
    OCR = "ocr"             # at least one page came from OCR
    MANUAL = "manual"       # plain text supplied directly
    EMPTY = "empty"         # nothing usable; caller should fall back


@dataclass(frozen=True, slots=True)
class Glyph:
    """One positioned text run; ``y`` grows towards the top of the page."""

    text: str
    x: float
    y: float
    font_size_scale_x: float
    font_size_scale_y: float


@dataclass(slots=True)
class SheetMetadata:
    title: str | None = None
    author: str | None = None
    format_name: str | None = None
    page_count: int = 0


@dataclass(slots=True)
class PageText:
    """Per-page extraction outcome used for diagnostics."""

    page: int
    text: str
    status: str


@dataclass(slots=True)
class ExtractedSheet:
    """Canonical extraction output consumed by chord detection."""

    source_path: str
    text: str
    method: ExtractionMethod
    metadata: SheetMetadata = field(default_factory=SheetMetadata)
    pages: list[PageText] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.method == ExtractionMethod.EMPTY or not self.text
