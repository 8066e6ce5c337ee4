"""Sheet extraction: adapters, layout reconstruction and OCR fallback."""

from .extractor import ExtractionError, SheetExtractor
from .models import ExtractedSheet, ExtractionMethod, Glyph, PageText, SheetMetadata
from .reconstruction import ReconstructionOptions, reconstruct

__all__ = [
    "ExtractedSheet",
    "ExtractionError",
    "ExtractionMethod",
    "Glyph",
    "PageText",
    "ReconstructionOptions",
    "SheetExtractor",
    "SheetMetadata",
    "reconstruct",
]
