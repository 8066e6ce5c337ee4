"""Extraction adapter implementations and contracts."""

from __future__ import annotations

from chordsheet.config import ProcessingSettings

from .base import SheetAdapter
from .pdf_adapter import PDFAdapter
from .txt_adapter import TXTAdapter


def build_default_adapters(settings: ProcessingSettings | None = None) -> dict[str, SheetAdapter]:
    """Return the default format adapter map."""
    resolved = settings or ProcessingSettings()
    return {
        "pdf": PDFAdapter(ocr_enabled=resolved.ocr_enabled, ocr_languages=resolved.ocr_languages),
        "txt": TXTAdapter(),
    }


__all__ = [
    "PDFAdapter",
    "SheetAdapter",
    "TXTAdapter",
    "build_default_adapters",
]
