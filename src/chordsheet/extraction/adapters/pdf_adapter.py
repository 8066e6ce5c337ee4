"""PDF adapter rebuilding chord-sheet layout from positioned text spans."""

from __future__ import annotations

import logging
from pathlib import Path
import re

import pymupdf

from chordsheet.config import DEFAULT_OCR_LANGUAGES
from chordsheet.extraction import ocr
from chordsheet.extraction.models import ExtractedSheet, ExtractionMethod, Glyph, PageText, SheetMetadata
from chordsheet.extraction.normalization import normalize_whitespace
from chordsheet.extraction.reconstruction import ReconstructionOptions, join_pages, reconstruct_page

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF-"
_TITLE_SPLIT_RE = re.compile(r"[._\-]+")


def _normalize_title_from_path(path: Path) -> str:
    stem = _TITLE_SPLIT_RE.sub(" ", path.stem)
    return normalize_whitespace(stem).title()


def _first_non_empty(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = normalize_whitespace(value)
    return cleaned or None


def page_glyphs(page: pymupdf.Page) -> list[Glyph]:
    """Return text spans of *page* as glyphs with ``y`` growing upwards."""

    height = page.rect.height
    glyphs: list[Glyph] = []
    for block in page.get_text("dict").get("blocks", []):
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                origin_x, origin_y = span["origin"]
                size = float(span.get("size") or 0.0)
                glyphs.append(
                    Glyph(
                        text=span.get("text", ""),
                        x=float(origin_x),
                        y=height - float(origin_y),
                        font_size_scale_x=size,
                        font_size_scale_y=size,
                    )
                )
    return glyphs


class PDFAdapter:
    """Extract chord sheets from PDFs, falling back to OCR for scanned pages."""

    def __init__(
        self,
        *,
        ocr_enabled: bool = True,
        ocr_languages: str = DEFAULT_OCR_LANGUAGES,
        coverage_threshold: float = ocr.DEFAULT_COVERAGE_THRESHOLD,
        options: ReconstructionOptions | None = None,
    ) -> None:
        self._ocr_enabled = ocr_enabled
        self._ocr_languages = ocr_languages
        self._coverage_threshold = coverage_threshold
        self._options = options or ReconstructionOptions()

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() == ".pdf":
            return True
        if sniffed_bytes is None:
            return False
        return sniffed_bytes.startswith(_PDF_MAGIC)

    def extract(self, path: Path) -> ExtractedSheet:
        with pymupdf.open(path) as doc:
            metadata = self._extract_metadata(path, doc)
            pages = self._extract_pages(doc)

        text = join_pages([page.text for page in pages], self._options)
        if not text:
            method = ExtractionMethod.EMPTY
        elif any(page.status == ocr.OcrStatus.OCR_SUCCESS.value for page in pages):
            method = ExtractionMethod.OCR
        else:
            method = ExtractionMethod.EMBEDDED

        logger.debug("Extracted %d page(s) from %s via %s", len(pages), path, method.value)
        return ExtractedSheet(source_path=str(path), text=text, method=method, metadata=metadata, pages=pages)

    def _extract_metadata(self, path: Path, doc: pymupdf.Document) -> SheetMetadata:
        doc_metadata = doc.metadata or {}
        title = _first_non_empty(doc_metadata.get("title")) or _normalize_title_from_path(path)
        author = _first_non_empty(doc_metadata.get("author"))
        return SheetMetadata(title=title, author=author, format_name="pdf", page_count=doc.page_count)

    def _extract_pages(self, doc: pymupdf.Document) -> list[PageText]:
        pages: list[PageText] = []

        for page_index, page in enumerate(doc, start=1):
            embedded = reconstruct_page(page_glyphs(page), self._options)
            result = ocr.extract_page_text(
                page,
                page_index,
                embedded,
                coverage_threshold=self._coverage_threshold,
                languages=self._ocr_languages,
                enabled=self._ocr_enabled,
            )
            # OCR_SKIPPED already produced the single process-level warning in ocr.py.
            if result.status == ocr.OcrStatus.OCR_FAILED:
                logger.warning("OCR failed for page %d: %s", page_index, result.reason)

            pages.append(PageText(page=page_index, text=result.text, status=result.status.value))

        return pages
