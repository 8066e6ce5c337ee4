"""Tesseract OCR fallback for image-only chord sheet pages.

pytesseract and Pillow are soft dependencies: they are imported only inside
``_ocr_page()``.  If Tesseract is not installed the module still works:
the first scanned page logs a single warning, all subsequent scanned pages
are silently skipped (``OcrStatus.OCR_SKIPPED``), and pages with embedded
text are never affected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import pymupdf

from chordsheet.config import DEFAULT_OCR_LANGUAGES


logger = logging.getLogger(__name__)

# Minimum ratio of reconstructed characters to page area (pt²) for a page to
# count as having embedded text.  An A4 page is ~595×842 ≈ 501 000 pt², so
# 0.00002 asks for roughly ten characters; chord sheets are often sparse.
DEFAULT_COVERAGE_THRESHOLD = 0.00002

OCR_RENDER_DPI = 300

# Three-state flag tracking Tesseract availability for the current process.
#   None:  not yet probed
#   True:  Tesseract executed successfully at least once
#   False: Tesseract is not installed or not in PATH
_tesseract_available: bool | None = None


class OcrStatus(Enum):
    EMBEDDED = "embedded"       # page had usable reconstructed text, OCR skipped
    OCR_SUCCESS = "ocr_success"
    OCR_FAILED = "ocr_failed"   # Tesseract raised an unexpected exception
    OCR_EMPTY = "ocr_empty"     # Tesseract ran but returned no text
    OCR_SKIPPED = "ocr_skipped" # Tesseract not installed or OCR disabled


@dataclass(slots=True)
class PageOcrResult:
    page_index: int
    status: OcrStatus
    text: str
    reason: str | None = None


def _page_text_coverage(page: pymupdf.Page, text: str) -> float:
    """Return ratio of text character count to page area (chars / pt²)."""
    rect = page.rect
    area = rect.width * rect.height
    if area == 0:
        return 0.0
    return len(text.strip()) / area


def needs_ocr(page: pymupdf.Page, text: str, *, threshold: float = DEFAULT_COVERAGE_THRESHOLD) -> bool:
    """Return True when the reconstructed page text is missing or too sparse."""
    if not text.strip():
        return True
    return _page_text_coverage(page, text) < threshold


def _is_tesseract_not_found(exc: Exception) -> bool:
    """Return True when *exc* indicates that the Tesseract binary is missing."""
    # pytesseract raises TesseractNotFoundError; match by class name so the
    # soft dependency is never imported at module level.
    if "TesseractNotFoundError" in type(exc).__name__:
        return True
    msg = str(exc).lower()
    return "tesseract is not installed" in msg or "tesseract is not in your path" in msg


def _ocr_page(page: pymupdf.Page, languages: str) -> str:
    """Render *page* at 300 DPI and run Tesseract OCR.  Returns raw OCR text."""
    import io

    import pytesseract
    from PIL import Image

    # pymupdf base resolution is 72 DPI
    mat = pymupdf.Matrix(OCR_RENDER_DPI / 72, OCR_RENDER_DPI / 72)
    pix = page.get_pixmap(matrix=mat, colorspace=pymupdf.csRGB)
    image = Image.open(io.BytesIO(pix.tobytes("png")))
    # psm 6 keeps chord lines and lyric lines as separate text rows
    return pytesseract.image_to_string(image, lang=languages, config="--oem 3 --psm 6")


def extract_page_text(
    page: pymupdf.Page,
    page_index: int,
    embedded_text: str,
    *,
    coverage_threshold: float = DEFAULT_COVERAGE_THRESHOLD,
    languages: str = DEFAULT_OCR_LANGUAGES,
    enabled: bool = True,
) -> PageOcrResult:
    """Return text for one page, falling back to OCR when embedded text is absent.

    Parameters
    ----------
    page:
        An open ``pymupdf.Page`` object.
    page_index:
        1-based page number (for diagnostic messages).
    embedded_text:
        Text already reconstructed from the page's glyphs.
    coverage_threshold:
        Minimum chars/pt² ratio to consider the embedded text usable.
    languages:
        Tesseract language string, e.g. ``"eng+spa"``.
    enabled:
        When False, scanned pages are reported as skipped without running OCR.
    """
    global _tesseract_available

    if not needs_ocr(page, embedded_text, threshold=coverage_threshold):
        return PageOcrResult(page_index=page_index, status=OcrStatus.EMBEDDED, text=embedded_text)

    # Fast path: OCR is off or we already know Tesseract is missing.
    if not enabled or _tesseract_available is False:
        return PageOcrResult(page_index=page_index, status=OcrStatus.OCR_SKIPPED, text=embedded_text)

    try:
        ocr_text = _ocr_page(page, languages).strip()
    except Exception as exc:
        if _is_tesseract_not_found(exc):
            _tesseract_available = False
            logger.warning(
                "Tesseract is not installed or not in PATH; OCR disabled for this run. "
                "Image-only pages will fall back to embedded text only."
            )
            return PageOcrResult(page_index=page_index, status=OcrStatus.OCR_SKIPPED, text=embedded_text)
        return PageOcrResult(
            page_index=page_index,
            status=OcrStatus.OCR_FAILED,
            text=embedded_text,
            reason=str(exc),
        )

    _tesseract_available = True

    if not ocr_text:
        return PageOcrResult(
            page_index=page_index,
            status=OcrStatus.OCR_EMPTY,
            text=embedded_text,
            reason="Tesseract returned empty output",
        )

    return PageOcrResult(page_index=page_index, status=OcrStatus.OCR_SUCCESS, text=ocr_text)
