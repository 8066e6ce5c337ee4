"""Plain-text adapter for chord sheets typed or pasted by hand."""

from __future__ import annotations

from pathlib import Path

from charset_normalizer import from_bytes

from chordsheet.extraction.models import ExtractedSheet, ExtractionMethod, SheetMetadata
from chordsheet.extraction.normalization import normalize_sheet_text, normalize_whitespace

_HEADER_FIELDS = {
    "title": "title",
    "author": "author",
    "artist": "author",
    "titulo": "title",
    "título": "title",
    "autor": "author",
    "artista": "author",
}

_BINARY_PREFIXES = (b"%PDF-", b"PK\x03\x04", b"\x89PNG", b"\xff\xd8\xff")


class TXTAdapter:
    """Read text sheets with charset detection; line layout is preserved."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() in {".txt", ".chords", ".cho"}:
            return True
        if sniffed_bytes is None:
            return False

        if path.suffix.lower() == ".pdf":
            return False

        prefix = sniffed_bytes.lstrip()
        if prefix.startswith(_BINARY_PREFIXES):
            return False

        return b"\x00" not in sniffed_bytes

    def extract(self, path: Path) -> ExtractedSheet:
        raw = path.read_bytes()
        encoding = self._detect_encoding(raw)
        text = normalize_sheet_text(raw.decode(encoding)).strip("\n")
        metadata = self._extract_metadata(text, path)

        method = ExtractionMethod.MANUAL if text.strip() else ExtractionMethod.EMPTY
        return ExtractedSheet(source_path=str(path), text=text, method=method, metadata=metadata)

    def _detect_encoding(self, raw: bytes) -> str:
        if not raw:
            return "utf-8"
        best = from_bytes(raw).best()
        if best and best.encoding:
            return best.encoding

        for fallback in ("utf-8", "cp1252"):
            try:
                raw.decode(fallback)
                return fallback
            except UnicodeDecodeError:
                continue
        raise ValueError("Could not detect TXT encoding")

    def _extract_metadata(self, text: str, path: Path) -> SheetMetadata:
        title: str | None = None
        author: str | None = None
        for line in text.splitlines()[:10]:
            normalized = normalize_whitespace(line)
            if not normalized or ":" not in normalized:
                continue
            key, value = normalized.split(":", 1)
            field = _HEADER_FIELDS.get(key.strip().casefold())
            clean_value = normalize_whitespace(value)
            if not field or not clean_value:
                continue
            if field == "title" and not title:
                title = clean_value
            if field == "author" and not author:
                author = clean_value

        return SheetMetadata(title=title or path.stem, author=author, format_name="txt", page_count=1)
