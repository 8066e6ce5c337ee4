"""Shared adapter contract for per-format sheet extractors."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from chordsheet.extraction.models import ExtractedSheet


@runtime_checkable
class SheetAdapter(Protocol):
    """Protocol that every format adapter must implement."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        """Return True when this adapter can read the given file."""

    def extract(self, path: Path) -> ExtractedSheet:
        """Extract a chord sheet into the canonical schema."""
