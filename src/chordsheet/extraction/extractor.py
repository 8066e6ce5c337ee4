"""Routing entrypoint for sheet extraction adapters."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from chordsheet.extraction.adapters.base import SheetAdapter
from chordsheet.extraction.models import ExtractedSheet

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExtractionError(Exception):
    """Domain error for adapter routing and extraction failures."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


class SheetExtractor:
    """Resolve the right adapter and return canonical extraction output."""

    def __init__(self, sniff_bytes: int = 4096) -> None:
        self._sniff_bytes = sniff_bytes
        self._adapter_map: dict[str, SheetAdapter] = {}

    @property
    def adapter_map(self) -> dict[str, SheetAdapter]:
        """Registered adapters keyed by adapter name."""

        return dict(self._adapter_map)

    def register_adapter(self, name: str, adapter: SheetAdapter) -> None:
        """Register an adapter implementation by key."""

        if not name:
            raise ValueError("Adapter name cannot be empty")
        self._adapter_map[name] = adapter

    def extract(self, path: str | Path) -> ExtractedSheet:
        """Extract a file path into an :class:`ExtractedSheet`."""

        source = Path(path)
        sniffed = self._read_prefix(source)

        for name, adapter in self._adapter_map.items():
            if adapter.supports(source, sniffed):
                try:
                    extracted = adapter.extract(source)
                except Exception as exc:
                    raise ExtractionError(source, f"Adapter extraction failed: {exc}") from exc

                if not isinstance(extracted, ExtractedSheet):
                    raise ExtractionError(source, "Adapter returned non-canonical output")
                logger.info("Extracted %s with %s adapter (method=%s)", source, name, extracted.method.value)
                return extracted

        raise ExtractionError(source, "No adapter registered for file content")

    def _read_prefix(self, path: Path) -> bytes:
        try:
            with path.open("rb") as handle:
                return handle.read(self._sniff_bytes)
        except OSError as exc:
            raise ExtractionError(path, f"Failed to read source file: {exc}") from exc
