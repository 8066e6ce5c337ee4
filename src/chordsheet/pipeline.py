"""End-to-end sheet processing: extract, detect, analyze and transpose."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Iterable, Sequence

from chordsheet.cache import DetectionCache
from chordsheet.config import ProcessingSettings
from chordsheet.detection.analysis import DiatonicChord, analyze_progression, detect_key, suggested_chords
from chordsheet.detection.detector import ChordDetector, detection_stats
from chordsheet.detection.models import AnalysisStatus, ChordToken, DetectionStats, Key, ProgressionMatch
from chordsheet.extraction.adapters import build_default_adapters
from chordsheet.extraction.extractor import ExtractionError, SheetExtractor
from chordsheet.extraction.models import ExtractionMethod, SheetMetadata
from chordsheet.theory.transposition import (
    AccidentalCount,
    KeySuggestion,
    apply_to_text,
    count_accidentals,
    interval_name,
    normalize_semitones,
    preferred_key,
    rank_alternative_keys,
    transpose_chords,
    validate_transposition,
)

DEFAULT_FILE_CONCURRENCY = 4

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SheetAnalysis:
    """Detection and harmonic analysis of one chord sheet."""

    text: str
    tokens: tuple[ChordToken, ...]
    key: Key | None
    progression: ProgressionMatch
    stats: DetectionStats
    status: AnalysisStatus
    method: ExtractionMethod
    source_path: str | None = None
    metadata: SheetMetadata | None = None
    suggestions: list[DiatonicChord] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "source_path": self.source_path,
            "method": self.method.value,
            "status": self.status.value,
            "chords": [token.to_dict() for token in self.tokens],
            "key": self.key.name if self.key else None,
            "progression": self.progression.to_dict(),
            "stats": self.stats.to_dict(),
            "suggested_chords": [chord.to_dict() for chord in self.suggestions],
        }
        if self.metadata is not None:
            payload["title"] = self.metadata.title
            payload["author"] = self.metadata.author
        return payload


@dataclass(slots=True)
class TranspositionResult:
    semitones: int
    original_tokens: tuple[ChordToken, ...]
    tokens: tuple[ChordToken, ...]
    original_key: Key | None
    transposed_key: Key | None
    transposed_text: str
    interval: str
    accidentals: AccidentalCount
    warnings: tuple[str, ...] = ()
    alternatives: list[KeySuggestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "semitones": self.semitones,
            "interval": self.interval,
            "original_key": self.original_key.name if self.original_key else None,
            "transposed_key": self.transposed_key.name if self.transposed_key else None,
            "original_chords": [token.original_text for token in self.original_tokens],
            "transposed_chords": [token.text for token in self.tokens],
            "transposed_text": self.transposed_text,
            "accidentals": {"sharps": self.accidentals.sharps, "flats": self.accidentals.flats},
            "warnings": list(self.warnings),
            "alternatives": [suggestion.to_dict() for suggestion in self.alternatives],
        }


@dataclass(slots=True)
class BatchItem:
    path: str
    analysis: SheetAnalysis | None = None
    error: str | None = None


class SheetProcessor:
    """Coordinate extraction, cached detection and transposition for sheets."""

    def __init__(
        self,
        settings: ProcessingSettings | None = None,
        *,
        extractor: SheetExtractor | None = None,
        cache: DetectionCache[tuple[ChordToken, ...]] | None = None,
        detector: ChordDetector | None = None,
    ) -> None:
        self._settings = settings or ProcessingSettings()
        self._detector = detector or ChordDetector(self._settings.detection)
        self._cache = cache or DetectionCache(
            ttl_seconds=self._settings.cache_ttl_seconds,
            max_entries=self._settings.cache_max_entries,
        )
        if extractor is None:
            extractor = SheetExtractor()
            for name, adapter in build_default_adapters(self._settings).items():
                extractor.register_adapter(name, adapter)
        self._extractor = extractor

    @property
    def settings(self) -> ProcessingSettings:
        return self._settings

    @property
    def cache(self) -> DetectionCache[tuple[ChordToken, ...]]:
        return self._cache

    def detect(self, text: str) -> tuple[ChordToken, ...]:
        config = self._settings.detection
        return self._cache.get_or_compute(
            text,
            lambda: tuple(self._detector.detect(text, config)),
            salt=config.fingerprint,
        )

    def analyze_text(
        self,
        text: str,
        method: ExtractionMethod = ExtractionMethod.MANUAL,
        *,
        source_path: str | None = None,
        metadata: SheetMetadata | None = None,
    ) -> SheetAnalysis:
        tokens = self.detect(text)
        key = detect_key(tokens)
        status = AnalysisStatus.CHORDS_DETECTED if tokens else AnalysisStatus.NO_CHORDS_DETECTED
        if not tokens:
            logger.info("No chords detected in %s", source_path or "text input")

        return SheetAnalysis(
            text=text,
            tokens=tokens,
            key=key,
            progression=analyze_progression(tokens),
            stats=detection_stats(tokens),
            status=status,
            method=method,
            source_path=source_path,
            metadata=metadata,
            suggestions=suggested_chords(key),
        )

    def process_file(self, path: str | Path) -> SheetAnalysis:
        """Extract a file and analyze its text; raises :class:`ExtractionError`."""

        extracted = self._extractor.extract(path)
        if extracted.is_empty:
            logger.warning("No usable text extracted from %s", extracted.source_path)
        return self.analyze_text(
            extracted.text,
            extracted.method,
            source_path=extracted.source_path,
            metadata=extracted.metadata,
        )

    def transpose(
        self,
        analysis: SheetAnalysis,
        semitones: int | None = None,
        *,
        key: Key | None = None,
    ) -> TranspositionResult:
        requested = self._settings.target_semitones if semitones is None else semitones
        shift = normalize_semitones(requested)
        source_key = key or analysis.key

        tokens = tuple(transpose_chords(analysis.tokens, shift, key=source_key))
        target_key = preferred_key(source_key, shift) if source_key else None
        check = validate_transposition(shift)

        return TranspositionResult(
            semitones=shift,
            original_tokens=analysis.tokens,
            tokens=tokens,
            original_key=source_key,
            transposed_key=target_key,
            transposed_text=apply_to_text(analysis.text, tokens),
            interval=interval_name(shift),
            accidentals=count_accidentals(tokens),
            warnings=check.warnings,
            alternatives=rank_alternative_keys(source_key, shift) if source_key else [],
        )

    async def process_files(
        self,
        paths: Iterable[str | Path],
        *,
        concurrency: int = DEFAULT_FILE_CONCURRENCY,
    ) -> list[BatchItem]:
        """Process files in worker threads; one failing file never aborts the batch."""

        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        semaphore = asyncio.Semaphore(concurrency)

        async def _run(path: str | Path) -> BatchItem:
            async with semaphore:
                try:
                    analysis = await asyncio.to_thread(self.process_file, path)
                except ExtractionError as exc:
                    logger.warning("Skipping %s: %s", path, exc)
                    return BatchItem(path=str(path), error=str(exc))
                return BatchItem(path=str(path), analysis=analysis)

        return list(await asyncio.gather(*(_run(path) for path in paths)))


def summarize_batch(items: Sequence[BatchItem]) -> dict[str, int]:
    processed = sum(1 for item in items if item.analysis is not None)
    with_chords = sum(
        1
        for item in items
        if item.analysis is not None and item.analysis.status == AnalysisStatus.CHORDS_DETECTED
    )
    return {"total": len(items), "processed": processed, "failed": len(items) - processed, "with_chords": with_chords}
