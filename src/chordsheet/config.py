"""Runtime configuration for chord detection, transposition and caching."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_MIN_CONFIDENCE = 0.7
DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_CACHE_MAX_ENTRIES = 50
DEFAULT_OCR_LANGUAGES = "eng+spa"
MAX_TARGET_SEMITONES = 24

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class InvalidConfiguration(ValueError):
    """Configuration rejected before any processing starts."""


@dataclass(frozen=True, slots=True)
class DetectionConfig:
    """Options threaded through every detection call."""

    complex_mode: bool = True
    min_confidence: float = DEFAULT_MIN_CONFIDENCE

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_confidence <= 1.0:
            raise InvalidConfiguration(f"min_confidence must be between 0 and 1, got {self.min_confidence}")

    @property
    def fingerprint(self) -> str:
        return f"complex={int(self.complex_mode)};min_confidence={self.min_confidence:.4f}"


@dataclass(frozen=True, slots=True)
class ProcessingSettings:
    """Validated settings for the end-to-end sheet processor."""

    complex_mode: bool = True
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    target_semitones: int = 0
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    ocr_enabled: bool = True
    ocr_languages: str = DEFAULT_OCR_LANGUAGES

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_confidence <= 1.0:
            raise InvalidConfiguration(f"min_confidence must be between 0 and 1, got {self.min_confidence}")
        if abs(self.target_semitones) > MAX_TARGET_SEMITONES:
            raise InvalidConfiguration(
                f"target_semitones must be between -{MAX_TARGET_SEMITONES} and {MAX_TARGET_SEMITONES}"
            )
        if self.cache_ttl_seconds <= 0:
            raise InvalidConfiguration("cache_ttl_seconds must be positive")
        if self.cache_max_entries < 1:
            raise InvalidConfiguration("cache_max_entries must be at least 1")
        if not self.ocr_languages.strip():
            raise InvalidConfiguration("ocr_languages cannot be empty")

    @property
    def detection(self) -> DetectionConfig:
        return DetectionConfig(complex_mode=self.complex_mode, min_confidence=self.min_confidence)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProcessingSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        return cls(
            complex_mode=_read_bool(source, "CHORDSHEET_COMPLEX_MODE", True),
            min_confidence=_read_float(source, "CHORDSHEET_MIN_CONFIDENCE", DEFAULT_MIN_CONFIDENCE),
            target_semitones=_read_int(source, "CHORDSHEET_TARGET_SEMITONES", 0),
            cache_ttl_seconds=_read_float(source, "CHORDSHEET_CACHE_TTL", DEFAULT_CACHE_TTL_SECONDS),
            cache_max_entries=_read_int(source, "CHORDSHEET_CACHE_SIZE", DEFAULT_CACHE_MAX_ENTRIES),
            ocr_enabled=_read_bool(source, "CHORDSHEET_OCR_ENABLED", True),
            ocr_languages=source.get("CHORDSHEET_OCR_LANGUAGES", DEFAULT_OCR_LANGUAGES).strip(),
        )


def _read_bool(source: Mapping[str, str], name: str, default: bool) -> bool:
    raw = source.get(name, "").strip().casefold()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise InvalidConfiguration(f"{name} must be a boolean flag, got {raw!r}")


def _read_float(source: Mapping[str, str], name: str, default: float) -> float:
    raw = source.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidConfiguration(f"{name} must be a number, got {raw!r}") from exc


def _read_int(source: Mapping[str, str], name: str, default: int) -> int:
    raw = source.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidConfiguration(f"{name} must be an integer, got {raw!r}") from exc
