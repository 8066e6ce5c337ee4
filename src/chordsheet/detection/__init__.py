"""Chord detection, classification and harmonic analysis."""

from .analysis import analyze_progression, detect_key, suggested_chords
from .detector import ChordDetector, classify_chord_type, detection_stats
from .manual import parse_manual_entry
from .models import AnalysisStatus, ChordToken, ChordType, Key, ProgressionMatch

__all__ = [
    "AnalysisStatus",
    "ChordDetector",
    "ChordToken",
    "ChordType",
    "Key",
    "ProgressionMatch",
    "analyze_progression",
    "classify_chord_type",
    "detect_key",
    "detection_stats",
    "parse_manual_entry",
    "suggested_chords",
]
