from __future__ import annotations

from dataclasses import replace

import pytest

from chordsheet.config import DetectionConfig, InvalidConfiguration, ProcessingSettings


def test_defaults() -> None:
    settings = ProcessingSettings()

    assert settings.complex_mode is True
    assert settings.min_confidence == 0.7
    assert settings.target_semitones == 0
    assert settings.cache_ttl_seconds == 86400
    assert settings.cache_max_entries == 50
    assert settings.detection == DetectionConfig()


def test_from_env_reads_every_variable() -> None:
    settings = ProcessingSettings.from_env(
        {
            "CHORDSHEET_COMPLEX_MODE": "off",
            "CHORDSHEET_MIN_CONFIDENCE": "0.9",
            "CHORDSHEET_TARGET_SEMITONES": "-3",
            "CHORDSHEET_CACHE_TTL": "60",
            "CHORDSHEET_CACHE_SIZE": "5",
            "CHORDSHEET_OCR_ENABLED": "no",
            "CHORDSHEET_OCR_LANGUAGES": " spa ",
        }
    )

    assert settings.complex_mode is False
    assert settings.min_confidence == 0.9
    assert settings.target_semitones == -3
    assert settings.cache_ttl_seconds == 60.0
    assert settings.cache_max_entries == 5
    assert settings.ocr_enabled is False
    assert settings.ocr_languages == "spa"
    assert settings.detection == DetectionConfig(complex_mode=False, min_confidence=0.9)


def test_from_env_uses_defaults_for_blank_values() -> None:
    assert ProcessingSettings.from_env({"CHORDSHEET_MIN_CONFIDENCE": "  "}) == ProcessingSettings()


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CHORDSHEET_COMPLEX_MODE", "maybe"),
        ("CHORDSHEET_MIN_CONFIDENCE", "high"),
        ("CHORDSHEET_TARGET_SEMITONES", "2.5"),
        ("CHORDSHEET_CACHE_SIZE", "many"),
    ],
)
def test_malformed_values_name_the_variable(name: str, value: str) -> None:
    with pytest.raises(InvalidConfiguration, match=name):
        ProcessingSettings.from_env({name: value})


def test_out_of_range_values_are_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        ProcessingSettings.from_env({"CHORDSHEET_MIN_CONFIDENCE": "1.2"})
    with pytest.raises(InvalidConfiguration):
        ProcessingSettings(target_semitones=25)
    with pytest.raises(InvalidConfiguration):
        ProcessingSettings(cache_ttl_seconds=0)
    with pytest.raises(InvalidConfiguration):
        replace(ProcessingSettings(), cache_max_entries=0)


def test_configuration_error_is_a_value_error() -> None:
    assert issubclass(InvalidConfiguration, ValueError)


def test_detection_fingerprint_tracks_options() -> None:
    assert DetectionConfig().fingerprint != DetectionConfig(complex_mode=False).fingerprint
    assert DetectionConfig().fingerprint == DetectionConfig().fingerprint
