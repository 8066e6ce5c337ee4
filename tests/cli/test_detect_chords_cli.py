from __future__ import annotations

import json
from pathlib import Path

import pytest

from chordsheet.cli import detect_chords


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CHORDSHEET_COMPLEX_MODE", "CHORDSHEET_MIN_CONFIDENCE", "CHORDSHEET_OCR_ENABLED"):
        monkeypatch.delenv(name, raising=False)


def test_detect_chords_cli_analyzes_text(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = detect_chords.main(["--text", "C G Am F"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    (result,) = payload["results"]
    assert result["key"] == "C"
    assert [chord["text"] for chord in result["chords"]] == ["C", "G", "Am", "F"]
    assert result["progression"]["name"] == "I-V-vi-IV"
    assert payload["errors"] == []


def test_detect_chords_cli_strict_mode(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = detect_chords.main(["--text", "C G Am F", "--strict"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert [chord["text"] for chord in payload["results"][0]["chords"]] == ["Am"]


def test_detect_chords_cli_processes_directory(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "one.txt").write_text("C G Am F\n", encoding="utf-8")
    (tmp_path / "two.txt").write_text("Just lyrics here\n", encoding="utf-8")
    (tmp_path / "ignored.bin").write_bytes(b"\x00")

    exit_code = detect_chords.main(["--path", str(tmp_path)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["summary"] == {"total": 2, "processed": 2, "failed": 0, "with_chords": 1}
    statuses = {Path(item["source_path"]).name: item["status"] for item in payload["results"]}
    assert statuses == {"one.txt": "chords_detected", "two.txt": "no_chords_detected"}


def test_detect_chords_cli_rejects_invalid_confidence(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = detect_chords.main(["--text", "C", "--min-confidence", "1.5"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 2
    assert "min_confidence" in payload["errors"][0]["error"]


def test_detect_chords_cli_reports_missing_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = detect_chords.main(["--path", str(tmp_path / "nothing-here")])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["errors"]
