from __future__ import annotations

from pathlib import Path

from chordsheet.extraction.adapters.txt_adapter import TXTAdapter
from chordsheet.extraction.models import ExtractionMethod


def test_txt_adapter_reads_utf8_sheet_with_headers(tmp_path: Path) -> None:
    sample = tmp_path / "cancion.txt"
    sample.write_text(
        "Título: Canción del mariachi\nArtista: Antonio Banderas\n\nAm        G\nSoy un hombre muy honrado\n",
        encoding="utf-8",
    )

    sheet = TXTAdapter().extract(sample)

    assert sheet.method == ExtractionMethod.MANUAL
    assert sheet.metadata.format_name == "txt"
    assert sheet.metadata.title == "Canción del mariachi"
    assert sheet.metadata.author == "Antonio Banderas"
    assert "Am        G\nSoy un hombre muy honrado" in sheet.text


def test_txt_adapter_normalizes_line_endings_and_punctuation(tmp_path: Path) -> None:
    sample = tmp_path / "windows.txt"
    sample.write_bytes("C\tG\r\nIt’s a long way down…\r\n".encode("utf-8"))

    sheet = TXTAdapter().extract(sample)

    assert sheet.text == "C G\nIt's a long way down..."
    assert sheet.metadata.title == "windows"


def test_txt_adapter_reports_empty_file(tmp_path: Path) -> None:
    sample = tmp_path / "empty.txt"
    sample.write_bytes(b"")

    sheet = TXTAdapter().extract(sample)

    assert sheet.method == ExtractionMethod.EMPTY
    assert sheet.is_empty


def test_txt_adapter_sniffing() -> None:
    adapter = TXTAdapter()

    assert adapter.supports(Path("song.txt"))
    assert adapter.supports(Path("song.chords"))
    assert adapter.supports(Path("README"), b"C G Am F")
    assert not adapter.supports(Path("README"), b"%PDF-1.7")
    assert not adapter.supports(Path("blob"), b"\x00\x01")
    assert not adapter.supports(Path("scan.pdf"), b"C G")
    assert not adapter.supports(Path("README"))
