"""CLI command for transposing the chords of a sheet by a semitone offset."""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging

from dotenv import load_dotenv

from chordsheet.config import MAX_TARGET_SEMITONES, InvalidConfiguration, ProcessingSettings
from chordsheet.detection.models import Key
from chordsheet.extraction.extractor import ExtractionError
from chordsheet.pipeline import SheetProcessor
from chordsheet.theory.notes import is_valid_note


load_dotenv()

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Transpose the chords of a chord sheet")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--path", help="Chord sheet file (PDF or text)")
    source.add_argument("--text", help="Chord sheet text entered directly")
    parser.add_argument("--semitones", type=int, default=None, help="Semitone offset, e.g. 2 or -3")
    parser.add_argument("--key", default=None, help="Original key when detection should be overridden, e.g. Am")
    parser.add_argument("--strict", action="store_true", help="Only accept whitespace-delimited chords")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _parse_key(value: str | None) -> Key | None:
    if value is None:
        return None
    try:
        key = Key.parse(value)
    except ValueError as exc:
        raise InvalidConfiguration(str(exc)) from exc
    if not is_valid_note(key.root):
        raise InvalidConfiguration(f"Unknown key: {value!r}")
    return key


def build_settings(args: argparse.Namespace) -> ProcessingSettings:
    settings = ProcessingSettings.from_env()
    overrides: dict[str, object] = {}
    if args.strict:
        overrides["complex_mode"] = False
    if args.semitones is not None:
        if abs(args.semitones) > MAX_TARGET_SEMITONES:
            raise InvalidConfiguration(
                f"--semitones must be between -{MAX_TARGET_SEMITONES} and {MAX_TARGET_SEMITONES}"
            )
        overrides["target_semitones"] = args.semitones
    return replace(settings, **overrides) if overrides else settings


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        settings = build_settings(args)
        key = _parse_key(args.key)
    except InvalidConfiguration as exc:
        print(json.dumps({"errors": [{"error": str(exc)}]}, ensure_ascii=True, indent=2))
        return 2

    processor = SheetProcessor(settings)

    if args.text is not None:
        analysis = processor.analyze_text(args.text)
    else:
        try:
            analysis = processor.process_file(args.path)
        except ExtractionError as exc:
            LOGGER.error("Extraction failed: %s", exc)
            print(json.dumps({"errors": [{"source_path": args.path, "error": str(exc)}]}, ensure_ascii=True, indent=2))
            return 1

    result = processor.transpose(analysis, key=key)
    payload = {
        "source_path": analysis.source_path,
        "method": analysis.method.value,
        "status": analysis.status.value,
        **result.to_dict(),
        "errors": [],
    }
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
