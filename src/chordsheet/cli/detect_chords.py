"""CLI command for chord detection and key analysis of chord sheets."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from chordsheet.config import InvalidConfiguration, ProcessingSettings
from chordsheet.pipeline import SheetProcessor, summarize_batch


load_dotenv()

LOGGER = logging.getLogger(__name__)

_SUPPORTED_SUFFIXES = {".pdf", ".txt", ".chords", ".cho"}


def _collect_inputs(target: Path) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(
            path for path in target.rglob("*") if path.is_file() and path.suffix.lower() in _SUPPORTED_SUFFIXES
        )
    return []


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect chords, key and progression in chord sheets")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--path", help="Chord sheet file or directory of sheets")
    source.add_argument("--text", help="Chord sheet text entered directly")
    parser.add_argument("--strict", action="store_true", help="Only accept whitespace-delimited chords")
    parser.add_argument("--min-confidence", type=float, default=None, help="Detection acceptance threshold")
    parser.add_argument("--concurrency", type=int, default=4, help="Files processed in parallel")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> ProcessingSettings:
    settings = ProcessingSettings.from_env()
    overrides: dict[str, object] = {}
    if args.strict:
        overrides["complex_mode"] = False
    if args.min_confidence is not None:
        overrides["min_confidence"] = args.min_confidence
    return replace(settings, **overrides) if overrides else settings


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        if args.concurrency < 1:
            raise InvalidConfiguration("--concurrency must be at least 1")
        settings = build_settings(args)
    except InvalidConfiguration as exc:
        print(json.dumps({"errors": [{"error": str(exc)}]}, ensure_ascii=True, indent=2))
        return 2

    processor = SheetProcessor(settings)

    if args.text is not None:
        analysis = processor.analyze_text(args.text)
        payload = {"results": [analysis.to_dict()], "errors": []}
        print(json.dumps(payload, ensure_ascii=True, indent=2))
        return 0

    source_path = Path(args.path)
    files = _collect_inputs(source_path)
    if not files:
        LOGGER.error("No chord sheets found at %s", source_path)
        payload = {
            "path": str(source_path),
            "results": [],
            "errors": [{"source_path": str(source_path), "error": "No input files"}],
        }
        print(json.dumps(payload, ensure_ascii=True, indent=2))
        return 1

    items = asyncio.run(processor.process_files(files, concurrency=args.concurrency))
    results = [item.analysis.to_dict() for item in items if item.analysis is not None]
    errors = [{"source_path": item.path, "error": item.error} for item in items if item.error is not None]

    payload = {
        "path": str(source_path),
        "summary": summarize_batch(items),
        "results": results,
        "errors": errors,
    }
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0 if not errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
