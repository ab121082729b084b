"""Command line entry point: fill a PDF from a field list and a values file."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any

from formfill.config import get_settings
from formfill.coords.calibration import ZERO_CALIBRATION
from formfill.logging_setup import setup_logging
from formfill.model.field import FieldRecordError, field_from_record
from formfill.pdf.filler import PdfFillError, fill_document

logger = logging.getLogger(__name__)


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fill a PDF with placed field values")
    parser.add_argument("--pdf", required=True, help="Source PDF")
    parser.add_argument("--fields", required=True, help="JSON array of field records")
    parser.add_argument("--values", required=True, help="JSON object mapping slug to value")
    parser.add_argument("--out", required=True, help="Where to write the filled PDF")
    parser.add_argument("--overrides", help="JSON object mapping field id to {x, y}")
    parser.add_argument(
        "--no-calibration",
        action="store_true",
        help="Draw at the stored coordinates without calibration offsets",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.json_logs)

    try:
        fields = [field_from_record(record) for record in _load_json(args.fields)]
        values = _load_json(args.values)
        overrides = _load_json(args.overrides) if args.overrides else None
        source = Path(args.pdf).read_bytes()
    except (OSError, json.JSONDecodeError, FieldRecordError) as exc:
        logger.error("Invalid input: %s", exc)
        return 1

    calibration = ZERO_CALIBRATION if args.no_calibration else settings.calibration()
    try:
        filled = fill_document(source, fields, values, overrides, calibration=calibration)
    except PdfFillError:
        logger.exception("Fill failed for %s", args.pdf)
        return 1

    Path(args.out).write_bytes(filled)
    logger.info("Saved filled PDF to %s", args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
