"""
Module: cli

Purpose:
    Command-line entry point: `photo-report`.

    Reads a JSON manifest (metadata, layout and photo list) or a list of
    photo paths plus metadata flags, validates the request, generates the
    requested documents and prints one status line.

Manifest format:
    {
      "metadata": {"institution_name": "...", "motif": "...",
                   "process_number": "...", "address": "...",
                   "date": "2024-05-01", "comments": "..."},
      "layout": {"columns": 2, "style": "bordered"},
      "photos": [{"id": "a", "path": "img/a.jpg",
                  "description": "...", "rotation": 90}]
    }
    Photo paths are relative to the manifest file.

Key Functions:
    - main(): Parse arguments and run a generation
    - load_manifest(): Build metadata, photos and layout from JSON
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from photo_report import __version__
from photo_report.core.models import PhotoRecord, ReportMetadata
from photo_report.utils.logging_utils import configure_logging

from .config import SUPPORTED_FORMATS, ReportConfig
from .controller import generate_with_status
from .layout import LayoutConfig, LayoutStyle, SUPPORTED_COLUMNS
from .validation import ValidationError, format_report_date, validate_request

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """Manifest file could not be read or is malformed."""
    pass


def load_manifest(path: Path) -> Tuple[ReportMetadata, List[PhotoRecord], dict]:
    """
    Read a JSON manifest.

    Args:
        path: Manifest file

    Returns:
        (metadata, photos, layout options) as written in the file

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object")

    fields = data.get("metadata") or {}
    metadata = ReportMetadata(
        institution_name=str(fields.get("institution_name", "")),
        motif=str(fields.get("motif", "")),
        process_number=str(fields.get("process_number", "")),
        address=str(fields.get("address", "")),
        date=str(fields.get("date", "")),
        comments=str(fields.get("comments", "")),
    )

    photos: List[PhotoRecord] = []
    for index, entry in enumerate(data.get("photos") or [], start=1):
        if isinstance(entry, str):
            entry = {"path": entry}
        if "path" not in entry:
            raise ManifestError(f"Photo {index} in {path} has no path")
        try:
            photos.append(PhotoRecord(
                id=str(entry.get("id") or index),
                source=path.parent / entry["path"],
                description=str(entry.get("description", "")),
                rotation=int(entry.get("rotation", 0)),
            ))
        except (TypeError, ValueError) as e:
            raise ManifestError(f"Photo {index} in {path} is invalid: {e}") from e

    return metadata, photos, dict(data.get("layout") or {})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photo-report",
        description="Generate a photographic report (PDF and DOCX) from photos and metadata.",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="A JSON manifest, or photo files in report order",
    )
    parser.add_argument("--institution", help="Institution name")
    parser.add_argument("--motif", help="Reason for the report")
    parser.add_argument("--process", dest="process_number", help="Process number")
    parser.add_argument("--address", help="Institution address")
    parser.add_argument("--date", help="Report date (YYYY-MM-DD)")
    parser.add_argument("--comments", help="Free-text comments")
    parser.add_argument("--columns", type=int, choices=SUPPORTED_COLUMNS, help="Figures per row")
    parser.add_argument("--style", choices=[s.value for s in LayoutStyle], help="Cell style")
    parser.add_argument("--square-borders", action="store_true", help="Square rules in bordered PDF cells")
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=SUPPORTED_FORMATS,
        help="Output format (repeatable, default: all)",
    )
    parser.add_argument("--output-dir", "-o", type=Path, default=Path("."), help="Output directory")
    parser.add_argument("--sync", action="store_true", help="Normalize images in-process")
    parser.add_argument("--workers", type=int, help="Worker processes for image normalization")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _request_from_args(args: argparse.Namespace) -> Tuple[ReportMetadata, List[PhotoRecord], dict]:
    if len(args.inputs) == 1 and args.inputs[0].suffix.lower() == ".json":
        metadata, photos, layout = load_manifest(args.inputs[0])
    else:
        metadata = ReportMetadata(institution_name="", motif="", process_number="")
        photos = [PhotoRecord(id=str(i), source=p) for i, p in enumerate(args.inputs, start=1)]
        layout = {}

    overrides = {
        "institution_name": args.institution,
        "motif": args.motif,
        "process_number": args.process_number,
        "address": args.address,
        "date": args.date,
        "comments": args.comments,
    }
    values = {name: getattr(metadata, name) for name in overrides}
    values.update({name: value for name, value in overrides.items() if value is not None})
    return ReportMetadata(**values), photos, layout


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the command line.

    Returns:
        0 when every requested document was written, 1 otherwise
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        metadata, photos, layout_options = _request_from_args(args)
        validate_request(metadata, photos)
        layout = LayoutConfig(
            columns=args.columns or int(layout_options.get("columns", 1)),
            style=args.style or layout_options.get("style", LayoutStyle.PLAIN),
            rounded_borders=not args.square_borders and bool(layout_options.get("rounded_borders", True)),
        )
        config = ReportConfig(
            output_dir=args.output_dir,
            layout=layout,
            formats=tuple(args.formats) if args.formats else SUPPORTED_FORMATS,
            prefer_isolated=not args.sync,
            max_workers=args.workers,
        )
    except ValidationError as e:
        for message in e.messages:
            print(message, file=sys.stderr)
        return 1
    except (ManifestError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1

    metadata = replace(metadata, date=format_report_date(metadata.date))

    status = generate_with_status(metadata, photos, config)
    print(status.message, file=sys.stdout if status.ok else sys.stderr)
    return 0 if status.ok else 1


if __name__ == "__main__":
    sys.exit(main())
