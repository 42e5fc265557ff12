"""
CLI (Command Line Interface).

Quick terminal commands around the normalizer, e.g.:

    timetable-normalizer normalize <file.json> [--out normalized.json]
    timetable-normalizer validate <file.json>
    timetable-normalizer ocr-text <ocr.txt> [--normalize]
    timetable-normalizer ocr-image <photo.jpg>
    timetable-normalizer show <file.json>

Data commands print JSON to stdout (or --out). Problems are printed as plain
text and reported through the exit code (0 ok, 1 input/data error).
"""

from __future__ import annotations

import argparse
import logging
import mimetypes
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from timetable_normalizer.colors import cycle_colors, random_color
from timetable_normalizer.ocr import parse_ocr_text
from timetable_normalizer.ocr_client import parse_timetable_from_image
from timetable_normalizer.parse import FormatDetectionError, build_timetable, import_timetable, parse_universal
from timetable_normalizer.storage import dump_json, load_json, save_json
from timetable_normalizer.validate import validate_timetable


console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _emit(payload: Any, out: str | None) -> None:
    """
    Write JSON to `out` if given, otherwise print it.
    """
    if out:
        save_json(payload, out)
        print(f"Written to: {out}")
    else:
        print(dump_json(payload))


def _load_input(path: str) -> Any:
    data = load_json(path)
    if data is None:
        print(f"Could not read JSON from: {path}")
    return data


def _color_assigner(args: argparse.Namespace):
    return cycle_colors() if args.stable_colors else random_color


def _print_errors(errors: list[str]) -> None:
    print(f"Invalid timetable ({len(errors)} error(s)):")
    for err in errors:
        print(f"- {err}")


def _cmd_normalize(args: argparse.Namespace) -> int:
    """
    Detect the input format, normalize it and validate the result.
    """
    data = _load_input(args.file)
    if data is None:
        return 1

    try:
        if args.no_validate:
            _emit(parse_universal(data, _color_assigner(args), args.slot_minutes), args.out)
            return 0
        result = import_timetable(data, _color_assigner(args), args.slot_minutes)
    except FormatDetectionError as exc:
        print(f"Unable to parse timetable format: {exc}")
        return 1

    if not result.valid:
        _print_errors(result.errors)
        return 1

    _emit(result.sanitized, args.out)
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    data = _load_input(args.file)
    if data is None:
        return 1

    result = validate_timetable(data, allow_partial=args.partial)
    if result.valid:
        print("Timetable is valid.")
        return 0

    _print_errors(result.errors)
    if args.partial and result.sanitized is not None and args.out:
        save_json(result.sanitized, args.out)
        print(f"Valid part written to: {args.out}")
    return 1


def _cmd_ocr_text(args: argparse.Namespace) -> int:
    """
    Parse a text file produced by an OCR tool.
    """
    try:
        text = Path(args.file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Could not read text from {args.file}: {exc}")
        return 1

    grid = parse_ocr_text(text)
    if args.normalize:
        _emit(parse_universal(grid, _color_assigner(args), args.slot_minutes), args.out)
    else:
        _emit(grid, args.out)
    return 0


def _cmd_ocr_image(args: argparse.Namespace) -> int:
    """
    Send an image to the OCR service and parse the returned text.
    """
    path = Path(args.file)
    try:
        image = path.read_bytes()
    except OSError as exc:
        print(f"Could not read image {path}: {exc}")
        return 1

    mime_type = args.mime or mimetypes.guess_type(path.name)[0] or "image/jpeg"
    result = parse_timetable_from_image(image, mime_type)
    if not result["success"]:
        print(f"{result['error']}: {result['details']}")
        return 1

    print(result["message"])
    _emit(result["data"], args.out)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Pretty-print a timetable (any supported format) as one table per day.
    """
    data = _load_input(args.file)
    if data is None:
        return 1

    try:
        timetable = build_timetable(data, _color_assigner(args))
    except FormatDetectionError as exc:
        print(f"Unable to parse timetable format: {exc}")
        return 1

    console.print(f"[bold]{timetable.name}[/bold]  {timetable.semester} / {timetable.academic_year}")
    colors = {s.name: s.color for s in timetable.subjects}

    if not timetable.schedule:
        console.print("No periods found.")
        return 0

    for day in timetable.schedule:
        table = Table(title=day.day, box=box.SIMPLE_HEAVY, title_justify="left")
        table.add_column("Time", no_wrap=True)
        table.add_column("Subject")
        table.add_column("Type")
        table.add_column("Room")
        table.add_column("Section")

        for p in day.periods:
            time_range = f"{p.start_time}-{p.end_time}" if p.end_time else p.start_time
            color = colors.get(p.subject)
            subject = f"[{color}]{p.subject}[/]" if color else p.subject
            table.add_row(time_range, subject, p.type, p.room or "-", p.section)

        console.print(table)

    console.print(f"{len(timetable.subjects)} subjects, {timetable.period_count()} periods")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="timetable-normalizer", description="Timetable normalizer CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_color_flag(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--stable-colors",
            action="store_true",
            help="Assign palette colors in order instead of at random",
        )

    p_norm = sub.add_parser("normalize", help="Normalize a timetable JSON file")
    p_norm.add_argument("file", type=str, help="Input JSON file")
    p_norm.add_argument("--out", type=str, default=None, help="Output JSON file (default: stdout)")
    p_norm.add_argument(
        "--slot-minutes",
        type=int,
        default=60,
        help="Class length used to derive end times for time-slot input (0 = leave empty)",
    )
    p_norm.add_argument("--no-validate", action="store_true", help="Skip validation of the result")
    add_color_flag(p_norm)

    p_val = sub.add_parser("validate", help="Validate a canonical timetable JSON file")
    p_val.add_argument("file", type=str, help="Input JSON file")
    p_val.add_argument("--partial", action="store_true", help="Keep the valid part of an invalid timetable")
    p_val.add_argument("--out", type=str, default=None, help="Where to write the valid part (with --partial)")

    p_text = sub.add_parser("ocr-text", help="Parse OCR text into a timetable grid")
    p_text.add_argument("file", type=str, help="Text file with OCR output")
    p_text.add_argument("--normalize", action="store_true", help="Convert the grid to the canonical format")
    p_text.add_argument("--slot-minutes", type=int, default=60, help="Class length used to derive end times")
    p_text.add_argument("--out", type=str, default=None, help="Output JSON file (default: stdout)")
    add_color_flag(p_text)

    p_img = sub.add_parser("ocr-image", help="Extract a timetable grid from an image via OCR.space")
    p_img.add_argument("file", type=str, help="Image file (JPEG, PNG, GIF, BMP)")
    p_img.add_argument("--mime", type=str, default=None, help="Override the detected MIME type")
    p_img.add_argument("--out", type=str, default=None, help="Output JSON file (default: stdout)")

    p_show = sub.add_parser("show", help="Show a timetable as tables")
    p_show.add_argument("file", type=str, help="Input JSON file")
    add_color_flag(p_show)

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "normalize":
        raise SystemExit(_cmd_normalize(args))
    if args.command == "validate":
        raise SystemExit(_cmd_validate(args))
    if args.command == "ocr-text":
        raise SystemExit(_cmd_ocr_text(args))
    if args.command == "ocr-image":
        raise SystemExit(_cmd_ocr_image(args))
    if args.command == "show":
        raise SystemExit(_cmd_show(args))

    raise SystemExit(2)
