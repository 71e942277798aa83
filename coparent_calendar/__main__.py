"""Command-line entry for coparent_calendar.

Reads an ICS file and either prints the parsed payloads, prints the
resolved custody assignment for a range of days, or writes the events back
out as normalised ICS.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from .exceptions import CoparentCalendarError, ICSValidationError
from .ics import ICSImporter, export_ics, ical_events_to_event_payloads, parse_ics, validate_ics_file
from .logging_setup import configure_logging
from .models import ImportResult, Parent
from .service import EventService
from .settings import get_settings
from .storage import InMemoryEventStore


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the coparent_calendar CLI."""
    parser = argparse.ArgumentParser(
        prog="coparent_calendar",
        description="Coparent Calendar - custody schedule expansion and ICS tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m coparent_calendar parse schedule.ics
  python -m coparent_calendar days schedule.ics --start 2025-06-01 --end 2025-06-30
  python -m coparent_calendar export schedule.ics -o normalised.ics
        """,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Print the events of an ICS file as JSON")
    parse_cmd.add_argument("file", type=Path, help="Path to a .ics file")
    parse_cmd.add_argument("--parent", choices=[p.value for p in Parent], default=Parent.A.value)

    days_cmd = subparsers.add_parser("days", help="Print the resolved event for each day")
    days_cmd.add_argument("file", type=Path, help="Path to a .ics file")
    days_cmd.add_argument("--start", type=_iso_date, required=True, metavar="YYYY-MM-DD")
    days_cmd.add_argument("--end", type=_iso_date, required=True, metavar="YYYY-MM-DD")
    days_cmd.add_argument("--parent", choices=[p.value for p in Parent], default=Parent.A.value)

    export_cmd = subparsers.add_parser("export", help="Re-export an ICS file in normalised form")
    export_cmd.add_argument("file", type=Path, help="Path to a .ics file")
    export_cmd.add_argument("-o", "--output", type=Path, help="Write here instead of stdout")
    export_cmd.add_argument("--parent", choices=[p.value for p in Parent], default=Parent.A.value)

    return parser


def _read_ics(path: Path) -> bytes:
    """Read an ICS file after checking its name and size."""
    validation = validate_ics_file(path.name, path.stat().st_size)
    if not validation.valid:
        raise ICSValidationError(validation.error or "Invalid ICS file")
    return path.read_bytes()


def _import(path: Path, parent: str) -> tuple[EventService, ImportResult]:
    service = EventService(InMemoryEventStore())
    result = ICSImporter(service.create_event).import_file(path.name, _read_ics(path), parent)
    print(result.message, file=sys.stderr)
    return service, result


def _cmd_parse(args: argparse.Namespace) -> int:
    payloads = ical_events_to_event_payloads(parse_ics(_read_ics(args.file)), args.parent)
    print(json.dumps([p.model_dump(mode="json") for p in payloads], indent=2))
    return 0


def _cmd_days(args: argparse.Namespace) -> int:
    service, result = _import(args.file, args.parent)
    if result.validation_error:
        return 1

    for day, event in service.occupancy(args.start, args.end).items():
        if event is None:
            print(f"{day.isoformat()}  -")
        else:
            print(f"{day.isoformat()}  {event.parent.value}  {event.type.value:<8}  {event.title}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    service, result = _import(args.file, args.parent)
    if result.validation_error or not result.success_count:
        return 1

    text = export_ics(service.list_events())
    if args.output:
        args.output.write_text(text, encoding="utf-8", newline="")
    else:
        sys.stdout.write(text)
    return 0


_COMMANDS = {"parse": _cmd_parse, "days": _cmd_days, "export": _cmd_export}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the coparent_calendar CLI and return its exit code."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    configure_logging(debug_mode=args.debug, level_name=get_settings().log_level)

    try:
        return _COMMANDS[args.command](args)
    except FileNotFoundError:
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1
    except CoparentCalendarError as e:
        print(e.message, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
