"""Command line entry point for the naturalization tracker.

Purpose:
  - Keep the profile and trip list in the local store (add, edit, remove,
    import or clear), evaluate eligibility, and export a data pack.
Inputs:
  - CLI args; store location and logging from NATURALIZATION_* settings.
Outputs:
  - Verdict, blockers, warnings and filing dates on stdout.
  - Exit code 0 when eligible (or the command succeeded), 1 when not eligible,
    2 on bad input or a broken store.
Example:
  - naturalization set-profile --dob 1990-04-02 --lpr-date 2020-01-15 --state CA --state-since 2020-03-01
  - naturalization import-csv trips.csv
  - naturalization add-trip --start 2024-03-01 --end 2024-03-20 --destination Japan
  - naturalization remove-trip --number 2
  - naturalization evaluate --as-of 2025-06-01
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

import structlog
from pydantic import ValidationError

from .config import get_settings
from .data_pack import build_data_pack
from .eligibility import EvaluationResult, evaluate
from .issues import Issue
from .log import configure_logging
from .models import Profile, Trip
from .normalize import normalize_date
from .pipeline import load_from_json
from .render import format_date, render_message
from .storage import StorageError, TrackerStore
from .trip_import import parse_trips_csv


logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_ELIGIBLE = 1
EXIT_ERROR = 2


class CommandError(Exception):
    """A command could not run with the given arguments."""


def _date_arg(text: str) -> date:
    nd = normalize_date(text)
    if nd.precision != "day" or nd.value is None:
        raise argparse.ArgumentTypeError(f"expected a date as YYYY-MM-DD, got {text!r}")
    return nd.value


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="naturalization", description="Naturalization eligibility tracker")
    parser.add_argument("--store", type=Path, help="Path to the JSON store (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_eval = sub.add_parser("evaluate", help="Evaluate eligibility")
    p_eval.add_argument("--as-of", type=_date_arg, help="Evaluation date (default: today)")
    p_eval.add_argument("--file", type=Path, help="Evaluate a JSON export ({profile, trips}) instead of the store")

    p_csv = sub.add_parser("import-csv", help="Add trips from a CSV file")
    p_csv.add_argument("csv_file", type=Path)
    p_csv.add_argument("--replace", action="store_true", help="Replace stored trips instead of appending")

    p_prof = sub.add_parser("set-profile", help="Save the residency profile")
    p_prof.add_argument("--dob", type=_date_arg, required=True)
    p_prof.add_argument("--lpr-date", type=_date_arg, required=True)
    p_prof.add_argument("--path", choices=["general", "spouse_3_year"], default="general")
    p_prof.add_argument("--state", required=True)
    p_prof.add_argument("--state-since", type=_date_arg, required=True)

    p_exp = sub.add_parser("export", help="Write a JSON data pack")
    p_exp.add_argument("--output", type=Path, help="Output file (default: stdout)")
    p_exp.add_argument("--as-of", type=_date_arg, help="Evaluation date (default: today)")

    sub.add_parser("list-trips", help="List stored trips with their numbers")

    p_add = sub.add_parser("add-trip", help="Add one trip")
    p_add.add_argument("--start", type=_date_arg, required=True)
    p_add.add_argument("--end", type=_date_arg, required=True)
    p_add.add_argument("--destination")
    p_add.add_argument("--not-counted", action="store_true", help="Do not count this trip as an absence")

    p_edit = sub.add_parser("edit-trip", help="Change fields of one trip")
    p_edit.add_argument("number", type=int, help="Trip number from list-trips")
    p_edit.add_argument("--start", type=_date_arg)
    p_edit.add_argument("--end", type=_date_arg)
    p_edit.add_argument("--destination")
    counted = p_edit.add_mutually_exclusive_group()
    counted.add_argument("--counted", dest="counts_as_absence", action="store_true", default=None)
    counted.add_argument("--not-counted", dest="counts_as_absence", action="store_false")

    p_rm = sub.add_parser("remove-trip", help="Delete one trip")
    which = p_rm.add_mutually_exclusive_group(required=True)
    which.add_argument("--number", type=int, help="Trip number from list-trips")
    which.add_argument("--start", type=_date_arg, help="Delete the trip starting on this date")

    p_clear = sub.add_parser("clear", help="Delete the profile and all trips")
    p_clear.add_argument("--yes", action="store_true", help="Confirm deleting all stored data")

    return parser.parse_args(argv)


def _print_issues(title: str, issues: Sequence[Issue]) -> None:
    if not issues:
        return
    print(f"{title}:")
    for i in issues:
        ref = f" [{i.ref_id}]" if i.ref_id else ""
        print(f"  - {render_message(i)}{ref}")


def print_result(result: EvaluationResult, as_of: date) -> None:
    print(f"As of {as_of.isoformat()}: {'ELIGIBLE' if result.eligible else 'NOT ELIGIBLE'}")
    _print_issues("Blockers", result.blockers)
    _print_issues("Warnings", result.warnings)
    if result.earliest_filing_date:
        print(f"Earliest filing date: {format_date(result.earliest_filing_date)}")
    if result.lower_risk_filing_date:
        print(f"Lower-risk filing date: {format_date(result.lower_risk_filing_date)}")
    if result.metrics:
        pp = result.metrics.physical_presence
        print(
            f"Physical presence: {pp.days_in_us} / {pp.required_days} days "
            f"({pp.percent_of_requirement:.1f}%) in the last {pp.window_years} years"
        )


def _verdict(result: EvaluationResult) -> int:
    return EXIT_OK if result.eligible else EXIT_NOT_ELIGIBLE


def cmd_evaluate(args: argparse.Namespace, store: TrackerStore) -> int:
    as_of = args.as_of or date.today()
    if args.file:
        raw = json.loads(args.file.read_text(encoding="utf-8"))
        build = load_from_json(raw, as_of=as_of, assume_us_mdy=get_settings().assume_us_mdy)
        _print_issues("Import issues", build.issues)
        result = build.evaluation
    else:
        result = evaluate(store.load_profile(), store.load_trips(), as_of=as_of)

    print_result(result, as_of)
    logger.info("evaluate_done", eligible=result.eligible, as_of=as_of.isoformat())
    return _verdict(result)


def cmd_import_csv(args: argparse.Namespace, store: TrackerStore) -> int:
    text = args.csv_file.read_text(encoding="utf-8")
    trips, issues, _snapshots = parse_trips_csv(text, assume_us_mdy=get_settings().assume_us_mdy)
    _print_issues("Rejected rows", issues)

    existing = [] if args.replace else store.load_trips()
    store.save_trips(existing + trips)
    print(f"Imported {len(trips)} trip(s); {len(existing) + len(trips)} stored.")
    logger.info("csv_imported", imported=len(trips), rejected_issues=len(issues))
    return EXIT_ERROR if issues else EXIT_OK


def cmd_set_profile(args: argparse.Namespace, store: TrackerStore) -> int:
    profile = Profile(
        date_of_birth=args.dob,
        lpr_date=args.lpr_date,
        eligibility_path=args.path,
        state_of_residence=args.state,
        state_residence_since=args.state_since,
    )
    store.save_profile(profile)
    print("Profile saved.")
    return EXIT_OK


def cmd_export(args: argparse.Namespace, store: TrackerStore) -> int:
    as_of = args.as_of or date.today()
    profile = store.load_profile()
    trips = store.load_trips()
    result = evaluate(profile, trips, as_of=as_of)

    pack = build_data_pack(profile, trips, result, export_date=date.today(), as_of=as_of)
    text = json.dumps(pack, indent=2)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        print(f"Data pack written to {args.output}")
    else:
        print(text)
    return _verdict(result)


def _trip_line(number: int, trip: Trip) -> str:
    counted = "" if trip.counts_as_absence else " (not counted)"
    return (
        f"{number:>3}. {trip.start_date.isoformat()} -> {trip.end_date.isoformat()}  "
        f"{trip.days} day(s)  {trip.destination or '-'}{counted}"
    )


def _trip_index(trips: List[Trip], number: int) -> int:
    if not 1 <= number <= len(trips):
        raise CommandError(f"No trip number {number}; {len(trips)} stored.")
    return number - 1


def cmd_list_trips(args: argparse.Namespace, store: TrackerStore) -> int:
    trips = store.load_trips()
    if not trips:
        print("No trips stored.")
    for number, trip in enumerate(trips, start=1):
        print(_trip_line(number, trip))
    return EXIT_OK


def cmd_add_trip(args: argparse.Namespace, store: TrackerStore) -> int:
    trip = Trip(
        start_date=args.start,
        end_date=args.end,
        destination=args.destination or None,
        counts_as_absence=not args.not_counted,
    )
    trips = store.load_trips()
    trips.append(trip)
    store.save_trips(trips)
    print(f"Added: {_trip_line(len(trips), trip).strip()}")
    return EXIT_OK


def cmd_edit_trip(args: argparse.Namespace, store: TrackerStore) -> int:
    trips = store.load_trips()
    idx = _trip_index(trips, args.number)

    fields = trips[idx].model_dump()
    for name, value in (
        ("start_date", args.start),
        ("end_date", args.end),
        ("destination", args.destination),
        ("counts_as_absence", args.counts_as_absence),
    ):
        if value is not None:
            fields[name] = value
    # constructor checks end >= start
    trips[idx] = Trip(**fields)

    store.save_trips(trips)
    print(f"Updated: {_trip_line(args.number, trips[idx]).strip()}")
    return EXIT_OK


def cmd_remove_trip(args: argparse.Namespace, store: TrackerStore) -> int:
    trips = store.load_trips()
    if args.number is not None:
        idx = _trip_index(trips, args.number)
    else:
        matches = [i for i, t in enumerate(trips) if t.start_date == args.start]
        if not matches:
            raise CommandError(f"No trip starts on {args.start.isoformat()}.")
        if len(matches) > 1:
            raise CommandError(f"{len(matches)} trips start on {args.start.isoformat()}; remove by --number.")
        idx = matches[0]

    removed = trips.pop(idx)
    store.save_trips(trips)
    print(f"Removed: {_trip_line(idx + 1, removed).strip()}")
    return EXIT_OK


def cmd_clear(args: argparse.Namespace, store: TrackerStore) -> int:
    if not args.yes:
        raise CommandError("This deletes the profile and all trips; pass --yes to confirm.")
    store.clear()
    print("All data cleared.")
    return EXIT_OK


_COMMANDS = {
    "evaluate": cmd_evaluate,
    "import-csv": cmd_import_csv,
    "set-profile": cmd_set_profile,
    "export": cmd_export,
    "list-trips": cmd_list_trips,
    "add-trip": cmd_add_trip,
    "edit-trip": cmd_edit_trip,
    "remove-trip": cmd_remove_trip,
    "clear": cmd_clear,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs)

    store = TrackerStore(args.store or settings.data_file)
    try:
        return _COMMANDS[args.command](args, store)
    except (
        CommandError, StorageError, ValidationError, OSError, UnicodeDecodeError, json.JSONDecodeError
    ) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
