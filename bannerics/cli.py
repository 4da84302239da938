"""
CLI (Command Line Interface).

This module provides the terminal commands, e.g.:

    bannerics parse <page.html> --out records.json
    bannerics show <page.html | records.json>
    bannerics export <page.html | records.json | URL> --out UIUC_Courses.ics

A source is either a saved Registration History page, a URL of that page
(pass --cookie from a logged-in browser session), or a records JSON file
written by `bannerics parse`.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import requests
from rich.console import Console
from rich.table import Table
from rich import box

from bannerics import export_ics
from bannerics.export_ics import EmptyResultSet, build_calendar, save_calendar
from bannerics.model import RawCourseRecord
from bannerics.normalize import normalize_all
from bannerics.parse import parse_registration_html
from bannerics.scrape import REGISTRATION_HISTORY_URL, load_page
from bannerics.storage import load_records, save_records


NO_COURSES_MESSAGE = (
    "No courses were parsed. Make sure the page is the Registration History list and that it has loaded."
)

console = Console()


def _load_source(source: str, cookie: Optional[str]) -> List[RawCourseRecord]:
    """
    Load records from a records JSON file or from a page (file or URL).

    Raises OSError / requests.RequestException if the source cannot be read.
    """
    if source.lower().endswith(".json"):
        if not Path(source).exists():
            raise FileNotFoundError(f"No such file: {source}")
        return load_records(source)
    return parse_registration_html(load_page(source, cookie=cookie))


def _load_or_report(args: argparse.Namespace) -> Optional[List[RawCourseRecord]]:
    try:
        return _load_source(args.source, args.cookie)
    except (OSError, requests.RequestException) as e:
        print(f"Could not load {args.source}: {e}")
        return None


def _cmd_parse(args: argparse.Namespace) -> int:
    """
    Parse a page and cache the raw records as JSON.
    """
    records = _load_or_report(args)
    if records is None:
        return 1
    if not records:
        print(NO_COURSES_MESSAGE)
        return 1

    save_records(records, args.out)
    print(f"Parsed {len(records)} courses. JSON written to: {args.out}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Print the events that would be exported, plus the skipped records.
    """
    records = _load_or_report(args)
    if records is None:
        return 1

    events, failures = normalize_all(records)
    for record, failure in failures:
        console.print(f"SKIP  {record.title or '(no title)'}: {failure}", markup=False, highlight=False)

    if not events:
        console.print(NO_COURSES_MESSAGE, markup=False, highlight=False)
        return 1

    table = Table(title=f"{len(events)} events", box=box.SIMPLE_HEAVY)
    table.add_column("Course")
    table.add_column("First meeting")
    table.add_column("Time")
    table.add_column("Days")
    table.add_column("Until")
    table.add_column("Location")
    for ev in events:
        table.add_row(
            ev.summary,
            ev.start.strftime("%a %Y-%m-%d"),
            f"{ev.start:%H:%M}-{ev.end:%H:%M}",
            ",".join(ev.recurrence_days) or "once",
            ev.until.strftime("%Y-%m-%d"),
            ev.location,
        )
    console.print(table)
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    """
    Export all parsed courses into one iCalendar (.ics) file.
    """
    records = _load_or_report(args)
    if records is None:
        return 1

    try:
        result = build_calendar(records, tzid=args.tz, calendar_name=args.calendar_name)
    except EmptyResultSet:
        print(NO_COURSES_MESSAGE)
        return 1

    for record, failure in result.failures:
        print(f"SKIP  {record.title or '(no title)'}: {failure}")

    out = save_calendar(result.text, args.out)
    print(f"Exported {result.event_count} events to: {out}")
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "source",
        type=str,
        nargs="?",
        default=REGISTRATION_HISTORY_URL,
        help="Saved page (.html), records file (.json) or page URL",
    )
    p.add_argument("--cookie", type=str, default=None, help="Cookie header for fetching the page URL")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="bannerics", description="UIUC Banner Registration -> .ics exporter")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse a page and save the course records as JSON")
    _add_source_args(p_parse)
    p_parse.add_argument("--out", type=Path, default=Path("records.json"), help="Output JSON path")

    p_show = sub.add_parser("show", help="Show the events that would be exported")
    _add_source_args(p_show)

    p_export = sub.add_parser("export", help="Export all courses to an .ics file")
    _add_source_args(p_export)
    p_export.add_argument("--out", type=Path, default=Path(export_ics.DEFAULT_FILENAME), help="Output .ics path")
    p_export.add_argument("--tz", type=str, default=export_ics.TZID, help="TZID used for DTSTART/DTEND")
    p_export.add_argument("--calendar-name", type=str, default=export_ics.CALENDAR_NAME, help="X-WR-CALNAME value")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "parse":
        raise SystemExit(_cmd_parse(args))
    if args.command == "show":
        raise SystemExit(_cmd_show(args))
    if args.command == "export":
        raise SystemExit(_cmd_export(args))

    raise SystemExit(2)
