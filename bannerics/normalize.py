"""
Normalization (RawCourseRecord -> NormalizedEvent).

- Parses the term date range ("08/25/2025 -- 12/10/2025")
- Parses the 12-hour time range ("09:30 AM - 10:45 AM")
- Maps weekday names to RRULE codes
- Moves DTSTART to the first real meeting of the pattern

Important rule (DO NOT CHANGE):
- DTSTART must fall on one of the BYDAY weekdays. If it is left on the term
  start date, calendar apps add an extra occurrence on that date.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import FrozenSet, Iterable, List, Optional, Tuple

from bannerics.model import (
    FailureKind,
    NormalizedEvent,
    NormalizeResult,
    ParseFailure,
    RawCourseRecord,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DATE_RANGE_DELIMITER = "--"
DESCRIPTION_FOOTER = "Generated by UIUC Banner exporter"

# Sunday-first, the same numbering the Banner pillbox uses
WEEKDAYS: Tuple[Tuple[str, str], ...] = (
    ("Sunday", "SU"),
    ("Monday", "MO"),
    ("Tuesday", "TU"),
    ("Wednesday", "WE"),
    ("Thursday", "TH"),
    ("Friday", "FR"),
    ("Saturday", "SA"),
)
DAY_NUMBER = {name: i for i, (name, _) in enumerate(WEEKDAYS)}

_MDY_RE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")
_TIME_RANGE_RE = re.compile(
    r"(\d{1,2})\s*:\s*(\d{2})\s*(AM|PM)\s*-\s*(\d{1,2})\s*:\s*(\d{2})\s*(AM|PM)",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_mdy(text: str) -> Optional[date]:
    m = _MDY_RE.match(text)
    if not m:
        return None
    month, day, year = (int(x) for x in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _to_24h(hour12: int, meridiem: str) -> int:
    hour = hour12 % 12
    if meridiem.upper() == "PM":
        hour += 12
    return hour


def _sunday_based_weekday(d: date) -> int:
    # date.weekday() is Monday=0; we count from Sunday=0
    return (d.weekday() + 1) % 7


def _canonical_day_name(name: str) -> str:
    return name.strip().capitalize()


def parse_date_range(text: str) -> Optional[Tuple[date, date]]:
    """
    Parse "MM/DD/YYYY -- MM/DD/YYYY" into (term_start, term_end).

    Returns None if either side is missing or not a valid date.
    """
    parts = (text or "").split(DATE_RANGE_DELIMITER)
    if len(parts) != 2:
        return None
    start = _parse_mdy(parts[0])
    end = _parse_mdy(parts[1])
    if start is None or end is None:
        return None
    return start, end


def parse_time_range(text: str) -> Optional[Tuple[time, time]]:
    """
    Parse "H:MM AM - H:MM PM" into two 24-hour times.
    """
    m = _TIME_RANGE_RE.search(text or "")
    if not m:
        return None
    h1, m1, ap1, h2, m2, ap2 = m.groups()
    if int(h1) > 12 or int(h2) > 12:
        return None
    try:
        start = time(_to_24h(int(h1), ap1), int(m1))
        end = time(_to_24h(int(h2), ap2), int(m2))
    except ValueError:
        return None
    return start, end


def weekday_codes(names: Iterable[str]) -> Tuple[str, ...]:
    """
    Map weekday names to RRULE codes, Sunday first. Unknown names are ignored.
    """
    wanted = {_canonical_day_name(n) for n in names}
    return tuple(code for name, code in WEEKDAYS if name in wanted)


def weekday_numbers(names: Iterable[str]) -> FrozenSet[int]:
    out = set()
    for n in names:
        num = DAY_NUMBER.get(_canonical_day_name(n))
        if num is not None:
            out.add(num)
    return frozenset(out)


def first_occurrence(term_start: date, allowed: Iterable[int]) -> date:
    """
    Return the first date >= term_start whose weekday (Sunday=0) is allowed.

    An empty set means a single event on term_start itself.
    The result is not capped at the term end: a term shorter than the gap
    to the first selected weekday yields a date after it.
    """
    allowed = set(allowed)
    if not allowed:
        return term_start
    d = term_start
    for _ in range(7):
        if _sunday_based_weekday(d) in allowed:
            return d
        d += timedelta(days=1)
    # unreachable for day numbers 0..6
    return term_start


def _summary(record: RawCourseRecord) -> str:
    title = record.title.strip()
    section = record.section_code.strip()
    return f"{title} | {section}" if section else title


def _description(record: RawCourseRecord) -> str:
    lines: List[str] = []
    crn = record.crn.strip()
    instructor = record.instructor.strip()
    if crn:
        lines.append(f"CRN: {crn}")
    if instructor:
        lines.append(f"Instructor: {instructor}")
    start_text, end_text = (p.strip() for p in record.date_range.split(DATE_RANGE_DELIMITER))
    lines.append(f"From {start_text} to {end_text}")
    lines.append(DESCRIPTION_FOOTER)
    return "\n".join(lines)


def _location(record: RawCourseRecord) -> str:
    loc = record.location
    parts = [p.strip() for p in (loc.campus, loc.building, loc.room)]
    return ", ".join(p for p in parts if p)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize(record: RawCourseRecord) -> NormalizeResult:
    """
    Convert one raw course record into a NormalizedEvent.

    Never raises: unparsable date or time text is returned as a ParseFailure
    so the caller can skip the record and carry on with the rest.
    """
    dates = parse_date_range(record.date_range)
    if dates is None:
        return ParseFailure(FailureKind.DATE_RANGE, f"cannot parse date range {record.date_range!r}")
    term_start, term_end = dates

    times = parse_time_range(record.time_range)
    if times is None:
        return ParseFailure(FailureKind.TIME_RANGE, f"cannot parse time range {record.time_range!r}")
    start_time, end_time = times

    # overnight meetings are not supported
    if end_time <= start_time:
        return ParseFailure(FailureKind.TIME_RANGE, f"end is not after start in {record.time_range!r}")

    first_day = first_occurrence(term_start, weekday_numbers(record.weekdays))

    return NormalizedEvent(
        summary=_summary(record),
        description=_description(record),
        location=_location(record),
        start=datetime.combine(first_day, start_time),
        end=datetime.combine(first_day, end_time),
        recurrence_days=weekday_codes(record.weekdays),
        until=datetime.combine(term_end, time(23, 59, 59)),
    )


def normalize_all(
    records: Iterable[RawCourseRecord],
) -> Tuple[List[NormalizedEvent], List[Tuple[RawCourseRecord, ParseFailure]]]:
    """
    Normalize many records.

    Returns (events in input order, [(record, failure), ...]).
    """
    events: List[NormalizedEvent] = []
    failures: List[Tuple[RawCourseRecord, ParseFailure]] = []
    for record in records:
        result = normalize(record)
        if isinstance(result, ParseFailure):
            failures.append((record, result))
        else:
            events.append(result)
    return events, failures
