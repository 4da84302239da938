"""
iCalendar (.ics) export.

We convert normalized course events into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Limitations:
- Only one timezone (TZID) per file, and no VTIMEZONE block is embedded.
  Importing apps must recognize the TZID name on their own.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from bannerics.model import NormalizedEvent, ParseFailure, RawCourseRecord
from bannerics.normalize import normalize_all


TZID = "America/Chicago"  # UIUC timezone
PRODID = "-//UIUC Banner Exporter//EN"
CALENDAR_NAME = "UIUC Courses"
DEFAULT_FILENAME = "UIUC_Courses.ics"
UID_DOMAIN = "uiuc-banner"

FOLD_WIDTH = 74
CRLF = "\r\n"

UidFactory = Callable[[datetime], str]


class EmptyResultSet(Exception):
    """
    Raised when not a single record could be converted into an event.
    """


@dataclass
class CalendarExport:
    text: str
    event_count: int
    failures: List[Tuple[RawCourseRecord, ParseFailure]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def escape_text(text: str) -> str:
    """
    Escape text for ICS TEXT values.

    Backslash goes first, so the escapes added afterwards are not doubled.
    CRLF, lone CR and LF all become the two characters "\\n".
    """
    if not text:
        return ""
    return (
        text.replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\r", "\\n")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def fold_line(line: str) -> List[str]:
    """
    Split a content line into 74-character segments.

    Continuation segments start with a single space. Short lines come back unchanged.
    """
    if len(line) <= FOLD_WIDTH:
        return [line]
    out = [line[:FOLD_WIDTH]]
    for i in range(FOLD_WIDTH, len(line), FOLD_WIDTH):
        out.append(" " + line[i : i + FOLD_WIDTH])
    return out


def format_local(dt: datetime) -> str:
    """
    Local datetime without a UTC suffix, used together with TZID.
    """
    return dt.strftime("%Y%m%dT%H%M%S")


def format_utc(dt: datetime) -> str:
    """
    UTC datetime with 'Z' suffix. Naive values are taken as UTC already.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y%m%dT%H%M%SZ")


def make_uid(stamp: datetime) -> str:
    """
    Random part + millisecond timestamp, unique within and across runs.
    """
    millis = int(stamp.replace(tzinfo=stamp.tzinfo or timezone.utc).timestamp() * 1000)
    return f"{uuid.uuid4().hex[:16]}-{millis}@{UID_DOMAIN}"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _event_lines(event: NormalizedEvent, uid: str, dtstamp: str, tzid: str) -> List[str]:
    lines = [
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{dtstamp}",
        f"SUMMARY:{escape_text(event.summary)}",
    ]
    if event.description:
        lines.append(f"DESCRIPTION:{escape_text(event.description)}")
    if event.location:
        lines.append(f"LOCATION:{escape_text(event.location)}")
    lines.append(f"DTSTART;TZID={tzid}:{format_local(event.start)}")
    lines.append(f"DTEND;TZID={tzid}:{format_local(event.end)}")
    if event.recurrence_days:
        byday = ",".join(event.recurrence_days)
        lines.append(f"RRULE:FREQ=WEEKLY;BYDAY={byday};UNTIL={format_local(event.until)}")
    lines.append("END:VEVENT")
    return lines


def encode(
    events: Sequence[NormalizedEvent],
    *,
    now: Optional[datetime] = None,
    uid_factory: Optional[UidFactory] = None,
    tzid: str = TZID,
    calendar_name: str = CALENDAR_NAME,
) -> str:
    """
    Build the full VCALENDAR text for the given events.

    One DTSTAMP is shared by all events of the run. `now` and `uid_factory`
    exist so tests can pin the clock and the identifiers.
    """
    stamp = now if now is not None else datetime.now(timezone.utc)
    stamp = stamp.replace(microsecond=0)
    make = uid_factory if uid_factory is not None else make_uid
    dtstamp = format_utc(stamp)

    lines: List[str] = [
        "BEGIN:VCALENDAR",
        f"PRODID:{PRODID}",
        "VERSION:2.0",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_text(calendar_name)}",
        f"X-WR-TIMEZONE:{tzid}",
    ]
    for ev in events:
        lines.extend(_event_lines(ev, make(stamp), dtstamp, tzid))
    lines.append("END:VCALENDAR")

    folded: List[str] = []
    for line in lines:
        folded.extend(fold_line(line))

    # ICS standard uses CRLF
    return CRLF.join(folded) + CRLF


def build_calendar(records: Iterable[RawCourseRecord], **encode_kwargs) -> CalendarExport:
    """
    Normalize records and encode the ones that parsed.

    Records that fail are skipped and reported in CalendarExport.failures.
    Raises EmptyResultSet if nothing is left to export.
    """
    events, failures = normalize_all(records)
    if not events:
        raise EmptyResultSet(f"no exportable courses ({len(failures)} skipped)")
    text = encode(events, **encode_kwargs)
    return CalendarExport(text=text, event_count=len(events), failures=failures)


def save_calendar(text: str, out_path: str | Path) -> Path:
    """
    Write the calendar text to disk as UTF-8.

    Bytes are written directly so CRLF line endings survive on every platform.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(text.encode("utf-8"))
    return out
