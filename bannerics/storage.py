"""
Persistent storage for parsed course records.

This module manages JSON files like:

    records.json  ->  {"records": [ {...}, {...} ]}

Design rationale:
- the Banner page is only reachable inside a logged-in browser session
- a records file keeps what was parsed from it, so the calendar can be
  re-exported (e.g. with another calendar name) without the page
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List

from bannerics.model import LocationParts, RawCourseRecord


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key, "")
    return value.strip() if isinstance(value, str) else ""


def record_to_dict(record: RawCourseRecord) -> dict[str, Any]:
    return {
        "title": record.title,
        "section_code": record.section_code,
        "date_range": record.date_range,
        "weekdays": sorted(record.weekdays),
        "time_range": record.time_range,
        "location": {
            "campus": record.location.campus,
            "building": record.location.building,
            "room": record.location.room,
        },
        "instructor": record.instructor,
        "crn": record.crn,
    }


def record_from_dict(data: dict[str, Any]) -> RawCourseRecord:
    """
    Build a record from one JSON object. Missing or non-string fields become blank.
    """
    loc = data.get("location")
    if not isinstance(loc, dict):
        loc = {}
    days = data.get("weekdays", [])
    if not isinstance(days, list):
        days = []

    return RawCourseRecord(
        title=_str_field(data, "title"),
        section_code=_str_field(data, "section_code"),
        date_range=_str_field(data, "date_range"),
        weekdays=frozenset(d.strip() for d in days if isinstance(d, str) and d.strip()),
        time_range=_str_field(data, "time_range"),
        location=LocationParts(
            campus=_str_field(loc, "campus"),
            building=_str_field(loc, "building"),
            room=_str_field(loc, "room"),
        ),
        instructor=_str_field(data, "instructor"),
        crn=_str_field(data, "crn"),
    )


def load_records(path: str | Path) -> List[RawCourseRecord]:
    """
    Load records from a JSON file.

    Returns an empty list if the file does not exist or is invalid.
    Entries that are not JSON objects are skipped.
    """
    records_path = Path(path)

    if not records_path.exists():
        return []

    try:
        data = json.loads(records_path.read_text(encoding="utf-8"))
        items = data.get("records", [])
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return []

    if not isinstance(items, list):
        return []
    return [record_from_dict(x) for x in items if isinstance(x, dict)]


def save_records(records: Iterable[RawCourseRecord], path: str | Path) -> None:
    """
    Save records to a JSON file. Creates parent directories if needed.
    """
    records_path = Path(path)
    records_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"records": [record_to_dict(r) for r in records]}
    records_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
