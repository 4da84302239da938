"""
Central data model definitions used across the project.

This module defines the canonical shape of the records we read from the
Banner "Registration History" page and of the events we write to the .ics file:
- all modules share the same field names
- the converter only depends on these plain values, never on the HTML tree
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Tuple, Union


@dataclass(frozen=True)
class LocationParts:
    """
    Campus / building / room of a meeting. Any part may be blank.
    """

    campus: str = ""
    building: str = ""
    room: str = ""


@dataclass(frozen=True)
class RawCourseRecord:
    """
    Represents one course listing exactly as it was read from the page.

    All fields are free text. Only date_range and time_range are required
    for a successful conversion.
    """

    title: str
    date_range: str
    time_range: str
    section_code: str = ""
    weekdays: FrozenSet[str] = frozenset()
    location: LocationParts = field(default_factory=LocationParts)
    instructor: str = ""
    crn: str = ""


@dataclass(frozen=True)
class NormalizedEvent:
    """
    Represents one (possibly recurring) calendar event ready for encoding.

    start/end are naive local datetimes in the calendar timezone and always
    point at the first real meeting, not at the term start.
    """

    summary: str
    description: str
    location: str
    start: datetime
    end: datetime
    recurrence_days: Tuple[str, ...]
    until: datetime


class FailureKind(enum.Enum):
    DATE_RANGE = "DateRange"
    TIME_RANGE = "TimeRange"


@dataclass(frozen=True)
class ParseFailure:
    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


NormalizeResult = Union[NormalizedEvent, ParseFailure]
