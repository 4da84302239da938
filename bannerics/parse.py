"""
Parsing (Banner HTML -> RawCourseRecord).

- Reads a saved Banner "Registration History" page (list view)
- Extracts EACH course wrapper as exactly ONE RawCourseRecord
- Does NOT interpret dates or times; that is done in normalize.py

Missing elements on the page become blank strings, never exceptions.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from bs4 import BeautifulSoup, Tag

from bannerics.model import LocationParts, RawCourseRecord


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

WRAPPER_SELECTOR = "#scheduleListView .listViewWrapper"
TITLE_LINK_SELECTOR = ".list-view-course-title a.section-details-link"
TITLE_SELECTOR = ".list-view-course-title"
SECTION_SELECTOR = ".list-view-subj-course-section"
MEETING_SELECTOR = ".listViewMeetingInformation"
DATES_SELECTOR = ".listViewMeetingInformation .meetingTimes"
DAYS_SELECTOR = ".ui-pillbox ul li[aria-checked='true']"
INSTRUCTOR_SELECTOR = ".listViewInstructorInformation a.email"
CRN_SELECTOR = ".listViewInstructorInformation .list-view-crn-schedule"

_LOCATION_RE = re.compile(
    r"Location:\s*([^|]+?)\s*Building:\s*([^|]+?)\s*Room:\s*([^|\n]+)\b",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _text(root: Tag, selector: str) -> str:
    el = root.select_one(selector)
    return el.get_text(" ", strip=True) if el else ""


def _parse_location(meeting_text: str) -> LocationParts:
    m = _LOCATION_RE.search(meeting_text)
    if not m:
        return LocationParts()
    campus, building, room = (g.strip() for g in m.groups())
    return LocationParts(campus=campus, building=building, room=room)


def _selected_days(wrapper: Tag) -> Tuple[str, ...]:
    days: List[str] = []
    for li in wrapper.select(DAYS_SELECTOR):
        name = li.get("data-name")
        if name:
            days.append(str(name).strip())
    return tuple(days)


def parse_course_wrapper(wrapper: Tag) -> RawCourseRecord:
    """
    Parses one '.listViewWrapper' block into a RawCourseRecord.
    """
    # Title: prefer the details link, fall back to the whole title cell
    title = _text(wrapper, TITLE_LINK_SELECTOR) or _text(wrapper, TITLE_SELECTOR)

    meeting = wrapper.select_one(MEETING_SELECTOR)
    # newline separator keeps the "Room: ..." value on its own line
    meeting_text = meeting.get_text("\n", strip=True) if meeting else ""

    return RawCourseRecord(
        title=title,
        section_code=_text(wrapper, SECTION_SELECTOR),
        date_range=_text(wrapper, DATES_SELECTOR),
        weekdays=frozenset(_selected_days(wrapper)),
        time_range=meeting_text,
        location=_parse_location(meeting_text),
        instructor=_text(wrapper, INSTRUCTOR_SELECTOR),
        crn=_text(wrapper, CRN_SELECTOR),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_registration_html(html: str) -> List[RawCourseRecord]:
    """
    Parses a whole Registration History page and returns one record per course.

    Returns an empty list if the schedule list view is not on the page
    (e.g. the page was saved before it finished loading).
    """
    soup = BeautifulSoup(html, "html.parser")
    return [parse_course_wrapper(w) for w in soup.select(WRAPPER_SELECTOR)]
