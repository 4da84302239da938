"""
Unit tests for record normalization.

Most important rule tested here:
- DTSTART is moved to the first day >= term start that matches BYDAY.
  The term start itself is kept only if it already matches.
"""

import itertools
import unittest
from datetime import date, datetime, time, timedelta

from bannerics.model import FailureKind, LocationParts, NormalizedEvent, ParseFailure, RawCourseRecord
from bannerics.normalize import (
    first_occurrence,
    normalize,
    normalize_all,
    parse_date_range,
    parse_time_range,
    weekday_codes,
)


def _record(**kwargs) -> RawCourseRecord:
    base = dict(
        title="Data Structures",
        section_code="CS 225 AL1",
        date_range="08/25/2025 -- 12/10/2025",
        weekdays=frozenset({"Monday", "Wednesday", "Friday"}),
        time_range="09:30 AM - 10:45 AM",
        location=LocationParts("Urbana-Champaign", "Siebel Center", "1404"),
        instructor="Smith, Jane",
        crn="12345",
    )
    base.update(kwargs)
    return RawCourseRecord(**base)


class TestFirstOccurrence(unittest.TestCase):
    def test_start_date_on_selected_weekday_is_kept(self) -> None:
        # 2025-08-25 is a Monday
        self.assertEqual(first_occurrence(date(2025, 8, 25), {1, 3, 5}), date(2025, 8, 25))

    def test_start_date_moves_to_next_selected_weekday(self) -> None:
        # 2025-08-24 is a Sunday -> following Monday
        self.assertEqual(first_occurrence(date(2025, 8, 24), {1, 3, 5}), date(2025, 8, 25))

    def test_empty_weekdays_keeps_start_date(self) -> None:
        self.assertEqual(first_occurrence(date(2025, 8, 24), set()), date(2025, 8, 24))

    def test_smallest_matching_date_for_all_weekday_sets(self) -> None:
        for offset in range(7):
            start = date(2025, 8, 24) + timedelta(days=offset)
            for size in range(1, 8):
                for days in itertools.combinations(range(7), size):
                    got = first_occurrence(start, set(days))
                    self.assertGreaterEqual(got, start)
                    self.assertLessEqual((got - start).days, 6)
                    self.assertIn((got.weekday() + 1) % 7, days)
                    # no earlier matching date in between
                    d = start
                    while d < got:
                        self.assertNotIn((d.weekday() + 1) % 7, days)
                        d += timedelta(days=1)


class TestParseHelpers(unittest.TestCase):
    def test_date_range(self) -> None:
        self.assertEqual(
            parse_date_range("08/25/2025 -- 12/10/2025"),
            (date(2025, 8, 25), date(2025, 12, 10)),
        )

    def test_date_range_single_digits(self) -> None:
        self.assertEqual(parse_date_range("1/5/2026--5/1/2026"), (date(2026, 1, 5), date(2026, 5, 1)))

    def test_date_range_invalid(self) -> None:
        self.assertIsNone(parse_date_range(""))
        self.assertIsNone(parse_date_range("08/25/2025"))
        self.assertIsNone(parse_date_range("2025-08-25 -- 2025-12-10"))
        self.assertIsNone(parse_date_range("13/40/2025 -- 12/10/2025"))

    def test_time_range_meridiem(self) -> None:
        self.assertEqual(parse_time_range("09:30 AM - 10:45 AM"), (time(9, 30), time(10, 45)))
        self.assertEqual(parse_time_range("12:00 pm-1:15 PM"), (time(12, 0), time(13, 15)))
        self.assertEqual(parse_time_range("12:30 AM - 1:00 AM"), (time(0, 30), time(1, 0)))

    def test_time_range_inside_other_text(self) -> None:
        text = "08/25/2025 -- 12/10/2025\nSMTWTFS\n2 : 00 PM\n-\n3 : 50 PM\nType: Lecture"
        self.assertEqual(parse_time_range(text), (time(14, 0), time(15, 50)))

    def test_time_range_invalid(self) -> None:
        self.assertIsNone(parse_time_range("TBA"))
        self.assertIsNone(parse_time_range("09:30 - 10:45"))
        self.assertIsNone(parse_time_range("09:75 AM - 10:45 AM"))

    def test_weekday_codes_are_sunday_first_and_skip_unknown(self) -> None:
        self.assertEqual(weekday_codes({"Friday", "Monday", "Wednesday"}), ("MO", "WE", "FR"))
        self.assertEqual(weekday_codes({"saturday", "Sunday", "Someday"}), ("SU", "SA"))
        self.assertEqual(weekday_codes(set()), ())


class TestNormalize(unittest.TestCase):
    def test_term_start_on_monday(self) -> None:
        ev = normalize(_record())
        self.assertIsInstance(ev, NormalizedEvent)
        assert isinstance(ev, NormalizedEvent)

        self.assertEqual(ev.start, datetime(2025, 8, 25, 9, 30))
        self.assertEqual(ev.end, datetime(2025, 8, 25, 10, 45))
        self.assertEqual(ev.recurrence_days, ("MO", "WE", "FR"))
        self.assertEqual(ev.until, datetime(2025, 12, 10, 23, 59, 59))

    def test_term_start_on_sunday_moves_to_monday(self) -> None:
        ev = normalize(_record(date_range="08/24/2025 -- 12/10/2025"))
        assert isinstance(ev, NormalizedEvent)
        self.assertEqual(ev.start.date(), date(2025, 8, 25))
        self.assertEqual(ev.end.date(), date(2025, 8, 25))

    def test_text_fields(self) -> None:
        ev = normalize(_record())
        assert isinstance(ev, NormalizedEvent)
        self.assertEqual(ev.summary, "Data Structures | CS 225 AL1")
        self.assertEqual(ev.location, "Urbana-Champaign, Siebel Center, 1404")
        self.assertEqual(
            ev.description,
            "CRN: 12345\nInstructor: Smith, Jane\nFrom 08/25/2025 to 12/10/2025\nGenerated by UIUC Banner exporter",
        )

    def test_missing_optional_fields_are_omitted(self) -> None:
        ev = normalize(_record(section_code="", instructor="", crn="", location=LocationParts(building="DCL")))
        assert isinstance(ev, NormalizedEvent)
        self.assertEqual(ev.summary, "Data Structures")
        self.assertEqual(ev.location, "DCL")
        self.assertNotIn("CRN", ev.description)
        self.assertNotIn("Instructor", ev.description)
        self.assertTrue(ev.description.startswith("From 08/25/2025 to 12/10/2025"))

    def test_no_weekdays_is_single_event_on_term_start(self) -> None:
        ev = normalize(_record(date_range="08/24/2025 -- 08/24/2025", weekdays=frozenset()))
        assert isinstance(ev, NormalizedEvent)
        self.assertEqual(ev.recurrence_days, ())
        self.assertEqual(ev.start, datetime(2025, 8, 24, 9, 30))

    def test_first_meeting_may_fall_after_short_term(self) -> None:
        # 12/10/2025 is a Wednesday; the next TuTh day is Thursday 12/11
        ev = normalize(
            _record(date_range="12/10/2025 -- 12/10/2025", weekdays=frozenset({"Tuesday", "Thursday"}))
        )
        assert isinstance(ev, NormalizedEvent)
        self.assertEqual(ev.start, datetime(2025, 12, 11, 9, 30))
        self.assertEqual(ev.until, datetime(2025, 12, 10, 23, 59, 59))
        self.assertGreater(ev.start, ev.until)

    def test_bad_date_range_is_failure(self) -> None:
        res = normalize(_record(date_range="TBA"))
        self.assertIsInstance(res, ParseFailure)
        assert isinstance(res, ParseFailure)
        self.assertEqual(res.kind, FailureKind.DATE_RANGE)

    def test_bad_time_range_is_failure(self) -> None:
        res = normalize(_record(time_range="None"))
        assert isinstance(res, ParseFailure)
        self.assertEqual(res.kind, FailureKind.TIME_RANGE)

    def test_end_not_after_start_is_failure(self) -> None:
        res = normalize(_record(time_range="10:00 PM - 01:00 AM"))
        assert isinstance(res, ParseFailure)
        self.assertEqual(res.kind, FailureKind.TIME_RANGE)

    def test_normalize_all_keeps_good_records_in_order(self) -> None:
        records = [
            _record(title="A"),
            _record(title="B", date_range="nope"),
            _record(title="C"),
            _record(title="D", time_range="TBA"),
        ]
        events, failures = normalize_all(records)
        self.assertEqual([e.summary.split(" | ")[0] for e in events], ["A", "C"])
        self.assertEqual([r.title for r, _ in failures], ["B", "D"])
        self.assertEqual([f.kind for _, f in failures], [FailureKind.DATE_RANGE, FailureKind.TIME_RANGE])


if __name__ == "__main__":
    unittest.main()
