"""
Unit tests for month composition (the local fetch-holiday-month).
"""

import unittest
from datetime import date
from unittest import mock

from termcal.compose import MonthComposer, derive_attendance_status, normalize_country_code
from termcal.errors import ValidationError
from termcal.holidays import PublicHolidayClient
from termcal.model import AttendanceStatus, CustomHoliday


class _Store:
    def __init__(self, holidays=(), counts=None):
        self.holidays = list(holidays)
        self.counts = counts or {}
        self.calls = []

    def list_custom_holidays(self, start=None, end=None):
        self.calls.append((start, end))
        return [h for h in self.holidays if start <= h.date <= end]

    def attendance_counts(self, start, end):
        return dict(self.counts)


def _client(raw) -> PublicHolidayClient:
    return PublicHolidayClient(fetch_year=mock.Mock(return_value=raw))


class TestDeriveAttendanceStatus(unittest.TestCase):
    def test_statuses_relative_to_today(self) -> None:
        status = derive_attendance_status(
            "2026-10",
            holiday_dates={"2026-10-02", "2026-10-04"},
            record_counts={"2026-10-01": 12, "2026-10-05": 0},
            today=date(2026, 10, 6),
        )
        self.assertEqual(status["2026-10-01"], AttendanceStatus.SUBMITTED)
        self.assertNotIn("2026-10-02", status)
        self.assertNotIn("2026-10-04", status)
        self.assertEqual(status["2026-10-05"], AttendanceStatus.NOT_MARKED)
        self.assertEqual(status["2026-10-06"], AttendanceStatus.PENDING)
        self.assertEqual(status["2026-10-31"], AttendanceStatus.UPCOMING)
        self.assertEqual(len(status), 29)

    def test_invalid_month(self) -> None:
        self.assertEqual(derive_attendance_status("bad", set(), {}, date(2026, 1, 1)), {})


class TestMonthComposer(unittest.TestCase):
    def test_payload_shape(self) -> None:
        store = _Store(
            holidays=[CustomHoliday("2026-10-20", "Foundation Day"), CustomHoliday("2026-11-01", "Other month")],
            counts={"2026-10-01": 3},
        )
        composer = MonthComposer(
            _client([{"date": "2026-10-02", "name": "Gandhi Jayanti", "localName": "Gandhi Jayanti"}]),
            store,
            store,
            region_code=None,
            today=lambda: date(2026, 10, 18),
        )

        payload = composer("2026-10", "in")

        self.assertEqual(payload["month"], "2026-10")
        self.assertEqual(payload["countryCode"], "IN")
        self.assertEqual(payload["sundays"], ["2026-10-04", "2026-10-11", "2026-10-18", "2026-10-25"])
        self.assertEqual([h["date"] for h in payload["publicHolidays"]], ["2026-10-02"])
        self.assertEqual([h["title"] for h in payload["customHolidays"]], ["Foundation Day"])
        self.assertEqual(store.calls, [("2026-10-01", "2026-10-31")])

        status = payload["attendanceStatus"]
        self.assertEqual(status["2026-10-01"], "submitted")
        self.assertNotIn("2026-10-18", status)
        self.assertNotIn("2026-10-20", status)
        self.assertEqual(status["2026-10-19"], "upcoming")
        self.assertFalse(payload["fromCache"])

    def test_invalid_month_rejected(self) -> None:
        composer = MonthComposer(_client([]), _Store())
        with self.assertRaises(ValidationError):
            composer("1999-12", "IN")
        with self.assertRaises(ValidationError):
            composer("2026-13", "IN")

    def test_country_code_normalization(self) -> None:
        self.assertEqual(normalize_country_code("de"), "DE")
        self.assertEqual(normalize_country_code("IND"), "IN")
        self.assertEqual(normalize_country_code(None), "IN")


if __name__ == "__main__":
    unittest.main()
