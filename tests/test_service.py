"""
Tests for the calendar and term services (store + orchestrator wiring).
"""

import json
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from termcal.errors import ValidationError
from termcal.model import DayKind, Term
from termcal.service import CalendarService, TermService
from termcal.storage import JsonStore


class TestCalendarService(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = JsonStore(Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _fetch_from_store(self, month_key, country_code):
        holidays = self.store.list_custom_holidays(f"{month_key}-01", f"{month_key}-31")
        return {"month": month_key, "customHolidays": [h.to_dict() for h in holidays]}

    def test_add_holiday_refreshes_month(self) -> None:
        fetch = mock.Mock(side_effect=self._fetch_from_store)
        service = CalendarService.build(self.store, fetch_month=fetch)

        before = service.month_view("2026-10")
        self.assertFalse(before.is_fallback)
        self.assertEqual(len(before.cells), 35)

        service.add_holiday("2026-10-20", "Foundation Day")
        self.assertEqual(fetch.call_count, 2)

        after = service.month_view("2026-10")
        self.assertEqual(fetch.call_count, 2)
        cell = next(c for c in after.cells if c.iso_date == "2026-10-20")
        self.assertEqual(cell.classification.kind, DayKind.INSTITUTE_HOLIDAY)
        self.assertEqual(cell.classification.title, "Foundation Day")

        self.assertTrue(service.remove_holiday("2026-10-20"))
        self.assertEqual(fetch.call_count, 3)
        cell = next(c for c in service.month_view("2026-10").cells if c.iso_date == "2026-10-20")
        self.assertEqual(cell.classification.kind, DayKind.WORKING_DAY)

    def test_month_view_falls_back(self) -> None:
        service = CalendarService.build(self.store, fetch_month=mock.Mock(side_effect=TimeoutError("slow")))
        view = service.month_view("2026-10")
        self.assertTrue(view.is_fallback)
        kinds = {c.classification.kind for c in view.cells if c.is_current_month}
        self.assertEqual(kinds, {DayKind.SUNDAY, DayKind.WORKING_DAY})

    def test_holiday_saved_even_if_refresh_fails(self) -> None:
        service = CalendarService.build(self.store, fetch_month=mock.Mock(side_effect=TimeoutError("slow")))
        service.add_holiday("2026-10-20", "Foundation Day")
        self.assertEqual(len(self.store.list_custom_holidays()), 1)


class TestTermService(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        (root / "academic_years.json").write_text(
            json.dumps({"academic_years": [{"id": 9, "yearLabel": "2025-2026", "isActive": True}]}),
            encoding="utf-8",
        )
        (root / "courses.json").write_text(
            json.dumps({"courses": [{"id": 1, "totalYears": 2, "yearSemesterConfig": [{"year": 1, "semesters": 1}]}]}),
            encoding="utf-8",
        )
        self.service = TermService(JsonStore(root))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_academic_years_merge_persisted(self) -> None:
        years = self.service.academic_years(date(2026, 10, 18))
        self.assertEqual([y.exists_in_db for y in years], [True, False, False])
        self.assertEqual(years[0].id, 9)

    def test_selectable_years(self) -> None:
        self.assertEqual([y.year_label for y in self.service.selectable_years(date(2026, 10, 18))], ["2025-2026"])

    def test_validate_uses_stored_course_and_years(self) -> None:
        term = Term(1, 1, 2, 2, date(2025, 7, 1), date(2025, 11, 30), academic_year_id=9)
        self.assertIs(self.service.validate(term), term)

        with self.assertRaises(ValidationError):
            self.service.validate(Term(1, 1, 1, 2, date(2025, 7, 1), date(2025, 11, 30), academic_year_id=9))
        with self.assertRaises(ValidationError):
            self.service.validate(Term(1, 1, 2, 1, date(2026, 7, 1), date(2026, 11, 30), academic_year_label="2026-2027"))

    def test_options_for_course(self) -> None:
        self.assertEqual(self.service.options_for_course(1), [(1, [1]), (2, [1, 2])])
        self.assertEqual(self.service.options_for_course(42), [])

    def test_batch_for_term(self) -> None:
        by_id = Term(1, 1, 2, 1, date(2025, 7, 1), date(2025, 11, 30), academic_year_id=9)
        self.assertEqual(self.service.batch_for_term(by_id), "2024")

        stored = Term(1, 1, 2, 1, date(2025, 7, 1), date(2025, 11, 30), batch="2023", academic_year_label="2025-2026")
        self.assertEqual(self.service.batch_for_term(stored), "2023")


if __name__ == "__main__":
    unittest.main()
