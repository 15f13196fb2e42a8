"""
Unit tests for academic-year labels and batch derivation.

Contract:
- "YYYY" expands to "YYYY-(YYYY+1)", "YYYY-YYYY" is kept, "" -> None
- batch = label start year - year of study + 1
- malformed input never raises, it returns None
"""

import unittest
from datetime import date

from termcal.labels import current_year_of_study, derive_batch, normalize_year_label, resolve_batch, year_label_bounds
from termcal.model import AcademicYear


class TestNormalizeYearLabel(unittest.TestCase):
    def test_bare_year_expands(self) -> None:
        self.assertEqual(normalize_year_label("2025"), "2025-2026")

    def test_range_is_idempotent(self) -> None:
        self.assertEqual(normalize_year_label("2025-2026"), "2025-2026")
        self.assertEqual(normalize_year_label(normalize_year_label("2025")), "2025-2026")

    def test_empty_and_none(self) -> None:
        self.assertIsNone(normalize_year_label(""))
        self.assertIsNone(normalize_year_label(None))

    def test_unknown_format_returned_unchanged(self) -> None:
        self.assertEqual(normalize_year_label("Batch A"), "Batch A")
        self.assertEqual(normalize_year_label("25-26"), "25-26")

    def test_bounds_shared_with_model(self) -> None:
        self.assertEqual(year_label_bounds("2025"), (2025, 2026))
        self.assertEqual(year_label_bounds("2025-2026"), (2025, 2026))
        self.assertIsNone(year_label_bounds("Batch A"))
        self.assertIsNone(year_label_bounds(None))
        year = AcademicYear.from_label("2025")
        self.assertEqual((year.start_year, year.end_year), (2025, 2026))
        self.assertIsNone(AcademicYear.from_label("Batch A").start_year)


class TestDeriveBatch(unittest.TestCase):
    def test_second_year_student(self) -> None:
        self.assertEqual(derive_batch("2025-2026", 2), "2024")

    def test_first_year_is_label_start(self) -> None:
        self.assertEqual(derive_batch("2025-2026", 1), "2025")

    def test_bare_year_label_and_string_year(self) -> None:
        self.assertEqual(derive_batch("2026", "3"), "2024")

    def test_whitespace_is_ignored(self) -> None:
        self.assertEqual(derive_batch(" 2025 - 2026 ", 2), "2024")

    def test_missing_or_invalid_year_of_study(self) -> None:
        self.assertIsNone(derive_batch("2025-2026", None))
        self.assertIsNone(derive_batch("2025-2026", 0))
        self.assertIsNone(derive_batch("2025-2026", -1))
        self.assertIsNone(derive_batch("2025-2026", "two"))

    def test_malformed_label(self) -> None:
        self.assertIsNone(derive_batch("Autumn", 1))
        self.assertIsNone(derive_batch("", 1))
        self.assertIsNone(derive_batch(None, 1))


class TestResolveBatch(unittest.TestCase):
    def test_stored_batch_wins(self) -> None:
        self.assertEqual(resolve_batch("2023", "2025-2026", 2), "2023")

    def test_blank_stored_batch_falls_back_to_derived(self) -> None:
        self.assertEqual(resolve_batch("  ", "2025-2026", 2), "2024")
        self.assertEqual(resolve_batch(None, "2025-2026", 2), "2024")


class TestCurrentYearOfStudy(unittest.TestCase):
    def test_year_from_batch(self) -> None:
        self.assertEqual(current_year_of_study("2024", date(2026, 10, 18)), 3)

    def test_future_batch_or_garbage(self) -> None:
        self.assertIsNone(current_year_of_study("2030", date(2026, 10, 18)))
        self.assertIsNone(current_year_of_study("abc", date(2026, 10, 18)))


if __name__ == "__main__":
    unittest.main()
