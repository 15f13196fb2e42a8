"""
Unit tests for the Nager.Date public holiday client.

The HTTP layer is mocked; no network access is needed.
"""

import unittest
from unittest import mock

import requests

from termcal.holidays import PublicHolidayClient, fallback_holidays, filter_by_region
from termcal.model import PublicHoliday


def _response(payload=None, text=None, status_error=None) -> mock.Mock:
    resp = mock.Mock()
    resp.text = text if text is not None else "[...]"
    resp.json.return_value = payload
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    return resp


NAGER_2026 = [
    {"date": "2026-01-26", "localName": "Republic Day", "name": "Republic Day", "countryCode": "IN", "counties": None},
    {"date": "2026-10-02", "localName": "", "name": "Gandhi Jayanti", "countryCode": "IN"},
    {"date": "2026-10-20", "name": "Regional Fest", "counties": ["IN-KA"]},
]


class TestPublicHolidayClient(unittest.TestCase):
    @mock.patch("termcal.holidays.requests.get")
    def test_fetch_normalizes_and_caches_year(self, get) -> None:
        get.return_value = _response(NAGER_2026)
        client = PublicHolidayClient()

        holidays, from_cache = client.holidays_for_year(2026, "in")
        self.assertFalse(from_cache)
        self.assertEqual(len(holidays), 3)
        self.assertEqual(holidays[1].local_name, "Gandhi Jayanti")
        self.assertIn("/PublicHolidays/2026/IN", get.call_args[0][0])

        _, from_cache = client.holidays_for_year(2026, "IN")
        self.assertTrue(from_cache)
        get.assert_called_once()

    @mock.patch("termcal.holidays.requests.get")
    def test_month_and_region_filter(self, get) -> None:
        get.return_value = _response(NAGER_2026)
        client = PublicHolidayClient()

        october, _ = client.holidays_for_month(2026, 10, "IN")
        self.assertEqual([h.date for h in october], ["2026-10-02", "2026-10-20"])

        maharashtra, _ = client.holidays_for_month(2026, 10, "IN", "MH")
        self.assertEqual([h.date for h in maharashtra], ["2026-10-02"])

        karnataka, _ = client.holidays_for_month(2026, 10, "IN", "ka")
        self.assertEqual(len(karnataka), 2)

    @mock.patch("termcal.holidays.requests.get")
    def test_http_error_uses_fallback_dataset(self, get) -> None:
        get.return_value = _response(status_error=requests.HTTPError("503"))
        client = PublicHolidayClient()
        with self.assertLogs("termcal.holidays", level="WARNING"):
            holidays, _ = client.holidays_for_year(2025, "IN")
        self.assertEqual(len(holidays), 16)
        self.assertEqual(holidays[0].name, "Republic Day of India")

    @mock.patch("termcal.holidays.requests.get")
    def test_empty_body_means_no_holidays(self, get) -> None:
        get.return_value = _response(text="  ")
        client = PublicHolidayClient()
        holidays, _ = client.holidays_for_year(2026, "DE")
        self.assertEqual(holidays, [])
        get.return_value.json.assert_not_called()

    @mock.patch("termcal.holidays.requests.get")
    def test_timeout_without_fallback_returns_empty(self, get) -> None:
        get.side_effect = requests.Timeout("slow")
        client = PublicHolidayClient()
        holidays, _ = client.holidays_for_year(2030, "IN")
        self.assertEqual(holidays, [])

    def test_cache_expires_after_ttl(self) -> None:
        now = [0.0]
        fetch = mock.Mock(return_value=NAGER_2026)
        client = PublicHolidayClient(ttl_seconds=60, fetch_year=fetch, clock=lambda: now[0])

        client.holidays_for_year(2026, "IN")
        now[0] = 59.0
        client.holidays_for_year(2026, "IN")
        self.assertEqual(fetch.call_count, 1)

        now[0] = 61.0
        _, from_cache = client.holidays_for_year(2026, "IN")
        self.assertFalse(from_cache)
        self.assertEqual(fetch.call_count, 2)


class TestHelpers(unittest.TestCase):
    def test_fallback_unknown_country(self) -> None:
        self.assertEqual(fallback_holidays("US", 2025), [])
        self.assertEqual(fallback_holidays(None, 2025), [])
        self.assertEqual(len(fallback_holidays("in", 2024)), 14)

    def test_name_fallbacks(self) -> None:
        h = PublicHoliday.from_dict({"date": "2026-05-01"})
        self.assertEqual((h.name, h.local_name), ("Unnamed Holiday", "Unnamed Holiday"))

    def test_region_none_keeps_all(self) -> None:
        holidays = [PublicHoliday.from_dict(h) for h in NAGER_2026]
        self.assertEqual(len(filter_by_region(holidays, None)), 3)


if __name__ == "__main__":
    unittest.main()
