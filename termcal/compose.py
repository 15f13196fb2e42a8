"""
Month composition: the local implementation of the fetch-holiday-month
collaborator.

Combines, for one month:
- Sundays (computed)
- public holidays (PublicHolidayClient)
- institute holidays (a HolidayStore)
- per-day attendance status derived from submitted record counts

and returns the same payload shape the portal API serves, so the
orchestrator can consume either.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from termcal import config
from termcal.errors import ValidationError
from termcal.holidays import PublicHolidayClient
from termcal.matrix import month_bounds, parse_month_key, sundays_for_month
from termcal.model import AttendanceStatus, CustomHoliday

_COUNTRY_RE = re.compile(r"^[A-Za-z]{2}$")


class HolidayStore(Protocol):
    def list_custom_holidays(self, start: Optional[str] = None, end: Optional[str] = None) -> Sequence[CustomHoliday]:
        raise NotImplementedError


class AttendanceSource(Protocol):
    def attendance_counts(self, start: str, end: str) -> Mapping[str, int]:
        raise NotImplementedError


def normalize_country_code(value: Any) -> str:
    if isinstance(value, str) and _COUNTRY_RE.match(value.strip()):
        return value.strip().upper()
    return config.DEFAULT_COUNTRY_CODE


def derive_attendance_status(
    month: str,
    holiday_dates: set[str],
    record_counts: Mapping[str, int],
    today: date,
) -> Dict[str, AttendanceStatus]:
    """
    Status for every non-holiday day of the month:
    records present -> submitted, past -> not_marked, today -> pending,
    future -> upcoming.
    """
    bounds = month_bounds(month)
    if not bounds:
        return {}
    first, last = bounds
    today_key = today.isoformat()

    out: Dict[str, AttendanceStatus] = {}
    for day in range(first.day, last.day + 1):
        iso = date(first.year, first.month, day).isoformat()
        if iso in holiday_dates:
            continue
        if int(record_counts.get(iso, 0) or 0) > 0:
            out[iso] = AttendanceStatus.SUBMITTED
        elif iso < today_key:
            out[iso] = AttendanceStatus.NOT_MARKED
        elif iso == today_key:
            out[iso] = AttendanceStatus.PENDING
        else:
            out[iso] = AttendanceStatus.UPCOMING
    return out


class MonthComposer:
    """
    Callable as fetch_month(month_key, country_code) for CalendarOrchestrator.
    """

    def __init__(
        self,
        holidays: PublicHolidayClient,
        store: HolidayStore,
        attendance: Optional[AttendanceSource] = None,
        *,
        region_code: Optional[str] = config.DEFAULT_REGION_CODE,
        today: Callable[[], date] = date.today,
    ):
        self._holidays = holidays
        self._store = store
        self._attendance = attendance
        self._region = region_code.upper() if region_code else None
        self._today = today

    def __call__(self, month_key: str, country_code: str = config.DEFAULT_COUNTRY_CODE) -> Dict[str, Any]:
        return self.fetch_holiday_month(month_key, country_code)

    def fetch_holiday_month(self, month_key: str, country_code: str = config.DEFAULT_COUNTRY_CODE) -> Dict[str, Any]:
        parts = parse_month_key(month_key)
        if not parts or not config.MIN_YEAR <= parts[0] <= config.MAX_YEAR:
            raise ValidationError(f"Invalid month supplied: {month_key!r}")
        year, month = parts
        country = normalize_country_code(country_code)

        public, from_cache = self._holidays.holidays_for_month(year, month, country, self._region)

        first, last = month_bounds(month_key)
        custom: List[CustomHoliday] = list(self._store.list_custom_holidays(first.isoformat(), last.isoformat()))

        sundays = sundays_for_month(month_key)
        holiday_dates = set(sundays) | {h.date for h in public} | {h.date for h in custom}

        counts: Mapping[str, int] = {}
        if self._attendance is not None:
            counts = self._attendance.attendance_counts(first.isoformat(), last.isoformat())

        status = derive_attendance_status(month_key, holiday_dates, counts, self._today())

        return {
            "month": month_key,
            "countryCode": country,
            "regionCode": self._region,
            "sundays": sundays,
            "publicHolidays": [h.to_dict() for h in public],
            "customHolidays": [h.to_dict() for h in custom],
            "attendanceStatus": {day: s.value for day, s in status.items()},
            "fetchedAt": datetime.now(timezone.utc).isoformat(),
            "source": "nager-date",
            "fromCache": from_cache,
        }
