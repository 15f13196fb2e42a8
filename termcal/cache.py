"""
Per-month calendar cache.

Each month key moves through:

    UNFETCHED -> LOADING -> READY
    READY     -> LOADING           (forced refresh)
    LOADING   -> ERROR             (collaborator failure, no data kept)

Entries are never expired automatically. They are replaced only by a
forced fetch, e.g. after an institute holiday is created or deleted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from termcal import config
from termcal.errors import CalendarFetchError, TermcalError
from termcal.classify import date_key
from termcal.matrix import month_key_for_date, parse_month_key, sundays_for_month
from termcal.model import AttendanceStatus, CalendarMonthData, CustomHoliday, PublicHoliday

log = logging.getLogger(__name__)

FetchMonth = Callable[[str, str], Mapping[str, Any]]


class FetchState(str, Enum):
    UNFETCHED = "unfetched"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


def normalize_month_payload(month_key: str, payload: Mapping[str, Any], country_code: str) -> CalendarMonthData:
    """
    Turn a collaborator payload into CalendarMonthData.

    Missing lists become empty, missing/empty sundays are computed, and a
    missing attendance map becomes {}.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    raw_sundays = payload.get("sundays")
    if isinstance(raw_sundays, (list, tuple)) and raw_sundays:
        sundays = tuple(k for k in (date_key(d) for d in raw_sundays) if k)
    else:
        sundays = tuple(sundays_for_month(month_key))

    raw_public = payload.get("publicHolidays")
    public = tuple(
        PublicHoliday.from_dict(h) for h in (raw_public if isinstance(raw_public, list) else []) if isinstance(h, Mapping)
    )

    raw_custom = payload.get("customHolidays")
    custom = tuple(
        CustomHoliday.from_dict(h) for h in (raw_custom if isinstance(raw_custom, list) else []) if isinstance(h, Mapping)
    )

    raw_status = payload.get("attendanceStatus")
    status: Dict[str, AttendanceStatus] = {}
    if isinstance(raw_status, Mapping):
        for day, value in raw_status.items():
            key = date_key(day)
            parsed = AttendanceStatus.parse(value)
            if key and parsed is not None:
                status[key] = parsed

    region = payload.get("regionCode")
    return CalendarMonthData(
        month=str(payload.get("month") or month_key),
        country_code=str(payload.get("countryCode") or country_code),
        region_code=str(region) if region else None,
        sundays=sundays,
        public_holidays=public,
        custom_holidays=custom,
        attendance_status=MappingProxyType(status),
        fetched_at=_parse_timestamp(payload.get("fetchedAt")),
        from_cache=bool(payload.get("fromCache", False)),
    )


def empty_month(month_key: str, country_code: str = config.DEFAULT_COUNTRY_CODE) -> CalendarMonthData:
    """Computed Sundays only; no holidays, no attendance."""
    return CalendarMonthData(
        month=month_key,
        country_code=country_code,
        region_code=None,
        sundays=tuple(sundays_for_month(month_key)),
        public_holidays=(),
        custom_holidays=(),
        attendance_status=MappingProxyType({}),
        fetched_at=datetime.now(timezone.utc),
        from_cache=False,
    )


class CalendarOrchestrator:
    """
    Owns the month cache and the call to the holiday/attendance collaborator.

    Not thread-safe: overlapping fetches for one key are allowed and the
    last one to finish wins.
    """

    def __init__(self, fetch_month: FetchMonth, country_code: str = config.DEFAULT_COUNTRY_CODE):
        self._fetch_month = fetch_month
        self._country = country_code
        self._cache: Dict[str, CalendarMonthData] = {}
        self._states: Dict[str, FetchState] = {}

    # -- introspection -----------------------------------------------------

    def state(self, month_key: str) -> FetchState:
        return self._states.get(month_key, FetchState.UNFETCHED)

    def cached(self, month_key: str) -> Optional[CalendarMonthData]:
        return self._cache.get(month_key)

    def __contains__(self, month_key: object) -> bool:
        return month_key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    # -- operations --------------------------------------------------------

    def get(self, month_key: str, force: bool = False) -> CalendarMonthData:
        """
        Return month data, from cache unless force is set.

        Raises CalendarFetchError when the collaborator fails; call
        fallback() to keep going with computed Sundays only.
        """
        if not force and month_key in self._cache:
            log.debug("calendar cache hit for %s", month_key)
            return self._cache[month_key]

        self._states[month_key] = FetchState.LOADING
        log.debug("fetching calendar data for %s (force=%s)", month_key, force)
        try:
            payload = self._fetch_month(month_key, self._country)
        except Exception as exc:
            self._fail(month_key)
            log.warning("calendar fetch for %s failed: %s", month_key, exc)
            message = str(exc) if isinstance(exc, TermcalError) else ""
            raise CalendarFetchError(month_key, message) from exc

        data = normalize_month_payload(month_key, payload, self._country)
        # Stored under the requested key even if the payload names another
        self._cache[month_key] = data
        self._states[month_key] = FetchState.READY
        return data

    def fallback(self, month_key: str) -> CalendarMonthData:
        """
        Store and return a minimal record (computed Sundays only) so the
        caller can render deterministically after a failed fetch.
        """
        data = empty_month(month_key, self._country)
        self._cache[month_key] = data
        self._states[month_key] = FetchState.READY
        log.warning("using fallback calendar data for %s", month_key)
        return data

    def get_or_fallback(self, month_key: str, force: bool = False) -> CalendarMonthData:
        try:
            return self.get(month_key, force=force)
        except CalendarFetchError:
            return self.fallback(month_key)

    def refresh_for_date(self, iso_date: Any) -> Optional[CalendarMonthData]:
        """
        Force-refresh the month containing iso_date. Returns None when the
        date cannot be read.
        """
        key = month_key_for_date(iso_date)
        if key is None or parse_month_key(key) is None:
            return None
        return self.get(key, force=True)

    def _fail(self, month_key: str) -> None:
        self._cache.pop(month_key, None)
        self._states[month_key] = FetchState.ERROR
