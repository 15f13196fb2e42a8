"""
Public holidays from the Nager.Date API.

- One request per (country, year), cached in memory for HOLIDAY_CACHE_TTL
- Entries normalized to PublicHoliday (name/localName fall back to each other)
- When the API fails or returns nothing, a bundled dataset is used if one
  exists for that country/year
- Region and month filtering happen on the cached year list
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from termcal import config
from termcal.model import PublicHoliday

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Bundled fallback dataset
# ---------------------------------------------------------------------------


def _fallback(day: str, local_name: str, name: str) -> Dict[str, Any]:
    return {
        "date": day,
        "localName": local_name,
        "name": name,
        "countryCode": "IN",
        "fixed": False,
        "global": True,
        "counties": None,
        "types": ["Public"],
    }


FALLBACK_HOLIDAYS: Dict[str, Dict[int, List[Dict[str, Any]]]] = {
    "IN": {
        2024: [
            _fallback("2024-01-26", "Republic Day", "Republic Day of India"),
            _fallback("2024-03-08", "Mahashivratri", "Maha Shivaratri"),
            _fallback("2024-03-25", "Holi", "Holi"),
            _fallback("2024-03-29", "Good Friday", "Good Friday"),
            _fallback("2024-04-11", "Eid al-Fitr", "Id-ul-Fitr"),
            _fallback("2024-05-23", "Buddha Purnima", "Buddha Purnima"),
            _fallback("2024-08-15", "Independence Day", "Independence Day of India"),
            _fallback("2024-08-19", "Raksha Bandhan", "Raksha Bandhan"),
            _fallback("2024-10-02", "Gandhi Jayanti", "Mahatma Gandhi Jayanti"),
            _fallback("2024-10-12", "Dussehra", "Vijaya Dashami"),
            _fallback("2024-10-31", "Diwali", "Deepavali/Diwali"),
            _fallback("2024-11-01", "Govardhan Puja", "Govardhan Puja"),
            _fallback("2024-11-03", "Bhai Dooj", "Bhai Duj"),
            _fallback("2024-12-25", "Christmas Day", "Christmas Day"),
        ],
        2025: [
            _fallback("2025-01-26", "Republic Day", "Republic Day of India"),
            _fallback("2025-03-01", "Mahashivratri", "Maha Shivaratri"),
            _fallback("2025-03-14", "Holi", "Holi"),
            _fallback("2025-03-31", "Eid al-Fitr", "Id-ul-Fitr"),
            _fallback("2025-04-18", "Good Friday", "Good Friday"),
            _fallback("2025-05-12", "Buddha Purnima", "Buddha Purnima"),
            _fallback("2025-06-06", "Bakrid", "Id-ul-Zuha (Bakrid)"),
            _fallback("2025-08-15", "Independence Day", "Independence Day of India"),
            _fallback("2025-08-19", "Janmashtami", "Janmashtami"),
            _fallback("2025-10-02", "Gandhi Jayanti", "Mahatma Gandhi Jayanti"),
            _fallback("2025-10-02", "Navaratri Begins", "Navaratri"),
            _fallback("2025-10-21", "Diwali", "Deepavali/Diwali"),
            _fallback("2025-10-22", "Govardhan Puja", "Govardhan Puja"),
            _fallback("2025-10-23", "Bhai Dooj", "Bhai Duj"),
            _fallback("2025-11-01", "Guru Nanak Jayanti", "Guru Nanak Jayanti"),
            _fallback("2025-12-25", "Christmas Day", "Christmas Day"),
        ],
    },
}


def fallback_holidays(country_code: Optional[str], year: Optional[int]) -> List[PublicHoliday]:
    if not country_code or not year:
        return []
    by_year = FALLBACK_HOLIDAYS.get(country_code.upper(), {})
    return [PublicHoliday.from_dict(h) for h in by_year.get(int(year), [])]


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


def _fetch_year_raw(year: int, country_code: str) -> List[Dict[str, Any]]:
    """
    GET /PublicHolidays/{year}/{country}. An empty body means "no holidays".
    Raises requests.RequestException or ValueError on failure.
    """
    url = f"{config.HOLIDAY_API_URL}/PublicHolidays/{year}/{country_code}"
    resp = requests.get(
        url,
        timeout=config.HTTP_TIMEOUT,
        headers={"User-Agent": config.USER_AGENT, "Accept": "application/json"},
    )
    resp.raise_for_status()

    if not resp.text or not resp.text.strip():
        return []
    try:
        payload = resp.json()
    except ValueError as exc:
        raise ValueError(f"Failed to parse holiday API response for {url}: {exc}") from exc

    return [h for h in payload if isinstance(h, dict)] if isinstance(payload, list) else []


class PublicHolidayClient:
    """
    Year-level holiday lookup with a TTL cache.

    clock is injectable so tests can expire entries without sleeping.
    """

    def __init__(
        self,
        ttl_seconds: int = config.HOLIDAY_CACHE_TTL,
        fetch_year: Callable[[int, str], List[Dict[str, Any]]] = _fetch_year_raw,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._fetch_year = fetch_year
        self._clock = clock
        self._cache: Dict[Tuple[str, int], Tuple[float, List[PublicHoliday]]] = {}

    def holidays_for_year(self, year: int, country_code: str = config.DEFAULT_COUNTRY_CODE) -> Tuple[List[PublicHoliday], bool]:
        """
        Return (holidays, from_cache).
        """
        country = country_code.upper()
        key = (country, int(year))
        now = self._clock()

        entry = self._cache.get(key)
        if entry is not None and entry[0] > now:
            return list(entry[1]), True

        holidays: List[PublicHoliday] = []
        error: Optional[Exception] = None
        try:
            holidays = [PublicHoliday.from_dict(h) for h in self._fetch_year(int(year), country)]
        except (requests.RequestException, ValueError) as exc:
            error = exc

        if not holidays:
            fallback = fallback_holidays(country, year)
            if fallback:
                holidays = fallback
                if error is not None:
                    log.warning("Using fallback holiday dataset for %s-%s: %s", country, year, error)
            elif error is not None:
                log.warning("No holiday data available for %s-%s: %s", country, year, error)

        self._cache[key] = (now + self._ttl, holidays)
        return list(holidays), False

    def holidays_for_month(
        self,
        year: int,
        month: int,
        country_code: str = config.DEFAULT_COUNTRY_CODE,
        region_code: Optional[str] = None,
    ) -> Tuple[List[PublicHoliday], bool]:
        holidays, from_cache = self.holidays_for_year(year, country_code)
        prefix = f"{year:04d}-{month:02d}-"
        in_month = [h for h in filter_by_region(holidays, region_code) if h.date.startswith(prefix)]
        return in_month, from_cache

    def clear(self) -> None:
        self._cache.clear()


def filter_by_region(holidays: List[PublicHoliday], region_code: Optional[str]) -> List[PublicHoliday]:
    """
    Keep nationwide holidays plus those whose counties end in the region
    code (Nager lists counties as "IN-KA", "IN-MH", ...).
    """
    if not region_code:
        return list(holidays)
    region = region_code.upper()
    return [h for h in holidays if not h.counties or any(c.upper().endswith(region) for c in h.counties)]
