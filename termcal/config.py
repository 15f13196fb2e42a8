"""
Runtime settings.

Every value can be overridden through an environment variable so the CLI
and tests can point termcal at another country, API host or data folder
without code changes.
"""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_COUNTRY_CODE = os.environ.get("TERMCAL_COUNTRY", "IN").strip().upper() or "IN"
DEFAULT_REGION_CODE = os.environ.get("TERMCAL_REGION", "").strip().upper() or None

HOLIDAY_API_URL = os.environ.get("TERMCAL_HOLIDAY_API", "https://date.nager.at/api/v3").rstrip("/")
HTTP_TIMEOUT = float(os.environ.get("TERMCAL_HTTP_TIMEOUT", "8"))
HOLIDAY_CACHE_TTL = int(os.environ.get("TERMCAL_HOLIDAY_TTL", str(6 * 60 * 60)))
USER_AGENT = "termcal/1.0"

LOG_LEVEL = os.environ.get("TERMCAL_LOG_LEVEL", "WARNING").upper()

# Valid range for month keys accepted by the composer
MIN_YEAR = 2000
MAX_YEAR = 2100

DEFAULT_SEMESTERS_PER_YEAR = 2


def data_dir() -> Path:
    """
    Return the folder that holds the JSON store files.

    A function instead of a constant so tests can change TERMCAL_DATA_DIR
    after import.
    """
    override = os.environ.get("TERMCAL_DATA_DIR")
    if override:
        return Path(override)
    return PACKAGE_DIR / "data"
