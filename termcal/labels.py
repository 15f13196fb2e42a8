"""
Academic-year labels and batch derivation.

Rules:
- the canonical label is "YYYY-YYYY"
- a bare "YYYY" means the session starting that year
- batch (admission year) = label start year - year of study + 1

Nothing here raises: malformed input degrades to None and the caller
treats None as "cannot compute yet".
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional, Tuple

_RANGE_RE = re.compile(r"^(\d{4})-(\d{4})$")
_YEAR_RE = re.compile(r"^(\d{4})$")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_year_label(label: Any) -> Optional[str]:
    """
    Canonicalize an academic-year label.

    "2025"      -> "2025-2026"
    "2025-2026" -> "2025-2026"
    "Autumn 25" -> "Autumn 25" (unknown format, returned as-is)
    ""/None     -> None
    """
    if label is None:
        return None
    text = str(label)
    if not text:
        return None

    if _RANGE_RE.match(text):
        return text

    if _YEAR_RE.match(text):
        year = int(text)
        return f"{year}-{year + 1}"

    return text


def year_label_bounds(label: Any) -> Optional[Tuple[int, int]]:
    """
    "2025" or "2025-2026" -> (2025, 2026). Anything else -> None.
    """
    normalized = normalize_year_label(label)
    match = _RANGE_RE.match(normalized or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def derive_batch(academic_year_label: Any, year_of_study: Any) -> Optional[str]:
    """
    Compute the admission batch from the current academic year and the
    student's year of study.

    derive_batch("2025-2026", 2) -> "2024"
    """
    if year_of_study is None:
        return None
    year = _positive_int(year_of_study)
    if year is None:
        return None

    label = _WHITESPACE_RE.sub("", str(academic_year_label or ""))
    match = _RANGE_RE.match(label) or _YEAR_RE.match(label)
    if not match:
        return None

    start_year = int(match.group(1))
    return str(start_year - year + 1)


def resolve_batch(batch_label: Any, academic_year_label: Any, year_of_study: Any) -> Optional[str]:
    """
    Return the stored batch label when one exists, otherwise derive it.
    """
    if batch_label is not None and str(batch_label).strip():
        return str(batch_label).strip()
    return derive_batch(academic_year_label, year_of_study)


def current_year_of_study(batch: Any, today: Optional[date] = None) -> Optional[int]:
    """
    Inverse of derive_batch using the calendar year: a student admitted in
    2024 is in year 3 during 2026.
    """
    text = _WHITESPACE_RE.sub("", str(batch or ""))
    match = _YEAR_RE.match(text) or _RANGE_RE.match(text)
    if not match:
        return None

    today = today or date.today()
    year = today.year - int(match.group(1)) + 1
    return year if year >= 1 else None
