"""
File-backed stand-ins for the portal's persistence collaborators.

This module manages these files inside the data folder:

    custom_holidays.json   {"custom_holidays": [{date, title, description}]}
    academic_years.json    {"academic_years": [{id, yearLabel, isActive}]}
    courses.json           {"courses": [{id, collegeId, totalYears, ...}]}
    terms.json             {"terms": [{collegeId, courseId, ...}]}
    attendance.json        {"records": {"YYYY-MM-DD": <submitted count>}}

Reads are defensive: a missing or corrupted file reads as empty instead of
crashing the caller. Writes go through create/delete of institute holidays
only; everything else is maintained by the portal.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from termcal import config
from termcal.classify import date_key
from termcal.errors import ValidationError
from termcal.model import AcademicYear, Course, CustomHoliday, Term
from termcal.terms import filter_terms

log = logging.getLogger(__name__)

HOLIDAYS_FILE = "custom_holidays.json"
ACADEMIC_YEARS_FILE = "academic_years.json"
COURSES_FILE = "courses.json"
TERMS_FILE = "terms.json"
ATTENDANCE_FILE = "attendance.json"


def normalize_date(value: Any) -> Optional[str]:
    """
    Return "YYYY-MM-DD" for a valid date (time part ignored), else None.
    """
    key = date_key(value)
    if not key:
        return None
    try:
        return date.fromisoformat(key).isoformat()
    except ValueError:
        return None


class JsonStore:
    def __init__(self, root: str | Path | None = None):
        # Resolved lazily from config so TERMCAL_DATA_DIR set by tests applies
        self._root = Path(root) if root is not None else None

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else config.data_dir()

    # -- file helpers ------------------------------------------------------

    def _read(self, filename: str) -> Any:
        path = self.root / filename
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            log.warning("ignoring unreadable %s: %s", path, exc)
            return None

    def _read_list(self, filename: str, key: str) -> List[Dict[str, Any]]:
        data = self._read(filename)
        if isinstance(data, dict):
            data = data.get(key, [])
        if not isinstance(data, list):
            return []
        return [x for x in data if isinstance(x, dict)]

    def _write(self, filename: str, payload: Any) -> None:
        path = self.root / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    # -- institute holidays ------------------------------------------------

    def list_custom_holidays(self, start: Optional[str] = None, end: Optional[str] = None) -> List[CustomHoliday]:
        """
        Holidays between start and end (inclusive, either may be None),
        sorted by date.
        """
        start_key = normalize_date(start) if start else None
        end_key = normalize_date(end) if end else None

        out: List[CustomHoliday] = []
        for raw in self._read_list(HOLIDAYS_FILE, "custom_holidays"):
            holiday = CustomHoliday.from_dict(raw)
            if not normalize_date(holiday.date):
                continue
            if start_key and holiday.date < start_key:
                continue
            if end_key and holiday.date > end_key:
                continue
            out.append(holiday)
        return sorted(out, key=lambda h: h.date)

    def create_institute_holiday(self, holiday_date: Any, title: Optional[str] = None, description: Optional[str] = None) -> CustomHoliday:
        """
        Insert or replace the holiday on that date. Blank titles become
        "Holiday".
        """
        day = normalize_date(holiday_date)
        if not day:
            raise ValidationError(f"Invalid holiday date: {holiday_date!r}")

        holiday = CustomHoliday(
            date=day,
            title=(title or "").strip() or "Holiday",
            description=(description or "").strip() or None,
        )
        others = [h for h in self.list_custom_holidays() if h.date != day]
        others.append(holiday)
        self._write(HOLIDAYS_FILE, {"custom_holidays": [h.to_dict() for h in sorted(others, key=lambda h: h.date)]})
        return holiday

    def delete_institute_holiday(self, holiday_date: Any) -> bool:
        """Remove the holiday on that date. Returns False if there was none."""
        day = normalize_date(holiday_date)
        if not day:
            raise ValidationError(f"Invalid holiday date: {holiday_date!r}")

        current = self.list_custom_holidays()
        remaining = [h for h in current if h.date != day]
        if len(remaining) == len(current):
            return False
        self._write(HOLIDAYS_FILE, {"custom_holidays": [h.to_dict() for h in remaining]})
        return True

    # -- read-only sources -------------------------------------------------

    def list_persisted_academic_years(self) -> List[AcademicYear]:
        return [AcademicYear.from_dict(r) for r in self._read_list(ACADEMIC_YEARS_FILE, "academic_years")]

    def list_courses(self, college_id: Optional[int] = None) -> List[Course]:
        courses = [Course.from_dict(r) for r in self._read_list(COURSES_FILE, "courses")]
        if college_id is None:
            return courses
        return [c for c in courses if c.college_id == college_id]

    def get_course(self, course_id: int) -> Optional[Course]:
        for course in self.list_courses():
            if course.id == course_id:
                return course
        return None

    def list_terms(
        self,
        college_id: Optional[int] = None,
        course_id: Optional[int] = None,
        semester_number: Optional[int] = None,
    ) -> List[Term]:
        terms = [Term.from_dict(r) for r in self._read_list(TERMS_FILE, "terms")]
        return filter_terms(terms, college_id=college_id, course_id=course_id, semester_number=semester_number)

    def attendance_counts(self, start: str, end: str) -> Dict[str, int]:
        data = self._read(ATTENDANCE_FILE)
        records = data.get("records", {}) if isinstance(data, dict) else {}
        if not isinstance(records, dict):
            return {}

        out: Dict[str, int] = {}
        for raw_day, count in records.items():
            day = normalize_date(raw_day)
            if not day or day < start or day > end:
                continue
            try:
                out[day] = int(count)
            except (TypeError, ValueError):
                continue
        return out
