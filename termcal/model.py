"""
Central data model definitions used across the project.

This module defines the canonical structure of academic years, courses,
terms and calendar data so that:
- all modules share the same field names
- data coming from JSON files or the holiday API is converted in one place
- calendar results stay immutable snapshots that consumers never patch
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from termcal.config import DEFAULT_SEMESTERS_PER_YEAR
from termcal.labels import normalize_year_label, year_label_bounds

def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """
    Return the first present key. Records arrive in camelCase from the
    portal API and in snake_case from our own JSON files.
    """
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


# ---------------------------------------------------------------------------
# Academic structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AcademicYear:
    """
    One academic session, e.g. 2025-2026.

    exists_in_db tells persisted records apart from the synthetic ones the
    resolver generates; callers branch on it instead of checking id.
    """

    year_label: str
    start_year: Optional[int]
    end_year: Optional[int]
    id: Optional[int] = None
    is_active: bool = True
    exists_in_db: bool = False

    @classmethod
    def from_label(
        cls,
        label: str,
        id: Optional[int] = None,
        is_active: bool = True,
        exists_in_db: bool = True,
    ) -> "AcademicYear":
        normalized = normalize_year_label(label) or str(label or "")
        start_year, end_year = year_label_bounds(normalized) or (None, None)
        return cls(
            year_label=normalized,
            start_year=start_year,
            end_year=end_year,
            id=id,
            is_active=is_active,
            exists_in_db=exists_in_db,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AcademicYear":
        return cls.from_label(
            str(_pick(data, "yearLabel", "year_label", default="")),
            id=_as_int(_pick(data, "id")),
            is_active=bool(_pick(data, "isActive", "is_active", default=True)),
            exists_in_db=True,
        )


@dataclass(frozen=True)
class YearSemesters:
    year: int
    semesters: int


@dataclass
class Course:
    """
    A course (programme) with its year/semester layout.

    year_semester_config, when present, overrides semesters_per_year for the
    years it lists.
    """

    total_years: int
    semesters_per_year: int = DEFAULT_SEMESTERS_PER_YEAR
    year_semester_config: Optional[List[YearSemesters]] = None
    id: Optional[int] = None
    name: str = ""
    college_id: Optional[int] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Course":
        raw_config = _pick(data, "yearSemesterConfig", "year_semester_config")
        config: Optional[List[YearSemesters]] = None
        if isinstance(raw_config, list):
            config = []
            for entry in raw_config:
                if not isinstance(entry, Mapping):
                    continue
                year = _as_int(entry.get("year"))
                semesters = _as_int(entry.get("semesters"))
                if year is None or semesters is None:
                    continue
                config.append(YearSemesters(year=year, semesters=semesters))

        return cls(
            total_years=_as_int(_pick(data, "totalYears", "total_years")) or 0,
            semesters_per_year=_as_int(_pick(data, "semestersPerYear", "semesters_per_year"))
            or DEFAULT_SEMESTERS_PER_YEAR,
            year_semester_config=config,
            id=_as_int(_pick(data, "id")),
            name=str(_pick(data, "name", default="")),
            college_id=_as_int(_pick(data, "collegeId", "college_id")),
            is_active=bool(_pick(data, "isActive", "is_active", default=True)),
        )


@dataclass(frozen=True)
class Term:
    """
    A concrete (college, course, batch, year of study, semester) tuple with
    explicit dates. Exactly one of academic_year_id / academic_year_label is
    expected; see terms.validate_term.
    """

    college_id: Optional[int]
    course_id: Optional[int]
    year_of_study: int
    semester_number: int
    start_date: Optional[date]
    end_date: Optional[date]
    batch: Optional[str] = None
    academic_year_id: Optional[int] = None
    academic_year_label: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Term":
        batch = _pick(data, "batchLabel", "batch_label", "batch")
        label = _pick(data, "academicYearLabel", "academic_year_label")
        return cls(
            id=_as_int(_pick(data, "id")),
            college_id=_as_int(_pick(data, "collegeId", "college_id")),
            course_id=_as_int(_pick(data, "courseId", "course_id")),
            year_of_study=_as_int(_pick(data, "yearOfStudy", "year_of_study")) or 0,
            semester_number=_as_int(_pick(data, "semesterNumber", "semester_number")) or 0,
            start_date=_as_date(_pick(data, "startDate", "start_date")),
            end_date=_as_date(_pick(data, "endDate", "end_date")),
            batch=str(batch) if batch is not None else None,
            academic_year_id=_as_int(_pick(data, "academicYearId", "academic_year_id")),
            academic_year_label=str(label) if label is not None else None,
        )


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


class AttendanceStatus(str, Enum):
    """Per-day attendance bookkeeping state."""

    SUBMITTED = "submitted"
    NOT_MARKED = "not_marked"
    PENDING = "pending"
    UPCOMING = "upcoming"

    @classmethod
    def parse(cls, value: Any) -> Optional["AttendanceStatus"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class DayKind(str, Enum):
    PUBLIC_HOLIDAY = "public_holiday"
    INSTITUTE_HOLIDAY = "institute_holiday"
    SUNDAY = "sunday"
    ATTENDANCE = "attendance"
    WORKING_DAY = "working_day"


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying one day.

    status is only set for DayKind.ATTENDANCE; title carries the holiday
    name (or "Sunday") for display.
    """

    kind: DayKind
    status: Optional[AttendanceStatus] = None
    title: Optional[str] = None

    @property
    def label(self) -> str:
        if self.kind is DayKind.ATTENDANCE and self.status is not None:
            return self.status.value
        return self.kind.value


@dataclass(frozen=True)
class PublicHoliday:
    date: str
    name: str
    local_name: str
    country_code: Optional[str] = None
    counties: Optional[Tuple[str, ...]] = None
    types: Tuple[str, ...] = ()
    fixed: bool = False
    global_: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PublicHoliday":
        name = _pick(data, "name") or _pick(data, "localName", "local_name") or "Unnamed Holiday"
        local_name = _pick(data, "localName", "local_name") or _pick(data, "name") or "Unnamed Holiday"
        counties = data.get("counties")
        types = data.get("types")
        return cls(
            date=str(data.get("date") or "").split("T")[0],
            name=str(name),
            local_name=str(local_name),
            country_code=_pick(data, "countryCode", "country_code"),
            counties=tuple(str(c) for c in counties) if isinstance(counties, list) and counties else None,
            types=tuple(str(t) for t in types) if isinstance(types, list) else (),
            fixed=bool(data.get("fixed", False)),
            global_=bool(_pick(data, "global", "global_", default=True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "name": self.name,
            "localName": self.local_name,
            "countryCode": self.country_code,
            "counties": list(self.counties) if self.counties else None,
            "types": list(self.types),
            "fixed": self.fixed,
            "global": self.global_,
        }


@dataclass(frozen=True)
class CustomHoliday:
    """An administrator-declared institute holiday."""

    date: str
    title: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CustomHoliday":
        description = data.get("description")
        return cls(
            date=str(data.get("date") or "").split("T")[0],
            title=str(data.get("title") or "Holiday"),
            description=str(description) if description else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "title": self.title, "description": self.description}


@dataclass(frozen=True)
class CalendarMonthData:
    """
    Composed non-working-day data for one month key.

    Replaced wholesale on refresh; consumers never mutate it.
    """

    month: str
    country_code: str
    region_code: Optional[str]
    sundays: Tuple[str, ...]
    public_holidays: Tuple[PublicHoliday, ...] = ()
    custom_holidays: Tuple[CustomHoliday, ...] = ()
    attendance_status: Mapping[str, AttendanceStatus] = field(default_factory=dict)
    fetched_at: Optional[datetime] = None
    from_cache: bool = False


@dataclass(frozen=True)
class CalendarCell:
    """One square of the month grid."""

    index: int
    iso_date: str
    day: int
    weekday: int
    is_current_month: bool
    classification: Classification
