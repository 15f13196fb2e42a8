"""
Day classification.

One day can show up in several sources at once (a public holiday that is
also a Sunday, an institute holiday with a stale attendance status from an
earlier run). classify() resolves that to a single answer, most specific
first:

    public holiday > institute holiday > Sunday > attendance status > working day
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from termcal.model import (
    AttendanceStatus,
    CalendarMonthData,
    Classification,
    CustomHoliday,
    DayKind,
    PublicHoliday,
)


def date_key(value: Any) -> Optional[str]:
    """
    Reduce a date-ish value to "YYYY-MM-DD", dropping any time component.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return None
    return text.split("T", 1)[0].split(" ", 1)[0]


@dataclass(frozen=True)
class DaySources:
    """
    The four independent inputs for classifying days, indexed by ISO date.
    """

    sundays: frozenset = frozenset()
    public_holidays: Mapping[str, PublicHoliday] = field(default_factory=dict)
    custom_holidays: Mapping[str, CustomHoliday] = field(default_factory=dict)
    attendance_status: Mapping[str, AttendanceStatus] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        sundays: Iterable[Any] = (),
        public_holidays: Iterable[PublicHoliday] = (),
        custom_holidays: Iterable[CustomHoliday] = (),
        attendance_status: Optional[Mapping[Any, Any]] = None,
    ) -> "DaySources":
        sunday_keys = {k for k in (date_key(d) for d in sundays) if k}

        public_map: dict[str, PublicHoliday] = {}
        for holiday in public_holidays:
            key = date_key(holiday.date)
            # First entry wins when a date has two holidays
            if key and key not in public_map:
                public_map[key] = holiday

        custom_map: dict[str, CustomHoliday] = {}
        for holiday in custom_holidays:
            key = date_key(holiday.date)
            if key and key not in custom_map:
                custom_map[key] = holiday

        status_map: dict[str, AttendanceStatus] = {}
        for raw_day, raw_status in (attendance_status or {}).items():
            key = date_key(raw_day)
            status = AttendanceStatus.parse(raw_status)
            if key and status is not None:
                status_map[key] = status

        return cls(
            sundays=frozenset(sunday_keys),
            public_holidays=public_map,
            custom_holidays=custom_map,
            attendance_status=status_map,
        )

    @classmethod
    def from_month(cls, data: CalendarMonthData) -> "DaySources":
        return cls.build(
            sundays=data.sundays,
            public_holidays=data.public_holidays,
            custom_holidays=data.custom_holidays,
            attendance_status=data.attendance_status,
        )

    @classmethod
    def empty(cls) -> "DaySources":
        return cls()


def classify(day: Any, sources: DaySources) -> Classification:
    key = date_key(day)
    if key is None:
        return Classification(DayKind.WORKING_DAY)

    public = sources.public_holidays.get(key)
    if public is not None:
        return Classification(DayKind.PUBLIC_HOLIDAY, title=public.name or public.local_name)

    custom = sources.custom_holidays.get(key)
    if custom is not None:
        return Classification(DayKind.INSTITUTE_HOLIDAY, title=custom.title)

    if key in sources.sundays:
        return Classification(DayKind.SUNDAY, title="Sunday")

    status = sources.attendance_status.get(key)
    if status is not None:
        return Classification(DayKind.ATTENDANCE, status=status)

    return Classification(DayKind.WORKING_DAY)
