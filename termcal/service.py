"""
Calendar and term services used by the CLI (and any UI/API layer).

Wiring:

    JsonStore ──> MonthComposer ──> CalendarOrchestrator ──> month grid
        │
        └──> academic year window / semester options / batch
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Tuple

from termcal import config
from termcal.cache import CalendarOrchestrator, FetchMonth
from termcal.classify import DaySources
from termcal.compose import MonthComposer
from termcal.errors import CalendarFetchError
from termcal.holidays import PublicHolidayClient
from termcal.labels import resolve_batch
from termcal.matrix import build_month_matrix
from termcal.model import AcademicYear, CalendarCell, CalendarMonthData, CustomHoliday, Term
from termcal.storage import JsonStore
from termcal.terms import academic_year_window, selectable_years, semester_options, validate_term, years_of_study

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthView:
    data: CalendarMonthData
    cells: List[CalendarCell]
    # True when the collaborator failed and computed Sundays were used
    is_fallback: bool = False


class CalendarService:
    def __init__(self, store: JsonStore, orchestrator: CalendarOrchestrator):
        self._store = store
        self._orchestrator = orchestrator

    @classmethod
    def build(
        cls,
        store: Optional[JsonStore] = None,
        *,
        country_code: str = config.DEFAULT_COUNTRY_CODE,
        fetch_month: Optional[FetchMonth] = None,
    ) -> "CalendarService":
        store = store or JsonStore()
        if fetch_month is None:
            fetch_month = MonthComposer(PublicHolidayClient(), store, store)
        return cls(store, CalendarOrchestrator(fetch_month, country_code=country_code))

    @property
    def orchestrator(self) -> CalendarOrchestrator:
        return self._orchestrator

    def month_view(self, month_key: str, force: bool = False) -> MonthView:
        try:
            data = self._orchestrator.get(month_key, force=force)
            is_fallback = False
        except CalendarFetchError:
            data = self._orchestrator.fallback(month_key)
            is_fallback = True
        cells = build_month_matrix(month_key, DaySources.from_month(data))
        return MonthView(data=data, cells=cells, is_fallback=is_fallback)

    def add_holiday(self, holiday_date: Any, title: Optional[str] = None, description: Optional[str] = None) -> CustomHoliday:
        """Persist an institute holiday, then force-refresh its month."""
        holiday = self._store.create_institute_holiday(holiday_date, title, description)
        self._refresh(holiday.date)
        return holiday

    def remove_holiday(self, holiday_date: Any) -> bool:
        removed = self._store.delete_institute_holiday(holiday_date)
        if removed:
            self._refresh(holiday_date)
        return removed

    def _refresh(self, holiday_date: Any) -> None:
        try:
            self._orchestrator.refresh_for_date(holiday_date)
        except CalendarFetchError as exc:
            # The holiday is saved; the next month view retries or falls back.
            log.warning("refresh after holiday change failed: %s", exc)


class TermService:
    def __init__(self, store: JsonStore):
        self._store = store

    def academic_years(self, today: Optional[date] = None) -> List[AcademicYear]:
        return academic_year_window(today, self._store.list_persisted_academic_years())

    def selectable_years(self, today: Optional[date] = None) -> List[AcademicYear]:
        return selectable_years(self.academic_years(today))

    def validate(self, term: Term) -> Term:
        """Validate a term against its stored course and the saved academic years."""
        course = self._store.get_course(term.course_id) if term.course_id is not None else None
        return validate_term(term, course, self._store.list_persisted_academic_years())

    def options_for_course(self, course_id: int) -> List[Tuple[int, List[int]]]:
        """[(year_of_study, [semesters...]), ...]; empty for unknown course."""
        course = self._store.get_course(course_id)
        return [(year, semester_options(course, year)) for year in years_of_study(course)]

    def batch_for_term(self, term: Term) -> Optional[str]:
        label = term.academic_year_label
        if not label and term.academic_year_id is not None:
            for year in self._store.list_persisted_academic_years():
                if year.id == term.academic_year_id:
                    label = year.year_label
                    break
        return resolve_batch(term.batch, label, term.year_of_study)
