"""
Term option resolution.

Given a course's year/semester layout and today's date, work out:
- which academic years can be picked (a sliding window around today)
- which years of study and semesters are valid for the course
- whether a term submitted by an administrator is consistent
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from termcal.config import DEFAULT_SEMESTERS_PER_YEAR
from termcal.errors import ValidationError
from termcal.labels import normalize_year_label
from termcal.model import AcademicYear, Course, Term


# ---------------------------------------------------------------------------
# Academic year window
# ---------------------------------------------------------------------------


def academic_year_window(
    today: Optional[date] = None,
    persisted: Iterable[AcademicYear] = (),
    *,
    span: int = 1,
) -> List[AcademicYear]:
    """
    Return the selectable academic years: prior, current and next
    (span=1), oldest first.

    Generated labels are matched against persisted records by normalized
    label. A match contributes its id and is_active flag; everything else
    is synthetic (id=None, exists_in_db=False).
    """
    today = today or date.today()
    span = max(0, int(span))

    existing: dict[str, AcademicYear] = {}
    for record in persisted:
        normalized = normalize_year_label(record.year_label)
        if normalized:
            existing[normalized] = record

    window: List[AcademicYear] = []
    for offset in range(-span, span + 1):
        start_year = today.year + offset
        end_year = start_year + 1
        label = normalize_year_label(str(start_year)) or f"{start_year}-{end_year}"

        match = existing.get(label)
        if match is not None:
            window.append(
                AcademicYear(
                    year_label=label,
                    start_year=start_year,
                    end_year=end_year,
                    id=match.id,
                    is_active=match.is_active,
                    exists_in_db=True,
                )
            )
        else:
            window.append(
                AcademicYear(
                    year_label=label,
                    start_year=start_year,
                    end_year=end_year,
                    id=None,
                    is_active=True,
                    exists_in_db=False,
                )
            )

    return window


def selectable_years(window: Iterable[AcademicYear]) -> List[AcademicYear]:
    """Years a term can be filed under: saved and active."""
    return [y for y in window if y.exists_in_db and y.is_active]


# ---------------------------------------------------------------------------
# Years of study / semesters
# ---------------------------------------------------------------------------


def years_of_study(course: Optional[Course]) -> List[int]:
    if course is None:
        return []
    return list(range(1, max(0, int(course.total_years or 0)) + 1))


def _configured_semesters(course: Course, year: int) -> Optional[int]:
    # Only the entry for the requested year counts; other years keep theirs.
    for entry in course.year_semester_config or ():
        if entry.year == year and entry.semesters:
            return int(entry.semesters)
    return None


def semester_options(course: Optional[Course], year_of_study: object) -> List[int]:
    """
    Valid semester numbers for one year of study.

    The per-year override table wins when it has an entry for that year;
    otherwise the course default applies (2 when unset). A missing course
    or year gives an empty list.
    """
    if course is None or year_of_study is None or year_of_study == "":
        return []
    try:
        year = int(str(year_of_study).strip())
    except ValueError:
        return []

    count = _configured_semesters(course, year)
    if count is None:
        count = course.semesters_per_year or DEFAULT_SEMESTERS_PER_YEAR
    return list(range(1, count + 1))


def term_options(course: Optional[Course]) -> List[Tuple[int, int]]:
    """
    Every valid (year_of_study, semester) pair for the course, in order.
    """
    pairs: List[Tuple[int, int]] = []
    for year in years_of_study(course):
        for semester in semester_options(course, year):
            pairs.append((year, semester))
    return pairs


# ---------------------------------------------------------------------------
# Term checks
# ---------------------------------------------------------------------------


def validate_term(
    term: Term,
    course: Optional[Course] = None,
    academic_years: Optional[Iterable[AcademicYear]] = None,
) -> Term:
    """
    Check a term before it is written. Raises ValidationError.

    When academic_years is given, the referenced year (by id or by
    normalized label) must be one of its saved records.
    """
    has_id = term.academic_year_id is not None
    has_label = bool((term.academic_year_label or "").strip())
    if has_id == has_label:
        raise ValidationError("Provide exactly one of academic year id or academic year label")

    if (term.year_of_study or 0) < 1:
        raise ValidationError(f"Year of study must be at least 1, got {term.year_of_study}")
    if (term.semester_number or 0) < 1:
        raise ValidationError(f"Semester number must be at least 1, got {term.semester_number}")

    if term.start_date is None or term.end_date is None:
        raise ValidationError("Start date and end date are required")
    if term.start_date >= term.end_date:
        raise ValidationError(
            f"Start date {term.start_date.isoformat()} must be before end date {term.end_date.isoformat()}"
        )

    if course is not None and (term.year_of_study, term.semester_number) not in term_options(course):
        raise ValidationError(
            f"Year {term.year_of_study} / semester {term.semester_number} is not offered by this course"
        )

    if academic_years is not None:
        _check_academic_year(term, academic_years)

    return term


def _check_academic_year(term: Term, academic_years: Iterable[AcademicYear]) -> None:
    saved = [y for y in academic_years if y.exists_in_db]
    if term.academic_year_id is not None:
        if not any(y.id == term.academic_year_id for y in saved):
            raise ValidationError(f"Academic year id {term.academic_year_id} does not exist")
        return

    label = normalize_year_label((term.academic_year_label or "").strip())
    if not any(normalize_year_label(y.year_label) == label for y in saved):
        raise ValidationError(f"Academic year {label} has not been created yet")


def filter_terms(
    terms: Sequence[Term],
    college_id: Optional[int] = None,
    course_id: Optional[int] = None,
    semester_number: Optional[int] = None,
) -> List[Term]:
    out: List[Term] = []
    for term in terms:
        if college_id is not None and term.college_id != college_id:
            continue
        if course_id is not None and term.course_id != course_id:
            continue
        if semester_number is not None and term.semester_number != semester_number:
            continue
        out.append(term)
    return out
