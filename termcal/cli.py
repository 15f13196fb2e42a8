"""
CLI (Command Line Interface).

Quick terminal commands for administrators and for testing, e.g.:

    termcal years
    termcal batch 2025-2026 2
    termcal terms <course_id>
    termcal month 2026-10 [--refresh]
    termcal holidays --start 2026-10-01 --end 2026-10-31
    termcal holiday add 2026-10-20 "Foundation Day"
    termcal holiday remove 2026-10-20

Output is rendered with rich; every command exits via SystemExit
(0 = ok, 1 = bad input).
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich import box

from termcal import config
from termcal.errors import ValidationError
from termcal.labels import derive_batch, normalize_year_label
from termcal.matrix import WEEKDAY_NAMES, month_key, month_label, parse_month_key, weeks
from termcal.model import CalendarCell, DayKind
from termcal.service import CalendarService, TermService
from termcal.storage import JsonStore

console = Console()

# Cell colours per classification label
STYLES = {
    "public_holiday": "bold dark_orange",
    "institute_holiday": "bold magenta",
    "sunday": "yellow",
    "submitted": "bold green",
    "not_marked": "red",
    "pending": "bold yellow",
    "upcoming": "blue",
    "working_day": "",
}


def _cmd_years(args: argparse.Namespace, store: JsonStore) -> int:
    today = date.today()
    if args.today:
        try:
            today = date.fromisoformat(args.today)
        except ValueError:
            console.print(f"Invalid date: {args.today}")
            return 1

    table = Table(title="Academic years", box=box.SIMPLE)
    table.add_column("Label")
    table.add_column("Id")
    table.add_column("Active")
    table.add_column("Saved")
    for year in TermService(store).academic_years(today):
        table.add_row(
            year.year_label,
            "-" if year.id is None else str(year.id),
            "yes" if year.is_active else "no",
            "yes" if year.exists_in_db else "no",
        )
    console.print(table)
    return 0


def _cmd_batch(args: argparse.Namespace) -> int:
    batch = derive_batch(args.label, args.year)
    if batch is None:
        console.print("Cannot compute batch: need a YYYY or YYYY-YYYY label and a year of study >= 1.")
        return 1
    console.print(f"{normalize_year_label(args.label.strip())} / year {args.year} -> batch {batch}")
    return 0


def _cmd_terms(args: argparse.Namespace, store: JsonStore) -> int:
    options = TermService(store).options_for_course(args.course_id)
    if not options:
        console.print(f"Unknown course or course without years: {args.course_id}")
        return 1

    table = Table(title=f"Course {args.course_id}", box=box.SIMPLE)
    table.add_column("Year of study")
    table.add_column("Semesters")
    for year, semesters in options:
        table.add_row(str(year), ", ".join(str(s) for s in semesters))
    console.print(table)
    return 0


def _cell_text(cell: CalendarCell) -> str:
    style = STYLES.get(cell.classification.label, "")
    if not cell.is_current_month:
        style = "dim"
    text = f"{cell.day:>2}"
    return f"[{style}]{text}[/]" if style else text


def _cmd_month(args: argparse.Namespace, store: JsonStore) -> int:
    key = args.month
    if key is None:
        today = date.today()
        key = month_key(today.year, today.month)
    if parse_month_key(key) is None:
        console.print(f"Invalid month: {key} (expected YYYY-MM)")
        return 1

    service = CalendarService.build(store, country_code=args.country.upper())
    view = service.month_view(key, force=args.refresh)

    table = Table(title=month_label(key), box=box.ROUNDED)
    for name in WEEKDAY_NAMES:
        table.add_column(name, justify="right")
    for row in weeks(view.cells):
        table.add_row(*[_cell_text(c) for c in row])
    console.print(table)

    if view.is_fallback:
        console.print("[red]Holiday data unavailable; showing Sundays only.[/]")

    for cell in view.cells:
        if cell.is_current_month and cell.classification.kind in (DayKind.PUBLIC_HOLIDAY, DayKind.INSTITUTE_HOLIDAY):
            kind = "public" if cell.classification.kind is DayKind.PUBLIC_HOLIDAY else "institute"
            console.print(f"{cell.iso_date}  {cell.classification.title}  ({kind})")
    return 0


def _cmd_holidays(args: argparse.Namespace, store: JsonStore) -> int:
    holidays = store.list_custom_holidays(args.start, args.end)
    if not holidays:
        console.print("No institute holidays.")
        return 0
    for h in holidays:
        suffix = f" - {h.description}" if h.description else ""
        console.print(f"{h.date}  {h.title}{suffix}")
    return 0


def _cmd_holiday_add(args: argparse.Namespace, store: JsonStore) -> int:
    holiday = store.create_institute_holiday(args.date, args.title, args.description)
    console.print(f"Saved institute holiday: {holiday.date} {holiday.title}")
    return 0


def _cmd_holiday_remove(args: argparse.Namespace, store: JsonStore) -> int:
    if store.delete_institute_holiday(args.date):
        console.print(f"Removed institute holiday: {args.date}")
    else:
        console.print(f"No institute holiday on {args.date}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="termcal", description="Academic terms and holiday calendar")
    parser.add_argument("--data-dir", type=Path, default=None, help="Folder with the JSON data files")
    parser.add_argument("--country", type=str, default=config.DEFAULT_COUNTRY_CODE, help="Country code (e.g. IN)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_years = sub.add_parser("years", help="Selectable academic years")
    p_years.add_argument("--today", type=str, default=None, help="Pretend today is YYYY-MM-DD")

    p_batch = sub.add_parser("batch", help="Derive batch from academic year and year of study")
    p_batch.add_argument("label", type=str, help="Academic year (e.g. 2025-2026)")
    p_batch.add_argument("year", type=str, help="Year of study (e.g. 2)")

    p_terms = sub.add_parser("terms", help="Year/semester options of a course")
    p_terms.add_argument("course_id", type=int, help="Course id")

    p_month = sub.add_parser("month", help="Show a month with holidays and attendance")
    p_month.add_argument("month", nargs="?", default=None, help="Month key YYYY-MM (default: current)")
    p_month.add_argument("--refresh", action="store_true", help="Ignore cached data")

    p_list = sub.add_parser("holidays", help="List institute holidays")
    p_list.add_argument("--start", type=str, default=None)
    p_list.add_argument("--end", type=str, default=None)

    p_holiday = sub.add_parser("holiday", help="Manage institute holidays")
    holiday_sub = p_holiday.add_subparsers(dest="action", required=True)
    p_add = holiday_sub.add_parser("add", help="Declare an institute holiday")
    p_add.add_argument("date", type=str, help="YYYY-MM-DD")
    p_add.add_argument("title", type=str, nargs="?", default="", help="Title (default: Holiday)")
    p_add.add_argument("--description", type=str, default=None)
    p_remove = holiday_sub.add_parser("remove", help="Remove an institute holiday")
    p_remove.add_argument("date", type=str, help="YYYY-MM-DD")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = JsonStore(args.data_dir)

    try:
        if args.command == "years":
            raise SystemExit(_cmd_years(args, store))
        if args.command == "batch":
            raise SystemExit(_cmd_batch(args))
        if args.command == "terms":
            raise SystemExit(_cmd_terms(args, store))
        if args.command == "month":
            raise SystemExit(_cmd_month(args, store))
        if args.command == "holidays":
            raise SystemExit(_cmd_holidays(args, store))
        if args.command == "holiday" and args.action == "add":
            raise SystemExit(_cmd_holiday_add(args, store))
        if args.command == "holiday" and args.action == "remove":
            raise SystemExit(_cmd_holiday_remove(args, store))
    except ValidationError as exc:
        console.print(f"Error: {exc}")
        raise SystemExit(1)

    raise SystemExit(2)
