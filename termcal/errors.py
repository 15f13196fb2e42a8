"""
Exceptions raised by termcal.

Pure helpers (labels, terms, matrix, classify) never raise on malformed
input; they return None or an empty list. Only write paths and the
calendar fetch raise the errors below.
"""


class TermcalError(Exception):
    """Base class for all termcal errors."""


class ValidationError(TermcalError):
    """Raised when input for a write path is invalid (dates, terms, holidays)."""


class CalendarFetchError(TermcalError):
    """Raised when the holiday/attendance collaborator fails for a month."""

    def __init__(self, month_key: str, message: str = ""):
        self.month_key = month_key
        super().__init__(message or f"Unable to load calendar data for {month_key}")
