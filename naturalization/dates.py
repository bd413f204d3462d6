# naturalization/dates.py

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta


def days_between(a: date, b: date) -> int:
    """Signed whole days from a to b (b - a)."""
    return (b - a).days


def months_between(a: date, b: date) -> int:
    """
    Whole completed calendar months from a to b.
    Negative when b is before a; partial months are truncated toward zero.
    """
    delta = relativedelta(b, a)
    return delta.years * 12 + delta.months


def years_between(a: date, b: date) -> int:
    """
    Completed years from a to b.
    Conservative "completed years" semantics: 17 years and 11 months is 17.
    """
    return months_between(a, b) // 12


def shift_date(d: date, *, days: int = 0, months: int = 0, years: int = 0) -> date:
    """
    Calendar addition. Year/month shifts clamp the day of month the way
    relativedelta does (Feb 29 + 1 year -> Feb 28); days are applied last.
    """
    shifted = d + relativedelta(years=years, months=months)
    return shifted + timedelta(days=days)


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    # Closed intervals: touching on a single day counts as overlap.
    return a_start <= b_end and a_end >= b_start


def later_of(a: Optional[date], b: Optional[date]) -> Optional[date]:
    if a is None:
        return b
    if b is None:
        return a
    return a if a > b else b
