# naturalization/normalize.py

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional


DatePrecision = Literal["day", "month", "year", "unknown"]


@dataclass(frozen=True)
class NormalizedDate:
    """
    value:
      - datetime.date when known (month/year precision use the 1st as placeholder)
      - None when unknown

    precision:
      - day | month | year | unknown
    """
    value: Optional[date]
    precision: DatePrecision


_UNKNOWN = NormalizedDate(value=None, precision="unknown")


def _safe_date(y: int, m: int, d: int) -> Optional[date]:
    """Return None instead of raising ValueError for invalid dates (e.g., 02/31/2023)."""
    try:
        return date(y, m, d)
    except ValueError:
        return None


def _known(y: int, m: int, d: int, precision: DatePrecision) -> NormalizedDate:
    dt = _safe_date(y, m, d)
    return NormalizedDate(value=dt, precision=precision) if dt else _UNKNOWN


# ISO timestamps as written by browser exports, e.g. 2023-01-15T00:00:00.000Z
_ISO_TIMESTAMP = re.compile(r"(\d{4})-(\d{2})-(\d{2})T[\d:.]+(Z|[+-]\d{2}:?\d{2})?")


def normalize_date(text: Optional[str], assume_us_mdy: bool = False) -> NormalizedDate:
    """
    Normalize trip/profile date strings into a date + precision.

    Day precision:
      - "YYYY-MM-DD", "YYYY/MM/DD"
      - ISO timestamps (the time part is dropped)
      - "MM/DD/YYYY" (only when assume_us_mdy=True; otherwise unknown)

    Month precision: "YYYY-MM", "MM/YYYY"
    Year precision:  "YYYY"

    Never raises; unrecognized or impossible dates return precision="unknown".
    """
    if text is None:
        return _UNKNOWN

    s = text.strip()
    if not s:
        return _UNKNOWN

    m = re.fullmatch(r"(\d{4})[-/](\d{1,2})[-/](\d{1,2})", s)
    if m:
        y, mo, d = map(int, m.groups())
        return _known(y, mo, d, "day")

    m = _ISO_TIMESTAMP.fullmatch(s)
    if m:
        y, mo, d = int(m.group(1)), int(m.group(2)), int(m.group(3))
        return _known(y, mo, d, "day")

    m = re.fullmatch(r"(\d{1,2})/(\d{1,2})/(\d{4})", s)
    if m:
        if not assume_us_mdy:
            return _UNKNOWN
        mo, d, y = map(int, m.groups())
        return _known(y, mo, d, "day")

    m = re.fullmatch(r"(\d{4})-(\d{1,2})", s)
    if m:
        y, mo = map(int, m.groups())
        return _known(y, mo, 1, "month")

    m = re.fullmatch(r"(\d{1,2})/(\d{4})", s)
    if m:
        mo, y = map(int, m.groups())
        return _known(y, mo, 1, "month")

    m = re.fullmatch(r"(\d{4})", s)
    if m:
        return _known(int(m.group(1)), 1, 1, "year")

    return _UNKNOWN
