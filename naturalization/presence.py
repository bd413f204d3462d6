# naturalization/presence.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Tuple

from .dates import days_between, shift_date
from .models import EligibilityPath, Trip


@dataclass(frozen=True)
class PhysicalPresence:
    days_in_us: int
    days_abroad: int
    total_window_days: int
    window_years: int
    required_days: int
    met: bool
    shortage_days: int
    percent_of_requirement: float


# (window_years, required_days_in_us)
_REQUIREMENTS = {
    "general": (5, 913),
    "spouse_3_year": (3, 548),
}


def presence_requirement(path: EligibilityPath) -> Tuple[int, int]:
    return _REQUIREMENTS[path]


def calculate_physical_presence(
    trips: Iterable[Trip],
    *,
    as_of: date,
    window_years: int,
    required_days: int,
) -> PhysicalPresence:
    """
    Days physically inside the U.S. over the trailing window
    [as_of - window_years, as_of].

    Each counted trip is clipped to the window before its days are summed,
    so a trip that started before the window only counts its in-window part.
    """
    window_start = shift_date(as_of, years=-window_years)
    window_end = as_of
    total_days = days_between(window_start, window_end)

    days_abroad = 0
    for trip in trips:
        if not trip.counts_as_absence:
            continue
        # Entirely before or after the window
        if trip.end_date <= window_start or trip.start_date >= window_end:
            continue

        clipped_start = max(trip.start_date, window_start)
        clipped_end = min(trip.end_date, window_end)
        days_abroad += days_between(clipped_start, clipped_end)

    days_in_us = total_days - days_abroad
    met = days_in_us >= required_days

    return PhysicalPresence(
        days_in_us=days_in_us,
        days_abroad=days_abroad,
        total_window_days=total_days,
        window_years=window_years,
        required_days=required_days,
        met=met,
        shortage_days=max(0, required_days - days_in_us),
        percent_of_requirement=(days_in_us / required_days) * 100 if required_days > 0 else 0.0,
    )
