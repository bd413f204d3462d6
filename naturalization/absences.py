# naturalization/absences.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Literal, Optional, Tuple

from .dates import intervals_overlap, later_of, shift_date
from .issues import Issue
from .models import EligibilityPath, Trip


AbsenceTier = Literal["broken", "risk", "none"]

CONTINUITY_BREAK_DAYS = 365
CONTINUITY_RISK_DAYS = 180


@dataclass(frozen=True)
class TripAbsence:
    trip: Trip
    days: int
    tier: AbsenceTier


@dataclass(frozen=True)
class AbsenceAnalysis:
    total_trips_in_window: int
    total_days_absent: int
    continuity_broken: bool
    trips: Tuple[TripAbsence, ...]
    long_absences: Tuple[TripAbsence, ...]  # days >= 180, any tier
    warnings: Tuple[Issue, ...]
    earliest_possible_after_continuity_issue: Optional[date]
    lower_risk_after_continuity_issue: Optional[date]


def classify_absence(days: int) -> AbsenceTier:
    if days >= CONTINUITY_BREAK_DAYS:
        return "broken"
    if days > CONTINUITY_RISK_DAYS:
        return "risk"
    return "none"


def earliest_after_continuity_issue(trip_end: date) -> date:
    """Return + 4 years + 1 day: fileable if the continuity objection is rebutted."""
    return shift_date(shift_date(trip_end, years=4), days=1)


def lower_risk_after_continuity_issue(trip_end: date) -> date:
    """
    Return + 5 years - 179 days: from this date on, at most 179 days of the
    trip remain inside the rolling 5-year lookback.
    """
    return shift_date(shift_date(trip_end, years=5), days=-179)


def analyze_absences(
    trips: Iterable[Trip],
    *,
    lpr_date: date,
    as_of: date,
    eligibility_path: EligibilityPath,
) -> AbsenceAnalysis:
    """
    Continuous-residence analysis over [lpr_date, as_of].

    Tiers (days = end - start):
      - >= 365 days => continuity broken (the caller turns this into a blocker)
      - 181..364 days => continuity risk, warning only
      - <= 180 days => counted in totals only

    Recovery dates are computed for broken and risk trips on the general
    (5-year) path only, and folded with later_of so the latest trip binds.
    """
    in_window: List[TripAbsence] = []
    for trip in trips:
        if not trip.counts_as_absence:
            continue
        if not intervals_overlap(trip.start_date, trip.end_date, lpr_date, as_of):
            continue
        days = trip.days
        in_window.append(TripAbsence(trip=trip, days=days, tier=classify_absence(days)))

    warnings: List[Issue] = []
    continuity_broken = False
    earliest: Optional[date] = None
    lower_risk: Optional[date] = None

    for ta in in_window:
        if ta.tier == "none":
            continue

        trip = ta.trip
        params = {
            "destination": trip.destination,
            "start_date": trip.start_date,
            "end_date": trip.end_date,
            "days": ta.days,
        }
        if ta.tier == "broken":
            continuity_broken = True
            warnings.append(
                Issue(kind="trip_breaks_continuity", severity="high", category="absences", params=params)
            )
        else:
            warnings.append(
                Issue(kind="trip_continuity_risk", severity="medium", category="absences", params=params)
            )

        if eligibility_path == "general":
            earliest = later_of(earliest, earliest_after_continuity_issue(trip.end_date))
            lower_risk = later_of(lower_risk, lower_risk_after_continuity_issue(trip.end_date))

    return AbsenceAnalysis(
        total_trips_in_window=len(in_window),
        total_days_absent=sum(ta.days for ta in in_window),
        continuity_broken=continuity_broken,
        trips=tuple(in_window),
        long_absences=tuple(ta for ta in in_window if ta.days >= CONTINUITY_RISK_DAYS),
        warnings=tuple(warnings),
        earliest_possible_after_continuity_issue=earliest,
        lower_risk_after_continuity_issue=lower_risk,
    )
