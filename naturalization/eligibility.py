# naturalization/eligibility.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

import structlog

from .absences import AbsenceAnalysis, analyze_absences
from .dates import days_between, later_of, shift_date, years_between
from .issues import Issue
from .models import Profile, Trip
from .presence import PhysicalPresence, calculate_physical_presence, presence_requirement


logger = structlog.get_logger(__name__)

MINIMUM_AGE = 18
EARLY_FILING_DAYS = 90
STATE_RESIDENCE_DAYS = 90


# -------------------------
# Metrics
# -------------------------

@dataclass(frozen=True)
class AgeMetric:
    current: int
    required: int
    met: bool


@dataclass(frozen=True)
class GreenCardMetric:
    days_since_lpr: int
    days_required: int
    target_date: date
    early_filing_date: date
    met: bool


@dataclass(frozen=True)
class StateResidenceMetric:
    days: int
    required: int
    met: bool
    state: str
    eligible_date: date


@dataclass(frozen=True)
class EligibilityMetrics:
    age: AgeMetric
    green_card: GreenCardMetric
    state_residence: StateResidenceMetric
    absences: AbsenceAnalysis
    physical_presence: PhysicalPresence


@dataclass(frozen=True)
class EvaluationResult:
    eligible: bool
    blockers: Tuple[Issue, ...]
    warnings: Tuple[Issue, ...]
    metrics: Optional[EligibilityMetrics]
    earliest_filing_date: Optional[date]
    lower_risk_filing_date: Optional[date]


def _no_profile_result() -> EvaluationResult:
    return EvaluationResult(
        eligible=False,
        blockers=(Issue(kind="no_profile", severity="high", category="profile"),),
        warnings=(),
        metrics=None,
        earliest_filing_date=None,
        lower_risk_filing_date=None,
    )


def required_lpr_years(profile: Profile) -> int:
    return 3 if profile.eligibility_path == "spouse_3_year" else 5


# -------------------------
# Individual checks
# -------------------------

def _check_age(profile: Profile, as_of: date, blockers: List[Issue]) -> AgeMetric:
    age = years_between(profile.date_of_birth, as_of)
    if age < MINIMUM_AGE:
        blockers.append(
            Issue(
                kind="under_age",
                severity="high",
                category="age",
                params={"age": age, "required": MINIMUM_AGE},
            )
        )
    return AgeMetric(current=age, required=MINIMUM_AGE, met=age >= MINIMUM_AGE)


def _check_green_card(profile: Profile, as_of: date, blockers: List[Issue]) -> GreenCardMetric:
    years = required_lpr_years(profile)
    target_date = shift_date(profile.lpr_date, years=years)
    early_filing_date = shift_date(target_date, days=-EARLY_FILING_DAYS)

    met = as_of >= early_filing_date
    if not met:
        blockers.append(
            Issue(
                kind="lpr_time_short",
                severity="high",
                category="green_card",
                params={
                    "days_remaining": days_between(as_of, early_filing_date),
                    "eligible_on": early_filing_date,
                },
            )
        )

    return GreenCardMetric(
        days_since_lpr=days_between(profile.lpr_date, as_of),
        days_required=years * 365,
        target_date=target_date,
        early_filing_date=early_filing_date,
        met=met,
    )


def _check_state_residence(profile: Profile, as_of: date, blockers: List[Issue]) -> StateResidenceMetric:
    days = days_between(profile.state_residence_since, as_of)
    eligible_date = shift_date(profile.state_residence_since, days=STATE_RESIDENCE_DAYS)

    met = days >= STATE_RESIDENCE_DAYS
    if not met:
        blockers.append(
            Issue(
                kind="state_residence_short",
                severity="high",
                category="state_residence",
                params={
                    "days_remaining": STATE_RESIDENCE_DAYS - days,
                    "state": profile.state_of_residence,
                    "eligible_on": eligible_date,
                },
            )
        )

    return StateResidenceMetric(
        days=days,
        required=STATE_RESIDENCE_DAYS,
        met=met,
        state=profile.state_of_residence,
        eligible_date=eligible_date,
    )


# -------------------------
# Public entry point
# -------------------------

def evaluate(
    profile: Optional[Profile],
    trips: Sequence[Trip],
    as_of: Optional[date] = None,
) -> EvaluationResult:
    """
    Decide whether the applicant can file as of `as_of` (default: today).

    Every check runs and contributes; none short-circuits another:
      1. age >= 18
      2. time as LPR, with the 90-day early filing window
      3. 90 days in the current state
      4. continuous residence (absences.py)
      5. physical presence (presence.py)

    Filing dates fold the base constraints (early filing date, state date)
    with the continuity recovery dates via later_of. lower_risk_filing_date
    stays None unless an absence produced a lower-risk recovery date.

    Pure: the only clock read is the as_of default, resolved once here.
    """
    if profile is None:
        return _no_profile_result()

    as_of = as_of or date.today()

    blockers: List[Issue] = []
    warnings: List[Issue] = []

    age = _check_age(profile, as_of, blockers)
    green_card = _check_green_card(profile, as_of, blockers)
    state_residence = _check_state_residence(profile, as_of, blockers)

    absences = analyze_absences(
        trips,
        lpr_date=profile.lpr_date,
        as_of=as_of,
        eligibility_path=profile.eligibility_path,
    )
    if absences.continuity_broken:
        blockers.append(Issue(kind="continuity_broken", severity="high", category="absences"))
    warnings.extend(absences.warnings)

    window_years, required_days = presence_requirement(profile.eligibility_path)
    presence = calculate_physical_presence(
        trips,
        as_of=as_of,
        window_years=window_years,
        required_days=required_days,
    )
    if not presence.met:
        blockers.append(
            Issue(
                kind="physical_presence_short",
                severity="high",
                category="physical_presence",
                params={
                    "shortage_days": presence.shortage_days,
                    "required_days": presence.required_days,
                    "window_years": presence.window_years,
                },
            )
        )

    base = later_of(green_card.early_filing_date, state_residence.eligible_date)
    earliest_filing_date = later_of(base, absences.earliest_possible_after_continuity_issue)

    lower_risk_filing_date: Optional[date] = None
    if absences.lower_risk_after_continuity_issue is not None:
        lower_risk_filing_date = later_of(base, absences.lower_risk_after_continuity_issue)

    result = EvaluationResult(
        eligible=not blockers,
        blockers=tuple(blockers),
        warnings=tuple(warnings),
        metrics=EligibilityMetrics(
            age=age,
            green_card=green_card,
            state_residence=state_residence,
            absences=absences,
            physical_presence=presence,
        ),
        earliest_filing_date=earliest_filing_date,
        lower_risk_filing_date=lower_risk_filing_date,
    )

    logger.debug(
        "eligibility_evaluated",
        as_of=as_of.isoformat(),
        path=profile.eligibility_path,
        eligible=result.eligible,
        blockers=[b.kind for b in result.blockers],
        warnings=len(result.warnings),
    )
    return result
