# naturalization/data_pack.py

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from .absences import AbsenceAnalysis, TripAbsence, classify_absence
from .eligibility import EligibilityMetrics, EvaluationResult
from .issues import Issue, Severity
from .models import Profile, Trip
from .render import render_message, render_question


DISCLAIMER = "For personal use only. This document does not constitute legal advice."


def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _issue_to_dict(issue: Issue) -> Dict[str, Any]:
    return {
        "kind": issue.kind,
        "severity": issue.severity,
        "category": issue.category,
        "ref_id": issue.ref_id,
        "message": render_message(issue),
        "suggested_question": render_question(issue),
    }


def _group_issues(issues: Sequence[Issue]) -> Dict[Severity, List[Issue]]:
    grouped: Dict[Severity, List[Issue]] = {"high": [], "medium": [], "low": []}
    for i in issues:
        grouped[i.severity].append(i)
    return grouped


def _group_issues_by_ref(issues: Sequence[Issue]) -> Dict[str, List[Issue]]:
    by_ref: Dict[str, List[Issue]] = {}
    for i in issues:
        key = i.ref_id or "unlinked"
        by_ref.setdefault(key, []).append(i)
    return by_ref


def _format_profile(p: Optional[Profile]) -> Optional[Dict[str, Any]]:
    if p is None:
        return None
    return {
        "date_of_birth": _iso(p.date_of_birth),
        "lpr_date": _iso(p.lpr_date),
        "eligibility_path": p.eligibility_path,
        "state_of_residence": p.state_of_residence,
        "state_residence_since": _iso(p.state_residence_since),
    }


def _format_trip(t: Trip) -> Dict[str, Any]:
    return {
        "start_date": _iso(t.start_date),
        "end_date": _iso(t.end_date),
        "destination": t.destination,
        "counts_as_absence": t.counts_as_absence,
        "days": t.days,
        "tier": classify_absence(t.days) if t.counts_as_absence else "excluded",
    }


def _format_trip_absence(ta: TripAbsence) -> Dict[str, Any]:
    return {
        "start_date": _iso(ta.trip.start_date),
        "end_date": _iso(ta.trip.end_date),
        "destination": ta.trip.destination,
        "days": ta.days,
        "tier": ta.tier,
    }


def _format_absences(a: AbsenceAnalysis) -> Dict[str, Any]:
    return {
        "total_trips_in_window": a.total_trips_in_window,
        "total_days_absent": a.total_days_absent,
        "continuity_broken": a.continuity_broken,
        "long_absences": [_format_trip_absence(ta) for ta in a.long_absences],
        "earliest_possible_after_continuity_issue": _iso(a.earliest_possible_after_continuity_issue),
        "lower_risk_after_continuity_issue": _iso(a.lower_risk_after_continuity_issue),
    }


def _format_metrics(m: Optional[EligibilityMetrics]) -> Optional[Dict[str, Any]]:
    if m is None:
        return None

    green_card = asdict(m.green_card)
    green_card["target_date"] = _iso(m.green_card.target_date)
    green_card["early_filing_date"] = _iso(m.green_card.early_filing_date)

    state_residence = asdict(m.state_residence)
    state_residence["eligible_date"] = _iso(m.state_residence.eligible_date)

    presence = asdict(m.physical_presence)
    presence["percent_of_requirement"] = round(m.physical_presence.percent_of_requirement, 1)

    return {
        "age": asdict(m.age),
        "green_card": green_card,
        "state_residence": state_residence,
        "absences": _format_absences(m.absences),
        "physical_presence": presence,
    }


def build_data_pack(
    profile: Optional[Profile],
    trips: Sequence[Trip],
    result: EvaluationResult,
    *,
    export_date: date,
    as_of: Optional[date] = None,
    import_issues: Sequence[Issue] = (),
) -> Dict[str, Any]:
    """
    Build a machine-friendly export of everything the user would print or
    hand to an attorney:
      - profile + full trip list (newest first, with day counts and tiers)
      - eligibility verdict, rendered blockers/warnings, metrics
      - earliest and lower-risk filing dates
      - import issues grouped by severity and by ref_id

    No new evaluation is performed here; `result` is rendered as given.
    """
    grouped = _group_issues(import_issues)

    return {
        "meta": {
            "export_date": _iso(export_date),
            "as_of": _iso(as_of),
            "disclaimer": DISCLAIMER,
        },
        "profile": _format_profile(profile),
        "trips": [_format_trip(t) for t in sorted(trips, key=lambda t: t.start_date, reverse=True)],
        "eligibility": {
            "eligible": result.eligible,
            "blockers": [_issue_to_dict(i) for i in result.blockers],
            "warnings": [_issue_to_dict(i) for i in result.warnings],
            "earliest_filing_date": _iso(result.earliest_filing_date),
            "lower_risk_filing_date": _iso(result.lower_risk_filing_date),
            "metrics": _format_metrics(result.metrics),
        },
        "import_issues": {
            "counts": {
                "high": len(grouped["high"]),
                "medium": len(grouped["medium"]),
                "low": len(grouped["low"]),
                "total": len(import_issues),
            },
            "by_ref_id": {
                ref_id: [_issue_to_dict(i) for i in issues_for_ref]
                for ref_id, issues_for_ref in _group_issues_by_ref(import_issues).items()
            },
        },
    }
