# naturalization/render.py

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, Optional

from .issues import Issue


def format_date(d: Optional[date]) -> str:
    return d.isoformat() if d else "unknown"


def _destination(p: Dict[str, Any]) -> str:
    return p.get("destination") or "unknown"


# kind -> message
_MESSAGES: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "no_profile": lambda p: "No profile configured.",
    "under_age": lambda p: f"Must be {p['required']} years old (currently {p['age']}).",
    "lpr_time_short": lambda p: (
        f"Need {p['days_remaining']} more day(s) as a permanent resident "
        f"(eligible on {format_date(p['eligible_on'])})."
    ),
    "state_residence_short": lambda p: (
        f"Need {p['days_remaining']} more day(s) in {p['state']} "
        f"(eligible on {format_date(p['eligible_on'])})."
    ),
    "continuity_broken": lambda p: "Continuous residence broken by an absence of 1 year or more.",
    "physical_presence_short": lambda p: (
        f"Need {p['shortage_days']} more day(s) of physical presence in the U.S. "
        f"(requires {p['required_days']} days in the last {p['window_years']} years)."
    ),
    "trip_breaks_continuity": lambda p: (
        f"Trip to {_destination(p)} ({format_date(p['start_date'])}) was {p['days']} days "
        "(1 year or more) and breaks continuous residence."
    ),
    "trip_continuity_risk": lambda p: (
        f"Trip to {_destination(p)} ({format_date(p['start_date'])}) was {p['days']} days "
        "(more than 6 months) and may affect continuous residence."
    ),
    "missing_field": lambda p: f"Missing required field: {p['field']}.",
    "invalid_date": lambda p: f"Invalid or unrecognized date for {p['field']}: {p['raw']!r}.",
    "imprecise_date": lambda p: (
        f"{p['field']} must be an exact day; {p['raw']!r} only gives the {p['precision']}."
    ),
    "end_before_start": lambda p: (
        f"Trip ends ({format_date(p['end_date'])}) before it starts ({format_date(p['start_date'])})."
    ),
    "invalid_value": lambda p: f"Unrecognized value for {p['field']}: {p['raw']!r}.",
    "csv_missing_columns": lambda p: "CSV header must include start and end date columns.",
    "csv_short_row": lambda p: f"CSV line {p['line']} has {p['columns']} column(s); start and end dates are required.",
}

# kind -> suggested question
_QUESTIONS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "trip_breaks_continuity": lambda p: (
        "Please confirm the trip dates. An absence of a year or more generally requires waiting "
        "until it ages out of the lookback period."
    ),
    "trip_continuity_risk": lambda p: (
        "Please gather evidence of ties kept in the U.S. during this trip (job, home, taxes)."
    ),
    "missing_field": lambda p: f"Please provide {p['field']}.",
    "invalid_date": lambda p: f"Please provide {p['field']} as YYYY-MM-DD.",
    "imprecise_date": lambda p: f"Please provide the exact day for {p['field']} (YYYY-MM-DD).",
    "end_before_start": lambda p: "Please check that the start and end dates are not swapped.",
    "invalid_value": lambda p: f"Please provide a valid value for {p['field']}.",
    "csv_missing_columns": lambda p: "Use a header such as: startDate,endDate,destination,countAsAbsence",
}


def render_message(issue: Issue) -> str:
    builder = _MESSAGES.get(issue.kind)
    if builder is None:
        return issue.kind
    return builder(issue.params)


def render_question(issue: Issue) -> Optional[str]:
    builder = _QUESTIONS.get(issue.kind)
    return builder(issue.params) if builder else None
