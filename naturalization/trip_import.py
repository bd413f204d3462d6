# naturalization/trip_import.py

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import ValidationError

from .issues import Issue, tag_issues
from .models import EligibilityPath, Profile, Trip
from .normalize import normalize_date


# ======================================================
# Raw snapshot (data pack safety net)
# ======================================================

@dataclass(frozen=True)
class RawSnapshot:
    """
    What the user actually supplied for one record, kept so rejected rows
    can still be reviewed.
    """
    id: str  # e.g. "trip_0", "csv_3", "profile"
    section: Literal["trip", "profile"]
    raw: Dict[str, Any]


# App exports use camelCase; snake_case is accepted too.
_TRIP_KEYS = {
    "start_date": ("startDate", "start_date", "start"),
    "end_date": ("endDate", "end_date", "end"),
    "destination": ("destination",),
    "counts_as_absence": ("countsAsAbsence", "countAsAbsence", "counts_as_absence"),
}

_PROFILE_KEYS = {
    "date_of_birth": ("dob", "dateOfBirth", "date_of_birth"),
    "lpr_date": ("lprDate", "lpr_date"),
    "eligibility_path": ("eligibilityPath", "eligibility_path"),
    "state_of_residence": ("state", "stateOfResidence", "state_of_residence"),
    "state_residence_since": ("stateResidenceDate", "stateResidenceSince", "state_residence_since"),
}

_PATH_ALIASES: Dict[str, EligibilityPath] = {
    "general": "general",
    "5-year": "general",
    "spouse_3_year": "spouse_3_year",
    "3-year-spouse": "spouse_3_year",
    "spouseOf3Year": "spouse_3_year",
}


def _pick(raw: Dict[str, Any], aliases: Tuple[str, ...]) -> Any:
    for key in aliases:
        if key in raw:
            return raw[key]
    return None


# ======================================================
# Field helpers
# ======================================================

def require_date(
    *,
    field_label: str,
    raw_value: Any,
    assume_us_mdy: bool = False,
    issues_category: str = "trips",
) -> Tuple[Optional[date], List[Issue]]:
    """
    Parse one required, exact (day precision) date. Never raises.
    date objects pass through untouched.
    """
    if isinstance(raw_value, date):
        return raw_value, []

    if raw_value is None or not str(raw_value).strip():
        return None, [
            Issue(kind="missing_field", severity="high", category=issues_category, params={"field": field_label})
        ]

    nd = normalize_date(str(raw_value), assume_us_mdy=assume_us_mdy)
    if nd.precision == "unknown" or nd.value is None:
        return None, [
            Issue(
                kind="invalid_date",
                severity="high",
                category=issues_category,
                params={"field": field_label, "raw": raw_value},
            )
        ]

    if nd.precision != "day":
        # Absence math needs exact days; a month or year is not enough.
        return None, [
            Issue(
                kind="imprecise_date",
                severity="high",
                category=issues_category,
                params={"field": field_label, "raw": raw_value, "precision": nd.precision},
            )
        ]

    return nd.value, []


def parse_counts_flag(raw_value: Any) -> bool:
    """Anything other than an explicit false counts."""
    if raw_value is None:
        return True
    if isinstance(raw_value, bool):
        return raw_value
    return str(raw_value).strip().lower() != "false"


# ======================================================
# Trip glue
# ======================================================

def parse_trip_entry(
    raw: Any,
    *,
    ref_id: str,
    assume_us_mdy: bool = False,
) -> Tuple[Optional[Trip], List[Issue], RawSnapshot]:
    """
    Build one Trip from a raw dict.
    Invalid entries return None plus issues and a snapshot; they are never
    silently omitted.
    """
    issues: List[Issue] = []
    if not isinstance(raw, dict):
        issues.append(
            Issue(kind="invalid_value", severity="high", category="trips", params={"field": "trip entry", "raw": raw})
        )
        return None, tag_issues(issues, ref_id), RawSnapshot(id=ref_id, section="trip", raw={"value": raw})

    snapshot = RawSnapshot(id=ref_id, section="trip", raw=dict(raw))

    start, iss = require_date(
        field_label="trip start date",
        raw_value=_pick(raw, _TRIP_KEYS["start_date"]),
        assume_us_mdy=assume_us_mdy,
    )
    issues.extend(iss)
    end, iss = require_date(
        field_label="trip end date",
        raw_value=_pick(raw, _TRIP_KEYS["end_date"]),
        assume_us_mdy=assume_us_mdy,
    )
    issues.extend(iss)

    if start is None or end is None:
        return None, tag_issues(issues, ref_id), snapshot

    if end < start:
        issues.append(
            Issue(
                kind="end_before_start",
                severity="high",
                category="trips",
                params={"start_date": start, "end_date": end},
            )
        )
        return None, tag_issues(issues, ref_id), snapshot

    destination = _pick(raw, _TRIP_KEYS["destination"])
    destination = str(destination).strip() if destination is not None else None

    trip = Trip(
        start_date=start,
        end_date=end,
        destination=destination or None,
        counts_as_absence=parse_counts_flag(_pick(raw, _TRIP_KEYS["counts_as_absence"])),
    )
    return trip, tag_issues(issues, ref_id), snapshot


def parse_trip_list(
    raw_list: List[Dict[str, Any]],
    *,
    assume_us_mdy: bool = False,
    id_prefix: str = "trip",
) -> Tuple[List[Trip], List[Issue], List[RawSnapshot]]:
    trips: List[Trip] = []
    issues: List[Issue] = []
    snapshots: List[RawSnapshot] = []

    for idx, raw in enumerate(raw_list):
        trip, trip_issues, snap = parse_trip_entry(raw, ref_id=f"{id_prefix}_{idx}", assume_us_mdy=assume_us_mdy)
        snapshots.append(snap)
        issues.extend(trip_issues)
        if trip is not None:
            trips.append(trip)

    return trips, issues, snapshots


def parse_trips_csv(
    text: str,
    *,
    assume_us_mdy: bool = False,
) -> Tuple[List[Trip], List[Issue], List[RawSnapshot]]:
    """
    Import trips from CSV text.

    The header must mention start and end; columns are positional:
      start, end, destination, countsAsAbsence
    e.g. "2023-01-15,2023-01-30,Mexico,true". Blank lines are skipped.
    Row ids are csv_<line number>.
    """
    rows = list(csv.reader(io.StringIO(text.strip())))
    if not rows:
        return [], [Issue(kind="csv_missing_columns", severity="high", category="trips")], []

    header = ",".join(rows[0]).lower()
    if "start" not in header or "end" not in header:
        return [], [Issue(kind="csv_missing_columns", severity="high", category="trips")], []

    trips: List[Trip] = []
    issues: List[Issue] = []
    snapshots: List[RawSnapshot] = []

    for line_no, row in enumerate(rows[1:], start=2):
        cells = [c.strip() for c in row]
        if not any(cells):
            continue

        ref_id = f"csv_{line_no}"
        if len(cells) < 2:
            snapshots.append(RawSnapshot(id=ref_id, section="trip", raw={"row": row}))
            issues.append(
                Issue(
                    kind="csv_short_row",
                    severity="high",
                    category="trips",
                    params={"line": line_no, "columns": len(cells)},
                    ref_id=ref_id,
                )
            )
            continue

        raw = {
            "startDate": cells[0],
            "endDate": cells[1],
            "destination": cells[2] if len(cells) > 2 else "",
            "countsAsAbsence": cells[3] if len(cells) > 3 else None,
        }
        trip, trip_issues, snap = parse_trip_entry(raw, ref_id=ref_id, assume_us_mdy=assume_us_mdy)
        snapshots.append(snap)
        issues.extend(trip_issues)
        if trip is not None:
            trips.append(trip)

    return trips, issues, snapshots


# ======================================================
# Profile glue
# ======================================================

def parse_profile(
    raw: Dict[str, Any],
    *,
    assume_us_mdy: bool = False,
) -> Tuple[Optional[Profile], List[Issue], RawSnapshot]:
    """
    Build the Profile from a raw dict (camelCase export keys or snake_case).
    Ordering violations (e.g. state residence before LPR date) come back
    as invalid_value issues instead of exceptions.
    """
    ref_id = "profile"
    issues: List[Issue] = []
    snapshot = RawSnapshot(id=ref_id, section="profile", raw=dict(raw))

    dates: Dict[str, Optional[date]] = {}
    for name, label in (
        ("date_of_birth", "date of birth"),
        ("lpr_date", "permanent resident date"),
        ("state_residence_since", "state residence start date"),
    ):
        value, iss = require_date(
            field_label=label,
            raw_value=_pick(raw, _PROFILE_KEYS[name]),
            assume_us_mdy=assume_us_mdy,
            issues_category="profile",
        )
        dates[name] = value
        issues.extend(iss)

    raw_path = _pick(raw, _PROFILE_KEYS["eligibility_path"])
    path: Optional[EligibilityPath] = "general"
    if raw_path is not None and str(raw_path).strip():
        path = _PATH_ALIASES.get(str(raw_path).strip())
        if path is None:
            issues.append(
                Issue(
                    kind="invalid_value",
                    severity="high",
                    category="profile",
                    params={"field": "eligibility path", "raw": raw_path},
                )
            )

    state = _pick(raw, _PROFILE_KEYS["state_of_residence"])
    if state is None or not str(state).strip():
        issues.append(Issue(kind="missing_field", severity="high", category="profile", params={"field": "state"}))
        state = None

    if issues:
        return None, tag_issues(issues, ref_id), snapshot

    try:
        profile = Profile(
            date_of_birth=dates["date_of_birth"],
            lpr_date=dates["lpr_date"],
            eligibility_path=path,
            state_of_residence=str(state).strip(),
            state_residence_since=dates["state_residence_since"],
        )
    except ValidationError as e:
        issues.append(
            Issue(
                kind="invalid_value",
                severity="high",
                category="profile",
                params={"field": "profile dates", "raw": "; ".join(err["msg"] for err in e.errors())},
            )
        )
        return None, tag_issues(issues, ref_id), snapshot

    return profile, issues, snapshot
