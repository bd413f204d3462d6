# naturalization/pipeline.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from .eligibility import EvaluationResult, evaluate
from .issues import Issue
from .models import Profile, Trip
from .trip_import import RawSnapshot, parse_profile, parse_trip_list


@dataclass(frozen=True)
class BuildResult:
    profile: Optional[Profile]
    trips: List[Trip]
    issues: List[Issue]  # import problems, not eligibility blockers
    snapshots: List[RawSnapshot]
    evaluation: EvaluationResult
    as_of: date


def load_from_json(
    raw: Any,
    *,
    as_of: Optional[date] = None,
    assume_us_mdy: bool = False,
) -> BuildResult:
    """
    End-to-end pipeline:
      - Parse raw {"profile": {...}, "trips": [...]} into models
      - Collect import Issues + RawSnapshots
      - Evaluate eligibility on whatever parsed cleanly

    A missing or rejected profile still produces a result: the evaluation is
    the fixed "no profile" verdict and the import issues say why.
    """
    as_of = as_of or date.today()
    issues: List[Issue] = []
    snapshots: List[RawSnapshot] = []

    if not isinstance(raw, dict):
        issues.append(
            Issue(
                kind="invalid_value",
                severity="high",
                category="document",
                params={"field": "export document", "raw": type(raw).__name__},
                ref_id="document",
            )
        )
        raw = {}

    profile: Optional[Profile] = None
    raw_profile = raw.get("profile")
    if isinstance(raw_profile, dict):
        profile, profile_issues, snap = parse_profile(raw_profile, assume_us_mdy=assume_us_mdy)
        issues.extend(profile_issues)
        snapshots.append(snap)
    elif raw_profile is not None:
        issues.append(
            Issue(
                kind="invalid_value",
                severity="high",
                category="profile",
                params={"field": "profile", "raw": type(raw_profile).__name__},
                ref_id="profile",
            )
        )

    raw_trips = raw.get("trips") or []
    if not isinstance(raw_trips, list):
        issues.append(
            Issue(
                kind="invalid_value",
                severity="high",
                category="trips",
                params={"field": "trip list", "raw": type(raw_trips).__name__},
                ref_id="trips",
            )
        )
        raw_trips = []
    trips, trip_issues, trip_snaps = parse_trip_list(raw_trips, assume_us_mdy=assume_us_mdy)
    issues.extend(trip_issues)
    snapshots.extend(trip_snaps)

    return BuildResult(
        profile=profile,
        trips=trips,
        issues=issues,
        snapshots=snapshots,
        evaluation=evaluate(profile, trips, as_of=as_of),
        as_of=as_of,
    )
