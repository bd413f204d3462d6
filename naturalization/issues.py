# naturalization/issues.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, List, Literal, Mapping, Optional


Severity = Literal["high", "medium", "low"]

IssueKind = Literal[
    # eligibility blockers
    "no_profile",
    "under_age",
    "lpr_time_short",
    "state_residence_short",
    "continuity_broken",
    "physical_presence_short",
    # eligibility warnings
    "trip_breaks_continuity",
    "trip_continuity_risk",
    # import problems
    "missing_field",
    "invalid_date",
    "imprecise_date",
    "end_before_start",
    "invalid_value",
    "csv_missing_columns",
    "csv_short_row",
]


@dataclass(frozen=True)
class Issue:
    """
    A structured finding. Wording is produced by render.py at the
    presentation boundary; code and tests look at kind + params.

    params is stored as a read-only mapping.
    """
    kind: IssueKind
    severity: Severity
    category: str
    params: Mapping[str, Any] = field(default_factory=dict)
    ref_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self):
        return hash((self.kind, self.severity, self.category, tuple(sorted(self.params.items())), self.ref_id))


def tag_issues(issues: List[Issue], ref_id: str) -> List[Issue]:
    """
    Return a new list of Issues with ref_id populated when missing.
    (Issue is frozen/immutable, so we construct new Issue objects.)
    """
    return [i if i.ref_id is not None else replace(i, ref_id=ref_id) for i in issues]


def kinds(issues) -> List[IssueKind]:
    return [i.kind for i in issues]
