# naturalization/models.py

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .dates import days_between


# ======================================================
# Controlled sets
# ======================================================

# general: 5 years as LPR; spouse_3_year: 3 years married to a U.S. citizen
EligibilityPath = Literal["general", "spouse_3_year"]


# ======================================================
# Residency profile
# ======================================================

class Profile(BaseModel):
    """
    The applicant's residency anchors.
    Immutable per evaluation; invariants are checked here, at the boundary,
    so the eligibility engine never has to re-validate.
    """
    model_config = ConfigDict(frozen=True)

    date_of_birth: date
    lpr_date: date
    eligibility_path: EligibilityPath = "general"

    # e.g. "CA"; displayed, never interpreted
    state_of_residence: str
    state_residence_since: date

    @model_validator(mode="after")
    def _check_order(self) -> "Profile":
        if self.lpr_date < self.date_of_birth:
            raise ValueError("lpr_date cannot be before date_of_birth.")
        if self.state_residence_since < self.lpr_date:
            raise ValueError("state_residence_since cannot be before lpr_date.")
        return self


# ======================================================
# Travel history
# ======================================================

class Trip(BaseModel):
    """
    One trip outside the U.S.

    start_date: day you left
    end_date:   day you came back
    counts_as_absence=False keeps the trip on record but out of all
    continuity and physical-presence math.
    """
    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    destination: Optional[str] = None
    counts_as_absence: bool = True

    @model_validator(mode="after")
    def _check_range(self) -> "Trip":
        if self.end_date < self.start_date:
            raise ValueError("Trip end_date cannot be before start_date.")
        return self

    @property
    def days(self) -> int:
        """Days abroad, counted as end_date - start_date."""
        return days_between(self.start_date, self.end_date)
