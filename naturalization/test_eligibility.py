# naturalization/test_eligibility.py

import dataclasses
from datetime import date

import pytest

from naturalization.eligibility import evaluate
from naturalization.issues import kinds
from naturalization.models import Profile, Trip


def make_profile(
    dob=date(2000, 1, 1),
    lpr=date(2020, 1, 1),
    path="general",
    state="CA",
    state_since=date(2020, 6, 1),
) -> Profile:
    return Profile(
        date_of_birth=dob,
        lpr_date=lpr,
        eligibility_path=path,
        state_of_residence=state,
        state_residence_since=state_since,
    )


AS_OF = date(2025, 6, 1)


def test_end_to_end_no_trips_is_eligible():
    res = evaluate(make_profile(), [], as_of=AS_OF)

    assert res.eligible is True
    assert res.blockers == ()
    assert res.warnings == ()
    assert res.metrics.age.current == 25
    assert res.metrics.green_card.early_filing_date == date(2024, 10, 3)
    assert res.metrics.state_residence.eligible_date == date(2020, 8, 30)
    assert res.earliest_filing_date == date(2024, 10, 3)
    assert res.lower_risk_filing_date is None


def test_repeated_calls_are_identical():
    profile = make_profile()
    trips = [Trip(start_date=date(2023, 1, 1), end_date=date(2023, 7, 5))]
    assert evaluate(profile, trips, as_of=AS_OF) == evaluate(profile, trips, as_of=AS_OF)


def test_missing_profile_is_a_fixed_result():
    res = evaluate(None, [], as_of=AS_OF)

    assert res.eligible is False
    assert kinds(res.blockers) == ["no_profile"]
    assert res.metrics is None
    assert res.earliest_filing_date is None
    assert res.lower_risk_filing_date is None


def test_under_age_blocks():
    profile = make_profile(dob=date(2008, 1, 1), lpr=date(2010, 1, 1), state_since=date(2010, 1, 1))
    res = evaluate(profile, [], as_of=date(2025, 12, 31))

    assert kinds(res.blockers) == ["under_age"]
    assert res.blockers[0].params["age"] == 17
    assert res.metrics.age.met is False


def test_age_never_decreases():
    profile = make_profile()
    ages = [evaluate(profile, [], as_of=d).metrics.age.current for d in (date(2024, 12, 31), date(2025, 1, 1), date(2025, 6, 1))]
    assert ages == sorted(ages)
    assert ages == [24, 25, 25]


def test_tenure_early_filing_boundary():
    profile = make_profile()

    on_boundary = evaluate(profile, [], as_of=date(2024, 10, 3))
    assert on_boundary.metrics.green_card.met is True
    assert "lpr_time_short" not in kinds(on_boundary.blockers)

    day_before = evaluate(profile, [], as_of=date(2024, 10, 2))
    assert day_before.metrics.green_card.met is False
    assert kinds(day_before.blockers) == ["lpr_time_short"]
    assert day_before.blockers[0].params == {"days_remaining": 1, "eligible_on": date(2024, 10, 3)}


def test_state_residence_boundary():
    met = evaluate(make_profile(state_since=date(2025, 3, 3)), [], as_of=AS_OF)
    assert met.metrics.state_residence.days == 90
    assert met.metrics.state_residence.met is True
    assert met.eligible is True

    short = evaluate(make_profile(state_since=date(2025, 3, 4)), [], as_of=AS_OF)
    assert short.metrics.state_residence.days == 89
    assert kinds(short.blockers) == ["state_residence_short"]
    assert short.blockers[0].params["days_remaining"] == 1
    assert short.blockers[0].params["state"] == "CA"


def test_six_month_trip_warns_without_blocking():
    trips = [Trip(start_date=date(2023, 1, 1), end_date=date(2023, 7, 5))]
    res = evaluate(make_profile(), trips, as_of=AS_OF)

    assert res.blockers == ()
    assert kinds(res.warnings) == ["trip_continuity_risk"]
    assert res.eligible is True
    assert res.earliest_filing_date == date(2027, 7, 6)
    assert res.lower_risk_filing_date == date(2028, 1, 8)


def test_year_long_trip_blocks_and_sets_recovery_dates():
    trips = [Trip(start_date=date(2023, 1, 1), end_date=date(2024, 1, 2))]
    res = evaluate(make_profile(), trips, as_of=AS_OF)

    assert res.eligible is False
    assert kinds(res.blockers) == ["continuity_broken"]
    assert res.metrics.absences.continuity_broken is True
    assert res.metrics.absences.earliest_possible_after_continuity_issue == date(2028, 1, 3)
    assert res.metrics.absences.lower_risk_after_continuity_issue == date(2028, 7, 7)
    assert res.earliest_filing_date == date(2028, 1, 3)
    assert res.lower_risk_filing_date == date(2028, 7, 7)


def test_checks_do_not_short_circuit():
    trips = [Trip(start_date=date(2021, 1, 1), end_date=date(2023, 9, 1))]
    res = evaluate(make_profile(state_since=date(2025, 4, 1)), trips, as_of=AS_OF)

    assert kinds(res.blockers) == ["state_residence_short", "continuity_broken", "physical_presence_short"]
    assert res.blockers[2].params["shortage_days"] == 60


def test_excluded_trip_changes_nothing():
    trips = [Trip(start_date=date(2021, 1, 1), end_date=date(2023, 9, 1), counts_as_absence=False)]
    assert evaluate(make_profile(), trips, as_of=AS_OF) == evaluate(make_profile(), [], as_of=AS_OF)


def test_spouse_path_uses_three_year_rules():
    profile = make_profile(lpr=date(2022, 1, 1), path="spouse_3_year", state_since=date(2022, 1, 1))
    trips = [Trip(start_date=date(2023, 1, 1), end_date=date(2024, 1, 2))]
    res = evaluate(profile, trips, as_of=AS_OF)

    assert res.metrics.green_card.early_filing_date == date(2024, 10, 3)
    assert res.metrics.green_card.days_required == 3 * 365
    assert res.metrics.physical_presence.window_years == 3
    assert res.metrics.physical_presence.required_days == 548
    assert kinds(res.blockers) == ["continuity_broken"]
    # no recovery dates on this path
    assert res.earliest_filing_date == date(2024, 10, 3)
    assert res.lower_risk_filing_date is None


def test_earliest_filing_date_respects_base_constraints():
    scenarios = [
        (make_profile(), []),
        (make_profile(state_since=date(2025, 4, 1)), []),
        (make_profile(lpr=date(2021, 3, 1), state_since=date(2021, 3, 1)), []),
        (make_profile(), [Trip(start_date=date(2023, 1, 1), end_date=date(2023, 7, 5))]),
    ]
    for profile, trips in scenarios:
        res = evaluate(profile, trips, as_of=AS_OF)
        assert res.earliest_filing_date >= res.metrics.green_card.early_filing_date
        assert res.earliest_filing_date >= res.metrics.state_residence.eligible_date


def test_result_is_immutable_and_hashable():
    trips = [Trip(start_date=date(2023, 1, 1), end_date=date(2023, 7, 5), destination="France")]
    res = evaluate(make_profile(), trips, as_of=AS_OF)

    with pytest.raises(TypeError):
        res.warnings[0].params["days"] = 0
    assert res.warnings[0].params["days"] == 185

    with pytest.raises(dataclasses.FrozenInstanceError):
        res.warnings[0].params = {}

    assert hash(res) == hash(evaluate(make_profile(), trips, as_of=AS_OF))
