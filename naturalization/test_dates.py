# naturalization/test_dates.py

from datetime import date

from naturalization.dates import (
    days_between,
    intervals_overlap,
    later_of,
    months_between,
    shift_date,
    years_between,
)


def test_days_between_is_signed():
    assert days_between(date(2023, 1, 1), date(2023, 7, 5)) == 185
    assert days_between(date(2023, 7, 5), date(2023, 1, 1)) == -185
    assert days_between(date(2023, 1, 1), date(2023, 1, 1)) == 0


def test_months_between_truncates_partial_months():
    assert months_between(date(2024, 1, 15), date(2024, 3, 14)) == 1
    assert months_between(date(2024, 1, 15), date(2024, 3, 15)) == 2


def test_years_between_uses_completed_years():
    assert years_between(date(2000, 1, 1), date(2025, 6, 1)) == 25
    # one day before the 18th birthday is still 17
    assert years_between(date(2000, 6, 2), date(2018, 6, 1)) == 17
    assert years_between(date(2000, 6, 1), date(2018, 6, 1)) == 18


def test_shift_date_clamps_leap_day():
    assert shift_date(date(2024, 2, 29), years=1) == date(2025, 2, 28)
    assert shift_date(date(2020, 3, 1), days=-1) == date(2020, 2, 29)
    assert shift_date(date(2024, 1, 31), months=1) == date(2024, 2, 29)


def test_shift_date_applies_days_after_years():
    assert shift_date(date(2024, 1, 2), years=4, days=1) == date(2028, 1, 3)


def test_intervals_overlap_is_inclusive():
    assert intervals_overlap(date(2023, 1, 1), date(2023, 1, 10), date(2023, 1, 10), date(2023, 2, 1))
    assert not intervals_overlap(date(2023, 1, 1), date(2023, 1, 9), date(2023, 1, 10), date(2023, 2, 1))
    # containment
    assert intervals_overlap(date(2022, 1, 1), date(2024, 1, 1), date(2023, 1, 1), date(2023, 2, 1))


def test_later_of_handles_missing_values():
    a = date(2024, 1, 1)
    b = date(2025, 1, 1)
    assert later_of(a, b) == b
    assert later_of(b, a) == b
    assert later_of(None, a) == a
    assert later_of(a, None) == a
    assert later_of(None, None) is None
