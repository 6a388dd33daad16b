from datetime import date, datetime

import pytest

from qc_compliance.domain.dates import InvalidDateError
from qc_compliance.domain.models import Frequency
from qc_compliance.domain.periods import (
    DatePeriod,
    QuarterPeriod,
    YearMonthPeriod,
    YearPeriod,
    match_period_key,
    period_of,
)
from qc_compliance.domain.scheduling import generate_periods, normalize_completion


def test_quarterly_label_from_date():
    assert normalize_completion("quarterly", "2024-05-10") == "2024-Q2"


@pytest.mark.parametrize(
    "frequency, value, expected",
    [
        ("daily", "2024-05-10", "2024-05-10"),
        ("weekly", "2024-05-10", "2024-05-10"),
        ("monthly", "2024-05-10", "2024-05"),
        ("quarterly", "2024-12-31", "2024-Q4"),
        ("annual", "2024-05-10", "2024"),
        ("monthly", "2024-05-10T23:59:00", "2024-05"),
        ("monthly", date(2024, 1, 31), "2024-01"),
        ("daily", datetime(2024, 3, 4, 17, 30), "2024-03-04"),
    ],
)
def test_normalize_completion(frequency, value, expected):
    assert normalize_completion(frequency, value) == expected


@pytest.mark.parametrize("frequency", list(Frequency))
def test_normalization_is_idempotent(frequency):
    key = normalize_completion(frequency, "2024-08-19")
    period = match_period_key(frequency, key) or period_of(frequency, date.fromisoformat(key))

    assert normalize_completion(frequency, key) == key
    assert normalize_completion(frequency, period.start) == key


def test_normalize_unknown_frequency_is_none():
    assert normalize_completion("hourly", "2024-05-10") is None


@pytest.mark.parametrize("frequency, key", [("quarterly", "2024-Q5"), ("monthly", "2024-13"), ("monthly", "2024-00")])
def test_impossible_period_key_raises(frequency, key):
    with pytest.raises(InvalidDateError):
        normalize_completion(frequency, key)


def test_malformed_completion_date_raises():
    with pytest.raises(InvalidDateError):
        normalize_completion("daily", "yesterday")


def test_calendar_period_boundaries():
    assert YearMonthPeriod(2024, 2).end == date(2024, 2, 29)
    assert YearMonthPeriod(2023, 2).end == date(2023, 2, 28)
    assert QuarterPeriod(2024, 1).start == date(2024, 1, 1)
    assert QuarterPeriod(2024, 1).end == date(2024, 3, 31)
    assert QuarterPeriod(2024, 3).end == date(2024, 9, 30)
    assert YearPeriod(2024).end == date(2024, 12, 31)
    assert DatePeriod(date(2024, 1, 5)).end == date(2024, 1, 5)


def test_calendar_periods_roll_over_year_end():
    assert YearMonthPeriod(2023, 12).next() == YearMonthPeriod(2024, 1)
    assert QuarterPeriod(2023, 4).next() == QuarterPeriod(2024, 1)
    assert YearPeriod(2023).next() == YearPeriod(2024)


def test_contains():
    assert QuarterPeriod(2024, 2).contains(date(2024, 6, 30))
    assert not QuarterPeriod(2024, 2).contains(date(2024, 7, 1))
    assert DatePeriod(date(2024, 1, 8)).contains(date(2024, 1, 8))
    assert not DatePeriod(date(2024, 1, 8)).contains(date(2024, 1, 9))


def test_keys_are_zero_padded():
    assert YearMonthPeriod(987, 3).key == "0987-03"
    assert QuarterPeriod(2024, 2).key == "2024-Q2"


@pytest.mark.parametrize("frequency", ["daily", "weekly", "monthly", "quarterly", "annual"])
def test_keys_sort_chronologically(frequency):
    periods = generate_periods(frequency, "2019-11-25", "2024-02-05")

    assert periods == sorted(periods)


def test_match_period_key_ignores_other_shapes():
    assert match_period_key(Frequency.MONTHLY, "2024-05-10") is None
    assert match_period_key(Frequency.DAILY, "2024-05") is None
    assert match_period_key(Frequency.ANNUAL, "2024") == YearPeriod(2024)
