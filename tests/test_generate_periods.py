import logging
from datetime import date

import pytest

from qc_compliance.domain.dates import InvalidDateError
from qc_compliance.domain.scheduling import generate_periods


def test_daily_skips_weekends():
    periods = generate_periods("daily", "2024-01-01", "2024-01-07")

    assert periods == ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05"]


def test_daily_starting_on_weekend_begins_monday():
    assert generate_periods("daily", "2024-01-06", "2024-01-08") == ["2024-01-08"]


def test_weekly_steps_seven_days_from_start():
    periods = generate_periods("weekly", "2024-01-01", "2024-01-22")

    assert periods == ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22"]


def test_weekly_keeps_weekend_slots():
    assert generate_periods("weekly", "2024-01-06", "2024-01-20") == ["2024-01-06", "2024-01-13", "2024-01-20"]


def test_monthly_one_entry_per_month():
    periods = generate_periods("monthly", "2024-01-15", "2024-03-01")

    assert periods == ["2024-01", "2024-02", "2024-03"]
    assert len(periods) == len(set(periods))


def test_monthly_crosses_year_boundary():
    periods = generate_periods("monthly", "2023-11-20", "2024-02-01")

    assert periods == ["2023-11", "2023-12", "2024-01", "2024-02"]


def test_quarterly_labels():
    periods = generate_periods("quarterly", "2024-02-10", "2024-11-01")

    assert periods == ["2024-Q1", "2024-Q2", "2024-Q3", "2024-Q4"]


def test_annual_labels():
    assert generate_periods("annual", "2022-06-01", "2024-01-01") == ["2022", "2023", "2024"]


def test_end_before_start_is_empty():
    assert generate_periods("daily", "2024-01-10", "2024-01-01") == []


def test_default_end_is_thirty_days_after_today():
    weekly = generate_periods("weekly", "2024-01-01", today="2024-01-01")
    daily = generate_periods("daily", "2024-01-01", today=date(2024, 1, 1))

    assert weekly == ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22", "2024-01-29"]
    assert len(daily) == 23
    assert daily[-1] == "2024-01-31"


def test_generation_is_deterministic():
    first = generate_periods("quarterly", "2020-01-01", "2024-12-31")
    second = generate_periods("quarterly", "2020-01-01", "2024-12-31")

    assert first == second


def test_accepts_iso_timestamps():
    assert generate_periods("weekly", "2024-01-01T08:00:00Z", "2024-01-08") == ["2024-01-01", "2024-01-08"]


def test_safety_cap_truncates_daily(caplog):
    with caplog.at_level(logging.WARNING):
        periods = generate_periods("daily", "2000-01-03", "2020-01-01")

    assert len(periods) == 1000
    assert periods[0] == "2000-01-03"
    assert "truncated" in caplog.text


def test_safety_cap_truncates_monthly():
    periods = generate_periods("monthly", "1900-01-01", "2099-12-31")

    assert len(periods) == 1000
    assert periods[-1] == "1983-04"


def test_unknown_frequency_yields_nothing():
    assert generate_periods("fortnightly", "2024-01-01", "2024-02-01") == []


@pytest.mark.parametrize(
    "bad",
    ["not-a-date", "2024-02-30", "2024/01/01", "", "2024-01-01Tgarbage", "2024-01-15 not-a-time", "2024-01-01T25"],
)
def test_malformed_start_date_raises(bad):
    with pytest.raises(InvalidDateError):
        generate_periods("daily", bad, "2024-03-01")


def test_malformed_end_date_raises():
    with pytest.raises(InvalidDateError):
        generate_periods("monthly", "2024-01-01", "2024-13-01")
