import pytest

from qc_compliance.domain.dates import InvalidDateError
from qc_compliance.domain.models import MissedPeriod
from qc_compliance.domain.scheduling import generate_periods, normalize_completion, scan_missed
from qc_compliance.domain.services import classify_priority


def as_pairs(missed):
    return [(item.period, item.days_overdue) for item in missed]


def test_daily_scenario_without_completions():
    missed = scan_missed("daily", "2024-01-01", [], today="2024-01-10")

    assert as_pairs(missed) == [
        ("2024-01-01", 9),
        ("2024-01-02", 8),
        ("2024-01-03", 7),
        ("2024-01-04", 6),
        ("2024-01-05", 5),
        ("2024-01-08", 2),
        ("2024-01-09", 1),
    ]
    assert classify_priority(missed[0].days_overdue, "daily").value == "critical"
    assert classify_priority(missed[-1].days_overdue, "daily").value == "medium"


def test_completed_days_are_not_missed():
    missed = scan_missed("daily", "2024-01-01", ["2024-01-03", "2024-01-08T14:00:00"], today="2024-01-10")

    assert [item.period for item in missed] == ["2024-01-01", "2024-01-02", "2024-01-04", "2024-01-05", "2024-01-09"]


def test_monthly_counts_from_month_end():
    missed = scan_missed("monthly", "2024-01-01", ["2024-02-12"], today="2024-04-10")

    assert missed == [MissedPeriod("2024-01", 70), MissedPeriod("2024-03", 10)]


def test_period_closing_today_is_not_missed():
    missed = scan_missed("monthly", "2024-02-01", [], today="2024-03-31")

    assert missed == [MissedPeriod("2024-02", 31)]


def test_period_closed_yesterday_is_one_day_late():
    missed = scan_missed("monthly", "2024-03-01", [], today="2024-04-01")

    assert missed == [MissedPeriod("2024-03", 1)]


def test_quarterly_counts_from_quarter_end():
    missed = scan_missed("quarterly", "2023-01-01", [], today="2024-02-15")

    assert as_pairs(missed) == [("2023-Q1", 321), ("2023-Q2", 230), ("2023-Q3", 138), ("2023-Q4", 46)]


def test_annual_counts_from_year_end():
    missed = scan_missed("annual", "2021-03-01", ["2022-07-04"], today="2024-01-15")

    assert as_pairs(missed) == [("2021", 745), ("2023", 15)]


def test_weekly_requires_the_slot_date():
    on_time = scan_missed("weekly", "2024-01-01", ["2024-01-08"], today="2024-01-22")
    late = scan_missed("weekly", "2024-01-01", ["2024-01-09"], today="2024-01-22")

    assert as_pairs(on_time) == [("2024-01-01", 21), ("2024-01-15", 7)]
    assert [item.period for item in late] == ["2024-01-01", "2024-01-08", "2024-01-15"]


def test_end_date_stops_the_scan():
    missed = scan_missed("daily", "2024-01-01", [], today="2024-01-10", end_date="2024-01-03")

    assert as_pairs(missed) == [("2024-01-01", 9), ("2024-01-02", 8), ("2024-01-03", 7)]


def test_canonical_keys_count_as_completions():
    missed = scan_missed("monthly", "2024-01-01", ["2024-01", "2024-02"], today="2024-04-10")

    assert missed == [MissedPeriod("2024-03", 10)]


def test_rule_in_the_future_has_nothing_missed():
    assert scan_missed("daily", "2024-02-01", [], today="2024-01-10") == []


def test_unknown_frequency_has_nothing_missed():
    assert scan_missed("semiannual", "2020-01-01", [], today="2024-01-10") == []


def test_malformed_completion_raises():
    with pytest.raises(InvalidDateError):
        scan_missed("daily", "2024-01-01", ["2024-01-32"], today="2024-01-10")


@pytest.mark.parametrize(
    "frequency, start, completions",
    [
        ("daily", "2023-10-02", ["2023-10-03", "2023-12-20", "2024-01-02"]),
        ("weekly", "2023-06-05", ["2023-06-12", "2023-09-04", "2023-09-05"]),
        ("monthly", "2022-03-17", ["2022-04-01", "2023-07-31"]),
        ("quarterly", "2021-05-05", ["2021-06-30", "2022-10-01"]),
        ("annual", "2018-12-31", ["2019-01-01", "2022-06-15"]),
    ],
)
def test_missed_periods_are_uncompleted_generated_periods(frequency, start, completions):
    today = "2024-01-10"
    missed = scan_missed(frequency, start, completions, today=today)
    generated = set(generate_periods(frequency, start, today))
    completed = {normalize_completion(frequency, value) for value in completions}

    assert missed
    for item in missed:
        assert item.period in generated
        assert item.period not in completed
        assert item.days_overdue > 0
    assert [item.period for item in missed] == sorted(item.period for item in missed)
