"""Recurrence expansion and reconciliation for QC obligations.

All functions are pure: they read their arguments and, at most once per
call, the wall clock (only when ``today`` is not supplied). Unknown
frequencies are treated as "nothing due" rather than as errors.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from qc_compliance.config import SETTINGS

from .dates import DateLike, parse_date, parse_optional_date, resolve_today
from .models import Frequency, MissedPeriod, StatusRecord
from .periods import DatePeriod, Period, match_period_key, period_of

logger = logging.getLogger(__name__)

SATURDAY = 5
ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)


def is_weekday(day: date) -> bool:
    return day.weekday() < SATURDAY


def next_weekday(day: date) -> date:
    """Return ``day`` itself when it is Monday-Friday, else the following Monday."""
    while not is_weekday(day):
        day += ONE_DAY
    return day


def build_periods(frequency: Frequency, start: date, end: date, limit: int | None = None) -> list[Period]:
    """Expand a recurrence rule into typed periods, ``start``..``end`` inclusive.

    Daily rules skip Saturdays and Sundays; weekly rules step seven days from
    ``start``; calendar rules emit every month/quarter/year touched by the
    range exactly once. Generation stops after ``limit`` periods.
    """
    limit = SETTINGS.max_periods if limit is None else limit
    periods: list[Period] = []
    if end < start:
        return periods

    truncated = False
    if frequency.uses_dates:
        step = ONE_DAY if frequency is Frequency.DAILY else ONE_WEEK
        day = start
        while True:
            if frequency is Frequency.WEEKLY or is_weekday(day):
                if len(periods) >= limit:
                    truncated = True
                    break
                periods.append(DatePeriod(day))
            if end - day < step:
                break
            day += step
    else:
        period = period_of(frequency, start)
        last = period_of(frequency, end)
        while True:
            if len(periods) >= limit:
                truncated = True
                break
            periods.append(period)
            if period == last:
                break
            period = period.next()

    if truncated:
        logger.warning(
            "Period generation for %s from %s to %s truncated at %d periods",
            frequency.value,
            start.isoformat(),
            end.isoformat(),
            limit,
        )
    return periods


def generate_periods(
    frequency: Frequency | str,
    start_date: DateLike,
    end_date: DateLike | None = None,
    *,
    today: DateLike | None = None,
) -> list[str]:
    """Return the canonical period keys a recurrence rule owes.

    ``end_date`` defaults to today plus the configured horizon (30 days).
    """
    member = Frequency.coerce(frequency)
    if member is None:
        logger.debug("No periods for unknown frequency %r", frequency)
        return []
    start = parse_date(start_date)
    end = parse_optional_date(end_date)
    if end is None:
        end = resolve_today(today) + timedelta(days=SETTINGS.horizon_days)
    return [period.key for period in build_periods(member, start, end)]


def completion_period(frequency: Frequency, value: DateLike) -> Period:
    """Map a completion date (or an already canonical key) onto its period."""
    if isinstance(value, str):
        period = match_period_key(frequency, value)
        if period is not None:
            return period
    return period_of(frequency, parse_date(value))


def normalize_completion(frequency: Frequency | str, completion_date: DateLike) -> str | None:
    """Return the period key a completion on ``completion_date`` satisfies.

    >>> normalize_completion("quarterly", "2024-05-10")
    '2024-Q2'
    """
    member = Frequency.coerce(frequency)
    if member is None:
        return None
    return completion_period(member, completion_date).key


def normalize_completions(frequency: Frequency, values: Iterable[DateLike]) -> set[str]:
    return {completion_period(frequency, value).key for value in values}


def _following(frequency: Frequency, period: Period) -> Period:
    if isinstance(period, DatePeriod):
        if frequency is Frequency.DAILY:
            return DatePeriod(next_weekday(period.day + ONE_DAY))
        return DatePeriod(period.day + ONE_WEEK)
    return period.next()


def _current_or_first(frequency: Frequency, start: date, today: date) -> Period:
    if start > today:
        if frequency is Frequency.DAILY:
            return DatePeriod(next_weekday(start))
        return period_of(frequency, start)
    if frequency is Frequency.DAILY:
        return DatePeriod(next_weekday(today))
    if frequency is Frequency.WEEKLY:
        elapsed_weeks = (today - start).days // 7
        return DatePeriod(start + ONE_WEEK * elapsed_weeks)
    return period_of(frequency, today)


def days_overdue_for(frequency: Frequency, period: Period, today: date) -> int:
    """Days a period is overdue as of ``today`` (0 when its end has not passed).

    Daily and weekly slots report exact calendar days. Calendar periods report
    the number of whole periods elapsed times a nominal length (30/90/365 days);
    this is a severity heuristic, not a calendar-exact count.
    """
    if period.end >= today:
        return 0
    if isinstance(period, DatePeriod):
        return (today - period.end).days
    elapsed = period_of(frequency, today).ordinal - period.ordinal
    return elapsed * SETTINGS.nominal_period_days[frequency.value]


def status_for(frequency: Frequency, due: Period, today: date) -> StatusRecord:
    days = days_overdue_for(frequency, due, today)
    return StatusRecord(
        next_due=due.key,
        is_overdue=due.end < today,
        days_overdue=days,
        is_due_this_period=due.start <= today <= due.end,
    )


def next_due_period(
    frequency: Frequency,
    start: date,
    today: date,
    last_completed: DateLike | None = None,
) -> Period:
    if last_completed is not None:
        return _following(frequency, completion_period(frequency, last_completed))
    return _current_or_first(frequency, start, today)


def evaluate_status(
    frequency: Frequency | str,
    start_date: DateLike,
    last_completed_date: DateLike | None = None,
    *,
    today: DateLike | None = None,
) -> StatusRecord | None:
    """Determine the next due period of a rule and how late it is.

    With a last completion the next due period is the one right after the
    completion's period (the next weekday for daily rules). Without one it is
    the period containing today, or the rule's first period if the rule has
    not started yet.
    """
    member = Frequency.coerce(frequency)
    if member is None:
        logger.debug("No status for unknown frequency %r", frequency)
        return None
    start = parse_date(start_date)
    current = resolve_today(today)
    due = next_due_period(member, start, current, last_completed_date)
    return status_for(member, due, current)


def missed_periods(
    frequency: Frequency,
    start: date,
    completed: set[str],
    today: date,
    end: date | None = None,
) -> list[MissedPeriod]:
    last = today if end is None else min(end, today)
    missed: list[MissedPeriod] = []
    for period in build_periods(frequency, start, last):
        if period.key in completed:
            continue
        # Only periods whose closing day is already behind us count.
        if period.end >= today:
            continue
        missed.append(MissedPeriod(period=period.key, days_overdue=(today - period.end).days))
    return missed


def scan_missed(
    frequency: Frequency | str,
    start_date: DateLike,
    completed_periods: Iterable[DateLike],
    *,
    today: DateLike | None = None,
    end_date: DateLike | None = None,
) -> list[MissedPeriod]:
    """List every closed period since ``start_date`` without a completion.

    ``completed_periods`` may hold raw completion dates or canonical keys; both
    are normalized under ``frequency`` before matching. ``days_overdue`` counts
    from each period's closing day (the slot date itself for daily/weekly, the
    last calendar day of the month/quarter/year otherwise).
    """
    member = Frequency.coerce(frequency)
    if member is None:
        logger.debug("No missed periods for unknown frequency %r", frequency)
        return []
    start = parse_date(start_date)
    current = resolve_today(today)
    completed = normalize_completions(member, completed_periods)
    return missed_periods(member, start, completed, current, parse_optional_date(end_date))
