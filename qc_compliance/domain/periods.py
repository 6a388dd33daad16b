"""Canonical due periods.

Each frequency owns one period shape. Internally periods are typed values
so comparisons and stepping never go through string pattern matching; the
canonical string (``key``) only appears at the engine boundary:

=========  ==============  ============
frequency  shape           key
=========  ==============  ============
daily      DatePeriod      2024-01-15
weekly     DatePeriod      2024-01-15
monthly    YearMonthPeriod 2024-01
quarterly  QuarterPeriod   2024-Q1
annual     YearPeriod      2024
=========  ==============  ============

For a fixed shape, keys sort lexicographically in chronological order.
"""
from __future__ import annotations

import re
from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from typing import Union

from dateutil.relativedelta import relativedelta

from .dates import InvalidDateError
from .models import Frequency

MONTHS_PER_QUARTER = 3

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")
_QUARTER_KEY = re.compile(r"^(\d{4})-Q(\d)$")
_YEAR_KEY = re.compile(r"^(\d{4})$")


@dataclass(frozen=True, order=True)
class DatePeriod:
    """A single calendar day slot (daily and weekly obligations)."""

    day: date

    @property
    def key(self) -> str:
        return self.day.isoformat()

    @property
    def start(self) -> date:
        return self.day

    @property
    def end(self) -> date:
        return self.day

    def contains(self, day: date) -> bool:
        return self.day == day


@dataclass(frozen=True, order=True)
class YearMonthPeriod:
    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    @property
    def ordinal(self) -> int:
        return self.year * 12 + self.month - 1

    def next(self) -> YearMonthPeriod:
        following = self.start + relativedelta(months=1)
        return YearMonthPeriod(following.year, following.month)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True, order=True)
class QuarterPeriod:
    year: int
    quarter: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-Q{self.quarter}"

    @property
    def start(self) -> date:
        return date(self.year, (self.quarter - 1) * MONTHS_PER_QUARTER + 1, 1)

    @property
    def end(self) -> date:
        last_month = self.quarter * MONTHS_PER_QUARTER
        return date(self.year, last_month, monthrange(self.year, last_month)[1])

    @property
    def ordinal(self) -> int:
        return self.year * 4 + self.quarter - 1

    def next(self) -> QuarterPeriod:
        following = self.start + relativedelta(months=MONTHS_PER_QUARTER)
        return QuarterPeriod(following.year, quarter_of(following.month))

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True, order=True)
class YearPeriod:
    year: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}"

    @property
    def start(self) -> date:
        return date(self.year, 1, 1)

    @property
    def end(self) -> date:
        return date(self.year, 12, 31)

    @property
    def ordinal(self) -> int:
        return self.year

    def next(self) -> YearPeriod:
        following = self.start + relativedelta(years=1)
        return YearPeriod(following.year)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


Period = Union[DatePeriod, YearMonthPeriod, QuarterPeriod, YearPeriod]


def quarter_of(month: int) -> int:
    return (month - 1) // MONTHS_PER_QUARTER + 1


def period_of(frequency: Frequency, day: date) -> Period:
    """Return the period of ``frequency`` that ``day`` falls in."""
    if frequency.uses_dates:
        return DatePeriod(day)
    if frequency is Frequency.MONTHLY:
        return YearMonthPeriod(day.year, day.month)
    if frequency is Frequency.QUARTERLY:
        return QuarterPeriod(day.year, quarter_of(day.month))
    return YearPeriod(day.year)


def match_period_key(frequency: Frequency, key: str) -> Period | None:
    """Parse a canonical key of ``frequency``'s shape.

    Returns None when ``key`` does not have that shape at all and raises
    ``InvalidDateError`` when it does but names an impossible period.
    """
    text = key.strip()
    if frequency.uses_dates:
        return None
    if frequency is Frequency.MONTHLY:
        match = _MONTH_KEY.match(text)
        if not match:
            return None
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise InvalidDateError(key, "month out of range")
        return YearMonthPeriod(year, month)
    if frequency is Frequency.QUARTERLY:
        match = _QUARTER_KEY.match(text)
        if not match:
            return None
        year, quarter = int(match.group(1)), int(match.group(2))
        if not 1 <= quarter <= 4:
            raise InvalidDateError(key, "quarter out of range")
        return QuarterPeriod(year, quarter)
    match = _YEAR_KEY.match(text)
    if not match:
        return None
    year = int(match.group(1))
    if year < 1:
        raise InvalidDateError(key, "year out of range")
    return YearPeriod(year)
