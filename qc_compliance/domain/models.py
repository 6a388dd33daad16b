"""Domain models for QC compliance scheduling.

Assignments and completions are supplied by the surrounding application;
everything else here is produced by the engine and never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Sequence


class Frequency(str, Enum):
    """Recurrence granularity of a QC obligation."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"

    @classmethod
    def coerce(cls, value: object) -> Frequency | None:
        """Return the matching member, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def uses_dates(self) -> bool:
        return self in (Frequency.DAILY, Frequency.WEEKLY)


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


def frequency_label(value: object) -> str:
    member = Frequency.coerce(value)
    if member is not None:
        return member.value
    return str(value).strip().lower()


@dataclass(frozen=True)
class Assignment:
    """A machine owing a recurring QC worksheet from ``start_date`` on."""

    machine_id: str
    frequency: Frequency | str
    start_date: date
    worksheet_id: str | None = None
    end_date: date | None = None
    title: str | None = None

    def key(self) -> tuple[str, str | None]:
        return (self.machine_id, self.worksheet_id)


@dataclass(frozen=True)
class Completion:
    """A QC worksheet performed on a machine on ``performed_on``."""

    machine_id: str
    frequency: Frequency | str
    performed_on: date
    worksheet_id: str | None = None
    completion_id: str | None = None
    performed_by: str | None = None

    def key(self) -> tuple[str, str, date]:
        return (self.machine_id, frequency_label(self.frequency), self.performed_on)


@dataclass(frozen=True)
class MissedPeriod:
    period: str
    days_overdue: int


@dataclass(frozen=True)
class StatusRecord:
    """Where a recurring obligation stands relative to today."""

    next_due: str
    is_overdue: bool
    days_overdue: int
    is_due_this_period: bool


@dataclass(frozen=True)
class ComplianceStatus:
    due_periods: Sequence[str]
    missed_periods: Sequence[MissedPeriod]
    next_due: str
    is_overdue: bool
    days_overdue: int
    is_due_this_period: bool
    completion_rate: float
    completed_periods: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class OverdueItem:
    machine_id: str
    frequency: Frequency
    worksheet_id: str | None
    period: str
    days_overdue: int
    priority: Priority
