"""Domain-level results for compliance reporting."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Sequence

from .models import Frequency, OverdueItem, Priority


@dataclass(frozen=True)
class PriorityCounts:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_priorities(cls, priorities: Iterable[Priority]) -> PriorityCounts:
        counts = {priority: 0 for priority in Priority}
        for priority in priorities:
            counts[priority] += 1
        return cls(
            critical=counts[Priority.CRITICAL],
            high=counts[Priority.HIGH],
            medium=counts[Priority.MEDIUM],
            low=counts[Priority.LOW],
        )

    def as_dict(self) -> dict[str, int]:
        return {
            Priority.CRITICAL.value: self.critical,
            Priority.HIGH.value: self.high,
            Priority.MEDIUM.value: self.medium,
            Priority.LOW.value: self.low,
        }


@dataclass(frozen=True)
class OverdueSummary:
    """Every missed period across all assignments, most overdue first."""

    total: int
    items: Sequence[OverdueItem]
    by_machine: Mapping[str, Sequence[OverdueItem]]
    by_frequency: Mapping[str, Sequence[OverdueItem]]
    critical: Sequence[OverdueItem]
    summary: PriorityCounts
    as_of: date

    def has_issues(self) -> bool:
        return self.total > 0


@dataclass(frozen=True)
class DueTask:
    machine_id: str
    worksheet_id: str | None
    frequency: Frequency
    next_due: str
    days_overdue: int
    priority: Priority
    last_completed: date | None = None
    title: str | None = None


@dataclass(frozen=True)
class DueBucket:
    overdue: Sequence[DueTask] = field(default_factory=tuple)
    due_this_period: Sequence[DueTask] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not self.overdue and not self.due_this_period


@dataclass(frozen=True)
class DueBoard:
    """What is late and what is due now, bucketed by frequency."""

    buckets: Mapping[Frequency, DueBucket]
    as_of: date

    def bucket(self, frequency: Frequency) -> DueBucket:
        return self.buckets.get(frequency, DueBucket())

    def iter_overdue(self) -> Iterable[DueTask]:
        for frequency in Frequency:
            yield from self.bucket(frequency).overdue

    def iter_due_this_period(self) -> Iterable[DueTask]:
        for frequency in Frequency:
            yield from self.bucket(frequency).due_this_period
