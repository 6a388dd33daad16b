"""Domain services turning schedules into priorities and reports."""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Collection, Iterable, Mapping, Sequence

from qc_compliance.config import SETTINGS

from .dates import DateLike, resolve_today
from .models import (
    Assignment,
    ComplianceStatus,
    Completion,
    Frequency,
    OverdueItem,
    Priority,
    frequency_label,
)
from .results import DueBoard, DueBucket, DueTask, OverdueSummary, PriorityCounts
from .scheduling import (
    build_periods,
    missed_periods,
    next_due_period,
    normalize_completions,
    status_for,
)

logger = logging.getLogger(__name__)


def classify_priority(days_overdue: int, frequency: Frequency | str) -> Priority:
    """Map how late a period is onto an escalation level.

    Zero days means "due now" and is always medium. Otherwise the frequency's
    (critical, high, medium) thresholds apply; anything below the medium
    threshold, or an unknown frequency, falls back to low.
    """
    if days_overdue == 0:
        return Priority.MEDIUM
    thresholds = SETTINGS.priority_thresholds.get(frequency_label(frequency))
    if thresholds is None:
        return Priority.LOW
    critical, high, medium = thresholds
    if days_overdue >= critical:
        return Priority.CRITICAL
    if days_overdue >= high:
        return Priority.HIGH
    if days_overdue >= medium:
        return Priority.MEDIUM
    return Priority.LOW


def completions_for(assignment: Assignment, completions: Iterable[Completion]) -> list[Completion]:
    """Completions on the assignment's machine and frequency.

    When both sides name a worksheet, the worksheet ids must agree as well.
    """
    frequency = frequency_label(assignment.frequency)
    matched: list[Completion] = []
    for completion in completions:
        if completion.machine_id != assignment.machine_id:
            continue
        if frequency_label(completion.frequency) != frequency:
            continue
        if assignment.worksheet_id and completion.worksheet_id and completion.worksheet_id != assignment.worksheet_id:
            continue
        matched.append(completion)
    return matched


def _scan_until(assignment: Assignment, today: date) -> date:
    if assignment.end_date is None:
        return today
    return min(assignment.end_date, today)


class ComplianceEvaluator:
    """Builds the compliance picture of a single assignment."""

    def evaluate(
        self,
        assignment: Assignment,
        completions: Iterable[Completion],
        today: DateLike | None = None,
    ) -> ComplianceStatus | None:
        frequency = Frequency.coerce(assignment.frequency)
        if frequency is None:
            logger.debug("Skipping %s: unknown frequency %r", assignment.key(), assignment.frequency)
            return None
        current = resolve_today(today)
        matched = completions_for(assignment, completions)
        completed = normalize_completions(frequency, (c.performed_on for c in matched))

        due = build_periods(frequency, assignment.start_date, _scan_until(assignment, current))
        due_keys = [period.key for period in due]
        done = [key for key in due_keys if key in completed]
        missed = missed_periods(frequency, assignment.start_date, completed, current, assignment.end_date)

        last_completed = max((c.performed_on for c in matched), default=None)
        status = status_for(
            frequency,
            next_due_period(frequency, assignment.start_date, current, last_completed),
            current,
        )
        rate = round(len(done) / len(due_keys) * 100, 1) if due_keys else 0.0

        return ComplianceStatus(
            due_periods=tuple(due_keys),
            missed_periods=tuple(missed),
            next_due=status.next_due,
            is_overdue=status.is_overdue,
            days_overdue=status.days_overdue,
            is_due_this_period=status.is_due_this_period,
            completion_rate=rate,
            completed_periods=tuple(done),
        )


class OverdueAggregator:
    """Collects missed periods across every assignment into one summary."""

    def aggregate(
        self,
        assignments: Sequence[Assignment],
        completions: Sequence[Completion],
        today: DateLike | None = None,
        active_machines: Collection[str] | None = None,
    ) -> OverdueSummary:
        current = resolve_today(today)
        by_machine_completions = self._index_completions(completions)

        items: list[OverdueItem] = []
        for assignment in assignments:
            if active_machines is not None and assignment.machine_id not in active_machines:
                logger.debug("Skipping %s: machine not in registry", assignment.key())
                continue
            frequency = Frequency.coerce(assignment.frequency)
            if frequency is None:
                logger.debug("Skipping %s: unknown frequency %r", assignment.key(), assignment.frequency)
                continue
            matched = completions_for(assignment, by_machine_completions.get(assignment.machine_id, ()))
            completed = normalize_completions(frequency, (c.performed_on for c in matched))
            missed = missed_periods(frequency, assignment.start_date, completed, current, assignment.end_date)
            logger.debug("%s %s: %d missed periods", assignment.key(), frequency.value, len(missed))
            for miss in missed:
                items.append(
                    OverdueItem(
                        machine_id=assignment.machine_id,
                        frequency=frequency,
                        worksheet_id=assignment.worksheet_id,
                        period=miss.period,
                        days_overdue=miss.days_overdue,
                        priority=classify_priority(miss.days_overdue, frequency),
                    )
                )

        items.sort(key=lambda item: item.days_overdue, reverse=True)
        by_machine: dict[str, list[OverdueItem]] = {}
        by_frequency: dict[str, list[OverdueItem]] = {}
        for item in items:
            by_machine.setdefault(item.machine_id, []).append(item)
            by_frequency.setdefault(item.frequency.value, []).append(item)
        critical = [item for item in items if item.priority is Priority.CRITICAL]

        logger.info("Overdue scan as of %s: %d items, %d critical", current.isoformat(), len(items), len(critical))
        return OverdueSummary(
            total=len(items),
            items=tuple(items),
            by_machine={machine: tuple(group) for machine, group in by_machine.items()},
            by_frequency={frequency: tuple(group) for frequency, group in by_frequency.items()},
            critical=tuple(critical),
            summary=PriorityCounts.from_priorities(item.priority for item in items),
            as_of=current,
        )

    @staticmethod
    def _index_completions(completions: Sequence[Completion]) -> Mapping[str, list[Completion]]:
        index: dict[str, list[Completion]] = defaultdict(list)
        for completion in completions:
            index[completion.machine_id].append(completion)
        return index


class DueBoardBuilder:
    """Sorts assignments into overdue / due-this-period buckets per frequency."""

    def build(
        self,
        assignments: Sequence[Assignment],
        completions: Sequence[Completion],
        today: DateLike | None = None,
    ) -> DueBoard:
        current = resolve_today(today)
        overdue: dict[Frequency, list[DueTask]] = defaultdict(list)
        due_now: dict[Frequency, list[DueTask]] = defaultdict(list)

        for assignment in assignments:
            frequency = Frequency.coerce(assignment.frequency)
            if frequency is None:
                continue
            if assignment.end_date is not None and assignment.end_date < current:
                continue
            matched = completions_for(assignment, completions)
            last_completed = max((c.performed_on for c in matched), default=None)
            status = status_for(
                frequency,
                next_due_period(frequency, assignment.start_date, current, last_completed),
                current,
            )
            task = DueTask(
                machine_id=assignment.machine_id,
                worksheet_id=assignment.worksheet_id,
                frequency=frequency,
                next_due=status.next_due,
                days_overdue=status.days_overdue,
                priority=classify_priority(status.days_overdue, frequency),
                last_completed=last_completed,
                title=assignment.title,
            )
            if status.is_overdue:
                overdue[frequency].append(task)
            elif status.is_due_this_period:
                due_now[frequency].append(task)

        buckets = {
            frequency: DueBucket(
                overdue=tuple(sorted(overdue[frequency], key=lambda task: task.days_overdue, reverse=True)),
                due_this_period=tuple(due_now[frequency]),
            )
            for frequency in Frequency
        }
        return DueBoard(buckets=buckets, as_of=current)


def aggregate(
    assignments: Sequence[Assignment],
    completions: Sequence[Completion],
    *,
    today: DateLike | None = None,
    active_machines: Collection[str] | None = None,
) -> OverdueSummary:
    return OverdueAggregator().aggregate(assignments, completions, today=today, active_machines=active_machines)
