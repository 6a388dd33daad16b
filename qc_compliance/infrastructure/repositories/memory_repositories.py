"""In-memory repositories for assignments and completions.

Each store is an explicit object handed to the use cases; nothing here is
module-level state.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, Sequence

from qc_compliance.domain.models import Assignment, Completion, Frequency
from qc_compliance.domain.repositories import AssignmentRepository, CompletionRepository

_UNCHANGED = object()


class InMemoryAssignmentRepository(AssignmentRepository):
    def __init__(self, assignments: Iterable[Assignment] = ()) -> None:
        self._assignments: dict[tuple[str, str | None], Assignment] = {}
        for assignment in assignments:
            self.assign(assignment)

    def list_assignments(self) -> Sequence[Assignment]:
        return tuple(self._assignments.values())

    def assign(self, assignment: Assignment) -> Assignment:
        """Attach a worksheet to a machine, replacing an earlier binding of the same pair."""
        self._assignments[assignment.key()] = assignment
        return assignment

    def reschedule(
        self,
        machine_id: str,
        worksheet_id: str | None,
        *,
        start_date: date | None = None,
        end_date: date | None | object = _UNCHANGED,
        frequency: Frequency | str | None = None,
    ) -> Assignment:
        """Replace the schedule of an assignment; passing ``end_date=None`` makes it open-ended."""
        current = self._assignments.get((machine_id, worksheet_id))
        if current is None:
            raise KeyError(f"No assignment for machine {machine_id!r} and worksheet {worksheet_id!r}")
        changes: dict[str, object] = {}
        if start_date is not None:
            changes["start_date"] = start_date
        if end_date is not _UNCHANGED:
            changes["end_date"] = end_date
        if frequency is not None:
            changes["frequency"] = frequency
        updated = replace(current, **changes)
        self._assignments[updated.key()] = updated
        return updated

    def unassign(self, machine_id: str, worksheet_id: str | None) -> bool:
        return self._assignments.pop((machine_id, worksheet_id), None) is not None

    def for_machine(self, machine_id: str) -> Sequence[Assignment]:
        return tuple(a for a in self._assignments.values() if a.machine_id == machine_id)

    def for_worksheet(self, worksheet_id: str) -> Sequence[Assignment]:
        return tuple(a for a in self._assignments.values() if a.worksheet_id == worksheet_id)


class InMemoryCompletionRepository(CompletionRepository):
    def __init__(self, completions: Iterable[Completion] = ()) -> None:
        self._completions: dict[tuple[str, str, date], Completion] = {}
        for completion in completions:
            self.record(completion)

    def record(self, completion: Completion) -> Completion:
        """Store a completion; a second one for the same machine, frequency and day replaces the first."""
        self._completions.pop(completion.key(), None)
        self._completions[completion.key()] = completion
        return completion

    def list_completions(self) -> Sequence[Completion]:
        return tuple(sorted(self._completions.values(), key=lambda c: c.performed_on, reverse=True))

    def for_machine(self, machine_id: str) -> Sequence[Completion]:
        return tuple(c for c in self.list_completions() if c.machine_id == machine_id)

    def for_worksheet(self, worksheet_id: str) -> Sequence[Completion]:
        return tuple(c for c in self.list_completions() if c.worksheet_id == worksheet_id)
