"""Application services orchestrating compliance queries."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Sequence

from qc_compliance.domain.dates import DateLike
from qc_compliance.domain.models import Assignment, ComplianceStatus, Completion
from qc_compliance.domain.repositories import AssignmentRepository, CompletionRepository
from qc_compliance.domain.results import DueBoard, OverdueSummary
from qc_compliance.domain.services import ComplianceEvaluator, DueBoardBuilder, OverdueAggregator


@dataclass(slots=True)
class ComplianceContext:
    assignment_repository: AssignmentRepository
    completion_repository: CompletionRepository
    aggregator: OverdueAggregator = field(default_factory=OverdueAggregator)
    evaluator: ComplianceEvaluator = field(default_factory=ComplianceEvaluator)
    board_builder: DueBoardBuilder = field(default_factory=DueBoardBuilder)


class BuildOverdueReportUseCase:
    def __init__(self, context: ComplianceContext) -> None:
        self._context = context

    def execute(
        self,
        today: DateLike | None = None,
        active_machines: Collection[str] | None = None,
    ) -> tuple[OverdueSummary, Sequence[Assignment], Sequence[Completion]]:
        assignments = self._context.assignment_repository.list_assignments()
        completions = self._context.completion_repository.list_completions()
        summary = self._context.aggregator.aggregate(
            assignments,
            completions,
            today=today,
            active_machines=active_machines,
        )
        return summary, assignments, completions


class EvaluateComplianceUseCase:
    """Compliance status for each assignment, optionally narrowed to a machine or worksheet."""

    def __init__(self, context: ComplianceContext) -> None:
        self._context = context

    def execute(
        self,
        machine_id: str | None = None,
        worksheet_id: str | None = None,
        today: DateLike | None = None,
    ) -> list[tuple[Assignment, ComplianceStatus]]:
        assignments = self._context.assignment_repository.list_assignments()
        completions = self._context.completion_repository.list_completions()
        results: list[tuple[Assignment, ComplianceStatus]] = []
        for assignment in assignments:
            if machine_id is not None and assignment.machine_id != machine_id:
                continue
            if worksheet_id is not None and assignment.worksheet_id != worksheet_id:
                continue
            status = self._context.evaluator.evaluate(assignment, completions, today=today)
            if status is not None:
                results.append((assignment, status))
        return results


class BuildDueBoardUseCase:
    def __init__(self, context: ComplianceContext) -> None:
        self._context = context

    def execute(self, today: DateLike | None = None) -> DueBoard:
        assignments = self._context.assignment_repository.list_assignments()
        completions = self._context.completion_repository.list_completions()
        return self._context.board_builder.build(assignments, completions, today=today)
