"""Compliance scheduling engine for recurring imaging-equipment QC."""
from qc_compliance.application.use_cases import (
    BuildDueBoardUseCase,
    BuildOverdueReportUseCase,
    ComplianceContext,
    EvaluateComplianceUseCase,
)
from qc_compliance.domain.dates import InvalidDateError
from qc_compliance.domain.models import Assignment, Completion, Frequency, Priority
from qc_compliance.domain.scheduling import evaluate_status, generate_periods, normalize_completion, scan_missed
from qc_compliance.domain.services import (
    ComplianceEvaluator,
    DueBoardBuilder,
    OverdueAggregator,
    aggregate,
    classify_priority,
)
from qc_compliance.infrastructure.repositories.memory_repositories import (
    InMemoryAssignmentRepository,
    InMemoryCompletionRepository,
)

__all__ = [
    "Assignment",
    "BuildDueBoardUseCase",
    "BuildOverdueReportUseCase",
    "Completion",
    "ComplianceContext",
    "ComplianceEvaluator",
    "DueBoardBuilder",
    "EvaluateComplianceUseCase",
    "Frequency",
    "InMemoryAssignmentRepository",
    "InMemoryCompletionRepository",
    "InvalidDateError",
    "OverdueAggregator",
    "Priority",
    "aggregate",
    "classify_priority",
    "evaluate_status",
    "generate_periods",
    "normalize_completion",
    "scan_missed",
]
