"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import Assignment, Completion


class AssignmentRepository(Protocol):
    """Provides the worksheet-to-machine bindings currently in force."""

    def list_assignments(self) -> Sequence[Assignment]:
        ...


class CompletionRepository(Protocol):
    """Provides recorded QC completions."""

    def list_completions(self) -> Sequence[Completion]:
        ...
