"""Spreadsheet-backed repositories for assignments and completions."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

from qc_compliance.domain.models import Assignment, Completion
from qc_compliance.domain.repositories import AssignmentRepository, CompletionRepository
from qc_compliance.infrastructure.parsing.records import assignments_from_frame, completions_from_frame
from qc_compliance.infrastructure.parsing.utils import ensure_bytes, read_table


class SpreadsheetAssignmentRepository(AssignmentRepository):
    def __init__(self, source: BytesIO | Path | bytes | str, sheet_name: str | None = None) -> None:
        self._source = ensure_bytes(source)
        self._sheet_name = sheet_name

    def list_assignments(self) -> Sequence[Assignment]:
        return assignments_from_frame(read_table(self._source, self._sheet_name))


class SpreadsheetCompletionRepository(CompletionRepository):
    def __init__(self, source: BytesIO | Path | bytes | str, sheet_name: str | None = None) -> None:
        self._source = ensure_bytes(source)
        self._sheet_name = sheet_name

    def list_completions(self) -> Sequence[Completion]:
        return completions_from_frame(read_table(self._source, self._sheet_name))
