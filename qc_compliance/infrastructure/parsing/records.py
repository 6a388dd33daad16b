"""Turn assignment and completion tables into domain records."""
from __future__ import annotations

from typing import Sequence

import pandas as pd

from qc_compliance.domain.dates import parse_date
from qc_compliance.domain.models import Assignment, Completion, Frequency
from qc_compliance.infrastructure.parsing.utils import cell_text, resolve_columns

ASSIGNMENT_COLUMNS = {
    "machine_id": ("machineId", "machine"),
    "frequency": ("frequency",),
    "start_date": ("startDate", "start"),
    "end_date": ("endDate", "end"),
    "worksheet_id": ("worksheetId", "worksheet", "id"),
    "title": ("title", "worksheetTitle"),
}

COMPLETION_COLUMNS = {
    "machine_id": ("machineId", "machine"),
    "frequency": ("frequency",),
    "performed_on": ("date", "performedOn", "completedDate"),
    "worksheet_id": ("worksheetId", "worksheet"),
    "completion_id": ("id", "completionId"),
    "performed_by": ("performedBy", "technologist"),
}


def _frequency(text: str) -> Frequency | str:
    return Frequency.coerce(text) or text


def _optional(row: pd.Series, columns: dict[str, str], name: str) -> str | None:
    column = columns.get(name)
    if column is None:
        return None
    return cell_text(row.get(column)) or None


def assignments_from_frame(df: pd.DataFrame) -> Sequence[Assignment]:
    columns = resolve_columns(df, ASSIGNMENT_COLUMNS, ("machine_id", "frequency", "start_date"))
    records: list[Assignment] = []
    for _, row in df.iterrows():
        machine_id = cell_text(row.get(columns["machine_id"])).upper()
        if not machine_id:
            continue
        end_text = _optional(row, columns, "end_date")
        records.append(
            Assignment(
                machine_id=machine_id,
                frequency=_frequency(cell_text(row.get(columns["frequency"]))),
                start_date=parse_date(cell_text(row.get(columns["start_date"]))),
                worksheet_id=_optional(row, columns, "worksheet_id"),
                end_date=parse_date(end_text) if end_text else None,
                title=_optional(row, columns, "title"),
            )
        )
    return records


def completions_from_frame(df: pd.DataFrame) -> Sequence[Completion]:
    columns = resolve_columns(df, COMPLETION_COLUMNS, ("machine_id", "frequency", "performed_on"))
    records: list[Completion] = []
    for _, row in df.iterrows():
        machine_id = cell_text(row.get(columns["machine_id"])).upper()
        if not machine_id:
            continue
        records.append(
            Completion(
                machine_id=machine_id,
                frequency=_frequency(cell_text(row.get(columns["frequency"]))),
                performed_on=parse_date(cell_text(row.get(columns["performed_on"]))),
                worksheet_id=_optional(row, columns, "worksheet_id"),
                completion_id=_optional(row, columns, "completion_id"),
                performed_by=_optional(row, columns, "performed_by"),
            )
        )
    return records
