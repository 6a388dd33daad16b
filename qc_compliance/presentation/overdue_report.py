"""Overdue report renderers."""
from __future__ import annotations

import csv
import html
import io
from typing import Sequence

import pandas as pd

from qc_compliance.domain.models import OverdueItem
from qc_compliance.domain.results import DueBoard, DueTask, OverdueSummary

OVERDUE_COLUMNS = ["machine_id", "worksheet_id", "frequency", "period", "days_overdue", "priority"]
DUE_TASK_COLUMNS = [
    "machine_id",
    "worksheet_id",
    "frequency",
    "next_due",
    "days_overdue",
    "priority",
    "last_completed",
    "status",
]


def items_to_rows(items: Sequence[OverdueItem]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for item in items:
        rows.append(
            {
                "machine_id": item.machine_id,
                "worksheet_id": item.worksheet_id or "",
                "frequency": item.frequency.value,
                "period": item.period,
                "days_overdue": str(item.days_overdue),
                "priority": item.priority.value,
            }
        )
    return rows


def _task_row(task: DueTask, status: str) -> dict[str, str]:
    return {
        "machine_id": task.machine_id,
        "worksheet_id": task.worksheet_id or "",
        "frequency": task.frequency.value,
        "next_due": task.next_due,
        "days_overdue": str(task.days_overdue),
        "priority": task.priority.value,
        "last_completed": task.last_completed.isoformat() if task.last_completed else "",
        "status": status,
    }


def board_to_rows(board: DueBoard) -> list[dict[str, str]]:
    rows = [_task_row(task, "overdue") for task in board.iter_overdue()]
    rows.extend(_task_row(task, "due") for task in board.iter_due_this_period())
    return rows


def summary_to_dataframe(summary: OverdueSummary) -> pd.DataFrame:
    frame = pd.DataFrame(items_to_rows(summary.items), columns=OVERDUE_COLUMNS)
    return frame.astype({"days_overdue": "int64"})


def render_csv(items: Sequence[OverdueItem]) -> bytes:
    rows = items_to_rows(items)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=OVERDUE_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def _table(rows: list[dict[str, str]]) -> str:
    header = "".join(f"<th>{col}</th>" for col in rows[0].keys())
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def render_html(summary: OverdueSummary) -> str:
    rows = items_to_rows(summary.items)
    if not rows:
        return "<p>No overdue QC.</p>"
    counts = ", ".join(f"{level}: {count}" for level, count in summary.summary.as_dict().items())
    return f"<p>{summary.total} overdue periods as of {summary.as_of.isoformat()} ({counts})</p>" + _table(rows)


def render_text(summary: OverdueSummary) -> str:
    lines = [
        f"Overdue QC as of {summary.as_of.isoformat()}",
        "=" * 32,
        f"Total overdue periods: {summary.total}",
    ]
    for level, count in summary.summary.as_dict().items():
        lines.append(f"{level.capitalize()}: {count}")
    if not summary.items:
        lines.append("")
        lines.append("No overdue QC.")
        return "\n".join(lines)
    for machine_id, items in summary.by_machine.items():
        lines.append("")
        lines.append(f"{machine_id} ({len(items)})")
        for item in items:
            worksheet = f" [{item.worksheet_id}]" if item.worksheet_id else ""
            lines.append(
                f"- {item.frequency.value}{worksheet} {item.period}: "
                f"{item.days_overdue} days overdue ({item.priority.value})"
            )
    return "\n".join(lines)


def render_board_text(board: DueBoard) -> str:
    lines = [f"Due QC as of {board.as_of.isoformat()}"]
    for frequency, bucket in board.buckets.items():
        if bucket.is_empty():
            continue
        lines.append("")
        lines.append(frequency.value.capitalize())
        for task in bucket.overdue:
            lines.append(f"- OVERDUE {task.machine_id} {task.next_due}: {task.days_overdue} days ({task.priority.value})")
        for task in bucket.due_this_period:
            lines.append(f"- DUE {task.machine_id} {task.next_due}")
    if len(lines) == 1:
        lines.append("Nothing due.")
    return "\n".join(lines)
