"""Command-line entrypoint for QC compliance reports."""
from __future__ import annotations

import argparse
import csv
import io
import logging
import sys
from pathlib import Path

from qc_compliance.application.use_cases import (
    BuildDueBoardUseCase,
    BuildOverdueReportUseCase,
    ComplianceContext,
    EvaluateComplianceUseCase,
)
from qc_compliance.domain.dates import InvalidDateError
from qc_compliance.domain.scheduling import generate_periods
from qc_compliance.infrastructure.repositories.spreadsheet_repositories import (
    SpreadsheetAssignmentRepository,
    SpreadsheetCompletionRepository,
)
from qc_compliance.presentation.overdue_report import (
    DUE_TASK_COLUMNS,
    board_to_rows,
    render_board_text,
    render_csv,
    render_html,
    render_text,
)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _add_sources(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("assignments", type=str, help="Path to assignments workbook or CSV")
    parser.add_argument("completions", type=str, help="Path to completions workbook or CSV")
    parser.add_argument("--today", type=str, help="Override today's date (YYYY-MM-DD)")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report QC compliance for imaging equipment")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    overdue = sub.add_parser("overdue", help="List every missed QC period")
    _add_sources(overdue)
    overdue.add_argument("--format", choices=("text", "csv", "html"), default="text")
    overdue.add_argument("--machine", action="append", help="Only report machines in the registry (repeatable)")
    overdue.add_argument("--output", type=str, help="Write the report to a file instead of stdout")

    board = sub.add_parser("board", help="Show overdue and due-now QC per frequency")
    _add_sources(board)
    board.add_argument("--format", choices=("text", "csv"), default="text")

    status = sub.add_parser("status", help="Compliance status per assignment")
    _add_sources(status)
    status.add_argument("--machine", type=str, help="Restrict to one machine")
    status.add_argument("--worksheet", type=str, help="Restrict to one worksheet")

    periods = sub.add_parser("periods", help="Expand a recurrence rule into due periods")
    periods.add_argument("frequency", type=str)
    periods.add_argument("start", type=str, help="Start date (YYYY-MM-DD)")
    periods.add_argument("end", type=str, nargs="?", help="End date (default: today + 30 days)")
    periods.add_argument("--today", type=str, help="Override today's date (YYYY-MM-DD)")

    return parser.parse_args(argv)


def _context(args: argparse.Namespace) -> ComplianceContext:
    return ComplianceContext(
        assignment_repository=SpreadsheetAssignmentRepository(Path(args.assignments)),
        completion_repository=SpreadsheetCompletionRepository(Path(args.completions)),
    )


def _machines(values: list[str] | None) -> set[str] | None:
    if not values:
        return None
    return {value.strip().upper() for value in values}


def _emit(text: str, output: str | None = None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"Report written to {output}")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def _run_overdue(args: argparse.Namespace) -> int:
    use_case = BuildOverdueReportUseCase(_context(args))
    summary, assignments, completions = use_case.execute(today=args.today, active_machines=_machines(args.machine))
    logger.info("Loaded %d assignments and %d completions", len(assignments), len(completions))
    if args.format == "csv":
        _emit(render_csv(summary.items).decode("utf-8"), args.output)
    elif args.format == "html":
        _emit(render_html(summary), args.output)
    else:
        _emit(render_text(summary), args.output)
    return 0


def _run_board(args: argparse.Namespace) -> int:
    board = BuildDueBoardUseCase(_context(args)).execute(today=args.today)
    if args.format == "csv":
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=DUE_TASK_COLUMNS)
        writer.writeheader()
        writer.writerows(board_to_rows(board))
        print(buffer.getvalue(), end="")
    else:
        print(render_board_text(board))
    return 0


def _run_status(args: argparse.Namespace) -> int:
    use_case = EvaluateComplianceUseCase(_context(args))
    machine_id = args.machine.strip().upper() if args.machine else None
    results = use_case.execute(machine_id=machine_id, worksheet_id=args.worksheet, today=args.today)
    if not results:
        print("No matching assignments.")
        return 0
    for assignment, status in results:
        label = assignment.worksheet_id or assignment.title or "-"
        state = "OVERDUE" if status.is_overdue else ("due" if status.is_due_this_period else "ok")
        print(
            f"{assignment.machine_id} {label} ({status.next_due}): {state}, "
            f"{len(status.missed_periods)} missed, {status.completion_rate}% complete"
        )
    return 0


def _run_periods(args: argparse.Namespace) -> int:
    for period in generate_periods(args.frequency, args.start, args.end, today=args.today):
        print(period)
    return 0


COMMANDS = {
    "overdue": _run_overdue,
    "board": _run_board,
    "status": _run_status,
    "periods": _run_periods,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)
    try:
        return COMMANDS[args.command](args)
    except (InvalidDateError, ValueError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
