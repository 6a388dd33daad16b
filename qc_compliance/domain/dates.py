"""Calendar date parsing shared by the scheduling engine."""
from __future__ import annotations

import re
from datetime import date, datetime

from qc_compliance.config import SETTINGS

_ISO_DATE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)

DateLike = date | datetime | str


class InvalidDateError(ValueError):
    """Raised when a value cannot be read as a calendar date or period key."""

    def __init__(self, value: object, reason: str = "not a calendar date") -> None:
        super().__init__(f"Invalid date {value!r}: {reason}")
        self.value = value


def parse_date(value: DateLike) -> date:
    """Read ``value`` as a calendar date.

    Accepts ``date``/``datetime`` objects (including pandas timestamps) and
    ``YYYY-MM-DD`` strings, optionally followed by a time component as in
    ``2024-01-15T09:30:00Z`` or ``2024-01-15 00:00:00``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(value, "unsupported type")
    match = _ISO_DATE.match(value.strip())
    if not match:
        raise InvalidDateError(value)
    head = match.group(1)
    try:
        return date.fromisoformat(head)
    except ValueError:
        raise InvalidDateError(value, "day out of range") from None


def parse_optional_date(value: DateLike | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return parse_date(value)


def resolve_today(today: DateLike | None = None) -> date:
    """Return the pinned ``today`` or read the wall clock once."""
    if today is not None:
        return parse_date(today)
    return datetime.now(SETTINGS.timezone).date()
