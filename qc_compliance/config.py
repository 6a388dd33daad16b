"""Central configuration for the QC compliance package."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

TIMEZONE_ENV_VAR = "QC_COMPLIANCE_TZ"

# Look-ahead window so near-future periods show up before they are due.
DEFAULT_HORIZON_DAYS = 30
MAX_GENERATED_PERIODS = 1000

# Severity heuristic only: period-based frequencies report elapsed periods
# multiplied by these nominal lengths, not exact calendar day counts.
NOMINAL_PERIOD_DAYS = {
    "monthly": 30,
    "quarterly": 90,
    "annual": 365,
}

# (critical, high, medium) minimum days overdue per frequency.
PRIORITY_THRESHOLDS = {
    "daily": (5, 3, 1),
    "weekly": (14, 7, 3),
    "monthly": (90, 60, 30),
    "quarterly": (270, 180, 90),
    "annual": (1095, 730, 365),
}


def _load_timezone() -> tzinfo:
    name = os.environ.get(TIMEZONE_ENV_VAR, "").strip()
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in %s, falling back to UTC", name, TIMEZONE_ENV_VAR)
        return timezone.utc


@dataclass(slots=True, frozen=True)
class Settings:
    timezone: tzinfo
    horizon_days: int
    max_periods: int
    nominal_period_days: Mapping[str, int]
    priority_thresholds: Mapping[str, tuple[int, int, int]]


SETTINGS = Settings(
    timezone=_load_timezone(),
    horizon_days=DEFAULT_HORIZON_DAYS,
    max_periods=MAX_GENERATED_PERIODS,
    nominal_period_days=dict(NOMINAL_PERIOD_DAYS),
    priority_thresholds=dict(PRIORITY_THRESHOLDS),
)
