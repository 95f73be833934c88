"""Remaining-time math for alarms.

Days are fixed 24-hour spans counted from the cycle start; there is no
calendar or DST adjustment.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

MS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class AlarmProgress:
    elapsed_days: int
    progress: float
    remaining_days: int
    is_due: bool


def elapsed_days(created_at: datetime, now: datetime) -> int:
    elapsed_ms = (now - created_at) // timedelta(milliseconds=1)
    return max(elapsed_ms // MS_PER_DAY, 0)


def calculate_progress(created_at: datetime, interval: int, now: datetime) -> AlarmProgress:
    if interval < 1:
        raise ValueError(f"interval must be >= 1, got {interval}")
    days = elapsed_days(created_at, now)
    remaining = max(interval - days, 0)
    return AlarmProgress(
        elapsed_days=days,
        progress=min(days / interval, 1.0),
        remaining_days=remaining,
        is_due=remaining == 0,
    )
