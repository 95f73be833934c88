from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    if name and name.upper() in {"UTC", "Z"}:
        return timezone.utc
    if name:
        try:
            return ZoneInfo(name)
        except Exception as exc:  # pragma: no cover - environment-dependent
            logger.warning("Failed to load timezone %s via zoneinfo (%s)", name, exc)
    local_tz = datetime.now().astimezone().tzinfo
    if local_tz:
        return local_tz
    logger.warning("System timezone unavailable, fallback to UTC")
    return timezone.utc


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` is UTC, naive values are taken as UTC."""
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"Invalid timestamp: {raw!r}")
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    utc = dt.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_local_date(dt: datetime, tz: Optional[tzinfo]) -> str:
    if tz is not None:
        dt = dt.astimezone(tz)
    return dt.strftime("%Y-%m-%d")
