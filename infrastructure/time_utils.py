"""Date and time helpers shared by the club services.

Persisted timestamps are ISO-8601 strings normalised to UTC.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

import pytz

from tracking import t


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""

    t('infrastructure.time_utils.utc_now')
    return datetime.now(pytz.UTC)


def to_iso(moment: Optional[datetime] = None) -> str:
    """Serialise ``moment`` (default: now) as a UTC ISO-8601 string."""

    t('infrastructure.time_utils.to_iso')
    moment = moment or utc_now()
    if moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    return moment.astimezone(pytz.UTC).isoformat().replace("+00:00", "Z")


def parse_iso_date(value: Any) -> Optional[date]:
    """Return the calendar day for a ``YYYY-MM-DD`` string, else ``None``."""

    t('infrastructure.time_utils.parse_iso_date')
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime string into an aware UTC datetime."""

    t('infrastructure.time_utils.parse_iso_datetime')
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed.astimezone(pytz.UTC)


def split_hour(start_hour: float) -> tuple[int, int]:
    """Split a fractional hour (``17.5``) into ``(17, 30)``."""

    t('infrastructure.time_utils.split_hour')
    hour = int(start_hour)
    minute = 30 if start_hour % 1 else 0
    return hour, minute


def local_start_to_utc(day: date, start_hour: float, timezone_name: str) -> datetime:
    """Resolve a club-local wall-clock start into an aware UTC datetime."""

    t('infrastructure.time_utils.local_start_to_utc')
    tz = pytz.timezone(timezone_name)
    hour, minute = split_hour(start_hour)
    local = tz.localize(datetime.combine(day, time(hour, minute)))
    return local.astimezone(pytz.UTC)
