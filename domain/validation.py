"""
Validation utility functions
Coerces and checks the plain values handed over by the request layer
"""
from tracking import t

from typing import Any, List, Optional

from domain.errors import ValidationError
from infrastructure.constants import SLOT_MINUTES
from infrastructure.time_utils import parse_iso_date, parse_iso_datetime


def clamp(value: float, low: float, high: float) -> float:
    """Pull ``value`` into ``[low, high]``."""
    t('domain.validation.clamp')
    return min(max(value, low), high)


def coerce_number(value: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Convert request input into a number

    Booleans, blanks, NaN and unparsable strings fall back to ``default``.
    """
    t('domain.validation.coerce_number')
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return number


def coerce_int(value: Any, default: int) -> int:
    t('domain.validation.coerce_int')
    number = coerce_number(value)
    if not number:
        return default
    return int(number)


def clamp_duration(value: Any, low: int, high: int, default: int) -> int:
    """
    Clamp a duration into ``[low, high]`` and snap it down to whole half hours

    Out-of-range values are clamped rather than rejected.
    """
    t('domain.validation.clamp_duration')
    minutes = int(clamp(coerce_int(value, default), low, high))
    return minutes - minutes % SLOT_MINUTES


def sanitize_string(value: Any, fallback: str = '') -> str:
    t('domain.validation.sanitize_string')
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def ensure_list(value: Any) -> List[Any]:
    t('domain.validation.ensure_list')
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def require_iso_date(value: Any, field: str = 'date') -> str:
    """Return the normalised ``YYYY-MM-DD`` string or raise ``ValidationError``."""
    t('domain.validation.require_iso_date')
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValidationError("Invalid date", details={field: value})
    return parsed.isoformat()


def require_iso_moment(value: Any, field: str) -> str:
    """Accept an ISO date or datetime, returned as given after trimming."""
    t('domain.validation.require_iso_moment')
    if parse_iso_date(value) is None and parse_iso_datetime(value) is None:
        raise ValidationError("Invalid date", details={field: value})
    if isinstance(value, str):
        return value.strip()
    return value.isoformat()


def require_start_hour(value: Any, duration_minutes: int) -> float:
    """
    Check a fractional start hour such as ``17.5``

    It must sit on a half-hour boundary and the booking must end by midnight.
    """
    t('domain.validation.require_start_hour')
    hour = coerce_number(value)
    if hour is None:
        raise ValidationError("Start hour is required", details={"startHour": value})
    if (hour * 2) % 1:
        raise ValidationError(
            "Start time must fall on the hour or half hour",
            details={"startHour": value},
        )
    if hour < 0 or hour + duration_minutes / 60 > 24:
        raise ValidationError(
            "Booking must start and end within the same day",
            details={"startHour": value, "durationMinutes": duration_minutes},
        )
    return hour
