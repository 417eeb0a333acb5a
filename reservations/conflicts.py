"""Overlap checks for reservations sharing a court and a day."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from domain.errors import SlotConflict
from tracking import t


def interval_for(start_hour: float, duration_minutes: int) -> tuple[float, float]:
    """Return the half-open ``[start, end)`` interval in hours."""

    t('reservations.conflicts.interval_for')
    return start_hour, start_hour + duration_minutes / 60


def intervals_overlap(
    first: tuple[float, float],
    second: tuple[float, float],
) -> bool:
    """Strict overlap; intervals that only touch at an endpoint do not conflict."""

    t('reservations.conflicts.intervals_overlap')
    start_a, end_a = first
    start_b, end_b = second
    return start_a < end_b and end_a > start_b


def find_conflict(
    reservations: Iterable[Dict[str, Any]],
    *,
    court_number: int,
    date: str,
    start_hour: float,
    duration_minutes: int,
) -> Optional[Dict[str, Any]]:
    """Return the first live reservation overlapping the candidate, if any."""

    t('reservations.conflicts.find_conflict')
    candidate = interval_for(start_hour, duration_minutes)
    for existing in reservations:
        if existing.get('courtNumber') != court_number or existing.get('date') != date:
            continue
        # Cancellation deletes the row; a status other than confirmed is not live.
        if existing.get('status', 'confirmed') != 'confirmed':
            continue
        booked = interval_for(existing['startHour'], existing['durationMinutes'])
        if intervals_overlap(candidate, booked):
            return existing
    return None


def has_conflict(reservations: Iterable[Dict[str, Any]], **candidate: Any) -> bool:
    t('reservations.conflicts.has_conflict')
    return find_conflict(reservations, **candidate) is not None


def ensure_slot_available(
    reservations: Iterable[Dict[str, Any]],
    *,
    court_number: int,
    date: str,
    start_hour: float,
    duration_minutes: int,
    logger: Any,
) -> None:
    """Raise ``SlotConflict`` if the candidate overlaps a live reservation."""

    t('reservations.conflicts.ensure_slot_available')
    existing = find_conflict(
        reservations,
        court_number=court_number,
        date=date,
        start_hour=start_hour,
        duration_minutes=duration_minutes,
    )
    if existing is None:
        return

    existing_start, existing_end = interval_for(existing['startHour'], existing['durationMinutes'])
    logger.warning(
        """SLOT CONFLICT REJECTED
        Court %s on %s, requested %s for %s minutes
        Overlaps reservation %s (%s-%s)
        """,
        court_number,
        date,
        start_hour,
        duration_minutes,
        existing.get('id'),
        existing_start,
        existing_end,
    )
    raise SlotConflict(
        f"Court {court_number} is already booked on {date} at that time",
        details={
            "reservationId": existing.get('id'),
            "courtNumber": court_number,
            "date": date,
            "startHour": existing_start,
            "endHour": existing_end,
        },
    )
