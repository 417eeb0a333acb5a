"""Time-of-day pricing for court bookings.

This is the only place the half-hour tariff loop lives; callers that need a
price or a peak classification go through :func:`price_for_slot`.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from domain.errors import ValidationError
from domain.models import DEFAULT_TARIFF, PriceQuote, PriceSlot, Tariff
from infrastructure.constants import SLOT_MINUTES
from tracking import t


def price_for_slot(
    start_hour: float,
    duration_minutes: int,
    tariff: Tariff = DEFAULT_TARIFF,
) -> PriceQuote:
    """Price a booking starting at ``start_hour`` for ``duration_minutes``.

    Each half-hour increment is classified by its floor hour and charged
    half of the matching hourly rate.

    Raises:
        ValidationError: the start is not on a half-hour boundary or the
            duration is not a positive multiple of 30 minutes.
    """

    t('reservations.pricing.price_for_slot')
    if duration_minutes <= 0 or duration_minutes % SLOT_MINUTES:
        raise ValidationError(
            "Duration must be a positive multiple of 30 minutes",
            details={"durationMinutes": duration_minutes},
        )
    if (start_hour * 2) % 1:
        raise ValidationError(
            "Start time must fall on the hour or half hour",
            details={"startHour": start_hour},
        )

    slots: List[PriceSlot] = []
    total = 0.0
    for step in range(duration_minutes // SLOT_MINUTES):
        hour = start_hour + step * 0.5
        floor_hour = int(hour // 1)
        minute = 30 if hour % 1 else 0
        rate = tariff.rate_for(floor_hour)
        total += rate / 2
        slots.append(PriceSlot(hour=floor_hour, minute=minute, rate=rate))

    return PriceQuote(total=round(total, 2), slots=tuple(slots))


def participant_share(price: float, participant_count: int, split_payment: bool) -> float:
    """Amount owed by each participant; split shares round half up to the cent."""

    t('reservations.pricing.participant_share')
    if not split_payment or participant_count <= 1:
        return price
    share = Decimal(str(price)) / participant_count
    return float(share.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
