"""Domain dataclasses shared by the club services.

Entities live in the persisted document as plain dictionaries; the classes
here describe the values that travel between components.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from infrastructure import constants


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved by the authentication layer for one request."""

    id: str
    name: str
    is_admin: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CurrentUser":
        return cls(
            id=record["id"],
            name=record.get("name", ""),
            is_admin=bool(record.get("isAdmin", False)),
        )


@dataclass(frozen=True)
class Court:
    id: int
    name: str


@dataclass(frozen=True)
class Tariff:
    """Time-of-day pricing: ``peak_rate`` inside [peak_start, peak_end)."""

    off_peak_rate: float
    peak_rate: float
    peak_start_hour: int
    peak_end_hour: int

    @classmethod
    def from_settings(cls, pricing: Optional[Mapping[str, Any]] = None) -> "Tariff":
        values = dict(constants.DEFAULT_TARIFF)
        values.update(pricing or {})
        return cls(
            off_peak_rate=values["offPeakRate"],
            peak_rate=values["peakRate"],
            peak_start_hour=int(values["peakStartHour"]),
            peak_end_hour=int(values["peakEndHour"]),
        )

    def is_peak(self, hour: int) -> bool:
        return self.peak_start_hour <= hour < self.peak_end_hour

    def rate_for(self, hour: int) -> float:
        return self.peak_rate if self.is_peak(hour) else self.off_peak_rate


DEFAULT_TARIFF = Tariff.from_settings()


@dataclass(frozen=True)
class PriceSlot:
    """One half-hour increment consumed by a booking."""

    hour: int
    minute: int
    rate: float


@dataclass(frozen=True)
class PriceQuote:
    total: float
    slots: Tuple[PriceSlot, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "slots": [
                {"hour": slot.hour, "minute": slot.minute, "rate": slot.rate}
                for slot in self.slots
            ],
        }


@dataclass(frozen=True)
class ReservationRequest:
    """Booking input after validation and clamping."""

    date: str
    start_hour: float
    duration_minutes: int
    court_number: int
    invitees: Tuple[str, ...] = field(default_factory=tuple)
    split_payment: bool = False


@dataclass(frozen=True)
class MatchRequest:
    title: str
    description: str
    match_date: str
    start_hour: float
    duration_minutes: int
    court_number: int
    is_public: bool
    min_level: str
    max_level: str
    max_players: int


@dataclass(frozen=True)
class JoinOutcome:
    """Result of a join call; ``already_joined`` marks the idempotent no-op."""

    match_id: str
    already_joined: bool = False


@dataclass(frozen=True)
class PaymentReceipt:
    status: str
    provider: str
    reference: str
    transaction_id: str
    amount: float


__all__ = [
    "CurrentUser",
    "Court",
    "Tariff",
    "DEFAULT_TARIFF",
    "PriceSlot",
    "PriceQuote",
    "ReservationRequest",
    "MatchRequest",
    "JoinOutcome",
    "PaymentReceipt",
]
