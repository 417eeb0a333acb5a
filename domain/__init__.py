"""Domain values and failures shared across the club services."""

from .errors import (
    ClubError,
    MatchClosed,
    MatchFull,
    MatchNotFound,
    MatchPrivate,
    NotFoundOrForbidden,
    PersistenceFailure,
    SlotConflict,
    ValidationError,
)
from .models import CurrentUser, PriceQuote, PriceSlot, Tariff

__all__ = [
    "ClubError",
    "MatchClosed",
    "MatchFull",
    "MatchNotFound",
    "MatchPrivate",
    "NotFoundOrForbidden",
    "PersistenceFailure",
    "SlotConflict",
    "ValidationError",
    "CurrentUser",
    "PriceQuote",
    "PriceSlot",
    "Tariff",
]
