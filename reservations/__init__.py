"""Court reservations: pricing, overlap checks, booking lifecycle and payments."""

from .lifecycle import ReservationManager
from .payments import PaymentService
from .pricing import price_for_slot

__all__ = ["ReservationManager", "PaymentService", "price_for_slot"]
