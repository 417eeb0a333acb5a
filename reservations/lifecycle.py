"""
Reservation Lifecycle Module

This module provides the ReservationManager class, which books, cancels and
lists court reservations. Every booking is checked for overlaps, priced and
written together with its participant shares and ledger row in a single
document commit; stats and notifications follow as best-effort steps.
"""
from tracking import t

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from domain.errors import NotFoundOrForbidden
from domain.models import Court, CurrentUser, PriceQuote, ReservationRequest, Tariff
from domain.validation import (
    clamp,
    clamp_duration,
    coerce_int,
    ensure_list,
    require_iso_date,
    require_start_hour,
)
from infrastructure import constants
from infrastructure.document_store import DocumentStore, Snapshot, new_id
from infrastructure.time_utils import local_start_to_utc, parse_iso_date, to_iso
from reservations.conflicts import ensure_slot_available
from reservations.payments import build_transaction
from reservations.pricing import participant_share, price_for_slot
from users.manager import find_user_by_email


class Notifier(Protocol):
    def create(self, user_id: str, type: str, title: str, body: str) -> Any:
        ...


class ReservationStatsHook(Protocol):
    def after_reservation(self, reservation: Mapping[str, Any]) -> Any:
        ...


def courts_from_settings(settings: Mapping[str, Any]) -> List[Court]:
    t('reservations.lifecycle.courts_from_settings')
    courts = settings.get("courts") or constants.DEFAULT_COURTS
    return [Court(id=int(court["id"]), name=court.get("name", "")) for court in courts]


def clamp_court(court_number: int, courts: List[Court]) -> int:
    """Pull a requested court number into the configured range."""
    t('reservations.lifecycle.clamp_court')
    ids = sorted(court.id for court in courts)
    return int(clamp(court_number, ids[0], ids[-1]))


def parse_reservation_request(payload: Mapping[str, Any]) -> ReservationRequest:
    """
    Validate and normalise booking input before the store is touched.

    Durations outside [60, 180] minutes are clamped, not rejected. The court
    number is clamped later against the configured court list.

    Raises:
        ValidationError: malformed date or start hour.
    """
    t('reservations.lifecycle.parse_reservation_request')
    date = require_iso_date(payload.get("date"))
    duration = clamp_duration(
        payload.get("durationMinutes"),
        constants.MIN_DURATION_MINUTES,
        constants.MAX_DURATION_MINUTES,
        constants.DEFAULT_DURATION_MINUTES,
    )
    start_hour = require_start_hour(payload.get("startHour"), duration)
    invitees = tuple(
        email for email in ensure_list(payload.get("invitees")) if isinstance(email, str)
    )
    return ReservationRequest(
        date=date,
        start_hour=start_hour,
        duration_minutes=duration,
        court_number=coerce_int(payload.get("courtNumber"), 1),
        invitees=invitees,
        split_payment=bool(payload.get("splitPayment", False)),
    )


class ReservationManager:
    """
    Books and cancels court reservations against the shared document.

    Attributes:
        store (DocumentStore): Single source of truth for all entities
        stats (ReservationStatsHook): Credits play time after a booking
        notifier (Notifier): Receives one notification per invited participant
        logger (logging.Logger): Logger instance for this class
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        stats: Optional[ReservationStatsHook] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        t('reservations.lifecycle.ReservationManager.__init__')
        self.store = store
        self.stats = stats
        self.notifier = notifier
        self.logger = logging.getLogger('ReservationManager')

    def create(self, user: CurrentUser, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Book a court for ``user``.

        Args:
            user: Authenticated owner of the booking
            payload: ``date``, ``startHour``, ``durationMinutes``,
                ``courtNumber``, ``invitees`` (emails) and ``splitPayment``

        Returns:
            The stored reservation

        Raises:
            ValidationError: malformed input, before any store read
            SlotConflict: the interval overlaps a live booking; nothing is written
            PersistenceFailure: the document could not be saved
        """
        t('reservations.lifecycle.ReservationManager.create')
        request = parse_reservation_request(payload)

        self.logger.info(
            """NEW RESERVATION REQUEST
        User ID: %s
        Date: %s
        Start: %s
        Duration: %s min
        Court: %s
        Invitees: %s
        Split payment: %s
        """,
            user.id,
            request.date,
            request.start_hour,
            request.duration_minutes,
            request.court_number,
            len(request.invitees),
            request.split_payment,
        )

        provider = self.store.settings.payment_provider

        def book(document: Snapshot) -> Dict[str, Any]:
            settings = document["settings"]
            court = clamp_court(request.court_number, courts_from_settings(settings))

            participants = [user.id]
            for email in request.invitees:
                invitee = find_user_by_email(document, email)
                if invitee and invitee["id"] not in participants:
                    participants.append(invitee["id"])

            ensure_slot_available(
                document["reservations"],
                court_number=court,
                date=request.date,
                start_hour=request.start_hour,
                duration_minutes=request.duration_minutes,
                logger=self.logger,
            )

            quote = price_for_slot(
                request.start_hour,
                request.duration_minutes,
                Tariff.from_settings(settings.get("pricing")),
            )
            start = local_start_to_utc(
                parse_iso_date(request.date),
                request.start_hour,
                settings.get("timezone") or self.store.settings.timezone,
            )
            reservation_id = new_id()
            now = to_iso()
            reservation = {
                "id": reservation_id,
                "ownerId": user.id,
                "date": request.date,
                "startHour": request.start_hour,
                "durationMinutes": request.duration_minutes,
                "courtNumber": court,
                "participants": participants,
                "splitPayment": request.split_payment,
                "price": quote.total,
                "status": constants.RESERVATION_STATUS_CONFIRMED,
                "createdAt": now,
                "startDateTime": to_iso(start),
            }
            document["reservations"].append(reservation)

            share = participant_share(quote.total, len(participants), request.split_payment)
            for participant_id in participants:
                document["reservationParticipants"].append(
                    {
                        "id": new_id(),
                        "reservationId": reservation_id,
                        "userId": participant_id,
                        "share": share,
                        "createdAt": now,
                    }
                )
            document["transactions"].append(
                build_transaction(
                    quote.total,
                    reservation_id=reservation_id,
                    split_payment=request.split_payment,
                    provider=provider,
                )
            )
            return reservation

        reservation = self.store.commit(book)

        self.logger.info(
            """RESERVATION CONFIRMED
        Reservation ID: %s
        Court %s on %s at %s for %s min
        Participants: %s
        Price: %.2f
        """,
            reservation["id"],
            reservation["courtNumber"],
            reservation["date"],
            reservation["startHour"],
            reservation["durationMinutes"],
            len(reservation["participants"]),
            reservation["price"],
        )

        self._after_booking(user, reservation)
        return reservation

    def cancel(self, user: CurrentUser, reservation_id: str) -> Dict[str, Any]:
        """
        Remove an owned reservation with its share rows and ledger row.

        Raises:
            NotFoundOrForbidden: the reservation does not exist or belongs to
                someone else; callers cannot tell which.
        """
        t('reservations.lifecycle.ReservationManager.cancel')

        def remove(document: Snapshot) -> Dict[str, Any]:
            reservation = next(
                (item for item in document["reservations"] if item["id"] == reservation_id),
                None,
            )
            if reservation is None or reservation["ownerId"] != user.id:
                raise NotFoundOrForbidden(
                    "Reservation not found or not accessible",
                    details={"reservationId": reservation_id},
                )
            document["reservations"] = [
                item for item in document["reservations"] if item["id"] != reservation_id
            ]
            document["reservationParticipants"] = [
                item
                for item in document["reservationParticipants"]
                if item["reservationId"] != reservation_id
            ]
            document["transactions"] = [
                item
                for item in document["transactions"]
                if item.get("reservationId") != reservation_id
            ]
            return reservation

        try:
            removed = self.store.commit(remove)
        except NotFoundOrForbidden:
            self.logger.warning(
                "Cancellation refused for reservation %s by user %s", reservation_id, user.id
            )
            raise

        self.logger.info("Reservation %s cancelled by owner %s", reservation_id, user.id)
        return removed

    def list_for_user(self, user: CurrentUser, date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return reservations, optionally for one day, flagged with ``isOwner``."""
        t('reservations.lifecycle.ReservationManager.list_for_user')
        reservations = []
        for reservation in self.store.read()["reservations"]:
            if date and reservation["date"] != date:
                continue
            reservation["isOwner"] = reservation["ownerId"] == user.id
            reservations.append(reservation)
        return reservations

    def shares_for(self, reservation_id: str) -> List[Dict[str, Any]]:
        t('reservations.lifecycle.ReservationManager.shares_for')
        return [
            row
            for row in self.store.read()["reservationParticipants"]
            if row["reservationId"] == reservation_id
        ]

    def quote(self, start_hour: Any, duration_minutes: Any) -> PriceQuote:
        """Price a slot under the current tariff without booking it."""
        t('reservations.lifecycle.ReservationManager.quote')
        duration = clamp_duration(
            duration_minutes,
            constants.MIN_DURATION_MINUTES,
            constants.MAX_DURATION_MINUTES,
            constants.DEFAULT_DURATION_MINUTES,
        )
        hour = require_start_hour(start_hour, duration)
        pricing = self.store.read()["settings"].get("pricing")
        return price_for_slot(hour, duration, Tariff.from_settings(pricing))

    def _after_booking(self, user: CurrentUser, reservation: Dict[str, Any]) -> None:
        """Stats and notifications; failures are logged and never undo the booking."""
        if self.stats is not None:
            try:
                self.stats.after_reservation(reservation)
            except Exception:
                self.logger.exception(
                    "Stats update failed after reservation %s", reservation["id"]
                )

        if self.notifier is None:
            return
        for participant_id in reservation["participants"]:
            if participant_id == user.id:
                continue
            try:
                self.notifier.create(
                    participant_id,
                    "reservation",
                    "New reservation",
                    f"{user.name} added you to a reservation on court {reservation['courtNumber']}",
                )
            except Exception:
                self.logger.exception(
                    "Notification to %s failed for reservation %s",
                    participant_id,
                    reservation["id"],
                )
