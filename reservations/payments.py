"""Simulated payment capture and the transaction ledger rows it produces."""

from __future__ import annotations

import logging
import secrets
import string
from typing import Any, Dict, Optional

from domain.errors import ValidationError
from domain.models import CurrentUser, PaymentReceipt
from infrastructure import constants
from infrastructure.document_store import DocumentStore, Snapshot, new_id
from infrastructure.time_utils import to_iso
from tracking import t

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def payment_reference(provider: str) -> str:
    """Return a provider-prefixed reference such as ``SUMUP-7K2Q9XBA``."""

    t('reservations.payments.payment_reference')
    suffix = ''.join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(8))
    return f"{provider.upper()}-{suffix}"


def build_transaction(
    amount: float,
    *,
    reservation_id: Optional[str],
    split_payment: bool,
    provider: str,
) -> Dict[str, Any]:
    """Build one ledger row; split payments stay pending until every share is paid."""

    t('reservations.payments.build_transaction')
    return {
        "id": new_id(),
        "reservationId": reservation_id,
        "amount": amount,
        "status": (
            constants.TRANSACTION_PENDING_SPLIT
            if split_payment
            else constants.TRANSACTION_CAPTURED
        ),
        "provider": provider,
        "reference": payment_reference(provider),
        "createdAt": to_iso(),
    }


class PaymentService:
    """Records simulated provider charges in the transaction ledger."""

    def __init__(self, store: DocumentStore, *, provider: Optional[str] = None) -> None:
        t('reservations.payments.PaymentService.__init__')
        self.store = store
        self.provider = provider or store.settings.payment_provider
        self.logger = logging.getLogger('PaymentService')

    def record_payment(
        self,
        user: CurrentUser,
        amount: Any,
        *,
        reservation_id: Optional[str] = None,
        split_payment: bool = False,
    ) -> PaymentReceipt:
        """Simulate a charge and append its transaction in one commit."""

        t('reservations.payments.PaymentService.record_payment')
        try:
            value = round(float(amount), 2)
        except (TypeError, ValueError):
            raise ValidationError("Payment amount must be a number", details={"amount": amount})
        if value <= 0:
            raise ValidationError("Payment amount must be positive", details={"amount": amount})

        transaction = build_transaction(
            value,
            reservation_id=reservation_id,
            split_payment=bool(split_payment),
            provider=self.provider,
        )

        def append(document: Snapshot) -> Dict[str, Any]:
            document["transactions"].append(transaction)
            return transaction

        stored = self.store.commit(append)
        self.logger.info(
            "Payment %s recorded for user %s: %.2f (%s)",
            stored["reference"],
            user.id,
            value,
            stored["status"],
        )
        return PaymentReceipt(
            status=stored["status"],
            provider=stored["provider"],
            reference=stored["reference"],
            transaction_id=stored["id"],
            amount=value,
        )
