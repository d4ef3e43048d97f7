import logging
from typing import NamedTuple, Optional

from paytrack.core.constants import MAX_YEAR, MIN_YEAR, MONTHS_PER_YEAR
from paytrack.core.errors import NotFoundError, ValidationError
from paytrack.db.store import RecordStore
from paytrack.models.payment import Payment


logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self):
        return "UNSET"


# Passed as ``notes`` when the caller did not mention notes at all
UNSET = _Unset()


class ToggleResult(NamedTuple):
    payment: Payment
    created: bool


def _normalize_notes(notes):
    if notes is UNSET:
        return UNSET
    if notes is None:
        return None
    return notes or None


class PaymentToggle:

    def __init__(self, store: RecordStore):
        self.store = store

    def set_payment_state(
        self,
        client_id: int,
        month: int,
        year: int,
        paid: bool,
        notes=UNSET,
    ) -> ToggleResult:
        """
        Set the paid flag for one client/month/year, creating the payment
        record the first time the period is touched.

        ``notes`` is tri-state: ``UNSET`` keeps whatever is stored, ``None``
        or an empty string clears it, any other string (whitespace included)
        replaces it as given.
        """
        if not 0 <= month < MONTHS_PER_YEAR:
            raise ValidationError("month", "Month must be between 0 and 11")

        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValidationError("year", f"Year must be between {MIN_YEAR} and {MAX_YEAR}")

        if self.store.get_client(client_id) is None:
            raise NotFoundError("Client", client_id)

        fields = {"paid": bool(paid)}

        notes = _normalize_notes(notes)
        if notes is not UNSET:
            fields["notes"] = notes

        existing = self.store.get_payment(client_id, month, year)
        payment = self.store.upsert_payment(client_id, month, year, fields)

        logger.info(
            "Payment %s for client %s %02d/%s set to %s",
            "created" if existing is None else "updated",
            client_id,
            month + 1,
            year,
            "paid" if payment.paid else "unpaid",
        )

        return ToggleResult(payment=payment, created=existing is None)

    def list_payments(self, client_id: Optional[int] = None) -> list[Payment]:
        return self.store.list_payments(client_id)
