"""
Client filter engine.

Resolves search, payment-state and outstanding-balance criteria into one
ordered, paginated page of clients. Each active filter needs at most one bulk
lookup from the store; the filters are then combined into a single predicate
that is evaluated once per candidate client.
"""
from datetime import date
from typing import Callable, Optional

from paytrack.core.config import settings
from paytrack.core.constants import MONTHS_PER_YEAR
from paytrack.core.errors import ValidationError
from paytrack.db.store import RecordStore
from paytrack.models.client import Client
from paytrack.schemas.client import PAID_FILTERS, ClientPage, ClientQuery, ClientResponse


class ClientFilterEngine:

    def __init__(
        self,
        store: RecordStore,
        today: Callable[[], date] = date.today,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ):
        self.store = store
        self.today = today
        self.default_page_size = (
            default_page_size if default_page_size is not None else settings.DEFAULT_PAGE_SIZE
        )
        self.max_page_size = (
            max_page_size if max_page_size is not None else settings.MAX_PAGE_SIZE
        )

    def query(self, criteria: Optional[ClientQuery] = None) -> ClientPage:
        criteria = criteria or ClientQuery()
        page, page_size = self._validate(criteria)

        candidates = self.store.list_clients(criteria.search)
        if not candidates:
            return ClientPage(clients=[], total=0, page=page, page_size=page_size)

        predicates = self._build_predicates(criteria)

        if predicates:
            matched = [
                client for client in candidates
                if all(predicate(client) for predicate in predicates)
            ]
        else:
            matched = candidates

        start = (page - 1) * page_size
        window = matched[start:start + page_size]

        return ClientPage(
            clients=[ClientResponse.model_validate(client) for client in window],
            total=len(matched),
            page=page,
            page_size=page_size,
        )

    # ---------------- VALIDATION ----------------

    def _validate(self, criteria: ClientQuery) -> tuple[int, int]:
        if criteria.month is not None and not 0 <= criteria.month < MONTHS_PER_YEAR:
            raise ValidationError("month", "Month must be between 0 and 11")

        if criteria.paid not in PAID_FILTERS:
            raise ValidationError(
                "paid", f"Paid filter must be one of: {', '.join(PAID_FILTERS)}"
            )

        if criteria.outstanding_min is not None and criteria.outstanding_min < 0:
            raise ValidationError("outstanding_min", "Outstanding threshold cannot be negative")

        if criteria.page < 1:
            raise ValidationError("page", "Page must be at least 1")

        page_size = (
            criteria.page_size
            if criteria.page_size is not None
            else self.default_page_size
        )

        if page_size < 1:
            raise ValidationError("page_size", "Page size must be at least 1")

        if page_size > self.max_page_size:
            raise ValidationError(
                "page_size", f"Page size cannot exceed {self.max_page_size}"
            )

        return criteria.page, page_size

    # ---------------- FILTERS ----------------

    def _build_predicates(self, criteria: ClientQuery) -> list[Callable[[Client], bool]]:
        predicates = []

        needs_period = criteria.paid != "any" or criteria.outstanding_min is not None
        if not needs_period:
            return predicates

        today = self.today()
        month = criteria.month if criteria.month is not None else today.month - 1
        year = criteria.year if criteria.year is not None else today.year

        if criteria.paid != "any":
            paid_ids = {
                payment.client_id
                for payment in self.store.list_period_payments(month, year)
                if payment.paid
            }
            want_paid = criteria.paid == "paid"
            predicates.append(lambda client: (client.id in paid_ids) == want_paid)

        if criteria.outstanding_min is not None:
            paid_counts = self.store.paid_counts_by_client(year)
            threshold = criteria.outstanding_min
            predicates.append(
                lambda client: remaining_obligation(
                    client, paid_counts.get(client.id, 0)
                ) >= threshold
            )

        return predicates


def remaining_obligation(client: Client, paid_count: int) -> int:
    return (MONTHS_PER_YEAR - paid_count) * client.monthly_amount
