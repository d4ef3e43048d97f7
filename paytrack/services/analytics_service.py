from collections import defaultdict
from datetime import date

from paytrack.core.constants import MONTHS_PER_YEAR
from paytrack.db.store import RecordStore
from paytrack.schemas.stats import StatsResponse


class StatisticsAggregator:

    def __init__(self, store: RecordStore):
        self.store = store

    def compute_stats(self, as_of: date) -> StatsResponse:
        current_year = as_of.year
        current_month = as_of.month - 1

        clients = self.store.list_clients()

        # Paid months of the current year, per client
        paid_months: dict[int, set[int]] = defaultdict(set)
        for payment in self.store.list_payments():
            if payment.paid and payment.year == current_year:
                paid_months[payment.client_id].add(payment.month)

        total_expected = 0
        total_paid = 0
        overdue_count = 0

        for client in clients:
            months = paid_months.get(client.id, set())

            total_expected += client.monthly_amount * MONTHS_PER_YEAR
            total_paid += len(months) * client.monthly_amount

            settled = sum(1 for month in months if month <= current_month)
            overdue_count += (current_month + 1) - settled

        return StatsResponse(
            total_clients=len(clients),
            total_expected=total_expected,
            total_paid=total_paid,
            outstanding=total_expected - total_paid,
            overdue_count=overdue_count,
        )
