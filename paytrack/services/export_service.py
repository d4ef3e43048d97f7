import csv
import io
from collections import defaultdict

from paytrack.core.constants import MONTH_NAMES
from paytrack.db.store import RecordStore


EXPORT_HEADERS = [
    "Client Name",
    "Phone",
    "Email",
    "Monthly Amount",
    "Month",
    "Year",
    "Paid",
    "Notes",
]


def export_rows(store: RecordStore) -> list[list]:
    payments_by_client = defaultdict(list)
    for payment in store.list_payments():
        payments_by_client[payment.client_id].append(payment)

    rows = []

    for client in store.list_clients():
        for payment in payments_by_client.get(client.id, []):
            rows.append([
                client.name,
                client.phone or "",
                client.email or "",
                client.monthly_amount,
                MONTH_NAMES[payment.month],
                payment.year,
                "Yes" if payment.paid else "No",
                payment.notes or "",
            ])

    return rows


def export_csv(store: RecordStore) -> str:
    buffer = io.StringIO()

    csv.writer(buffer, lineterminator="\n").writerow(EXPORT_HEADERS)

    # Text fields quoted, amounts and years left bare
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerows(export_rows(store))

    return buffer.getvalue()
