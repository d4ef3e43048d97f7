"""
Record store used by the payment tracking services.

``RecordStore`` is the interface the services depend on; ``SqlRecordStore``
implements it on top of a SQLAlchemy session. Connection-level failures are
reported as ``StoreUnavailableError`` so callers never mistake an outage for
a missing record.
"""
import functools
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from paytrack.core.errors import StoreUnavailableError
from paytrack.models.client import Client
from paytrack.models.payment import Payment


logger = logging.getLogger(__name__)

CLIENT_FIELDS = ("name", "monthly_amount", "phone", "email")
PAYMENT_FIELDS = ("paid", "notes")


def _escape_like(term: str) -> str:
    # Search terms are literal text, not LIKE patterns
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class RecordStore(ABC):

    @abstractmethod
    def list_clients(self, search: Optional[str] = None) -> list[Client]:
        ...

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        ...

    @abstractmethod
    def insert_client(self, data: dict[str, Any]) -> Client:
        ...

    @abstractmethod
    def update_client(self, client_id: int, data: dict[str, Any]) -> Optional[Client]:
        ...

    @abstractmethod
    def delete_client(self, client_id: int) -> bool:
        ...

    @abstractmethod
    def list_payments(self, client_id: Optional[int] = None) -> list[Payment]:
        ...

    @abstractmethod
    def list_period_payments(self, month: int, year: int) -> list[Payment]:
        ...

    @abstractmethod
    def paid_counts_by_client(self, year: int) -> dict[int, int]:
        ...

    @abstractmethod
    def get_payment(self, client_id: int, month: int, year: int) -> Optional[Payment]:
        ...

    @abstractmethod
    def insert_payment(self, data: dict[str, Any]) -> Payment:
        ...

    @abstractmethod
    def update_payment(self, payment_id: int, fields: dict[str, Any]) -> Optional[Payment]:
        ...

    @abstractmethod
    def upsert_payment(
        self,
        client_id: int,
        month: int,
        year: int,
        fields: dict[str, Any],
    ) -> Payment:
        """Insert the payment for the key or update the fields of the existing one."""


def _guard(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            self.db.rollback()
            logger.error("Database unavailable during %s: %s", method.__name__, exc)
            raise StoreUnavailableError("Database not available") from exc
        except SQLAlchemyError:
            self.db.rollback()
            raise

    return wrapper


class SqlRecordStore(RecordStore):

    def __init__(self, db: Session):
        self.db = db

    # ---------------- CLIENTS ----------------

    @_guard
    def list_clients(self, search: Optional[str] = None) -> list[Client]:
        query = self.db.query(Client)

        if search and search.strip():
            pattern = f"%{_escape_like(search.strip().lower())}%"
            query = query.filter(
                or_(
                    func.lower(Client.name).like(pattern, escape="\\"),
                    func.lower(Client.phone).like(pattern, escape="\\"),
                    func.lower(Client.email).like(pattern, escape="\\"),
                )
            )

        return query.order_by(Client.name.asc(), Client.id.asc()).all()

    @_guard
    def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id == client_id).first()

    @_guard
    def insert_client(self, data: dict[str, Any]) -> Client:
        client = Client(**{key: data.get(key) for key in CLIENT_FIELDS})

        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)

        return client

    @_guard
    def update_client(self, client_id: int, data: dict[str, Any]) -> Optional[Client]:
        client = self.db.query(Client).filter(Client.id == client_id).first()
        if client is None:
            return None

        for key in CLIENT_FIELDS:
            if key in data:
                setattr(client, key, data[key])

        self.db.commit()
        self.db.refresh(client)

        return client

    @_guard
    def delete_client(self, client_id: int) -> bool:
        client = self.db.query(Client).filter(Client.id == client_id).first()
        if client is None:
            return False

        # Payments first, then the client, in one transaction
        self.db.query(Payment).filter(
            Payment.client_id == client_id
        ).delete(synchronize_session=False)
        self.db.delete(client)
        self.db.commit()

        return True

    # ---------------- PAYMENTS ----------------

    @_guard
    def list_payments(self, client_id: Optional[int] = None) -> list[Payment]:
        query = self.db.query(Payment)

        if client_id is not None:
            query = query.filter(Payment.client_id == client_id)

        return query.order_by(
            Payment.client_id.asc(),
            Payment.year.asc(),
            Payment.month.asc(),
        ).all()

    @_guard
    def list_period_payments(self, month: int, year: int) -> list[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.month == month, Payment.year == year)
            .all()
        )

    @_guard
    def paid_counts_by_client(self, year: int) -> dict[int, int]:
        rows = (
            self.db.query(
                Payment.client_id,
                func.count(Payment.id).label("paid_count"),
            )
            .filter(Payment.year == year, Payment.paid.is_(True))
            .group_by(Payment.client_id)
            .all()
        )

        return {row.client_id: row.paid_count for row in rows}

    @_guard
    def get_payment(self, client_id: int, month: int, year: int) -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .filter(
                Payment.client_id == client_id,
                Payment.month == month,
                Payment.year == year,
            )
            .first()
        )

    @_guard
    def insert_payment(self, data: dict[str, Any]) -> Payment:
        payment = Payment(
            client_id=data["client_id"],
            month=data["month"],
            year=data["year"],
            paid=data.get("paid", False),
            notes=data.get("notes"),
        )

        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)

        return payment

    @_guard
    def update_payment(self, payment_id: int, fields: dict[str, Any]) -> Optional[Payment]:
        payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
        if payment is None:
            return None

        for key in PAYMENT_FIELDS:
            if key in fields:
                setattr(payment, key, fields[key])

        self.db.commit()
        self.db.refresh(payment)

        return payment

    @_guard
    def upsert_payment(
        self,
        client_id: int,
        month: int,
        year: int,
        fields: dict[str, Any],
    ) -> Payment:
        dialect = self.db.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            self._upsert_on_conflict(dialect, client_id, month, year, fields)
        else:
            self._upsert_with_retry(client_id, month, year, fields)

        payment = self.get_payment(client_id, month, year)
        # ON CONFLICT bypasses the identity map
        self.db.refresh(payment)

        return payment

    def _upsert_on_conflict(self, dialect, client_id, month, year, fields):
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert

        statement = insert(Payment).values(
            client_id=client_id,
            month=month,
            year=year,
            paid=fields.get("paid", False),
            notes=fields.get("notes"),
        )

        updates = {
            key: getattr(statement.excluded, key)
            for key in PAYMENT_FIELDS
            if key in fields
        }

        if updates:
            statement = statement.on_conflict_do_update(
                index_elements=["client_id", "month", "year"],
                set_=updates,
            )
        else:
            statement = statement.on_conflict_do_nothing(
                index_elements=["client_id", "month", "year"],
            )

        self.db.execute(statement)
        self.db.commit()

    def _upsert_with_retry(self, client_id, month, year, fields):
        existing = self.get_payment(client_id, month, year)

        if existing is None:
            try:
                self.insert_payment(
                    {"client_id": client_id, "month": month, "year": year, **fields}
                )
                return
            except IntegrityError:
                # Lost the race: another writer created the row first
                self.db.rollback()
                existing = self.get_payment(client_id, month, year)
                if existing is None:
                    raise

        self.update_payment(existing.id, fields)
