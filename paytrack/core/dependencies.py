from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from paytrack.db.session import SessionLocal
from paytrack.db.store import RecordStore, SqlRecordStore
from paytrack.services.analytics_service import StatisticsAggregator
from paytrack.services.client_filter_service import ClientFilterEngine
from paytrack.services.client_service import ClientService
from paytrack.services.payment_service import PaymentToggle


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return SqlRecordStore(db)


def get_filter_engine(store: RecordStore = Depends(get_store)) -> ClientFilterEngine:
    return ClientFilterEngine(store)


def get_client_service(store: RecordStore = Depends(get_store)) -> ClientService:
    return ClientService(store)


def get_payment_toggle(store: RecordStore = Depends(get_store)) -> PaymentToggle:
    return PaymentToggle(store)


def get_stats_aggregator(store: RecordStore = Depends(get_store)) -> StatisticsAggregator:
    return StatisticsAggregator(store)
