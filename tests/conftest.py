"""
Shared fixtures: an in-memory SQLite database per test, a record store on
top of it and a FastAPI test client wired to the same database.
"""
import os

# Configure the app BEFORE importing it so no database file is created.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from paytrack.core.dependencies import get_db
from paytrack.db.base import Base
from paytrack.db.session import build_engine
from paytrack.db.store import SqlRecordStore
from paytrack.main import app


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return SqlRecordStore(db)


@pytest.fixture
def make_client(store):
    def _make(name, monthly_amount=1000, phone=None, email=None):
        return store.insert_client(
            {
                "name": name,
                "monthly_amount": monthly_amount,
                "phone": phone,
                "email": email,
            }
        )

    return _make


@pytest.fixture
def make_payment(store):
    def _make(client, month, year, paid=True, notes=None):
        return store.insert_payment(
            {
                "client_id": client.id,
                "month": month,
                "year": year,
                "paid": paid,
                "notes": notes,
            }
        )

    return _make


@pytest.fixture
def api(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
