from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from paytrack.core.config import settings


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def build_engine(database_url: str, **kwargs):
    is_sqlite = database_url.startswith("sqlite")

    connect_args = dict(kwargs.pop("connect_args", {}))
    if is_sqlite:
        connect_args.setdefault("check_same_thread", False)

    engine = create_engine(database_url, connect_args=connect_args, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            # SQLite leaves foreign keys (and so ON DELETE CASCADE) off by default
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

            # The built-in lower() only folds ASCII letters
            dbapi_connection.create_function("lower", 1, _unicode_lower)

    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
