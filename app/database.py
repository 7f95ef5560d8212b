# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.

Bookings on one space are serialised through a row lock on the space:
PostgreSQL takes it with SELECT ... FOR UPDATE. On SQLite, unit_of_work starts
its transaction with BEGIN IMMEDIATE so the database write lock is held before
the conflict check; plain reads begin DEFERRED and do not queue behind writers.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from app.config import settings
from app.errors import StoreTimeout
from app.utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def build_engine(database_url: str, timeout_seconds: float = settings.STORE_TIMEOUT_SECONDS):
    """Create an engine with store timeouts applied for the given backend."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout_seconds},
            echo=False,
        )

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            # Let SQLAlchemy emit BEGIN itself (see "begin" below)
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin(conn):
            mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
            conn.exec_driver_sql(f"BEGIN {mode}")

        return engine

    timeout_ms = int(timeout_seconds * 1000)
    return create_engine(
        database_url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        pool_timeout=timeout_seconds,
        connect_args={
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c lock_timeout={timeout_ms} -c statement_timeout={timeout_ms}",
        },
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


WRITE_TXN_OPTIONS = {"sqlite_begin": "IMMEDIATE"}


@contextmanager
def store_call(db: Session):
    """Surface lock waits, statement timeouts and lost connections as StoreTimeout."""
    try:
        yield db
    except OperationalError as exc:
        db.rollback()
        logger.warning(f"[STORE] Timed out or unavailable: {exc.orig}")
        raise StoreTimeout(str(exc.orig)) from exc


@contextmanager
def unit_of_work(db: Session):
    """
    Commit everything done inside the block, or nothing.
    Any exception rolls the session back; store timeouts surface as StoreTimeout.
    """
    try:
        with store_call(db):
            if not db.in_transaction():
                db.connection(execution_options=WRITE_TXN_OPTIONS)
            yield db
            db.commit()
    except BaseException:
        db.rollback()
        raise


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.parking_space import ParkingSpace     # noqa
    from app.models.booking import Booking                # noqa
    from app.models.payment import Payment                # noqa
    from app.models.notification import Notification      # noqa

    Base.metadata.create_all(bind=bind or engine)
