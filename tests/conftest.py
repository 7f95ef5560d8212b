# tests/conftest.py
"""Shared fixtures: a fresh SQLite database per test and helpers to seed it."""

import os
import sys
import tempfile
import uuid
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
_TMP_DIR = tempfile.mkdtemp(prefix="parking-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}")
os.environ.setdefault("QR_SECRET", "test-qr-secret")
os.environ.setdefault("API_KEY", "")

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import sessionmaker
from app.database import build_engine, create_tables
from app.models.parking_space import ParkingSpace


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    """Naive UTC timestamp on a fixed future day."""
    return datetime(2030, 1, day, hour, minute)


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed_space(session_factory):
    """Insert a space in its own short-lived session and return its id."""
    def _seed(number=None, rate="10.00", status="available", floor=1, section="A", type="regular"):
        space_id = str(uuid.uuid4())
        session = session_factory()
        try:
            session.add(ParkingSpace(
                id=space_id,
                number=number or f"T-{space_id[:6]}",
                floor=floor, section=section, type=type, status=status,
                hourly_rate=Decimal(rate), position={"x": 0, "y": 0},
            ))
            session.commit()
        finally:
            session.close()
        return space_id
    return _seed


@pytest.fixture
def read_space(db):
    """Current status of a space as seen by the session under test."""
    def _read(space_id):
        return db.get(ParkingSpace, space_id).status
    return _read
