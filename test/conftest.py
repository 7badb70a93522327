# =====================================================
# test/conftest.py - Shared pytest configuration
# =====================================================
"""
Configurazione condivisa per tutti i test.

Database SQLite in memoria (StaticPool: una sola connessione
condivisa) al posto del container PostgreSQL: i models usano
tipi portabili (Uuid, JSON) e i test girano senza Docker.
"""

import sys
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to Python path for all tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from metrocal.models import BaseModel, CalibrationMethod, CalibrationCalendar, Instrument

# =====================================================
# SQLITE SHARED FIXTURE
# =====================================================

@pytest.fixture(scope="function")
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Foreign key enforcement (ON DELETE SET NULL / RESTRICT)
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    BaseModel.metadata.create_all(engine)
    yield engine
    BaseModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Clean database session for each test function"""
    TestSession = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)
    session = TestSession()
    yield session
    session.close()


# =====================================================
# SAMPLE DATA
# =====================================================

@pytest.fixture
def instrument_factory(test_db):
    """Crea strumenti: instrument_factory("SN-1", site="Lab B")"""
    def factory(serial_number, **overrides):
        data = {
            "serial_number": serial_number,
            "name": f"Instrument {serial_number}",
            "instrument_type": "caliper",
            "site": "Lab A",
        }
        data.update(overrides)
        instrument = Instrument(**data)
        test_db.add(instrument)
        test_db.commit()
        test_db.refresh(instrument)
        return instrument
    return factory


@pytest.fixture
def instruments(instrument_factory):
    """Quattro strumenti A, B, C, D senza calendario"""
    return {label: instrument_factory(f"SN-{label}") for label in ("A", "B", "C", "D")}


@pytest.fixture
def sample_method(test_db):
    method = CalibrationMethod(
        name="Caliper ISO 13385",
        description="Verification of vernier calipers",
        procedure="Gauge blocks at 5 points",
        required_equipment="Gauge block set grade 1",
        estimated_duration=45,
        instrument_type="caliper",
        recurrence_type="FIXED_INTERVAL",
        frequency_value=6,
        frequency_unit="MONTHS",
        days_of_week=[],
        tolerance_value=15,
        tolerance_unit="DAYS",
    )
    test_db.add(method)
    test_db.commit()
    test_db.refresh(method)
    return method


@pytest.fixture
def sample_calendar(test_db):
    calendar = CalibrationCalendar(
        name="Monthly on the 31st",
        recurrence_type="CALENDAR_MONTHLY",
        day_of_month=31,
        days_of_week=[],
        tolerance_value=1,
        tolerance_unit="WEEKS",
        active=True,
    )
    test_db.add(calendar)
    test_db.commit()
    test_db.refresh(calendar)
    return calendar


@pytest.fixture
def today():
    return date(2024, 6, 15)
