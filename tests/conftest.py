"""Shared test fixtures."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_now
from app.db.base import get_db
from app.db.init_db import init_db
from app.db.models.appointment import Appointment
from app.main import app
from tests.utils.dates import NOW
from tests.utils.factories import seed_salon


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def salon(db):
    return seed_salon(db)


@pytest.fixture
def book(db, salon):
    """Insert an appointment directly, bypassing validation."""
    def _book(start, duration=60, status="scheduled", professional_id=None):
        appointment = Appointment(
            organization_id=salon.organization_id,
            professional_id=professional_id or salon.professional_id,
            service_id=salon.service_id,
            client_id=salon.client_id,
            scheduled_at=start,
            duration_minutes=duration,
            price=80.0,
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
    return _book
