"""
Shared fixtures: an in-memory SQLite record store, row factories, a
recording mailer and an authenticated API client.
"""

import os

# Configure the service before any healthtrack module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ.pop("SMTP_HOST", None)

from collections.abc import Iterator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from healthtrack import models
from healthtrack.auth import create_access_token
from healthtrack.database import Base, get_db
from healthtrack.email_service import EmailDeliveryError
from healthtrack.main import app


class RecordingMailer:
    """Stands in for EmailService; fails for any address in `fail_for`."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send_email(self, to: str, subject: str, html: str) -> str:
        if to in self.fail_for:
            raise EmailDeliveryError(f"Email delivery to {to} failed")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"<{len(self.sent)}@test>"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(reminder_time: int = 20, name: str = None, email: str = None) -> models.User:
        counter["n"] += 1
        user = models.User(
            email=email or f"user{counter['n']}@healthtracker.test",
            name=name or f"User {counter['n']}",
            reminder_time=reminder_time,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_medicine(db):
    def _make(user: models.User, name: str = "Aspirin", time: str = "08:00", is_active: bool = True, **fields):
        medicine = models.Medicine(user_id=user.id, name=name, time=time, is_active=is_active, **fields)
        db.add(medicine)
        db.commit()
        db.refresh(medicine)
        return medicine

    return _make


@pytest.fixture
def make_doctor(db):
    def _make(user: models.User, next_appointment: datetime = None, name: str = "Dr. Rivera", **fields):
        doctor = models.Doctor(user_id=user.id, name=name, next_appointment=next_appointment, **fields)
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    return _make


@pytest.fixture
def make_health_log(db):
    def _make(user: models.User, log_date: datetime, **vitals):
        log = models.HealthLog(user_id=user.id, log_date=log_date, **vitals)
        db.add(log)
        db.commit()
        return log

    return _make


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: models.User) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
