"""
Shared fixtures.

Tests run against an in-memory SQLite database. The Razorpay client and the
email sender are replaced with in-process fakes, and time is pinned with a
``FixedClock`` so date-based rules are deterministic.
"""

from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.clock import FixedClock, get_clock
from src.config import settings
from src.database import Base, get_db
from src.main import app
from src.notifications.service import BookingNotificationService, get_notification_service
from src.payments.gateway import PaymentGateway, get_payment_gateway
from tests.factories import (
    NOW, ADMIN_KEY, GATEWAY_KEY_ID, GATEWAY_SECRET, OPS_EMAIL,
    FakeRazorpayClient, RecordingSender
)

@pytest.fixture(scope="function")
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

@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)

@pytest.fixture
def razorpay_client() -> FakeRazorpayClient:
    return FakeRazorpayClient()

@pytest.fixture
def gateway(razorpay_client) -> PaymentGateway:
    return PaymentGateway(
        key_id=GATEWAY_KEY_ID,
        key_secret=GATEWAY_SECRET,
        currency="INR",
        timeout=5.0,
        client=razorpay_client
    )

@pytest.fixture
def email_sender() -> RecordingSender:
    return RecordingSender()

@pytest.fixture
def notifier(email_sender) -> BookingNotificationService:
    return BookingNotificationService(email_sender, admin_email=OPS_EMAIL, enabled=True)

@pytest.fixture
def admin_headers(monkeypatch) -> Dict[str, str]:
    monkeypatch.setattr(settings, "ADMIN_SECRET_KEY", ADMIN_KEY)
    return {"X-Admin-Key": ADMIN_KEY}

@pytest.fixture
def client(db, gateway, notifier, clock):
    """Test client wired to the test database and the fakes"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notification_service] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock

    # No context manager: the lifespan (real database, cleanup task) is not started
    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
    test_client.close()

