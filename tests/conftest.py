import os
from unittest.mock import Mock

import pytest

# Must be set before the application settings are imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-clinic-api"
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_api.main import app
from clinic_api.core.database import Base, get_db
from clinic_api.services.notifications import NotificationService, get_notification_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

PASSWORD = "longenough1"


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sms_gateway():
    """Stand-in SMS gateway recording every send() call."""
    return Mock()


@pytest.fixture
def notifications(sms_gateway):
    service = NotificationService(sms_gateway, max_workers=1)
    app.dependency_overrides[get_notification_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_notification_service, None)
    service.shutdown()


@pytest.fixture
def client(test_db, notifications):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


def register(client, email, role=None, full_name="Test User", phone="+15550001111", password=PASSWORD):
    payload = {"fullName": full_name, "email": email, "password": password, "phone": phone}
    if role is not None:
        payload["role"] = role
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email, password=PASSWORD):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def make_user(client):
    """Register a user and return (user, auth headers)."""
    def _make_user(email, role=None, **kwargs):
        user = register(client, email, role=role, **kwargs)
        return user, login(client, email, password=kwargs.get("password", PASSWORD))
    return _make_user


@pytest.fixture
def client_user(make_user):
    return make_user("alice@clinic.com", role="client", full_name="Alice Patient")


@pytest.fixture
def other_client_user(make_user):
    return make_user("bob@clinic.com", role="client", full_name="Bob Patient")


@pytest.fixture
def dentist_user(make_user):
    return make_user("dr.smile@clinic.com", role="dentist", full_name="Dr Smile")


@pytest.fixture
def staff_user(make_user):
    return make_user("desk@clinic.com", role="staff", full_name="Front Desk")


def book(client, headers, start="2024-07-01T08:00:00Z", end="2024-07-01T08:30:00Z", service="Cleaning"):
    response = client.post(
        "/api/appointments",
        json={"startTime": start, "endTime": end, "service": service},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
