"""
Pytest configuration and fixtures for the auth API.
Environment is pinned before the app is imported because settings are read
at import time.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key-for-edulearn-auth-suite-0123456789"
os.environ["LOG_FILE"] = os.path.join(tempfile.mkdtemp(prefix="edulearn-logs-"), "logs.txt")
os.environ["FRONTEND_URL"] = "http://frontend.test"
for _key in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS"):
    os.environ[_key] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.main import app  # noqa: E402
from app.core.dependencies import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.services import account_service  # noqa: E402
from app.utils.email import DeliveryStatus  # noqa: E402
from tests.helpers import API, auth_header, register  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session():
    """Fresh schema per test; the same session is handed to the app."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class Outbox:
    """Records every email the account flows try to send."""

    def __init__(self):
        self.messages = []
        self.status = DeliveryStatus.SENT

    def _record(self, kind):
        def sender(to, *args):
            self.messages.append((kind, to, args))
            return self.status
        return sender

    def of_kind(self, kind, to=None):
        return [m for m in self.messages if m[0] == kind and (to is None or m[1] == to)]

    def last_otp(self, to):
        return self.of_kind("otp", to)[-1][2][0]

    def last_reset_token(self, to):
        return self.of_kind("reset", to)[-1][2][0]


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    box = Outbox()
    monkeypatch.setattr(account_service, "send_otp_email", box._record("otp"))
    monkeypatch.setattr(account_service, "send_welcome_email", box._record("welcome"))
    monkeypatch.setattr(account_service, "send_password_reset_email", box._record("reset"))
    return box


@pytest.fixture
def registered(client, outbox):
    """An unverified account: returns (email, token)."""
    response = register(client)
    assert response.status_code == 201
    return "ann@edulearn.io", response.json()["token"]


@pytest.fixture
def verified(client, outbox, registered):
    """A verified account: returns (email, token) with the post-verification token."""
    email, token = registered
    response = client.post(f"{API}/verify-otp", json={"otp": outbox.last_otp(email)}, headers=auth_header(token))
    assert response.status_code == 200
    return email, response.json()["token"]
