import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_DB_PATH = BASE_DIR / "test.db"

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["FRONTEND_URL"] = "http://frontend.test"
# Blank values keep a developer's .env from enabling real SMTP, Google or seeding.
for key in ("SMTP_HOST", "FROM_EMAIL", "GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "ADMIN_EMAIL", "ADMIN_PASSWORD"):
    os.environ[key] = ""

import app.main as main  # noqa: E402  (import after env vars are set)
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services import registry  # noqa: E402
from app.services.password_service import password_hasher  # noqa: E402

DEFAULT_PASSWORD = "Passw0rd!"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def outbox(monkeypatch):
    """Capture outgoing email instead of talking to SMTP."""
    sent = []

    def _send(recipient, subject, html_message):
        sent.append({"to": recipient, "subject": subject, "html": html_message})
        return True

    monkeypatch.setattr(registry.notifier, "send", _send)
    return sent


@pytest.fixture()
def client(monkeypatch, outbox):
    """Provide a TestClient with startup seeding patched out for isolation."""
    monkeypatch.setattr(main, "run_seed", lambda: None)

    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture()
def create_user(db):
    def _create(
        email: str = "user@x.com",
        password: str | None = DEFAULT_PASSWORD,
        role: str = "user",
        auth_method: str = "local",
        is_active: bool = True,
        **fields,
    ) -> User:
        user = User(
            first_name=fields.pop("first_name", "Ada"),
            last_name=fields.pop("last_name", "Lovelace"),
            email=email,
            role=role,
            auth_method=auth_method,
            is_active=is_active,
            **fields,
        )
        if password:
            user.set_password(password, password_hasher)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _create


@pytest.fixture()
def auth_headers():
    def _headers(user_or_id) -> dict:
        user_id = getattr(user_or_id, "id", user_or_id)
        return {"Authorization": f"Bearer {registry.token_issuer.issue(user_id)}"}

    return _headers
