import os
import re
import tempfile

# Configure the app before anything under examprep is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="examprep-logs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import examprep.models  # noqa: F401
from examprep.core.config import Settings
from examprep.core.dependencies import get_db, get_mailer, get_settings
from examprep.db.base import Base
from examprep.db.session import enable_sqlite_foreign_keys
from examprep.models.user import SubscriptionStatus, User
from examprep.services.account_service import AccountActionService
from examprep.services.auth_service import AuthService, get_password_hash
from examprep.services.otp_service import OTPService
from examprep.services.settings_service import SettingsService
from examprep.services.subscription_service import SubscriptionService
from examprep.services.token_service import TokenService
from examprep.utils.email import EmailSender

DEFAULT_PASSWORD = "Passw0rdA"

_CODE_RE = re.compile(r"\b(\d{6})\b")


class FakeMailer(EmailSender):
    """Records every message instead of sending it"""

    def __init__(self):
        self.sent = []

    def send(self, to, subject, html_body, plain_body=""):
        self.sent.append({"to": to, "subject": subject, "plain": plain_body})
        return True

    def last_code(self, to=None):
        for message in reversed(self.sent):
            if to is not None and message["to"] != to:
                continue
            match = _CODE_RE.search(message["plain"])
            if match:
                return match.group(1)
        return None


class FailingMailer(EmailSender):
    """Transport that always raises, e.g. SMTP host unreachable"""

    def __init__(self):
        self.attempts = 0

    def send(self, to, subject, html_body, plain_body=""):
        self.attempts += 1
        raise ConnectionRefusedError("SMTP server unreachable")


# --- In-memory test database ---

@pytest.fixture
def engine():
    """Fresh in-memory SQLite per test, foreign keys enforced"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings():
    """Per-test settings instance; tests may override attributes on it"""
    config = Settings()
    config.SECRET_KEY = "test-secret-key-do-not-use-in-production"
    config.REFRESH_SECRET_KEY = "test-refresh-secret-do-not-use-in-production"
    return config


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def failing_mailer():
    return FailingMailer()


# --- Services ---

@pytest.fixture
def otp_service(db, test_settings):
    return OTPService(db, test_settings)


@pytest.fixture
def token_service(db, test_settings):
    return TokenService(db, test_settings)


@pytest.fixture
def auth_service(db, test_settings, mailer):
    return AuthService(db, test_settings, mailer)


@pytest.fixture
def account_service(db, test_settings, mailer):
    return AccountActionService(db, test_settings, mailer)


@pytest.fixture
def settings_service(db, test_settings, mailer):
    return SettingsService(db, test_settings, mailer)


@pytest.fixture
def subscription_service(db, test_settings):
    return SubscriptionService(db, test_settings)


# --- Sample data ---

@pytest.fixture
def make_user(db):
    """Insert a user directly; defaults to a verified, complete, trial-eligible account"""
    def _make_user(
        email="student@example.com",
        password=DEFAULT_PASSWORD,
        verified=True,
        profile_complete=True,
        disabled=False,
        subscription_status=SubscriptionStatus.ACTIVE,
    ):
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            first_name="Ada" if profile_complete else None,
            last_name="Obi" if profile_complete else None,
            phone_number="08031234567" if profile_complete else None,
            is_verified=verified,
            is_profile_complete=profile_complete,
            is_disabled=disabled,
            subscription_status=subscription_status,
            has_used_free_trial=True,
            password_history=[],
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


# --- HTTP client ---

@pytest.fixture
def client(db, test_settings, mailer):
    """TestClient bound to the test session; startup hooks are not run"""
    from examprep.main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(token_service):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {token_service.create_access_token(user)}"}

    return _auth_headers
