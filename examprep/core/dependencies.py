"""FastAPI dependencies"""
from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from examprep.core.config import Settings, settings
from examprep.db.session import SessionLocal
from examprep.services.account_service import AccountActionService
from examprep.services.analytics_service import AnalyticsService
from examprep.services.auth_service import AuthService
from examprep.services.exam_service import ExamService
from examprep.services.settings_service import SettingsService
from examprep.services.subscription_service import SubscriptionService
from examprep.services.token_service import TokenService
from examprep.utils.email import EmailSender, build_email_sender


def get_db() -> Generator:
    """
    Database session dependency
    Yields a database session and ensures it's closed after use
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_settings() -> Settings:
    return settings


@lru_cache
def _default_mailer() -> EmailSender:
    return build_email_sender(settings)


def get_mailer() -> EmailSender:
    return _default_mailer()


# ── service factories ─────────────────────────────────────────────────────────

def get_token_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
) -> TokenService:
    return TokenService(db, config)


def get_auth_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
    mailer: EmailSender = Depends(get_mailer),
) -> AuthService:
    return AuthService(db, config, mailer)


def get_account_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
    mailer: EmailSender = Depends(get_mailer),
) -> AccountActionService:
    return AccountActionService(db, config, mailer)


def get_settings_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
    mailer: EmailSender = Depends(get_mailer),
) -> SettingsService:
    return SettingsService(db, config, mailer)


def get_subscription_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
) -> SubscriptionService:
    return SubscriptionService(db, config)


def get_exam_service(db: Session = Depends(get_db)) -> ExamService:
    return ExamService(db)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)
