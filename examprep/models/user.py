"""User model with verification, profile and subscription state"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Enum as SQLEnum
from enum import Enum
from examprep.db.base import Base, utcnow


class SubscriptionStatus(str, Enum):
    """Denormalized subscription status cached on the user row"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class User(Base):
    """
    Registered account.

    Auth progress: unverified -> verified (profile incomplete) -> active.
    ``is_disabled`` is orthogonal and blocks login once set.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    middle_name = Column(String(100), nullable=True)
    phone_number = Column(String(20), nullable=True)

    is_verified = Column(Boolean, default=False, nullable=False)
    is_profile_complete = Column(Boolean, default=False, nullable=False)

    is_disabled = Column(Boolean, default=False, nullable=False)
    disabled_at = Column(DateTime, nullable=True)
    disable_reason = Column(String(500), nullable=True)

    subscription_status = Column(
        SQLEnum(SubscriptionStatus, name="subscriptionstatus"),
        nullable=False,
        default=SubscriptionStatus.INACTIVE,
    )
    subscription_end_date = Column(DateTime, nullable=True)
    has_used_free_trial = Column(Boolean, default=False, nullable=False)

    # Previous password hashes, most recent first
    password_history = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', verified={self.is_verified})>"

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)
