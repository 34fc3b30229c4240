"""One-time codes scoped to (user, purpose)."""
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Enum as SQLEnum

from examprep.db.base import Base, utcnow


class OTPType(str, Enum):
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"
    ACCOUNT_DISABLE = "ACCOUNT_DISABLE"
    ACCOUNT_DELETE = "ACCOUNT_DELETE"


class OTP(Base):
    """
    Holds a one-time 6-digit code sent to a user's email.

    Lifecycle
    ---------
    1. Issued          → row inserted (used=False); older unused rows of the
                         same (user_id, type) are marked used.
    2. Wrong code      → attempts += 1, row stays usable up to the cap.
    3. Correct code,
       expiry or cap   → used=True. The row is never touched again.

    Only a keyed HMAC-SHA256 digest of the code is stored.
    """

    __tablename__ = "otps"
    __table_args__ = (
        Index("ix_otps_user_type_used", "user_id", "type", "used"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(OTPType, name="otptype"), nullable=False)
    code_hash = Column(String(64), nullable=False)

    # Opaque data carried from issuance to verification (e.g. account-action reason)
    payload = Column(JSON, nullable=True)

    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<OTP(id={self.id}, user_id={self.user_id}, type={self.type}, "
            f"expires_at={self.expires_at}, used={self.used}, attempts={self.attempts})>"
        )
