"""OTP engine: issue, throttle and verify one-time codes per (user, purpose)"""
import hashlib
import hmac
import logging
import math
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from examprep.core.config import Settings
from examprep.db.base import utcnow
from examprep.errors.exceptions import OTPFailureReason, OTPVerificationException, RateLimitedException
from examprep.models.otp import OTP, OTPType

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    OTPFailureReason.NOT_FOUND: "No valid OTP found. Please request a new one.",
    OTPFailureReason.EXPIRED: "OTP has expired. Please request a new one.",
    OTPFailureReason.ATTEMPTS_EXCEEDED: "Maximum verification attempts exceeded. Please request a new OTP.",
    OTPFailureReason.INVALID_CODE: "Invalid OTP.",
}


@dataclass
class OTPVerification:
    valid: bool
    reason: Optional[OTPFailureReason] = None
    attempts_remaining: Optional[int] = None
    otp: Optional[OTP] = None

    @property
    def message(self) -> str:
        return "OTP verified" if self.valid else _FAILURE_MESSAGES[self.reason]


@dataclass
class OTPCooldown:
    allowed: bool
    wait_seconds: Optional[int] = None


def generate_otp_code() -> str:
    """Uniform 6-digit code in [100000, 999999]"""
    return str(100000 + secrets.randbelow(900000))


def hash_otp(code: str, secret_key: str) -> str:
    """HMAC-SHA256 keyed with the signing secret"""
    return hmac.new(secret_key.encode("utf-8"), code.encode("utf-8"), hashlib.sha256).hexdigest()


class OTPService:
    """Stores only an HMAC-SHA256 digest of each code; the plaintext is returned
    once from :meth:`issue` for delivery."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def _latest_unused(self, user_id: int, otp_type: OTPType) -> Optional[OTP]:
        return (
            self.db.query(OTP)
            .filter(OTP.user_id == user_id, OTP.type == otp_type, OTP.used.is_(False))
            .order_by(OTP.created_at.desc(), OTP.id.desc())
            .first()
        )

    def issue(self, user_id: int, otp_type: OTPType, payload: Optional[dict] = None) -> str:
        """Invalidate unused codes of this purpose, then store a fresh one."""
        self.db.query(OTP).filter(
            OTP.user_id == user_id,
            OTP.type == otp_type,
            OTP.used.is_(False),
        ).update({OTP.used: True}, synchronize_session=False)

        code = generate_otp_code()
        otp = OTP(
            user_id=user_id,
            type=otp_type,
            code_hash=hash_otp(code, self.settings.SECRET_KEY),
            payload=payload,
            expires_at=utcnow() + timedelta(minutes=self.settings.OTP_EXPIRE_MINUTES),
        )
        self.db.add(otp)
        self.db.commit()

        logger.info(f"[OTP] Issued {otp_type.value} code for user_id={user_id}")
        return code

    def verify(self, user_id: int, code: str, otp_type: OTPType, consume: bool = True) -> OTPVerification:
        """
        Check *code* against the most recent unused OTP of this purpose.

        Expiry and the attempt cap burn the row. A mismatch counts an attempt
        and keeps it alive. With ``consume=False`` a match leaves the row
        usable, so the same code can be verified again by a later step.
        """
        otp = self._latest_unused(user_id, otp_type)
        if otp is None:
            return OTPVerification(False, OTPFailureReason.NOT_FOUND)

        if utcnow() > otp.expires_at:
            otp.used = True
            self.db.commit()
            return OTPVerification(False, OTPFailureReason.EXPIRED)

        max_attempts = self.settings.OTP_MAX_ATTEMPTS
        if otp.attempts >= max_attempts:
            otp.used = True
            self.db.commit()
            return OTPVerification(False, OTPFailureReason.ATTEMPTS_EXCEEDED)

        if not hmac.compare_digest(otp.code_hash, hash_otp(code, self.settings.SECRET_KEY)):
            otp.attempts += 1
            self.db.commit()
            remaining = max(max_attempts - otp.attempts, 0)
            logger.info(f"[OTP] Wrong {otp_type.value} code for user_id={user_id}, {remaining} attempts left")
            return OTPVerification(False, OTPFailureReason.INVALID_CODE, attempts_remaining=remaining)

        if consume:
            otp.used = True
            self.db.commit()
        return OTPVerification(True, otp=otp)

    def verify_or_raise(self, user_id: int, code: str, otp_type: OTPType, consume: bool = True) -> OTP:
        result = self.verify(user_id, code, otp_type, consume=consume)
        if not result.valid:
            raise OTPVerificationException(
                reason=result.reason,
                detail=result.message,
                attempts_remaining=result.attempts_remaining,
            )
        return result.otp

    def can_issue_again(self, user_id: int, otp_type: OTPType) -> OTPCooldown:
        """Cooldown runs from the latest issuance, used or not."""
        latest = (
            self.db.query(OTP)
            .filter(OTP.user_id == user_id, OTP.type == otp_type)
            .order_by(OTP.created_at.desc(), OTP.id.desc())
            .first()
        )
        if latest is None:
            return OTPCooldown(True)

        cooldown = self.settings.OTP_RESEND_COOLDOWN_SECONDS
        elapsed = (utcnow() - latest.created_at).total_seconds()
        if elapsed >= cooldown:
            return OTPCooldown(True)
        return OTPCooldown(False, wait_seconds=max(math.ceil(cooldown - elapsed), 1))

    def ensure_can_issue(self, user_id: int, otp_type: OTPType):
        cooldown = self.can_issue_again(user_id, otp_type)
        if not cooldown.allowed:
            raise RateLimitedException(
                detail=f"Please wait {cooldown.wait_seconds} seconds before requesting a new OTP",
                wait_seconds=cooldown.wait_seconds,
            )
