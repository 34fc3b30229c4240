"""Authentication service: registration, verification, login and password reset"""
import logging
from dataclasses import dataclass
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from examprep.core.config import Settings, settings as app_settings
from examprep.db.base import utcnow
from examprep.errors.exceptions import (
    AccountDisabledException,
    BusinessRuleException,
    EmailAlreadyRegisteredException,
    EmailNotVerifiedException,
    InvalidCredentialsException,
    NotFoundException,
    OTPFailureReason,
    OTPVerificationException,
)
from examprep.models.deleted_email import DeletedEmail
from examprep.models.otp import OTP, OTPType
from examprep.models.refresh_token import RefreshToken
from examprep.models.user import SubscriptionStatus, User
from examprep.services.otp_service import OTPService
from examprep.services.subscription_service import SubscriptionService
from examprep.services.token_service import AuthTokens, TempTokenPurpose, TokenService
from examprep.utils.email import EmailSender, send_otp_email, send_welcome_email
from examprep.utils.logger import log_account_event

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=app_settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a hashed password"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt"""
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class LoginResult:
    """A verified login yields either a session or a profile-completion token."""
    user: User
    tokens: Optional[AuthTokens] = None
    temp_token: Optional[str] = None

    @property
    def requires_profile_completion(self) -> bool:
        return self.tokens is None


class AuthService:
    def __init__(self, db: Session, settings: Settings, mailer: EmailSender):
        self.db = db
        self.settings = settings
        self.mailer = mailer
        self.otp = OTPService(db, settings)
        self.tokens = TokenService(db, settings)
        self.subscriptions = SubscriptionService(db, settings)

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def _get_by_id(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundException("User not found")
        return user

    def _send_otp(self, user: User, code: str, otp_type: OTPType):
        send_otp_email(self.mailer, user.email, code, otp_type.value, self.settings.OTP_EXPIRE_MINUTES)

    def _purge_unverified(self, user: User):
        """Remove an abandoned registration so the email can be claimed again."""
        self.db.query(OTP).filter(OTP.user_id == user.id).delete(synchronize_session=False)
        self.db.query(RefreshToken).filter(RefreshToken.user_id == user.id).delete(synchronize_session=False)
        self.db.delete(user)
        self.db.flush()

    # ── registration ──────────────────────────────────────────────────────────

    def register(self, email: str, password: str) -> dict:
        """
        Create an unverified account and email an EMAIL_VERIFICATION code.

        An existing unverified account for the same email is replaced. Trial
        eligibility comes from the DeletedEmail tombstone, if any.
        """
        email = normalize_email(email)
        existing = self._get_by_email(email)
        if existing:
            if existing.is_verified:
                raise EmailAlreadyRegisteredException()
            logger.info(f"[Auth] Replacing unverified registration for {email}")
            self._purge_unverified(existing)

        tombstone = self.db.query(DeletedEmail).filter(DeletedEmail.email == email).first()
        trial_consumed = bool(tombstone and tombstone.has_used_free_trial)

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            subscription_status=SubscriptionStatus.INACTIVE if trial_consumed else SubscriptionStatus.ACTIVE,
            has_used_free_trial=True,
            password_history=[],
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        code = self.otp.issue(user.id, OTPType.EMAIL_VERIFICATION)
        self._send_otp(user, code, OTPType.EMAIL_VERIFICATION)

        log_account_event("REGISTERED", user.id, user.email, trial_eligible=not trial_consumed)
        return {"email": user.email}

    def verify_email_otp(self, email: str, code: str) -> str:
        """Mark the email verified and return a profile-completion temporary token."""
        user = self._get_by_email(email)
        if not user:
            raise NotFoundException("User not found")
        if user.is_verified:
            raise BusinessRuleException("Email already verified")

        self.otp.verify_or_raise(user.id, code, OTPType.EMAIL_VERIFICATION)

        user.is_verified = True
        self.db.commit()

        log_account_event("EMAIL VERIFIED", user.id, user.email, level=logging.INFO)
        return self.tokens.create_temp_token(user, TempTokenPurpose.PROFILE_COMPLETION)

    def resend_otp(self, email: str, purpose: OTPType = OTPType.EMAIL_VERIFICATION) -> None:
        if purpose not in (OTPType.EMAIL_VERIFICATION, OTPType.PASSWORD_RESET):
            raise BusinessRuleException("OTP purpose cannot be resent")

        user = self._get_by_email(email)
        if not user:
            raise NotFoundException("User not found")
        if purpose == OTPType.EMAIL_VERIFICATION and user.is_verified:
            raise BusinessRuleException("Email already verified")

        self.otp.ensure_can_issue(user.id, purpose)
        code = self.otp.issue(user.id, purpose)
        self._send_otp(user, code, purpose)

    def complete_profile(
        self,
        user_id: int,
        first_name: str,
        last_name: str,
        phone_number: str,
        middle_name: Optional[str] = None,
    ) -> tuple:
        """Store profile fields, grant the FREE plan if eligible and open a session.

        Returns ``(AuthTokens, User)``.
        """
        user = self._get_by_id(user_id)
        if not user.is_verified:
            raise EmailNotVerifiedException()
        if user.is_disabled:
            raise AccountDisabledException()

        user.first_name = first_name
        user.last_name = last_name
        user.middle_name = middle_name or None
        user.phone_number = phone_number
        user.is_profile_complete = True
        self.db.commit()

        if user.subscription_status == SubscriptionStatus.ACTIVE:
            self.subscriptions.create_free_subscription(user.id)

        tokens = self.tokens.issue_session(user)
        self.db.refresh(user)

        send_welcome_email(self.mailer, user.email, first_name)
        log_account_event("PROFILE COMPLETED", user.id, user.email, level=logging.INFO)
        return tokens, user

    # ── sessions ──────────────────────────────────────────────────────────────

    def login(self, email: str, password: str) -> LoginResult:
        user = self._get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"[Auth] Failed login for {normalize_email(email)}")
            raise InvalidCredentialsException()

        if user.is_disabled:
            log_account_event("LOGIN BLOCKED (disabled)", user.id, user.email)
            raise AccountDisabledException()
        if not user.is_verified:
            raise EmailNotVerifiedException()

        if not user.is_profile_complete:
            temp_token = self.tokens.create_temp_token(user, TempTokenPurpose.PROFILE_COMPLETION)
            return LoginResult(user=user, temp_token=temp_token)

        user.last_login = utcnow()
        self.db.commit()
        tokens = self.tokens.issue_session(user)
        self.db.refresh(user)

        log_account_event("LOGIN", user.id, user.email)
        return LoginResult(user=user, tokens=tokens)

    def refresh_access_token(self, refresh_token: str) -> AuthTokens:
        return self.tokens.rotate(refresh_token)

    def logout(self, refresh_token: str) -> None:
        removed = self.tokens.revoke(refresh_token)
        logger.info(f"[Auth] Logout removed {removed} session(s)")

    # ── password reset ────────────────────────────────────────────────────────

    def forgot_password(self, email: str) -> None:
        """Send a PASSWORD_RESET code if the account exists.

        Unknown emails return silently; only the resend cooldown is surfaced.
        """
        user = self._get_by_email(email)
        if not user:
            logger.info(f"[Auth] Password reset requested for unknown email {normalize_email(email)}")
            return

        self.otp.ensure_can_issue(user.id, OTPType.PASSWORD_RESET)
        code = self.otp.issue(user.id, OTPType.PASSWORD_RESET)
        self._send_otp(user, code, OTPType.PASSWORD_RESET)
        log_account_event("PASSWORD RESET REQUESTED", user.id, user.email, level=logging.INFO)

    def _reset_target(self, email: str) -> User:
        user = self._get_by_email(email)
        if not user:
            raise OTPVerificationException(
                reason=OTPFailureReason.NOT_FOUND,
                detail="No valid OTP found. Please request a new one.",
            )
        return user

    def verify_reset_otp(self, email: str, code: str) -> None:
        """Pre-check a reset code without consuming it."""
        user = self._reset_target(email)
        self.otp.verify_or_raise(user.id, code, OTPType.PASSWORD_RESET, consume=False)

    def reset_password(self, email: str, code: str, new_password: str) -> None:
        user = self._reset_target(email)
        self.otp.verify_or_raise(user.id, code, OTPType.PASSWORD_RESET)

        user.password_hash = get_password_hash(new_password)
        self.tokens.revoke_all(user.id, commit=False)
        self.db.commit()

        log_account_event("PASSWORD RESET", user.id, user.email)

    def get_user_profile(self, user_id: int) -> User:
        return self._get_by_id(user_id)
