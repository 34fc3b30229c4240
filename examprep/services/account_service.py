"""Account action engine: OTP-confirmed disable and delete flows"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from examprep.core.config import Settings
from examprep.db.base import utcnow
from examprep.errors.exceptions import BusinessRuleException, NotFoundException
from examprep.models.deleted_email import DeletedEmail
from examprep.models.otp import OTP, OTPType
from examprep.models.user import SubscriptionStatus, User
from examprep.models.user_preferences import UserPreferences
from examprep.services.otp_service import OTPService
from examprep.services.subscription_service import SubscriptionService
from examprep.services.token_service import TokenService
from examprep.utils.email import EmailSender, send_account_action_otp_email
from examprep.utils.logger import log_account_event

logger = logging.getLogger(__name__)


class AccountActionService:
    """
    Two-phase flows. ``initiate_*`` emails a code and keeps the chosen reason
    in the OTP payload; ``complete_*`` checks the code and applies the change.
    A reason passed to ``complete_*`` overrides the stored one.
    """

    def __init__(self, db: Session, settings: Settings, mailer: EmailSender):
        self.db = db
        self.settings = settings
        self.mailer = mailer
        self.otp = OTPService(db, settings)
        self.tokens = TokenService(db, settings)
        self.subscriptions = SubscriptionService(db, settings)

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundException("User not found")
        return user

    def _initiate(self, user_id: int, reason: Optional[str], otp_type: OTPType, action: str) -> None:
        user = self._get_user(user_id)
        if user.is_disabled and otp_type == OTPType.ACCOUNT_DISABLE:
            raise BusinessRuleException("Account is already disabled")

        self.otp.ensure_can_issue(user.id, otp_type)
        code = self.otp.issue(user.id, otp_type, payload={"reason": reason} if reason else None)
        send_account_action_otp_email(self.mailer, user.email, code, action, self.settings.OTP_EXPIRE_MINUTES)
        log_account_event(f"ACCOUNT {action.upper()} REQUESTED", user.id, user.email, level=logging.INFO)

    @staticmethod
    def _resolve_reason(otp: OTP, reason: Optional[str]) -> Optional[str]:
        if reason:
            return reason
        return (otp.payload or {}).get("reason")

    # ── disable ───────────────────────────────────────────────────────────────

    def initiate_disable(self, user_id: int, reason: Optional[str] = None) -> None:
        self._initiate(user_id, reason, OTPType.ACCOUNT_DISABLE, "disable")

    def complete_disable(self, user_id: int, code: str, reason: Optional[str] = None) -> User:
        """Disable the account, void entitlements and end every session."""
        user = self._get_user(user_id)
        otp = self.otp.verify_or_raise(user.id, code, OTPType.ACCOUNT_DISABLE)
        disable_reason = self._resolve_reason(otp, reason)

        user.is_disabled = True
        user.disabled_at = utcnow()
        user.disable_reason = disable_reason
        user.subscription_status = SubscriptionStatus.INACTIVE
        self.db.flush()

        self.subscriptions.cancel_subscription(user.id, commit=False)
        self.tokens.revoke_all(user.id, commit=False)
        self.db.commit()
        self.db.refresh(user)

        log_account_event("ACCOUNT DISABLED", user.id, user.email, reason=disable_reason or "-")
        return user

    # ── delete ────────────────────────────────────────────────────────────────

    def initiate_delete(self, user_id: int, reason: Optional[str] = None) -> None:
        self._initiate(user_id, reason, OTPType.ACCOUNT_DELETE, "delete")

    def complete_delete(self, user_id: int, code: str, reason: Optional[str] = None) -> None:
        """
        Tombstone the email, then remove the user and everything it owns.

        The tombstone is committed before any deletion so a failure later on
        cannot lose the trial history.
        """
        user = self._get_user(user_id)
        otp = self.otp.verify_or_raise(user.id, code, OTPType.ACCOUNT_DELETE)
        delete_reason = self._resolve_reason(otp, reason)
        email, used_trial = user.email, bool(user.has_used_free_trial)

        tombstone = self.db.query(DeletedEmail).filter(DeletedEmail.email == email).first()
        if tombstone:
            # Same email deleted before: the trial flag only ever goes from False to True
            tombstone.has_used_free_trial = tombstone.has_used_free_trial or used_trial
            tombstone.delete_reason = delete_reason
            tombstone.deleted_at = utcnow()
        else:
            self.db.add(DeletedEmail(email=email, has_used_free_trial=used_trial, delete_reason=delete_reason))
        self.db.commit()

        try:
            self.db.query(UserPreferences).filter(UserPreferences.user_id == user_id).delete(synchronize_session=False)
            self.tokens.revoke_all(user_id, commit=False)
            self.db.query(OTP).filter(OTP.user_id == user_id).delete(synchronize_session=False)
            # Subscriptions, payments, tickets and exam results go with the FK cascade
            self.db.delete(user)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"[Account] Delete failed for user_id={user_id}: {e}", exc_info=True)
            raise

        log_account_event("ACCOUNT DELETED", user_id, email, reason=delete_reason or "-")
