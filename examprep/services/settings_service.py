"""Account settings: profile view, preferences, password change and support tickets"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from examprep.core.config import Settings
from examprep.errors.exceptions import BusinessRuleException, NotFoundException
from examprep.models.support_ticket import IssueType, SupportTicket
from examprep.models.user import SubscriptionStatus, User
from examprep.models.user_preferences import Theme, UserPreferences
from examprep.services.auth_service import get_password_hash, verify_password
from examprep.services.subscription_service import SubscriptionService
from examprep.services.token_service import TokenService
from examprep.utils.email import EmailSender, send_support_ticket_confirmation_email
from examprep.utils.logger import log_account_event

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, db: Session, settings: Settings, mailer: EmailSender):
        self.db = db
        self.settings = settings
        self.mailer = mailer
        self.tokens = TokenService(db, settings)
        self.subscriptions = SubscriptionService(db, settings)

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundException("User not found")
        return user

    def get_profile(self, user_id: int) -> dict:
        """Profile fields plus the live subscription, not the cached flag."""
        user = self._get_user(user_id)
        active = self.subscriptions.get_active_subscription(user_id)

        return {
            "first_name": user.first_name,
            "last_name": user.last_name,
            "middle_name": user.middle_name,
            "email": user.email,
            "phone_number": user.phone_number,
            "subscription": SubscriptionStatus.ACTIVE if active else SubscriptionStatus.INACTIVE,
            "subscription_plan": active.plan_type if active else None,
            "subscription_end_date": active.end_date if active else None,
            "account_creation": user.created_at,
            "is_verified": user.is_verified,
            "is_profile_complete": user.is_profile_complete,
        }

    # ── preferences ───────────────────────────────────────────────────────────

    def get_preferences(self, user_id: int) -> UserPreferences:
        """Created with defaults on first read."""
        prefs = self.db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()
        if prefs is None:
            prefs = UserPreferences(
                user_id=user_id,
                font_size=UserPreferences.DEFAULT_FONT_SIZE,
                theme=Theme.AUTO,
            )
            self.db.add(prefs)
            self.db.commit()
            self.db.refresh(prefs)
        return prefs

    def update_preferences(
        self,
        user_id: int,
        font_size: Optional[int] = None,
        theme: Optional[Theme] = None,
    ) -> UserPreferences:
        prefs = self.get_preferences(user_id)
        if font_size is not None:
            if not 1 <= font_size <= 5:
                raise BusinessRuleException("Font size must be between 1 and 5")
            prefs.font_size = font_size
        if theme is not None:
            prefs.theme = Theme(theme)
        self.db.commit()
        self.db.refresh(prefs)
        return prefs

    # ── password ──────────────────────────────────────────────────────────────

    def change_password(self, user_id: int, old_password: str, new_password: str) -> None:
        """
        Replace the password, refusing the current one and the last
        ``PASSWORD_HISTORY_SIZE`` previous ones. Ends every session.
        """
        user = self._get_user(user_id)
        if not verify_password(old_password, user.password_hash):
            raise BusinessRuleException("Incorrect current password")

        history: List[str] = list(user.password_history or [])
        size = self.settings.PASSWORD_HISTORY_SIZE

        if verify_password(new_password, user.password_hash):
            raise BusinessRuleException("New password must be different from current password")
        for past_hash in history:
            if verify_password(new_password, past_hash):
                raise BusinessRuleException(f"New password cannot be one of your last {size} passwords")

        user.password_history = ([user.password_hash] + history)[:size]
        user.password_hash = get_password_hash(new_password)
        self.tokens.revoke_all(user.id, commit=False)
        self.db.commit()

        log_account_event("PASSWORD CHANGED", user.id, user.email)

    # ── support ───────────────────────────────────────────────────────────────

    def create_support_ticket(
        self,
        user_id: int,
        issue_type: IssueType,
        description: str,
        attachment_url: Optional[str] = None,
    ) -> SupportTicket:
        user = self._get_user(user_id)
        ticket = SupportTicket(
            user_id=user.id,
            issue_type=issue_type,
            description=description,
            attachment_url=attachment_url or None,
        )
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)

        send_support_ticket_confirmation_email(self.mailer, user.email, ticket.ticket_number, IssueType(issue_type).value)
        logger.info(f"[Support] Ticket {ticket.ticket_number} opened by user_id={user.id}")
        return ticket

    def get_user_tickets(self, user_id: int) -> List[SupportTicket]:
        return (
            self.db.query(SupportTicket)
            .filter(SupportTicket.user_id == user_id)
            .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
            .all()
        )
