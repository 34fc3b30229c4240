from datetime import timedelta

import pytest

from examprep.db.base import utcnow
from examprep.errors.exceptions import BusinessRuleException, OTPVerificationException, RateLimitedException
from examprep.models.deleted_email import DeletedEmail
from examprep.models.exam_result import ExamResult
from examprep.models.otp import OTP, OTPType
from examprep.models.payment import Payment, PaymentMethod
from examprep.models.refresh_token import RefreshToken
from examprep.models.subscription import ExamMode, PlanType, Subscription
from examprep.models.support_ticket import IssueType, SupportTicket
from examprep.models.user import SubscriptionStatus, User
from examprep.models.user_preferences import UserPreferences


def _seed_owned_rows(db, subscription_service, settings_service, user):
    """One row in every table a user owns"""
    subscription_service.create_free_subscription(user.id)
    subscription_service.initialize_payment(user.id, PlanType.STARTER, PaymentMethod.CARD)
    settings_service.get_preferences(user.id)
    settings_service.create_support_ticket(user.id, IssueType.TECHNICAL, "The timer froze mid exam")
    now = utcnow()
    db.add(ExamResult(
        user_id=user.id, mode=ExamMode.PURE_JAMB, score=280, total_obtainable=400, is_passed=True,
        subjects=[{"subject": "English"}], answers=[], start_time=now - timedelta(hours=2),
        end_time=now, duration_seconds=7200,
    ))
    db.commit()


class TestDisableAccount:
    """initiate_disable / complete_disable"""

    def test_initiate_stores_reason_and_emails_code(self, db, account_service, make_user, mailer):
        user = make_user()
        account_service.initiate_disable(user.id, "TEMPORARY_BREAK")

        otp = db.query(OTP).filter(OTP.user_id == user.id, OTP.type == OTPType.ACCOUNT_DISABLE).one()
        assert otp.payload == {"reason": "TEMPORARY_BREAK"}
        assert mailer.last_code(user.email) is not None

    def test_initiate_twice_is_throttled(self, account_service, make_user):
        user = make_user()
        account_service.initiate_disable(user.id, "OTHER")
        with pytest.raises(RateLimitedException):
            account_service.initiate_disable(user.id, "OTHER")

    def test_complete_disable(self, db, account_service, subscription_service, token_service, make_user, mailer):
        user = make_user()
        subscription_service.create_free_subscription(user.id)
        token_service.issue_session(user)
        account_service.initiate_disable(user.id, "TOO_EXPENSIVE")

        account_service.complete_disable(user.id, mailer.last_code(user.email))

        db.refresh(user)
        assert user.is_disabled is True
        assert user.disabled_at is not None
        assert user.disable_reason == "TOO_EXPENSIVE"
        assert user.subscription_status == SubscriptionStatus.INACTIVE
        assert subscription_service.get_active_subscription(user.id) is None
        assert db.query(RefreshToken).filter(RefreshToken.user_id == user.id).count() == 0

    def test_reason_at_completion_overrides_stored_one(self, db, account_service, make_user, mailer):
        user = make_user()
        account_service.initiate_disable(user.id, "OTHER")
        account_service.complete_disable(user.id, mailer.last_code(user.email), reason="Exams are over")

        db.refresh(user)
        assert user.disable_reason == "Exams are over"

    def test_wrong_code_changes_nothing(self, db, account_service, make_user, mailer):
        user = make_user()
        account_service.initiate_disable(user.id, "OTHER")
        code = mailer.last_code(user.email)
        wrong = "999999" if code != "999999" else "100000"

        with pytest.raises(OTPVerificationException):
            account_service.complete_disable(user.id, wrong)
        db.refresh(user)
        assert user.is_disabled is False

    def test_already_disabled(self, account_service, make_user):
        user = make_user(disabled=True)
        with pytest.raises(BusinessRuleException):
            account_service.initiate_disable(user.id, "OTHER")


class TestDeleteAccount:
    """initiate_delete / complete_delete"""

    def test_delete_removes_every_owned_row(
        self, db, account_service, subscription_service, settings_service, token_service, make_user, mailer
    ):
        user = make_user()
        keeper = make_user(email="keeper@example.com")
        _seed_owned_rows(db, subscription_service, settings_service, user)
        _seed_owned_rows(db, subscription_service, settings_service, keeper)
        token_service.issue_session(user)
        user_id = user.id

        account_service.initiate_delete(user_id, "PRIVACY_CONCERNS")
        account_service.complete_delete(user_id, mailer.last_code(user.email))
        db.expire_all()

        assert db.query(User).filter(User.id == user_id).count() == 0
        for model in (OTP, RefreshToken, UserPreferences, SupportTicket, Subscription, Payment, ExamResult):
            assert db.query(model).filter(model.user_id == user_id).count() == 0, model.__name__
        for model in (UserPreferences, SupportTicket, Subscription, Payment, ExamResult):
            assert db.query(model).filter(model.user_id == keeper.id).count() == 1, model.__name__

        tombstone = db.query(DeletedEmail).filter(DeletedEmail.email == "student@example.com").one()
        assert tombstone.has_used_free_trial is True
        assert tombstone.delete_reason == "PRIVACY_CONCERNS"

    def test_deleted_email_can_register_without_trial(self, db, account_service, auth_service, make_user, mailer):
        user = make_user()
        account_service.initiate_delete(user.id, "OTHER")
        account_service.complete_delete(user.id, mailer.last_code(user.email))

        auth_service.register("student@example.com", "Passw0rdA")
        again = db.query(User).filter(User.email == "student@example.com").one()
        assert again.subscription_status == SubscriptionStatus.INACTIVE

    def test_repeat_deletion_updates_single_tombstone(self, db, account_service, make_user, mailer):
        for reason in ("OTHER", "POOR_EXPERIENCE"):
            user = make_user()
            account_service.initiate_delete(user.id, reason)
            account_service.complete_delete(user.id, mailer.last_code(user.email))

        tombstones = db.query(DeletedEmail).filter(DeletedEmail.email == "student@example.com").all()
        assert len(tombstones) == 1
        assert tombstones[0].delete_reason == "POOR_EXPERIENCE"
        assert tombstones[0].has_used_free_trial is True

    def test_wrong_code_deletes_nothing(self, db, account_service, make_user, mailer):
        user = make_user()
        account_service.initiate_delete(user.id, "OTHER")
        code = mailer.last_code(user.email)
        wrong = "999999" if code != "999999" else "100000"

        with pytest.raises(OTPVerificationException):
            account_service.complete_delete(user.id, wrong)
        assert db.query(User).filter(User.id == user.id).count() == 1
        assert db.query(DeletedEmail).count() == 0
