import re
from datetime import timedelta

import pytest

from examprep.db.base import utcnow
from examprep.errors.exceptions import BusinessRuleException, NotFoundException, PaymentAlreadyProcessedException
from examprep.models.payment import Payment, PaymentMethod, PaymentStatus
from examprep.models.subscription import ExamMode, PlanType, Subscription
from examprep.models.user import SubscriptionStatus
from examprep.services.subscription_service import get_available_plans, get_plan_details


def _activate(service, user_id, plan_type=PlanType.STANDARD):
    reference = service.initialize_payment(user_id, plan_type, PaymentMethod.CARD)["payment_reference"]
    return service.verify_and_activate_subscription(reference, "GW-123")


class TestPlanCatalog:
    """Static plan definitions"""

    def test_all_plans_listed(self):
        plans = get_available_plans()
        assert [p["plan_type"] for p in plans] == [PlanType.FREE, PlanType.STARTER, PlanType.STANDARD, PlanType.ANNUAL]

    def test_free_plan_details(self):
        free = get_plan_details(PlanType.FREE)
        assert free["amount"] == 0
        assert free["validity"] == "Lifetime"
        assert free["duration_days"] is None
        assert free["features"] == {"pure_jamb": True, "jamb_ai": True, "single_subject": False}

    def test_annual_plan_details(self):
        annual = get_plan_details(PlanType.ANNUAL)
        assert annual["amount"] == 10000
        assert annual["validity"] == "365 days"
        assert annual["features"]["single_subject"] is True


class TestFreeSubscription:
    """FREE grant and trial consumption"""

    def test_create_free_subscription(self, subscription_service, make_user):
        user = make_user()
        subscription = subscription_service.create_free_subscription(user.id)

        assert subscription.plan_type == PlanType.FREE
        assert subscription.amount == 0
        assert subscription.free_trials_used == []

    def test_create_is_idempotent(self, db, subscription_service, make_user):
        user = make_user()
        first = subscription_service.create_free_subscription(user.id)
        second = subscription_service.create_free_subscription(user.id)
        assert first.id == second.id
        assert db.query(Subscription).filter(Subscription.user_id == user.id).count() == 1

    def test_ineligible_user(self, subscription_service, make_user):
        user = make_user(subscription_status=SubscriptionStatus.INACTIVE)
        assert subscription_service.create_free_subscription(user.id) is None

    def test_each_mode_has_one_trial(self, subscription_service, make_user):
        user = make_user()
        subscription_service.create_free_subscription(user.id)

        assert subscription_service.can_access_exam_mode(user.id, ExamMode.PURE_JAMB) == (True, None)
        subscription_service.mark_free_trial_used(user.id, ExamMode.PURE_JAMB)
        subscription_service.mark_free_trial_used(user.id, ExamMode.PURE_JAMB)

        allowed, reason = subscription_service.can_access_exam_mode(user.id, ExamMode.PURE_JAMB)
        assert allowed is False
        assert "Free trial" in reason
        assert subscription_service.can_access_exam_mode(user.id, ExamMode.JAMB_AI)[0] is True
        assert subscription_service.get_active_subscription(user.id).free_trials_used == ["PURE_JAMB"]

    def test_trial_mark_outside_plan_is_ignored(self, subscription_service, make_user):
        user = make_user()
        subscription_service.create_free_subscription(user.id)

        subscription_service.mark_free_trial_used(user.id, ExamMode.SINGLE_SUBJECT)

        assert subscription_service.get_active_subscription(user.id).free_trials_used == []
        plan = subscription_service.get_subscription_status(user.id)["current_plan"]
        assert plan["free_trials_remaining"] == 2

    def test_mode_outside_plan(self, subscription_service, make_user):
        user = make_user()
        subscription_service.create_free_subscription(user.id)

        allowed, reason = subscription_service.can_access_exam_mode(user.id, ExamMode.SINGLE_SUBJECT)
        assert allowed is False
        assert "upgrade" in reason

    def test_no_subscription(self, subscription_service, make_user):
        user = make_user()
        assert subscription_service.can_access_exam_mode(user.id, ExamMode.PURE_JAMB) == (False, "No active subscription")

    def test_expired_subscription_is_not_active(self, db, subscription_service, make_user):
        user = make_user()
        subscription = subscription_service.create_free_subscription(user.id)
        subscription.end_date = utcnow() - timedelta(seconds=1)
        db.commit()

        assert subscription_service.get_active_subscription(user.id) is None


class TestPayments:
    """Simulated payment lifecycle"""

    def test_initialize_payment(self, db, subscription_service, make_user):
        user = make_user()
        result = subscription_service.initialize_payment(user.id, PlanType.STARTER, PaymentMethod.TRANSFER)

        assert re.fullmatch(r"PAY-\d+-[0-9A-F]{8}", result["payment_reference"])
        assert result["amount"] == 500
        payment = db.query(Payment).filter(Payment.payment_reference == result["payment_reference"]).one()
        assert payment.status == PaymentStatus.PENDING

    def test_free_plan_cannot_be_bought(self, subscription_service, make_user):
        user = make_user()
        with pytest.raises(BusinessRuleException):
            subscription_service.initialize_payment(user.id, PlanType.FREE, PaymentMethod.CARD)

    def test_activation_replaces_current_plan(self, db, subscription_service, make_user):
        user = make_user()
        subscription_service.create_free_subscription(user.id)

        subscription, payment = _activate(subscription_service, user.id)

        assert payment.status == PaymentStatus.SUCCESS
        assert payment.paid_at is not None
        assert payment.subscription_id == subscription.id
        assert payment.payment_gateway_reference == "GW-123"
        active = db.query(Subscription).filter(Subscription.user_id == user.id, Subscription.is_active.is_(True)).all()
        assert [s.id for s in active] == [subscription.id]
        assert (subscription.end_date - subscription.start_date).days == 30
        db.refresh(user)
        assert user.subscription_status == SubscriptionStatus.ACTIVE
        assert subscription_service.can_access_exam_mode(user.id, ExamMode.SINGLE_SUBJECT) == (True, None)

    def test_paid_plan_ignores_trial_marks(self, subscription_service, make_user):
        user = make_user()
        _activate(subscription_service, user.id, PlanType.STARTER)

        subscription_service.mark_free_trial_used(user.id, ExamMode.PURE_JAMB)
        assert subscription_service.can_access_exam_mode(user.id, ExamMode.PURE_JAMB) == (True, None)

    def test_double_verification_rejected(self, db, subscription_service, make_user):
        user = make_user()
        subscription, payment = _activate(subscription_service, user.id)

        with pytest.raises(PaymentAlreadyProcessedException):
            subscription_service.verify_and_activate_subscription(payment.payment_reference)
        assert db.query(Subscription).filter(Subscription.user_id == user.id).count() == 1

    def test_unknown_reference(self, subscription_service):
        with pytest.raises(NotFoundException):
            subscription_service.verify_and_activate_subscription("PAY-0-DEADBEEF")

    def test_other_users_payment_is_not_found(self, subscription_service, make_user):
        owner = make_user()
        intruder = make_user(email="intruder@example.com")
        reference = subscription_service.initialize_payment(owner.id, PlanType.STARTER, PaymentMethod.CARD)["payment_reference"]

        with pytest.raises(NotFoundException):
            subscription_service.verify_and_activate_subscription(reference, user_id=intruder.id)

    def test_payment_history_paginated_newest_first(self, subscription_service, make_user):
        user = make_user()
        references = [
            subscription_service.initialize_payment(user.id, PlanType.STARTER, PaymentMethod.CARD)["payment_reference"]
            for _ in range(3)
        ]

        page, total = subscription_service.get_payment_history(user.id, page=1, page_size=2)
        assert total == 3
        assert [p.payment_reference for p in page] == [references[2], references[1]]


class TestStatusAndCancel:
    """Status summary and cancellation"""

    def test_status_without_subscription(self, subscription_service, make_user):
        user = make_user()
        status = subscription_service.get_subscription_status(user.id)
        assert status["status"] == "INACTIVE"
        assert status["current_plan"] is None

    def test_free_status_counts_trials(self, subscription_service, make_user):
        user = make_user()
        subscription_service.create_free_subscription(user.id)
        subscription_service.mark_free_trial_used(user.id, ExamMode.JAMB_AI)

        plan = subscription_service.get_subscription_status(user.id)["current_plan"]
        assert plan["free_trials_remaining"] == 1
        assert plan["days_remaining"] is None

    def test_paid_status_counts_days(self, subscription_service, make_user):
        user = make_user()
        _activate(subscription_service, user.id, PlanType.ANNUAL)

        plan = subscription_service.get_subscription_status(user.id)["current_plan"]
        assert plan["days_remaining"] == 365
        assert plan["free_trials_remaining"] is None

    def test_cancel_keeps_history(self, db, subscription_service, make_user):
        user = make_user()
        subscription_service.create_free_subscription(user.id)

        subscription_service.cancel_subscription(user.id)

        assert subscription_service.get_active_subscription(user.id) is None
        assert db.query(Subscription).filter(Subscription.user_id == user.id).count() == 1
        db.refresh(user)
        assert user.subscription_status == SubscriptionStatus.INACTIVE
