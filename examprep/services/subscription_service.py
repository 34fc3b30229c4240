"""Subscription / entitlement engine: plan catalog, active plan resolution,
free-trial consumption and payment-driven activation.

Payments are simulated: ``verify_and_activate_subscription`` trusts the
reference it is given instead of calling a gateway.
"""
import logging
import math
import secrets
import time
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from examprep.core.config import Settings
from examprep.db.base import utcnow
from examprep.errors.exceptions import BusinessRuleException, NotFoundException, PaymentAlreadyProcessedException
from examprep.models.payment import Payment, PaymentMethod, PaymentStatus
from examprep.models.subscription import ExamMode, PlanType, Subscription
from examprep.models.user import SubscriptionStatus, User
from examprep.schemas.subscription_schemas import PLAN_CONFIG
from examprep.utils.logger import log_account_event

logger = logging.getLogger(__name__)


def _generate_payment_reference() -> str:
    """PAY-<epoch ms>-<8 hex chars>, e.g. PAY-1718000000000-9F3A01BC"""
    return f"PAY-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def _plan_validity(plan_type: PlanType) -> str:
    if plan_type == PlanType.FREE:
        return "Lifetime"
    return f"{PLAN_CONFIG[plan_type]['duration_days']} days"


def get_plan_details(plan_type: PlanType) -> dict:
    config = PLAN_CONFIG.get(plan_type)
    if config is None:
        raise BusinessRuleException("Invalid plan type")

    modes = config["exam_modes"]
    return {
        "plan_type": plan_type,
        "name": config["name"],
        "amount": config["amount"],
        "duration_days": None if plan_type == PlanType.FREE else config["duration_days"],
        "validity": _plan_validity(plan_type),
        "exam_modes": modes,
        "features": {
            "pure_jamb": ExamMode.PURE_JAMB in modes,
            "jamb_ai": ExamMode.JAMB_AI in modes,
            "single_subject": ExamMode.SINGLE_SUBJECT in modes,
        },
    }


def get_available_plans() -> List[dict]:
    return [get_plan_details(plan_type) for plan_type in PLAN_CONFIG]


class SubscriptionService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def get_active_subscription(self, user_id: int) -> Optional[Subscription]:
        """Most recent row with ``is_active`` and ``end_date`` in the future."""
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.is_active.is_(True),
                Subscription.end_date > utcnow(),
            )
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .first()
        )

    def create_free_subscription(self, user_id: int) -> Optional[Subscription]:
        """
        Grant the FREE plan to a trial-eligible user.

        Returns the existing active subscription if there is one, and ``None``
        when the user is not eligible (denormalized status is not ACTIVE).
        """
        existing = self.get_active_subscription(user_id)
        if existing:
            return existing

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user or user.subscription_status != SubscriptionStatus.ACTIVE:
            return None

        start = utcnow()
        end = start + timedelta(days=PLAN_CONFIG[PlanType.FREE]["duration_days"])
        subscription = Subscription(
            user_id=user_id,
            plan_type=PlanType.FREE,
            amount=0,
            start_date=start,
            end_date=end,
            is_active=True,
            free_trials_used=[],
        )
        self.db.add(subscription)
        user.subscription_status = SubscriptionStatus.ACTIVE
        user.subscription_end_date = end
        self.db.commit()
        self.db.refresh(subscription)

        logger.info(f"[Subscription] FREE plan created for user_id={user_id}")
        return subscription

    def can_access_exam_mode(self, user_id: int, exam_mode: ExamMode) -> Tuple[bool, Optional[str]]:
        subscription = self.get_active_subscription(user_id)
        if subscription is None:
            return False, "No active subscription"

        config = PLAN_CONFIG[subscription.plan_type]
        if exam_mode not in config["exam_modes"]:
            return False, (
                f"{exam_mode.value} mode is not available in {config['name']}. Please upgrade your plan."
            )

        if subscription.plan_type == PlanType.FREE and exam_mode.value in (subscription.free_trials_used or []):
            return False, "Free trial for this mode has been used. Please upgrade to continue practicing."

        return True, None

    def mark_free_trial_used(self, user_id: int, exam_mode: ExamMode) -> None:
        """Record *exam_mode* in the FREE plan's used set; no-op on paid plans."""
        subscription = self.get_active_subscription(user_id)
        if subscription is None or subscription.plan_type != PlanType.FREE:
            return
        if exam_mode not in PLAN_CONFIG[PlanType.FREE]["exam_modes"]:
            return

        used = list(subscription.free_trials_used or [])
        if exam_mode.value not in used:
            # Reassign so the JSON column is flagged dirty
            subscription.free_trials_used = used + [exam_mode.value]
            self.db.commit()
            logger.info(f"[Subscription] Free trial {exam_mode.value} used by user_id={user_id}")

    def initialize_payment(self, user_id: int, plan_type: PlanType, payment_method: PaymentMethod) -> dict:
        if plan_type == PlanType.FREE:
            raise BusinessRuleException("Cannot make payment for free plan")
        config = PLAN_CONFIG.get(plan_type)
        if config is None:
            raise BusinessRuleException("Invalid plan type")

        reference = _generate_payment_reference()
        payment = Payment(
            user_id=user_id,
            amount=config["amount"],
            plan_type=plan_type,
            payment_method=payment_method,
            payment_reference=reference,
            status=PaymentStatus.PENDING,
        )
        self.db.add(payment)
        self.db.commit()

        logger.info(f"[Payment] Initialized {reference} for user_id={user_id} plan={plan_type.value}")
        return {
            "payment_reference": reference,
            "amount": config["amount"],
            "plan": get_plan_details(plan_type),
        }

    def verify_and_activate_subscription(
        self,
        payment_reference: str,
        payment_gateway_reference: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Tuple[Subscription, Payment]:
        """
        Mark the payment SUCCESS and make its plan the user's only active one.

        ``user_id`` restricts the lookup to the caller's own payments.
        A payment that is already SUCCESS is rejected and nothing is created.
        """
        query = self.db.query(Payment).filter(Payment.payment_reference == payment_reference)
        if user_id is not None:
            query = query.filter(Payment.user_id == user_id)
        payment = query.with_for_update().first()

        if payment is None:
            raise NotFoundException("Payment not found")
        if payment.status == PaymentStatus.SUCCESS:
            raise PaymentAlreadyProcessedException()

        try:
            now = utcnow()
            payment.status = PaymentStatus.SUCCESS
            payment.paid_at = now
            if payment_gateway_reference:
                payment.payment_gateway_reference = payment_gateway_reference

            self.db.query(Subscription).filter(
                Subscription.user_id == payment.user_id,
                Subscription.is_active.is_(True),
            ).update({Subscription.is_active: False}, synchronize_session=False)

            end = now + timedelta(days=PLAN_CONFIG[payment.plan_type]["duration_days"])
            subscription = Subscription(
                user_id=payment.user_id,
                plan_type=payment.plan_type,
                amount=payment.amount,
                start_date=now,
                end_date=end,
                is_active=True,
                payment_reference=payment.payment_reference,
                free_trials_used=[],
            )
            self.db.add(subscription)
            self.db.flush()

            payment.subscription_id = subscription.id

            user = self.db.query(User).filter(User.id == payment.user_id).first()
            if user:
                user.subscription_status = SubscriptionStatus.ACTIVE
                user.subscription_end_date = end

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"[Payment] Activation failed for {payment_reference}: {e}", exc_info=True)
            raise

        self.db.refresh(subscription)
        self.db.refresh(payment)
        log_account_event(
            "SUBSCRIPTION ACTIVATED", payment.user_id, user.email if user else None,
            plan=payment.plan_type.value, reference=payment_reference,
        )
        return subscription, payment

    def get_subscription_status(self, user_id: int) -> dict:
        subscription = self.get_active_subscription(user_id)
        if subscription is None:
            return {
                "status": SubscriptionStatus.INACTIVE.value,
                "current_plan": None,
                "message": "No active subscription",
            }

        config = PLAN_CONFIG[subscription.plan_type]
        is_free = subscription.plan_type == PlanType.FREE
        trials_used = list(subscription.free_trials_used or [])
        days_remaining = math.ceil((subscription.end_date - utcnow()).total_seconds() / 86400)

        return {
            "status": SubscriptionStatus.ACTIVE.value,
            "current_plan": {
                "plan_type": subscription.plan_type,
                "name": config["name"],
                "amount": subscription.amount,
                "start_date": subscription.start_date,
                "end_date": subscription.end_date,
                "days_remaining": None if is_free else days_remaining,
                "free_trials_used": trials_used,
                "free_trials_remaining": config["max_trials"] - len(trials_used) if is_free else None,
                "exam_modes": config["exam_modes"],
                "auto_renew": subscription.auto_renew,
            },
            "message": None,
        }

    def cancel_subscription(self, user_id: int, commit: bool = True) -> None:
        """Deactivate every active subscription; history is kept."""
        self.db.query(Subscription).filter(
            Subscription.user_id == user_id,
            Subscription.is_active.is_(True),
        ).update(
            {Subscription.is_active: False, Subscription.auto_renew: False},
            synchronize_session=False,
        )
        self.db.query(User).filter(User.id == user_id).update(
            {User.subscription_status: SubscriptionStatus.INACTIVE},
            synchronize_session=False,
        )
        if commit:
            self.db.commit()
            log_account_event("SUBSCRIPTION CANCELLED", user_id, level=logging.INFO)

    def get_payment_history(self, user_id: int, page: int = 1, page_size: int = 20) -> Tuple[List[Payment], int]:
        query = self.db.query(Payment).filter(Payment.user_id == user_id)
        total = query.count()
        payments = (
            query.order_by(Payment.created_at.desc(), Payment.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return payments, total
