"""Subscription and payment endpoints"""
from fastapi import APIRouter, Depends, Query
import logging

from examprep.core.dependencies import get_subscription_service
from examprep.errors.response_codes import SuccessCode, paginated_response, success_response
from examprep.middleware.auth import require_complete_profile
from examprep.models.user import User
from examprep.schemas.payment_schemas import (
    PaymentHistoryItem,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from examprep.schemas.subscription_schemas import (
    ExamModeAccess,
    ExamModeRequest,
    PlanDetails,
    SubscriptionResponse,
    SubscriptionStatusResponse,
)
from examprep.services.subscription_service import SubscriptionService, get_available_plans

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/plans")
def list_plans():
    """
    ## Plan catalog

    **Role:** Public.

    | Plan     | Price | Validity | Modes                               |
    |----------|-------|----------|-------------------------------------|
    | FREE     | 0     | Lifetime | PURE_JAMB, JAMB_AI (one trial each) |
    | STARTER  | 500   | 30 days  | PURE_JAMB, JAMB_AI                  |
    | STANDARD | 1000  | 30 days  | all modes                           |
    | ANNUAL   | 10000 | 365 days | all modes                           |
    """
    plans = [PlanDetails(**p).model_dump(mode="json") for p in get_available_plans()]
    return success_response(data=plans, code=SuccessCode.RETRIEVED)


@router.get("/current")
def current_subscription(
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    status_ = SubscriptionStatusResponse(**service.get_subscription_status(current_user.id))
    return success_response(data=status_.model_dump(mode="json"), code=SuccessCode.RETRIEVED)


@router.post("/initialize-payment")
def initialize_payment(
    body: PaymentInitiateRequest,
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    ## Start a plan purchase

    Creates a PENDING payment and returns its `payment_reference`. Payments
    are simulated: confirm with **POST /subscription/verify-payment**.
    """
    result = service.initialize_payment(current_user.id, body.plan_type, body.payment_method)
    return success_response(
        data=PaymentInitiateResponse(**result).model_dump(mode="json"),
        message="Payment initialized",
    )


@router.post("/verify-payment")
def verify_payment(
    body: PaymentVerifyRequest,
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    ## Confirm a payment and activate its plan

    Replaces any current subscription. A reference that was already
    confirmed returns 400.
    """
    subscription, payment = service.verify_and_activate_subscription(
        body.payment_reference,
        body.payment_gateway_reference,
        user_id=current_user.id,
    )
    data = PaymentVerifyResponse(
        subscription=SubscriptionResponse.model_validate(subscription),
        payment=PaymentHistoryItem.model_validate(payment),
    )
    return success_response(data=data.model_dump(mode="json"), message="Subscription activated successfully")


@router.post("/check-access")
def check_access(
    body: ExamModeRequest,
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    can_access, reason = service.can_access_exam_mode(current_user.id, body.exam_mode)
    return success_response(data=ExamModeAccess(can_access=can_access, reason=reason).model_dump())


@router.post("/use-trial")
def use_trial(
    body: ExamModeRequest,
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Records the free trial for `exam_mode`; no effect on paid plans."""
    service.mark_free_trial_used(current_user.id, body.exam_mode)
    return success_response(message="Free trial recorded")


@router.post("/cancel")
def cancel(
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    service.cancel_subscription(current_user.id)
    return success_response(message="Subscription cancelled")


@router.get("/payments")
def payment_history(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_complete_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    payments, total = service.get_payment_history(current_user.id, page, page_size)
    return paginated_response(
        data=[PaymentHistoryItem.model_validate(p).model_dump(mode="json") for p in payments],
        total=total,
        page=page,
        page_size=page_size,
    )
