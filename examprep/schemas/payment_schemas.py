"""Payment Pydantic schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from examprep.models.payment import PaymentMethod, PaymentStatus
from examprep.models.subscription import PlanType
from examprep.schemas.subscription_schemas import PlanDetails, SubscriptionResponse


class PaymentInitiateRequest(BaseModel):
    """Body sent by the authenticated user to start a payment."""
    plan_type: PlanType = Field(..., description="STARTER, STANDARD or ANNUAL")
    payment_method: PaymentMethod

    @field_validator('plan_type')
    @classmethod
    def validate_plan(cls, v: PlanType) -> PlanType:
        if v == PlanType.FREE:
            raise ValueError('Plan type must be STARTER, STANDARD, or ANNUAL')
        return v


class PaymentInitiateResponse(BaseModel):
    payment_reference: str
    amount: float
    plan: PlanDetails


class PaymentVerifyRequest(BaseModel):
    payment_reference: str = Field(..., min_length=1)
    payment_gateway_reference: Optional[str] = None


class PaymentHistoryItem(BaseModel):
    """Single payment record returned to the caller."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_reference: str
    payment_gateway_reference: Optional[str] = None
    plan_type: PlanType
    amount: float
    payment_method: PaymentMethod
    status: PaymentStatus
    subscription_id: Optional[int] = None
    created_at: datetime
    paid_at: Optional[datetime] = None


class PaymentVerifyResponse(BaseModel):
    subscription: SubscriptionResponse
    payment: PaymentHistoryItem
