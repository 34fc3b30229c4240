"""Subscription Pydantic schemas and the static plan catalog"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from examprep.models.subscription import ExamMode, PlanType


PLAN_CONFIG: Dict[PlanType, dict] = {
    PlanType.FREE: {
        "name": "Free Plan",
        "amount": 0,
        "duration_days": 999999,  # effectively unbounded
        "exam_modes": [ExamMode.PURE_JAMB, ExamMode.JAMB_AI],
        "max_trials": 2,  # one trial per mode
    },
    PlanType.STARTER: {
        "name": "Starter Plan",
        "amount": 500,
        "duration_days": 30,
        "exam_modes": [ExamMode.PURE_JAMB, ExamMode.JAMB_AI],
        "max_trials": None,
    },
    PlanType.STANDARD: {
        "name": "Standard Plan",
        "amount": 1000,
        "duration_days": 30,
        "exam_modes": [ExamMode.PURE_JAMB, ExamMode.JAMB_AI, ExamMode.SINGLE_SUBJECT],
        "max_trials": None,
    },
    PlanType.ANNUAL: {
        "name": "Annual Plan",
        "amount": 10000,
        "duration_days": 365,
        "exam_modes": [ExamMode.PURE_JAMB, ExamMode.JAMB_AI, ExamMode.SINGLE_SUBJECT],
        "max_trials": None,
    },
}


class PlanFeatures(BaseModel):
    pure_jamb: bool
    jamb_ai: bool
    single_subject: bool


class PlanDetails(BaseModel):
    plan_type: PlanType
    name: str
    amount: float
    duration_days: Optional[int] = None
    validity: str
    exam_modes: List[ExamMode]
    features: PlanFeatures


class CurrentPlan(BaseModel):
    plan_type: PlanType
    name: str
    amount: float
    start_date: datetime
    end_date: datetime
    days_remaining: Optional[int] = None
    free_trials_used: List[ExamMode] = []
    free_trials_remaining: Optional[int] = None
    exam_modes: List[ExamMode]
    auto_renew: bool = False


class SubscriptionStatusResponse(BaseModel):
    """Current entitlement for the authenticated user."""
    status: str
    current_plan: Optional[CurrentPlan] = None
    message: Optional[str] = None


class ExamModeRequest(BaseModel):
    exam_mode: ExamMode


class ExamModeAccess(BaseModel):
    can_access: bool
    reason: Optional[str] = None


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plan_type: PlanType
    amount: float
    start_date: datetime
    end_date: datetime
    is_active: bool
    auto_renew: bool
    free_trials_used: List[ExamMode] = Field(default_factory=list)
    payment_reference: Optional[str] = None
    created_at: datetime
