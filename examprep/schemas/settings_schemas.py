"""Account settings schemas"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator, model_validator

from examprep.models.subscription import PlanType
from examprep.models.support_ticket import IssueType, TicketStatus
from examprep.models.user import SubscriptionStatus
from examprep.models.user_preferences import Theme
from examprep.schemas.auth_schemas import OTP_REGEX, validate_password_strength


class AccountActionReason(str, Enum):
    NO_LONGER_NEED = "NO_LONGER_NEED"
    FOUND_ALTERNATIVE = "FOUND_ALTERNATIVE"
    PRIVACY_CONCERNS = "PRIVACY_CONCERNS"
    TOO_EXPENSIVE = "TOO_EXPENSIVE"
    TECHNICAL_ISSUES = "TECHNICAL_ISSUES"
    POOR_EXPERIENCE = "POOR_EXPERIENCE"
    TEMPORARY_BREAK = "TEMPORARY_BREAK"
    OTHER = "OTHER"


class ProfileResponse(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    email: str
    phone_number: Optional[str] = None
    subscription: SubscriptionStatus
    subscription_plan: Optional[PlanType] = None
    subscription_end_date: Optional[datetime] = None
    account_creation: datetime
    is_verified: bool
    is_profile_complete: bool


class PreferencesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    font_size: int
    theme: Theme


class UpdatePreferencesRequest(BaseModel):
    """Font size 1-5 maps to 12px..20px on the client."""
    font_size: Optional[int] = Field(None, ge=1, le=5)
    theme: Optional[Theme] = None

    @model_validator(mode='after')
    def at_least_one(self):
        if self.font_size is None and self.theme is None:
            raise ValueError('At least one preference must be provided')
        return self


class ChangePasswordRequest(BaseModel):
    """Schema for changing password"""
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=100)
    confirm_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode='after')
    def check_passwords(self):
        if self.new_password != self.confirm_password:
            raise ValueError('Passwords do not match')
        if self.old_password == self.new_password:
            raise ValueError('New password must be different from current password')
        return self


class InitiateAccountActionRequest(BaseModel):
    reason: AccountActionReason


class VerifyAccountActionRequest(BaseModel):
    otp: str = Field(..., pattern=OTP_REGEX)
    reason: Optional[str] = Field(None, max_length=500)


class CreateSupportTicketRequest(BaseModel):
    issue_type: IssueType
    description: str = Field(..., min_length=10, max_length=2000)
    attachment_url: Optional[HttpUrl] = None

    @field_validator('attachment_url', mode='before')
    @classmethod
    def empty_url_is_none(cls, v):
        return v or None


class SupportTicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str
    issue_type: IssueType
    description: str
    attachment_url: Optional[str] = None
    status: TicketStatus
    created_at: datetime
