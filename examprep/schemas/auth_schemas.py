"""Authentication and user schemas"""
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from examprep.models.otp import OTPType
from examprep.models.user import SubscriptionStatus

# Nigerian mobile number, optional +234 / 0 prefix
PHONE_REGEX = re.compile(r"^(\+234|0)?[789]\d{9}$")
NAME_REGEX = re.compile(r"^[a-zA-Z\s-]*$")
OTP_REGEX = r"^\d{6}$"


def validate_password_strength(v: str) -> str:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit"""
    if len(v) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not any(char.isdigit() for char in v):
        raise ValueError('Password must contain at least one digit')
    if not any(char.isupper() for char in v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not any(char.islower() for char in v):
        raise ValueError('Password must contain at least one lowercase letter')
    return v


class EmailNormalized(BaseModel):
    """Lower-cases and strips the email field"""
    email: EmailStr

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class RegisterRequest(EmailNormalized):
    password: str = Field(..., min_length=8, max_length=100)
    confirm_password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode='after')
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self


class VerifyOTPRequest(EmailNormalized):
    otp: str = Field(..., pattern=OTP_REGEX, description="6-digit code from the email")


class ResendOTPRequest(EmailNormalized):
    purpose: OTPType = OTPType.EMAIL_VERIFICATION

    @field_validator('purpose')
    @classmethod
    def validate_purpose(cls, v: OTPType) -> OTPType:
        if v not in (OTPType.EMAIL_VERIFICATION, OTPType.PASSWORD_RESET):
            raise ValueError('Purpose must be EMAIL_VERIFICATION or PASSWORD_RESET')
        return v


class CompleteProfileRequest(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    middle_name: Optional[str] = Field(None, max_length=50)
    phone_number: str

    @field_validator('first_name', 'last_name', 'middle_name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not NAME_REGEX.match(v):
            raise ValueError('Names can only contain letters, spaces, and hyphens')
        return v or None

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = v.strip()
        if not PHONE_REGEX.match(v):
            raise ValueError('Invalid Nigerian phone number (e.g., 08012345678 or +2348012345678)')
        return v


class LoginRequest(EmailNormalized):
    """Schema for login request"""
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(EmailNormalized):
    pass


class ResetPasswordRequest(VerifyOTPRequest):
    new_password: str = Field(..., min_length=8, max_length=100)
    confirm_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode='after')
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self


class UserResponse(BaseModel):
    """Schema for user response"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    phone_number: Optional[str] = None
    is_verified: bool
    is_profile_complete: bool
    subscription_status: SubscriptionStatus
    subscription_end_date: Optional[datetime] = None
    has_used_free_trial: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenResponse):
    user: UserResponse


class LoginResponse(BaseModel):
    """Either a session (``access_token``/``refresh_token``) or a
    profile-completion temporary token, never both."""
    requires_profile_completion: bool = False
    temp_token: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    user: UserResponse
