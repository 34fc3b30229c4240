"""Pydantic schemas for request/response validation"""
from examprep.schemas.auth_schemas import (
    RegisterRequest,
    VerifyOTPRequest,
    ResendOTPRequest,
    CompleteProfileRequest,
    LoginRequest,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserResponse,
    TokenResponse,
    AuthResponse,
    LoginResponse
)
from examprep.schemas.subscription_schemas import (
    PlanDetails,
    SubscriptionStatusResponse,
    ExamModeRequest,
    ExamModeAccess,
    SubscriptionResponse
)
from examprep.schemas.payment_schemas import (
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
    PaymentHistoryItem
)
from examprep.schemas.settings_schemas import (
    ProfileResponse,
    PreferencesResponse,
    UpdatePreferencesRequest,
    ChangePasswordRequest,
    InitiateAccountActionRequest,
    VerifyAccountActionRequest,
    CreateSupportTicketRequest,
    SupportTicketResponse
)
from examprep.schemas.exam_schemas import (
    ExamSummary,
    ExamDetail,
    RetakeConfig,
    AnalyticsResponse
)

__all__ = [
    "RegisterRequest",
    "VerifyOTPRequest",
    "ResendOTPRequest",
    "CompleteProfileRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UserResponse",
    "TokenResponse",
    "AuthResponse",
    "LoginResponse",
    "PlanDetails",
    "SubscriptionStatusResponse",
    "ExamModeRequest",
    "ExamModeAccess",
    "SubscriptionResponse",
    "PaymentInitiateRequest",
    "PaymentInitiateResponse",
    "PaymentVerifyRequest",
    "PaymentVerifyResponse",
    "PaymentHistoryItem",
    "ProfileResponse",
    "PreferencesResponse",
    "UpdatePreferencesRequest",
    "ChangePasswordRequest",
    "InitiateAccountActionRequest",
    "VerifyAccountActionRequest",
    "CreateSupportTicketRequest",
    "SupportTicketResponse",
    "ExamSummary",
    "ExamDetail",
    "RetakeConfig",
    "AnalyticsResponse"
]
