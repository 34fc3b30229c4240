"""Error handling module"""
from examprep.errors.exceptions import (
    BaseHTTPException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    RateLimitedException,
    EmailAlreadyRegisteredException,
    InvalidCredentialsException,
    InvalidTokenException,
    AccountDisabledException,
    EmailNotVerifiedException,
    ProfileIncompleteException,
    BusinessRuleException,
    PaymentAlreadyProcessedException,
    OTPFailureReason,
    OTPVerificationException,
)
from examprep.errors.response_codes import (
    SuccessCode,
    ErrorCode,
    success_response,
    error_response,
    paginated_response
)

__all__ = [
    "BaseHTTPException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "RateLimitedException",
    "EmailAlreadyRegisteredException",
    "InvalidCredentialsException",
    "InvalidTokenException",
    "AccountDisabledException",
    "EmailNotVerifiedException",
    "ProfileIncompleteException",
    "BusinessRuleException",
    "PaymentAlreadyProcessedException",
    "OTPFailureReason",
    "OTPVerificationException",
    "SuccessCode",
    "ErrorCode",
    "success_response",
    "error_response",
    "paginated_response"
]
