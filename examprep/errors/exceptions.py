"""Custom exceptions for error handling"""
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from examprep.errors.response_codes import ErrorCode, ResponseCode


class BaseHTTPException(HTTPException):
    """Base exception class for all custom HTTP exceptions.

    ``code`` identifies the failure kind at the boundary and ``extra`` carries
    a structured payload (attempts remaining, wait time, ...) rendered under
    ``errors`` in the response body.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Bad request"
    code: ResponseCode = ErrorCode.BAD_REQUEST

    def __init__(self, detail: str = None, headers: dict = None, extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.detail,
            headers=headers
        )
        self.extra = extra or {}


class BadRequestException(BaseHTTPException):
    """400 Bad Request"""
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Bad request"
    code = ErrorCode.BAD_REQUEST


class UnauthorizedException(BaseHTTPException):
    """401 Unauthorized"""
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Not authenticated"
    code = ErrorCode.UNAUTHORIZED

    def __init__(self, detail: str = None):
        super().__init__(
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenException(BaseHTTPException):
    """403 Forbidden"""
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Forbidden: Insufficient permissions"
    code = ErrorCode.FORBIDDEN


class NotFoundException(BaseHTTPException):
    """404 Not Found"""
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    code = ErrorCode.NOT_FOUND


class ConflictException(BaseHTTPException):
    """409 Conflict"""
    status_code = status.HTTP_409_CONFLICT
    detail = "Resource already exists"
    code = ErrorCode.CONFLICT


class RateLimitedException(BaseHTTPException):
    """429 Too Many Requests"""
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    detail = "Too many requests"
    code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(self, detail: str = None, wait_seconds: Optional[int] = None):
        headers = {"Retry-After": str(wait_seconds)} if wait_seconds else None
        super().__init__(detail=detail, headers=headers, extra={"wait_seconds": wait_seconds})
        self.wait_seconds = wait_seconds


# ── Domain failures ───────────────────────────────────────────────────────────

class EmailAlreadyRegisteredException(ConflictException):
    detail = "An account with this email already exists"
    code = ErrorCode.EMAIL_EXISTS


class InvalidCredentialsException(UnauthorizedException):
    detail = "Invalid email or password"
    code = ErrorCode.INVALID_CREDENTIALS


class InvalidTokenException(UnauthorizedException):
    detail = "Invalid or expired token"
    code = ErrorCode.INVALID_TOKEN


class AccountDisabledException(ForbiddenException):
    detail = "Account is disabled. Please reach out to customer service for reactivation."
    code = ErrorCode.ACCOUNT_DISABLED


class EmailNotVerifiedException(ForbiddenException):
    detail = "Please verify your email first"
    code = ErrorCode.EMAIL_NOT_VERIFIED


class ProfileIncompleteException(ForbiddenException):
    detail = "Please complete your profile first"
    code = ErrorCode.PROFILE_INCOMPLETE


class BusinessRuleException(BadRequestException):
    detail = "Request violates a business rule"
    code = ErrorCode.BUSINESS_RULE_VIOLATION


class PaymentAlreadyProcessedException(BusinessRuleException):
    detail = "Payment already processed"
    code = ErrorCode.PAYMENT_ALREADY_PROCESSED


class OTPFailureReason(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    ATTEMPTS_EXCEEDED = "ATTEMPTS_EXCEEDED"
    INVALID_CODE = "INVALID_CODE"


class OTPVerificationException(BadRequestException):
    """OTP check failed; only INVALID_CODE carries ``attempts_remaining``."""
    detail = "OTP verification failed"
    code = ErrorCode.OTP_INVALID

    def __init__(self, reason: OTPFailureReason, detail: str = None, attempts_remaining: Optional[int] = None):
        extra = {"reason": reason.value}
        if attempts_remaining is not None:
            extra["attempts_remaining"] = attempts_remaining
            detail = f"{detail or self.detail} {attempts_remaining} attempts remaining."
        super().__init__(detail=detail, extra=extra)
        self.reason = reason
        self.attempts_remaining = attempts_remaining
