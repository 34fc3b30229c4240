"""
Production-ready HTTP Response Codes and Messages
Centralized response handling for consistent API responses
"""
from typing import Any, Dict, Optional
from fastapi import status


class ResponseCode:
    """HTTP Response Code Container"""
    def __init__(self, code: int, message: str, status_code: int):
        self.code = code
        self.message = message
        self.status_code = status_code


class SuccessCode:
    """Success Response Codes (2xx)"""

    # 200 - Success
    OK = ResponseCode(
        code=200,
        message="Request processed successfully",
        status_code=status.HTTP_200_OK
    )

    RETRIEVED = ResponseCode(
        code=2001,
        message="Data retrieved successfully",
        status_code=status.HTTP_200_OK
    )

    UPDATED = ResponseCode(
        code=2002,
        message="Resource updated successfully",
        status_code=status.HTTP_200_OK
    )

    DELETED = ResponseCode(
        code=2003,
        message="Resource deleted successfully",
        status_code=status.HTTP_200_OK
    )

    OTP_SENT = ResponseCode(
        code=2004,
        message="OTP sent successfully. Please check your email.",
        status_code=status.HTTP_200_OK
    )

    OTP_VERIFIED = ResponseCode(
        code=2005,
        message="OTP verified successfully",
        status_code=status.HTTP_200_OK
    )

    LOGIN_SUCCESS = ResponseCode(
        code=2006,
        message="Login successful",
        status_code=status.HTTP_200_OK
    )

    PROFILE_INCOMPLETE = ResponseCode(
        code=2007,
        message="Please complete your profile",
        status_code=status.HTTP_200_OK
    )

    # 201 - Created
    USER_REGISTERED = ResponseCode(
        code=2011,
        message="Registration successful. Please check your email for the OTP code.",
        status_code=status.HTTP_201_CREATED
    )

    TICKET_CREATED = ResponseCode(
        code=2012,
        message="Support ticket created successfully",
        status_code=status.HTTP_201_CREATED
    )


class ErrorCode:
    """Error Response Codes (4xx, 5xx)"""

    # 400 - Bad Request
    BAD_REQUEST = ResponseCode(
        code=400,
        message="Bad request",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    BUSINESS_RULE_VIOLATION = ResponseCode(
        code=4001,
        message="Request violates a business rule",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    OTP_INVALID = ResponseCode(
        code=4002,
        message="OTP verification failed",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    PAYMENT_ALREADY_PROCESSED = ResponseCode(
        code=4003,
        message="Payment already processed",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    # 401 - Unauthorized
    UNAUTHORIZED = ResponseCode(
        code=401,
        message="Authentication required",
        status_code=status.HTTP_401_UNAUTHORIZED
    )

    INVALID_CREDENTIALS = ResponseCode(
        code=4011,
        message="Invalid email or password",
        status_code=status.HTTP_401_UNAUTHORIZED
    )

    INVALID_TOKEN = ResponseCode(
        code=4012,
        message="Invalid or expired token",
        status_code=status.HTTP_401_UNAUTHORIZED
    )

    # 403 - Forbidden
    FORBIDDEN = ResponseCode(
        code=403,
        message="Access forbidden",
        status_code=status.HTTP_403_FORBIDDEN
    )

    ACCOUNT_DISABLED = ResponseCode(
        code=4031,
        message="Account is disabled. Please reach out to customer service for reactivation.",
        status_code=status.HTTP_403_FORBIDDEN
    )

    EMAIL_NOT_VERIFIED = ResponseCode(
        code=4032,
        message="Please verify your email first",
        status_code=status.HTTP_403_FORBIDDEN
    )

    PROFILE_INCOMPLETE = ResponseCode(
        code=4033,
        message="Please complete your profile first",
        status_code=status.HTTP_403_FORBIDDEN
    )

    # 404 - Not Found
    NOT_FOUND = ResponseCode(
        code=404,
        message="Resource not found",
        status_code=status.HTTP_404_NOT_FOUND
    )

    # 409 - Conflict
    CONFLICT = ResponseCode(
        code=409,
        message="Resource conflict",
        status_code=status.HTTP_409_CONFLICT
    )

    EMAIL_EXISTS = ResponseCode(
        code=4091,
        message="An account with this email already exists",
        status_code=status.HTTP_409_CONFLICT
    )

    # 422 - Validation Error
    VALIDATION_ERROR = ResponseCode(
        code=422,
        message="Validation error",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
    )

    # 429 - Too Many Requests
    RATE_LIMIT_EXCEEDED = ResponseCode(
        code=429,
        message="Too many requests. Please try again later",
        status_code=status.HTTP_429_TOO_MANY_REQUESTS
    )

    # 500 - Internal Server Error
    INTERNAL_ERROR = ResponseCode(
        code=500,
        message="Internal server error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    DATABASE_ERROR = ResponseCode(
        code=5001,
        message="Database error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def success_response(
    data: Any = None,
    code: ResponseCode = SuccessCode.OK,
    message: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a standardized success response

    Args:
        data: Response payload
        code: ResponseCode object
        message: Optional custom message

    Returns:
        Standardized success response dictionary
    """
    return {
        "success": True,
        "code": code.code,
        "message": message or code.message,
        "data": data
    }


def error_response(
    code: ResponseCode = ErrorCode.INTERNAL_ERROR,
    message: Optional[str] = None,
    errors: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response

    Args:
        code: ResponseCode object
        message: Optional custom message
        errors: Optional detailed error information

    Returns:
        Standardized error response dictionary
    """
    response = {
        "success": False,
        "code": code.code,
        "message": message or code.message
    }

    if errors:
        response["errors"] = errors

    return response


def paginated_response(
    data: list,
    total: int,
    page: int,
    page_size: int,
    code: ResponseCode = SuccessCode.RETRIEVED,
    message: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a standardized paginated response

    Args:
        data: List of items
        total: Total number of items
        page: Current page number
        page_size: Items per page
        code: ResponseCode object
        message: Optional custom message

    Returns:
        Standardized paginated response
    """
    total_pages = (total + page_size - 1) // page_size

    return {
        "success": True,
        "code": code.code,
        "message": message or code.message,
        "data": data,
        "pagination": {
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1
        }
    }
