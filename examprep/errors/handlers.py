"""Error handlers for the application"""
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from slowapi.errors import RateLimitExceeded
import logging

from examprep.core.config import settings
from examprep.errors.exceptions import BaseHTTPException
from examprep.errors.response_codes import ErrorCode, error_response

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: BaseHTTPException):
    """
    Render typed domain failures as ``{success, code, message, errors?}``
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url}: {exc.detail}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code=exc.code, message=exc.detail, errors=exc.extra or None),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(f"Validation error on {request.url}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response(code=ErrorCode.VALIDATION_ERROR, errors={"fields": errors})
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    """
    Handle slowapi limiter rejections
    """
    logger.warning(f"Rate limit exceeded on {request.url.path} from {request.client.host if request.client else '-'}")

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_response(code=ErrorCode.RATE_LIMIT_EXCEEDED, errors={"limit": str(exc.detail)})
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handle SQLAlchemy database errors
    """
    logger.error(f"Database error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            code=ErrorCode.DATABASE_ERROR,
            message="An internal database error occurred. Please try again later."
        )
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle general exceptions. The raw message is only exposed outside production.
    """
    logger.error(f"Unhandled exception on {request.url}: {str(exc)}", exc_info=True)

    message = "An unexpected error occurred. Please try again later."
    if not settings.is_production:
        message = str(exc) or message

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(code=ErrorCode.INTERNAL_ERROR, message=message)
    )
