"""Main FastAPI application"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
import logging

from examprep.core.config import settings
from examprep.core.limiter import limiter
from examprep.utils.logger import setup_file_logging
from examprep.api.v1.api import api_router
from examprep.db.init_db import init_db
from examprep.errors.exceptions import BaseHTTPException
from examprep.errors.handlers import (
    app_exception_handler,
    validation_exception_handler,
    rate_limit_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)
from examprep.errors.response_codes import success_response

setup_file_logging(settings.LOG_LEVEL.upper(), settings.LOG_DIR)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Exam preparation backend: OTP-verified accounts, JWT sessions, subscriptions and exam history",
    version=settings.PROJECT_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)


def custom_openapi():
    """Describe the bearer scheme: access tokens everywhere, temp token for complete-profile"""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=app.description,
        routes=app.routes,
    )

    schemes = openapi_schema.get("components", {}).get("securitySchemes", {})
    if "OAuth2PasswordBearer" in schemes:
        schemes["OAuth2PasswordBearer"]["description"] = (
            "Paste the `access_token` from **/auth/login**. "
            "**/auth/complete-profile** expects the `temp_token` instead."
        )

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL] if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BaseHTTPException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/", tags=["Health"])
def root():
    return success_response(data={"name": settings.PROJECT_NAME, "version": settings.PROJECT_VERSION, "docs": "/docs"})


@app.get("/health", tags=["Health"])
def health():
    return success_response(data={"status": "ok", "environment": settings.ENVIRONMENT})


@app.on_event("startup")
async def startup_event():
    """Initialize database and log application startup"""
    try:
        init_db()
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialization failed, but API is running")


@app.on_event("shutdown")
async def shutdown_event():
    """Log application shutdown"""
    logger.warning(f"{settings.PROJECT_NAME} SHUTDOWN")
