"""API v1 router aggregation"""
from fastapi import APIRouter
from examprep.api.v1.endpoints import auth_endpoints, settings_endpoints
from examprep.api.v1.endpoints import subscription_endpoints
from examprep.api.v1.endpoints import exam_endpoints, analytics_endpoints

api_router = APIRouter()

api_router.include_router(auth_endpoints.router,         prefix="/auth",         tags=["Authentication"])
api_router.include_router(settings_endpoints.router,     prefix="/settings",     tags=["Settings"])
api_router.include_router(subscription_endpoints.router, prefix="/subscription", tags=["Subscription"])
api_router.include_router(exam_endpoints.router,         prefix="/exams",        tags=["Exams"])
api_router.include_router(analytics_endpoints.router,    prefix="/analytics",    tags=["Analytics"])
