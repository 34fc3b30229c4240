"""Analytics endpoints"""
from fastapi import APIRouter, Depends

from examprep.core.dependencies import get_analytics_service
from examprep.errors.response_codes import SuccessCode, success_response
from examprep.middleware.auth import require_complete_profile
from examprep.models.user import User
from examprep.schemas.exam_schemas import AnalyticsResponse
from examprep.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/dashboard")
def dashboard(
    current_user: User = Depends(require_complete_profile),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    ## Dashboard analytics

    `performance_average` is the mean percentage over passed exams only.
    """
    analytics = AnalyticsResponse(**service.get_user_analytics(current_user.id))
    return success_response(data=analytics.model_dump(), code=SuccessCode.RETRIEVED)
