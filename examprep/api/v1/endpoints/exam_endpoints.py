"""Exam history endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from examprep.core.dependencies import get_exam_service
from examprep.errors.response_codes import SuccessCode, success_response
from examprep.middleware.auth import require_complete_profile
from examprep.models.subscription import ExamMode
from examprep.models.user import User
from examprep.schemas.exam_schemas import ExamDetail, ExamSummary, RetakeConfig
from examprep.services.exam_service import ExamService

router = APIRouter()


@router.get("/history")
def exam_history(
    mode: Optional[ExamMode] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(require_complete_profile),
    service: ExamService = Depends(get_exam_service),
):
    """Newest first; `pages` is the page count for the given `limit`."""
    result = service.get_exam_history(current_user.id, mode, page, limit)
    return success_response(
        data={
            "exams": [ExamSummary.model_validate(e).model_dump(mode="json") for e in result["exams"]],
            "total": result["total"],
            "pages": result["pages"],
        },
        message="Exam history retrieved successfully",
    )


@router.get("/history/{exam_id}")
def exam_detail(
    exam_id: int,
    current_user: User = Depends(require_complete_profile),
    service: ExamService = Depends(get_exam_service),
):
    exam, feedback = service.get_exam_detail_with_feedback(exam_id, current_user.id)
    detail = ExamDetail.model_validate(exam).model_copy(update={"feedback": feedback})
    return success_response(data=detail.model_dump(mode="json"), message="Exam details retrieved successfully")


@router.get("/retake/{exam_id}")
def retake_exam(
    exam_id: int,
    current_user: User = Depends(require_complete_profile),
    service: ExamService = Depends(get_exam_service),
):
    """Mode and subjects needed to start the same exam again."""
    config = RetakeConfig(**service.get_retake_config(exam_id, current_user.id))
    return success_response(data=config.model_dump(mode="json"), code=SuccessCode.RETRIEVED,
                            message="Exam retake configuration retrieved")
