"""Exam history and analytics schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from examprep.models.subscription import ExamMode


class ExamSummary(BaseModel):
    """List-view projection of an exam result"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    mode: ExamMode
    score: float
    total_obtainable: float
    is_passed: bool
    subjects: List[Dict[str, Any]] = []
    duration_seconds: int
    created_at: datetime


class ExamDetail(ExamSummary):
    answers: List[Dict[str, Any]] = []
    start_time: datetime
    end_time: datetime
    feedback: Optional[str] = None


class RetakeConfig(BaseModel):
    mode: ExamMode
    subjects: List[str]


class AnalyticsResponse(BaseModel):
    total_exams_written: int
    exams_passed: int
    exams_failed: int
    performance_average: int
