"""Pydantic schemas for request/response validation."""

from app.schemas.sleep import (
    SleepAssessment,
    SleepAssessmentResponse,
    SleepEvaluation,
    SleepEvent,
    SleepGrade,
    SleepHistoryPoint,
    SleepHistoryResponse,
    SleepHistorySummary,
    SleepRejection,
    SleepSubscores,
    WorstAspect,
)

__all__ = [
    "SleepAssessment",
    "SleepAssessmentResponse",
    "SleepEvaluation",
    "SleepEvent",
    "SleepGrade",
    "SleepHistoryPoint",
    "SleepHistoryResponse",
    "SleepHistorySummary",
    "SleepRejection",
    "SleepSubscores",
    "WorstAspect",
]
