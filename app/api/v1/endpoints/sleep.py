"""
Sleep endpoints — nightly assessment, grading, and mock history.
"""

import datetime
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.sleep import (
    SleepAssessmentResponse,
    SleepEvent,
    SleepGrade,
    SleepHistoryResponse,
)
from app.scoring.history import (
    SleepHistoryConfig,
    generate_sleep_history,
    summarize_history,
)
from app.scoring.sleep_quality import (
    evaluate_sleep,
    generate_sleep_note,
    grade_label,
    mins_to_hm,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/assess",
    summary="Score one night of sleep.",
    response_model=SleepAssessmentResponse,
)
def assess_night(event: SleepEvent):
    evaluation = evaluate_sleep(event)
    if evaluation.assessment is None:
        logger.info(
            "Rejected sleep event %s -> %s: %s",
            event.sleep_start, event.wake_time, evaluation.rejection.value,
        )
        raise HTTPException(
            status_code=422,
            detail={
                "reason": evaluation.rejection.value,
                "message": "Sleep event is not scoreable",
            },
        )

    assessment = evaluation.assessment
    return SleepAssessmentResponse(
        assessment=assessment,
        duration_label=mins_to_hm(assessment.duration_min),
        context_note=generate_sleep_note(assessment),
    )


@router.get(
    "/grade",
    summary="Get the grade label for a composite score.",
    response_model=SleepGrade,
)
def get_grade(
    score: int = Query(..., ge=0, le=100, description="Composite sleep score"),
):
    return grade_label(score)


@router.get(
    "/history",
    summary="Generate a deterministic mock sleep history.",
    response_model=SleepHistoryResponse,
)
def get_history(
    days: int = Query(
        settings.HISTORY_DEFAULT_DAYS, ge=1, le=settings.HISTORY_MAX_DAYS,
        description="Number of sleep dates to generate",
    ),
    seed: int = Query(
        settings.HISTORY_DEFAULT_SEED, ge=0,
        description="Seed of the pseudo-random sequence",
    ),
    end_date: Optional[datetime.date] = Query(
        None, description="Last sleep date (defaults to today)"
    ),
):
    try:
        config = SleepHistoryConfig(days=days, seed=seed, end_date=end_date)
    except ValidationError as exc:
        logger.info("Rejected history request end_date=%s days=%s", end_date, days)
        raise HTTPException(
            status_code=422,
            detail={
                "reason": "invalid_history_window",
                "message": exc.errors(include_url=False)[0]["msg"],
            },
        ) from exc
    points = generate_sleep_history(config)
    return SleepHistoryResponse(points=points, summary=summarize_history(points))
