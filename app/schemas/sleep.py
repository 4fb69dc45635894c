"""
Sleep quality schemas.

A night of sleep is described by its start instant, its wake instant and
the number of times the sleeper woke up during the night.  The scorer turns
it into a 0-100 composite made of four sub-scores:

    duration    (max 40)  — total time asleep, 8-9h plateau
    bedtime     (max 20)  — distance of the bedtime from 23:00
    cycle       (max 25)  — alignment to 90-minute sleep cycles
    awakenings  (max 15)  — night wakings, step function

A night is filed under the calendar date on which it *started*.
"""

import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class SleepEvent(BaseModel):
    """One night of sleep as supplied by a caller.

    Timestamps are kept loose (string or datetime).  The scorer resolves
    them and rejects the night when either is not a valid instant.
    """

    model_config = ConfigDict(populate_by_name=True)

    sleep_start: Any = Field(
        None,
        alias="sleepStartISO",
        description="Sleep start (ISO-8601 timestamp, e.g. 2025-03-01T23:10)",
    )
    wake_time: Any = Field(
        None,
        alias="wakeTimeISO",
        description="Wake time (ISO-8601 timestamp, may be on the next day)",
    )
    awakenings: Any = Field(
        0,
        description="Number of night wakings (coerced to a non-negative integer)",
    )


# ---------------------------------------------------------------------------
# Output value objects
# ---------------------------------------------------------------------------

class SleepSubscores(BaseModel):
    """The four sleep sub-scores, rounded for display (weights: 40 / 20 / 25 / 15)."""

    model_config = ConfigDict(frozen=True)

    duration: int = Field(..., ge=0, le=40)
    bedtime: int = Field(..., ge=0, le=20)
    cycle: int = Field(..., ge=0, le=25)
    awakenings: int = Field(..., ge=0, le=15)


class SleepGrade(BaseModel):
    """Grade label for a composite score."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="One of: Excellent, Good, Fair, Poor")
    tone: str = Field(..., description="Presentation hint: ok, warn, danger")


class WorstAspect(BaseModel):
    """The weakest sub-score relative to its maximum weight."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="One of: duration, bedtime, cycle, awakenings")
    label: str = Field(..., description="Human-readable dimension name")
    max: int = Field(..., description="Maximum weight of the dimension")
    ratio: float = Field(..., ge=0.0, le=1.0, description="Sub-score / max weight")


class SleepAssessment(BaseModel):
    """Complete assessment of one night.  Immutable."""

    model_config = ConfigDict(frozen=True)

    date_key: datetime.date = Field(
        ...,
        description="Calendar date of the sleep start (the night belongs to this day)",
    )
    sleep_start: datetime.datetime
    wake_time: datetime.datetime
    sleep_start_iso: str
    wake_time_iso: str
    awakenings: int = Field(..., ge=0)
    duration_min: int = Field(..., ge=60, le=960)
    score: int = Field(..., ge=0, le=100)
    grade: SleepGrade
    subscores: SleepSubscores = Field(
        ...,
        description="Sub-scores rounded for display (the composite uses unrounded values)",
    )
    worst: WorstAspect
    cycle_diff_min: int = Field(
        ..., ge=0, le=45,
        description="Minutes away from the nearest multiple of a 90-minute cycle",
    )


class SleepRejection(str, Enum):
    """Why a night could not be scored."""

    UNPARSABLE_TIMESTAMP = "unparsable_timestamp"
    NON_POSITIVE_DURATION = "non_positive_duration"
    DURATION_OUT_OF_RANGE = "duration_out_of_range"


class SleepEvaluation(BaseModel):
    """Assessment or rejection reason; exactly one of the two is set."""

    model_config = ConfigDict(frozen=True)

    assessment: Optional[SleepAssessment] = None
    rejection: Optional[SleepRejection] = None

    @property
    def is_scoreable(self) -> bool:
        return self.assessment is not None


class SleepAssessmentResponse(BaseModel):
    """Assessment returned by the API, with presentation helpers."""

    assessment: SleepAssessment
    duration_label: str = Field(..., description="Duration formatted as e.g. '7h 30m'")
    context_note: str = Field(..., description="Human-readable interpretive note")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

class SleepHistoryPoint(BaseModel):
    """One scored night of a (mock) sleep history."""

    date: datetime.date
    sleep_start: str
    wake_time: str
    awakenings: int = Field(..., ge=0)
    duration_min: int
    score: int = Field(..., ge=0, le=100)


class SleepHistorySummary(BaseModel):
    """Aggregate view over a list of history points."""

    nights: int = Field(..., ge=0)
    average_score: Optional[float] = Field(None, description="Mean score (None if empty)")
    best_date: Optional[datetime.date] = None
    best_score: Optional[int] = None
    worst_date: Optional[datetime.date] = None
    worst_score: Optional[int] = None


class SleepHistoryResponse(BaseModel):
    """Generated sleep history returned by the history endpoint."""

    points: list[SleepHistoryPoint]
    summary: SleepHistorySummary
