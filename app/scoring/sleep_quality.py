"""
Sleep quality — composite nightly score.

This module scores a single night of sleep from three inputs: when the
sleeper fell asleep, when they woke up, and how many times they woke up
during the night.  It is a pure function pipeline: no clock, no
randomness, no I/O, no logging.

Model
-----
Four independent sub-scores are summed into a 0-100 composite:

    duration    (max 40)  piecewise linear, 8-9h plateau
    bedtime     (max 20)  distance of the bedtime from 23:00
    cycle       (max 25)  fit to a multiple of the 90-minute sleep cycle,
                          dampened by awakenings
    awakenings  (max 15)  step function 15 / 12 / 8 / 4 / 0

    score = round(clamp(duration + bedtime + cycle + awakenings, 0, 100))

The composite is always computed from the *unrounded* sub-scores.  The
sub-scores reported in the assessment are rounded for display only, so
their sum may differ from ``score`` by one or two points.

Validation
----------
A night is not scoreable when a timestamp cannot be parsed, when the wake
time is not after the sleep start, or when the duration falls outside
1h-16h (treated as a data-entry error).  ``assess_sleep`` then returns
``None``; ``evaluate_sleep`` returns the reason.  Nothing is raised.

Rounding
--------
All rounding is half-up (``floor(x + 0.5)``): 2.5 → 3, -0.5 → 0.
"""

from __future__ import annotations

import datetime
import math
from collections.abc import Mapping
from typing import Any, Optional, Union

from app.schemas.sleep import (
    SleepAssessment,
    SleepEvaluation,
    SleepEvent,
    SleepGrade,
    SleepRejection,
    SleepSubscores,
    WorstAspect,
)

# ======================================================================
# Model constants
# ======================================================================

# Maximum weight of each sub-score (sum = 100).
SLEEP_WEIGHTS: dict[str, int] = {
    "duration": 40,
    "bedtime": 20,
    "cycle": 25,
    "awakenings": 15,
}

# Evaluation order matters: the first dimension wins ties in worst_aspect.
_ASPECT_LABELS: list[tuple[str, str]] = [
    ("duration", "Sleep duration"),
    ("bedtime", "Sleep timing"),
    ("cycle", "Cycle alignment"),
    ("awakenings", "Night awakenings"),
]

# Inclusive lower bounds, checked top-down.
_GRADE_THRESHOLDS: list[tuple[int, str, str]] = [
    (85, "Excellent", "ok"),
    (70, "Good", "ok"),
    (55, "Fair", "warn"),
]
_GRADE_FLOOR = ("Poor", "danger")

_CYCLE_LEN_MIN = 90
_CYCLE_TOLERANCE_MIN = 45

# 23:00 on the shifted scale (times before noon count as "after midnight").
_TARGET_BEDTIME_MIN = 23 * 60
_NOON_MIN = 12 * 60
_DAY_MIN = 24 * 60

_MIN_DURATION_MIN = 60
_MAX_DURATION_MIN = 16 * 60

_AWAKENINGS_POINTS: dict[int, int] = {0: 15, 1: 12, 2: 8, 3: 4}


# ======================================================================
# Small numeric helpers
# ======================================================================


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _coerce_awakenings(value: Any) -> int:
    """Coerce any numeric-like value to a non-negative int (0 if invalid)."""
    if value is None:
        return 0
    # Integers of any size are already counts.
    if isinstance(value, int):
        return max(0, int(value))
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, _round_half_up(number))


def _parse_instant(value: Any) -> Optional[datetime.datetime]:
    """Resolve a timestamp-like value to a datetime, or ``None``."""
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        return None


def mins_to_hm(minutes: float) -> str:
    """Format a duration in minutes as ``"7h"`` or ``"7h 30m"``."""
    total = max(0, _round_half_up(minutes))
    hours, rest = divmod(total, 60)
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h {rest}m"


# ======================================================================
# Sub-scores
# ======================================================================


def _duration_score(duration_min: float) -> float:
    """Duration sub-score in [0, 40].

    <4h → 0, 4-6h → 0..25, 6-8h → 25..40, 8-9h → 40,
    9-11h → 40..30 (soft oversleep penalty), ≥11h → 30.
    """
    d = float(duration_min)
    if not math.isfinite(d) or d <= 0:
        return 0.0
    if d < 240:
        return 0.0
    if d < 360:
        return ((d - 240) / 120) * 25
    if d < 480:
        return 25 + ((d - 360) / 120) * 15
    if d < 540:
        return 40.0
    if d < 660:
        return 40 - ((d - 540) / 120) * 10
    return 30.0


def _bedtime_score(start: Optional[datetime.datetime]) -> float:
    """Bedtime sub-score in [0, 20], from the wall-clock time of ``start``."""
    if not isinstance(start, datetime.datetime):
        return 0.0
    clock_min = start.hour * 60 + start.minute
    effective = clock_min + _DAY_MIN if clock_min < _NOON_MIN else clock_min
    delta = abs(effective - _TARGET_BEDTIME_MIN)

    if delta <= 60:
        return 20.0
    if delta <= 180:
        return 20 - ((delta - 60) / 120) * 12  # 20 → 8
    if delta <= 360:
        return 8 - ((delta - 180) / 180) * 8  # 8 → 0
    return 0.0


def _nearest_cycle_multiple(duration_min: float) -> int:
    return _round_half_up(duration_min / _CYCLE_LEN_MIN) * _CYCLE_LEN_MIN


def _cycle_score(duration_min: float, awakenings: int) -> float:
    """Cycle-alignment sub-score in [0, 25]."""
    d = float(duration_min)
    if not math.isfinite(d) or d <= 0:
        return 0.0
    diff = abs(d - _nearest_cycle_multiple(d))
    fit = _clamp(1 - diff / _CYCLE_TOLERANCE_MIN, 0.0, 1.0)
    score = fit * SLEEP_WEIGHTS["cycle"]

    if awakenings <= 1:
        factor = 1.0
    elif awakenings == 2:
        factor = 0.85
    else:
        factor = 0.7
    return _clamp(score * factor, 0.0, SLEEP_WEIGHTS["cycle"])


def _awakenings_score(awakenings: Any) -> float:
    """Awakenings sub-score in [0, 15]: 0→15, 1→12, 2→8, 3→4, ≥4→0."""
    count = _coerce_awakenings(awakenings)
    return float(_AWAKENINGS_POINTS.get(count, 0))


# ======================================================================
# Grade and diagnostics
# ======================================================================


def grade_label(score: float) -> SleepGrade:
    """Map a composite score to its grade label and tone."""
    for low, label, tone in _GRADE_THRESHOLDS:
        if score >= low:
            return SleepGrade(label=label, tone=tone)
    label, tone = _GRADE_FLOOR
    return SleepGrade(label=label, tone=tone)


def worst_aspect(
    subscores: Union[SleepSubscores, Mapping[str, float], None],
) -> WorstAspect:
    """Find the dimension with the lowest fraction of its maximum weight.

    Only a strictly smaller ratio replaces the current candidate, so the
    first dimension (duration) is returned when every ratio is 1.
    """
    if isinstance(subscores, SleepSubscores):
        values: Mapping[str, float] = subscores.model_dump()
    else:
        values = subscores or {}

    worst_key, worst_label = _ASPECT_LABELS[0]
    worst_ratio = 1.0
    for key, label in _ASPECT_LABELS:
        maximum = SLEEP_WEIGHTS[key]
        raw = values.get(key)
        value = float(raw) if raw is not None else 0.0
        ratio = _clamp(value / maximum, 0.0, 1.0) if maximum > 0 else 1.0
        if ratio < worst_ratio:
            worst_key, worst_label, worst_ratio = key, label, ratio

    return WorstAspect(
        key=worst_key,
        label=worst_label,
        max=SLEEP_WEIGHTS[worst_key],
        ratio=worst_ratio,
    )


_ASPECT_TIPS: dict[str, str] = {
    "duration": "Aim for 7 to 9 hours of sleep",
    "bedtime": "Try to fall asleep closer to 23:00",
    "cycle": "Shift the alarm to land at the end of a 90-minute cycle",
    "awakenings": "Limit late caffeine, screens and a warm bedroom to cut night wakings",
}


def generate_sleep_note(assessment: SleepAssessment) -> str:
    """Generate a human-readable note for one assessment."""
    parts: list[str] = [
        f"{assessment.grade.label} night: {assessment.score}/100 "
        f"with {mins_to_hm(assessment.duration_min)} of sleep"
    ]

    worst = assessment.worst
    if worst.ratio < 1.0:
        parts.append(f"Weakest aspect: {worst.label} ({worst.ratio:.0%} of max)")
        tip = _ASPECT_TIPS[worst.key]
        if worst.key == "cycle":
            tip += f" (currently {assessment.cycle_diff_min} min off)"
        parts.append(tip)
    else:
        parts.append("Every aspect at its maximum, keep the routine")

    return ". ".join(parts) + "."


# ======================================================================
# Main entry points
# ======================================================================


def _coerce_event(
    event: Union[SleepEvent, Mapping[str, Any], None],
    fields: Mapping[str, Any],
) -> SleepEvent:
    if isinstance(event, SleepEvent):
        if not fields:
            return event
        data: dict[str, Any] = event.model_dump()
    else:
        data = dict(event) if event is not None else {}
    data.update(fields)
    return SleepEvent.model_validate(data)


def evaluate_sleep(
    event: Union[SleepEvent, Mapping[str, Any], None] = None,
    **fields: Any,
) -> SleepEvaluation:
    """Score one night, or report why it cannot be scored.

    Args:
        event: A :class:`SleepEvent`, or a mapping using either the wire
            names (``sleepStartISO``, ``wakeTimeISO``, ``awakenings``) or
            the field names (``sleep_start``, ``wake_time``).
        **fields: Same keys as the mapping, override ``event`` entries.

    Returns:
        :class:`SleepEvaluation` carrying the assessment or the rejection.
    """
    sleep_event = _coerce_event(event, fields)
    awakenings = _coerce_awakenings(sleep_event.awakenings)

    start = _parse_instant(sleep_event.sleep_start)
    wake = _parse_instant(sleep_event.wake_time)
    if start is None or wake is None:
        return SleepEvaluation(rejection=SleepRejection.UNPARSABLE_TIMESTAMP)
    # Offset-aware and naive instants cannot be ordered.
    if (start.utcoffset() is None) != (wake.utcoffset() is None):
        return SleepEvaluation(rejection=SleepRejection.UNPARSABLE_TIMESTAMP)

    duration_min = (wake - start).total_seconds() / 60.0
    if duration_min <= 0:
        return SleepEvaluation(rejection=SleepRejection.NON_POSITIVE_DURATION)
    if duration_min < _MIN_DURATION_MIN or duration_min > _MAX_DURATION_MIN:
        return SleepEvaluation(rejection=SleepRejection.DURATION_OUT_OF_RANGE)

    s_duration = _duration_score(duration_min)
    s_bedtime = _bedtime_score(start)
    s_cycle = _cycle_score(duration_min, awakenings)
    s_awakenings = _awakenings_score(awakenings)

    score = _round_half_up(
        _clamp(s_duration + s_bedtime + s_cycle + s_awakenings, 0, 100)
    )

    cycle_diff_min = abs(
        _round_half_up(duration_min - _nearest_cycle_multiple(duration_min))
    )

    worst = worst_aspect({
        "duration": s_duration,
        "bedtime": s_bedtime,
        "cycle": s_cycle,
        "awakenings": s_awakenings,
    })

    assessment = SleepAssessment(
        date_key=start.date(),
        sleep_start=start,
        wake_time=wake,
        sleep_start_iso=start.isoformat(),
        wake_time_iso=wake.isoformat(),
        awakenings=awakenings,
        duration_min=_round_half_up(duration_min),
        score=score,
        grade=grade_label(score),
        subscores=SleepSubscores(
            duration=_round_half_up(s_duration),
            bedtime=_round_half_up(s_bedtime),
            cycle=_round_half_up(s_cycle),
            awakenings=_round_half_up(s_awakenings),
        ),
        worst=worst,
        cycle_diff_min=cycle_diff_min,
    )
    return SleepEvaluation(assessment=assessment)


def assess_sleep(
    event: Union[SleepEvent, Mapping[str, Any], None] = None,
    **fields: Any,
) -> Optional[SleepAssessment]:
    """Score one night of sleep.

    Returns ``None`` when the night is not scoreable (unparsable
    timestamp, wake not after start, duration outside 1h-16h).  Callers
    are expected to skip such nights.
    """
    return evaluate_sleep(event, **fields).assessment
