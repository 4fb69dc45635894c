"""
Mock sleep history — deterministic nightly events for demos and tests.

Generates one synthetic night per calendar date, scores it with
:func:`app.scoring.sleep_quality.assess_sleep`, and keeps only the nights
the scorer accepts.

Randomness comes from an explicit linear-congruential generator
(:class:`LCG`) seeded from the config, so the same config always yields
the same history.  No global random state is touched.

Night model
-----------
- Bedtime around 23:15, ±75 min of noise, 15% of nights pushed 1-3h later,
  clamped to 20:00-03:00.
- Duration 6-8.5h, with 12% short nights of 5-7h.
- Awakenings 0 (45%), 1 (30%), 2 (17%), 3 (6%), 4-5 (2%).

Timestamps are written on the sleep date with the hour taken modulo 24,
so a bedtime past midnight lands in the early hours of the *same* date.
Such nights come out longer than 16h and the scorer drops them; the
history therefore never holds more than one night per date.
"""

from __future__ import annotations

import datetime
import logging
import math
from typing import Callable, Optional

from pydantic import BaseModel, Field, model_validator

from app.schemas.sleep import SleepHistoryPoint, SleepHistorySummary
from app.scoring.sleep_quality import _round_half_up, assess_sleep

logger = logging.getLogger(__name__)

# ======================================================================
# Configuration
# ======================================================================

_DEFAULT_DAYS = 90
_DEFAULT_SEED = 20251218
_DEFAULT_BASE_BEDTIME_MIN = 23 * 60 + 15

# Bedtime window on the shifted scale: 20:00 .. 03:00 next day.
_EARLIEST_BEDTIME_MIN = 20 * 60
_LATEST_BEDTIME_MIN = 27 * 60

_DAY_MIN = 24 * 60

# Cumulative thresholds for 0..3 awakenings.
_AWAKENINGS_CDF: list[tuple[float, int]] = [
    (0.45, 0),
    (0.75, 1),
    (0.92, 2),
    (0.98, 3),
]


class SleepHistoryConfig(BaseModel):
    """Configuration for the mock history generator."""

    days: int = Field(_DEFAULT_DAYS, ge=1, le=3660)
    end_date: Optional[datetime.date] = Field(
        None, description="Last sleep date of the history (defaults to today)",
    )
    seed: int = Field(_DEFAULT_SEED, ge=0)
    base_bedtime_min: int = Field(
        _DEFAULT_BASE_BEDTIME_MIN,
        ge=_EARLIEST_BEDTIME_MIN, le=_LATEST_BEDTIME_MIN,
        description="Centre of the bedtime distribution (minutes from midnight)",
    )

    @model_validator(mode="after")
    def check_date_span(self) -> "SleepHistoryConfig":
        # Every night needs a first sleep date and a wake date on the calendar.
        if self.end_date is not None:
            if self.end_date.toordinal() - (self.days - 1) < 1:
                raise ValueError("end_date is too early for the requested number of days")
            if self.end_date >= datetime.date.max:
                raise ValueError("end_date must leave room for the following wake date")
        return self


DEFAULT_HISTORY_CONFIG = SleepHistoryConfig()


# ======================================================================
# Seeded generator
# ======================================================================


class LCG:
    """32-bit linear-congruential generator returning floats in [0, 1)."""

    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2 ** 32

    def __init__(self, seed: int = _DEFAULT_SEED) -> None:
        self._state = int(seed) % self.MODULUS

    @property
    def state(self) -> int:
        return self._state

    def __call__(self) -> float:
        self._state = (self.MULTIPLIER * self._state + self.INCREMENT) % self.MODULUS
        return self._state / self.MODULUS


# ======================================================================
# Night synthesis
# ======================================================================


def _fmt_iso(day: datetime.date, minute_of_day: int) -> str:
    hour = (minute_of_day % _DAY_MIN) // 60
    minute = minute_of_day % 60
    return f"{day.isoformat()}T{hour:02d}:{minute:02d}"


def _draw_awakenings(rng: Callable[[], float]) -> int:
    r = rng()
    for threshold, count in _AWAKENINGS_CDF:
        if r < threshold:
            return count
    return 4 + math.floor(rng() * 2)


def _synthesize_night(
    sleep_date: datetime.date,
    base_bedtime_min: int,
    rng: Callable[[], float],
) -> tuple[str, str, int]:
    """Draw one night.  Returns ``(sleep_start_iso, wake_time_iso, awakenings)``.

    The draw order is fixed; changing it changes every generated history.
    """
    late_shift = (rng() - 0.5) * 150
    occasional_late = 0.0
    if rng() < 0.15:
        occasional_late = 60 + rng() * 120

    start_min = _round_half_up(base_bedtime_min + late_shift + occasional_late)
    start_min = min(_LATEST_BEDTIME_MIN, max(_EARLIEST_BEDTIME_MIN, start_min))

    if rng() < 0.12:
        duration_min = _round_half_up(300 + rng() * 120)
    else:
        duration_min = _round_half_up(360 + rng() * 150)

    wake_min = start_min + duration_min
    wake_date = sleep_date + datetime.timedelta(days=1) if wake_min >= _DAY_MIN else sleep_date

    awakenings = _draw_awakenings(rng)

    return (
        _fmt_iso(sleep_date, start_min),
        _fmt_iso(wake_date, wake_min),
        awakenings,
    )


# ======================================================================
# Main entry points
# ======================================================================


def generate_sleep_history(
    config: Optional[SleepHistoryConfig] = None,
    rng: Optional[Callable[[], float]] = None,
) -> list[SleepHistoryPoint]:
    """Generate a scored nightly history, oldest night first.

    Args:
        config: Optional config override.
        rng: Optional source of floats in [0, 1).  Defaults to a fresh
            :class:`LCG` seeded with ``config.seed``.

    Returns:
        One :class:`SleepHistoryPoint` per scoreable night.
    """
    cfg = config or DEFAULT_HISTORY_CONFIG
    rnd = rng or LCG(cfg.seed)
    end_date = cfg.end_date or datetime.date.today()

    points: list[SleepHistoryPoint] = []
    for offset in range(cfg.days - 1, -1, -1):
        sleep_date = end_date - datetime.timedelta(days=offset)
        start_iso, wake_iso, awakenings = _synthesize_night(
            sleep_date, cfg.base_bedtime_min, rnd,
        )

        assessed = assess_sleep(
            sleep_start=start_iso, wake_time=wake_iso, awakenings=awakenings,
        )
        if assessed is None:
            logger.debug(
                "Dropping unscoreable night %s (%s -> %s)",
                sleep_date, start_iso, wake_iso,
            )
            continue

        points.append(SleepHistoryPoint(
            date=assessed.date_key,
            sleep_start=start_iso,
            wake_time=wake_iso,
            awakenings=assessed.awakenings,
            duration_min=assessed.duration_min,
            score=assessed.score,
        ))

    logger.debug(
        "Generated %d/%d nights (seed=%d, end=%s)",
        len(points), cfg.days, cfg.seed, end_date,
    )
    return points


def summarize_history(points: list[SleepHistoryPoint]) -> SleepHistorySummary:
    """Count, mean score, best and worst night (earliest wins ties)."""
    if not points:
        return SleepHistorySummary(nights=0)

    best = points[0]
    worst = points[0]
    for point in points[1:]:
        if point.score > best.score:
            best = point
        if point.score < worst.score:
            worst = point

    average = sum(p.score for p in points) / len(points)
    return SleepHistorySummary(
        nights=len(points),
        average_score=round(average, 1),
        best_date=best.date,
        best_score=best.score,
        worst_date=worst.date,
        worst_score=worst.score,
    )
