"""
Unit tests for the mock sleep history generator.

Tests the seeded LCG, determinism of the generated history, the shape of
each synthesized night, and the history summary.
"""

import datetime

import pytest
from pydantic import ValidationError

from app.schemas.sleep import SleepHistoryPoint
from app.scoring.history import (
    DEFAULT_HISTORY_CONFIG,
    LCG,
    SleepHistoryConfig,
    generate_sleep_history,
    summarize_history,
)
from app.scoring.sleep_quality import assess_sleep

END = datetime.date(2025, 3, 10)


# ======================================================================
# Helpers
# ======================================================================


def _constant(value: float):
    return lambda: value


def _point(day: int, score: int) -> SleepHistoryPoint:
    date = datetime.date(2025, 3, day)
    return SleepHistoryPoint(
        date=date,
        sleep_start=f"{date.isoformat()}T23:00",
        wake_time=f"{(date + datetime.timedelta(days=1)).isoformat()}T07:00",
        awakenings=0,
        duration_min=480,
        score=score,
    )


# ======================================================================
# LCG
# ======================================================================


class TestLCG:

    def test_first_draw_from_zero_seed(self):
        rng = LCG(0)
        assert rng() == 1013904223 / 2 ** 32
        assert rng.state == 1013904223

    def test_recurrence(self):
        rng = LCG(42)
        rng()
        expected = (1664525 * 42 + 1013904223) % 2 ** 32
        expected = (1664525 * expected + 1013904223) % 2 ** 32
        assert rng() == expected / 2 ** 32

    def test_seed_wraps_to_32_bits(self):
        assert LCG(2 ** 32 + 5).state == 5
        assert LCG(2 ** 32 + 5)() == LCG(5)()

    def test_values_in_unit_interval(self):
        rng = LCG(20251218)
        for _ in range(5000):
            value = rng()
            assert 0.0 <= value < 1.0

    def test_same_seed_same_sequence(self):
        a, b = LCG(7), LCG(7)
        assert [a() for _ in range(50)] == [b() for _ in range(50)]

    def test_instances_do_not_share_state(self):
        a, b = LCG(7), LCG(7)
        a()
        a()
        assert b() == LCG(7)()


# ======================================================================
# SleepHistoryConfig
# ======================================================================


class TestSleepHistoryConfig:

    def test_defaults(self):
        cfg = DEFAULT_HISTORY_CONFIG
        assert cfg.days == 90
        assert cfg.seed == 20251218
        assert cfg.end_date is None
        assert cfg.base_bedtime_min == 23 * 60 + 15

    @pytest.mark.parametrize("field,value", [
        ("days", 0),
        ("seed", -1),
        ("base_bedtime_min", 19 * 60),
        ("base_bedtime_min", 28 * 60),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            SleepHistoryConfig(**{field: value})

    @pytest.mark.parametrize("end_date,days", [
        (datetime.date(1, 1, 1), 3),
        (datetime.date(1, 1, 2), 3),
        (datetime.date.max, 1),
    ])
    def test_end_date_outside_calendar_rejected(self, end_date, days):
        with pytest.raises(ValidationError):
            SleepHistoryConfig(days=days, end_date=end_date)

    def test_earliest_window_generates(self):
        cfg = SleepHistoryConfig(days=3, end_date=datetime.date(1, 1, 3), seed=5)
        points = generate_sleep_history(cfg)
        assert all(p.date >= datetime.date(1, 1, 1) for p in points)

    def test_latest_window_generates(self):
        end = datetime.date.max - datetime.timedelta(days=1)
        points = generate_sleep_history(SleepHistoryConfig(days=3, end_date=end, seed=5))
        assert all(p.date <= end for p in points)


# ======================================================================
# generate_sleep_history
# ======================================================================


class TestGenerateSleepHistory:

    def test_deterministic(self):
        cfg = SleepHistoryConfig(days=60, end_date=END, seed=123)
        assert generate_sleep_history(cfg) == generate_sleep_history(cfg)

    def test_seed_changes_history(self):
        a = generate_sleep_history(SleepHistoryConfig(days=60, end_date=END, seed=1))
        b = generate_sleep_history(SleepHistoryConfig(days=60, end_date=END, seed=2))
        assert a != b

    def test_explicit_rng_matches_seed(self):
        cfg = SleepHistoryConfig(days=30, end_date=END, seed=99)
        assert generate_sleep_history(cfg, rng=LCG(99)) == generate_sleep_history(cfg)

    def test_points_within_range_and_ordered(self):
        cfg = SleepHistoryConfig(days=90, end_date=END)
        points = generate_sleep_history(cfg)
        assert 0 < len(points) <= 90

        first_date = END - datetime.timedelta(days=89)
        dates = [p.date for p in points]
        assert dates == sorted(set(dates))
        assert all(first_date <= d <= END for d in dates)

    def test_points_rescore_identically(self):
        points = generate_sleep_history(SleepHistoryConfig(days=45, end_date=END))
        for p in points:
            assessed = assess_sleep(
                sleep_start=p.sleep_start, wake_time=p.wake_time, awakenings=p.awakenings,
            )
            assert assessed.score == p.score
            assert assessed.duration_min == p.duration_min
            assert assessed.date_key == p.date

    def test_point_values_plausible(self):
        points = generate_sleep_history(SleepHistoryConfig(days=90, end_date=END))
        for p in points:
            assert 0 <= p.score <= 100
            assert 300 <= p.duration_min <= 510
            assert 0 <= p.awakenings <= 5
            assert p.sleep_start.startswith(p.date.isoformat())

    def test_typical_night_from_constant_rng(self):
        """r = 0.5: bedtime 23:15, 435 min, one awakening, every night."""
        cfg = SleepHistoryConfig(days=3, end_date=END)
        points = generate_sleep_history(cfg, rng=_constant(0.5))

        assert [p.date for p in points] == [
            datetime.date(2025, 3, 8),
            datetime.date(2025, 3, 9),
            datetime.date(2025, 3, 10),
        ]
        first = points[0]
        assert first.sleep_start == "2025-03-08T23:15"
        assert first.wake_time == "2025-03-09T06:30"
        assert first.duration_min == 435
        assert first.awakenings == 1
        # 34.375 + 20 + 16.67 + 12 = 83.04
        assert first.score == 83

    def test_short_night_branch(self):
        """r = 0.1: occasional late bedtime (23:27), short 312 min night."""
        points = generate_sleep_history(
            SleepHistoryConfig(days=1, end_date=END), rng=_constant(0.1),
        )
        assert len(points) == 1
        assert points[0].sleep_start == "2025-03-10T23:27"
        assert points[0].wake_time == "2025-03-11T04:39"
        assert points[0].duration_min == 312
        assert points[0].awakenings == 0

    def test_after_midnight_bedtimes_dropped(self):
        """r = 0.99: bedtime 00:29 written on the sleep date → >16h → dropped."""
        points = generate_sleep_history(
            SleepHistoryConfig(days=5, end_date=END), rng=_constant(0.99),
        )
        assert points == []

    def test_base_bedtime_shifts_start(self):
        points = generate_sleep_history(
            SleepHistoryConfig(days=1, end_date=END, base_bedtime_min=22 * 60),
            rng=_constant(0.5),
        )
        assert points[0].sleep_start == "2025-03-10T22:00"

    def test_end_date_defaults_to_today(self):
        points = generate_sleep_history(SleepHistoryConfig(days=1), rng=_constant(0.5))
        assert len(points) == 1
        assert points[0].date == datetime.date.today()


# ======================================================================
# summarize_history
# ======================================================================


class TestSummarizeHistory:

    def test_empty(self):
        summary = summarize_history([])
        assert summary.nights == 0
        assert summary.average_score is None
        assert summary.best_date is None
        assert summary.worst_date is None

    def test_best_and_worst_earliest_wins(self):
        points = [_point(1, 70), _point(2, 90), _point(3, 60), _point(4, 90), _point(5, 60)]
        summary = summarize_history(points)
        assert summary.nights == 5
        assert summary.average_score == 74.0
        assert summary.best_date == datetime.date(2025, 3, 2)
        assert summary.best_score == 90
        assert summary.worst_date == datetime.date(2025, 3, 3)
        assert summary.worst_score == 60

    def test_single_point(self):
        summary = summarize_history([_point(4, 81)])
        assert summary.best_date == summary.worst_date == datetime.date(2025, 3, 4)
        assert summary.average_score == 81.0

    def test_summary_of_generated_history(self):
        points = generate_sleep_history(SleepHistoryConfig(days=30, end_date=END))
        summary = summarize_history(points)
        assert summary.nights == len(points)
        assert summary.worst_score <= summary.average_score <= summary.best_score
