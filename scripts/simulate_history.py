"""Simulate a seeded mock sleep history and print the nightly scores."""

import datetime

from app.schemas.sleep import SleepHistoryPoint
from app.scoring.history import (
    SleepHistoryConfig,
    generate_sleep_history,
    summarize_history,
)
from app.scoring.sleep_quality import assess_sleep, mins_to_hm

# ─── Simulation parameters ───────────────────────────────────────────
DAYS = 28
SEED = 20251218
END_DATE = datetime.date(2025, 12, 18)


def _bar(score: int, width: int = 20) -> str:
    filled = round(score / 100 * width)
    return "#" * filled + "." * (width - filled)


def _print_night(point: SleepHistoryPoint) -> None:
    assessed = assess_sleep(
        sleep_start=point.sleep_start,
        wake_time=point.wake_time,
        awakenings=point.awakenings,
    )
    sub = assessed.subscores
    print(
        f"{point.date.isoformat():<12} {point.sleep_start[11:]:>6} {point.wake_time[11:]:>6}"
        f" {mins_to_hm(point.duration_min):>7} {point.awakenings:>3}"
        f" {sub.duration:>4.0f} {sub.bedtime:>4.0f} {sub.cycle:>4.0f} {sub.awakenings:>4.0f}"
        f" {point.score:>5} {assessed.grade.label:<10} {_bar(point.score)}"
        f"  {assessed.worst.label}"
    )


def main():
    cfg = SleepHistoryConfig(days=DAYS, seed=SEED, end_date=END_DATE)
    points = generate_sleep_history(cfg)

    print()
    print("=" * 110)
    print(
        f"{'Date':<12} {'Sleep':>6} {'Wake':>6} {'Dur':>7} {'Aw':>3}"
        f" {'D':>4} {'B':>4} {'C':>4} {'A':>4} {'Score':>5} {'Grade':<10} {'':<20}  {'Weakest'}"
    )
    print("=" * 110)

    for point in points:
        _print_night(point)

    summary = summarize_history(points)
    print()
    print("=" * 110)
    print(f"Nights scored: {summary.nights}/{cfg.days}  (seed {cfg.seed})")
    if summary.nights:
        print(f"Average score: {summary.average_score}")
        print(f"Best night:    {summary.best_date} ({summary.best_score})")
        print(f"Worst night:   {summary.worst_date} ({summary.worst_score})")
    print("=" * 110)


if __name__ == "__main__":
    main()
