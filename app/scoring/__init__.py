"""Sleep scoring core — nightly quality score and mock history."""

from app.scoring.history import SleepHistoryConfig, generate_sleep_history
from app.scoring.sleep_quality import assess_sleep, evaluate_sleep, grade_label

__all__ = [
    "SleepHistoryConfig",
    "assess_sleep",
    "evaluate_sleep",
    "generate_sleep_history",
    "grade_label",
]
