"""Functional core - pure business logic with no I/O."""

from .records import (
    AnswerRecord,
    DecodeError,
    TodoItem,
    day_key,
    normalize_day,
    upsert_record,
)
from .stats import MonthCount, StatsSnapshot, compute_stats, current_streak, max_streak

__all__ = [
    # Records
    "AnswerRecord",
    "DecodeError",
    "TodoItem",
    "day_key",
    "normalize_day",
    "upsert_record",
    # Stats
    "MonthCount",
    "StatsSnapshot",
    "compute_stats",
    "current_streak",
    "max_streak",
]
