"""Pure statistics over answer records - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from .records import AnswerRecord, normalize_day

STREAK_LOOKBACK_DAYS = 365
HISTOGRAM_MONTHS = 3

MONTH_LABELS = {
    "en": ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
    "ko": tuple(f"{m}월" for m in range(1, 13)),
}


@dataclass
class MonthCount:
    """Answer count for one calendar month."""

    label: str
    count: int
    year: int
    month: int


@dataclass
class StatsSnapshot:
    """Derived statistics. Never persisted."""

    total_answers: int = 0
    this_month_answers: int = 0
    this_week_answers: int = 0
    current_streak: int = 0
    max_streak: int = 0
    monthly_histogram: list[MonthCount] = field(default_factory=list)


def month_label(month: int, labels: str = "en") -> str:
    """Label for a month number (1-12) in the given label set."""
    table = MONTH_LABELS.get(labels, MONTH_LABELS["en"])
    return table[month - 1]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def current_streak(
    days: set[date], today: date, lookback: int = STREAK_LOOKBACK_DAYS
) -> int:
    """
    Consecutive days ending at today that all have a record.

    Zero if today has none. The backward walk stops after `lookback` days.
    """
    streak = 0
    check = today
    for _ in range(lookback):
        if check not in days:
            break
        streak += 1
        check -= timedelta(days=1)
    return streak


def max_streak(days: set[date]) -> int:
    """Longest run of consecutive calendar days anywhere in history."""
    best = 0
    run = 0
    previous = None
    for day in sorted(days):
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def monthly_histogram(
    records: list[AnswerRecord],
    today: date,
    months: int = HISTOGRAM_MONTHS,
    labels: str = "en",
) -> list[MonthCount]:
    """
    Answer counts for the current month and the preceding ones.

    Ordered most recent month first, chronologically, so a window that
    spans a year boundary keeps December after January.
    """
    counts: dict[tuple[int, int], int] = {}
    for i in range(months):
        counts[shift_month(today.year, today.month, -i)] = 0

    for record in records:
        key = (record.date.year, record.date.month)
        if key in counts:
            counts[key] += 1

    return [
        MonthCount(label=month_label(m, labels), count=counts[(y, m)], year=y, month=m)
        for (y, m) in sorted(counts, reverse=True)
    ]


def compute_stats(
    records: list[AnswerRecord],
    now: datetime,
    tz: ZoneInfo,
    lookback: int = STREAK_LOOKBACK_DAYS,
    labels: str = "en",
) -> StatsSnapshot:
    """
    Build a StatsSnapshot from the full record collection.

    `now` must be timezone-aware. Each record counts from the start of its
    day in `tz`.

    Pure function - no I/O.
    """
    today = normalize_day(now, tz)
    start_of_month = today.replace(day=1)
    week_cutoff = now - timedelta(days=7)

    def day_start(d: date) -> datetime:
        return datetime.combine(d, time.min, tzinfo=tz)

    days = {r.date for r in records}

    return StatsSnapshot(
        total_answers=len(records),
        this_month_answers=sum(1 for r in records if r.date >= start_of_month),
        this_week_answers=sum(1 for r in records if day_start(r.date) >= week_cutoff),
        current_streak=current_streak(days, today, lookback),
        max_streak=max_streak(days),
        monthly_histogram=monthly_histogram(records, today, labels=labels),
    )
