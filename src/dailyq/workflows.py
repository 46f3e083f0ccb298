"""Shared workflow layer between CLI and Telegram.

Each function takes the store explicitly; the store itself is built once
per process by get_store().
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from .adapters.fallback_prompts import FallbackPromptProvider
from .adapters.json_store import JsonFileStore
from .adapters.openai_prompts import OpenAIPromptProvider
from .config import Config
from .core.records import AnswerRecord, TodoItem
from .ports.prompt_provider import PromptProvider
from .record_store import RecordStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> RecordStore:
    """Build the record store from config."""
    return RecordStore(
        JsonFileStore(config.store_path),
        timezone=config.timezone,
        streak_lookback_days=config.streak_lookback_days,
        month_labels=config.month_labels,
    )


def get_prompt_provider(config: Config) -> PromptProvider:
    """Remote provider when an API key is configured, local list otherwise."""
    fallback = FallbackPromptProvider()
    if config.openai_api_key:
        return OpenAIPromptProvider(
            api_key=config.openai_api_key,
            model=config.openai_model,
            timeout=config.openai_timeout,
            fallback=fallback,
        )
    return fallback


# ============== Question of the day ==============


class QuestionState(Enum):
    """Where today's question stands."""

    ANSWERED = "answered"
    UNANSWERED = "unanswered"
    MISSING = "missing"  # Generated today but not found in the store


@dataclass
class DailyQuestion:
    day: date
    question: str | None
    answer: str | None
    state: QuestionState


def ensure_daily_question(
    store: RecordStore,
    provider: PromptProvider,
    now: datetime | None = None,
    regenerate: bool = False,
) -> DailyQuestion:
    """
    Return today's question, generating and saving one if needed.

    A day whose question was generated but has gone missing is reported
    as MISSING rather than silently replaced, unless regenerate is set.
    """
    today = date.fromisoformat(store.day_key(now or store.now()))
    question = store.get_question(today)
    answer = store.get_answer(today)

    if question is None:
        if store.get_last_question_day_key() == today.isoformat() and not regenerate:
            logger.warning(f"Question for {today} was generated but is missing")
            return DailyQuestion(today, None, answer, QuestionState.MISSING)

        question = provider.generate_prompt()
        store.save_question(question, today)
        logger.info(f"Generated question for {today}")

    state = QuestionState.ANSWERED if answer and answer.strip() else QuestionState.UNANSWERED
    return DailyQuestion(today, question, answer, state)


def submit_answer(store: RecordStore, text: str, now: datetime | None = None) -> bool:
    """
    Save today's answer. Returns True if it replaced an earlier answer.
    """
    trimmed = text.strip()
    if not trimmed:
        raise ValueError("Answer cannot be empty")

    today = date.fromisoformat(store.day_key(now or store.now()))
    existing = store.get_answer(today)
    store.save_answer(trimmed, today)
    return bool(existing and existing.strip())


# ============== Todos ==============


def add_todo(store: RecordStore, text: str, day: date) -> list[TodoItem]:
    """Append a todo to a day's list and return the new list."""
    trimmed = text.strip()
    if not trimmed:
        raise ValueError("Todo text cannot be empty")
    todos = store.get_todo_list(day)
    todos.append(TodoItem(text=trimmed))
    store.save_todo_list(todos, day)
    return todos


def toggle_todo(store: RecordStore, index: int, day: date) -> TodoItem:
    """Flip completion of the todo at index (0-based)."""
    todos = store.get_todo_list(day)
    if not 0 <= index < len(todos):
        raise IndexError(f"No todo #{index + 1} for {day}")
    todos[index].is_completed = not todos[index].is_completed
    store.save_todo_list(todos, day)
    return todos[index]


def remove_todo(store: RecordStore, index: int, day: date) -> TodoItem:
    """Delete the todo at index (0-based) and return it."""
    todos = store.get_todo_list(day)
    if not 0 <= index < len(todos):
        raise IndexError(f"No todo #{index + 1} for {day}")
    removed = todos.pop(index)
    store.save_todo_list(todos, day)
    return removed


def clear_completed(store: RecordStore, day: date) -> int:
    """Drop completed todos. Returns how many were removed."""
    todos = store.get_todo_list(day)
    remaining = [t for t in todos if not t.is_completed]
    store.save_todo_list(remaining, day)
    return len(todos) - len(remaining)


# ============== Browsing ==============


class AnswerFilter(Enum):
    ALL = "all"
    MONTH = "month"
    WEEK = "week"


def filter_answers(
    records: list[AnswerRecord],
    period: AnswerFilter,
    now: datetime,
    tz: ZoneInfo,
) -> list[AnswerRecord]:
    """
    Filter records to this month or the last 7 days.

    Same cutoffs as the statistics. Pure function - no I/O.
    """
    if period is AnswerFilter.ALL:
        return list(records)

    now = now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)
    if period is AnswerFilter.MONTH:
        start = now.date().replace(day=1)
        return [r for r in records if r.date >= start]

    cutoff = now - timedelta(days=7)
    return [r for r in records if datetime.combine(r.date, time.min, tzinfo=tz) >= cutoff]


@dataclass
class DayDetail:
    day: date
    question: str | None = None
    answer: str | None = None
    todos: list[TodoItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.question is None and self.answer is None and not self.todos


def day_detail(store: RecordStore, day: date) -> DayDetail:
    """Everything stored for one day."""
    return DayDetail(
        day=day,
        question=store.get_question(day),
        answer=store.get_answer(day),
        todos=store.get_todo_list(day),
    )


def month_overview(store: RecordStore, year: int, month: int) -> list[date]:
    """Days in the month that have any stored data."""
    _, days_in_month = calendar.monthrange(year, month)
    return [
        d
        for d in (date(year, month, n) for n in range(1, days_in_month + 1))
        if store.has_entry(d)
    ]
