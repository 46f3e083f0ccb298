"""Date-keyed record store - questions, answers, todos, settings, stats."""

import logging
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from .adapters.json_store import StorageError
from .core.records import (
    DEFAULT_TIMEZONE,
    AnswerRecord,
    DecodeError,
    TodoItem,
    decode_answers,
    decode_todos,
    day_key,
    upsert_record,
)
from .core.stats import STREAK_LOOKBACK_DAYS, StatsSnapshot, compute_stats
from .ports.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

ALL_ANSWERS_KEY = "allAnswers"
LAST_QUESTION_KEY = "lastQuestionDate"
PUSH_ENABLED_KEY = "pushNotificationEnabled"
DARK_MODE_KEY = "darkModeEnabled"
NOTIFICATION_HOUR_KEY = "notificationHour"
NOTIFICATION_MINUTE_KEY = "notificationMinute"
REMINDER_CHAT_KEY = "reminderChatId"

DEFAULT_NOTIFICATION_TIME = (20, 0)


class RecordStore:
    """
    Per-day question/answer/todo persistence and derived statistics.

    Every operation is best-effort: a failed read returns the absent value
    and a failed write is a no-op, both logged. With strict=True the
    underlying StorageError or DecodeError propagates instead.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        timezone: str = DEFAULT_TIMEZONE,
        streak_lookback_days: int = STREAK_LOOKBACK_DAYS,
        month_labels: str = "en",
        strict: bool = False,
    ):
        self.kv = kv
        self.tz = ZoneInfo(timezone)
        self.streak_lookback_days = streak_lookback_days
        self.month_labels = month_labels
        self.strict = strict

    # ============== Low-level access ==============

    def _read(self, key: str) -> Any | None:
        try:
            return self.kv.get(key)
        except StorageError as e:
            if self.strict:
                raise
            logger.warning(f"Read of {key} failed: {e}")
            return None

    def _write(self, key: str, value: Any) -> None:
        try:
            self.kv.set(key, value)
        except StorageError as e:
            if self.strict:
                raise
            logger.warning(f"Write of {key} failed: {e}")

    def _key(self, prefix: str, day: date | datetime) -> str:
        return f"{prefix}_{day_key(day, self.tz)}"

    def now(self) -> datetime:
        """Current time in the store's zone."""
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def day_key(self, day: date | datetime) -> str:
        return day_key(day, self.tz)

    # ============== Questions ==============

    def save_question(self, question: str, day: date | datetime) -> None:
        """Store the question for a day and mark the day as last question day."""
        key = self.day_key(day)
        self._write(self._key("question", day), question)
        self._write(LAST_QUESTION_KEY, key)

    def get_question(self, day: date | datetime) -> str | None:
        value = self._read(self._key("question", day))
        return value if isinstance(value, str) else None

    def get_last_question_day_key(self) -> str | None:
        value = self._read(LAST_QUESTION_KEY)
        return value if isinstance(value, str) else None

    # ============== Answers ==============

    def save_answer(self, answer: str, day: date | datetime) -> None:
        """
        Store the raw answer for a day.

        When the day also has a question, the pair is upserted into the
        answer collection, which stays sorted newest first. An unreadable
        collection is left untouched rather than replaced.
        """
        self._write(self._key("answer", day), answer)

        question = self.get_question(day)
        if question is None:
            return

        records = self._load_answers()
        if records is None:
            logger.warning(f"Answer collection unreadable, not updating it for {self.day_key(day)}")
            return

        target = date.fromisoformat(self.day_key(day))
        records = upsert_record(records, question, answer, target)
        self._write(ALL_ANSWERS_KEY, [r.to_dict() for r in records])

    def get_answer(self, day: date | datetime) -> str | None:
        value = self._read(self._key("answer", day))
        return value if isinstance(value, str) else None

    def get_all_answers(self) -> list[AnswerRecord]:
        """All answer records, newest first. A fresh list on every call."""
        records = self._load_answers()
        return records if records is not None else []

    def _load_answers(self) -> list[AnswerRecord] | None:
        """Decoded answer collection, or None when it is stored but unreadable."""
        raw = self._read(ALL_ANSWERS_KEY)
        if raw is None:
            return []
        try:
            return decode_answers(raw)
        except DecodeError as e:
            if self.strict:
                raise
            logger.warning(f"Discarding unreadable answer collection: {e}")
            return None

    # ============== Todos ==============

    def save_todo_list(self, items: list[TodoItem], day: date | datetime) -> None:
        """Replace the todo list for a day."""
        self._write(self._key("todos", day), [item.to_dict() for item in items])

    def get_todo_list(self, day: date | datetime) -> list[TodoItem]:
        raw = self._read(self._key("todos", day))
        if raw is None:
            return []
        try:
            return decode_todos(raw)
        except DecodeError as e:
            if self.strict:
                raise
            logger.warning(f"Discarding unreadable todo list for {self.day_key(day)}: {e}")
            return []

    def has_entry(self, day: date | datetime) -> bool:
        """True if the day has a question, an answer or any todos."""
        return (
            self.get_question(day) is not None
            or self.get_answer(day) is not None
            or bool(self.get_todo_list(day))
        )

    # ============== Stats ==============

    def get_stats_snapshot(self, reference_now: date | datetime | None = None) -> StatsSnapshot:
        """Compute statistics over every stored answer record."""
        if reference_now is None:
            now = self.now()
        elif isinstance(reference_now, datetime):
            now = (
                reference_now.astimezone(self.tz)
                if reference_now.tzinfo
                else reference_now.replace(tzinfo=self.tz)
            )
        else:
            now = datetime(reference_now.year, reference_now.month, reference_now.day, tzinfo=self.tz)

        return compute_stats(
            self.get_all_answers(),
            now,
            self.tz,
            lookback=self.streak_lookback_days,
            labels=self.month_labels,
        )

    # ============== Settings ==============

    def get_push_notification_enabled(self) -> bool:
        return self._read(PUSH_ENABLED_KEY) is True

    def set_push_notification_enabled(self, enabled: bool) -> None:
        self._write(PUSH_ENABLED_KEY, bool(enabled))

    def get_dark_mode_enabled(self) -> bool:
        return self._read(DARK_MODE_KEY) is True

    def set_dark_mode_enabled(self, enabled: bool) -> None:
        self._write(DARK_MODE_KEY, bool(enabled))

    def get_notification_time(self) -> tuple[int, int]:
        """Reminder time as (hour, minute). Defaults to 20:00 when unset."""
        hour = self._read(NOTIFICATION_HOUR_KEY)
        minute = self._read(NOTIFICATION_MINUTE_KEY)
        if not isinstance(hour, int) or not isinstance(minute, int):
            return DEFAULT_NOTIFICATION_TIME
        if not (0 <= hour < 24 and 0 <= minute < 60):
            return DEFAULT_NOTIFICATION_TIME
        return hour, minute

    def set_notification_time(self, hour: int, minute: int) -> None:
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError(f"Invalid notification time {hour:02d}:{minute:02d}")
        self._write(NOTIFICATION_HOUR_KEY, hour)
        self._write(NOTIFICATION_MINUTE_KEY, minute)

    def get_reminder_chat_id(self) -> int | None:
        """Chat that asked for reminders when no allowlist is configured."""
        value = self._read(REMINDER_CHAT_KEY)
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    def set_reminder_chat_id(self, chat_id: int) -> None:
        self._write(REMINDER_CHAT_KEY, int(chat_id))

    # ============== Reset ==============

    def clear_all_data(self) -> None:
        """Erase every day and every setting."""
        try:
            self.kv.clear()
        except StorageError as e:
            if self.strict:
                raise
            logger.warning(f"Clearing store failed: {e}")
