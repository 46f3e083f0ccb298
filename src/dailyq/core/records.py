"""Pure record domain logic - day keys, answer records, todo items."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Seoul"


class DecodeError(ValueError):
    """Stored data does not match the expected record shape."""

    pass


def normalize_day(moment: date | datetime, tz: ZoneInfo | str = DEFAULT_TIMEZONE) -> date:
    """
    Truncate a moment to its calendar day in the given time zone.

    Aware datetimes are converted into the zone first. Naive datetimes are
    taken as wall-clock time in the zone. Plain dates pass through.
    """
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            zone = ZoneInfo(tz) if isinstance(tz, str) else tz
            moment = moment.astimezone(zone)
        return moment.date()
    return moment


def day_key(moment: date | datetime, tz: ZoneInfo | str = DEFAULT_TIMEZONE) -> str:
    """Canonical YYYY-MM-DD key for a moment."""
    return normalize_day(moment, tz).isoformat()


def parse_day_key(key: str) -> date:
    """Parse a YYYY-MM-DD key back into a date."""
    try:
        return date.fromisoformat(key)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid day key: {key!r}") from e


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class TodoItem:
    """A single todo entry for a day."""

    text: str
    is_completed: bool = False
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "isCompleted": self.is_completed}

    @classmethod
    def from_dict(cls, data: dict) -> "TodoItem":
        """Create TodoItem from its stored form."""
        if not isinstance(data, dict) or not isinstance(data.get("text"), str):
            raise DecodeError(f"Invalid todo item: {data!r}")
        return cls(
            id=str(data.get("id") or new_id()),
            text=data["text"],
            is_completed=bool(data.get("isCompleted", False)),
        )


@dataclass
class AnswerRecord:
    """A question and its answer for one calendar day."""

    question: str
    answer: str
    date: date
    id: str = field(default_factory=new_id)

    @property
    def day_key(self) -> str:
        return self.date.isoformat()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "date": self.day_key,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnswerRecord":
        """Create AnswerRecord from its stored form."""
        if not isinstance(data, dict):
            raise DecodeError(f"Invalid answer record: {data!r}")
        try:
            question = data["question"]
            answer = data["answer"]
            day = data["date"]
        except KeyError as e:
            raise DecodeError(f"Answer record missing field {e}") from e
        if not isinstance(question, str) or not isinstance(answer, str):
            raise DecodeError(f"Invalid answer record: {data!r}")
        return cls(
            id=str(data.get("id") or new_id()),
            question=question,
            answer=answer,
            date=parse_day_key(day),
        )


def decode_todos(raw) -> list[TodoItem]:
    """Decode a stored todo list. Raises DecodeError on bad shape."""
    if not isinstance(raw, list):
        raise DecodeError(f"Expected a todo list, got {type(raw).__name__}")
    return [TodoItem.from_dict(item) for item in raw]


def decode_answers(raw) -> list[AnswerRecord]:
    """Decode the stored answer collection. Raises DecodeError on bad shape."""
    if not isinstance(raw, list):
        raise DecodeError(f"Expected an answer list, got {type(raw).__name__}")
    return [AnswerRecord.from_dict(item) for item in raw]


def sort_newest_first(records: list[AnswerRecord]) -> list[AnswerRecord]:
    """Sort records by date descending."""
    return sorted(records, key=lambda r: r.date, reverse=True)


def upsert_record(
    records: list[AnswerRecord], question: str, answer: str, day: date
) -> list[AnswerRecord]:
    """
    Insert or update the record for a day.

    An existing record for the day keeps its id. Returns a new list sorted
    newest first.

    Pure function - no I/O.
    """
    updated = []
    found = False
    for record in records:
        if record.date == day and not found:
            updated.append(AnswerRecord(question=question, answer=answer, date=day, id=record.id))
            found = True
        elif record.date != day:
            updated.append(record)
    if not found:
        updated.append(AnswerRecord(question=question, answer=answer, date=day))
    return sort_newest_first(updated)
