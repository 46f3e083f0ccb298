"""Tests for the shared workflow layer."""

from datetime import date, datetime
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from dailyq.adapters.fallback_prompts import FallbackPromptProvider
from dailyq.adapters.json_store import JsonFileStore, MemoryStore
from dailyq.adapters.openai_prompts import OpenAIPromptProvider
from dailyq.config import Config
from dailyq.core.records import AnswerRecord
from dailyq.record_store import RecordStore
from dailyq.workflows import (
    AnswerFilter,
    QuestionState,
    add_todo,
    clear_completed,
    day_detail,
    ensure_daily_question,
    filter_answers,
    get_prompt_provider,
    get_store,
    month_overview,
    remove_todo,
    submit_answer,
    toggle_todo,
)

SEOUL = ZoneInfo("Asia/Seoul")


@pytest.fixture
def store():
    return RecordStore(MemoryStore())


@pytest.fixture
def now():
    return datetime(2024, 3, 15, 9, 30, tzinfo=SEOUL)


@pytest.fixture
def today(now):
    return now.date()


@pytest.fixture
def provider():
    mock = MagicMock()
    mock.generate_prompt.return_value = "What made you smile today?"
    return mock


class TestGetStore:
    def test_uses_configured_file(self, tmp_path):
        config = Config(store_file=str(tmp_path / "s.json"), timezone="UTC", streak_lookback_days=30)
        store = get_store(config)
        assert isinstance(store.kv, JsonFileStore)
        assert store.kv.path == tmp_path / "s.json"
        assert store.tz == ZoneInfo("UTC")
        assert store.streak_lookback_days == 30

    def test_separate_instances(self, tmp_path):
        config = Config(store_file=str(tmp_path / "s.json"))
        assert get_store(config) is not get_store(config)


class TestGetPromptProvider:
    def test_fallback_without_key(self):
        assert isinstance(get_prompt_provider(Config()), FallbackPromptProvider)

    def test_openai_with_key(self):
        provider = get_prompt_provider(Config(openai_api_key="sk-test", openai_model="gpt-4o-mini"))
        assert isinstance(provider, OpenAIPromptProvider)
        assert provider.model == "gpt-4o-mini"
        assert isinstance(provider.fallback, FallbackPromptProvider)


class TestEnsureDailyQuestion:
    def test_generates_and_saves(self, store, provider, now, today):
        daily = ensure_daily_question(store, provider, now)
        assert daily.question == "What made you smile today?"
        assert daily.state is QuestionState.UNANSWERED
        assert store.get_question(today) == "What made you smile today?"
        assert store.get_last_question_day_key() == "2024-03-15"

    def test_reuses_existing_question(self, store, provider, now, today):
        store.save_question("Existing?", today)
        daily = ensure_daily_question(store, provider, now)
        assert daily.question == "Existing?"
        provider.generate_prompt.assert_not_called()

    def test_answered_state(self, store, provider, now, today):
        store.save_question("Q", today)
        store.save_answer("A", today)
        daily = ensure_daily_question(store, provider, now)
        assert daily.state is QuestionState.ANSWERED
        assert daily.answer == "A"

    def test_missing_when_generated_but_lost(self, store, provider, now, today):
        store.save_question("Q", today)
        store.kv.delete("question_2024-03-15")
        daily = ensure_daily_question(store, provider, now)
        assert daily.state is QuestionState.MISSING
        assert daily.question is None
        provider.generate_prompt.assert_not_called()

    def test_regenerate_replaces_missing(self, store, provider, now, today):
        store.save_question("Q", today)
        store.kv.delete("question_2024-03-15")
        daily = ensure_daily_question(store, provider, now, regenerate=True)
        assert daily.question == "What made you smile today?"
        assert store.get_question(today) == "What made you smile today?"

    def test_new_day_generates_again(self, store, provider, now):
        store.save_question("Yesterday's", date(2024, 3, 14))
        daily = ensure_daily_question(store, provider, now)
        assert daily.question == "What made you smile today?"

    def test_provider_errors_propagate(self, store, now):
        provider = MagicMock()
        provider.generate_prompt.side_effect = RuntimeError("offline")
        with pytest.raises(RuntimeError, match="offline"):
            ensure_daily_question(store, provider, now)


class TestSubmitAnswer:
    def test_saves_trimmed(self, store, now, today):
        store.save_question("Q", today)
        assert submit_answer(store, "  fine  ", now) is False
        assert store.get_answer(today) == "fine"
        assert store.get_all_answers()[0].answer == "fine"

    def test_reports_edit(self, store, now, today):
        store.save_question("Q", today)
        submit_answer(store, "first", now)
        assert submit_answer(store, "second", now) is True
        assert len(store.get_all_answers()) == 1

    def test_rejects_blank(self, store, now):
        with pytest.raises(ValueError, match="empty"):
            submit_answer(store, "   ", now)


class TestTodos:
    def test_add(self, store, today):
        todos = add_todo(store, " write tests ", today)
        assert [t.text for t in todos] == ["write tests"]
        assert store.get_todo_list(today)[0].text == "write tests"

    def test_add_blank_rejected(self, store, today):
        with pytest.raises(ValueError):
            add_todo(store, "  ", today)

    def test_toggle(self, store, today):
        add_todo(store, "a", today)
        assert toggle_todo(store, 0, today).is_completed is True
        assert store.get_todo_list(today)[0].is_completed is True
        assert toggle_todo(store, 0, today).is_completed is False

    def test_toggle_out_of_range(self, store, today):
        with pytest.raises(IndexError):
            toggle_todo(store, 0, today)

    def test_remove(self, store, today):
        add_todo(store, "a", today)
        add_todo(store, "b", today)
        assert remove_todo(store, 0, today).text == "a"
        assert [t.text for t in store.get_todo_list(today)] == ["b"]

    def test_remove_out_of_range(self, store, today):
        add_todo(store, "a", today)
        with pytest.raises(IndexError):
            remove_todo(store, 3, today)

    def test_clear_completed(self, store, today):
        for text in ("a", "b", "c"):
            add_todo(store, text, today)
        toggle_todo(store, 0, today)
        toggle_todo(store, 2, today)
        assert clear_completed(store, today) == 2
        assert [t.text for t in store.get_todo_list(today)] == ["b"]


class TestFilterAnswers:
    @pytest.fixture
    def records(self):
        return [
            AnswerRecord(question="Q", answer="A", date=d)
            for d in (date(2024, 3, 15), date(2024, 3, 9), date(2024, 3, 2), date(2024, 2, 28))
        ]

    def test_all(self, records, now):
        assert filter_answers(records, AnswerFilter.ALL, now, SEOUL) == records

    def test_month(self, records, now):
        result = filter_answers(records, AnswerFilter.MONTH, now, SEOUL)
        assert [r.date.day for r in result] == [15, 9, 2]

    def test_week(self, records, now):
        result = filter_answers(records, AnswerFilter.WEEK, now, SEOUL)
        assert [r.date for r in result] == [date(2024, 3, 15), date(2024, 3, 9)]

    def test_naive_now(self, records):
        result = filter_answers(records, AnswerFilter.MONTH, datetime(2024, 2, 29, 12), SEOUL)
        assert [r.date for r in result] == [date(2024, 3, 15), date(2024, 3, 9), date(2024, 3, 2), date(2024, 2, 28)]


class TestBrowsing:
    def test_day_detail(self, store, today):
        store.save_question("Q", today)
        store.save_answer("A", today)
        add_todo(store, "a", today)
        detail = day_detail(store, today)
        assert detail.question == "Q"
        assert detail.answer == "A"
        assert [t.text for t in detail.todos] == ["a"]
        assert detail.is_empty is False

    def test_empty_day(self, store, today):
        assert day_detail(store, today).is_empty is True

    def test_month_overview(self, store):
        store.save_question("Q", date(2024, 2, 1))
        store.save_answer("orphan", date(2024, 2, 14))
        add_todo(store, "a", date(2024, 2, 29))
        add_todo(store, "b", date(2024, 3, 1))
        assert month_overview(store, 2024, 2) == [date(2024, 2, 1), date(2024, 2, 14), date(2024, 2, 29)]
