"""Tests for prompt providers."""

import random
from unittest.mock import MagicMock

import pytest
import requests

from dailyq.adapters.fallback_prompts import (
    DEFAULT_QUESTION,
    FALLBACK_QUESTIONS,
    FallbackPromptProvider,
)
from dailyq.adapters.openai_prompts import (
    API_URL,
    OpenAIPromptProvider,
    PromptGenerationError,
)


@pytest.fixture
def fallback():
    return FallbackPromptProvider(questions=["Fallback question?"], delay_range=(0, 0))


def make_response(payload=None, status_error=None, json_error=None):
    resp = MagicMock()
    if status_error:
        resp.raise_for_status.side_effect = status_error
    if json_error:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


class TestFallbackPromptProvider:
    def test_picks_from_list(self):
        provider = FallbackPromptProvider(delay_range=(0, 0), rng=random.Random(1))
        assert provider.generate_prompt() in FALLBACK_QUESTIONS

    def test_sleeps_within_delay_range(self):
        sleep = MagicMock()
        provider = FallbackPromptProvider(delay_range=(0.5, 1.5), sleep=sleep)
        provider.generate_prompt()
        sleep.assert_called_once()
        delay = sleep.call_args[0][0]
        assert 0.5 <= delay <= 1.5

    def test_no_sleep_when_delay_disabled(self):
        sleep = MagicMock()
        FallbackPromptProvider(delay_range=(0, 0), sleep=sleep).generate_prompt()
        sleep.assert_not_called()

    def test_empty_list_uses_default(self):
        provider = FallbackPromptProvider(questions=[], delay_range=(0, 0))
        assert provider.generate_prompt() == DEFAULT_QUESTION

    def test_has_twenty_questions(self):
        assert len(FALLBACK_QUESTIONS) == 20


class TestOpenAIPromptProvider:
    def test_returns_stripped_content(self, fallback):
        session = MagicMock()
        session.post.return_value = make_response(
            {"choices": [{"message": {"role": "assistant", "content": "  What inspired you?\n"}}]}
        )
        provider = OpenAIPromptProvider(api_key="sk-test", fallback=fallback, session=session)

        assert provider.generate_prompt() == "What inspired you?"

        args, kwargs = session.post.call_args
        assert args[0] == API_URL
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["json"]["model"] == "gpt-3.5-turbo"
        assert kwargs["json"]["max_tokens"] == 50
        assert kwargs["json"]["temperature"] == 0.8
        assert kwargs["timeout"] == 30.0

    def test_no_key_uses_fallback_without_request(self, fallback):
        session = MagicMock()
        provider = OpenAIPromptProvider(api_key="", fallback=fallback, session=session)
        assert provider.generate_prompt() == "Fallback question?"
        session.post.assert_not_called()

    def test_http_error_uses_fallback(self, fallback):
        session = MagicMock()
        session.post.return_value = make_response(status_error=requests.HTTPError("401"))
        provider = OpenAIPromptProvider(api_key="sk-test", fallback=fallback, session=session)
        assert provider.generate_prompt() == "Fallback question?"

    def test_timeout_uses_fallback(self, fallback):
        session = MagicMock()
        session.post.side_effect = requests.Timeout()
        provider = OpenAIPromptProvider(api_key="sk-test", fallback=fallback, session=session)
        assert provider.generate_prompt() == "Fallback question?"

    def test_malformed_response_uses_fallback(self, fallback):
        session = MagicMock()
        session.post.return_value = make_response({"choices": []})
        provider = OpenAIPromptProvider(api_key="sk-test", fallback=fallback, session=session)
        assert provider.generate_prompt() == "Fallback question?"

    def test_non_json_body_uses_fallback(self, fallback):
        session = MagicMock()
        session.post.return_value = make_response(json_error=ValueError("no json"))
        provider = OpenAIPromptProvider(api_key="sk-test", fallback=fallback, session=session)
        assert provider.generate_prompt() == "Fallback question?"

    def test_raises_without_fallback(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")
        provider = OpenAIPromptProvider(api_key="sk-test", fallback=None, session=session)
        with pytest.raises(PromptGenerationError, match="offline"):
            provider.generate_prompt()

    def test_no_key_and_no_fallback_raises(self):
        provider = OpenAIPromptProvider(api_key="", fallback=None, session=MagicMock())
        with pytest.raises(PromptGenerationError, match="No OpenAI API key"):
            provider.generate_prompt()
