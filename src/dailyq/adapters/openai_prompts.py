"""OpenAI prompt adapter - HTTP client for question generation."""

import logging

import requests

from .fallback_prompts import FallbackPromptProvider

logger = logging.getLogger(__name__)

API_URL = "https://api.openai.com/v1/chat/completions"
SYSTEM_PROMPT = (
    "Write one everyday question on a single line. Keep it short. "
    "Make it a question that helps with self-improvement or daily life."
)
USER_PROMPT = "Write today's question."


class PromptGenerationError(RuntimeError):
    """Raised when a question cannot be generated."""

    pass


class OpenAIPromptProvider:
    """
    OpenAI chat-completions adapter.

    Implements PromptProvider protocol. Falls back to a local provider when
    no API key is set or the request fails.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-3.5-turbo",
        timeout: float = 30.0,
        fallback: FallbackPromptProvider | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.fallback = fallback
        self._session = session or requests.Session()

    def _request_body(self) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT},
            ],
            "max_tokens": 50,
            "temperature": 0.8,
        }

    def _fetch(self) -> str:
        """Call the API and return the first choice's text."""
        resp = self._session.post(
            API_URL,
            json=self._request_body(),
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise PromptGenerationError(f"Unexpected API response: {data!r}") from e
        content = (content or "").strip()
        if not content:
            raise PromptGenerationError("API returned an empty question")
        return content

    def _use_fallback(self, reason: str) -> str:
        if self.fallback is None:
            raise PromptGenerationError(reason)
        return self.fallback.generate_prompt()

    def generate_prompt(self) -> str:
        """Generate a question, falling back to the local list on failure."""
        if not self.api_key:
            return self._use_fallback("No OpenAI API key configured")

        try:
            return self._fetch()
        except requests.Timeout:
            logger.warning(f"Question generation timed out after {self.timeout}s, using fallback")
            return self._use_fallback(f"Question generation timed out after {self.timeout}s")
        except (requests.RequestException, ValueError, PromptGenerationError) as e:
            # ValueError: non-JSON body
            logger.warning(f"Question generation failed: {e}")
            return self._use_fallback(f"Question generation failed: {e}")
