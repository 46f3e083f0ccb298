"""Prompt provider interface."""

from typing import Protocol


class PromptProvider(Protocol):
    """Interface for producing a daily question."""

    def generate_prompt(self) -> str:
        """Produce one question string."""
        ...
