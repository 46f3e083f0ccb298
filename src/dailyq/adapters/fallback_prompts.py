"""Local fallback prompt provider - fixed question list."""

import random
import time
from typing import Callable

DEFAULT_QUESTION = "How was your day today?"

FALLBACK_QUESTIONS = [
    "What are you most grateful for today?",
    "What is one thing you really want to do tomorrow?",
    "Is there something new you learned recently?",
    "What made you smile today?",
    "What would you like to say to the person who matters most to you?",
    "Name one of your strengths.",
    "How do you relieve stress?",
    "What does the future you dream of look like?",
    "What was the most memorable moment of your day?",
    "What is a hobby or interest that is uniquely yours?",
    "Which recent book or movie left an impression on you?",
    "What small things make you happy?",
    "How do you get through difficult situations?",
    "What do your friends say is your charm?",
    "Is there a goal you want to reach this year?",
    "Do you have your own way of unwinding?",
    "What is a cherished memory with family or friends?",
    "Which season do you like best, and why?",
    "Is there something new you would like to try?",
    "What small gift could you give yourself today?",
]


class FallbackPromptProvider:
    """
    Fixed-list prompt provider.

    Implements PromptProvider protocol. Picks a question at random after a
    short artificial delay, standing in for a remote call.
    """

    def __init__(
        self,
        questions: list[str] | None = None,
        delay_range: tuple[float, float] = (0.5, 1.5),
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.questions = list(FALLBACK_QUESTIONS if questions is None else questions)
        self.delay_range = delay_range
        self._rng = rng or random.Random()
        self._sleep = sleep

    def generate_prompt(self) -> str:
        """Return one question from the list."""
        low, high = self.delay_range
        if high > 0:
            self._sleep(self._rng.uniform(low, high))
        if not self.questions:
            return DEFAULT_QUESTION
        return self._rng.choice(self.questions)
