"""Conversation states for Telegram bot."""

from enum import IntEnum, auto


class AnswerStates(IntEnum):
    """States for the answer conversation."""

    CONFIRM_EDIT = auto()
    TEXT = auto()


class ClearStates(IntEnum):
    """States for the clear-all-data conversation."""

    CONFIRM = auto()
