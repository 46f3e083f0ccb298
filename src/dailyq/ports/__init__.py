"""Ports - interfaces/protocols for external dependencies."""

from .kv_store import KeyValueStore
from .prompt_provider import PromptProvider

__all__ = [
    "KeyValueStore",
    "PromptProvider",
]
