"""Adapters - I/O implementations of ports."""

from .json_store import JsonFileStore, MemoryStore, StorageError
from .fallback_prompts import FallbackPromptProvider
from .openai_prompts import OpenAIPromptProvider, PromptGenerationError

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "StorageError",
    "FallbackPromptProvider",
    "OpenAIPromptProvider",
    "PromptGenerationError",
]
