"""
Language-model access for the news relay.

Wraps the OpenAI SDK for chat completions and embeddings and provides helpers
to recover structured JSON from model replies.
"""

__version__ = "0.1.0"

from .openai_provider import (
    ChatCompletion,
    EmbeddingResult,
    OpenAIProvider,
    OpenAIProviderError,
    Usage,
)

__all__ = [
    "ChatCompletion",
    "EmbeddingResult",
    "OpenAIProvider",
    "OpenAIProviderError",
    "Usage",
]
