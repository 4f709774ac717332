"""
OpenAI-compatible provider for chat completions and embeddings.

Works against api.openai.com or any OpenAI-compatible gateway (LiteLLM, vLLM)
reachable through ``base_url``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


class OpenAIProviderError(Exception):
    """Provider failure with an optional provider error code and HTTP status."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_response(cls, usage: Any) -> "Usage":
        if usage is None:
            return cls()
        return cls(
            prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
            completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
            total_tokens=int(getattr(usage, "total_tokens", 0) or 0),
        )


@dataclass
class ChatCompletion:
    content: str
    model: str
    usage: Usage = field(default_factory=Usage)


@dataclass
class EmbeddingResult:
    vectors: List[List[float]]
    model: str
    usage: Usage = field(default_factory=Usage)


def _wrap_error(exc: Exception) -> OpenAIProviderError:
    if isinstance(exc, openai.APIStatusError):
        body = exc.body if isinstance(exc.body, dict) else {}
        code = body.get("code") if isinstance(body.get("code"), str) else None
        return OpenAIProviderError(str(exc), code=code or "API_ERROR", status_code=exc.status_code)
    if isinstance(exc, openai.APIConnectionError):
        return OpenAIProviderError(str(exc), code="CONNECTION_ERROR")
    return OpenAIProviderError(str(exc), code="UNKNOWN_ERROR")


class OpenAIProvider:
    """Thin async wrapper over ``AsyncOpenAI`` with typed results and errors."""

    def __init__(self, api_key: str, base_url: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        if not api_key and client is None:
            raise OpenAIProviderError("OPENAI_API_KEY is not configured", code="MISSING_API_KEY")
        if client is None:
            client_kwargs: Dict[str, Any] = {"api_key": api_key}
            if base_url:
                client_kwargs["base_url"] = base_url.rstrip("/")
                # helps with LiteLLM setups that expect X-API-KEY
                client_kwargs["default_headers"] = {"X-API-KEY": api_key}
            client = AsyncOpenAI(**client_kwargs)
        self.client = client
        logger.info("OpenAI provider initialized")

    async def chat(
        self,
        messages: List[Dict[str, str]],
        model: str = DEFAULT_CHAT_MODEL,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> ChatCompletion:
        """Create a chat completion.

        In JSON mode the request first asks for ``response_format=json_object``;
        backends that reject it are retried once in plain text mode.
        """
        if not messages:
            raise OpenAIProviderError("Messages array cannot be empty", code="INVALID_INPUT")

        params: Dict[str, Any] = {"model": model, "messages": messages}
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens

        logger.debug(f"Creating chat completion with {model} ({len(messages)} messages)")
        try:
            if json_mode:
                try:
                    resp = await self.client.chat.completions.create(
                        response_format={"type": "json_object"}, **params
                    )
                except openai.BadRequestError:
                    logger.info(f"{model} rejected JSON mode; retrying as plain chat")
                    resp = await self.client.chat.completions.create(**params)
            else:
                resp = await self.client.chat.completions.create(**params)
        except Exception as e:
            raise _wrap_error(e) from e

        content = ""
        if resp.choices:
            content = getattr(resp.choices[0].message, "content", "") or ""
        return ChatCompletion(
            content=content,
            model=getattr(resp, "model", model) or model,
            usage=Usage.from_response(getattr(resp, "usage", None)),
        )

    async def create_embedding(
        self, texts: Sequence[str], model: str = DEFAULT_EMBEDDING_MODEL
    ) -> EmbeddingResult:
        """Embed each input string; vectors come back in input order."""
        if not texts:
            raise OpenAIProviderError("Embedding input cannot be empty", code="INVALID_INPUT")
        try:
            resp = await self.client.embeddings.create(model=model, input=list(texts))
        except Exception as e:
            raise _wrap_error(e) from e

        data = sorted(resp.data, key=lambda d: getattr(d, "index", 0))
        return EmbeddingResult(
            vectors=[list(d.embedding) for d in data],
            model=getattr(resp, "model", model) or model,
            usage=Usage.from_response(getattr(resp, "usage", None)),
        )
