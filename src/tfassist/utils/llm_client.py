"""Streaming chat model backed by any OpenAI-compatible endpoint."""

from typing import Iterator, Optional, Sequence

import httpx
import structlog
from openai import OpenAI

from tfassist.config import Settings
from tfassist.errors import ConfigurationError
from tfassist.schemas.messages import Message, StreamFragment

logger = structlog.get_logger(__name__)


class OpenAIChatModel:
    """
    Streams chat completions through the openai SDK.

    Works against OpenAI itself or a local server that speaks the same API
    (Ollama, vLLM, llama.cpp) by pointing base_url at it.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ):
        if not model:
            raise ConfigurationError("chat model name must not be empty")
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIChatModel":
        """Build the client and model from settings."""
        if not settings.chat_model:
            raise ConfigurationError("CHAT_MODEL is not configured")

        client = OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=httpx.Timeout(settings.chat_timeout_seconds, connect=10.0),
        )
        logger.debug("Chat model configured", model=settings.chat_model, base_url=settings.openai_base_url)
        return cls(
            client=client,
            model=settings.chat_model,
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
        )

    def stream(self, messages: Sequence[Message]) -> Iterator[StreamFragment]:
        """
        Stream the reply to messages as fragments.

        The request is sent on first iteration. Closing the generator closes
        the underlying HTTP response.
        """
        kwargs = {
            "model": self.model,
            "messages": [m.model_dump() for m in messages],
            "temperature": self.temperature,
            "stream": True,
        }
        if self.max_tokens:
            kwargs["max_tokens"] = self.max_tokens

        logger.debug("Opening chat stream", model=self.model, turns=len(messages))
        response = self.client.chat.completions.create(**kwargs)
        with response:
            for chunk in response:
                if not chunk.choices:
                    # usage-only chunk
                    yield StreamFragment()
                    continue
                delta = chunk.choices[0].delta
                yield StreamFragment(role=delta.role, content=delta.content or "")
