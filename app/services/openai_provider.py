"""OpenAI-backed embedding, moderation, and chat provider."""

from __future__ import annotations

from typing import Optional, Sequence

from openai import AsyncOpenAI

from app.config.logger import app_logger
from app.config.settings import settings
from app.models import ChatMessage, Embedding
from app.services.interfaces import ModelProvider
from app.utils.errors import ConfigurationError

_openai_client: AsyncOpenAI | None = None


def get_openai_client() -> AsyncOpenAI:
    """Return a singleton OpenAI client."""
    global _openai_client
    if _openai_client is None:
        if not settings.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY must be configured")
        _openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        app_logger.info("OpenAI client initialized")
    return _openai_client


class OpenAIProvider(ModelProvider):
    """Thin adapter over the OpenAI API; failures propagate to the caller."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        embedding_model: Optional[str] = None,
        chat_model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.client = client or get_openai_client()
        self.embedding_model = embedding_model or settings.OPENAI_EMBEDDING_MODEL
        self.chat_model = chat_model or settings.OPENAI_MODEL
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature

    async def embed(self, text: str) -> Embedding:
        response = await self.client.embeddings.create(
            model=self.embedding_model,
            input=text,
        )
        return Embedding(
            vector=response.data[0].embedding,
            token_count=response.usage.total_tokens,
        )

    async def moderate(self, text: str) -> bool:
        response = await self.client.moderations.create(input=text.strip())
        return bool(response.results[0].flagged)

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        completion = await self.client.chat.completions.create(
            model=self.chat_model,
            temperature=self.temperature,
            messages=[{"role": m.role, "content": m.content} for m in messages],
        )
        return completion.choices[0].message.content or ""
