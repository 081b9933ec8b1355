"""Models for search results and chat conversations."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """A ranked section returned by the record store's similarity query."""

    id: Optional[int] = None
    document_id: Optional[int] = None
    content: str
    similarity: float
    path: str


class ChatMessage(BaseModel):
    """Single role-tagged message in a conversation."""

    role: Literal["system", "user", "assistant"]
    content: str = Field(default="")
