"""Request and response schemas for search and chat endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.config.settings import SearchSettings
from app.models import ChatMessage


class SearchOverrides(BaseModel):
    """Optional per-request overrides of the configured retrieval policy."""

    match_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Minimum similarity (0-1)")
    match_count: Optional[int] = Field(default=None, ge=1, le=100, description="Maximum number of sections")
    min_content_length: Optional[int] = Field(default=None, ge=0, description="Minimum section length in characters")

    def apply(self, defaults: SearchSettings) -> SearchSettings:
        overrides = self.model_dump(
            include={"match_threshold", "match_count", "min_content_length"},
            exclude_none=True,
        )
        return defaults.model_copy(update=overrides)


class SearchRequest(SearchOverrides):
    """Request schema for POST /v1/search."""

    query: str = Field(..., min_length=1, description="Search query text")

    model_config = {"json_schema_extra": {"example": {
        "query": "What did I write about spaced repetition?",
        "match_count": 5,
    }}}


class SearchResultItem(BaseModel):
    """Single ranked section, rendered for display."""

    id: Optional[int] = Field(default=None, description="Section ID")
    document_id: Optional[int] = Field(default=None, description="Owning document ID")
    path: str = Field(description="Vault-relative path of the document")
    name: str = Field(description="Note name (file name without extension)")
    content: str = Field(description="Raw section text")
    similarity: float = Field(description="Similarity score (0-1)")
    preview: str = Field(description="'<similarity>% - <content>' with markdown stripped and truncated")
    line: Optional[int] = Field(default=None, description="1-based line where the section starts in the live file")


class SearchResponse(BaseModel):
    """Response schema for POST /v1/search."""

    results: List[SearchResultItem] = Field(default_factory=list)
    query: str
    total_results: int = 0
    processing_time_ms: float

    model_config = {"json_schema_extra": {"example": {
        "results": [],
        "query": "What did I write about spaced repetition?",
        "total_results": 0,
        "processing_time_ms": 412.3,
    }}}


class ChatRequest(SearchOverrides):
    """Request schema for POST /v1/chat; the caller owns the history."""

    query: str = Field(..., min_length=1, description="User message")
    history: List[ChatMessage] = Field(default_factory=list, description="Previous turns of this conversation")

    model_config = {"json_schema_extra": {"example": {
        "query": "Summarise my notes on the Zettelkasten method",
        "history": [],
    }}}


class ChatResponse(BaseModel):
    """Response schema for POST /v1/chat."""

    answer: str
    query: str
    history: List[ChatMessage] = Field(default_factory=list, description="History including this turn")
    processing_time_ms: float
