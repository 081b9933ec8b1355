"""Models module - re-exports the domain models."""

from app.models.document import Document, DocumentSection, Embedding, SyncResult
from app.models.search import ChatMessage, SearchResult

__all__ = [
    "Document",
    "DocumentSection",
    "Embedding",
    "SyncResult",
    "ChatMessage",
    "SearchResult",
]
