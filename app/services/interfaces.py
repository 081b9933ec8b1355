"""Capability contracts the sync and retrieval services depend on.

Concrete implementations live in ``app.services.vault`` (document source),
``app.db.supabase_db`` (record store), and ``app.services.openai_provider``
(embedding, moderation, and chat).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from app.models import ChatMessage, Document, DocumentSection, Embedding, SearchResult


class SourceDocument(ABC):
    """A live document in the source tree."""

    path: str

    @abstractmethod
    async def read_text(self) -> str:
        """Return the raw text of the document."""


class DocumentSource(ABC):
    @abstractmethod
    async def list_documents(self) -> List[SourceDocument]:
        """Return the documents that currently exist, in a stable order."""


class RecordStore(ABC):
    """Document and section tables plus the similarity query."""

    @abstractmethod
    async def get_document_by_path(self, path: str) -> Optional[Document]:
        pass

    @abstractmethod
    async def upsert_document(
        self,
        path: str,
        meta: Dict[str, Any],
        public: bool,
        checksum: Optional[str] = None,
    ) -> Document:
        """Insert or replace the document row for ``path`` (conflict on path)."""

    @abstractmethod
    async def update_document(self, document_id: int, updates: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete_sections(self, document_id: int) -> None:
        pass

    @abstractmethod
    async def insert_section(self, section: DocumentSection) -> None:
        pass

    @abstractmethod
    async def delete_document_by_path(self, path: str) -> None:
        """Delete the document row; its sections cascade."""

    @abstractmethod
    async def list_documents(self) -> List[Document]:
        pass

    @abstractmethod
    async def match_sections(
        self,
        embedding: Sequence[float],
        match_threshold: float,
        match_count: int,
        min_content_length: int,
    ) -> List[SearchResult]:
        """Rank sections by similarity to ``embedding``, best first."""


class EmbeddingProvider(ABC):
    @abstractmethod
    async def embed(self, text: str) -> Embedding:
        pass


class ModerationProvider(ABC):
    @abstractmethod
    async def moderate(self, text: str) -> bool:
        """Return True when the text is flagged."""


class ChatProvider(ABC):
    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        pass


class ModelProvider(EmbeddingProvider, ModerationProvider, ChatProvider):
    """A provider offering embeddings, moderation, and chat together."""
