"""Models representing indexed documents and their sections."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Document(BaseModel):
    """One indexed source file, keyed by its vault-relative path."""

    id: Optional[int] = None
    path: str = Field(min_length=1)
    checksum: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    public: bool = False

    @property
    def is_complete(self) -> bool:
        """A null checksum marks a document whose sections still need embedding."""
        return self.checksum is not None


class DocumentSection(BaseModel):
    """A single embedded chunk of a document."""

    id: Optional[int] = None
    document_id: int
    content: str
    token_count: int = Field(default=0, ge=0)
    embedding: List[float] = Field(default_factory=list)


class Embedding(BaseModel):
    """Vector returned by the embedding provider for one input."""

    vector: List[float]
    token_count: int = Field(default=0, ge=0)


class SyncResult(BaseModel):
    """Counters reported at the end of a sync pass."""

    success_count: int = 0
    updated_count: int = 0
    error_count: int = 0
    delete_count: int = 0
    elapsed_seconds: float = 0.0
