"""In-memory collaborators standing in for the vault, Supabase, and OpenAI."""

from typing import Any, Dict, List, Optional, Sequence

from app.models import ChatMessage, Document, DocumentSection, Embedding, SearchResult
from app.services.interfaces import DocumentSource, ModelProvider, RecordStore, SourceDocument


class InMemoryDocument(SourceDocument):
    def __init__(self, path: str, text: str, fail_read: bool = False):
        self.path = path
        self.text = text
        self.fail_read = fail_read

    async def read_text(self) -> str:
        if self.fail_read:
            raise OSError(f"cannot read {self.path}")
        return self.text


class InMemorySource(DocumentSource):
    """Document source whose contents tests edit between syncs."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = dict(files or {})
        self.unreadable: set = set()

    async def list_documents(self) -> List[SourceDocument]:
        return [
            InMemoryDocument(path, text, fail_read=path in self.unreadable)
            for path, text in sorted(self.files.items())
        ]


class InMemoryRecordStore(RecordStore):
    """Record store keeping rows in dicts and logging every write."""

    def __init__(self):
        self.documents: Dict[str, Document] = {}
        self.sections: List[DocumentSection] = []
        self.matches: List[SearchResult] = []
        self.match_calls: List[Dict[str, Any]] = []
        self.operations: List[tuple] = []
        self.fail_list = False
        self.fail_upsert = False
        self.fail_delete_paths: set = set()
        self._next_document_id = 1
        self._next_section_id = 1

    async def get_document_by_path(self, path: str) -> Optional[Document]:
        document = self.documents.get(path)
        return document.model_copy(deep=True) if document else None

    async def upsert_document(self, path, meta, public, checksum=None) -> Document:
        if self.fail_upsert:
            raise RuntimeError("upsert failed")
        existing = self.documents.get(path)
        document_id = existing.id if existing else self._next_document_id
        if existing is None:
            self._next_document_id += 1
        document = Document(id=document_id, path=path, checksum=checksum, meta=dict(meta), public=public)
        self.documents[path] = document
        self.operations.append(("upsert", path, checksum))
        return document.model_copy(deep=True)

    async def update_document(self, document_id: int, updates: Dict[str, Any]) -> None:
        for path, document in self.documents.items():
            if document.id == document_id:
                self.documents[path] = document.model_copy(update=updates)
                self.operations.append(("update", path, dict(updates)))
                return

    async def delete_sections(self, document_id: int) -> None:
        self.sections = [s for s in self.sections if s.document_id != document_id]
        self.operations.append(("delete_sections", document_id))

    async def insert_section(self, section: DocumentSection) -> None:
        self.sections.append(section.model_copy(update={"id": self._next_section_id}))
        self._next_section_id += 1
        self.operations.append(("insert_section", section.document_id, section.content))

    async def delete_document_by_path(self, path: str) -> None:
        if path in self.fail_delete_paths:
            raise RuntimeError(f"cannot delete {path}")
        document = self.documents.pop(path, None)
        if document is not None:
            self.sections = [s for s in self.sections if s.document_id != document.id]
        self.operations.append(("delete_document", path))

    async def list_documents(self) -> List[Document]:
        if self.fail_list:
            raise RuntimeError("listing failed")
        return [d.model_copy(deep=True) for d in self.documents.values()]

    async def match_sections(self, embedding, match_threshold, match_count, min_content_length):
        self.match_calls.append(
            {
                "embedding": list(embedding),
                "match_threshold": match_threshold,
                "match_count": match_count,
                "min_content_length": min_content_length,
            }
        )
        return [m.model_copy() for m in self.matches]

    def sections_for(self, path: str) -> List[DocumentSection]:
        document = self.documents[path]
        return [s for s in self.sections if s.document_id == document.id]


class FakeProvider(ModelProvider):
    """Deterministic provider recording every call it receives."""

    def __init__(self, flagged: bool = False, answer: str = "stub answer"):
        self.flagged = flagged
        self.answer = answer
        self.fail_embed_on: Optional[str] = None
        self.fail_moderation = False
        self.fail_chat = False
        self.embed_calls: List[str] = []
        self.moderation_calls: List[str] = []
        self.chat_calls: List[List[ChatMessage]] = []

    async def embed(self, text: str) -> Embedding:
        self.embed_calls.append(text)
        if self.fail_embed_on is not None and self.fail_embed_on in text:
            raise RuntimeError("embedding endpoint returned 500")
        return Embedding(vector=[float(len(text)), 1.0, 0.0], token_count=len(text.split()))

    async def moderate(self, text: str) -> bool:
        self.moderation_calls.append(text)
        if self.fail_moderation:
            raise RuntimeError("moderation endpoint unavailable")
        return self.flagged

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        self.chat_calls.append(list(messages))
        if self.fail_chat:
            raise RuntimeError("chat endpoint timed out")
        return self.answer
