"""Supabase REST API record store for documents and their sections.

Tables and the ``match_document_sections`` function are defined in
``supabase/schema.sql``.
"""

from typing import Any, Dict, List, Optional, Sequence

from supabase import Client

from app.config.logger import app_logger
from app.models import Document, DocumentSection, SearchResult
from app.services.interfaces import RecordStore
from app.utils.supabase_client import get_supabase_admin_client

DOCUMENT_TABLE = "document"
SECTION_TABLE = "document_section"
MATCH_FUNCTION = "match_document_sections"
DOCUMENT_COLUMNS = "id, path, checksum, meta, public"


class SupabaseRecordStore(RecordStore):
    """Record store backed by Supabase tables and a pgvector RPC."""

    def __init__(self, client: Optional[Client] = None):
        self.client = client or get_supabase_admin_client()

    # ============================================
    # Document Operations
    # ============================================

    async def get_document_by_path(self, path: str) -> Optional[Document]:
        try:
            response = (
                self.client.table(DOCUMENT_TABLE)
                .select(DOCUMENT_COLUMNS)
                .eq("path", path)
                .limit(1)
                .execute()
            )
        except Exception as e:
            app_logger.error(f"Failed to fetch document '{path}': {e}")
            raise

        if response.data:
            return Document(**response.data[0])
        return None

    async def upsert_document(
        self,
        path: str,
        meta: Dict[str, Any],
        public: bool,
        checksum: Optional[str] = None,
    ) -> Document:
        try:
            response = (
                self.client.table(DOCUMENT_TABLE)
                .upsert(
                    {"checksum": checksum, "path": path, "meta": meta, "public": public},
                    on_conflict="path",
                )
                .execute()
            )
        except Exception as e:
            app_logger.error(f"Failed to upsert document '{path}': {e}")
            raise

        if response.data:
            return Document(**response.data[0])
        raise RuntimeError(f"Failed to upsert document '{path}' - no data returned")

    async def update_document(self, document_id: int, updates: Dict[str, Any]) -> None:
        try:
            self.client.table(DOCUMENT_TABLE).update(updates).eq("id", document_id).execute()
        except Exception as e:
            app_logger.error(f"Failed to update document {document_id}: {e}")
            raise

    async def delete_document_by_path(self, path: str) -> None:
        try:
            self.client.table(DOCUMENT_TABLE).delete().eq("path", path).execute()
        except Exception as e:
            app_logger.error(f"Failed to delete document '{path}': {e}")
            raise

    async def list_documents(self) -> List[Document]:
        try:
            response = self.client.table(DOCUMENT_TABLE).select(DOCUMENT_COLUMNS).execute()
        except Exception as e:
            app_logger.error(f"Failed to list documents: {e}")
            raise
        return [Document(**row) for row in response.data or []]

    # ============================================
    # Section Operations
    # ============================================

    async def delete_sections(self, document_id: int) -> None:
        try:
            self.client.table(SECTION_TABLE).delete().eq("document_id", document_id).execute()
        except Exception as e:
            app_logger.error(f"Failed to delete sections of document {document_id}: {e}")
            raise

    async def insert_section(self, section: DocumentSection) -> None:
        try:
            self.client.table(SECTION_TABLE).insert(
                section.model_dump(exclude={"id"})
            ).execute()
        except Exception as e:
            app_logger.error(f"Failed to insert section for document {section.document_id}: {e}")
            raise

    async def match_sections(
        self,
        embedding: Sequence[float],
        match_threshold: float,
        match_count: int,
        min_content_length: int,
    ) -> List[SearchResult]:
        try:
            response = self.client.rpc(
                MATCH_FUNCTION,
                {
                    "embedding": list(embedding),
                    "match_threshold": match_threshold,
                    "match_count": match_count,
                    "min_content_length": min_content_length,
                },
            ).execute()
        except Exception as e:
            app_logger.error(f"Similarity query failed: {e}")
            raise
        return [SearchResult(**row) for row in response.data or []]


# ============================================
# Health Check
# ============================================

async def ping_supabase() -> tuple[bool, str]:
    """Check if Supabase connection is healthy."""
    try:
        client = get_supabase_admin_client()
        client.table(DOCUMENT_TABLE).select("id").limit(1).execute()
        return True, "Supabase REST API connection healthy"
    except Exception as e:
        return False, f"Supabase connection failed: {str(e)}"
