"""Incremental sync of a document source into the vector index.

Each live document ends in one of three outcomes: skipped (checksum and
visibility unchanged), visibility updated, or re-indexed. Indexed documents
whose path is no longer live are deleted afterwards. A failing document never
aborts the pass; it is counted as an error and left with a null checksum so
the next sync retries it.
"""

from __future__ import annotations

import base64
import hashlib
import time
from enum import Enum
from typing import List, Optional, Set

from app.config.logger import app_logger
from app.config.settings import SyncConfig
from app.models import Document, DocumentSection, SyncResult
from app.services.chunking import prepare_document
from app.services.interfaces import DocumentSource, EmbeddingProvider, RecordStore, SourceDocument
from app.services.vault import is_path_in_directories

INPUT_PREVIEW_CHARS = 40


class DocumentOutcome(str, Enum):
    SKIPPED = "skipped"
    VISIBILITY_UPDATED = "visibility_updated"
    REINDEXED = "reindexed"


def compute_checksum(markdown: str) -> str:
    """SHA-256 of the raw text, front matter included, base64 encoded."""
    return base64.b64encode(hashlib.sha256(markdown.encode("utf-8")).digest()).decode("ascii")


async def _reindex_document(
    path: str,
    markdown: str,
    checksum: str,
    is_public: bool,
    existing: Optional[Document],
    store: RecordStore,
    embedder: EmbeddingProvider,
    config: SyncConfig,
) -> None:
    if existing is not None and existing.id is not None:
        app_logger.debug(f"SYNC reindexing '{path}'")
        await store.delete_sections(existing.id)

    prepared = prepare_document(markdown, path, config.chunking)

    document = await store.upsert_document(
        path=path,
        meta=prepared.frontmatter,
        public=is_public,
        checksum=None,
    )
    app_logger.debug(f"SYNC [{path}] adding {len(prepared.sections)} sections (with embeddings)")

    for section in prepared.sections:
        try:
            embedding = await embedder.embed(section.embedding_input)
            await store.insert_section(
                DocumentSection(
                    document_id=document.id,
                    content=section.content,
                    token_count=embedding.token_count,
                    embedding=embedding.vector,
                )
            )
        except Exception:
            app_logger.error(
                f"SYNC failed to generate embeddings for '{path}' section starting with "
                f"'{section.embedding_input[:INPUT_PREVIEW_CHARS]}...'"
            )
            raise

    # Checksum is only written once every section is stored
    await store.update_document(document.id, {"checksum": checksum})


async def sync_document(
    source_document: SourceDocument,
    store: RecordStore,
    embedder: EmbeddingProvider,
    config: SyncConfig,
) -> DocumentOutcome:
    """Bring one live document's index entry up to date."""
    path = source_document.path
    existing = await store.get_document_by_path(path)

    markdown = await source_document.read_text()
    checksum = compute_checksum(markdown)
    is_public = is_path_in_directories(path, config.public_dirs)

    if existing is not None and existing.checksum == checksum:
        if existing.public == is_public:
            return DocumentOutcome.SKIPPED

        app_logger.debug(f"SYNC updating access of '{path}', setting public to {is_public}")
        await store.update_document(existing.id, {"public": is_public})
        return DocumentOutcome.VISIBILITY_UPDATED

    try:
        await _reindex_document(path, markdown, checksum, is_public, existing, store, embedder, config)
    except Exception:
        await _mark_incomplete(path, existing, store)
        raise
    return DocumentOutcome.REINDEXED


async def _mark_incomplete(path: str, existing: Optional[Document], store: RecordStore) -> None:
    # Sections may already be gone while the old checksum is still stored
    if existing is None or existing.id is None or existing.checksum is None:
        return
    try:
        await store.update_document(existing.id, {"checksum": None})
    except Exception as e:
        app_logger.error(f"SYNC could not clear checksum of '{path}': {e}")


async def delete_dangling_documents(live_paths: Set[str], store: RecordStore, result: SyncResult) -> None:
    """Delete indexed documents whose path is no longer in the live set."""
    try:
        indexed = await store.list_documents()
    except Exception as e:
        result.error_count += 1
        app_logger.error(f"SYNC unable to retrieve documents to find dangling documents: {e}")
        return

    for document in indexed:
        if document.path in live_paths:
            continue
        try:
            await store.delete_document_by_path(document.path)
        except Exception as e:
            result.error_count += 1
            app_logger.error(f"SYNC unable to delete dangling document at path '{document.path}': {e}")
            continue
        result.delete_count += 1
        app_logger.debug(f"SYNC deleted dangling document '{document.path}'")


async def sync_documents(
    source: DocumentSource,
    store: RecordStore,
    embedder: EmbeddingProvider,
    config: SyncConfig,
) -> SyncResult:
    """Sync every non-excluded document of ``source`` into ``store``.

    Documents are processed one at a time, sections within a document one at
    a time.
    """
    start_time = time.time()

    documents: List[SourceDocument] = [
        document
        for document in await source.list_documents()
        if not is_path_in_directories(document.path, config.excluded_dirs)
    ]
    app_logger.info(f"SYNC starting with {len(documents)} documents")

    result = SyncResult()
    for document in documents:
        try:
            outcome = await sync_document(document, store, embedder, config)
        except Exception as e:
            app_logger.error(
                f"SYNC document '{document.path}' or one of its sections failed to store properly "
                f"and has been marked with a null checksum to be regenerated: {e}"
            )
            result.error_count += 1
            continue

        result.success_count += 1
        if outcome is not DocumentOutcome.SKIPPED:
            result.updated_count += 1

    await delete_dangling_documents({document.path for document in documents}, store, result)

    result.elapsed_seconds = round(time.time() - start_time, 2)
    app_logger.info(
        "SYNC complete - success={} updated={} errors={} deleted={} elapsed={:.2f}s",
        result.success_count,
        result.updated_count,
        result.error_count,
        result.delete_count,
        result.elapsed_seconds,
    )
    return result
