"""Semantic search and chat endpoints."""

from datetime import datetime, timezone
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_document_source, get_model_provider, get_record_store
from app.api.search.schemas import (
    ChatRequest,
    ChatResponse,
    SearchRequest,
    SearchResponse,
    SearchResultItem,
)
from app.config.logger import app_logger
from app.config.settings import settings
from app.models import SearchResult
from app.services.interfaces import ModelProvider, RecordStore
from app.services.search import generative_search, semantic_search
from app.services.vault import VaultDocumentSource, locate_section
from app.utils.errors import ModerationFlaggedError, SearchError
from app.utils.responses import SuccessResponse, success_response
from app.utils.text import remove_markdown, truncate_string

router = APIRouter(prefix="/v1", tags=["search"])

PREVIEW_CHARS = 200


def _elapsed_ms(start_time: datetime) -> float:
    return (datetime.now(timezone.utc) - start_time).total_seconds() * 1000


def _query_failed(exc: Exception) -> HTTPException:
    if isinstance(exc, ModerationFlaggedError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, SearchError):
        app_logger.error(f"Search failed: {exc} ({exc.cause!r})")
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


async def render_result(result: SearchResult, source: VaultDocumentSource) -> SearchResultItem:
    """Attach the note name, a display preview, and the live line number."""
    similarity = round(result.similarity * 100)
    preview = truncate_string(remove_markdown(result.content), PREVIEW_CHARS)

    line = None
    try:
        text = await source.read_document(result.path)
    except OSError as e:
        app_logger.warning(f"Could not read '{result.path}' to locate section: {e}")
        text = None
    if text is not None:
        line = locate_section(text, result.content)

    return SearchResultItem(
        id=result.id,
        document_id=result.document_id,
        path=result.path,
        name=PurePosixPath(result.path).stem,
        content=result.content,
        similarity=result.similarity,
        preview=f"{similarity}% - {preview}",
        line=line,
    )


@router.post("/search", response_model=SuccessResponse[SearchResponse])
async def search(
    request: SearchRequest,
    store: RecordStore = Depends(get_record_store),
    provider: ModelProvider = Depends(get_model_provider),
    source: VaultDocumentSource = Depends(get_document_source),
):
    """Semantic search: sections ranked by similarity to the query."""
    start_time = datetime.now(timezone.utc)
    app_logger.info(f"Search request: {request.query[:100]}")

    try:
        results = await semantic_search(
            request.query,
            store,
            provider,
            request.apply(settings.semantic_search_settings()),
        )
    except (ModerationFlaggedError, SearchError, ValueError) as e:
        raise _query_failed(e)

    items = [await render_result(result, source) for result in results]
    return success_response(
        data=SearchResponse(
            results=items,
            query=request.query,
            total_results=len(items),
            processing_time_ms=_elapsed_ms(start_time),
        ),
        message="Search completed successfully",
    )


@router.post("/chat", response_model=SuccessResponse[ChatResponse])
async def chat(
    request: ChatRequest,
    store: RecordStore = Depends(get_record_store),
    provider: ModelProvider = Depends(get_model_provider),
):
    """Generative search: answer grounded in the retrieved sections."""
    start_time = datetime.now(timezone.utc)
    app_logger.info(f"Chat request: {request.query[:100]} (history={len(request.history)})")

    history = list(request.history)
    try:
        answer = await generative_search(
            request.query,
            history,
            store,
            provider,
            request.apply(settings.generative_search_settings()),
            settings.PROMPT,
        )
    except (ModerationFlaggedError, SearchError, ValueError) as e:
        raise _query_failed(e)

    return success_response(
        data=ChatResponse(
            answer=answer,
            query=request.query,
            history=history,
            processing_time_ms=_elapsed_ms(start_time),
        ),
        message="Answer generated successfully",
    )
