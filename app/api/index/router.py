"""Index management endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_document_source, get_model_provider, get_record_store
from app.api.index.schemas import SyncResponse
from app.config.logger import app_logger
from app.config.settings import settings
from app.services.document_sync import sync_documents
from app.services.interfaces import DocumentSource, ModelProvider, RecordStore
from app.utils.responses import SuccessResponse, success_response

router = APIRouter(prefix="/v1/index", tags=["index"])


@router.post(
    "/sync",
    response_model=SuccessResponse[SyncResponse],
    summary="Sync the vault into the Supabase index",
)
async def sync_index(
    store: RecordStore = Depends(get_record_store),
    provider: ModelProvider = Depends(get_model_provider),
    source: DocumentSource = Depends(get_document_source),
) -> SuccessResponse[SyncResponse]:
    """Refresh the index (idempotent): re-embed changed documents, drop deleted ones."""
    try:
        result = await sync_documents(source, store, provider, settings.sync_config())
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except Exception as exc:  # pragma: no cover - unexpected errors
        app_logger.error(f"Vault sync failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Vault sync failed: {str(exc)}",
        )

    if result.error_count:
        message = f"There were {result.error_count} errors, see the sync log for details"
    else:
        message = (
            f"Successfully indexed {result.success_count} documents with {result.updated_count} updates. "
            f"Removed {result.delete_count} deleted documents."
        )
    return success_response(data=SyncResponse(**result.model_dump()), message=message)
