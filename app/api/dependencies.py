"""FastAPI dependencies wiring the services to their collaborators.

Missing credentials are reported as 503 before any sync or search starts.
"""

from fastapi import HTTPException, status

from app.config.logger import app_logger
from app.config.settings import settings
from app.db.supabase_db import SupabaseRecordStore
from app.services.interfaces import ModelProvider, RecordStore
from app.services.openai_provider import OpenAIProvider
from app.services.vault import VaultDocumentSource
from app.utils.errors import ConfigurationError


def _unavailable(exc: ConfigurationError) -> HTTPException:
    app_logger.warning(f"Refusing request, service not configured: {exc}")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


def get_record_store() -> RecordStore:
    try:
        return SupabaseRecordStore()
    except ConfigurationError as exc:
        raise _unavailable(exc)


def get_model_provider() -> ModelProvider:
    try:
        return OpenAIProvider()
    except ConfigurationError as exc:
        raise _unavailable(exc)


def get_document_source() -> VaultDocumentSource:
    return VaultDocumentSource(settings.VAULT_DIR)
