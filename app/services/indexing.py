"""Vault sync wired to the configured Supabase store and OpenAI provider."""

from app.config.settings import settings
from app.db.supabase_db import SupabaseRecordStore
from app.models import SyncResult
from app.services.document_sync import sync_documents
from app.services.openai_provider import OpenAIProvider
from app.services.vault import VaultDocumentSource
from app.utils.errors import ConfigurationError


def ensure_configured() -> None:
    """Raise before any work starts if a credential is missing."""
    missing = settings.missing_credentials()
    if missing:
        raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")


async def run_vault_sync() -> SyncResult:
    ensure_configured()
    return await sync_documents(
        VaultDocumentSource(settings.VAULT_DIR),
        SupabaseRecordStore(),
        OpenAIProvider(),
        settings.sync_config(),
    )
