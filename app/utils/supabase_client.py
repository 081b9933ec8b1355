"""Supabase client initialization."""

from typing import Optional

from supabase import Client, ClientOptions, create_client

from app.config.settings import settings
from app.config.logger import app_logger
from app.utils.errors import ConfigurationError

_supabase_admin_client: Optional[Client] = None


def get_supabase_admin_client() -> Client:
    """Get or create the Supabase client with the service role key.

    The index tables are written by the sync job, so the service role key is
    required; sessions are never persisted or refreshed.

    Returns:
        Client: Supabase admin client instance

    Raises:
        ConfigurationError: If Supabase URL or service role key is not configured
    """
    global _supabase_admin_client

    if _supabase_admin_client is not None:
        return _supabase_admin_client

    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigurationError(
            "Supabase URL and SERVICE_ROLE_KEY must be configured. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in .env"
        )

    try:
        _supabase_admin_client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        app_logger.info("Supabase admin client initialized successfully")
        return _supabase_admin_client
    except Exception as e:
        app_logger.error(f"Failed to initialize Supabase admin client: {e}")
        raise
