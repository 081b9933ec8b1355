from typing import Awaitable, Callable, List

from dotenv import load_dotenv
from pydantic import BaseModel, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models import SearchResult
from app.services.live_search import LiveSearch

load_dotenv()


DEFAULT_PROMPT = (
    "You are an AI assistant that answers in two clear parts. "
    "First, provide a brief answer using ONLY information from the provided context. "
    'If you cannot find the answer, say "I cannot find this in the available information." '
    'Then, if relevant, add a short "Additional Context:" section with helpful supplemental knowledge. '
    "Keep all responses concise and to the point."
)


def split_dir_list(value: str) -> List[str]:
    """Split a comma-separated directory setting, dropping blank entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


class SearchSettings(BaseModel):
    """Retrieval policy for one search mode."""

    model_config = {"frozen": True}

    match_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    match_count: int = Field(default=10, ge=1)
    min_content_length: int = Field(default=10, ge=0)


class ChunkingConfig(BaseModel):
    """Chunk sizing used when splitting documents for embedding."""

    model_config = {"frozen": True}

    min_paragraph_size: int = Field(default=200, ge=0)
    max_paragraph_size: int = Field(default=600, ge=1)
    chars_from_previous_paragraph: int = Field(default=0, ge=0)


class SyncConfig(BaseModel):
    """Everything a sync pass needs besides its collaborators."""

    model_config = {"frozen": True}

    excluded_dirs: List[str] = Field(default_factory=list)
    public_dirs: List[str] = Field(default_factory=list)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)


class Settings(BaseSettings):
    """Base settings for the application."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "Vault Index"
    APP_VERSION: str = "1.1.4"
    APP_DESCRIPTION: str = "Semantic search and grounded answers over a markdown vault"

    # Supabase record store
    SUPABASE_URL: str = Field(default="", description="Supabase project URL (https://xxx.supabase.co)")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(default="", description="Supabase service role key")

    # OpenAI settings
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"

    # Vault settings
    VAULT_DIR: str = "vault"
    EXCLUDED_DIRS: str = ""
    PUBLIC_DIRS: str = ""
    INDEX_ON_START: bool = False

    # Chunking
    MIN_PARAGRAPH_SIZE: int = 200
    MAX_PARAGRAPH_SIZE: int = 600
    CHARS_FROM_PREVIOUS_PARAGRAPH: int = 0

    # Semantic search
    SEMANTIC_MATCH_THRESHOLD: float = 0.3
    SEMANTIC_MATCH_COUNT: int = 10
    SEMANTIC_MIN_CONTENT_LENGTH: int = 10

    # Generative search
    GENERATIVE_MATCH_THRESHOLD: float = 0.3
    GENERATIVE_MATCH_COUNT: int = 10
    GENERATIVE_MIN_CONTENT_LENGTH: int = 10

    # Search as you type
    MIN_LENGTH_BEFORE_AUTO_SEARCH: int = 10
    SEARCH_DEBOUNCE_SECONDS: float = 1.0

    PROMPT: str = DEFAULT_PROMPT

    @computed_field
    @property
    def excluded_dirs_list(self) -> List[str]:
        return split_dir_list(self.EXCLUDED_DIRS)

    @computed_field
    @property
    def public_dirs_list(self) -> List[str]:
        return split_dir_list(self.PUBLIC_DIRS)

    def missing_credentials(self) -> List[str]:
        """Names of the store and provider credentials that are not set."""
        required = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "OPENAI_API_KEY")
        return [name for name in required if not getattr(self, name).strip()]

    def chunking_config(self) -> ChunkingConfig:
        return ChunkingConfig(
            min_paragraph_size=self.MIN_PARAGRAPH_SIZE,
            max_paragraph_size=self.MAX_PARAGRAPH_SIZE,
            chars_from_previous_paragraph=self.CHARS_FROM_PREVIOUS_PARAGRAPH,
        )

    def sync_config(self) -> SyncConfig:
        return SyncConfig(
            excluded_dirs=self.excluded_dirs_list,
            public_dirs=self.public_dirs_list,
            chunking=self.chunking_config(),
        )

    def semantic_search_settings(self) -> SearchSettings:
        return SearchSettings(
            match_threshold=self.SEMANTIC_MATCH_THRESHOLD,
            match_count=self.SEMANTIC_MATCH_COUNT,
            min_content_length=self.SEMANTIC_MIN_CONTENT_LENGTH,
        )

    def generative_search_settings(self) -> SearchSettings:
        return SearchSettings(
            match_threshold=self.GENERATIVE_MATCH_THRESHOLD,
            match_count=self.GENERATIVE_MATCH_COUNT,
            min_content_length=self.GENERATIVE_MIN_CONTENT_LENGTH,
        )

    def live_search(self, search: Callable[[str], Awaitable[List[SearchResult]]]) -> LiveSearch:
        """Search-as-you-type front end over ``search`` with the configured timing."""
        return LiveSearch(
            search,
            min_length_before_auto_search=self.MIN_LENGTH_BEFORE_AUTO_SEARCH,
            debounce_seconds=self.SEARCH_DEBOUNCE_SECONDS,
        )


settings = Settings()
