"""Shared fixtures for sync, search, and API tests."""

import pytest

from app.config.settings import ChunkingConfig, SearchSettings, SyncConfig
from tests.fakes import FakeProvider, InMemoryRecordStore


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig(
        excluded_dirs=["Private/"],
        public_dirs=["Public/"],
        chunking=ChunkingConfig(min_paragraph_size=200, max_paragraph_size=600),
    )


@pytest.fixture
def search_settings() -> SearchSettings:
    return SearchSettings(match_threshold=0.5, match_count=3, min_content_length=10)


@pytest.fixture
def long_note() -> str:
    paragraphs = [
        "Spaced repetition schedules reviews at increasing intervals. " * 4,
        "The forgetting curve shows memory decays quickly without review. " * 5,
        "Active recall beats rereading for long term retention. " * 3,
        "Cards should be atomic and phrased as questions. " * 6,
    ]
    return "---\ntitle: Learning\ntags: [memory, study]\n---\n" + "\n\n".join(p.strip() for p in paragraphs)
