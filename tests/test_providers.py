"""Unit tests for the Supabase record store and the OpenAI provider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.db.supabase_db import MATCH_FUNCTION, SupabaseRecordStore
from app.models import ChatMessage, DocumentSection
from app.services.openai_provider import OpenAIProvider


@pytest.fixture
def supabase():
    client = MagicMock()
    client.table.return_value = client
    for method in ("select", "eq", "limit", "upsert", "update", "delete", "insert"):
        getattr(client, method).return_value = client
    client.execute.return_value = SimpleNamespace(data=[])
    client.rpc.return_value = client
    return client


class TestSupabaseRecordStore:
    """Test cases for SupabaseRecordStore."""

    async def test_get_document_by_path(self, supabase):
        supabase.execute.return_value = SimpleNamespace(
            data=[{"id": 3, "path": "a.md", "checksum": "abc", "meta": {"title": "A"}, "public": True}]
        )

        document = await SupabaseRecordStore(supabase).get_document_by_path("a.md")

        assert document.id == 3
        assert document.public is True
        supabase.table.assert_called_with("document")
        supabase.eq.assert_called_with("path", "a.md")

    async def test_unknown_path(self, supabase):
        assert await SupabaseRecordStore(supabase).get_document_by_path("missing.md") is None

    async def test_upsert_conflicts_on_path(self, supabase):
        supabase.execute.return_value = SimpleNamespace(
            data=[{"id": 1, "path": "a.md", "checksum": None, "meta": {}, "public": False}]
        )

        document = await SupabaseRecordStore(supabase).upsert_document("a.md", {}, False)

        assert document.checksum is None
        supabase.upsert.assert_called_once_with(
            {"checksum": None, "path": "a.md", "meta": {}, "public": False},
            on_conflict="path",
        )

    async def test_upsert_without_returned_row_fails(self, supabase):
        with pytest.raises(RuntimeError):
            await SupabaseRecordStore(supabase).upsert_document("a.md", {}, False)

    async def test_insert_section_omits_id(self, supabase):
        section = DocumentSection(document_id=1, content="text", token_count=2, embedding=[0.1, 0.2])

        await SupabaseRecordStore(supabase).insert_section(section)

        supabase.table.assert_called_with("document_section")
        supabase.insert.assert_called_once_with(
            {"document_id": 1, "content": "text", "token_count": 2, "embedding": [0.1, 0.2]}
        )

    async def test_match_sections_calls_rpc(self, supabase):
        supabase.execute.return_value = SimpleNamespace(
            data=[{"id": 9, "document_id": 1, "content": "text", "similarity": 0.8, "path": "a.md"}]
        )

        results = await SupabaseRecordStore(supabase).match_sections([0.1, 0.2], 0.3, 5, 10)

        assert results[0].similarity == 0.8
        supabase.rpc.assert_called_once_with(
            MATCH_FUNCTION,
            {"embedding": [0.1, 0.2], "match_threshold": 0.3, "match_count": 5, "min_content_length": 10},
        )

    async def test_errors_propagate(self, supabase):
        supabase.execute.side_effect = ConnectionError("network down")

        with pytest.raises(ConnectionError):
            await SupabaseRecordStore(supabase).delete_document_by_path("a.md")


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(
            data=[SimpleNamespace(embedding=[0.5, 0.25])],
            usage=SimpleNamespace(total_tokens=4),
        )
    )
    client.moderations.create = AsyncMock(
        return_value=SimpleNamespace(results=[SimpleNamespace(flagged=True)])
    )
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="An answer"))])
    )
    return client


class TestOpenAIProvider:
    """Test cases for OpenAIProvider."""

    async def test_embed(self, openai_client):
        provider = OpenAIProvider(openai_client, embedding_model="text-embedding-3-small")

        embedding = await provider.embed("some text")

        assert embedding.vector == [0.5, 0.25]
        assert embedding.token_count == 4
        openai_client.embeddings.create.assert_awaited_once_with(model="text-embedding-3-small", input="some text")

    async def test_moderate_trims_input(self, openai_client):
        flagged = await OpenAIProvider(openai_client).moderate("  text  ")

        assert flagged is True
        openai_client.moderations.create.assert_awaited_once_with(input="text")

    async def test_complete_sends_role_tagged_messages(self, openai_client):
        provider = OpenAIProvider(openai_client, chat_model="gpt-4o-mini", temperature=0.2)
        messages = [ChatMessage(role="system", content="ctx"), ChatMessage(role="user", content="q")]

        answer = await provider.complete(messages)

        assert answer == "An answer"
        openai_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o-mini",
            temperature=0.2,
            messages=[{"role": "system", "content": "ctx"}, {"role": "user", "content": "q"}],
        )

    async def test_failures_propagate(self, openai_client):
        openai_client.embeddings.create.side_effect = TimeoutError("timed out")

        with pytest.raises(TimeoutError):
            await OpenAIProvider(openai_client).embed("text")
