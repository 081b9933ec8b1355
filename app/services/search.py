"""Semantic and generative search over the vault index."""

from __future__ import annotations

from typing import List, Sequence

from app.config.logger import app_logger
from app.config.settings import SearchSettings
from app.models import ChatMessage, SearchResult
from app.services.interfaces import ModelProvider, RecordStore
from app.utils.errors import QUERY_PREVIEW_CHARS, ModerationFlaggedError, SearchError

NO_CONTEXT_FOUND = "No relevant information was found in the indexed documents."
SECTION_DELIMITER = "---"


async def moderate_query(query: str, provider: ModelProvider) -> None:
    """Raise ModerationFlaggedError if the provider flags the query."""
    try:
        flagged = await provider.moderate(query)
    except Exception as e:
        raise SearchError(query, "Moderation failed", e) from e

    if flagged:
        app_logger.warning(f"Flagged query rejected: '{query[:QUERY_PREVIEW_CHARS]}...'")
        raise ModerationFlaggedError(query)


async def retrieve_sections(
    query: str,
    store: RecordStore,
    provider: ModelProvider,
    search_settings: SearchSettings,
) -> List[SearchResult]:
    """Moderate, embed, and run the similarity query for ``query``."""
    query = query.strip()
    if not query:
        raise ValueError("Query must not be empty")

    await moderate_query(query, provider)

    try:
        embedding = await provider.embed(query)
    except Exception as e:
        raise SearchError(query, "Embedding failed", e) from e

    try:
        matches = await store.match_sections(
            embedding.vector,
            match_threshold=search_settings.match_threshold,
            match_count=search_settings.match_count,
            min_content_length=search_settings.min_content_length,
        )
    except Exception as e:
        raise SearchError(query, "Similarity query failed", e) from e

    results = [
        match
        for match in matches
        if match.similarity >= search_settings.match_threshold
        and len(match.content) >= search_settings.min_content_length
    ]
    results.sort(key=lambda match: match.similarity, reverse=True)
    return results[: search_settings.match_count]


async def semantic_search(
    query: str,
    store: RecordStore,
    provider: ModelProvider,
    search_settings: SearchSettings,
) -> List[SearchResult]:
    """Return stored sections ranked by similarity to ``query``."""
    results = await retrieve_sections(query, store, provider, search_settings)
    app_logger.info(f"Semantic search returned {len(results)} results for '{query[:QUERY_PREVIEW_CHARS]}'")
    return results


def build_context_message(prompt: str, results: Sequence[SearchResult]) -> ChatMessage:
    """System message holding the instructions and the retrieved passages."""
    if results:
        passages = "\n".join(
            f"{SECTION_DELIMITER}\nSource: {result.path}\n{result.content.strip()}"
            for result in results
        )
        context = f"Context sections:\n{passages}\n{SECTION_DELIMITER}"
    else:
        context = f"Context sections:\n{NO_CONTEXT_FOUND}"
    return ChatMessage(role="system", content=f"{prompt}\n\n{context}")


def build_chat_messages(
    prompt: str,
    results: Sequence[SearchResult],
    history: Sequence[ChatMessage],
    query: str,
) -> List[ChatMessage]:
    """Context message, then prior user/assistant turns, then the new question."""
    messages = [build_context_message(prompt, results)]
    messages.extend(message for message in history if message.role != "system")
    messages.append(ChatMessage(role="user", content=query))
    return messages


async def generative_search(
    query: str,
    history: List[ChatMessage],
    store: RecordStore,
    provider: ModelProvider,
    search_settings: SearchSettings,
    prompt: str,
) -> str:
    """Answer ``query`` from retrieved passages and extend ``history``.

    ``history`` belongs to the caller; on success the user turn and the
    assistant turn are appended to it, on failure it is left untouched.
    """
    results = await retrieve_sections(query, store, provider, search_settings)
    query = query.strip()
    messages = build_chat_messages(prompt, results, history, query)

    try:
        answer = await provider.complete(messages)
    except Exception as e:
        raise SearchError(query, "Chat completion failed", e) from e

    history.append(ChatMessage(role="user", content=query))
    history.append(ChatMessage(role="assistant", content=answer))
    app_logger.info(f"Generative search answered from {len(results)} sections for '{query[:QUERY_PREVIEW_CHARS]}'")
    return answer
