"""Typed failures raised by the sync and retrieval services."""

from typing import Optional

QUERY_PREVIEW_CHARS = 40


class ConfigurationError(ValueError):
    """Credentials for the record store or model provider are missing."""


class ModerationFlaggedError(Exception):
    """The moderation provider flagged the query text."""

    def __init__(self, query: str):
        self.query_preview = query[:QUERY_PREVIEW_CHARS]
        super().__init__(f"Query was flagged by moderation: '{self.query_preview}...'")


class SearchError(Exception):
    """An embedding, store, or chat call failed while answering a query."""

    def __init__(self, query: str, reason: str, cause: Optional[Exception] = None):
        self.query_preview = query[:QUERY_PREVIEW_CHARS]
        self.reason = reason
        self.cause = cause
        super().__init__(f"{reason} for query starting with '{self.query_preview}...'")
