"""Search-as-you-type policy for interactive front ends.

The retrieval engine has no timing state; this module decides when a typed
query is worth searching and makes sure only the latest keystroke runs.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from app.models import SearchResult
from app.utils.errors import ModerationFlaggedError, SearchError

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Delay calls by ``delay`` seconds; a newer call cancels the pending one."""

    def __init__(self, func: Callable[..., Awaitable[T]], delay: float):
        self._func = func
        self._delay = delay
        self._pending: Optional[asyncio.Task] = None

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        self.cancel()
        self._pending = asyncio.ensure_future(self._run(*args, **kwargs))
        return self._pending

    async def _run(self, *args: Any, **kwargs: Any) -> T:
        await asyncio.sleep(self._delay)
        return await self._func(*args, **kwargs)

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None


class LiveSearch:
    """Keeps the last query and its results for a search box."""

    def __init__(
        self,
        search: Callable[[str], Awaitable[List[SearchResult]]],
        min_length_before_auto_search: int,
        debounce_seconds: float,
    ):
        self._search = search
        self.min_length = min_length_before_auto_search
        self.debounce_seconds = debounce_seconds
        self.last_query = ""
        self.results: List[SearchResult] = []
        self._debouncer: Debouncer[List[SearchResult]] = Debouncer(self.search_now, debounce_seconds)

    def should_search(self, query: str, force: bool = False) -> bool:
        """A query runs when it changed and is long enough, or when forced."""
        if query.strip() == self.last_query.strip():
            return False
        return force or len(query) > self.min_length

    async def search_now(self, query: str, force: bool = False) -> List[SearchResult]:
        if not self.should_search(query, force):
            return self.results

        self.last_query = query
        try:
            self.results = await self._search(query)
        except (ModerationFlaggedError, SearchError):
            self.results = []
            raise
        return self.results

    def on_input(self, query: str) -> asyncio.Task:
        """Schedule a debounced search for the text currently typed."""
        return self._debouncer(query)

    def close(self) -> None:
        self._debouncer.cancel()
