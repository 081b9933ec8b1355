#!/usr/bin/env python3
"""
Interactive CLI for searching and chatting with the vault.

This script:
- Sends plain lines to /v1/chat, keeping the conversation history locally.
- Sends lines starting with '?' to /v1/search through the search-as-you-type
  policy: short or repeated queries are skipped and the request is debounced
  by SEARCH_DEBOUNCE_SECONDS. Lines starting with '?!' search immediately.
- Saves the full conversation to a timestamped .txt file in logs/.

Usage:
  1. Start the FastAPI server:
       uvicorn app.main:app --reload

  2. Run this script:
       python scripts/vault_chat_cli.py
"""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import httpx

# Add the parent directory to the path so we can import from app
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings
from app.models import SearchResult
from app.services.live_search import LiveSearch
from app.utils.errors import ModerationFlaggedError, SearchError
from app.utils.text import remove_markdown, truncate_string


API_BASE_URL = os.getenv("VAULT_API_URL", "http://localhost:8000")
CHAT_ENDPOINT = f"{API_BASE_URL}/v1/chat"
SEARCH_ENDPOINT = f"{API_BASE_URL}/v1/search"

PREVIEW_LENGTH = 200


def remote_search(client: httpx.AsyncClient):
    """Search function posting to /v1/search, raising the service's own errors."""

    async def search(query: str) -> List[SearchResult]:
        try:
            resp = await client.post(SEARCH_ENDPOINT, json={"query": query})
        except httpx.RequestError as exc:
            raise SearchError(query, "Request failed", exc) from exc
        if resp.status_code == 422:
            raise ModerationFlaggedError(query)
        if resp.is_error:
            raise SearchError(query, f"Server returned {resp.status_code}")
        return [SearchResult(**item) for item in resp.json()["data"]["results"]]

    return search


def print_results(results: List[SearchResult]) -> None:
    if not results:
        print("No matching sections.\n")
        return
    for item in results:
        preview = truncate_string(remove_markdown(item.content), PREVIEW_LENGTH)
        print(f"  {round(item.similarity * 100)}%  {item.path}")
        print(f"    {preview}")
    print("")


async def run_search(live: LiveSearch, user_text: str) -> None:
    force = user_text.startswith("?!")
    query = user_text[2:].strip() if force else user_text[1:].strip()

    if not live.should_search(query, force):
        if query.strip() == live.last_query.strip():
            print_results(live.results)
        else:
            print(f"Query too short to search automatically (more than {live.min_length} characters). "
                  "Use '?!' to search anyway.\n")
        return

    try:
        if force:
            results = await live.search_now(query, force=True)
        else:
            results = await live.on_input(query)
    except ModerationFlaggedError as exc:
        print(f"[ERROR] {exc}\n")
        return
    except SearchError as exc:
        print(f"[ERROR] {exc}\n")
        return
    except asyncio.CancelledError:
        return
    print_results(results)


async def main() -> None:
    print("Vault Chat CLI")
    print("=" * 60)
    print(f"Endpoint: {API_BASE_URL}")
    print("Type '?query' to search, '?!query' to search now, anything else to ask, 'exit' to quit.\n")

    history: List[Dict[str, str]] = []

    transcript_lines: List[str] = []
    transcript_lines.append("VAULT CHAT CLI RUN")
    transcript_lines.append("=" * 80)
    transcript_lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    transcript_lines.append(f"Endpoint: {API_BASE_URL}")
    transcript_lines.append("=" * 80)
    transcript_lines.append("")

    try:
        async with httpx.AsyncClient(timeout=120.0) as client:
            live = settings.live_search(remote_search(client))
            try:
                while True:
                    user_text = (await asyncio.to_thread(input, "You: ")).strip()
                    if not user_text:
                        continue
                    if user_text.lower() in {"exit", "quit"}:
                        print("Ending conversation.")
                        break

                    if user_text.startswith("?"):
                        await run_search(live, user_text)
                        continue

                    payload: Dict[str, Any] = {"query": user_text, "history": history}
                    try:
                        resp = await client.post(CHAT_ENDPOINT, json=payload)
                        resp.raise_for_status()
                        data = resp.json()["data"]
                    except httpx.RequestError as exc:
                        print(f"[ERROR] Request failed: {exc}")
                        break
                    except httpx.HTTPStatusError as exc:
                        # Flagged queries come back as 422; keep the session open
                        print(f"[ERROR] Server returned {exc.response.status_code}: {exc.response.text}\n")
                        continue

                    answer = data.get("answer", "")
                    history = data.get("history", history)

                    print("\nAssistant:")
                    print(answer)
                    print("")

                    transcript_lines.append("You:")
                    transcript_lines.append(user_text)
                    transcript_lines.append("")
                    transcript_lines.append("Assistant:")
                    transcript_lines.append(answer)
                    transcript_lines.append("-" * 80)
            finally:
                live.close()

    finally:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = logs_dir / f"vault_chat_run_{timestamp}.txt"
        with output_path.open("w", encoding="utf-8") as f:
            f.write("\n".join(transcript_lines))

        print(f"\nConversation saved to: {output_path}")


if __name__ == "__main__":
    asyncio.run(main())
