"""Paragraph-aware chunking of vault documents for embedding."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from app.config.settings import ChunkingConfig
from app.services.markdown import parse_markdown

PARAGRAPH_SEPARATOR = "\n\n"
CONTEXT_FIELDS = ("title", "tags", "aliases")

_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n")
_SENTENCE_END = re.compile(r"[.!?](?=\s)")
_WHITESPACE = re.compile(r"\s")


@dataclass
class PreparedSection:
    """A chunk as stored (``content``) and as sent to the embedding model."""

    content: str
    embedding_input: str


@dataclass
class PreparedDocument:
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    sections: List[PreparedSection] = field(default_factory=list)


def _paragraphs(content: str) -> List[str]:
    normalized = content.replace("\r\n", "\n").replace("\r", "\n")
    return [p.strip() for p in _PARAGRAPH_BREAK.split(normalized) if p.strip()]


def _split_at_boundary(text: str, room: int, floor: int) -> Tuple[str, str]:
    """Cut at most ``room`` characters off the front of ``text``.

    Prefers the last sentence end, then the last whitespace, as long as the cut
    keeps at least ``floor`` characters; otherwise cuts at exactly ``room``.
    """
    window = text[: room + 1]
    sentence_ends = [m.end() for m in _SENTENCE_END.finditer(window)]
    spaces = [m.start() for m in _WHITESPACE.finditer(window)]

    for cuts in (sentence_ends, spaces):
        if cuts:
            head = text[: cuts[-1]].rstrip()
            if head and len(head) >= floor:
                return head, text[cuts[-1]:].lstrip()
    return text[:room], text[room:].lstrip()


def smart_chunk_paragraphs(
    content: str,
    min_paragraph_size: int,
    max_paragraph_size: int,
) -> List[str]:
    """Split ``content`` into ordered chunks on paragraph boundaries.

    Paragraphs accumulate into a buffer that is closed as soon as it holds at
    least ``min_paragraph_size`` characters. No chunk exceeds
    ``max_paragraph_size``: a paragraph that does not fit is cut at a sentence
    end or word break, falling back to a fixed-length cut. Only the final chunk
    may be shorter than the minimum. The minimum is capped at the maximum less
    the separator length, so a buffer is always closed while the next
    paragraph can still be joined to it. Pure and deterministic.
    """
    if max_paragraph_size < 1:
        raise ValueError("max_paragraph_size must be positive")
    sep = len(PARAGRAPH_SEPARATOR)
    min_size = max(0, min(min_paragraph_size, max_paragraph_size - sep))

    chunks: List[str] = []
    buffer = ""

    for paragraph in _paragraphs(content):
        remaining = paragraph
        while remaining:
            joined = f"{buffer}{PARAGRAPH_SEPARATOR}{remaining}" if buffer else remaining
            if len(joined) <= max_paragraph_size:
                buffer, remaining = joined, ""
            else:
                used = len(buffer) + sep if buffer else 0
                room = max_paragraph_size - used
                if room <= 0:
                    chunks.append(buffer)
                    buffer = ""
                    continue
                head, remaining = _split_at_boundary(remaining, room, max(1, min_size - used))
                chunks.append(f"{buffer}{PARAGRAPH_SEPARATOR}{head}" if buffer else head)
                buffer = ""
                continue

            if len(buffer) >= min_size:
                chunks.append(buffer)
                buffer = ""

    if buffer:
        chunks.append(buffer)
    return chunks


def preceding_tail(previous_section: str, overlap: int) -> str:
    """Trailing ``overlap`` characters of the previous chunk.

    Empty when overlap is disabled or the previous chunk is not longer than
    the overlap itself.
    """
    if overlap <= 0 or len(previous_section) <= overlap:
        return ""
    return previous_section[-overlap:]


def _format_field(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def create_chunk_context(
    section: str,
    frontmatter: Dict[str, Any],
    path: str,
    previous_tail: str = "",
) -> str:
    """Build the text sent to the embedding model for one chunk."""
    header = [f"path: {path}"]
    for key in CONTEXT_FIELDS:
        value = frontmatter.get(key)
        if value in (None, "", [], ()):
            continue
        header.append(f"{key}: {_format_field(value)}")

    parts = ["\n".join(header)]
    if previous_tail:
        parts.append(previous_tail)
    parts.append(section)
    return PARAGRAPH_SEPARATOR.join(parts)


def prepare_document(markdown: str, path: str, config: ChunkingConfig) -> PreparedDocument:
    """Parse, chunk, and contextualize a raw markdown document."""
    content, frontmatter = parse_markdown(markdown)
    frontmatter["path"] = path

    chunks = smart_chunk_paragraphs(
        content,
        config.min_paragraph_size,
        config.max_paragraph_size,
    )

    sections: List[PreparedSection] = []
    for i, chunk in enumerate(chunks):
        tail = preceding_tail(chunks[i - 1], config.chars_from_previous_paragraph) if i > 0 else ""
        sections.append(
            PreparedSection(
                content=chunk,
                embedding_input=create_chunk_context(chunk, frontmatter, path, tail),
            )
        )
    return PreparedDocument(frontmatter=frontmatter, sections=sections)
