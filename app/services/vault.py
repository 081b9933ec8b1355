"""Filesystem vault acting as the live document source."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Iterable, List, Optional

from app.services.interfaces import DocumentSource, SourceDocument

MARKDOWN_SUFFIXES = (".md",)


def normalize_path(path: str) -> str:
    """Normalize a vault-relative path to forward slashes without dot segments."""
    return posixpath.normpath(path.replace("\\", "/"))


def normalize_directory(directory: str) -> str:
    """Normalize a directory entry, keeping a trailing separator if it had one.

    ``"Public/"`` only matches paths inside that folder, while a bare
    ``"Pub"`` stays a plain prefix.
    """
    entry = directory.strip()
    normalized = normalize_path(entry)
    if entry.endswith(("/", "\\")) and not normalized.endswith("/"):
        normalized += "/"
    return normalized


def is_path_in_directories(path: str, directories: Iterable[str]) -> bool:
    """Prefix match of a normalized path against normalized directory entries."""
    normalized_path = normalize_path(path)
    for directory in directories:
        if not directory.strip():
            continue
        if normalized_path.startswith(normalize_directory(directory)):
            return True
    return False


def locate_section(document_text: str, section: str) -> Optional[int]:
    """1-based line on which ``section`` starts inside ``document_text``."""
    if not section:
        return None
    position = document_text.find(section)
    if position == -1:
        # Chunks re-join paragraphs with a single blank line; fall back to the first one
        first_paragraph = section.split("\n\n", 1)[0]
        position = document_text.find(first_paragraph)
    if position == -1:
        return None
    return document_text.count("\n", 0, position) + 1


class VaultFile(SourceDocument):
    def __init__(self, root: Path, path: str):
        self.root = root
        self.path = path

    @property
    def absolute_path(self) -> Path:
        return self.root / self.path

    async def read_text(self) -> str:
        try:
            return self.absolute_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            return self.absolute_path.read_text(encoding="latin-1")

    def __repr__(self) -> str:
        return f"VaultFile({self.path!r})"


class VaultDocumentSource(DocumentSource):
    """Lists the markdown files of a vault directory, hidden folders excluded."""

    def __init__(self, root: str | Path, suffixes: Iterable[str] = MARKDOWN_SUFFIXES):
        self.root = Path(root)
        self.suffixes = tuple(suffixes)

    async def list_documents(self) -> List[SourceDocument]:
        root = self.root.resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Vault directory not found: {root}")

        documents: List[SourceDocument] = []
        for file_path in sorted(root.rglob("*")):
            if not file_path.is_file() or file_path.suffix.lower() not in self.suffixes:
                continue
            rel_path = file_path.relative_to(root)
            if any(part.startswith(".") for part in rel_path.parts):
                continue
            documents.append(VaultFile(root, rel_path.as_posix()))
        return documents

    async def read_document(self, path: str) -> Optional[str]:
        """Read a live document by vault-relative path, or None if it is gone."""
        root = self.root.resolve()
        candidate = (root / normalize_path(path)).resolve()
        if root not in candidate.parents or not candidate.is_file():
            return None
        return await VaultFile(root, candidate.relative_to(root).as_posix()).read_text()
