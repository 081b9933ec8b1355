"""Unit tests for the filesystem vault source and path helpers."""

import pytest

from app.services.vault import (
    VaultDocumentSource,
    is_path_in_directories,
    locate_section,
    normalize_directory,
    normalize_path,
)


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Public").mkdir()
    (tmp_path / "Private").mkdir()
    (tmp_path / ".obsidian").mkdir()
    (tmp_path / "Public" / "note.md").write_text("# Public note\n\nShared text.", encoding="utf-8")
    (tmp_path / "Private" / "diary.md").write_text("Secret.", encoding="utf-8")
    (tmp_path / "inbox.md").write_text("Inbox item.", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    (tmp_path / ".obsidian" / "workspace.md").write_text("internal", encoding="utf-8")
    (tmp_path / "legacy.md").write_bytes("caf\xe9 notes".encode("latin-1"))
    return tmp_path


class TestPathHelpers:
    """Test cases for path normalization and directory matching."""

    def test_normalize_path(self):
        assert normalize_path("./Public//a/../note.md") == "Public/note.md"
        assert normalize_path("Public\\note.md") == "Public/note.md"

    def test_path_inside_configured_directory(self):
        assert is_path_in_directories("Public/note.md", ["Public/"])
        assert is_path_in_directories("./Public/sub/note.md", ["Public"])

    def test_path_outside_configured_directories(self):
        assert not is_path_in_directories("Private/diary.md", ["Public/", "Shared/"])

    def test_blank_entries_match_nothing(self):
        assert not is_path_in_directories("note.md", ["", "  "])
        assert not is_path_in_directories("note.md", [])

    def test_match_is_a_plain_prefix(self):
        """Entries without a trailing separator also match sibling names."""
        assert is_path_in_directories("Publications/paper.md", ["Pub"])

    def test_trailing_separator_limits_match_to_the_folder(self):
        """'Public/' matches only notes inside Public, not sibling names."""
        assert not is_path_in_directories("Publications/paper.md", ["Public/"])
        assert not is_path_in_directories("Public notes.md", ["Public/"])
        assert not is_path_in_directories("Archive-keep/note.md", ["Archive\\"])
        assert is_path_in_directories("Archive/old.md", ["./Archive/"])

    def test_normalize_directory(self):
        assert normalize_directory("Public/") == "Public/"
        assert normalize_directory(" ./Notes//Daily\\ ") == "Notes/Daily/"
        assert normalize_directory("Pub") == "Pub"


class TestVaultDocumentSource:
    """Test cases for VaultDocumentSource."""

    async def test_lists_markdown_files_sorted(self, vault):
        documents = await VaultDocumentSource(vault).list_documents()

        assert [d.path for d in documents] == [
            "Private/diary.md",
            "Public/note.md",
            "inbox.md",
            "legacy.md",
        ]

    async def test_reads_document_text(self, vault):
        documents = await VaultDocumentSource(vault).list_documents()
        by_path = {d.path: d for d in documents}

        assert await by_path["Public/note.md"].read_text() == "# Public note\n\nShared text."
        assert await by_path["legacy.md"].read_text() == "caf\xe9 notes"

    async def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await VaultDocumentSource(tmp_path / "missing").list_documents()

    async def test_read_document_by_path(self, vault):
        source = VaultDocumentSource(vault)

        assert await source.read_document("inbox.md") == "Inbox item."
        assert await source.read_document("gone.md") is None

    async def test_read_document_outside_vault(self, vault):
        source = VaultDocumentSource(vault / "Public")

        assert await source.read_document("../inbox.md") is None


class TestLocateSection:
    """Test cases for locate_section."""

    def test_line_of_exact_match(self):
        text = "---\ntitle: t\n---\nFirst paragraph.\n\nSecond paragraph."

        assert locate_section(text, "Second paragraph.") == 6

    def test_falls_back_to_first_paragraph(self):
        text = "Intro.\n\n\nFirst part.\n\n\nSecond part."

        assert locate_section(text, "First part.\n\nSecond part.") == 4

    def test_missing_section(self):
        assert locate_section("Some text", "Not there") is None
        assert locate_section("Some text", "") is None
