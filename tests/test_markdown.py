"""Unit tests for front matter parsing."""

from app.services.markdown import parse_markdown


class TestParseMarkdown:
    """Test cases for parse_markdown."""

    def test_splits_front_matter_from_content(self):
        """Front matter becomes a mapping and is removed from the content."""
        markdown = "---\ntitle: Reading list\ntags:\n  - books\n  - 2024\n---\n# Books\n\nDune"

        content, frontmatter = parse_markdown(markdown)

        assert content == "# Books\n\nDune"
        assert frontmatter == {"title": "Reading list", "tags": ["books", 2024]}

    def test_document_without_front_matter(self):
        """Plain markdown is returned unchanged with an empty mapping."""
        markdown = "# Heading\n\nSome text --- with dashes"

        content, frontmatter = parse_markdown(markdown)

        assert content == markdown
        assert frontmatter == {}

    def test_empty_front_matter_block(self):
        """An empty fenced block yields an empty mapping."""
        content, frontmatter = parse_markdown("---\n---\nBody")

        assert content == "Body"
        assert frontmatter == {}

    def test_malformed_yaml_is_ignored(self):
        """Unparseable YAML never raises; the text is kept as content."""
        markdown = "---\ntitle: [unclosed\n---\nBody"

        content, frontmatter = parse_markdown(markdown)

        assert content == markdown
        assert frontmatter == {}

    def test_non_mapping_front_matter_is_ignored(self):
        """A YAML list is not front matter."""
        markdown = "---\n- one\n- two\n---\nBody"

        content, frontmatter = parse_markdown(markdown)

        assert content == markdown
        assert frontmatter == {}

    def test_dates_are_json_safe(self):
        """YAML dates are stored as strings."""
        _, frontmatter = parse_markdown("---\ncreated: 2024-03-01\n---\nBody")

        assert frontmatter == {"created": "2024-03-01"}

    def test_windows_line_endings(self):
        """CRLF fences are recognised."""
        content, frontmatter = parse_markdown("---\r\ntitle: Note\r\n---\r\nBody")

        assert content == "Body"
        assert frontmatter == {"title": "Note"}

    def test_horizontal_rule_later_in_document(self):
        """Only a leading block counts as front matter."""
        markdown = "Intro\n\n---\ntitle: not front matter\n---\n"

        content, frontmatter = parse_markdown(markdown)

        assert content == markdown
        assert frontmatter == {}
