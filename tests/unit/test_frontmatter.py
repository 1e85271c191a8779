"""Unit tests for frontmatter generation."""

import yaml

from logquartz.services.frontmatter import generate_frontmatter, render_frontmatter, split_tags


def parse(frontmatter: str) -> dict:
    """Load the YAML between the ``---`` fences."""
    assert frontmatter.startswith("---\n")
    assert frontmatter.endswith("---\n")
    return yaml.safe_load(frontmatter[4:-4])


class TestGenerateFrontmatter:
    """Tests for generate_frontmatter."""

    def test_title_from_name(self):
        """Test that underscores in the page name become spaces."""
        assert parse(generate_frontmatter("Reading_List", {})) == {"title": "Reading List"}

    def test_title_property_and_icon(self):
        """Test that the icon prefixes the title and is also kept on its own."""
        fields = parse(generate_frontmatter("dune", {"title": "Dune", "icon": "📚"}))

        assert fields["title"] == "📚 Dune"
        assert fields["icon"] == "📚"

    def test_tags_aliases_and_description(self):
        """Test list fields are split and decorations removed."""
        properties = {
            "tags": "book, #scifi, [[reading list]]",
            "alias": "Arrakis, [[Desert, Planet]]",
            "description": "A desert planet",
        }

        fields = parse(generate_frontmatter("Dune", properties))

        assert fields["tags"] == ["book", "scifi", "reading list"]
        assert fields["aliases"] == ["Arrakis", "Desert, Planet"]
        assert fields["description"] == "A desert planet"

    def test_dates(self):
        """Test that git dates are written when known."""
        fields = parse(generate_frontmatter("Dune", {}, ("2024-03-01", "2023-11-20")))

        assert fields["modified"] == "2024-03-01"
        assert fields["created"] == "2023-11-20"

    def test_missing_dates_omitted(self):
        """Test that unknown dates leave no keys behind."""
        fields = parse(generate_frontmatter("Dune", {}, (None, None)))
        assert "modified" not in fields
        assert "created" not in fields

    def test_key_order(self):
        """Test title comes first and the rest follow a fixed order."""
        frontmatter = generate_frontmatter(
            "Dune", {"icon": "📚", "tags": "book"}, ("2024-03-01", "2023-11-20")
        )

        assert list(parse(frontmatter)) == ["title", "icon", "tags", "modified", "created"]

    def test_values_needing_quotes_survive(self):
        """Test YAML-significant characters round-trip through the dump."""
        fields = parse(generate_frontmatter("x", {"title": "Notes: part #1 [draft]"}))
        assert fields["title"] == "Notes: part #1 [draft]"


def test_render_frontmatter_keeps_unicode():
    """Test that emoji are written as-is, not escaped."""
    assert render_frontmatter({"title": "📅 Journals"}) == "---\ntitle: 📅 Journals\n---\n"


def test_split_tags_empty():
    """Test that blank entries are dropped."""
    assert split_tags(" , ,") == []
