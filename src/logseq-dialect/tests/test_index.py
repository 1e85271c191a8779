"""Tests for the document index."""

from pathlib import Path
from textwrap import dedent

import pytest

from logseq_dialect.index import (
    Document,
    PageIndex,
    SourceFile,
    extract_tags,
    parse_aliases,
    parse_properties,
    split_namespace,
    strip_root_prefix,
)


class TestParseProperties:
    """Tests for the leading property block."""

    def test_properties_and_body_split(self):
        text = dedent("""\
            tags:: book, reading
            alias:: CV

            - First block
              - Child
        """)

        properties, body = parse_properties(text)

        assert properties == {"tags": "book, reading", "alias": "CV"}
        assert body == "- First block\n  - Child\n"

    def test_keys_are_lowercased_and_last_value_wins(self):
        properties, _ = parse_properties("Status:: draft\nstatus:: final\n")
        assert properties == {"status": "final"}

    def test_bulleted_property_block(self):
        properties, body = parse_properties("- type:: book\n- Actual content")
        assert properties == {"type": "book"}
        assert body == "- Actual content"

    def test_blank_line_before_properties_ends_block(self):
        properties, body = parse_properties("\ntags:: late\n- body")
        assert properties == {}
        assert body == "\ntags:: late\n- body"

    def test_page_without_properties(self):
        properties, body = parse_properties("- just a block")
        assert properties == {}
        assert body == "- just a block"


class TestSplitNamespace:
    """Tests for filename namespace decoding."""

    def test_plain_name(self):
        assert split_namespace("Reading List") == (None, "Reading List")

    def test_single_namespace(self):
        assert split_namespace("projects___website") == ("projects", "projects/website")

    def test_nested_namespace(self):
        assert split_namespace("a___b___c") == ("a/b", "a/b/c")

    def test_percent_encoding_decoded(self):
        assert split_namespace("what%3F") == (None, "what?")


class TestTagsAndAliases:
    """Tests for tag and alias extraction."""

    def test_tags_from_property_and_body(self):
        properties = {"tags": "Book, [[Reading List]], #web"}
        text = "tags:: Book, [[Reading List]], #web\n- about #python and #[[Deep Work]]"

        tags = extract_tags(properties, text)

        assert tags == ("book", "reading list", "web", "deep work", "python")

    def test_priority_markers_and_url_fragments_are_not_tags(self):
        tags = extract_tags({}, "- [#A] urgent, see https://example.com/#section")
        assert tags == ()

    def test_alias_commas_inside_links_are_kept(self):
        assert parse_aliases("CV, [[Cyber, Valley]], cyber valley") == (
            "CV",
            "Cyber, Valley",
            "cyber valley",
        )

    def test_empty_alias_value(self):
        assert parse_aliases("") == ()


class TestDocument:
    """Tests for Document construction and accessors."""

    def test_from_source(self, make_page):
        document = make_page("projects___website", """
            title:: Website Redesign
            icon:: 🌐
            alias:: site, homepage
            due-date:: 2024-05-01

            - TODO ship it
        """, dates={"pages/projects___website.md": ("2024-03-01", "2023-11-20")})

        assert document.name == "projects/website"
        assert document.namespace == "projects"
        assert document.title == "Website Redesign"
        assert document.icon == "🌐"
        assert document.aliases == ("site", "homepage")
        assert document.body == "- TODO ship it\n"
        assert document.raw.startswith("title:: Website Redesign")
        assert (document.modified, document.created) == ("2024-03-01", "2023-11-20")

    def test_title_defaults_to_name_with_spaces(self, make_page):
        assert make_page("reading_list").title == "reading list"

    def test_get_property_ignores_hyphens_case_and_colon(self, make_page):
        document = make_page("task", "due-date:: 2024-05-01\n")
        assert document.get_property("due-date") == "2024-05-01"
        assert document.get_property("duedate") == "2024-05-01"
        assert document.get_property(":Due-Date") == "2024-05-01"
        assert document.get_property("missing") is None

    def test_private_flag(self, make_page):
        assert make_page("secret", "private:: True\n").is_private
        assert not make_page("public", "private:: false\n").is_private

    def test_properties_are_read_only(self, make_page):
        document = make_page("page", "type:: book\n")
        with pytest.raises(TypeError):
            document.properties["type"] = "film"

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Document(name="  ")

    def test_documents_compare_by_identity(self):
        first = Document(name="same")
        second = Document(name="same")
        assert first != second
        assert len({first, second}) == 2

    def test_with_prefix(self, make_page):
        document = make_page("2024_08_16", "- entry")
        prefixed = document.with_prefix("journals")
        assert prefixed.name == "journals/2024_08_16"
        assert prefixed.body == document.body


class TestPageIndex:
    """Tests for PageIndex."""

    def test_build_skips_unreadable_sources(self, tmp_path):
        good = tmp_path / "good.md"
        good.write_text("- fine", encoding="utf-8")
        broken = tmp_path / "broken.md"
        broken.write_bytes(b"\xff\xfe\xfa")

        index = PageIndex.build([
            SourceFile(path=good),
            SourceFile(path=broken),
            SourceFile(path=tmp_path / "missing.md"),
        ])

        assert [document.name for document in index] == ["good"]

    def test_lookup_is_case_insensitive_and_ignores_root_prefix(self, make_index):
        index = make_index({"Reading List": "- books"})
        assert index.get("reading list") is index[0]
        assert index.get("pages/READING LIST") is index[0]
        assert index.get("missing") is None

    def test_all_tags_in_first_seen_order(self, make_index):
        index = make_index({"a": "tags:: x, y\n", "b": "tags:: y, z\n"})
        assert index.all_tags == ("x", "y", "z")

    def test_overlay_appends_prefixed_documents(self, make_index, make_page):
        index = make_index({"page": "- p"})
        journal = make_page("2024_08_16", "- j")

        combined = index.with_overlay([journal], "journals")

        assert len(index) == 1
        assert [document.name for document in combined] == ["page", "journals/2024_08_16"]
        assert combined.get("journals/2024_08_16") is not None

    def test_source_text_preloaded(self):
        source = SourceFile(path=Path("pages/x.md"), text="- inline")
        assert source.read_text() == "- inline"


def test_strip_root_prefix():
    assert strip_root_prefix("pages/Foo") == "Foo"
    assert strip_root_prefix("Pages/Foo") == "Foo"
    assert strip_root_prefix("journals/2024_01_01") == "journals/2024_01_01"
