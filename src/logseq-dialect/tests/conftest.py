"""Shared fixtures for logseq_dialect tests."""

from pathlib import Path
from textwrap import dedent

import pytest

from logseq_dialect.index import Document, PageIndex, SourceFile


@pytest.fixture
def make_page():
    """Factory parsing a page from in-memory text.

    ``make_page("projects___website", "tags:: web")`` parses the text as if it
    were read from ``pages/projects___website.md``.
    """

    def make(stem: str, text: str = "", dates=None) -> Document:
        source = SourceFile(
            path=Path("pages") / f"{stem}.md",
            rel_path=f"pages/{stem}.md",
            text=dedent(text).lstrip("\n"),
        )
        return Document.from_source(source, dates)

    return make


@pytest.fixture
def make_index(make_page):
    """Factory building a PageIndex from ``{stem: text}`` pairs, in order."""

    def make(pages: dict[str, str]) -> PageIndex:
        return PageIndex(make_page(stem, text) for stem, text in pages.items())

    return make
