"""Markdown rendering of query results as tables, lists or callouts."""

import math
import re
from collections import Counter
from typing import Optional, Sequence

from logseq_dialect.index import Document
from logseq_dialect.query.options import QueryOptions

EXCLUDED_AUTO_COLUMNS = frozenset({"title", "icon", "public", "alias", "aliases"})
MAX_AUTO_COLUMNS = 3
QUERY_PREVIEW_LENGTH = 80
PIPE_ENTITY = "&#124;"


def render(
    results: Sequence[Document], query_text: str = "", options: Optional[QueryOptions] = None
) -> str:
    """Render query results as markdown.

    Args:
        results: Matching documents
        query_text: Query as written, quoted when nothing matched
        options: Sort and layout options

    Returns:
        A table, a bullet list, or an info callout for empty results
    """
    options = options or QueryOptions()

    if not results:
        return _render_empty(query_text)

    ordered = sort_results(results, options.sort_by, options.sort_desc)

    if options.properties:
        return render_table(ordered, options.properties)
    if options.table is False:
        return render_list(ordered)
    return render_table(ordered, ["page", *auto_columns(ordered)])


def sort_results(
    results: Sequence[Document], sort_by: Optional[str] = None, descending: bool = False
) -> list[Document]:
    """Sort by name, then (stably) by the requested key."""
    ordered = sorted(results, key=lambda document: (document.name.lower(), document.name))
    if sort_by:
        ordered.sort(key=lambda document: field_value(document, sort_by).lower(), reverse=descending)
    return ordered


def field_value(document: Document, key: str) -> str:
    """Value of a result column: synthetic page fields or a page property."""
    normalized = key.lower().lstrip(":")
    if normalized in ("page", "name"):
        return document.name
    if normalized in ("created", "created-at"):
        return document.created or ""
    if normalized in ("modified", "updated", "updated-at"):
        return document.modified or ""
    if normalized == "tags":
        return ", ".join(document.tags)
    if normalized == "namespace":
        return document.namespace or ""
    return document.get_property(normalized) or ""


def auto_columns(results: Sequence[Document]) -> list[str]:
    """Pick up to three properties shared by at least a third of the results."""
    counts: Counter[str] = Counter()
    for document in results:
        for key, value in document.properties.items():
            if key not in EXCLUDED_AUTO_COLUMNS and value.strip():
                counts[key] += 1

    threshold = max(1, math.ceil(len(results) / 3))
    frequent = [key for key, count in counts.items() if count >= threshold]
    frequent.sort(key=lambda key: (-counts[key], key))
    return frequent[:MAX_AUTO_COLUMNS]


def render_table(results: Sequence[Document], columns: Sequence[str]) -> str:
    lines = [
        "| " + " | ".join(column_header(column) for column in columns) + " |",
        "|" + " --- |" * len(columns),
    ]
    for document in results:
        cells = [_cell(document, column) for column in columns]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


def render_list(results: Sequence[Document]) -> str:
    lines = []
    for document in results:
        icon = f"{document.icon} " if document.icon else ""
        lines.append(f"- [[{document.name}|{icon}{document.title}]]")
    return "\n".join(lines)


def column_header(column: str) -> str:
    """Header text: "Page" for page/name, otherwise title-cased words."""
    column = column.lstrip(":")
    if column.lower() in ("page", "name"):
        return "Page"
    words = [word for word in re.split(r"[-_\s]+", column) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _cell(document: Document, column: str) -> str:
    if column.lower().lstrip(":") in ("page", "name"):
        if document.title == document.name:
            return f"[[{document.name}]]"
        # Quartz reads "\|" inside a table cell as the wikilink alias separator.
        return f"[[{document.name}\\|{_escape_cell(document.title)}]]"
    return _escape_cell(field_value(document, column))


def _escape_cell(value: str) -> str:
    return value.replace("\n", " ").replace("|", PIPE_ENTITY)


def _render_empty(query_text: str) -> str:
    preview = query_text.strip()
    if len(preview) > QUERY_PREVIEW_LENGTH:
        preview = preview[:QUERY_PREVIEW_LENGTH] + "..."
    return "\n".join([
        "> [!info] Query Results",
        "> No pages match this query.",
        f"> `{preview}`",
    ])
