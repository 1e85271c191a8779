"""Compiled regular expressions for the Logseq markdown dialect.

All patterns are compiled once at import time and collected in an immutable
``PatternRegistry``. The transform pipeline, the index builder and the query
engine share the module-level ``PATTERNS`` instance; nothing recompiles a
pattern per call.
"""

import re
from dataclasses import dataclass
from re import Pattern


@dataclass(frozen=True)
class PatternRegistry:
    """Process-wide table of dialect patterns.

    Attributes are grouped by the stage or component that consumes them.
    """

    # Index: property blocks, tags
    property_line: Pattern = re.compile(r"^(?:-\s*)?([A-Za-z0-9_.-]+)::\s*(.+)$")
    inline_tag: Pattern = re.compile(r"(?:^|(?<=[\s(,]))#([A-Za-z][A-Za-z0-9_/-]*)")
    bracket_tag: Pattern = re.compile(r"(?:^|(?<=[\s(,]))#\[\[([^\]]+)\]\]")

    # Stage 1-2: internal bookkeeping
    system_property: Pattern = re.compile(
        r"(?m)^[ \t]*(?:-[ \t]*)?(?:collapsed|id|logseq\.[\w.-]+|card-[\w-]+)::[^\n]*(?:\n|$)"
    )
    logbook_line: Pattern = re.compile(r"(?m)^[ \t]*(?::LOGBOOK:|CLOCK:.*|:END:)[ \t]*(?:\n|$)")

    # Stage 3: queries and their option lines
    line_prefix: Pattern = re.compile(r"^([ \t]*)(-[ \t]*)?")
    query_call: Pattern = re.compile(r"\{\{query\b.*?\}\}")
    query_option_line: Pattern = re.compile(
        r"^[ \t]*(?:-[ \t]*)?(query-(?:properties|sort-by|sort-desc|table))::"
    )

    # Stage 4: user properties
    user_property: Pattern = re.compile(r"(?m)^([ \t]*)(?:-[ \t]*)?([\w-]+):: (.+)$")

    # Stage 5-6
    image_size: Pattern = re.compile(r"\{:height\s+\d+,?\s*:width\s+\d+\}")
    empty_bullet: Pattern = re.compile(r"(?m)^[ \t]*-[ \t]*(?:\n|$)")

    # Stage 8: dollar escaping
    link_span: Pattern = re.compile(r"!?\[\[[^\]]+\]\]")
    dollar_token: Pattern = re.compile(r"(?<!\\)\$(?=[A-Z][A-Z0-9]*)")
    dollar_currency: Pattern = re.compile(r"(?<!\\)\$(?=\d[\d,.]*[kKmMbB]?)")

    # Stage 9-11: embeds and links
    page_embed: Pattern = re.compile(r"\{\{embed\s+\[\[([^\]]+)\]\]\s*\}\}")
    markdown_wikilink: Pattern = re.compile(r"\[([^\]]+)\]\(\[\[([^\]]+)\]\]\)")
    wikilink: Pattern = re.compile(r"(!\s*)?\[\[([^\]|]+)(\|[^\]]*)?\]\]")

    # Stage 12: block embeds and references
    block_embed: Pattern = re.compile(r"\{\{embed\s+\(\(([^)]+)\)\)\s*\}\}")
    block_ref: Pattern = re.compile(r"\(\(([a-f0-9-]{36})\)\)")

    # Stage 13: media
    youtube: Pattern = re.compile(r"\{\{youtube\s+([^\}]+?)\s*\}\}")
    video: Pattern = re.compile(r"\{\{video\s+([^\}]+?)\s*\}\}")
    pdf: Pattern = re.compile(r"\{\{pdf\s+([^\}]+?)\s*\}\}")
    image_pdf: Pattern = re.compile(r"!\[[^\]]*\]\(([^\)]+\.pdf)\)")

    # Stage 14-16
    renderer: Pattern = re.compile(r"\{\{renderer\s+[^\}]+\}\}")
    hiccup_start: Pattern = re.compile(r"^(?:-\s+)?\[:[\w-]")
    cloze: Pattern = re.compile(r"\{\{cloze\s+([^\}]+?)\s*\}\}")

    # Stage 17-19
    task_marker: Pattern = re.compile(
        r"(?m)^([ \t]*)-[ \t]+(TODO|DONE|NOW|DOING|LATER|WAITING|CANCELLED)[ \t]+"
    )
    priority_marker: Pattern = re.compile(r"\[#([ABC])\]")
    scheduled: Pattern = re.compile(r"SCHEDULED:\s*<([^>]+)>")
    deadline: Pattern = re.compile(r"DEADLINE:\s*<([^>]+)>")


PATTERNS = PatternRegistry()
