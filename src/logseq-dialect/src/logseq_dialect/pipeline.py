"""Ordered rewrite of Logseq page bodies into Quartz-flavoured markdown.

Stage order matters:

- queries run before property lines become prose, so their option lines
  are still recognizable
- tables are repaired before anything else touches their bullet markers
- dollar signs are escaped while links are protected, so ``[[$BOOT]]``
  survives untouched
- links are resolved after embeds are converted, so embeds resolve too
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import structlog

from logseq_dialect.hiccup import bracket_balance, hiccup_to_markdown
from logseq_dialect.index import PageIndex
from logseq_dialect.links import LinkResolver
from logseq_dialect.patterns import PATTERNS, PatternRegistry
from logseq_dialect.query import QueryOptions, parse_query_options, run_query
from logseq_dialect.tables import repair_tables

logger = structlog.get_logger()

BLOCK_EMBED_PLACEHOLDER = "*Block embed - view in Logseq*"
RENDERER_PLACEHOLDER = "`[renderer]`"
PDF_FRAME = (
    '<iframe src="{src}" width="100%" height="600px" '
    'style="border: 1px solid #333; border-radius: 4px;"></iframe>'
)

TASK_CHECKBOXES = {
    "TODO": "[ ] ",
    "DONE": "[x] ",
    "NOW": "[ ] 🔄 ",
    "DOING": "[ ] 🔄 ",
    "LATER": "[ ] 📅 ",
    "WAITING": "[ ] ⏳ ",
    "CANCELLED": "[x] ❌ ",
}
PRIORITY_EMOJI = {"A": "🔴", "B": "🟡", "C": "🟢"}

_PLACEHOLDER = "\x00LINK{}\x00"

Stage = Callable[[str], str]


@dataclass(frozen=True)
class QuerySite:
    """A line holding one or more ``{{query}}`` calls, and its option lines.

    Attributes:
        line_number: Index of the query line
        indent: Leading whitespace of the query line
        marker: List marker ("- ") written at the start of the line, or ""
        content: The rest of the line: queries plus any text around them
        option_lines: Indices of consumed ``query-*::`` lines
    """

    line_number: int
    indent: str
    marker: str
    content: str
    option_lines: tuple[int, ...] = ()


class Pipeline:
    """Transforms page bodies against a shared, read-only index.

    A pipeline holds no per-document state; one instance can serve many
    worker threads.

    Example:
        >>> pipeline = Pipeline(index)
        >>> pipeline.transform("- TODO Buy milk")
        '- [ ] Buy milk'
    """

    def __init__(self, index: PageIndex, patterns: PatternRegistry = PATTERNS):
        self.index = index
        self.patterns = patterns
        self.resolver = LinkResolver(index)
        self.stages: list[tuple[str, Stage]] = [
            ("strip_system_properties", self.strip_system_properties),
            ("strip_logbook", self.strip_logbook),
            ("execute_queries", self.execute_queries),
            ("convert_properties", self.convert_properties),
            ("strip_image_sizes", self.strip_image_sizes),
            ("remove_empty_bullets", self.remove_empty_bullets),
            ("repair_tables", repair_tables),
            ("escape_dollars", self.escape_dollars),
            ("convert_embeds", self.convert_embeds),
            ("collapse_markdown_wikilinks", self.collapse_markdown_wikilinks),
            ("resolve_links", self.resolve_links),
            ("convert_block_references", self.convert_block_references),
            ("convert_media", self.convert_media),
            ("replace_renderers", self.replace_renderers),
            ("convert_hiccup", self.convert_hiccup),
            ("convert_cloze", self.convert_cloze),
            ("convert_tasks", self.convert_tasks),
            ("convert_priorities", self.convert_priorities),
            ("convert_schedules", self.convert_schedules),
        ]

    def transform(self, body: str) -> str:
        """Run every stage over a page body."""
        for _name, stage in self.stages:
            body = stage(body)
        return body

    # Stages 1-2

    def strip_system_properties(self, text: str) -> str:
        return self.patterns.system_property.sub("", text)

    def strip_logbook(self, text: str) -> str:
        return self.patterns.logbook_line.sub("", text)

    # Stage 3

    def find_query_sites(self, lines: Sequence[str]) -> list[QuerySite]:
        """First pass: locate queries and the option lines of their block.

        Option lines directly above the query (up to a blank or non-option
        line) and option continuation lines directly below it belong to
        the query. A line is claimed by at most one query.
        """
        sites = []
        claimed: set[int] = set()

        for number, line in enumerate(lines):
            if not self.patterns.query_call.search(line):
                continue
            prefix = self.patterns.line_prefix.match(line)

            options = []
            above = number - 1
            while above >= 0 and above not in claimed and self._is_option_line(lines[above]):
                options.insert(0, above)
                above -= 1

            below = number + 1
            while (
                below < len(lines)
                and self._is_option_line(lines[below])
                and not lines[below].lstrip().startswith("-")
            ):
                options.append(below)
                below += 1

            claimed.update(options)
            sites.append(QuerySite(
                line_number=number,
                indent=prefix.group(1),
                marker=prefix.group(2) or "",
                content=line[prefix.end():].rstrip(),
                option_lines=tuple(options),
            ))

        return sites

    def execute_queries(self, text: str) -> str:
        """Second pass: replace each query with its rendered results."""
        lines = text.split("\n")
        sites = self.find_query_sites(lines)
        if not sites:
            return text

        by_line = {site.line_number: site for site in sites}
        consumed = {number for site in sites for number in site.option_lines}
        output: list[str] = []

        for number, line in enumerate(lines):
            if number in consumed:
                continue
            site = by_line.get(number)
            if site is None:
                output.append(line)
                continue
            options = parse_query_options(lines[i] for i in site.option_lines)
            output.extend(self._splice_queries(site, options))

        return "\n".join(output)

    def _is_option_line(self, line: str) -> bool:
        return bool(line.strip()) and self.patterns.query_option_line.match(line) is not None

    def _splice_queries(self, site: QuerySite, options: QueryOptions) -> list[str]:
        """Render each query of a line in place, keeping the text around it.

        Text before a query stays on its own line and the results nest under
        it; text after a query follows the results on a new line.
        """
        output: list[str] = []
        position = 0
        nested = False
        after_list = False

        for match in self.patterns.query_call.finditer(site.content):
            text = site.content[position:match.start()].strip()
            if text:
                self._append_text(output, site, text, after_list)
                nested = True
            rendered = run_query(match.group(0), self.index, options)
            placed, after_list = self._place_query_output(site, rendered, nested)
            output.extend(placed)
            position = match.end()

        tail = site.content[position:].strip()
        if tail:
            self._append_text(output, site, tail, after_list)
        return output

    @staticmethod
    def _append_text(output: list[str], site: QuerySite, text: str, after_list: bool) -> None:
        # Only a sibling bullet may follow a list directly; anything else needs
        # a blank line to stay out of the table, callout or list item above.
        if output and not (after_list and site.marker):
            output.append("")
        output.append(site.indent + site.marker + text)

    @staticmethod
    def _place_query_output(
        site: QuerySite, rendered: str, nested: bool = False
    ) -> tuple[list[str], bool]:
        lines = rendered.split("\n")
        if all(line.startswith("- ") for line in lines):
            if nested:
                prefix = site.indent + ("  " if site.marker else "") + "- "
            else:
                prefix = site.indent + (site.marker if site.marker else "- ")
            return [prefix + line[2:] for line in lines], True
        # Tables and callouts need a blank line before them and no list marker.
        return ["", *(site.indent + line for line in lines)], False

    # Stage 4

    def convert_properties(self, text: str) -> str:
        """``key:: value`` becomes ``- **Key:** value``; leftover query options vanish."""

        def replace(match) -> str:
            indent, key, value = match.groups()
            if key.startswith("query-"):
                return ""
            title = " ".join(word[:1].upper() + word[1:] for word in key.split("-"))
            return f"{indent}- **{title}:** {value}"

        return self.patterns.user_property.sub(replace, text)

    # Stages 5-6

    def strip_image_sizes(self, text: str) -> str:
        return self.patterns.image_size.sub("", text)

    def remove_empty_bullets(self, text: str) -> str:
        return self.patterns.empty_bullet.sub("", text)

    # Stage 8

    def escape_dollars(self, text: str) -> str:
        """Escape currency amounts and ``$TOKEN``s outside of links."""
        protected: list[str] = []

        def protect(match) -> str:
            protected.append(match.group(0))
            return _PLACEHOLDER.format(len(protected) - 1)

        text = self.patterns.link_span.sub(protect, text)
        text = self.patterns.dollar_token.sub(r"\\$", text)
        text = self.patterns.dollar_currency.sub(r"\\$", text)
        for number, original in enumerate(protected):
            text = text.replace(_PLACEHOLDER.format(number), original, 1)
        return text

    # Stages 9-11

    def convert_embeds(self, text: str) -> str:
        return self.patterns.page_embed.sub(r"![[\1]]", text)

    def collapse_markdown_wikilinks(self, text: str) -> str:
        return self.patterns.markdown_wikilink.sub(r"[\1](\2)", text)

    def resolve_links(self, text: str) -> str:
        def replace(match) -> str:
            embed = "!" if match.group(1) else ""
            return self.resolver.rewrite(match.group(2), match.group(3) or "", embed)

        return self.patterns.wikilink.sub(replace, text)

    # Stages 12-14

    def convert_block_references(self, text: str) -> str:
        text = self.patterns.block_embed.sub(BLOCK_EMBED_PLACEHOLDER, text)
        return self.patterns.block_ref.sub(r"[→ block](#^\1)", text)

    def convert_media(self, text: str) -> str:
        text = self.patterns.youtube.sub(r"![\1](\1)", text)
        text = self.patterns.video.sub(r"![\1](\1)", text)
        frame = lambda match: PDF_FRAME.format(src=match.group(1).strip())  # noqa: E731
        text = self.patterns.pdf.sub(frame, text)
        return self.patterns.image_pdf.sub(frame, text)

    def replace_renderers(self, text: str) -> str:
        return self.patterns.renderer.sub(RENDERER_PLACEHOLDER, text)

    # Stage 15

    def convert_hiccup(self, text: str) -> str:
        """Replace ``[:tag ...]`` literals (possibly multi-line) with markdown.

        Literals start on a line beginning with ``[:`` or ``- [:`` and extend
        until their brackets balance. Code fences are left alone. A literal
        still open at the end of the body is kept as written.
        """
        output: list[str] = []
        buffer: list[str] = []
        source: list[str] = []
        indent = ""
        in_fence = False

        for line in text.split("\n"):
            if buffer:
                buffer.append(line.strip())
                source.append(line)
                if bracket_balance(" ".join(buffer)) <= 0:
                    output.extend(self._hiccup_lines(indent, buffer))
                    buffer = []
                continue

            stripped = line.strip()
            if stripped.startswith("```"):
                in_fence = not in_fence

            if in_fence or not self.patterns.hiccup_start.match(stripped):
                output.append(line)
                continue

            indent = line[: len(line) - len(line.lstrip())]
            literal = stripped[1:].lstrip() if stripped.startswith("-") else stripped
            if bracket_balance(literal) <= 0:
                output.extend(self._hiccup_lines(indent, [literal]))
            else:
                buffer = [literal]
                source = [line]

        if buffer:
            logger.debug("hiccup_unbalanced", lines=len(source), start=source[0].strip())
            output.extend(source)

        return "\n".join(output)

    @staticmethod
    def _hiccup_lines(indent: str, buffer: list[str]) -> list[str]:
        return [indent + line for line in hiccup_to_markdown(" ".join(buffer))]

    # Stages 16-19

    def convert_cloze(self, text: str) -> str:
        return self.patterns.cloze.sub(r"==\1==", text)

    def convert_tasks(self, text: str) -> str:
        def replace(match) -> str:
            return f"{match.group(1)}- {TASK_CHECKBOXES[match.group(2)]}"

        return self.patterns.task_marker.sub(replace, text)

    def convert_priorities(self, text: str) -> str:
        return self.patterns.priority_marker.sub(lambda m: PRIORITY_EMOJI[m.group(1)], text)

    def convert_schedules(self, text: str) -> str:
        text = self.patterns.scheduled.sub(r"📅 Scheduled: \1", text)
        return self.patterns.deadline.sub(r"⏰ Deadline: \1", text)


def transform(body: str, index: PageIndex, pipeline: Optional[Pipeline] = None) -> str:
    """Transform one page body; builds a throwaway Pipeline when none is given."""
    return (pipeline or Pipeline(index)).transform(body)
