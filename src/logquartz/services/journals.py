"""Publishing of Logseq journal entries.

Journal files (``2024_08_16.md``) are written as ``journals/2024-08-16.md``
and collected in ``journals/index.md``, newest first.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from logseq_dialect.dates import MONTH_NAMES
from logseq_dialect.index import Document
from logseq_dialect.pipeline import Pipeline
from logquartz.services.exceptions import DocumentTransformError
from logquartz.services.file_operations import atomic_write
from logquartz.services.frontmatter import render_frontmatter, split_tags

logger = structlog.get_logger()

JOURNAL_NAME_RE = re.compile(r"^(\d{4})[_-](\d{2})[_-](\d{2})$")
JOURNAL_INDEX_TITLE = "📅 Journals"


@dataclass(frozen=True)
class JournalEntry:
    """A published journal entry.

    Attributes:
        date: ISO date ("2024-08-16")
        title: Long title ("August 16, 2024")
        stem: Source filename stem ("2024_08_16")
    """

    date: str
    title: str
    stem: str


def parse_journal_name(stem: str) -> Optional[tuple[str, str]]:
    """Turn a journal filename stem into (ISO date, long title).

    Months must be 1..12 and days 1..31; no calendar check beyond that.

    Examples:
        >>> parse_journal_name("2024_08_16")
        ('2024-08-16', 'August 16, 2024')
        >>> parse_journal_name("2024_13_01") is None
        True
    """
    match = JOURNAL_NAME_RE.match(stem)
    if not match:
        return None
    year, month, day = match.group(1), int(match.group(2)), int(match.group(3))
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return f"{year}-{month:02d}-{day:02d}", f"{MONTH_NAMES[month - 1]} {day}, {year}"


def publish_journal(
    document: Document,
    output_dir: Path,
    pipeline: Pipeline,
    include_private: bool = False,
) -> Optional[JournalEntry]:
    """Write one journal entry.

    Args:
        document: Journal document as parsed from its source file
        output_dir: The ``journals/`` output directory
        pipeline: Pipeline over the full index (pages plus journal overlay)
        include_private: Publish entries marked ``private:: true``

    Returns:
        The published entry, or None if the name isn't a date or the entry
        is private

    Raises:
        DocumentTransformError: If the entry cannot be transformed or written
    """
    parsed = parse_journal_name(document.name)
    if parsed is None:
        logger.debug("journal_name_not_a_date", name=document.name)
        return None
    if document.is_private and not include_private:
        logger.debug("journal_private_skipped", name=document.name)
        return None

    date, title = parsed
    fields = {"title": title, "date": date}
    if tags := split_tags(document.properties.get("tags", "")):
        fields["tags"] = tags

    try:
        body = pipeline.transform(document.body)
        atomic_write(output_dir / f"{date}.md", f"{render_frontmatter(fields)}\n{body}")
    except Exception as e:
        raise DocumentTransformError(str(document.source_path or document.name), str(e)) from e

    return JournalEntry(date=date, title=title, stem=document.name)


def write_journal_index(output_dir: Path, entries: list[JournalEntry], prefix: str = "journals") -> None:
    """Write ``index.md`` embedding every entry, newest first."""
    lines = [render_frontmatter({"title": JOURNAL_INDEX_TITLE})]
    for entry in sorted(entries, key=lambda e: e.date, reverse=True):
        lines.append(f"## [[{prefix}/{entry.date}|{entry.date} - {entry.title}]]\n")
        lines.append(f"![[{prefix}/{entry.date}]]\n\n---\n")
    atomic_write(output_dir / "index.md", "\n".join(lines))
