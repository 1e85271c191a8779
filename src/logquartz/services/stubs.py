"""Placeholder pages for links that point nowhere.

Quartz renders a link to a missing page as a dead end. Stubs give every
such target a small page so graph view and backlinks still work.
"""

import re
from pathlib import Path

import structlog

from logseq_dialect.index import strip_root_prefix
from logquartz.services.file_operations import atomic_write
from logquartz.services.frontmatter import render_frontmatter

logger = structlog.get_logger()

LINK_RE = re.compile(r"\[\[([^\]|]+?)\\?(?:\|[^\]]+)?\]\]")
SKIPPED_PREFIXES = ("journals/", "favorites/", "assets/")
UNSAFE_CHARS_RE = re.compile(r'[/\\:*?"<>|]')
MAX_LINK_LENGTH = 200

STUB_BODY = "> [!note] Stub Page\n> This page was auto-generated.\n"


def collect_links(output_dir: Path) -> set[str]:
    """Lowercased bracket-link targets found in every published file."""
    links: set[str] = set()
    for path in output_dir.rglob("*.md"):
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("stub_scan_skipped", path=str(path), error=str(e))
            continue
        for match in LINK_RE.finditer(text):
            link = match.group(1).strip()
            if link and not link.startswith(("http", "#", "!")):
                links.add(strip_root_prefix(link).lower())
    return links


def existing_pages(output_dir: Path) -> set[str]:
    """Lowercased output-relative page names (without ``.md``)."""
    return {
        path.relative_to(output_dir).with_suffix("").as_posix().lower()
        for path in output_dir.rglob("*.md")
    }


def is_stub_candidate(link: str) -> bool:
    if link.startswith(SKIPPED_PREFIXES):
        return False
    if link.startswith(("http", "#")) or "://" in link:
        return False
    return 1 < len(link) <= MAX_LINK_LENGTH


def stub_filename(link: str) -> str:
    """Filesystem-safe file name for a stub.

    Example:
        >>> stub_filename('what is "ai"?')
        'what is _ai__.md'
    """
    return f"{UNSAFE_CHARS_RE.sub('_', link)}.md"


def create_stubs(output_dir: Path) -> int:
    """Write a stub for every linked page that wasn't published.

    Returns:
        Number of stubs written
    """
    existing = existing_pages(output_dir)
    created = 0

    for link in sorted(collect_links(output_dir)):
        if not is_stub_candidate(link) or link in existing:
            continue

        stub_path = output_dir / stub_filename(link)
        if stub_path.exists():
            continue

        content = render_frontmatter({"title": link.replace("_", " "), "stub": True})
        try:
            atomic_write(stub_path, f"{content}\n{STUB_BODY}")
        except OSError as e:
            logger.warning("stub_write_failed", link=link, error=str(e))
            continue
        created += 1

    logger.info("stubs_created", count=created)
    return created
