"""Favorites, site configuration and the landing page.

Logseq keeps favorites, the home page and the graph title in
``logseq/config.edn``. Only the three values needed here are read, with
regular expressions rather than a full EDN parser.
"""

import json
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, Sequence

import structlog

from logseq_dialect.index import PageIndex
from logquartz.models.config import SiteConfig
from logquartz.services.file_operations import atomic_write
from logquartz.services.frontmatter import render_frontmatter

logger = structlog.get_logger()

FAVORITES_RE = re.compile(r":favorites\s+\[([\s\S]*?)\]")
FAVORITE_ITEM_RE = re.compile(r'"([^"]+)"')
DEFAULT_HOME_RE = re.compile(r':default-home\s+\{[^}]*:page\s+"([^"]+)"')
SITE_TITLE_RE = re.compile(r':meta/title\s+"([^"]+)"')

FAVORITES_INDEX_TITLE = "⭐ Favorites"
DEFAULT_HOME_PAGE = "index"
SITE_CONFIG_FILENAME = "_site_config.json"


@dataclass(frozen=True)
class SiteSettings:
    """Values written to ``_site_config.json`` for the Quartz theme."""

    page_title: str
    home_page: str


def read_config_edn(path: Path) -> str:
    """Return config.edn text, or "" when it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("config_edn_unreadable", path=str(path), error=str(e))
        return ""


def extract_favorites(edn: str) -> list[str]:
    """Page names listed under ``:favorites [...]``, in order."""
    match = FAVORITES_RE.search(edn)
    if not match:
        return []
    return FAVORITE_ITEM_RE.findall(match.group(1))


def extract_default_home(edn: str) -> Optional[str]:
    """The ``:default-home {:page "..."}`` page, ignoring commented lines."""
    return _search_uncommented(DEFAULT_HOME_RE, edn)


def extract_site_title(edn: str) -> Optional[str]:
    """``:meta/title``, falling back to the default home page."""
    return _search_uncommented(SITE_TITLE_RE, edn) or extract_default_home(edn)


def slugify(name: str) -> str:
    """URL-safe file stem for a favorite.

    Examples:
        >>> slugify("Projects/Website Redesign")
        'projects-website-redesign'
    """
    lowered = name.lower().replace(" ", "-").replace("/", "-")
    return "".join(ch for ch in lowered if ch.isalnum() or ch in "-_.")


def process_favorites(
    favorites: Sequence[str],
    favorites_output: Path,
    index: PageIndex,
    published: set[str],
) -> int:
    """Write one embed page per published favorite plus ``index.md``.

    Args:
        favorites: Favorite page names as listed in config.edn
        favorites_output: The ``favorites/`` output directory
        index: Page index, used for canonical names and icons
        published: Lowercased names of pages that were published

    Returns:
        Number of favorite pages written
    """
    if not favorites:
        return 0

    entries = []
    for favorite in favorites:
        document = index.get(favorite)
        if document is None or document.name_lower not in published:
            logger.debug("favorite_not_published", favorite=favorite)
            continue

        label = f"{document.icon} {favorite}" if document.icon else favorite
        slug = slugify(favorite)
        atomic_write(
            favorites_output / f"{slug}.md",
            f"{render_frontmatter({'title': label})}\n![[{document.name}]]\n",
        )
        entries.append(f"- [[favorites/{slug}|{label}]]")

    content = render_frontmatter({"title": FAVORITES_INDEX_TITLE}) + "\n"
    content += "".join(f"{entry}\n" for entry in entries)
    atomic_write(favorites_output / "index.md", content)

    logger.info("favorites_created", count=len(entries))
    return len(entries)


def resolve_site_settings(edn: str, overrides: Optional[SiteConfig] = None) -> SiteSettings:
    """Combine config.edn values with configured overrides."""
    overrides = overrides or SiteConfig()
    home_page = overrides.home_page or extract_default_home(edn) or DEFAULT_HOME_PAGE
    title = overrides.title or extract_site_title(edn) or home_page
    return SiteSettings(page_title=title[:1].upper() + title[1:], home_page=home_page)


def write_site_config(output_dir: Path, settings: SiteSettings) -> Path:
    path = output_dir / SITE_CONFIG_FILENAME
    atomic_write(path, json.dumps(asdict(settings), indent=2, ensure_ascii=False) + "\n")
    return path


def write_landing_page(output_dir: Path, home_page: str, home_output: Optional[Path]) -> bool:
    """Create ``index.md`` unless it already exists.

    The published home page is copied when there is one; otherwise a
    minimal welcome page links to it.

    Returns:
        True if index.md was written
    """
    index_path = output_dir / "index.md"
    if index_path.exists():
        return False

    if home_output is not None and home_output.exists():
        atomic_write(index_path, home_output.read_text(encoding="utf-8"))
        logger.info("landing_page_copied", home_page=home_page)
    else:
        content = f"{render_frontmatter({'title': home_page})}\n# Welcome\n\nSee [[{home_page}]]\n"
        atomic_write(index_path, content)
        logger.info("landing_page_fallback", home_page=home_page)
    return True


def _search_uncommented(pattern: re.Pattern, edn: str) -> Optional[str]:
    for line in edn.splitlines():
        if line.strip().startswith(";"):
            continue
        if match := pattern.search(line):
            return match.group(1)
    return None
