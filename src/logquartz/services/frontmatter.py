"""YAML frontmatter for published pages."""

from typing import Any, Mapping, Optional

import yaml

from logseq_dialect.index import parse_aliases


def generate_frontmatter(
    name: str,
    properties: Mapping[str, str],
    dates: Optional[tuple[Optional[str], Optional[str]]] = None,
) -> str:
    """Build the ``---`` delimited frontmatter block for a page.

    Args:
        name: Page name (filename stem); underscores become spaces in the title
        properties: Page-level Logseq properties
        dates: Optional (modified, created) pair

    Returns:
        Frontmatter text ending with a newline

    Example:
        >>> print(generate_frontmatter("Reading_List", {"icon": "📚"}), end="")
        ---
        title: 📚 Reading List
        icon: 📚
        ---
    """
    title = properties.get("title") or name.replace("_", " ")
    icon = properties.get("icon")
    fields: dict[str, Any] = {"title": f"{icon} {title}" if icon else title}

    if icon:
        fields["icon"] = icon

    if tags := split_tags(properties.get("tags", "")):
        fields["tags"] = tags

    if aliases := list(parse_aliases(properties.get("alias") or properties.get("aliases") or "")):
        fields["aliases"] = aliases

    if description := properties.get("description"):
        fields["description"] = description

    if dates:
        modified, created = dates
        if modified:
            fields["modified"] = modified
        if created:
            fields["created"] = created

    return render_frontmatter(fields)


def render_frontmatter(fields: Mapping[str, Any]) -> str:
    """Dump ``fields`` as YAML between ``---`` fences, keeping key order."""
    body = yaml.safe_dump(dict(fields), allow_unicode=True, sort_keys=False, default_flow_style=False)
    return f"---\n{body}---\n"


def split_tags(value: str) -> list[str]:
    """Split a ``tags::`` value, dropping ``#`` and ``[[ ]]`` decorations."""
    tags = []
    for tag in value.split(","):
        tag = tag.strip().lstrip("#")
        if tag.startswith("[[") and tag.endswith("]]"):
            tag = tag[2:-2]
        tag = tag.strip()
        if tag:
            tags.append(tag)
    return tags
