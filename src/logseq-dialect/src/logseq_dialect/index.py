"""In-memory document index for a Logseq graph.

The index is built once per run from the graph's source files and is then
shared read-only by every transform worker. Each ``Document`` carries the
page-level properties, tags and aliases parsed from its source.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional
from urllib.parse import unquote

import structlog

from logseq_dialect.patterns import PATTERNS

logger = structlog.get_logger()

NAMESPACE_SEPARATOR = "___"
ROOT_PREFIX = "pages/"

# (modified, created) ISO dates keyed by repository-relative path
DateLookup = Mapping[str, tuple[str, str]]


@dataclass(frozen=True)
class SourceFile:
    """One source document as handed to the index builder.

    Attributes:
        path: Filesystem path of the markdown file
        rel_path: Repository-relative path, used as the date lookup key
        text: Raw text if already loaded; read from ``path`` otherwise
    """

    path: Path
    rel_path: str = ""
    text: Optional[str] = None

    @property
    def stem(self) -> str:
        return self.path.stem

    def read_text(self) -> str:
        """Return the raw text, reading the file when it was not preloaded.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid UTF-8
        """
        if self.text is not None:
            return self.text
        return self.path.read_text(encoding="utf-8")


@dataclass(frozen=True, eq=False)
class Document:
    """A single page (or journal entry) of the graph.

    Documents compare by identity: two index entries are the same result
    only if they are the same object.

    Attributes:
        name: Case-preserving page name, namespace segments joined with "/"
        raw: Full source text, including the property block
        body: Source text after the page-level property block
        properties: Page properties (lowercase keys, hyphens preserved)
        tags: Lowercase, de-duplicated tags in first-seen order
        aliases: Case-preserving aliases from ``alias::``/``aliases::``
        namespace: Namespace prefix when the filename encodes one
        modified: Last modification date (YYYY-MM-DD)
        created: Creation date (YYYY-MM-DD)
        source_path: Path of the file the document was parsed from
    """

    name: str
    raw: str = ""
    body: str = ""
    properties: Mapping[str, str] = field(default_factory=dict)
    tags: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    namespace: Optional[str] = None
    modified: Optional[str] = None
    created: Optional[str] = None
    source_path: Optional[Path] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Document name must not be empty")
        if not isinstance(self.properties, MappingProxyType):
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def name_lower(self) -> str:
        return self.name.lower()

    @property
    def title(self) -> str:
        """Display title: the ``title::`` property or the name with underscores as spaces."""
        return self.properties.get("title") or self.name.replace("_", " ")

    @property
    def icon(self) -> Optional[str]:
        return self.properties.get("icon") or None

    @property
    def is_private(self) -> bool:
        return self.properties.get("private", "").strip().lower() == "true"

    def get_property(self, key: str) -> Optional[str]:
        """Look up a property, ignoring case, a leading colon and hyphens in the key.

        ``due-date``, ``duedate`` and ``:Due-Date`` all find the same property.
        """
        wanted = _normalize_key(key)
        for prop_key, value in self.properties.items():
            if _normalize_key(prop_key) == wanted:
                return value
        return None

    def with_prefix(self, prefix: str) -> "Document":
        """Copy of this document with its name moved under ``prefix/``."""
        return replace(self, name=f"{prefix.rstrip('/')}/{self.name}")

    @classmethod
    def from_source(cls, source: SourceFile, dates: Optional[DateLookup] = None) -> "Document":
        """Parse a source file into a document.

        Args:
            source: Source file to parse
            dates: Optional (modified, created) lookup keyed by relative path

        Returns:
            Parsed Document

        Raises:
            OSError, UnicodeDecodeError: If the source cannot be read
            ValueError: If the source yields no usable page name
        """
        text = source.read_text()
        namespace, name = split_namespace(source.stem)
        properties, body = parse_properties(text)
        modified, created = (dates or {}).get(source.rel_path, (None, None))

        return cls(
            name=name,
            raw=text,
            body=body,
            properties=properties,
            tags=extract_tags(properties, text),
            aliases=parse_aliases(properties.get("alias") or properties.get("aliases") or ""),
            namespace=namespace,
            modified=modified,
            created=created,
            source_path=source.path,
        )


class PageIndex:
    """Ordered, read-only collection of documents.

    Order is discovery order and only serves as a stable tie-break.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: tuple[Document, ...] = tuple(documents)
        self._by_name: dict[str, Document] = {}
        tags: dict[str, None] = {}
        for document in self._documents:
            self._by_name.setdefault(document.name_lower, document)
            tags.update(dict.fromkeys(document.tags))
        self._all_tags = tuple(tags)

    @classmethod
    def build(
        cls, sources: Iterable[SourceFile], dates: Optional[DateLookup] = None
    ) -> "PageIndex":
        """Build an index from source files.

        Sources that cannot be read or parsed are skipped; no partial
        document is ever added.
        """
        documents = []
        for source in sources:
            try:
                documents.append(Document.from_source(source, dates))
            except (OSError, UnicodeDecodeError, ValueError) as e:
                logger.debug("source_skipped", path=str(source.path), error=str(e))
        logger.debug("index_built", documents=len(documents))
        return cls(documents)

    def with_overlay(self, documents: Iterable[Document], prefix: str) -> "PageIndex":
        """Return a new index with ``documents`` appended under ``prefix/``."""
        overlay = [document.with_prefix(prefix) for document in documents]
        return PageIndex(self._documents + tuple(overlay))

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    @property
    def all_tags(self) -> tuple[str, ...]:
        """Every tag seen in the index, in first-seen order."""
        return self._all_tags

    def get(self, name: str) -> Optional[Document]:
        """Find a document by exact, case-insensitive name (root prefix ignored)."""
        return self._by_name.get(strip_root_prefix(name).lower())

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __getitem__(self, position: int) -> Document:
        return self._documents[position]


def strip_root_prefix(name: str) -> str:
    """Remove a redundant ``pages/`` prefix from a link target."""
    if name.lower().startswith(ROOT_PREFIX):
        return name[len(ROOT_PREFIX):]
    return name


def split_namespace(stem: str) -> tuple[Optional[str], str]:
    """Split a filename stem into (namespace, page name).

    Logseq stores ``a/b`` as ``a___b.md`` and percent-encodes other
    reserved characters.

    Examples:
        >>> split_namespace("projects___website")
        ('projects', 'projects/website')
        >>> split_namespace("Reading List")
        (None, 'Reading List')
    """
    name = unquote(stem).replace(NAMESPACE_SEPARATOR, "/")
    if "/" not in name:
        return None, name
    namespace = name.rsplit("/", 1)[0]
    return namespace, name


def parse_properties(text: str) -> tuple[dict[str, str], str]:
    """Parse the leading property block of a page.

    The block is the run of leading ``key:: value`` lines (optionally
    bulleted). Blank lines between property lines belong to the block; a
    blank line before the first property, or any other line after it,
    ends it.

    Args:
        text: Raw page text

    Returns:
        Tuple of (properties, remaining body text)
    """
    lines = text.split("\n")
    properties: dict[str, str] = {}
    end = 0

    for i, line in enumerate(lines):
        clean = line.strip()
        match = PATTERNS.property_line.match(clean)
        if match:
            properties[match.group(1).lower()] = match.group(2).strip()
            end = i + 1
        elif not clean and properties:
            end = i + 1
        else:
            break

    return properties, "\n".join(lines[end:])


def extract_tags(properties: Mapping[str, str], text: str) -> tuple[str, ...]:
    """Collect tags from the ``tags::`` property and inline ``#tag`` tokens."""
    tags: dict[str, None] = {}

    for tag in properties.get("tags", "").split(","):
        tag = _strip_link_syntax(tag.strip().lstrip("#")).strip().lower()
        if tag:
            tags[tag] = None

    for pattern in (PATTERNS.bracket_tag, PATTERNS.inline_tag):
        for match in pattern.finditer(text):
            tags[match.group(1).strip().lower()] = None

    return tuple(tags)


def parse_aliases(value: str) -> tuple[str, ...]:
    """Split an alias property on commas that are not inside ``[[...]]``.

    Examples:
        >>> parse_aliases("CV, [[Cyber, Valley]], cyber valley")
        ('CV', 'Cyber, Valley', 'cyber valley')
    """
    aliases = []
    current = []
    depth = 0
    i = 0

    while i < len(value):
        pair = value[i:i + 2]
        if pair == "[[":
            depth += 1
            i += 2
            continue
        if pair == "]]" and depth:
            depth -= 1
            i += 2
            continue
        if value[i] == "," and not depth:
            aliases.append("".join(current).strip())
            current = []
        else:
            current.append(value[i])
        i += 1

    aliases.append("".join(current).strip())
    return tuple(alias for alias in aliases if alias)


def _strip_link_syntax(value: str) -> str:
    value = value.strip()
    if value.startswith("[[") and value.endswith("]]"):
        return value[2:-2]
    return value


def _normalize_key(key: str) -> str:
    return key.strip().lstrip(":").lower().replace("-", "")
