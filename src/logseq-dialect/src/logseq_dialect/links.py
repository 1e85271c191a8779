"""Resolution of written page links to canonical page names.

Logseq links are forgiving: ``[[cv]]`` may mean the page aliased "CV",
``[[cv/districts]]`` the page "cyber valley/districts", and
``[[visit us]]`` the page "visit". ``LinkResolver`` maps such links to the
page a static site can actually serve.
"""

from typing import Optional

from logseq_dialect.index import Document, PageIndex, strip_root_prefix


def _normalize(name: str) -> str:
    return name.lower().replace(" ", "-").replace("_", "-")


def _words(name: str) -> str:
    return name.lower().replace("-", " ").replace("_", " ")


class LinkResolver:
    """Multi-strategy link resolver over a read-only index.

    Strategies, first hit wins:

    1. Exact page name (case-insensitive, dash/underscore/space agnostic):
       the link is returned unchanged
    2. Exact alias: the owning page's name
    3. Namespace alias: ``alias/rest`` tried again as ``owner/rest``
    4. Longest page name that prefixes the link followed by a space
    5. Otherwise the link unchanged
    """

    def __init__(self, index: PageIndex):
        self._names: dict[str, Document] = {}
        self._aliases: dict[str, Document] = {}
        self._prefixes: list[tuple[str, Document]] = []

        for document in index:
            self._names.setdefault(document.name_lower, document)
            self._names.setdefault(_normalize(document.name), document)
            self._prefixes.append((_words(document.name), document))
        for document in index:
            for alias in document.aliases:
                self._aliases.setdefault(alias.lower(), document)
                self._aliases.setdefault(_normalize(alias), document)

    def resolve(self, link: str) -> str:
        """Return the canonical page name for ``link``.

        Args:
            link: Link target as written (without brackets or display alias)

        Returns:
            Canonical page name, or ``link`` itself when nothing matches
        """
        if self._find_name(link) is not None:
            return link

        owner = self._find_alias(link)
        if owner is not None:
            return owner.name

        if "/" in link:
            expanded = self._expand_namespace_alias(link)
            if expanded is not None:
                return expanded

        best = self._longest_prefix(link)
        if best is not None:
            return best.name

        return link

    def rewrite(self, target: str, display: str = "", embed: str = "") -> str:
        """Rewrite one bracket link.

        Args:
            target: Link target as written, possibly ``pages/``-prefixed
            display: Display alias including its leading "|", or ""
            embed: Embed marker ("!" or "") preceding the link

        Returns:
            The rewritten ``[[...]]`` link; when the target changed and no
            display alias was given, the written text becomes the alias
        """
        clean = strip_root_prefix(target)
        # A table-escaped alias separator ("\|") leaves a trailing backslash.
        escape = ""
        if clean.endswith("\\"):
            clean, escape = clean[:-1], "\\"

        resolved = self.resolve(clean)
        if resolved != clean and not display:
            return f"{embed}[[{resolved}{escape}|{clean}]]"
        return f"{embed}[[{resolved}{escape}{display}]]"

    def _find_name(self, name: str) -> Optional[Document]:
        return self._names.get(name.lower()) or self._names.get(_normalize(name))

    def _find_alias(self, name: str) -> Optional[Document]:
        return self._aliases.get(name.lower()) or self._aliases.get(_normalize(name))

    def _expand_namespace_alias(self, link: str) -> Optional[str]:
        prefix, suffix = link.split("/", 1)
        owner = self._find_alias(prefix)
        if owner is None:
            return None
        expanded = f"{owner.name}/{suffix}"
        target = self._find_name(expanded)
        if target is not None:
            return target.name
        target = self._find_alias(expanded)
        if target is not None:
            return target.name
        return None

    def _longest_prefix(self, link: str) -> Optional[Document]:
        link_words = _words(link)
        best: Optional[Document] = None
        best_length = 0
        for page_words, document in self._prefixes:
            if len(page_words) > best_length and link_words.startswith(page_words + " "):
                best, best_length = document, len(page_words)
        return best
