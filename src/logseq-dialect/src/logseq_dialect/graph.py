"""Logseq graph directory layout.

Locates the parts of a graph a publisher reads (``pages/``, ``journals/``,
``assets/``, ``logseq/config.edn``) and enumerates its markdown sources.
"""

from pathlib import Path
from typing import Iterator, Optional

from logseq_dialect.index import SourceFile


class GraphPaths:
    """Path helper for one Logseq graph.

    Attributes:
        graph_path: Root path of the graph
    """

    def __init__(self, graph_path: Path):
        """Initialize with graph root path.

        Args:
            graph_path: Path to Logseq graph directory

        Raises:
            ValueError: If graph_path doesn't exist or isn't a directory
        """
        if not graph_path.exists():
            raise ValueError(f"Graph path does not exist: {graph_path}")
        if not graph_path.is_dir():
            raise ValueError(f"Graph path is not a directory: {graph_path}")

        self.graph_path = graph_path

    @property
    def pages_dir(self) -> Path:
        return self.graph_path / "pages"

    @property
    def journals_dir(self) -> Path:
        return self.graph_path / "journals"

    @property
    def assets_dir(self) -> Path:
        return self.graph_path / "assets"

    @property
    def config_edn(self) -> Path:
        """Path to ``logseq/config.edn`` (may not exist)."""
        return self.graph_path / "logseq" / "config.edn"

    def list_pages(self) -> list[Path]:
        """All page files, including nested folders, sorted by path."""
        if not self.pages_dir.exists():
            return []
        return sorted(self.pages_dir.rglob("*.md"))

    def list_journals(self) -> list[Path]:
        """Journal files in filename (chronological) order."""
        if not self.journals_dir.exists():
            return []
        return sorted(self.journals_dir.glob("*.md"))

    def load_sources(self, directory: Optional[Path] = None) -> Iterator[SourceFile]:
        """Yield lazily-read sources for a graph directory.

        Args:
            directory: ``pages_dir`` (default) or ``journals_dir``

        Yields:
            SourceFile whose ``rel_path`` is relative to the graph root,
            the key used by the git date lookup
        """
        directory = directory or self.pages_dir
        paths = self.list_journals() if directory == self.journals_dir else self._list_markdown(directory)
        for path in paths:
            yield SourceFile(path=path, rel_path=self.relative(path))

    def relative(self, path: Path) -> str:
        """Graph-relative POSIX path, or "" when ``path`` is outside the graph."""
        try:
            return path.relative_to(self.graph_path).as_posix()
        except ValueError:
            return ""

    def _list_markdown(self, directory: Path) -> list[Path]:
        if directory == self.pages_dir:
            return self.list_pages()
        if not directory.exists():
            return []
        return sorted(directory.rglob("*.md"))
