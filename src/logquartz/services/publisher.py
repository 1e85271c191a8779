"""End-to-end publishing of a Logseq graph into a Quartz content folder.

Run order:

1. validate the graph root and collect git dates
2. build the page index, then overlay journals under ``journals/``
3. transform and write pages on a thread pool
4. journals, favorites, site config and the landing page
5. copy assets, then optionally create stubs from the written output
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar

import structlog

from logseq_dialect.graph import GraphPaths
from logseq_dialect.index import Document, PageIndex
from logseq_dialect.pipeline import Pipeline
from logquartz.models.config import PublishConfig
from logquartz.services import favorites as favorites_service
from logquartz.services.exceptions import DocumentTransformError, SourceRootError
from logquartz.services.file_operations import atomic_write, copy_tree
from logquartz.services.frontmatter import generate_frontmatter
from logquartz.services.git_dates import collect_git_dates
from logquartz.services.journals import (
    JournalEntry,
    parse_journal_name,
    publish_journal,
    write_journal_index,
)
from logquartz.services.stubs import create_stubs

logger = structlog.get_logger()

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class PublishStats:
    """Counters for one run. Safe to update from worker threads."""

    pages_published: int = 0
    pages_skipped: int = 0
    pages_failed: int = 0
    journals_published: int = 0
    favorites_created: int = 0
    stubs_created: int = 0
    assets_copied: int = 0
    elapsed_seconds: float = 0.0
    failures: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment(self, counter: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def record_failure(self, path: str) -> None:
        with self._lock:
            self.pages_failed += 1
            self.failures.append(path)


class Publisher:
    """Publishes one graph according to a PublishConfig.

    Example:
        >>> stats = Publisher(load_config(graph_path="~/notes")).run()
        >>> stats.pages_published
        120
    """

    def __init__(self, config: PublishConfig):
        self.config = config
        self.output_dir = config.output_dir
        self.journals_output = self.output_dir / config.journals_prefix
        self.favorites_output = self.output_dir / "favorites"
        self.assets_output = self.output_dir / "assets"

    def run(self) -> PublishStats:
        """Publish the graph.

        Returns:
            Counters for the run

        Raises:
            SourceRootError: If the graph root is missing or has no pages/
        """
        start = time.perf_counter()
        stats = PublishStats()
        graph = self.open_graph()

        for directory in (self.output_dir, self.journals_output, self.favorites_output, self.assets_output):
            directory.mkdir(parents=True, exist_ok=True)

        dates = collect_git_dates(graph.graph_path)
        pages = PageIndex.build(graph.load_sources(graph.pages_dir), dates)
        journals = PageIndex.build(graph.load_sources(graph.journals_dir), dates)
        index = pages.with_overlay(journal_overlay(journals), self.config.journals_prefix)
        logger.info("index_built", pages=len(pages), journals=len(journals), documents=len(index))

        pipeline = Pipeline(index)

        published = self.publish_pages(pages, pipeline, stats)
        self.publish_journals(journals, pipeline, stats)
        self.publish_site(graph, index, published, stats)

        if graph.assets_dir.is_dir():
            stats.assets_copied = copy_tree(graph.assets_dir, self.assets_output)
            logger.info("assets_copied", files=stats.assets_copied)

        if self.config.create_stubs:
            stats.stubs_created = create_stubs(self.output_dir)

        stats.elapsed_seconds = time.perf_counter() - start
        logger.info(
            "publish_completed",
            published=stats.pages_published,
            skipped=stats.pages_skipped,
            failed=stats.pages_failed,
            elapsed=round(stats.elapsed_seconds, 3),
        )
        return stats

    def open_graph(self) -> GraphPaths:
        root = self.config.graph_path
        try:
            graph = GraphPaths(root)
        except ValueError as e:
            raise SourceRootError(str(root), str(e)) from e
        if not graph.pages_dir.is_dir():
            raise SourceRootError(str(root), "Graph has no pages/ directory")
        return graph

    # Pages

    def output_path(self, document: Document) -> Path:
        """Output file for a page: ``a___b.md`` is written to ``a/b.md``."""
        stem = document.source_path.stem if document.source_path else document.name
        return self.output_dir / f"{stem.replace('___', '/')}.md"

    def publish_page(self, document: Document, pipeline: Pipeline) -> bool:
        """Transform and write one page.

        Returns:
            False if the page is private and private pages are excluded

        Raises:
            DocumentTransformError: If the page cannot be transformed or written
        """
        if document.is_private and not self.config.include_private:
            logger.debug("page_private_skipped", name=document.name)
            return False

        try:
            frontmatter = generate_frontmatter(
                document.name, document.properties, (document.modified, document.created)
            )
            body = pipeline.transform(document.body)
            atomic_write(self.output_path(document), f"{frontmatter}\n{body}")
        except Exception as e:
            raise DocumentTransformError(str(document.source_path or document.name), str(e)) from e
        return True

    def publish_pages(self, pages: PageIndex, pipeline: Pipeline, stats: PublishStats) -> set[str]:
        """Publish every page in parallel.

        Returns:
            Lowercased names of the published pages
        """
        published: set[str] = set()

        def publish(document: Document) -> bool:
            return self.publish_page(document, pipeline)

        for document, result in self._run_parallel(publish, pages):
            if isinstance(result, DocumentTransformError):
                logger.error("page_publish_failed", path=result.path, error=result.message)
                stats.record_failure(result.path)
            elif result:
                stats.increment("pages_published")
                published.add(document.name_lower)
            else:
                stats.increment("pages_skipped")

        logger.info("pages_published", published=stats.pages_published, skipped=stats.pages_skipped)
        return published

    # Journals

    def publish_journals(self, journals: PageIndex, pipeline: Pipeline, stats: PublishStats) -> list[JournalEntry]:
        entries: list[JournalEntry] = []

        def publish(document: Document) -> Optional[JournalEntry]:
            return publish_journal(document, self.journals_output, pipeline, self.config.include_private)

        for _document, result in self._run_parallel(publish, journals):
            if isinstance(result, DocumentTransformError):
                logger.error("journal_publish_failed", path=result.path, error=result.message)
                stats.record_failure(result.path)
            elif result is not None:
                entries.append(result)

        stats.journals_published = len(entries)
        if entries:
            write_journal_index(self.journals_output, entries, self.config.journals_prefix)
        logger.info("journals_published", count=len(entries))
        return entries

    # Favorites, site config, landing page

    def publish_site(self, graph: GraphPaths, index: PageIndex, published: set[str], stats: PublishStats) -> None:
        edn = favorites_service.read_config_edn(graph.config_edn)
        site = self.config.site

        favorites = site.favorites if site.favorites is not None else favorites_service.extract_favorites(edn)
        stats.favorites_created = favorites_service.process_favorites(
            favorites, self.favorites_output, index, published
        )

        settings = favorites_service.resolve_site_settings(edn, site)
        favorites_service.write_site_config(self.output_dir, settings)

        home = index.get(settings.home_page)
        home_output = self.output_path(home) if home is not None and home.name_lower in published else None
        favorites_service.write_landing_page(self.output_dir, settings.home_page, home_output)

    def _run_parallel(
        self, fn: Callable[[T], R], items: Iterable[T]
    ) -> list[tuple[T, object]]:
        """Apply ``fn`` to every item on the worker pool.

        A DocumentTransformError is returned in place of the result so one
        failing document never stops the others.
        """
        results: list[tuple[T, object]] = []
        with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
            futures = {pool.submit(fn, item): item for item in items}
            for future in as_completed(futures):
                item = futures[future]
                try:
                    results.append((item, future.result()))
                except DocumentTransformError as e:
                    results.append((item, e))
        return results


def journal_overlay(journals: PageIndex) -> list[Document]:
    """Journal documents renamed to their ISO date ("2024_08_16" -> "2024-08-16").

    The overlay names then match the published ``journals/<date>.md`` files.
    Entries whose names are not dates keep their names.
    """
    overlay = []
    for document in journals:
        parsed = parse_journal_name(document.name)
        overlay.append(replace(document, name=parsed[0]) if parsed else document)
    return overlay
