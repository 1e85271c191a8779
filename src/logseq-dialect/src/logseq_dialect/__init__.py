"""Logseq dialect - Read a Logseq graph and rewrite it as Quartz markdown.

This package holds the pure core of the publisher: it never writes files
and never shells out.

Key features:
- Index every page with its properties, tags, aliases and namespace
- Evaluate Logseq simple queries (``{{query ...}}``) against the index
- Resolve forgiving Logseq links (aliases, namespaces, prefixes)
- Rewrite page bodies through an ordered, thread-safe transform pipeline

Example:
    >>> from logseq_dialect import GraphPaths, PageIndex, Pipeline
    >>> graph = GraphPaths(Path("~/notes").expanduser())
    >>> index = PageIndex.build(graph.load_sources(graph.pages_dir))
    >>> markdown = Pipeline(index).transform(index[0].body)
"""

from logseq_dialect.graph import GraphPaths
from logseq_dialect.index import Document, PageIndex, SourceFile
from logseq_dialect.links import LinkResolver
from logseq_dialect.patterns import PATTERNS, PatternRegistry
from logseq_dialect.pipeline import Pipeline, transform
from logseq_dialect.query import execute, render, run_query

__version__ = "0.1.0"

__all__ = [
    "GraphPaths",
    "Document",
    "PageIndex",
    "SourceFile",
    "LinkResolver",
    "PATTERNS",
    "PatternRegistry",
    "Pipeline",
    "transform",
    "execute",
    "render",
    "run_query",
]
