"""Logseq simple-query support: parse, evaluate and render ``{{query ...}}``.

Example:
    >>> from logseq_dialect.query import execute, render
    >>> results = execute("(and (page-tags [[book]]) (not (page-tags [[read]])))", index)
    >>> markdown = render(results, "(page-tags [[book]])")
"""

from logseq_dialect.query.engine import evaluate, execute, run_query
from logseq_dialect.query.options import OPTION_KEYS, QueryOptions, parse_query_options
from logseq_dialect.query.parser import And, Not, Or, Predicate, Query, SortBy, parse_query
from logseq_dialect.query.render import render

__all__ = [
    "And",
    "Not",
    "Or",
    "Predicate",
    "Query",
    "SortBy",
    "QueryOptions",
    "OPTION_KEYS",
    "evaluate",
    "execute",
    "parse_query",
    "parse_query_options",
    "render",
    "run_query",
]
