"""Interpreter evaluating parsed query trees against a PageIndex."""

import re
from typing import Callable, Optional

from logseq_dialect.dates import parse_date
from logseq_dialect.index import Document, PageIndex, strip_root_prefix
from logseq_dialect.query.options import QueryOptions
from logseq_dialect.query.parser import TASK_STATES, And, Expr, Not, Or, Predicate, parse_query
from logseq_dialect.query.render import render

PredicateFn = Callable[[tuple[str, ...], PageIndex], list[Document]]

_PREDICATES: dict[str, PredicateFn] = {}

_TASK_PATTERNS = {
    state: re.compile(rf"(?m)^[ \t]*(?:-[ \t]+)?{state}\s") for state in TASK_STATES
}


def _predicate(kind: str) -> Callable[[PredicateFn], PredicateFn]:
    def register(fn: PredicateFn) -> PredicateFn:
        _PREDICATES[kind] = fn
        return fn

    return register


def execute(query_text: str, index: PageIndex) -> list[Document]:
    """Run a query and return matching documents.

    Args:
        query_text: Query expression, with or without ``{{query ...}}``
        index: Document index to search

    Returns:
        Matching documents in evaluation order (no sorting applied)
    """
    return evaluate(parse_query(query_text).expression, index)


def evaluate(expression: Expr, index: PageIndex) -> list[Document]:
    """Evaluate an expression tree.

    - ``And`` keeps the first operand's order
    - ``Or`` keeps first-seen order without duplicates
    - ``Not`` is the complement against the whole index, in index order
    """
    if isinstance(expression, And):
        if not expression.operands:
            return []
        result = evaluate(expression.operands[0], index)
        for operand in expression.operands[1:]:
            if not result:
                break
            matching = set(evaluate(operand, index))
            result = [document for document in result if document in matching]
        return result

    if isinstance(expression, Or):
        seen: set[Document] = set()
        result = []
        for operand in expression.operands:
            for document in evaluate(operand, index):
                if document not in seen:
                    seen.add(document)
                    result.append(document)
        return result

    if isinstance(expression, Not):
        excluded = set(evaluate(expression.operand, index))
        return [document for document in index if document not in excluded]

    handler = _PREDICATES.get(expression.kind)
    if handler is None:
        return []
    return handler(expression.args, index)


def run_query(
    query_text: str, index: PageIndex, options: Optional[QueryOptions] = None
) -> str:
    """Parse, execute and render a query in one call.

    A ``(sort-by ...)`` clause inside the query applies when the options
    do not name a sort key.
    """
    options = options or QueryOptions()
    query = parse_query(query_text)
    if query.sort is not None and options.sort_by is None:
        options = options.with_sort(query.sort.key, query.sort.descending)
    results = evaluate(query.expression, index)
    return render(results, query_text, options)


@_predicate("page")
def _match_page(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    name = strip_root_prefix(args[0]).lower()
    return [document for document in index if document.name_lower == name]


@_predicate("page-tags")
def _match_page_tags(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    wanted = {strip_root_prefix(tag).lower() for tag in args}
    return [document for document in index if wanted.intersection(document.tags)]


@_predicate("namespace")
def _match_namespace(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    namespace = strip_root_prefix(args[0]).lower()
    return [
        document for document in index
        if document.namespace is not None and document.namespace.lower() == namespace
    ]


@_predicate("property")
def _match_property(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    key = args[0]
    value = args[1].lower() if len(args) > 1 else ""
    result = []
    for document in index:
        found = (document.get_property(key) or "").lower()
        if value:
            if found == value or value in found:
                result.append(document)
        elif found:
            result.append(document)
    return result


@_predicate("task")
def _match_task(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    patterns = [_TASK_PATTERNS[state] for state in args]
    return [
        document for document in index
        if any(pattern.search(document.raw) for pattern in patterns)
    ]


@_predicate("priority")
def _match_priority(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    markers = [f"[#{priority}]" for priority in args]
    return [
        document for document in index
        if any(marker in document.raw for marker in markers)
    ]


@_predicate("between")
def _match_between(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    start, end = parse_date(args[0]), parse_date(args[1])
    if start is None or end is None:
        return []
    result = []
    for document in index:
        document_date = parse_date(document.name)
        if document_date is not None and start <= document_date <= end:
            result.append(document)
    return result


@_predicate("all-page-tags")
def _match_all_page_tags(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    tags = set(index.all_tags)
    return [document for document in index if document.name_lower in tags]


@_predicate("page-ref")
def _match_page_ref(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    name = strip_root_prefix(args[0]).lower()
    reference = f"[[{name}]]"
    aliased_reference = f"[[{name}|"
    result = []
    for document in index:
        if document.name_lower == name:
            result.append(document)
            continue
        raw = document.raw.lower()
        if reference in raw or aliased_reference in raw:
            result.append(document)
    return result


@_predicate("full-text")
def _match_full_text(args: tuple[str, ...], index: PageIndex) -> list[Document]:
    search = args[0].lower()
    return [document for document in index if search in document.raw.lower()]
