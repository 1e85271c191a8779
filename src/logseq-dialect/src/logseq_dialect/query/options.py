"""Query display options read from ``query-*::`` property lines."""

import re
from dataclasses import dataclass, replace
from typing import Iterable, Optional

OPTION_KEYS = ("query-properties", "query-sort-by", "query-sort-desc", "query-table")

_PROPERTIES_RE = re.compile(r"query-properties::\s*\[?([^\]]*)\]?", re.IGNORECASE)
_SORT_BY_RE = re.compile(r"query-sort-by::\s*:?(\S+)", re.IGNORECASE)
_SORT_DESC_RE = re.compile(r"query-sort-desc::\s*(true|false)", re.IGNORECASE)
_TABLE_RE = re.compile(r"query-table::\s*(true|false)", re.IGNORECASE)


@dataclass(frozen=True)
class QueryOptions:
    """How a query's results are sorted and rendered.

    Attributes:
        sort_by: Sort key (property name or page/created/modified/tags/namespace)
        sort_desc: Sort descending when True
        table: Explicit table (True) or list (False) override; None = default
        properties: Explicit result columns
    """

    sort_by: Optional[str] = None
    sort_desc: bool = False
    table: Optional[bool] = None
    properties: tuple[str, ...] = ()

    def with_sort(self, key: str, descending: bool = False) -> "QueryOptions":
        return replace(self, sort_by=key, sort_desc=descending)


def parse_query_options(lines: Iterable[str]) -> QueryOptions:
    """Build QueryOptions from option property lines.

    Later lines override earlier ones.

    Examples:
        >>> parse_query_options(["query-properties:: [:page :status]"]).properties
        ('page', 'status')
    """
    sort_by = None
    sort_desc = False
    table = None
    properties: tuple[str, ...] = ()

    for line in lines:
        if match := _PROPERTIES_RE.search(line):
            properties = tuple(
                part.lstrip(":")
                for part in re.split(r"[,\s]+", match.group(1))
                if part.lstrip(":")
            )
        elif match := _SORT_BY_RE.search(line):
            sort_by = match.group(1)
        elif match := _SORT_DESC_RE.search(line):
            sort_desc = match.group(1).lower() == "true"
        elif match := _TABLE_RE.search(line):
            table = match.group(1).lower() == "true"

    return QueryOptions(sort_by=sort_by, sort_desc=sort_desc, table=table, properties=properties)
