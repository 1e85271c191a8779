"""Recursive-descent parser producing a boolean expression tree.

Grammar (keywords are case-insensitive)::

    query      := form | link | string | bare-text
    form       := "(" ("and" | "or") expr* ")"
                | "(" "not" expr ")"
                | "(" predicate atom* ")"
    atom       := link | string | keyword | word

Parsing is best-effort: a missing closing paren is implied at end of
input, stray tokens are ignored and unknown operators become an
``unknown`` predicate that matches nothing.
"""

from dataclasses import dataclass
from typing import Optional, Union

import structlog

from logseq_dialect.query.tokenizer import Token, TokenKind, tokenize

logger = structlog.get_logger()

TASK_STATES = ("TODO", "DONE", "NOW", "DOING", "LATER", "WAITING", "CANCELLED")
PRIORITIES = ("A", "B", "C")
MIN_BARE_TEXT_LENGTH = 3


@dataclass(frozen=True)
class And:
    operands: tuple["Expr", ...]


@dataclass(frozen=True)
class Or:
    operands: tuple["Expr", ...]


@dataclass(frozen=True)
class Not:
    operand: "Expr"


@dataclass(frozen=True)
class Predicate:
    """Primitive test against a single document.

    Attributes:
        kind: Predicate name ("page", "page-tags", "property", ...)
        args: Normalized arguments
    """

    kind: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class SortBy:
    """A ``(sort-by key [asc|desc])`` clause; not part of the boolean tree."""

    key: str
    descending: bool = False


Expr = Union[And, Or, Not, Predicate]

UNKNOWN = Predicate("unknown")


@dataclass(frozen=True)
class Query:
    """A parsed query occurrence.

    Attributes:
        text: Query text as written (``{{query ...}}`` wrapper included)
        expression: Root of the boolean expression tree
        sort: Sort clause found inside the query, if any
    """

    text: str
    expression: Expr
    sort: Optional[SortBy] = None


def strip_query_wrapper(text: str) -> str:
    """Remove the ``{{query`` ... ``}}`` wrapper around a query expression."""
    expr = text.strip()
    if expr.lower().startswith("{{query"):
        expr = expr[len("{{query"):]
    if expr.endswith("}}"):
        expr = expr[:-2]
    return expr.strip()


def parse_query(text: str) -> Query:
    """Parse query text (with or without the ``{{query}}`` wrapper).

    Args:
        text: Query text

    Returns:
        Parsed Query; malformed input yields a tree that matches nothing
    """
    expr_text = strip_query_wrapper(text)

    if not expr_text:
        return Query(text=text, expression=UNKNOWN)

    if expr_text[0] not in '(["':
        search = expr_text.replace('"', "").replace("'", "").strip()
        if len(search) >= MIN_BARE_TEXT_LENGTH:
            return Query(text=text, expression=Predicate("full-text", (search,)))
        return Query(text=text, expression=UNKNOWN)

    parser = _Parser(tokenize(expr_text))
    expression = parser.parse_top()
    if expression is None:
        logger.debug("query_unparsed", query=expr_text)
        expression = UNKNOWN
    return Query(text=text, expression=expression, sort=parser.sort)


class _Parser:
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self.sort: Optional[SortBy] = None

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def parse_top(self) -> Optional[Expr]:
        # The first complete expression wins; trailing input is ignored.
        while self.peek() is not None:
            node = self.parse_expression()
            if isinstance(node, SortBy):
                self.sort = node
                continue
            if node is not None:
                return node
        return None

    def parse_expression(self) -> Union[Expr, SortBy, None]:
        token = self.peek()
        if token is None:
            return None
        if token.kind is TokenKind.LPAREN:
            return self.parse_form()
        self.advance()
        if token.kind is TokenKind.LINK:
            return Predicate("page-ref", (token.value,)) if token.value else None
        if token.kind is TokenKind.STRING:
            return Predicate("full-text", (token.value,)) if token.value else None
        # Stray words, keywords and unmatched ")" carry no meaning here.
        return None

    def parse_form(self) -> Union[Expr, SortBy]:
        self.advance()  # "("
        head = self.peek()
        operator = ""
        if head is not None and head.kind is TokenKind.WORD:
            operator = self.advance().value.lower()

        if operator in ("and", "or"):
            operands = self.parse_operands()
            self.expect_close()
            return And(operands) if operator == "and" else Or(operands)

        if operator == "not":
            operands = self.parse_operands()
            self.expect_close()
            if not operands:
                return UNKNOWN
            if len(operands) == 1:
                return Not(operands[0])
            return Not(Or(operands))

        atoms = self.parse_atoms()
        self.expect_close()
        return _build_predicate(operator, atoms)

    def parse_operands(self) -> tuple[Expr, ...]:
        operands = []
        while True:
            token = self.peek()
            if token is None or token.kind is TokenKind.RPAREN:
                break
            node = self.parse_expression()
            if isinstance(node, SortBy):
                self.sort = node
            elif node is not None:
                operands.append(node)
        return tuple(operands)

    def parse_atoms(self) -> list[Token]:
        atoms = []
        while True:
            token = self.peek()
            if token is None or token.kind is TokenKind.RPAREN:
                break
            if token.kind is TokenKind.LPAREN:
                self.skip_form()
                continue
            atoms.append(self.advance())
        return atoms

    def skip_form(self) -> None:
        depth = 0
        while (token := self.peek()) is not None:
            self.advance()
            if token.kind is TokenKind.LPAREN:
                depth += 1
            elif token.kind is TokenKind.RPAREN:
                depth -= 1
                if depth == 0:
                    return

    def expect_close(self) -> None:
        token = self.peek()
        if token is not None and token.kind is TokenKind.RPAREN:
            self.advance()


def _build_predicate(operator: str, atoms: list[Token]) -> Union[Predicate, SortBy]:
    values = [atom.value.strip() for atom in atoms if atom.value.strip()]

    if operator == "page" and values:
        return Predicate("page", (values[0],))

    if operator in ("page-tags", "tags") and values:
        return Predicate("page-tags", tuple(value.lstrip("#") for value in values))

    if operator == "namespace" and values:
        return Predicate("namespace", (values[0],))

    if operator in ("property", "page-property") and values:
        key = values[0].lstrip(":")
        value = " ".join(values[1:]).strip('"')
        return Predicate("property", (key, value) if value else (key,))

    if operator == "task":
        states = tuple(value.upper() for value in values if value.upper() in TASK_STATES)
        if states:
            return Predicate("task", states)

    if operator == "priority":
        priorities = tuple(value.upper() for value in values if value.upper() in PRIORITIES)
        if priorities:
            return Predicate("priority", priorities)

    if operator == "between" and len(values) >= 2:
        return Predicate("between", (values[0], values[1]))

    if operator == "all-page-tags":
        return Predicate("all-page-tags")

    if operator == "sort-by" and values:
        descending = len(values) > 1 and values[1].lower() == "desc"
        return SortBy(values[0].lstrip(":"), descending)

    return Predicate("unknown", (operator,) if operator else ())
