"""Tests for the query tokenizer and parser."""

from logseq_dialect.query.parser import (
    UNKNOWN,
    And,
    Not,
    Or,
    Predicate,
    SortBy,
    parse_query,
    strip_query_wrapper,
)
from logseq_dialect.query.tokenizer import Token, TokenKind, tokenize


class TestTokenize:
    """Tests for tokenize."""

    def test_basic_form(self):
        assert tokenize('(property :type "book")') == [
            Token(TokenKind.LPAREN, "("),
            Token(TokenKind.WORD, "property"),
            Token(TokenKind.KEYWORD, "type"),
            Token(TokenKind.STRING, "book"),
            Token(TokenKind.RPAREN, ")"),
        ]

    def test_links_keep_spaces(self):
        assert tokenize("[[Reading List]]") == [Token(TokenKind.LINK, "Reading List")]

    def test_unterminated_link_takes_rest(self):
        assert tokenize("(page [[oops") == [
            Token(TokenKind.LPAREN, "("),
            Token(TokenKind.WORD, "page"),
            Token(TokenKind.LINK, "oops"),
        ]

    def test_unterminated_string_takes_rest(self):
        assert tokenize('"half open')[-1] == Token(TokenKind.STRING, "half open")


class TestParseQuery:
    """Tests for parse_query."""

    def test_wrapper_is_optional(self):
        wrapped = parse_query("{{query (page-tags [[book]])}}")
        bare = parse_query("(page-tags [[book]])")
        assert wrapped.expression == bare.expression == Predicate("page-tags", ("book",))

    def test_strip_wrapper(self):
        assert strip_query_wrapper("{{query (task TODO) }}") == "(task TODO)"

    def test_nested_boolean_tree(self):
        query = parse_query("(and (page-tags [[a]]) (not (page-tags [[b]])))")
        assert query.expression == And((
            Predicate("page-tags", ("a",)),
            Not(Predicate("page-tags", ("b",))),
        ))

    def test_or_of_ands(self):
        query = parse_query("(or (and (task TODO) (priority A)) (and (task NOW) (priority B)))")
        assert query.expression == Or((
            And((Predicate("task", ("TODO",)), Predicate("priority", ("A",)))),
            And((Predicate("task", ("NOW",)), Predicate("priority", ("B",)))),
        ))

    def test_not_with_several_operands(self):
        query = parse_query("(not [[a]] [[b]])")
        assert query.expression == Not(Or((
            Predicate("page-ref", ("a",)),
            Predicate("page-ref", ("b",)),
        )))

    def test_operators_are_case_insensitive(self):
        assert parse_query("(AND (Task todo))").expression == And((Predicate("task", ("TODO",)),))

    def test_property_forms(self):
        assert parse_query('(property :type "book")').expression == Predicate("property", ("type", "book"))
        assert parse_query("(page-property status)").expression == Predicate("property", ("status",))

    def test_tags_synonym_and_hash(self):
        assert parse_query("(tags #book film)").expression == Predicate("page-tags", ("book", "film"))

    def test_between(self):
        query = parse_query("(between [[Jan 1st, 2024]] [[Jan 31st, 2024]])")
        assert query.expression == Predicate("between", ("Jan 1st, 2024", "Jan 31st, 2024"))

    def test_bare_link_is_page_reference(self):
        assert parse_query("[[Project X]]").expression == Predicate("page-ref", ("Project X",))

    def test_quoted_string_is_full_text(self):
        assert parse_query('"needle"').expression == Predicate("full-text", ("needle",))

    def test_bare_text_is_full_text(self):
        assert parse_query("{{query machine learning}}").expression == Predicate(
            "full-text", ("machine learning",)
        )

    def test_short_bare_text_matches_nothing(self):
        assert parse_query("ab").expression == UNKNOWN

    def test_empty_query(self):
        assert parse_query("{{query }}").expression == UNKNOWN

    def test_unknown_operator(self):
        assert parse_query("(frobnicate x)").expression == Predicate("unknown", ("frobnicate",))

    def test_invalid_task_state(self):
        assert parse_query("(task SOMEDAY)").expression == Predicate("unknown", ("task",))

    def test_missing_close_paren_is_implied(self):
        assert parse_query("(and (page [[x]]").expression == And((Predicate("page", ("x",)),))

    def test_sort_by_clause_is_extracted(self):
        query = parse_query("(and (page-tags [[book]]) (sort-by rating desc))")
        assert query.expression == And((Predicate("page-tags", ("book",)),))
        assert query.sort == SortBy("rating", True)

    def test_first_expression_wins(self):
        query = parse_query("(page [[a]]) (page [[b]])")
        assert query.expression == Predicate("page", ("a",))
