"""Tokenizer for the Logseq simple-query mini-language."""

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """Lexical categories of query tokens."""

    LPAREN = "("
    RPAREN = ")"
    LINK = "link"  # [[Page Name]]
    STRING = "string"  # "quoted text"
    KEYWORD = "keyword"  # :property-name
    WORD = "word"  # anything else (operators, bare values)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str


_WORD_STOP = set('()"')


def tokenize(text: str) -> list[Token]:
    """Split query text into tokens.

    Never raises: an unterminated ``[[`` or ``"`` swallows the rest of the
    input as its value.

    Examples:
        >>> [t.kind.name for t in tokenize('(page-tags [[a]])')]
        ['LPAREN', 'WORD', 'LINK', 'RPAREN']
    """
    tokens: list[Token] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
        elif ch == "(":
            tokens.append(Token(TokenKind.LPAREN, ch))
            i += 1
        elif ch == ")":
            tokens.append(Token(TokenKind.RPAREN, ch))
            i += 1
        elif text.startswith("[[", i):
            end = text.find("]]", i + 2)
            if end == -1:
                tokens.append(Token(TokenKind.LINK, text[i + 2:].strip()))
                i = n
            else:
                tokens.append(Token(TokenKind.LINK, text[i + 2:end].strip()))
                i = end + 2
        elif ch == '"':
            end = text.find('"', i + 1)
            if end == -1:
                tokens.append(Token(TokenKind.STRING, text[i + 1:]))
                i = n
            else:
                tokens.append(Token(TokenKind.STRING, text[i + 1:end]))
                i = end + 1
        else:
            j = i
            while j < n and not text[j].isspace() and text[j] not in _WORD_STOP:
                if j > i and text.startswith("[[", j):
                    break
                j += 1
            word = text[i:j]
            if word.startswith(":") and len(word) > 1:
                tokens.append(Token(TokenKind.KEYWORD, word[1:]))
            else:
                tokens.append(Token(TokenKind.WORD, word))
            i = j

    return tokens
