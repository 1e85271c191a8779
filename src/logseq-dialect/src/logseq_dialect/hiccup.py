"""Conversion of Logseq hiccup literals (``[:tag {:attr "v"} children]``) to markdown.

Only headings and lists keep their structure. Any other markup degrades to
its string literals quoted in a callout, or to a placeholder callout when
the literal holds no text at all.
"""

from dataclasses import dataclass, field
from typing import Union

HEADING_TAGS = {f"h{level}": level for level in range(1, 7)}
LIST_TAGS = ("ul", "ol")

PLACEHOLDER_CALLOUT = [
    "> [!note] Custom HTML",
    "> This block uses Logseq hiccup markup and is not shown here.",
]


@dataclass
class HiccupNode:
    """One ``[:tag ...]`` element.

    Attributes:
        tag: Element name without the leading colon ("" for a bare vector)
        attrs: Attribute map from a ``{:key "value"}`` literal
        children: Nested elements and string literals, in source order
    """

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Union["HiccupNode", str]] = field(default_factory=list)

    def strings(self) -> list[str]:
        """All string literals below this node, left to right."""
        found = []
        for child in self.children:
            if isinstance(child, str):
                found.append(child)
            else:
                found.extend(child.strings())
        return found

    def text(self) -> str:
        return " ".join(part.strip() for part in self.strings() if part.strip())


def bracket_balance(text: str) -> int:
    """Count of ``[`` minus ``]`` outside string literals."""
    balance = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            balance += 1
        elif ch == "]":
            balance -= 1
    return balance


def parse_hiccup(text: str) -> list[Union[HiccupNode, str]]:
    """Parse one or more hiccup forms. Unbalanced input is closed implicitly."""
    reader = _Reader(text)
    forms: list[Union[HiccupNode, str]] = []
    while not reader.at_end():
        item = reader.read_form()
        if item is not None:
            forms.append(item)
    return forms


def hiccup_to_markdown(text: str) -> list[str]:
    """Convert a hiccup literal to markdown lines.

    Examples:
        >>> hiccup_to_markdown('[:div [:h2 "Links"] [:ul [:li "one"] [:li "two"]]]')
        ['## Links', '- one', '- two']
        >>> hiccup_to_markdown('[:div {:class "note"} "Remember this"]')
        ['> [!quote]', '> Remember this']
    """
    forms = parse_hiccup(text)

    structured: list[str] = []
    for form in forms:
        if isinstance(form, HiccupNode):
            _collect_structure(form, structured)
    if structured:
        return structured

    strings = []
    for form in forms:
        strings.extend([form] if isinstance(form, str) else form.strings())
    strings = [s.strip() for s in strings if s.strip()]
    if strings:
        return ["> [!quote]", *(f"> {s}" for s in strings)]

    return list(PLACEHOLDER_CALLOUT)


def _collect_structure(node: HiccupNode, lines: list[str]) -> None:
    tag = node.tag.lower()

    if tag in HEADING_TAGS:
        text = node.text()
        if text:
            lines.append(f"{'#' * HEADING_TAGS[tag]} {text}")
        return

    if tag in LIST_TAGS:
        number = 0
        for child in node.children:
            item = child.strip() if isinstance(child, str) else child.text()
            if not item:
                continue
            number += 1
            lines.append(f"{number}. {item}" if tag == "ol" else f"- {item}")
        return

    for child in node.children:
        if isinstance(child, HiccupNode):
            _collect_structure(child, lines)


class _Reader:
    """Character reader over EDN-ish hiccup text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        self.skip_space()
        return self.pos >= len(self.text)

    def skip_space(self) -> None:
        while self.pos < len(self.text) and (self.text[self.pos].isspace() or self.text[self.pos] == ","):
            self.pos += 1

    def read_form(self) -> Union[HiccupNode, str, None]:
        self.skip_space()
        if self.pos >= len(self.text):
            return None
        ch = self.text[self.pos]
        if ch == "[":
            return self.read_vector()
        if ch == '"':
            return self.read_string()
        if ch == "{":
            self.read_map()
            return None
        self.read_atom()
        return None

    def read_vector(self) -> HiccupNode:
        self.pos += 1  # "["
        self.skip_space()
        node = HiccupNode(tag="")
        if self.text.startswith(":", self.pos):
            node.tag = self.read_atom()[1:]
        self.skip_space()
        if self.text.startswith("{", self.pos):
            node.attrs = self.read_map()

        while True:
            self.skip_space()
            if self.pos >= len(self.text):
                break
            if self.text[self.pos] == "]":
                self.pos += 1
                break
            child = self.read_form()
            if child is not None:
                node.children.append(child)
        return node

    def read_map(self) -> dict[str, str]:
        self.pos += 1  # "{"
        values: list[str] = []
        while True:
            self.skip_space()
            if self.pos >= len(self.text):
                break
            ch = self.text[self.pos]
            if ch == "}":
                self.pos += 1
                break
            if ch == '"':
                values.append(self.read_string())
            elif ch == "[":
                self.read_vector()
                values.append("")
            elif ch == "{":
                self.read_map()
                values.append("")
            else:
                values.append(self.read_atom())
        attrs = {}
        for key, value in zip(values[0::2], values[1::2]):
            attrs[key.lstrip(":")] = value
        return attrs

    def read_string(self) -> str:
        self.pos += 1  # opening quote
        chars = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            self.pos += 1
            if ch == "\\" and self.pos < len(self.text):
                chars.append(self.text[self.pos])
                self.pos += 1
            elif ch == '"':
                break
            else:
                chars.append(ch)
        return "".join(chars)

    def read_atom(self) -> str:
        start = self.pos
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch.isspace() or ch in '[]{}",':
                break
            self.pos += 1
        if self.pos == start:
            # Lone closing delimiter outside its container
            self.pos += 1
        return self.text[start:self.pos]
