"""Repair of markdown tables written inside Logseq bullets.

Logseq tables usually look like::

    - | col1 | col2 |
      |------|------|
      | val1 | val2 |

Tables typed by hand often lack the separator row or carry one with the
wrong number of columns, which static renderers refuse to draw as a table.
"""

SEPARATOR_CHARS = frozenset("|-: ")


def is_separator_row(row: str) -> bool:
    """True for rows made only of pipes, dashes, colons and spaces."""
    row = row.strip()
    return (
        row.startswith("|")
        and row.endswith("|")
        and "-" in row
        and all(ch in SEPARATOR_CHARS for ch in row)
    )


def column_count(row: str) -> int:
    return max(row.strip().count("|") - 1, 0)


def repair_tables(text: str) -> str:
    """Ensure every bulleted table has one separator row with the header's width.

    A missing or mismatched separator is replaced by a synthetic one right
    after the header; separator-shaped rows of the wrong width are dropped.
    """
    lines = text.split("\n")
    result: list[str] = []
    i = 0

    while i < len(lines):
        line = lines[i]
        header = _table_content(line)
        if header is None:
            result.append(line)
            i += 1
            continue

        rows = [(line, header)]
        i += 1
        while i < len(lines) and lines[i].strip().startswith("|"):
            rows.append((lines[i], lines[i].strip()))
            i += 1

        result.extend(_repair_rows(rows))

    return "\n".join(result)


def _table_content(line: str):
    """Return the ``| ... |`` part of a table's first row, or None."""
    content = line.strip().lstrip("-").lstrip()
    if content.startswith("|") and content.count("|") >= 2:
        return content
    return None


def _repair_rows(rows: list[tuple[str, str]]) -> list[str]:
    header_line, header = rows[0]
    width = column_count(header)

    has_valid_separator = any(
        is_separator_row(content) and column_count(content) == width
        for _, content in rows
    )

    repaired = [header_line]
    if not has_valid_separator and len(rows) > 1 and width > 0:
        prefix = _continuation_prefix(header_line[: header_line.index("|")])
        repaired.append(f"{prefix}|{'|'.join(['---'] * width)}|")

    for line, content in rows[1:]:
        if is_separator_row(content) and column_count(content) != width:
            continue
        repaired.append(line)
    return repaired


def _continuation_prefix(prefix: str) -> str:
    """Turn a bullet prefix ("\\t- ") into its continuation indent ("\\t  ")."""
    position = prefix.rfind("- ")
    if position != -1:
        return prefix[:position] + "  " + prefix[position + 2:]
    if prefix.endswith("-"):
        return prefix[:-1] + " "
    return prefix
