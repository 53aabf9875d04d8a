"""
Minimal RFC4180-style CSV parser.

The parser is a single left-to-right scan with one character of lookahead,
which is enough to recognise ``\\r\\n`` line breaks and doubled quotes.
Quoted fields may contain commas and line breaks, so splitting on a regular
expression is not an option.
"""

from __future__ import annotations


def parse_csv(text: str) -> list[list[str]]:
    """Parse CSV text into rows of field strings.

    Rules:
    - Commas outside quotes separate fields.
    - A double quote toggles quoted mode; ``""`` inside quotes is one quote.
    - Inside quotes, commas and line breaks are literal content.
    - ``\\n``, ``\\r`` or ``\\r\\n`` outside quotes ends the current row.
    - Rows whose fields are all empty (e.g. blank lines) are dropped.
    - The final row is kept even without a trailing line break.

    Args:
        text: Raw file content

    Returns:
        Ordered list of rows, each an ordered list of fields

    Examples:
        >>> parse_csv('a,"b,c"\\n\\nx\\n')
        [['a', 'b,c'], ['x']]
    """
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if char == '"':
            if in_quotes and nxt == '"':
                field.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        if char == "," and not in_quotes:
            row.append("".join(field))
            field = []
            i += 1
            continue

        if char in ("\n", "\r") and not in_quotes:
            if char == "\r" and nxt == "\n":
                i += 1
            row.append("".join(field))
            field = []
            _flush_row(rows, row)
            row = []
            i += 1
            continue

        field.append(char)
        i += 1

    row.append("".join(field))
    _flush_row(rows, row)
    return rows


def _flush_row(rows: list[list[str]], row: list[str]) -> None:
    if any(cell for cell in row):
        rows.append(row)
