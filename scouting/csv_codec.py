"""Single-row CSV dialect used for match records.

A record is one line of comma-separated fields. Fields are either unquoted
(no quotes, no backslashes, no line breaks) or wrapped in single or double
quotes. Quoted fields may hold commas, the other quote character, line breaks
and backslash escapes; ``\\'`` inside single quotes and ``\\"`` inside double
quotes stand for the quote itself, and ``\\\\`` for one backslash. Inside
double quotes a doubled ``""`` is also read as one quote, which is what
:func:`escape_field` writes.

Whitespace around a field (outside quotes) is not significant.
"""

from __future__ import annotations

import logging

from .errors import CsvParseError

logger = logging.getLogger(__name__)

QUOTE_CHARS = ("'", '"')
FORBIDDEN_UNQUOTED = {"'", '"', "\\"}
LINE_BREAKS = {"\n", "\r"}
NEEDS_QUOTING = (",", '"', "'", "\n", "\r", "\\")


def _read_quoted(text: str, pos: int) -> tuple[str, int]:
    """Read a quoted field starting at ``pos``; return (value, index after it)."""
    quote = text[pos]
    pos += 1
    chunks: list[str] = []
    length = len(text)

    while pos < length:
        char = text[pos]
        if char == "\\":
            if pos + 1 >= length:
                raise CsvParseError("Dangling escape at end of input", pos)
            nxt = text[pos + 1]
            # Only the field's own quote and the backslash are unescaped;
            # other pairs stay literal.
            chunks.append(nxt if nxt in (quote, "\\") else char + nxt)
            pos += 2
            continue
        if char == quote:
            if quote == '"' and pos + 1 < length and text[pos + 1] == '"':
                chunks.append('"')
                pos += 2
                continue
            return "".join(chunks), pos + 1
        chunks.append(char)
        pos += 1

    raise CsvParseError(f"Unterminated {quote} quoted field", pos)


def _read_unquoted(text: str, pos: int) -> tuple[str, int]:
    """Read an unquoted field up to the next comma or end of input."""
    end = text.find(",", pos)
    if end == -1:
        end = len(text)
    raw = text[pos:end]

    for offset, char in enumerate(raw):
        if char in FORBIDDEN_UNQUOTED:
            raise CsvParseError(f"Unexpected {char!r} in unquoted field", pos + offset)

    value = raw.strip()
    if any(char in LINE_BREAKS for char in value):
        raise CsvParseError("Line break inside unquoted field", pos)
    return value, end


def _skip_whitespace(text: str, pos: int) -> int:
    length = len(text)
    while pos < length and text[pos].isspace():
        pos += 1
    return pos


def tokenize(text: str) -> list[str]:
    """Split one CSV record into field values.

    Raises:
        CsvParseError: If the text does not match the record grammar.
    """
    if text.strip() == "":
        return []

    fields: list[str] = []
    pos = 0
    length = len(text)

    while True:
        pos = _skip_whitespace(text, pos)
        if pos < length and text[pos] in QUOTE_CHARS:
            value, pos = _read_quoted(text, pos)
            pos = _skip_whitespace(text, pos)
        else:
            value, pos = _read_unquoted(text, pos)
        fields.append(value)

        if pos >= length:
            return fields
        if text[pos] != ",":
            raise CsvParseError(f"Expected ',' but found {text[pos]!r}", pos)
        pos += 1
        if pos >= length:
            # Trailing comma contributes one empty field.
            fields.append("")
            return fields


def parse_row(text: str | None) -> list[str] | None:
    """Parse a CSV record into its field values.

    Returns:
        List of field strings, or None when the text is empty or malformed.
    """
    if not text:
        return None
    try:
        return tokenize(text)
    except CsvParseError as exc:
        logger.debug("[CSV] Rejected record at position %s: %s", exc.position, exc)
        return None


def escape_field(value) -> str:
    """Escape a value for safe inclusion in a record.

    None and empty strings become an empty quoted field. Values holding a
    comma, double quote or line break are double-quoted with inner quotes
    doubled and backslashes escaped. Everything else is returned unchanged.

    Apostrophes, backslashes and edge whitespace would not survive an
    unquoted field, so they force quoting too.
    """
    if value is None:
        return '""'

    text = str(value)
    if any(char in text for char in NEEDS_QUOTING) or text != text.strip():
        return '"' + text.replace("\\", "\\\\").replace('"', '""') + '"'
    if text == "":
        return '""'
    return text


def encode_value(value) -> str:
    """Encode one field: integers as decimal text, everything else escaped."""
    if isinstance(value, bool):
        return escape_field(str(value).lower())
    if isinstance(value, int):
        return str(value)
    return escape_field(value)


def join_row(tokens) -> str:
    """Join already-encoded field tokens into a record."""
    return ",".join(tokens)


def encode_row(values) -> str:
    """Encode and join a list of field values into a record."""
    return join_row(encode_value(value) for value in values)
