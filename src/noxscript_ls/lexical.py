from __future__ import annotations

import re

IDENT_CHAR_RE = re.compile(r"[a-zA-Z0-9_]")


def is_ident_char(char: str) -> bool:
    return bool(IDENT_CHAR_RE.fullmatch(char))


def count_quotes(text: str, offset: int) -> int:
    """Count unescaped double quotes from ``offset`` back to the start of its line.

    An odd result means ``offset`` sits inside a string literal. String state
    does not carry across newlines.
    """
    if offset >= len(text):
        offset = len(text) - 1
    count = 0
    while offset >= 0 and text[offset] != "\n":
        if text[offset] == '"' and not _escaped(text, offset):
            count += 1
        offset -= 1
    return count


def in_string(text: str, offset: int) -> bool:
    return count_quotes(text, offset) % 2 == 1


def word_at(text: str, offset: int) -> str:
    """Return the identifier touching ``offset``, or an empty string."""
    if offset >= len(text):
        offset = len(text) - 1
    start = offset
    end = offset + 1
    while start >= 0 and is_ident_char(text[start]):
        start -= 1
    while 0 <= end < len(text) and is_ident_char(text[end]):
        end += 1
    return text[max(start + 1, 0):max(end, 0)]


def identifier_before(text: str, offset: int) -> str | None:
    """Read the identifier ending at ``offset``, skipping one run of whitespace first."""
    start: int | None = None
    end = offset + 1
    while offset >= 0:
        char = text[offset]
        if char.isspace():
            if start is not None:
                break
            end = offset
        elif is_ident_char(char):
            start = offset
        else:
            break
        offset -= 1
    if start is None:
        return None
    return text[start:end]


def _escaped(text: str, index: int) -> bool:
    return index > 0 and text[index - 1] == "\\"
