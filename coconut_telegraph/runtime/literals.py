"""Numeric literal reading and bracket extraction for dense code."""

from __future__ import annotations

from ..constants import INT32_MAX, INT32_MIN

_DIGITS = frozenset("0123456789")
_LITERAL_CHARS = _DIGITS | frozenset("abcdefABCDEFx")


def _to_int32(text: str, base: int) -> int | None:
    try:
        value = int(text, base)
    except ValueError:
        return None
    if value < INT32_MIN or value > INT32_MAX:
        return None
    return value


def scan_number(code: str, start: int) -> tuple[int, int, bool]:
    """Scan a numeric literal and report whether its text converted cleanly.

    Returns ``(value, next_index, ok)``. A literal is an optional ``-``
    followed by a decimal digit and then the longest run of characters from
    ``0-9 a-f A-F x``. Text starting with ``0x`` (or ``-0x``) is read as
    hexadecimal once every ``0x`` has been stripped; anything else is read as
    decimal. Text that fails to convert yields ``0`` with ``ok`` set to
    ``False``. When no literal starts at ``start`` nothing is consumed.
    """

    if start >= len(code):
        return 0, start, True

    i = start
    if code[i] == "-":
        i += 1
    if i >= len(code) or code[i] not in _DIGITS:
        return 0, start, True

    while i < len(code) and code[i] in _LITERAL_CHARS:
        i += 1

    text = code[start:i]
    if text.startswith("0x") or text.startswith("-0x"):
        value = _to_int32(text.replace("0x", ""), 16)
    else:
        value = _to_int32(text, 10)

    if value is None:
        return 0, i, False
    return value, i, True


def read_number(code: str, start: int) -> tuple[int, int]:
    """Read an integer literal at ``start``; malformed text resolves to 0."""

    value, end, _ = scan_number(code, start)
    return value, end


def extract_bracketed(code: str, start: int, open_ch: str, close_ch: str) -> tuple[str, int]:
    """Return the text between ``code[start]`` and its matching closer.

    Nested pairs of the same delimiters are kept literally in the result.
    The second element is the index of the matching closer, or
    ``len(code)`` when the bracket is never closed; in that case the text
    captured so far is returned.
    """

    depth = 0
    chars: list[str] = []
    i = start
    while i < len(code):
        ch = code[i]
        if ch == open_ch:
            if depth > 0:
                chars.append(ch)
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return "".join(chars), i
            chars.append(ch)
        elif depth > 0:
            chars.append(ch)
        i += 1

    return "".join(chars), i


__all__ = [
    "extract_bracketed",
    "read_number",
    "scan_number",
]
