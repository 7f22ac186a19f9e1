"""Ultra-dense macro expansion into dense code.

Ultra-dense symbols:

``&AP``   set actuator ``A`` to power ``P * 10``      → ``!A<P*10>``
``$HH``   turn by two hex digits of degrees          → ``@<deg>``
``~S``    read sensor ``S``                          → ``?S``
``:``     sequence separator                         → ``;``
``;``     halt                                       → ``#``
``.`` ``,``  long/short wait, copied through
``*Nbody*``  loop ``N`` times over the expanded body  → ``[N<body>]``
``D``     a bare digit moves forward ``D * 10``      → ``><D*10>``

``;`` therefore means halt here but only a separator in dense code. The loop
body ends at the first following ``*``, so loop macros do not nest.
"""

from __future__ import annotations

from ..constants import (
    LONG_WAIT_SYMBOL,
    SHORT_WAIT_SYMBOL,
    ULTRA_ACTUATE,
    ULTRA_HALT,
    ULTRA_LOOP,
    ULTRA_SENSE,
    ULTRA_SEQUENCE,
    ULTRA_TURN,
    HALT_SYMBOL,
    SEQUENCE_SYMBOL,
)
from .diagnostics import Diagnostic

_DIGITS = "0123456789"


def macro_digit(ch: str) -> int:
    """Read one macro digit in base 36; non-alphanumerics read as -1."""

    if ch.isascii() and ch.isalnum():
        return int(ch, 36)
    return -1


def _hex_degrees(text: str) -> int | None:
    if text != text.strip():
        return None
    try:
        return int(text, 16)
    except ValueError:
        return None


def expand_ultra(code: str, errors: list | None = None, offset: int = 0) -> str:
    """Expand ultra-dense text into dense code in a single left-to-right pass.

    Expansion never fails. When ``errors`` is a list, problems that the
    expansion silently tolerated are appended to it as diagnostics.
    """

    def report(kind, pos, message, severity="error"):
        if errors is not None:
            errors.append(Diagnostic(kind, offset + pos, message, severity))

    out: list[str] = []
    i = 0
    while i < len(code):
        ch = code[i]
        if ch == ULTRA_ACTUATE:
            if i + 2 < len(code):
                actuator = macro_digit(code[i + 1])
                power = macro_digit(code[i + 2]) * 10
                out.append(f"!{actuator}{power}")
                i += 3
            else:
                report("MalformedMacro", i, "actuator macro needs two digits and a successor")
                i += 1
        elif ch == ULTRA_TURN:
            if i + 2 < len(code):
                degrees = _hex_degrees(code[i + 1 : i + 3])
                if degrees is None:
                    report("MalformedLiteral", i + 1, f"invalid hex degrees {code[i + 1 : i + 3]!r}")
                    degrees = 0
                out.append(f"@{degrees}")
                i += 3
            else:
                report("MalformedMacro", i, "turn macro needs two hex digits and a successor")
                i += 1
        elif ch == ULTRA_SENSE:
            if i + 1 < len(code):
                out.append(f"?{macro_digit(code[i + 1])}")
                i += 2
            else:
                report("MalformedMacro", i, "sensor macro needs a digit")
                i += 1
        elif ch == ULTRA_SEQUENCE:
            out.append(SEQUENCE_SYMBOL)
            i += 1
        elif ch in (LONG_WAIT_SYMBOL, SHORT_WAIT_SYMBOL):
            out.append(ch)
            i += 1
        elif ch == ULTRA_HALT:
            out.append(HALT_SYMBOL)
            i += 1
        elif ch == ULTRA_LOOP:
            end = code.find(ULTRA_LOOP, i + 2) if i + 1 < len(code) else -1
            if end > i:
                times = max(macro_digit(code[i + 1]), 1)
                body = expand_ultra(code[i + 2 : end], errors, offset + i + 2)
                out.append(f"[{times}{body}]")
                i = end + 1
            else:
                report("UnterminatedBracket", i, "loop macro has no closing '*'")
                i += 1
        elif ch in _DIGITS:
            out.append(f">{int(ch) * 10}")
            i += 1
        else:
            report("UnknownSymbol", i, f"unknown ultra-dense symbol {ch!r}", "warning")
            i += 1

    return "".join(out)


__all__ = [
    "expand_ultra",
    "macro_digit",
]
