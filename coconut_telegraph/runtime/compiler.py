"""Dense code compiler: text in, instruction tree out.

Dense symbols (first character selects the instruction, arguments follow):

``> < ^ v``   move forward/backward (``^``/``v`` alias ``>``/``<``) by N
``/ \\``       strafe left/right by N
``@N``        turn N degrees (signed)
``?N``        read proximity sensor N into memory key ``sN``
``!AV``       set motor A (one digit) to value V
``[N ...]``   repeat the body N times
``{T:a:b}``   run ``a`` if memory ``s0`` > T, otherwise ``b``
``"text"``    log message
``.`` ``,``   long/short wait
``;`` ``|``   separators without effect
``#``         halt

The permissive compiler never raises; the strict one reports everything the
permissive compiler had to tolerate.
"""

from __future__ import annotations

import re

from ..constants import (
    ACTUATE_SYMBOL,
    COND_BRACKETS,
    COND_SEPARATOR,
    CONDITION_KEY,
    DEFAULT_THRESHOLD,
    HALT_SYMBOL,
    INT32_MAX,
    INT32_MIN,
    LONG_WAIT_MS,
    LONG_WAIT_SYMBOL,
    LOOP_BRACKETS,
    MAX_NESTING_DEPTH,
    MOVE_SYMBOLS,
    PARALLEL_SYMBOL,
    QUOTE,
    SENSE_SYMBOL,
    SEQUENCE_SYMBOL,
    SHORT_WAIT_MS,
    SHORT_WAIT_SYMBOL,
    TURN_SYMBOL,
)
from .core import (
    Actuate,
    Cond,
    Direction,
    Halt,
    Log,
    Loop,
    MemoryThreshold,
    Move,
    Program,
    Sense,
    Turn,
    Wait,
)
from .diagnostics import CompileError, Diagnostic, ValidationReport
from .literals import extract_bracketed, scan_number
from .macros import expand_ultra

_THRESHOLD_PATTERN = re.compile(r"[+-]?[0-9]+")
_CLOSERS = {LOOP_BRACKETS[1], COND_BRACKETS[1]}


def _report(errors, kind, pos, message, severity="error"):
    if errors is not None:
        errors.append(Diagnostic(kind, pos, message, severity))


def _number(code, start, errors, offset):
    value, end, ok = scan_number(code, start)
    if not ok:
        _report(
            errors,
            "MalformedLiteral",
            offset + start,
            f"cannot read number {code[start:end]!r}, using 0",
        )
    return value, end


def _actuator_digit(code, start):
    if start < len(code) and code[start] in "0123456789":
        return int(code[start]), start + 1
    return 0, start


def _too_deep(errors, pos, depth):
    if depth < MAX_NESTING_DEPTH:
        return False
    _report(
        errors,
        "NestingTooDeep",
        pos,
        f"brackets nest deeper than {MAX_NESTING_DEPTH} levels, skipping",
    )
    return True


def _threshold(text, errors, offset):
    if _THRESHOLD_PATTERN.fullmatch(text):
        try:
            value = int(text)
        except ValueError:
            # digit strings past the interpreter's conversion limit
            value = None
        if value is not None and INT32_MIN <= value <= INT32_MAX:
            return value
    _report(
        errors,
        "MalformedLiteral",
        offset,
        f"conditional threshold {text!r} is not a 32-bit integer, using {DEFAULT_THRESHOLD}",
    )
    return DEFAULT_THRESHOLD


def _parse_conditional(inner, errors, offset, depth):
    segments = inner.split(COND_SEPARATOR)
    while segments and segments[-1] == "":
        segments.pop()
    if len(segments) < 2:
        _report(
            errors,
            "MalformedConditional",
            offset,
            f"conditional {inner!r} needs at least a threshold and a branch",
        )
        return None

    starts = []
    pos = offset
    for segment in segments:
        starts.append(pos)
        pos += len(segment) + 1

    threshold = _threshold(segments[0], errors, starts[0])
    then_code = segments[1]
    else_code = segments[2] if len(segments) > 2 else ""
    else_start = starts[2] if len(segments) > 2 else pos
    return Cond(
        MemoryThreshold(CONDITION_KEY, threshold),
        parse_dense(then_code, errors, starts[1], depth + 1),
        parse_dense(else_code, errors, else_start, depth + 1),
    )


def parse_dense(code, errors=None, offset=0, depth=0):
    """Scan dense code into a list of instructions.

    ``errors`` collects :class:`Diagnostic` records when given a list and
    ``offset`` is the absolute position of ``code`` within the whole source.
    Brackets opened at ``depth`` ``MAX_NESTING_DEPTH`` or deeper are skipped
    whole.
    """

    result = []
    i = 0
    while i < len(code):
        c = code[i]

        if c in MOVE_SYMBOLS:
            distance, i = _number(code, i + 1, errors, offset)
            result.append(Move(Direction(MOVE_SYMBOLS[c]), max(distance, 1)))

        elif c == TURN_SYMBOL:
            degrees, i = _number(code, i + 1, errors, offset)
            result.append(Turn(degrees))

        elif c == SENSE_SYMBOL:
            sensor_id, i = _number(code, i + 1, errors, offset)
            result.append(Sense(sensor_id, f"s{sensor_id}"))

        elif c == ACTUATE_SYMBOL:
            actuator_id, pos = _actuator_digit(code, i + 1)
            value, i = _number(code, pos, errors, offset)
            result.append(Actuate(actuator_id, value))

        elif c == LOOP_BRACKETS[0]:
            inner, end = extract_bracketed(code, i, *LOOP_BRACKETS)
            if end >= len(code):
                _report(errors, "UnterminatedBracket", offset + i, "loop '[' is never closed")
            if _too_deep(errors, offset + i, depth):
                i = end + 1
                continue
            times, body_start = _number(inner, 0, errors, offset + i + 1)
            body = parse_dense(
                inner[body_start:], errors, offset + i + 1 + body_start, depth + 1
            )
            result.append(Loop(max(times, 1), body))
            i = end + 1

        elif c == COND_BRACKETS[0]:
            inner, end = extract_bracketed(code, i, *COND_BRACKETS)
            if end >= len(code):
                _report(
                    errors, "UnterminatedBracket", offset + i, "conditional '{' is never closed"
                )
            if _too_deep(errors, offset + i, depth):
                i = end + 1
                continue
            cond = _parse_conditional(inner, errors, offset + i + 1, depth)
            if cond is not None:
                result.append(cond)
            i = end + 1

        elif c == QUOTE:
            end_quote = code.find(QUOTE, i + 1)
            if end_quote > i:
                result.append(Log(code[i + 1 : end_quote]))
                i = end_quote + 1
            else:
                _report(errors, "UnterminatedString", offset + i, "log message is never closed")
                i += 1

        elif c == LONG_WAIT_SYMBOL:
            result.append(Wait(LONG_WAIT_MS))
            i += 1

        elif c == SHORT_WAIT_SYMBOL:
            result.append(Wait(SHORT_WAIT_MS))
            i += 1

        elif c == HALT_SYMBOL:
            result.append(Halt())
            i += 1

        elif c in (SEQUENCE_SYMBOL, PARALLEL_SYMBOL) or c.isspace():
            i += 1

        else:
            if c in _CLOSERS:
                message = f"unmatched closing {c!r}"
            else:
                message = f"unknown symbol {c!r}"
            _report(errors, "UnknownSymbol", offset + i, message, "warning")
            i += 1

    return result


def compile_dense(code, name="dense"):
    """Compile dense code into a Program. Never raises for malformed input."""

    stripped = code.strip()
    return Program(name, parse_dense(stripped))


def compile_ultra(code, name="ultra"):
    """Expand ultra-dense code and compile the resulting dense code."""

    return compile_dense(expand_ultra(code), name)


def validate_dense(code):
    """Compile ``code`` and report every tolerated problem."""

    stripped = code.strip()
    leading = len(code) - len(code.lstrip())
    errors = []
    parse_dense(stripped, errors, leading)
    return ValidationReport(code, tuple(errors))


def validate_ultra(code):
    """Validate ultra-dense code and the dense code it expands to.

    Positions of the dense-level diagnostics refer to the expanded text.
    """

    errors = []
    expanded = expand_ultra(code, errors)
    errors.extend(validate_dense(expanded).diagnostics)
    return ValidationReport(code, tuple(errors))


def compile_strict(code, name=None, *, ultra=False):
    """Compile dense (or ultra-dense) code, raising :class:`CompileError`.

    Intended for build or startup steps where a malformed program should
    fail fast instead of being interpreted on a best-effort basis.
    """

    report = validate_ultra(code) if ultra else validate_dense(code)
    if not report.ok:
        raise CompileError(report)
    if ultra:
        return compile_ultra(code, name or "ultra")
    return compile_dense(code, name or "dense")


__all__ = [
    "compile_dense",
    "compile_strict",
    "compile_ultra",
    "parse_dense",
    "validate_dense",
    "validate_ultra",
]
