"""Structured compile diagnostics for dense and ultra-dense code."""

from __future__ import annotations

from dataclasses import dataclass

ERROR_KINDS = (
    "MalformedLiteral",
    "UnterminatedBracket",
    "UnterminatedString",
    "MalformedConditional",
    "MalformedMacro",
    "NestingTooDeep",
)
WARNING_KINDS = ("UnknownSymbol",)


@dataclass(frozen=True)
class Diagnostic:
    """A problem the permissive compiler tolerated at ``position``."""

    kind: str
    position: int
    message: str
    severity: str = "error"

    def __str__(self) -> str:
        return f"{self.severity}: {self.kind} at {self.position}: {self.message}"


@dataclass(frozen=True)
class ValidationReport:
    source: str
    diagnostics: tuple[Diagnostic, ...]

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == "error")

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == "warning")

    @property
    def ok(self) -> bool:
        return not self.errors


class CompileError(ValueError):
    """Raised by strict compilation when validation reports errors."""

    def __init__(self, report: ValidationReport):
        self.report = report
        self.diagnostics = report.errors
        lines = "; ".join(str(d) for d in self.diagnostics)
        super().__init__(f"Invalid dense code {report.source!r}: {lines}")


__all__ = [
    "CompileError",
    "Diagnostic",
    "ERROR_KINDS",
    "ValidationReport",
    "WARNING_KINDS",
]
