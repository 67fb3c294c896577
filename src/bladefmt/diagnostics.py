"""Diagnostics reported by a format call.

A diagnostic does not mean formatting failed. Most are warnings about
malformed input the parser recovered from; only ``lex-error`` and
``idempotence-violation`` accompany a fallback to the original text.

Thread Safety:
Diagnostic is frozen. DiagnosticSink is per-call state, never shared.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bladefmt.location import SourceLocation


class Severity(Enum):
    """How serious a diagnostic is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCode(Enum):
    """Stable machine-readable diagnostic codes."""

    LEX_ERROR = "lex-error"
    IDEMPOTENCE_VIOLATION = "idempotence-violation"
    UNMATCHED_DIRECTIVE = "unmatched-directive"
    UNKNOWN_DIRECTIVE = "unknown-directive"
    AMBIGUOUS_ATTRIBUTE = "ambiguous-attribute"
    UNCLOSED_ELEMENT = "unclosed-element"
    STRAY_END_TAG = "stray-end-tag"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A positioned message about the input.

    Attributes:
        line: 1-indexed line (0 when the position is unknown)
        column: 1-indexed column (0 when the position is unknown)
        severity: ERROR, WARNING or INFO
        message: Human-readable description
        code: Machine-readable code
    """

    line: int
    column: int
    severity: Severity
    message: str
    code: DiagnosticCode

    def __str__(self) -> str:
        return f"{self.line}:{self.column} {self.severity.value}[{self.code.value}] {self.message}"


class DiagnosticSink:
    """Collects diagnostics for one scan or parse."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def add(
        self,
        location: SourceLocation,
        severity: Severity,
        code: DiagnosticCode,
        message: str,
    ) -> None:
        self._items.append(
            Diagnostic(
                line=location.lineno,
                column=location.col_offset,
                severity=severity,
                message=message,
                code=code,
            )
        )

    def warning(self, location: SourceLocation, code: DiagnosticCode, message: str) -> None:
        self.add(location, Severity.WARNING, code, message)

    def info(self, location: SourceLocation, code: DiagnosticCode, message: str) -> None:
        self.add(location, Severity.INFO, code, message)

    def extend(self, diagnostics: list[Diagnostic] | tuple[Diagnostic, ...]) -> None:
        self._items.extend(diagnostics)

    def sorted(self) -> tuple[Diagnostic, ...]:
        """Diagnostics ordered by position (stable for equal positions)."""
        return tuple(sorted(self._items, key=lambda d: (d.line, d.column)))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self._items)
