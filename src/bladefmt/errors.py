"""Exception classes for bladefmt.

Only two conditions are fatal for a file and therefore raised: a lexical
construct left open at end of input (``LexError``) and formatter output that
does not re-parse to the same structure (``IdempotenceViolation``). Everything
else the formatter can recover from is reported as a diagnostic, see
``bladefmt.diagnostics.DiagnosticCode``.
"""

from __future__ import annotations


class BladeFormatError(Exception):
    """Base exception for all bladefmt errors."""

    pass


class LexError(BladeFormatError):
    """Unterminated lexical construct (comment, echo, string, tag, verbatim).

    Raised by the Scanner. ``format()`` turns it into an error diagnostic and
    returns the source unchanged.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize lex error with optional location.

        Args:
            message: Error description
            lineno: Line where the unterminated construct starts (1-indexed)
            col_offset: Column where it starts (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class IdempotenceViolation(BladeFormatError):
    """Formatter output does not reproduce the input's structure.

    Raised by the idempotence guard when a second pass over the candidate
    output yields a different tree or different text.
    """

    def __init__(self, reason: str, region_line: int | None = None) -> None:
        """Initialize the violation.

        Args:
            reason: What diverged between the passes
            region_line: First source line of the top-level node that diverged
        """
        self.reason = reason
        self.region_line = region_line
        where = f" (top-level node at line {region_line})" if region_line else ""
        super().__init__(f"Formatting is not stable{where}: {reason}")
