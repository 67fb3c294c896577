"""Source location tracking for diagnostics and debugging.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Span of a token or node in the template source.

    Line and column are 1-indexed; offsets are absolute positions in the
    source buffer (``end_offset`` is exclusive).

    Examples:
        >>> loc = SourceLocation(lineno=3, col_offset=5, offset=40, end_offset=46)
        >>> str(loc)
        '3:5'
        >>> loc.length
        6

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    end_lineno: int | None = None
    end_col_offset: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    @property
    def length(self) -> int:
        """Number of source characters covered by this span."""
        return self.end_offset - self.offset

    def span_to(self, end: SourceLocation) -> SourceLocation:
        """Create a new location spanning from this location to end."""
        return SourceLocation(
            lineno=self.lineno,
            col_offset=self.col_offset,
            offset=self.offset,
            end_offset=end.end_offset or end.offset,
            end_lineno=end.end_lineno or end.lineno,
            end_col_offset=end.end_col_offset or end.col_offset,
            source_file=self.source_file,
        )

    def slice(self, source: str) -> str:
        """Return the exact source text covered by this span."""
        return source[self.offset : self.end_offset]

    @classmethod
    def unknown(cls) -> SourceLocation:
        """Placeholder location for synthetic nodes."""
        return cls(lineno=0, col_offset=0)
