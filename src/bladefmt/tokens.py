"""Token and TokenType definitions for the bladefmt scanner.

The scanner produces a stream of Token objects that the parser consumes.
Each Token has a type, its exact source text, an optional subkind and a
source span.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.

Performance Note:
Token stores raw coordinates and lazily creates SourceLocation on demand.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bladefmt.location import SourceLocation


class TokenType(Enum):
    """Token types produced by the scanner.

    Organized by lexical mode:
    - Document structure (EOF, TEXT, FRONT_MATTER)
    - Directives (@name, argument list)
    - Echoes and comments ({{ }}, {!! !!}, {{-- --}})
    - Markup (tags, attributes, HTML comments, declarations)
    - Opaque bodies (verbatim, raw code, raw-text elements)

    """

    # Document structure
    EOF = auto()
    TEXT = auto()
    FRONT_MATTER = auto()  # leading --- ... --- block

    # Directives
    DIRECTIVE_NAME = auto()  # @if
    DIRECTIVE_ARGS_OPEN = auto()  # (
    DIRECTIVE_ARGS = auto()  # expression between the parens, verbatim
    DIRECTIVE_ARGS_CLOSE = auto()  # )

    # Echoes: subkind "escaped" ({{ }}) or "raw" ({!! !!})
    ECHO_OPEN = auto()
    ECHO_CONTENT = auto()
    ECHO_CLOSE = auto()

    # Template comments {{-- --}}
    COMMENT_OPEN = auto()
    COMMENT_CONTENT = auto()
    COMMENT_CLOSE = auto()

    # Markup
    TAG_OPEN = auto()  # <div  (value is "<div", subkind "component"/"slot"/None)
    TAG_CLOSE = auto()  # > or />
    END_TAG = auto()  # </div>
    ATTRIBUTE_NAME = auto()  # subkind is an AttributeKind value
    ATTRIBUTE_VALUE = auto()  # =... including quotes, verbatim
    HTML_COMMENT = auto()  # <!-- -->
    DECLARATION = auto()  # <!DOCTYPE html>

    # Opaque bodies
    VERBATIM_SPAN = auto()  # @verbatim ... @endverbatim
    RAW_CODE_SPAN = auto()  # @php ... @endphp
    RAW_TEXT = auto()  # body of <script>, <style>, <pre>, <textarea>


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the scanner.

    Attributes:
        type: The token type
        value: The exact source text of the token
        _lineno: Start line number (1-indexed)
        _col: Start column (1-indexed)
        _start_offset: Absolute start position in source
        _end_offset: Absolute end position in source (exclusive)
        subkind: Refinement of the type (echo flavour, attribute kind, tag kind)
        _end_lineno: End line number
        _end_col: End column
        _source_file: Optional source file path

    """

    type: TokenType
    value: str
    _lineno: int
    _col: int
    _start_offset: int
    _end_offset: int
    subkind: str | None = None
    _end_lineno: int | None = None
    _end_col: int | None = None
    _source_file: str | None = None
    _location_cache: SourceLocation | None = field(
        default=None, repr=False, compare=False, hash=False
    )

    @property
    def location(self) -> SourceLocation:
        """Get source location (lazily created and cached)."""
        if self._location_cache is not None:
            return self._location_cache

        from bladefmt.location import SourceLocation

        loc = SourceLocation(
            lineno=self._lineno,
            col_offset=self._col,
            offset=self._start_offset,
            end_offset=self._end_offset,
            end_lineno=self._end_lineno,
            end_col_offset=self._end_col,
            source_file=self._source_file,
        )
        object.__setattr__(self, "_location_cache", loc)
        return loc

    def __repr__(self) -> str:
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        kind = f"[{self.subkind}]" if self.subkind else ""
        return f"Token({self.type.name}{kind}, {val!r}, {self._lineno}:{self._col})"

    @property
    def lineno(self) -> int:
        return self._lineno

    @property
    def col(self) -> int:
        return self._col

    @property
    def start(self) -> int:
        return self._start_offset

    @property
    def end(self) -> int:
        return self._end_offset
