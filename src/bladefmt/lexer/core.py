"""State-machine scanner for Blade templates.

The scanner walks the source once, left to right, keeping an explicit stack
of lexical modes. Each mode scanner consumes one construct, emits its
tokens, and pushes or pops modes; no position is ever rewound.

Thread Safety:
Scanner instances are single-use. Create one per source string.
All state is instance-local; the directive registry is read-only.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from bladefmt.config import get_format_config
from bladefmt.diagnostics import DiagnosticSink
from bladefmt.directives.registry import DirectiveRegistry, create_default_registry
from bladefmt.errors import LexError
from bladefmt.lexer.classifiers import AttributeClassifierMixin
from bladefmt.lexer.modes import ScannerMode
from bladefmt.lexer.scanners import (
    DirectiveScannerMixin,
    EchoScannerMixin,
    OpaqueScannerMixin,
    TagScannerMixin,
    TextScannerMixin,
)
from bladefmt.location import SourceLocation
from bladefmt.tokens import Token, TokenType
from bladefmt.utils.logger import get_logger
from bladefmt.utils.text import find_delimiter, skip_quoted

logger = get_logger(__name__)

_BRACKETS = {"(": ")", "[": "]", "{": "}"}

_UNTERMINATED = {
    ScannerMode.IN_DIRECTIVE_ARGS: "unterminated directive argument list",
    ScannerMode.IN_ECHO: "unterminated echo",
    ScannerMode.IN_COMMENT: "unterminated comment",
    ScannerMode.IN_TAG: "unterminated tag",
    ScannerMode.IN_ATTRIBUTE_VALUE: "unterminated attribute value",
    ScannerMode.IN_VERBATIM: "unterminated @verbatim block",
    ScannerMode.IN_RAW_CODE: "unterminated raw code block",
    ScannerMode.IN_RAW_TEXT: "unterminated raw text element",
}


@dataclass(slots=True)
class ModeFrame:
    """One entry of the mode stack.

    Records where the construct started so an unterminated construct can
    be reported at its opening position.
    """

    mode: ScannerMode
    start: int
    lineno: int
    col: int
    detail: str = ""


class Scanner(
    # Classifiers (pure logic, no position mutation)
    AttributeClassifierMixin,
    # Scanners (mode-specific scanning logic)
    TagScannerMixin,
    OpaqueScannerMixin,
    EchoScannerMixin,
    DirectiveScannerMixin,
    TextScannerMixin,
):
    """Mode-stack scanner producing a flat token stream.

    Usage:
            >>> scanner = Scanner("@if($x) {{ $x }} @endif")
            >>> [t.type.name for t in scanner.tokenize()][:4]
        ['DIRECTIVE_NAME', 'DIRECTIVE_ARGS_OPEN', 'DIRECTIVE_ARGS', 'DIRECTIVE_ARGS_CLOSE']

    Raises:
        LexError: From tokenize(), for a construct left open at end of input.

    Thread Safety:
        Scanner instances are single-use. Create one per source string.

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_lineno",
        "_col",
        "_source_file",
        "_modes",
        "_registry",
        "_saved_lineno",
        "_saved_col",
        "_front_matter",
        "_report_unknown",
        "_tag_name",
        "diagnostics",
    )

    def __init__(
        self,
        source: str,
        source_file: str | None = None,
        registry: DirectiveRegistry | None = None,
    ) -> None:
        """Initialize scanner with source text.

        Configuration (registry, front matter handling) is read from the
        active FormatConfig unless a registry is passed explicitly.

        Args:
            source: Template source text
            source_file: Optional source file path for error messages
            registry: Directive registry override
        """
        config = get_format_config()
        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._lineno = 1
        self._col = 1
        self._source_file = source_file
        self._modes: list[ModeFrame] = [ModeFrame(ScannerMode.TEXT, 0, 1, 1)]
        self._registry = registry or config.directive_registry or create_default_registry()
        self._saved_lineno = 1
        self._saved_col = 1
        self._front_matter = config.front_matter
        self._report_unknown = config.report_unknown_directives
        self._tag_name = ""
        self.diagnostics = DiagnosticSink()

    @property
    def registry(self) -> DirectiveRegistry:
        return self._registry

    def tokenize(self) -> Iterator[Token]:
        """Tokenize source into a token stream ending with EOF.

        Raises:
            LexError: If a comment, echo, tag, quoted value, verbatim or raw
                block is still open at end of input.
        """
        if self._front_matter:
            yield from self._scan_front_matter()

        source_len = self._source_len
        while self._pos < source_len:
            yield from self._dispatch_mode()

        if len(self._modes) > 1:
            frame = self._modes[-1]
            raise LexError(
                _UNTERMINATED.get(frame.mode, "unterminated construct") + frame.detail,
                lineno=frame.lineno,
                col_offset=frame.col,
                source_file=self._source_file,
            )

        yield self._make_token_at_current(TokenType.EOF, "")

    def _dispatch_mode(self) -> Iterator[Token]:
        """Dispatch to the scanner for the current mode."""
        mode = self._mode
        if mode is ScannerMode.TEXT:
            yield from self._scan_text()
        elif mode is ScannerMode.IN_DIRECTIVE_HEAD:
            yield from self._scan_directive_head()
        elif mode is ScannerMode.IN_DIRECTIVE_ARGS:
            yield from self._scan_directive_args()
        elif mode is ScannerMode.IN_ECHO:
            yield from self._scan_echo()
        elif mode is ScannerMode.IN_COMMENT:
            yield from self._scan_comment()
        elif mode is ScannerMode.IN_TAG:
            yield from self._scan_tag()
        elif mode is ScannerMode.IN_ATTRIBUTE_VALUE:
            yield from self._scan_attribute_value()
        elif mode is ScannerMode.IN_VERBATIM:
            yield from self._scan_verbatim()
        elif mode is ScannerMode.IN_RAW_CODE:
            yield from self._scan_raw_code()
        elif mode is ScannerMode.IN_RAW_TEXT:
            yield from self._scan_raw_text()

    # =========================================================================
    # Mode stack
    # =========================================================================

    @property
    def _mode(self) -> ScannerMode:
        return self._modes[-1].mode

    @property
    def _frame(self) -> ModeFrame:
        return self._modes[-1]

    def _push_mode(self, mode: ScannerMode, detail: str = "") -> None:
        """Enter a nested mode starting at the current position."""
        self._modes.append(ModeFrame(mode, self._pos, self._lineno, self._col, detail))

    def _pop_mode(self) -> None:
        if len(self._modes) > 1:
            self._modes.pop()

    def _replace_mode(self, mode: ScannerMode, detail: str = "") -> None:
        """Swap the current mode, keeping the construct's start position."""
        frame = self._modes[-1]
        self._modes[-1] = ModeFrame(mode, frame.start, frame.lineno, frame.col, detail)

    def _fail(self, message: str, frame: ModeFrame | None = None) -> LexError:
        """Build a LexError positioned at the start of the current construct."""
        frame = frame or self._frame
        return LexError(
            message,
            lineno=frame.lineno,
            col_offset=frame.col,
            source_file=self._source_file,
        )

    # =========================================================================
    # Navigation helpers
    # =========================================================================

    def _peek(self, offset: int = 0) -> str:
        """Character at pos + offset, or empty string past the end."""
        idx = self._pos + offset
        if idx >= self._source_len:
            return ""
        return self._source[idx]

    def _startswith(self, prefix: str, pos: int | None = None) -> bool:
        return self._source.startswith(prefix, self._pos if pos is None else pos)

    def _advance_to(self, end: int) -> None:
        """Move to ``end``, updating line/column with C-level counting."""
        if end <= self._pos:
            return
        segment = self._source[self._pos : end]
        newline_count = segment.count("\n")
        if newline_count:
            self._lineno += newline_count
            self._col = len(segment) - segment.rfind("\n")
        else:
            self._col += len(segment)
        self._pos = end

    def _skip_inline_space(self, pos: int) -> int:
        """Index of the first non space/tab character at or after pos."""
        source = self._source
        n = self._source_len
        while pos < n and source[pos] in " \t":
            pos += 1
        return pos

    def _skip_whitespace(self, pos: int) -> int:
        source = self._source
        n = self._source_len
        while pos < n and source[pos] in " \t\r\n\f":
            pos += 1
        return pos

    def _find_balanced_end(self, pos: int) -> int:
        """Index just past the bracket group opening at ``pos``.

        Brackets inside string literals are ignored. Returns -1 when the
        group is not closed before end of input.
        """
        source = self._source
        n = self._source_len
        stack: list[str] = []
        i = pos
        while i < n:
            ch = source[i]
            if ch in "'\"":
                end = skip_quoted(source, i)
                if end == -1:
                    return -1
                i = end
                continue
            if ch in _BRACKETS:
                stack.append(_BRACKETS[ch])
            elif ch in ")]}":
                if not stack:
                    return -1
                expected = stack.pop()
                if ch != expected:
                    return -1
                if not stack:
                    return i + 1
            i += 1
        return -1

    def _find_delimiter(self, pos: int, closer: str) -> int:
        """Index of ``closer`` at or after pos, skipping string literals."""
        return find_delimiter(self._source, pos, closer)

    # =========================================================================
    # Location tracking and token construction
    # =========================================================================

    def _save_location(self) -> None:
        """Save current location; tokens created next start here."""
        self._saved_lineno = self._lineno
        self._saved_col = self._col

    def _emit(
        self,
        token_type: TokenType,
        end: int,
        *,
        subkind: str | None = None,
    ) -> Token:
        """Consume source up to ``end`` and return it as one token."""
        self._save_location()
        start = self._pos
        self._advance_to(end)
        return Token(
            type=token_type,
            value=self._source[start:end],
            _lineno=self._saved_lineno,
            _col=self._saved_col,
            _start_offset=start,
            _end_offset=end,
            subkind=subkind,
            _end_lineno=self._lineno,
            _end_col=self._col,
            _source_file=self._source_file,
        )

    def _make_token_at_current(self, token_type: TokenType, value: str) -> Token:
        """Create a zero-width token at the current position (EOF)."""
        return Token(
            type=token_type,
            value=value,
            _lineno=self._lineno,
            _col=self._col,
            _start_offset=self._pos,
            _end_offset=self._pos,
            _end_lineno=self._lineno,
            _end_col=self._col,
            _source_file=self._source_file,
        )

    # =========================================================================
    # Front matter
    # =========================================================================

    def _scan_front_matter(self) -> Iterator[Token]:
        """Emit a leading ``---`` ... ``---`` block as one opaque token."""
        source = self._source
        if not (source.startswith("---\n") or source.startswith("---\r\n")):
            return
        pos = source.find("\n") + 1
        while pos < self._source_len:
            line_end = source.find("\n", pos)
            if line_end == -1:
                line_end = self._source_len
            if source[pos:line_end].rstrip("\r") == "---":
                logger.debug("front matter spans %d characters", line_end)
                yield self._emit(TokenType.FRONT_MATTER, line_end)
                return
            pos = line_end + 1

    def _location_here(self) -> SourceLocation:
        """Zero-width location at the current position."""
        return SourceLocation(
            lineno=self._lineno,
            col_offset=self._col,
            offset=self._pos,
            end_offset=self._pos,
            source_file=self._source_file,
        )

    def _fail_here(self, message: str) -> LexError:
        """Build a LexError positioned at the current character."""
        return LexError(
            message,
            lineno=self._lineno,
            col_offset=self._col,
            source_file=self._source_file,
        )
