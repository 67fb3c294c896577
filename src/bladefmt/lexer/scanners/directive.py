"""Directive mode scanner mixin (IN_DIRECTIVE_HEAD / IN_DIRECTIVE_ARGS)."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from bladefmt.diagnostics import DiagnosticCode
from bladefmt.lexer.modes import ScannerMode
from bladefmt.tokens import Token, TokenType

if TYPE_CHECKING:
    from bladefmt.diagnostics import DiagnosticSink
    from bladefmt.directives.registry import DirectiveRegistry
    from bladefmt.errors import LexError


class DirectiveScannerMixin:
    """Mixin providing directive scanning.

    The head scanner reads ``@name`` and decides, from the registry, whether
    an argument list follows and whether the directive owns an opaque body:

    - registered directives accepting arguments take ``(`` after optional
      spaces/tabs (``@if ($x)``)
    - unknown directives only take an immediately adjacent ``(``, and only
      when it is balanced; otherwise the parenthesis stays text
    - ``@verbatim`` and argument-less ``@php`` switch to an opaque mode

    """

    _source: str
    _source_len: int
    _pos: int
    _registry: DirectiveRegistry
    _report_unknown: bool
    diagnostics: DiagnosticSink

    def _pop_mode(self) -> None:
        raise NotImplementedError

    def _replace_mode(self, mode: ScannerMode, detail: str = "") -> None:
        raise NotImplementedError

    def _emit(self, token_type: TokenType, end: int, *, subkind: str | None = None) -> Token:
        raise NotImplementedError

    def _skip_inline_space(self, pos: int) -> int:
        raise NotImplementedError

    def _find_balanced_end(self, pos: int) -> int:
        raise NotImplementedError

    def _advance_to(self, end: int) -> None:
        raise NotImplementedError

    def _fail(self, message: str, frame: object | None = None) -> LexError:
        raise NotImplementedError

    def _name_end(self, pos: int) -> int:
        """End of a directive name: ``\\w+`` optionally followed by ``::\\w+``."""
        source = self._source
        n = self._source_len
        i = pos
        while i < n and (source[i].isalnum() or source[i] == "_"):
            i += 1
        if source.startswith("::", i) and i + 2 < n and (source[i + 2].isalnum() or source[i + 2] == "_"):
            i += 2
            while i < n and (source[i].isalnum() or source[i] == "_"):
                i += 1
        return i

    def _scan_directive_head(self) -> Iterator[Token]:
        """Scan ``@name`` and choose the next mode.

        Yields:
            DIRECTIVE_NAME, unless the directive opens an opaque body, in
            which case the whole body is emitted later as one span token.
        """
        start = self._pos
        name_end = self._name_end(start + 1)
        name = self._source[start + 1 : name_end]
        descriptor = self._registry.lookup(name)

        args_start = -1
        if descriptor is not None:
            if descriptor.accepts_args:
                probe = self._skip_inline_space(name_end)
                if probe < self._source_len and self._source[probe] == "(":
                    args_start = probe
        elif name_end < self._source_len and self._source[name_end] == "(":
            if self._find_balanced_end(name_end) != -1:
                args_start = name_end

        if descriptor is not None and descriptor.opaque_body and args_start == -1:
            closer = "@" + descriptor.opaque_closer
            mode = ScannerMode.IN_VERBATIM if descriptor.name == "verbatim" else ScannerMode.IN_RAW_CODE
            self._replace_mode(mode, detail=f" (missing {closer})")
            return

        if descriptor is None and self._report_unknown:
            self.diagnostics.info(
                self._location_here(),
                DiagnosticCode.UNKNOWN_DIRECTIVE,
                f"unknown directive '@{name}' kept as written",
            )

        yield self._emit(TokenType.DIRECTIVE_NAME, name_end)

        if args_start == -1:
            self._pop_mode()
            return

        # whitespace between name and "(" is dropped from the token stream
        self._advance_to(args_start)
        self._replace_mode(ScannerMode.IN_DIRECTIVE_ARGS, detail=f" for '@{name}'")

    def _scan_directive_args(self) -> Iterator[Token]:
        """Scan a balanced ``( ... )`` list, quote- and bracket-aware.

        Raises:
            LexError: If the list is not closed before end of input.
        """
        open_pos = self._pos
        end = self._find_balanced_end(open_pos)
        if end == -1 or self._source[end - 1] != ")":
            raise self._fail("unterminated directive argument list")

        yield self._emit(TokenType.DIRECTIVE_ARGS_OPEN, open_pos + 1)
        if end - 1 > self._pos:
            yield self._emit(TokenType.DIRECTIVE_ARGS, end - 1)
        yield self._emit(TokenType.DIRECTIVE_ARGS_CLOSE, end)
        self._pop_mode()
