"""Echo and comment mode scanner mixin (IN_ECHO / IN_COMMENT)."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from bladefmt.lexer.modes import ScannerMode
from bladefmt.tokens import Token, TokenType

if TYPE_CHECKING:
    from bladefmt.errors import LexError


class EchoScannerMixin:
    """Mixin scanning ``{{ }}``, ``{!! !!}`` and ``{{-- --}}``.

    Echo bodies are opaque expressions: the closing delimiter is searched
    outside string literals so ``{{ "}}" }}`` stays one echo. Comments end at
    the first ``--}}``, whatever they contain.

    """

    _source: str
    _pos: int

    def _pop_mode(self) -> None:
        raise NotImplementedError

    def _emit(self, token_type: TokenType, end: int, *, subkind: str | None = None) -> Token:
        raise NotImplementedError

    def _find_delimiter(self, pos: int, closer: str) -> int:
        raise NotImplementedError

    def _fail(self, message: str, frame: object | None = None) -> LexError:
        raise NotImplementedError

    def _scan_echo(self) -> Iterator[Token]:
        """Scan one echo; returns to the mode that pushed it.

        Raises:
            LexError: If the closing delimiter never appears.
        """
        start = self._pos
        if self._source.startswith("{!!", start):
            opener, closer, subkind = "{!!", "!!}", "raw"
        else:
            opener, closer, subkind = "{{", "}}", "escaped"

        close = self._find_delimiter(start + len(opener), closer)
        if close == -1:
            raise self._fail(f"unterminated echo, missing '{closer}'")

        yield self._emit(TokenType.ECHO_OPEN, start + len(opener), subkind=subkind)
        yield self._emit(TokenType.ECHO_CONTENT, close, subkind=subkind)
        yield self._emit(TokenType.ECHO_CLOSE, close + len(closer), subkind=subkind)
        self._pop_mode()

    def _scan_comment(self) -> Iterator[Token]:
        """Scan one ``{{-- --}}`` comment without interpreting its content.

        Raises:
            LexError: If ``--}}`` never appears.
        """
        start = self._pos
        close = self._source.find("--}}", start + 4)
        if close == -1:
            raise self._fail("unterminated comment, missing '--}}'")

        yield self._emit(TokenType.COMMENT_OPEN, start + 4)
        yield self._emit(TokenType.COMMENT_CONTENT, close)
        yield self._emit(TokenType.COMMENT_CLOSE, close + 4)
        self._pop_mode()
