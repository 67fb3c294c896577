"""Text mode scanner mixin."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from bladefmt.lexer.modes import TAG_NAME_CHARS, TEXT_TRIGGER_CHARS, ScannerMode
from bladefmt.tokens import Token, TokenType

if TYPE_CHECKING:
    from bladefmt.errors import LexError


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class TextScannerMixin:
    """Mixin providing TEXT mode scanning.

    Accumulates plain text until one of:
    - ``{{--`` comment, ``{{`` / ``{!!`` echo
    - ``@name`` directive (not preceded by a word character)
    - ``<tag``, ``</tag>``, ``<!-- -->``, ``<!DOCTYPE>``, ``<?php ?>``

    Escapes stay inside the text run: ``@@`` and ``@{{ ... }}``.

    """

    _source: str
    _source_len: int
    _pos: int

    def _push_mode(self, mode: ScannerMode, detail: str = "") -> None:
        raise NotImplementedError

    def _emit(self, token_type: TokenType, end: int, *, subkind: str | None = None) -> Token:
        raise NotImplementedError

    def _find_delimiter(self, pos: int, closer: str) -> int:
        raise NotImplementedError

    def _fail(self, message: str, frame: object | None = None) -> LexError:
        raise NotImplementedError

    def _scan_end_tag(self) -> Iterator[Token]:
        raise NotImplementedError

    def _scan_markup_opaque(self) -> Iterator[Token]:
        raise NotImplementedError

    def _scan_text(self) -> Iterator[Token]:
        """Scan one text run, then hand over to the construct that ended it.

        Yields:
            A TEXT token (when the run is non-empty) followed by whatever
            the next construct emits directly.
        """
        source = self._source
        n = self._source_len
        start = self._pos
        i = start

        while i < n:
            ch = source[i]
            if ch not in TEXT_TRIGGER_CHARS:
                i += 1
                continue

            if ch == "@":
                nxt = source[i + 1] if i + 1 < n else ""
                if nxt == "@":
                    # @@ escape: the following name is literal text
                    i += 2
                    continue
                if nxt == "{" and (source.startswith("{{", i + 1) or source.startswith("{!!", i + 1)):
                    # @{{ escape: the echo is literal text
                    closer = "}}" if source.startswith("{{", i + 1) else "!!}"
                    close = self._find_delimiter(i + 3, closer)
                    i = close + len(closer) if close != -1 else i + 3
                    continue
                if _is_ident_start(nxt) and (i == 0 or not _is_word_char(source[i - 1])):
                    break
                i += 1
                continue

            if ch == "{":
                if source.startswith("{{", i) or source.startswith("{!!", i):
                    break
                i += 1
                continue

            # ch == "<"
            nxt = source[i + 1] if i + 1 < n else ""
            if nxt in TAG_NAME_CHARS and nxt.isalpha():
                break
            if nxt == "/" and i + 2 < n and source[i + 2].isalpha():
                break
            if nxt == "!" or nxt == "?":
                break
            i += 1

        if i > start:
            yield self._emit(TokenType.TEXT, i)
        if i >= n:
            return

        if source.startswith("{{--", i):
            self._push_mode(ScannerMode.IN_COMMENT)
        elif source[i] == "{":
            self._push_mode(ScannerMode.IN_ECHO)
        elif source[i] == "@":
            self._push_mode(ScannerMode.IN_DIRECTIVE_HEAD)
        elif source.startswith("</", i):
            yield from self._scan_end_tag()
        elif source.startswith("<!", i) or source.startswith("<?", i):
            yield from self._scan_markup_opaque()
        else:
            self._push_mode(ScannerMode.IN_TAG)
