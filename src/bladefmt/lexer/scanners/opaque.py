"""Opaque region scanner mixin.

Covers every construct whose interior is never tokenized: ``@verbatim``
and ``@php`` bodies, ``<?php ?>`` blocks, raw-text element bodies
(script, style, pre, textarea), HTML comments and declarations.
Each is emitted as one token holding the exact source slice.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from bladefmt.lexer.modes import ScannerMode
from bladefmt.tokens import Token, TokenType
from bladefmt.utils.logger import get_logger

if TYPE_CHECKING:
    from bladefmt.errors import LexError

logger = get_logger(__name__)


class OpaqueScannerMixin:
    """Mixin fast-forwarding over opaque regions.

    Closing delimiters are matched literally; nothing inside the region
    (directives, echoes, tags, quotes) is interpreted.

    """

    _source: str
    _source_len: int
    _pos: int
    _tag_name: str

    def _push_mode(self, mode: ScannerMode, detail: str = "") -> None:
        raise NotImplementedError

    def _pop_mode(self) -> None:
        raise NotImplementedError

    def _emit(self, token_type: TokenType, end: int, *, subkind: str | None = None) -> Token:
        raise NotImplementedError

    def _fail(self, message: str, frame: object | None = None) -> LexError:
        raise NotImplementedError

    def _fail_here(self, message: str) -> LexError:
        raise NotImplementedError

    def _scan_verbatim(self) -> Iterator[Token]:
        """Emit ``@verbatim ... @endverbatim`` as one VERBATIM_SPAN.

        Raises:
            LexError: If ``@endverbatim`` never appears.
        """
        close = self._source.find("@endverbatim", self._pos + len("@verbatim"))
        if close == -1:
            raise self._fail("unterminated @verbatim block, missing @endverbatim")
        yield self._emit(TokenType.VERBATIM_SPAN, close + len("@endverbatim"))
        self._pop_mode()

    def _scan_raw_code(self) -> Iterator[Token]:
        """Emit ``@php ... @endphp`` or ``<?php ... ?>`` as one RAW_CODE_SPAN.

        A ``<?php`` block left open runs to end of input, as it does for
        the PHP interpreter.

        Raises:
            LexError: If ``@endphp`` never appears.
        """
        source = self._source
        start = self._pos
        if source.startswith("<?", start):
            close = source.find("?>", start + 2)
            end = self._source_len if close == -1 else close + 2
        else:
            close = source.find("@endphp", start + len("@php"))
            if close == -1:
                raise self._fail("unterminated @php block, missing @endphp")
            end = close + len("@endphp")
        yield self._emit(TokenType.RAW_CODE_SPAN, end)
        self._pop_mode()

    def _scan_raw_text(self) -> Iterator[Token]:
        """Emit the body of a raw-text element up to its end tag.

        Raises:
            LexError: If the element's end tag never appears.
        """
        tag = self._tag_name
        pattern = re.compile(r"</" + re.escape(tag) + r"(?=[\s>/])", re.IGNORECASE)
        match = pattern.search(self._source, self._pos)
        if match is None:
            raise self._fail(f"unterminated <{tag}> element, missing </{tag}>")
        if match.start() > self._pos:
            yield self._emit(TokenType.RAW_TEXT, match.start(), subkind=tag.lower())
        self._pop_mode()

    def _scan_markup_opaque(self) -> Iterator[Token]:
        """Scan ``<!-- -->``, ``<!DOCTYPE ...>``, ``<![CDATA[ ]]>`` or ``<?php``.

        Called from TEXT mode with the position on ``<``. A ``<!`` or ``<?``
        not starting any of these is a lone ``<`` of text.

        Raises:
            LexError: If a comment, CDATA section or declaration is not closed.
        """
        source = self._source
        start = self._pos

        if source.startswith("<!--", start):
            close = source.find("-->", start + 4)
            if close == -1:
                raise self._fail_here("unterminated HTML comment, missing '-->'")
            yield self._emit(TokenType.HTML_COMMENT, close + 3)
            return

        if source.startswith("<![CDATA[", start):
            close = source.find("]]>", start + 9)
            if close == -1:
                raise self._fail_here("unterminated CDATA section, missing ']]>'")
            yield self._emit(TokenType.DECLARATION, close + 3)
            return

        if source.startswith("<!", start) and start + 2 < self._source_len and source[start + 2].isalpha():
            close = source.find(">", start + 2)
            if close == -1:
                raise self._fail_here("unterminated declaration, missing '>'")
            yield self._emit(TokenType.DECLARATION, close + 1)
            return

        if source.startswith("<?", start):
            self._push_mode(ScannerMode.IN_RAW_CODE, detail=" (missing '?>')")
            return

        logger.debug("lone '<' at offset %d kept as text", start)
        yield self._emit(TokenType.TEXT, start + 1)
