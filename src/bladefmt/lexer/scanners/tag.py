"""Tag mode scanner mixin (IN_TAG / IN_ATTRIBUTE_VALUE).

A start tag is scanned one attribute per call so that echoes and comments
inside the attribute list can push their own modes and return here.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from bladefmt.lexer.modes import RAW_TEXT_ELEMENTS, TAG_NAME_CHARS, ScannerMode, tag_subkind
from bladefmt.tokens import Token, TokenType

if TYPE_CHECKING:
    from bladefmt.errors import LexError
    from bladefmt.lexer.classifiers.attribute import AttributeKind
    from bladefmt.lexer.core import ModeFrame
    from bladefmt.location import SourceLocation

_VALUE_STOP = frozenset(" \t\r\n\f>")


class TagScannerMixin:
    """Mixin providing start-tag, attribute and end-tag scanning.

    Token sequence for ``<button @click="go()" disabled>``::

        TAG_OPEN '<button' · ATTRIBUTE_NAME[foreign-event] '@click'
        · ATTRIBUTE_VALUE '"go()"' · ATTRIBUTE_NAME[plain] 'disabled'
        · TAG_CLOSE '>'

    Quoted values end at the matching quote; echoes and comments inside a
    value are skipped as units so ``"{{ $a ? "x" : "y" }}"`` stays whole.

    """

    _source: str
    _source_len: int
    _pos: int
    _tag_name: str

    @property
    def _frame(self) -> ModeFrame:
        raise NotImplementedError

    def _push_mode(self, mode: ScannerMode, detail: str = "") -> None:
        raise NotImplementedError

    def _pop_mode(self) -> None:
        raise NotImplementedError

    def _emit(self, token_type: TokenType, end: int, *, subkind: str | None = None) -> Token:
        raise NotImplementedError

    def _advance_to(self, end: int) -> None:
        raise NotImplementedError

    def _skip_whitespace(self, pos: int) -> int:
        raise NotImplementedError

    def _find_delimiter(self, pos: int, closer: str) -> int:
        raise NotImplementedError

    def _fail(self, message: str, frame: ModeFrame | None = None) -> LexError:
        raise NotImplementedError

    def _fail_here(self, message: str) -> LexError:
        raise NotImplementedError

    def _location_here(self) -> SourceLocation:
        raise NotImplementedError

    def _attribute_name_end(self, pos: int) -> int:
        raise NotImplementedError

    def _classify_attribute_name(
        self, name: str, has_value: bool, location: SourceLocation
    ) -> AttributeKind:
        raise NotImplementedError

    def _tag_name_end(self, pos: int) -> int:
        source = self._source
        n = self._source_len
        while pos < n and source[pos] in TAG_NAME_CHARS:
            pos += 1
        return pos

    def _scan_tag(self) -> Iterator[Token]:
        """Scan the tag name or the next attribute of a start tag."""
        source = self._source
        pos = self._pos

        if pos == self._frame.start and source[pos] == "<":
            name_end = self._tag_name_end(pos + 1)
            self._tag_name = source[pos + 1 : name_end]
            yield self._emit(TokenType.TAG_OPEN, name_end, subkind=tag_subkind(self._tag_name))
            return

        pos = self._skip_whitespace(pos)
        self._advance_to(pos)
        if pos >= self._source_len:
            return

        if source.startswith("/>", pos):
            yield self._emit(TokenType.TAG_CLOSE, pos + 2)
            self._pop_mode()
            return
        if source[pos] == ">":
            yield self._emit(TokenType.TAG_CLOSE, pos + 1)
            self._pop_mode()
            if self._tag_name.lower() in RAW_TEXT_ELEMENTS:
                self._push_mode(ScannerMode.IN_RAW_TEXT, detail=f" <{self._tag_name}>")
            return
        if source.startswith("{{--", pos):
            self._push_mode(ScannerMode.IN_COMMENT)
            return
        if source.startswith("{{", pos) or source.startswith("{!!", pos):
            self._push_mode(ScannerMode.IN_ECHO)
            return

        name_end = self._attribute_name_end(pos)
        name = source[pos:name_end]
        value_start = self._skip_whitespace(name_end)
        has_value = value_start < self._source_len and source[value_start] == "="

        kind = self._classify_attribute_name(name, has_value, self._location_here())
        yield self._emit(TokenType.ATTRIBUTE_NAME, name_end, subkind=kind.value)

        if has_value:
            # whitespace around "=" is not kept
            self._advance_to(self._skip_whitespace(value_start + 1))
            self._push_mode(ScannerMode.IN_ATTRIBUTE_VALUE, detail=f" for '{name}'")

    def _scan_attribute_value(self) -> Iterator[Token]:
        """Scan a quoted or unquoted attribute value as one opaque token.

        Raises:
            LexError: If a quoted value is not closed.
        """
        source = self._source
        n = self._source_len
        start = self._pos

        if start < n and source[start] in "\"'":
            quote = source[start]
            i = start + 1
            while True:
                if i >= n:
                    raise self._fail("unterminated attribute value")
                ch = source[i]
                if ch == quote:
                    end = i + 1
                    break
                if ch == "{" and (source.startswith("{{", i) or source.startswith("{!!", i)):
                    if source.startswith("{{--", i):
                        close, width = source.find("--}}", i + 4), 4
                    elif source.startswith("{!!", i):
                        close, width = self._find_delimiter(i + 3, "!!}"), 3
                    else:
                        close, width = self._find_delimiter(i + 2, "}}"), 2
                    if close != -1:
                        i = close + width
                        continue
                i += 1
        else:
            i = start
            while i < n and source[i] not in _VALUE_STOP:
                if source.startswith("{{", i):
                    close = self._find_delimiter(i + 2, "}}")
                    if close != -1:
                        i = close + 2
                        continue
                i += 1
            end = i

        yield self._emit(TokenType.ATTRIBUTE_VALUE, end)
        self._pop_mode()

    def _scan_end_tag(self) -> Iterator[Token]:
        """Scan ``</name ...>`` as one token.

        Raises:
            LexError: If ``>`` never appears.
        """
        pos = self._pos
        name_end = self._tag_name_end(pos + 2)
        close = self._source.find(">", name_end)
        if close == -1:
            raise self._fail_here("unterminated end tag")
        name = self._source[pos + 2 : name_end]
        yield self._emit(TokenType.END_TAG, close + 1, subkind=tag_subkind(name))
