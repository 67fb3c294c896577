"""Token navigation utilities for the bladefmt parser.

Provides mixin for token stream navigation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bladefmt.tokens import Token, TokenType

if TYPE_CHECKING:
    from collections.abc import Sequence


class TokenNavigationMixin:
    """Mixin providing token stream navigation methods.

    Required Host Attributes:
        - _tokens: Sequence[Token]
        - _tokens_len: int (cached len(_tokens) for hot loops)
        - _pos: int
        - _current: Token | None

    """

    _tokens: Sequence[Token]
    _tokens_len: int
    _pos: int
    _current: Token | None

    def _at_end(self) -> bool:
        """Check if at end of token stream."""
        return self._current is None or self._current.type == TokenType.EOF

    def _advance(self) -> Token | None:
        """Advance to next token and return it."""
        self._pos += 1
        if self._pos < self._tokens_len:
            self._current = self._tokens[self._pos]
        else:
            self._current = None
        return self._current

    def _peek(self, offset: int = 1) -> Token | None:
        """Peek at token at offset from current position."""
        pos = self._pos + offset
        if pos < self._tokens_len:
            return self._tokens[pos]
        return None

    def _check(self, token_type: TokenType) -> bool:
        """Whether the current token has the given type."""
        return self._current is not None and self._current.type == token_type

    def _take(self, token_type: TokenType) -> Token | None:
        """Consume and return the current token if it has the given type."""
        token = self._current
        if token is not None and token.type == token_type:
            self._advance()
            return token
        return None
