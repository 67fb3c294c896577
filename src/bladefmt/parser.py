"""Block Matcher: builds a typed tree from the scanner's token stream.

Consumes the flat token stream and produces an immutable Document.

Architecture:
The parser uses a mixin-based design for separation of concerns:
- `TokenNavigationMixin`: Token stream traversal
- `BlockMatchingMixin`: Directive blocks (stack discipline)
- `ElementBuildingMixin`: Elements, components, slots

Thread Safety:
- Parser produces immutable AST (frozen dataclasses)
- Configuration is read from ContextVar (thread-local)
- Safe to share AST across threads

"""

from __future__ import annotations

from bladefmt.config import get_format_config
from bladefmt.diagnostics import DiagnosticSink
from bladefmt.directives.registry import DirectiveRegistry, create_default_registry
from bladefmt.lexer import Scanner
from bladefmt.location import SourceLocation
from bladefmt.nodes import Comment, Document, Echo, Node, Opaque, OpaqueKind, Text
from bladefmt.parsing import (
    BlockMatchingMixin,
    ElementBuildingMixin,
    FrameStack,
    TokenNavigationMixin,
)
from bladefmt.tokens import Token, TokenType
from bladefmt.utils.logger import get_logger

logger = get_logger(__name__)

_OPAQUE_TOKENS = {
    TokenType.FRONT_MATTER: OpaqueKind.FRONT_MATTER,
    TokenType.VERBATIM_SPAN: OpaqueKind.VERBATIM,
    TokenType.RAW_CODE_SPAN: OpaqueKind.RAW_CODE,
    TokenType.RAW_TEXT: OpaqueKind.RAW_TEXT,
    TokenType.HTML_COMMENT: OpaqueKind.HTML_COMMENT,
    TokenType.DECLARATION: OpaqueKind.DECLARATION,
}


class Parser(
    TokenNavigationMixin,
    ElementBuildingMixin,
    BlockMatchingMixin,
):
    """Stack-based parser for Blade templates.

    Usage:
            >>> doc = Parser("@if($x) yes @endif").parse()
            >>> doc.children[0].family
        'if'

    Raises:
        LexError: From parse(), when the scanner meets an unterminated
            construct. Everything else is recovered and reported through
            ``Document.diagnostics``.

    Thread Safety:
        Parser instances are single-use and not thread-safe. Create one per
        parse operation. The resulting AST is immutable and thread-safe.

    """

    __slots__ = (
        "_source",
        "_source_file",
        "_tokens",
        "_tokens_len",
        "_pos",
        "_current",
        "_frames",
        "_registry",
        "_diagnostics",
    )

    def __init__(
        self,
        source: str,
        source_file: str | None = None,
        registry: DirectiveRegistry | None = None,
    ) -> None:
        """Initialize parser with source text.

        Args:
            source: Template source text
            source_file: Optional source file path for diagnostics
            registry: Directive registry override (defaults to the active
                FormatConfig's registry, then the built-in registry)
        """
        self._source = source
        self._source_file = source_file
        self._tokens: list[Token] = []
        self._tokens_len = 0
        self._pos = 0
        self._current: Token | None = None
        self._registry = (
            registry or get_format_config().directive_registry or create_default_registry()
        )
        self._frames = FrameStack(SourceLocation(1, 1, source_file=source_file))
        self._diagnostics = DiagnosticSink()

    def parse(self) -> Document:
        """Parse source into a Document.

        Returns:
            Document with top-level children and diagnostics in source order
        """
        scanner = Scanner(self._source, self._source_file, registry=self._registry)
        self._tokens = list(scanner.tokenize())
        self._tokens_len = len(self._tokens)
        self._pos = 0
        self._current = self._tokens[0] if self._tokens else None
        logger.debug("scanned %d tokens", self._tokens_len)

        while not self._at_end():
            self._parse_node()
        self._close_all_frames()

        self._diagnostics.extend(list(scanner.diagnostics))
        root = self._frames.root
        end_token = self._tokens[-1]
        location = SourceLocation(
            lineno=1,
            col_offset=1,
            offset=0,
            end_offset=len(self._source),
            end_lineno=end_token.lineno,
            end_col_offset=end_token.col,
            source_file=self._source_file,
        )
        logger.debug("built %d top-level nodes", len(root.children))
        return Document(
            location=location,
            children=tuple(root.children),
            diagnostics=self._diagnostics.sorted(),
            source=self._source,
        )

    def _parse_node(self) -> None:
        """Dispatch on the current token."""
        token = self._current
        assert token is not None
        token_type = token.type

        if token_type == TokenType.TEXT:
            self._advance()
            self._append(Text(location=token.location, content=token.value))
        elif token_type == TokenType.DIRECTIVE_NAME:
            self._parse_directive()
        elif token_type == TokenType.ECHO_OPEN:
            self._append(self._parse_echo())
        elif token_type == TokenType.COMMENT_OPEN:
            self._append(self._parse_comment())
        elif token_type == TokenType.TAG_OPEN:
            self._parse_start_tag()
        elif token_type == TokenType.END_TAG:
            self._parse_end_tag()
        elif token_type in _OPAQUE_TOKENS:
            self._advance()
            self._append(
                Opaque(location=token.location, kind=_OPAQUE_TOKENS[token_type], content=token.value)
            )
        else:
            # stray token outside its construct; keep its text
            self._advance()
            self._append(Text(location=token.location, content=token.value))

    def _append(self, node: Node) -> None:
        self._frames.top.append(node)

    def _parse_echo(self) -> Echo:
        """Parse ECHO_OPEN ECHO_CONTENT ECHO_CLOSE."""
        open_token = self._current
        assert open_token is not None
        self._advance()
        content = self._take(TokenType.ECHO_CONTENT)
        close = self._take(TokenType.ECHO_CLOSE) or content or open_token
        return Echo(
            location=open_token.location.span_to(close.location),
            expression=content.value if content is not None else "",
            raw=open_token.subkind == "raw",
        )

    def _parse_comment(self) -> Comment:
        """Parse COMMENT_OPEN COMMENT_CONTENT COMMENT_CLOSE into one opaque node."""
        open_token = self._current
        assert open_token is not None
        self._advance()
        content = self._take(TokenType.COMMENT_CONTENT)
        close = self._take(TokenType.COMMENT_CLOSE) or content or open_token
        location = open_token.location.span_to(close.location)
        return Comment(location=location, content=location.slice(self._source))
